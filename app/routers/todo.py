# app/routers/todo.py
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List

from app.database import get_db
from app.models.user import User
from app.schemas.hierarchy import OperationResult
from app.schemas.todo import TodoCompletion, TodoCreate, TodoOut, TodoReassign
from app.services.todo_service import TodoService
from app.utils.auth import get_current_user

router = APIRouter(prefix="/todos", tags=["Todos"])

@router.get("/", response_model=List[TodoOut])
def get_todos(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Get todos with role-based visibility

    - super_admin: every todo
    - admin: todos created by or assigned to self or any subordinate
    - user: todos created by or assigned to self
    """
    return TodoService.list_todos(db, current_user)

@router.get("/{todo_id}", response_model=TodoOut)
def get_todo(
    todo_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return TodoService.get_visible_todo(db, current_user, todo_id)

@router.post("/", response_model=TodoOut, status_code=status.HTTP_201_CREATED)
def create_todo(
    todo: TodoCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return TodoService.create_todo(db, current_user, todo.text, todo.assigned_to)

@router.put("/{todo_id}", response_model=TodoOut)
def update_todo(
    todo_id: int,
    payload: TodoCompletion,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return TodoService.set_completed(db, current_user, todo_id, payload.completed)

@router.put("/{todo_id}/reassign", response_model=TodoOut)
def reassign_todo(
    todo_id: int,
    payload: TodoReassign,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return TodoService.reassign(db, current_user, todo_id, payload.assigned_to)

@router.delete("/{todo_id}", response_model=OperationResult)
def delete_todo(
    todo_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    TodoService.delete_todo(db, current_user, todo_id)
    return {"success": True, "message": "Todo deleted"}
