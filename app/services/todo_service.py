import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session, joinedload

from app.database import commit_session
from app.models.todo import Todo
from app.models.user import User
from app.utils.exceptions import AssigneeNotFound, EmptyText, NotFound
from app.utils.permissions import AccessControl

logger = logging.getLogger(__name__)


class TodoService:
    """Todo CRUD, always scoped by the acting user's visibility"""

    @staticmethod
    def _resolve_assignee(db: Session, username: str) -> User:
        assignee = db.query(User).filter(User.username == username.strip()).first()
        if not assignee:
            raise AssigneeNotFound(f"User '{username}' not found")
        return assignee

    @staticmethod
    def _get_todo(db: Session, todo_id: int) -> Todo:
        todo = db.query(Todo).filter(Todo.id == todo_id).first()
        if not todo:
            raise NotFound("Todo not found")
        return todo

    @staticmethod
    def list_todos(db: Session, actor: User) -> List[Todo]:
        """Todos created by or assigned to anyone the actor can see, newest first"""
        query = db.query(Todo).options(
            joinedload(Todo.creator),
            joinedload(Todo.assignee)
        )
        access = AccessControl(db, actor)
        if not access.is_super_admin:
            visible_ids = access.visible_user_ids()
            query = query.filter(
                or_(Todo.created_by.in_(list(visible_ids)), Todo.assigned_to.in_(list(visible_ids)))
            )
        return query.order_by(Todo.id.desc()).all()

    @staticmethod
    def get_visible_todo(db: Session, actor: User, todo_id: int) -> Todo:
        todo = TodoService._get_todo(db, todo_id)
        if not AccessControl(db, actor).can_see_todo(todo):
            raise NotFound("Todo not found")
        return todo

    @staticmethod
    def create_todo(db: Session, actor: User, text: str, assigned_to: Optional[str] = None) -> Todo:
        text = (text or "").strip()
        if not text:
            raise EmptyText()

        assignee_id = None
        if assigned_to is not None and assigned_to.strip():
            assignee_id = TodoService._resolve_assignee(db, assigned_to).id

        AccessControl(db, actor).ensure_can_create_todo(assignee_id)

        todo = Todo(
            text=text,
            created_by=actor.id,
            assigned_to=assignee_id,
            created_at=datetime.utcnow(),
        )
        db.add(todo)
        commit_session(db, "create todo")
        db.refresh(todo)
        logger.info(f"User {actor.id} created todo {todo.id}")
        return todo

    @staticmethod
    def set_completed(db: Session, actor: User, todo_id: int, completed: bool) -> Todo:
        """Flip completion; completed_at is set or cleared in the same write"""
        todo = TodoService._get_todo(db, todo_id)
        AccessControl(db, actor).ensure_can_complete(todo)

        # completed_at only moves on a real transition
        if completed and not todo.completed:
            todo.completed_at = datetime.utcnow()
        elif not completed and todo.completed:
            todo.completed_at = None
        todo.completed = completed
        commit_session(db, "update todo")
        db.refresh(todo)
        return todo

    @staticmethod
    def reassign(db: Session, actor: User, todo_id: int, assignee_username: str) -> Todo:
        todo = TodoService._get_todo(db, todo_id)
        access = AccessControl(db, actor)
        access.ensure_reassign_role()
        assignee = TodoService._resolve_assignee(db, assignee_username)
        access.ensure_can_reassign(todo, assignee.id)

        todo.assigned_to = assignee.id
        commit_session(db, "reassign todo")
        db.refresh(todo)
        logger.info(f"User {actor.id} reassigned todo {todo.id} to user {assignee.id}")
        return todo

    @staticmethod
    def delete_todo(db: Session, actor: User, todo_id: int) -> None:
        todo = TodoService._get_todo(db, todo_id)
        AccessControl(db, actor).ensure_can_delete_todo(todo)
        db.delete(todo)
        commit_session(db, "delete todo")
        logger.info(f"User {actor.id} deleted todo {todo_id}")
