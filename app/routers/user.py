# app/routers/user.py
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List

from app.database import get_db
from app.models import user as user_model
from app.schemas.hierarchy import ManagerEdgeCreate, OperationResult
from app.schemas.user import (
    ManagerRef,
    PasswordReset,
    UserBasic,
    UserCreate,
    UserCreated,
    UserDetail,
    UserOut,
    UserUpdate,
)
from app.services.user_service import UNSET, UserService
from app.utils.auth import get_current_user

router = APIRouter()

@router.get("/", response_model=List[UserBasic])
def get_visible_users(
    db: Session = Depends(get_db),
    current_user: user_model.User = Depends(get_current_user)
):
    """Users the caller may assign todos to: everyone, their team, or just themselves"""
    return UserService.list_visible_users(db, current_user)

@router.get("/all", response_model=List[UserDetail])
def get_all_users(
    db: Session = Depends(get_db),
    current_user: user_model.User = Depends(get_current_user)
):
    """Full user list with managers - admins only, super admins hidden from admins"""
    return UserService.list_users_detailed(db, current_user)

@router.get("/managers", response_model=List[ManagerRef])
def get_manager_candidates(
    db: Session = Depends(get_db),
    current_user: user_model.User = Depends(get_current_user)
):
    """Users eligible to be picked as a manager"""
    return UserService.list_manager_candidates(db)

@router.get("/{user_id}", response_model=UserOut)
def get_user(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: user_model.User = Depends(get_current_user)
):
    return UserService.get_visible_user(db, current_user, user_id)

@router.post("/", response_model=UserCreated, status_code=status.HTTP_201_CREATED)
def create_user(
    user: UserCreate,
    db: Session = Depends(get_db),
    current_user: user_model.User = Depends(get_current_user)
):
    """Create a new user - Only admins, and only super admins may create super admins"""
    db_user = UserService.create_user(
        db,
        current_user,
        username=user.username,
        login_name=user.login_name,
        password=user.password,
        role=user.role,
        manager_id=user.manager_id,
    )
    return {"success": True, "id": db_user.id}

@router.put("/{user_id}", response_model=UserOut)
def update_user(
    user_id: int,
    user_update: UserUpdate,
    db: Session = Depends(get_db),
    current_user: user_model.User = Depends(get_current_user)
):
    sent = user_update.model_fields_set
    return UserService.update_user(
        db,
        current_user,
        user_id,
        role=user_update.role,
        username=user_update.username if "username" in sent else UNSET,
        manager_id=user_update.manager_id if "manager_id" in sent else UNSET,
    )

@router.delete("/{user_id}", response_model=OperationResult)
def delete_user(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: user_model.User = Depends(get_current_user)
):
    """Delete a user and their todos - refused while anyone still reports to them"""
    UserService.delete_user(db, current_user, user_id)
    return {"success": True, "message": "User deleted"}

@router.put("/{user_id}/password", response_model=OperationResult)
def reset_password(
    user_id: int,
    payload: PasswordReset,
    db: Session = Depends(get_db),
    current_user: user_model.User = Depends(get_current_user)
):
    UserService.reset_user_password(db, current_user, user_id, payload.password)
    return {"success": True, "message": "Password reset"}

@router.get("/{user_id}/managers", response_model=List[ManagerRef])
def get_user_managers(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: user_model.User = Depends(get_current_user)
):
    return UserService.get_user_managers(db, current_user, user_id)

@router.post("/{user_id}/managers", response_model=OperationResult, status_code=status.HTTP_201_CREATED)
def add_user_manager(
    user_id: int,
    payload: ManagerEdgeCreate,
    db: Session = Depends(get_db),
    current_user: user_model.User = Depends(get_current_user)
):
    UserService.add_manager(db, current_user, user_id, payload.manager_id)
    return {"success": True, "message": "Manager added"}

@router.delete("/{user_id}/managers/{manager_id}", response_model=OperationResult)
def remove_user_manager(
    user_id: int,
    manager_id: int,
    db: Session = Depends(get_db),
    current_user: user_model.User = Depends(get_current_user)
):
    UserService.remove_manager(db, current_user, user_id, manager_id)
    return {"success": True, "message": "Manager removed"}
