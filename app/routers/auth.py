from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.user import User
from app.schemas.hierarchy import OperationResult
from app.schemas.tokens import Token
from app.schemas.user import PasswordChange, UserLogin, UserOut
from app.services.user_service import UserService
from app.utils.auth import get_current_user
from app.utils.security import create_access_token

router = APIRouter()

@router.post("/login", response_model=Token)
def login(user: UserLogin, db: Session = Depends(get_db)):
    db_user = UserService.authenticate(db, user.username, user.password)

    token = create_access_token(data={"sub": str(db_user.id), "role": db_user.role})
    return {
        "access_token": token,
        "token_type": "bearer",
        "user": db_user,
    }

@router.post("/logout", response_model=OperationResult)
def logout(current_user: User = Depends(get_current_user)):
    """Tokens are stateless; clients drop theirs"""
    return {"success": True, "message": "Logged out"}

@router.get("/me", response_model=UserOut)
def get_current_user_info(current_user: User = Depends(get_current_user)):
    """Get current user information"""
    return current_user

@router.put("/change-password", response_model=OperationResult)
def change_password(
    payload: PasswordChange,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    UserService.change_own_password(db, current_user, payload.old_password, payload.new_password)
    return {"success": True, "message": "Password changed"}
