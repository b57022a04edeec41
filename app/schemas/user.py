from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime

from app.config.security import SecurityConfig
from app.models.user import UserRole

NAME_MAX = SecurityConfig.LIMITS['name_max_length']
PASSWORD_MAX = SecurityConfig.LIMITS['password_max_length']

class UserCreate(BaseModel):
    username: str = Field(..., min_length=1, max_length=NAME_MAX)
    login_name: str = Field(..., min_length=1, max_length=NAME_MAX)
    password: str = Field(..., max_length=PASSWORD_MAX)
    role: UserRole = UserRole.USER
    manager_id: Optional[int] = None

class UserLogin(BaseModel):
    username: str = Field(..., min_length=1, max_length=NAME_MAX)
    password: str = Field(..., min_length=1, max_length=PASSWORD_MAX)

class UserUpdate(BaseModel):
    username: Optional[str] = Field(None, max_length=NAME_MAX)
    role: UserRole
    # Sending null clears the primary manager, omitting it leaves it unchanged
    manager_id: Optional[int] = None

class PasswordChange(BaseModel):
    old_password: str = Field(..., min_length=1, max_length=PASSWORD_MAX)
    new_password: str = Field(..., max_length=PASSWORD_MAX)

class PasswordReset(BaseModel):
    password: str = Field(..., max_length=PASSWORD_MAX)

class UserBasic(BaseModel):
    id: int
    username: str
    role: str

    model_config = {
        "from_attributes": True
    }

class UserOut(BaseModel):
    id: int
    username: str
    login_name: Optional[str] = None
    role: str
    manager_id: Optional[int] = None
    created_at: Optional[datetime] = None

    model_config = {
        "from_attributes": True
    }

class ManagerRef(BaseModel):
    id: int
    username: str
    role: str

    model_config = {
        "from_attributes": True
    }

class UserDetail(UserOut):
    manager_name: Optional[str] = None
    managers: List[ManagerRef] = []

class UserCreated(BaseModel):
    success: bool = True
    id: int
