from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime

from app.config.security import SecurityConfig

NAME_MAX = SecurityConfig.LIMITS['name_max_length']
TEXT_MAX = SecurityConfig.LIMITS['todo_text_max_length']

class TodoCreate(BaseModel):
    text: str = Field(..., max_length=TEXT_MAX)
    assigned_to: Optional[str] = Field(None, max_length=NAME_MAX)  # assignee username

class TodoCompletion(BaseModel):
    completed: bool

class TodoReassign(BaseModel):
    assigned_to: str = Field(..., min_length=1, max_length=NAME_MAX)

class TodoOut(BaseModel):
    id: int
    text: str
    completed: bool
    created_by: int
    created_by_name: Optional[str] = None
    assigned_to: Optional[int] = None
    assigned_to_name: Optional[str] = None
    created_at: datetime
    completed_at: Optional[datetime] = None

    model_config = {
        "from_attributes": True
    }
