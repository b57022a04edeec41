# app/models/user.py
import enum
from datetime import datetime

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Table
from sqlalchemy.orm import relationship
from app.database import Base


class UserRole(str, enum.Enum):
    SUPER_ADMIN = "super_admin"
    ADMIN = "admin"
    USER = "user"


# Supplementary many-to-many manager assignments
user_managers = Table(
    'user_managers',
    Base.metadata,
    Column('user_id', Integer, ForeignKey('users.id'), primary_key=True),
    Column('manager_id', Integer, ForeignKey('users.id'), primary_key=True),
    Column('created_at', DateTime, default=datetime.utcnow, nullable=False)
)


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(50), unique=True, index=True, nullable=False)
    # Older records have no login name and log in with their username
    login_name = Column(String(50), unique=True, index=True, nullable=True)
    hashed_password = Column(String, nullable=False)
    role = Column(String(20), nullable=False, default=UserRole.USER.value)
    manager_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    manager = relationship("User", remote_side=[id], foreign_keys=[manager_id])
    managers = relationship(
        "User",
        secondary=user_managers,
        primaryjoin=id == user_managers.c.user_id,
        secondaryjoin=id == user_managers.c.manager_id,
        viewonly=True,
    )

    created_todos = relationship("Todo", back_populates="creator", foreign_keys="Todo.created_by")
    assigned_todos = relationship("Todo", back_populates="assignee", foreign_keys="Todo.assigned_to")

    @property
    def manager_name(self):
        return self.manager.username if self.manager else None
