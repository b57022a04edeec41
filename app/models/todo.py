from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Boolean
from sqlalchemy.orm import relationship
from app.database import Base
from datetime import datetime

class Todo(Base):
    __tablename__ = "todos"

    id = Column(Integer, primary_key=True, index=True)
    text = Column(String(500), nullable=False)
    completed = Column(Boolean, default=False, nullable=False)

    # Relationships
    created_by = Column(Integer, ForeignKey("users.id"), nullable=False)
    assigned_to = Column(Integer, ForeignKey("users.id"), nullable=True)

    # System dates
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    completed_at = Column(DateTime, nullable=True)

    # Relationships
    creator = relationship("User", foreign_keys=[created_by], back_populates="created_todos")
    assignee = relationship("User", foreign_keys=[assigned_to], back_populates="assigned_todos")

    @property
    def created_by_name(self):
        return self.creator.username if self.creator else None

    @property
    def assigned_to_name(self):
        return self.assignee.username if self.assignee else None
