"""Task model"""

from sqlalchemy import Column, Integer, String, DateTime, Boolean, ForeignKey, JSON
from datetime import datetime
from app.core.database import Base


class Task(Base):
    __tablename__ = "tasks"
    
    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    parent_task_id = Column(Integer, ForeignKey("tasks.id"), nullable=True, index=True)
    
    title = Column(String, nullable=False)
    description = Column(String, nullable=True)
    status = Column(String, nullable=False, default="pending", index=True)

    # Scoring, set by the AI at creation and never editable by the user
    priority = Column(String, nullable=False, default="medium")
    difficulty_level = Column(Integer, nullable=False, default=1)
    xp_value = Column(Integer, nullable=False, default=0)

    # Scheduling
    scheduled_for = Column(DateTime, nullable=True, index=True)
    duration = Column(Integer, nullable=True)  # minutes
    recurrence = Column(JSON, nullable=True)

    # AI date suggestion, redeemable once
    suggested_date = Column(DateTime, nullable=True)
    xp_boost = Column(Integer, nullable=True)
    suggestion_reason = Column(String, nullable=True)
    used_suggested_date = Column(Boolean, nullable=False, default=False)

    ai_generated = Column(Boolean, nullable=False, default=False)
    ai_context = Column(String, nullable=True)
    
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
