"""User progress model (one row per user)"""

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, JSON
from sqlalchemy.orm import relationship
from datetime import datetime
from app.core.database import Base


def default_customization():
    return {"color": "#10b981", "accessories": []}


class UserProgress(Base):
    __tablename__ = "user_progress"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), unique=True, nullable=False, index=True)

    # level and character_stage are always recomputed from total_xp
    total_xp = Column(Integer, nullable=False, default=0)
    current_level = Column(Integer, nullable=False, default=1)
    current_streak = Column(Integer, nullable=False, default=0)
    longest_streak = Column(Integer, nullable=False, default=0)
    last_task_completed_date = Column(DateTime, nullable=True)

    character_type = Column(String, nullable=False, default="plant")
    character_stage = Column(Integer, nullable=False, default=1)
    character_customization = Column(JSON, default=default_customization)

    unlocked_achievements = Column(JSON, nullable=False, default=list)  # achievement codes, append-only

    tasks_completed = Column(Integer, nullable=False, default=0)  # lifetime, never decremented
    perfect_days = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    user = relationship("User", back_populates="progress")
