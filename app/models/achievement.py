"""Achievement catalog model"""

from sqlalchemy import Column, Integer, String, DateTime
from datetime import datetime
from app.core.database import Base


class Achievement(Base):
    __tablename__ = "achievements"

    id = Column(Integer, primary_key=True, index=True)
    code = Column(String, unique=True, nullable=False, index=True)
    name = Column(String, nullable=False)
    description = Column(String, nullable=False)
    icon = Column(String, nullable=False)

    # "tasks_completed" | "total_xp" | "streak_days" | "perfect_days"
    requirement_type = Column(String, nullable=False)
    requirement_value = Column(Integer, nullable=False)

    xp_reward = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, default=datetime.utcnow)
