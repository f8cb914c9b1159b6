"""Schemas for progress, XP events and achievements."""

from pydantic import BaseModel, ConfigDict
from datetime import datetime
from typing import Optional, List


class XPResult(BaseModel):
    """Outcome of one XP event, returned to the caller of award_xp."""

    xp_awarded: int
    new_total_xp: int
    new_level: int
    level_up: bool
    new_character_stage: int
    stage_up: bool
    new_streak: int
    new_achievements: List[str] = []


class AchievementResponse(BaseModel):
    code: str
    name: str
    description: str
    icon: str
    requirement_type: str
    requirement_value: int
    xp_reward: int

    model_config = ConfigDict(from_attributes=True)


class AchievementStatus(AchievementResponse):
    unlocked: bool


class ProgressResponse(BaseModel):
    user_id: int
    total_xp: int
    current_level: int
    current_streak: int
    longest_streak: int
    last_task_completed_date: Optional[datetime]
    character_type: str
    character_stage: int
    stage_name: str
    character_customization: Optional[dict]
    unlocked_achievements: List[str]
    tasks_completed: int
    perfect_days: int
    next_level_xp: int
    xp_to_next_level: int
