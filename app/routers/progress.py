"""
Router for gamification state: progress, levels, achievements
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List

from app.core.database import get_db
from app.core.deps import get_current_user
from app.models.user import User
from app.schemas.progress import ProgressResponse, AchievementResponse, AchievementStatus
from app.services.achievement_service import get_achievements, get_achievement_statuses
from app.services.gamification_service import get_user_progress, build_progress_view

router = APIRouter(tags=["progress"])


@router.get("/progress", response_model=ProgressResponse)
def read_progress(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """XP, level, streak and character stage of the current user"""
    progress = get_user_progress(db, current_user.id)
    return build_progress_view(progress)


@router.get("/progress/achievements", response_model=List[AchievementStatus])
def read_achievement_statuses(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    progress = get_user_progress(db, current_user.id)
    statuses = get_achievement_statuses(db, progress)
    db.commit()  # keeps the catalog if it was seeded lazily
    return statuses


@router.get("/achievements", response_model=List[AchievementResponse])
def list_achievements(db: Session = Depends(get_db)):
    achievements = get_achievements(db)
    db.commit()
    return achievements
