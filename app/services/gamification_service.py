"""
Gamification service - XP ledger, levels, streaks

Single mutating entry point: award_xp. Task completion, completion
reversal and date-suggestion bonuses all go through it.
"""

import logging
from datetime import datetime, date, timedelta
from typing import Optional

from sqlalchemy.orm import Session

from app.core.exceptions import ProgressNotFoundError
from app.core.locks import user_lock
from app.models.progress import UserProgress, default_customization
from app.schemas.progress import XPResult
from app.services.achievement_service import evaluate_achievements
from app.services.xp_service import (
    compute_level,
    compute_character_stage,
    get_stage_name,
    xp_for_level
)

logger = logging.getLogger(__name__)


def get_today() -> date:
    """Today's date (server calendar)"""
    return date.today()


# ============ PROGRESS RECORD ============

def create_user_progress(db: Session, user_id: int) -> UserProgress:
    """
    Build the initial progress row for a new user.

    Added to the session only: signup commits it together with the user.
    """
    progress = UserProgress(
        user_id=user_id,
        total_xp=0,
        current_level=compute_level(0),
        current_streak=0,
        longest_streak=0,
        character_type="plant",
        character_stage=compute_character_stage(0),
        character_customization=default_customization(),
        unlocked_achievements=[],
        tasks_completed=0,
        perfect_days=0
    )
    db.add(progress)
    return progress


def get_user_progress(db: Session, user_id: int, for_update: bool = False) -> UserProgress:
    query = db.query(UserProgress).filter(UserProgress.user_id == user_id)
    if for_update:
        # row lock on PostgreSQL, fresh attributes even if already in the session
        query = query.with_for_update().populate_existing()

    progress = query.first()
    if not progress:
        raise ProgressNotFoundError()
    return progress


# ============ STREAK ============

def update_streak(progress: UserProgress, today: date = None) -> int:
    """
    Advance the streak for a completion happening on `today`.

    - last completion today      -> unchanged
    - last completion yesterday  -> streak + 1
    - older or never             -> streak = 1
    longest_streak follows the maximum.
    """
    if today is None:
        today = get_today()

    last = progress.last_task_completed_date.date() if progress.last_task_completed_date else None

    if last == today:
        pass
    elif last == today - timedelta(days=1):
        progress.current_streak = (progress.current_streak or 0) + 1
    else:
        progress.current_streak = 1

    progress.longest_streak = max(progress.longest_streak or 0, progress.current_streak)
    return progress.current_streak


# ============ XP LEDGER ============

def award_xp(
    db: Session,
    user_id: int,
    delta: int,
    task_id: Optional[int] = None,
    completion: Optional[bool] = None,
    now: datetime = None,
    commit: bool = True
) -> XPResult:
    """
    Apply an XP delta to a user's progress and return the summary.

    delta may be negative (a completed task moved back). Level and stage are
    recomputed from the new total. Streak, tasks_completed and the last
    completion date only move when the event is a new completion, which is
    the default for positive deltas; bonuses pass completion=False.

    With commit=False the caller owns the transaction and must hold
    user_lock(user_id) until it commits.
    """
    if completion is None:
        completion = delta > 0
    if delta < 0:
        completion = False
    if now is None:
        now = datetime.now()

    with user_lock(user_id):
        try:
            # pending changes must hit the database before the row is re-read
            db.flush()
            progress = get_user_progress(db, user_id, for_update=True)

            previous_level = progress.current_level
            previous_stage = progress.character_stage

            new_total_xp = progress.total_xp + delta
            progress.total_xp = new_total_xp
            progress.current_level = compute_level(new_total_xp)
            progress.character_stage = compute_character_stage(new_total_xp)

            if completion:
                update_streak(progress, now.date())
                progress.tasks_completed = (progress.tasks_completed or 0) + 1
                progress.last_task_completed_date = now

            progress.updated_at = datetime.utcnow()

            new_achievements = evaluate_achievements(db, progress, {
                "tasks_completed": progress.tasks_completed,
                "total_xp": progress.total_xp,
                "longest_streak": progress.longest_streak,
                "perfect_days": progress.perfect_days
            })

            if commit:
                db.commit()
        except Exception:
            if commit:
                db.rollback()
            raise

        result = XPResult(
            xp_awarded=delta,
            new_total_xp=new_total_xp,
            new_level=progress.current_level,
            level_up=progress.current_level > previous_level,
            new_character_stage=progress.character_stage,
            stage_up=progress.character_stage > previous_stage,
            new_streak=progress.current_streak,
            new_achievements=new_achievements
        )

    logger.info(f"XP {delta:+d} for user {user_id} (task {task_id}), total {new_total_xp}")
    if result.level_up:
        logger.info(f"User {user_id} reached level {result.new_level}")
    if result.stage_up:
        logger.info(f"User {user_id} grew into stage {result.new_character_stage}")

    return result


# ============ VIEWS ============

def build_progress_view(progress: UserProgress) -> dict:
    """Progress plus derived display values"""
    next_level_xp = xp_for_level(progress.current_level + 1)
    return {
        "user_id": progress.user_id,
        "total_xp": progress.total_xp,
        "current_level": progress.current_level,
        "current_streak": progress.current_streak,
        "longest_streak": progress.longest_streak,
        "last_task_completed_date": progress.last_task_completed_date,
        "character_type": progress.character_type,
        "character_stage": progress.character_stage,
        "stage_name": get_stage_name(progress.character_stage),
        "character_customization": progress.character_customization,
        "unlocked_achievements": list(progress.unlocked_achievements or []),
        "tasks_completed": progress.tasks_completed,
        "perfect_days": progress.perfect_days,
        "next_level_xp": next_level_xp,
        "xp_to_next_level": max(next_level_xp - progress.total_xp, 0)
    }
