"""
Achievement catalog, seeding and unlock evaluation
"""

import logging
from typing import List

from sqlalchemy.orm import Session

from app.models.achievement import Achievement
from app.models.progress import UserProgress

logger = logging.getLogger(__name__)

# ============ CATALOG ============

ACHIEVEMENT_CATALOG = [
    {
        "code": "first_steps",
        "name": "First Steps",
        "description": "Complete your first task",
        "icon": "🌱",
        "requirement_type": "tasks_completed",
        "requirement_value": 1,
        "xp_reward": 50
    },
    {
        "code": "getting_started",
        "name": "Getting Started",
        "description": "Complete 10 tasks",
        "icon": "🚀",
        "requirement_type": "tasks_completed",
        "requirement_value": 10,
        "xp_reward": 100
    },
    {
        "code": "task_master",
        "name": "Task Master",
        "description": "Complete 100 tasks",
        "icon": "🏆",
        "requirement_type": "tasks_completed",
        "requirement_value": 100,
        "xp_reward": 500
    },
    {
        "code": "streak_starter",
        "name": "Streak Starter",
        "description": "Maintain a 3-day streak",
        "icon": "🔥",
        "requirement_type": "streak_days",
        "requirement_value": 3,
        "xp_reward": 75
    },
    {
        "code": "consistency_king",
        "name": "Consistency King",
        "description": "Maintain a 7-day streak",
        "icon": "👑",
        "requirement_type": "streak_days",
        "requirement_value": 7,
        "xp_reward": 200
    },
    {
        "code": "xp_hunter",
        "name": "XP Hunter",
        "description": "Earn 1000 XP",
        "icon": "⚡",
        "requirement_type": "total_xp",
        "requirement_value": 1000,
        "xp_reward": 100
    }
]

# requirement type -> key of the stats dict passed to evaluate_achievements
REQUIREMENT_STATS = {
    "tasks_completed": "tasks_completed",
    "total_xp": "total_xp",
    "streak_days": "longest_streak",
    "perfect_days": "perfect_days"
}


# ============ SEEDING ============

def seed_achievements(db: Session, commit: bool = True) -> int:
    """
    Insert the catalog if the table is empty.

    Idempotent: returns the number of rows inserted, 0 when already seeded.
    """
    if db.query(Achievement).first() is not None:
        return 0

    for definition in ACHIEVEMENT_CATALOG:
        db.add(Achievement(**definition))

    if commit:
        db.commit()
    else:
        db.flush()

    logger.info(f"Seeded {len(ACHIEVEMENT_CATALOG)} achievements")
    return len(ACHIEVEMENT_CATALOG)


def get_achievements(db: Session) -> List[Achievement]:
    achievements = db.query(Achievement).order_by(Achievement.id).all()
    if not achievements:
        # lazy bootstrap; the caller owns the transaction
        seed_achievements(db, commit=False)
        achievements = db.query(Achievement).order_by(Achievement.id).all()
    return achievements


# ============ EVALUATION ============

def evaluate_achievements(db: Session, progress: UserProgress, stats: dict) -> List[str]:
    """
    Unlock every achievement whose threshold is reached.

    Already unlocked achievements are skipped, so the unlocked list only
    ever grows. Newly unlocked codes are appended in one update and returned.
    xp_reward is informative only and is not added to the user's XP.
    """
    unlocked = set(progress.unlocked_achievements or [])
    new_codes = []

    for achievement in get_achievements(db):
        if achievement.code in unlocked:
            continue

        stat_key = REQUIREMENT_STATS.get(achievement.requirement_type)
        value = stats.get(stat_key) if stat_key else None

        if value is not None and value >= achievement.requirement_value:
            new_codes.append(achievement.code)

    if new_codes:
        # new list so the JSON column is flagged dirty
        progress.unlocked_achievements = list(progress.unlocked_achievements or []) + new_codes
        logger.info(f"User {progress.user_id} unlocked achievements: {', '.join(new_codes)}")

    return new_codes


def get_achievement_statuses(db: Session, progress: UserProgress) -> List[dict]:
    """Catalog entries with an `unlocked` flag for one user"""
    unlocked = set(progress.unlocked_achievements or [])
    return [
        {
            "code": a.code,
            "name": a.name,
            "description": a.description,
            "icon": a.icon,
            "requirement_type": a.requirement_type,
            "requirement_value": a.requirement_value,
            "xp_reward": a.xp_reward,
            "unlocked": a.code in unlocked
        }
        for a in get_achievements(db)
    ]
