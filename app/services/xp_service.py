"""
XP, level and character stage formulas.

Pure functions, no database access. Whenever total XP changes, level and
stage are recomputed from it together.
"""

import math

# ============ TABLES ============

BASE_XP = {
    "low": 10,
    "medium": 25,
    "high": 50,
    "urgent": 75
}

SUBTASK_BONUS = 5

# (stage, required XP), ascending
CHARACTER_STAGES = [
    (1, 0),
    (2, 100),
    (3, 500),
    (4, 2000),
    (5, 10000)
]

STAGE_NAMES = {
    1: "Seed",
    2: "Sprout",
    3: "Sapling",
    4: "Tree",
    5: "Ancient Tree"
}


# ============ FORMULAS ============

def round_half_up(value: float) -> int:
    """Round .5 away from zero for positives (Python's round() is banker's)."""
    return int(math.floor(value + 0.5))


def compute_xp(priority: str, difficulty_level: int, subtask_count: int = 0) -> int:
    """
    XP for completing a task.

    base(priority) * difficulty * 0.5 + 5 per subtask, rounded.
    An unknown priority counts as "low".
    """
    base = BASE_XP.get(priority, BASE_XP["low"])
    return round_half_up(base * (difficulty_level * 0.5) + subtask_count * SUBTASK_BONUS)


def compute_level(total_xp: int) -> int:
    """Level = floor(sqrt(XP / 100)) + 1, negative XP counts as 0."""
    return math.isqrt(int(max(total_xp, 0)) // 100) + 1


def xp_for_level(level: int) -> int:
    """Minimum total XP for a level (inverse of compute_level)."""
    if level <= 1:
        return 0
    return (level - 1) ** 2 * 100


def compute_character_stage(total_xp: int) -> int:
    """Highest stage whose threshold is <= total_xp."""
    for stage, required in reversed(CHARACTER_STAGES):
        if total_xp >= required:
            return stage
    return 1


def get_stage_name(stage: int) -> str:
    return STAGE_NAMES.get(stage, STAGE_NAMES[1])
