"""
Tests for the XP / level / stage formulas
"""

from app.services.xp_service import (
    compute_xp,
    compute_level,
    compute_character_stage,
    xp_for_level,
    get_stage_name,
    round_half_up
)


# ============ TESTS XP ============

def test_xp_medium_difficulty_4():
    """25 * 2.0 + 0"""
    assert compute_xp("medium", 4, 0) == 50


def test_xp_urgent_with_subtasks():
    """75 * 2.5 + 2 * 5 = 197.5 -> 198"""
    assert compute_xp("urgent", 5, 2) == 198


def test_xp_high_difficulty_3():
    assert compute_xp("high", 3) == 75


def test_xp_rounds_half_up():
    """12.5 rounds to 13, not to the even 12"""
    assert compute_xp("medium", 1) == 13
    assert round_half_up(2.5) == 3


def test_xp_base_values():
    assert compute_xp("low", 2) == 10
    assert compute_xp("medium", 2) == 25
    assert compute_xp("high", 2) == 50
    assert compute_xp("urgent", 2) == 75


def test_xp_unknown_priority_counts_as_low():
    assert compute_xp("critical", 2) == 10


def test_xp_subtask_bonus():
    assert compute_xp("low", 2, 3) - compute_xp("low", 2, 0) == 15


# ============ TESTS LEVEL ============

def test_level_values():
    assert compute_level(0) == 1
    assert compute_level(99) == 1
    assert compute_level(100) == 2
    assert compute_level(399) == 2
    assert compute_level(400) == 3
    assert compute_level(900) == 4


def test_level_negative_xp_is_level_1():
    assert compute_level(-50) == 1


def test_level_monotonic():
    levels = [compute_level(xp) for xp in range(-100, 20000, 7)]
    assert levels == sorted(levels)


def test_xp_for_level_is_inverse():
    for level in range(1, 30):
        threshold = xp_for_level(level)
        assert compute_level(threshold) == level
        if level > 1:
            assert compute_level(threshold - 1) == level - 1


# ============ TESTS STAGE ============

def test_stage_steps():
    assert compute_character_stage(0) == 1
    assert compute_character_stage(99) == 1
    assert compute_character_stage(100) == 2
    assert compute_character_stage(499) == 2
    assert compute_character_stage(500) == 3
    assert compute_character_stage(1999) == 3
    assert compute_character_stage(2000) == 4
    assert compute_character_stage(9999) == 4
    assert compute_character_stage(10000) == 5
    assert compute_character_stage(1000000) == 5


def test_stage_negative_xp():
    assert compute_character_stage(-10) == 1


def test_stage_names():
    assert get_stage_name(1) == "Seed"
    assert get_stage_name(5) == "Ancient Tree"
    assert get_stage_name(42) == "Seed"
