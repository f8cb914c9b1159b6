"""
Tests for the gamification system: XP ledger, streaks, achievements
"""

import pytest
from datetime import datetime, date, timedelta

from app.core.exceptions import ProgressNotFoundError
from app.models.achievement import Achievement
from app.models.progress import UserProgress
from app.services.achievement_service import (
    ACHIEVEMENT_CATALOG,
    seed_achievements,
    get_achievements,
    evaluate_achievements
)
from app.services.gamification_service import (
    award_xp,
    update_streak,
    get_user_progress,
    build_progress_view
)


def reload_progress(db, user_id):
    db.expire_all()
    return get_user_progress(db, user_id)


# ============ TESTS STREAK ============

def test_streak_first_completion():
    progress = UserProgress(current_streak=0, longest_streak=0)
    assert update_streak(progress, date(2024, 5, 10)) == 1
    assert progress.longest_streak == 1


def test_streak_same_day_unchanged():
    progress = UserProgress(
        current_streak=4,
        longest_streak=4,
        last_task_completed_date=datetime(2024, 5, 10, 8, 0)
    )
    assert update_streak(progress, date(2024, 5, 10)) == 4


def test_streak_yesterday_increments():
    progress = UserProgress(
        current_streak=4,
        longest_streak=6,
        last_task_completed_date=datetime(2024, 5, 9, 23, 30)
    )
    assert update_streak(progress, date(2024, 5, 10)) == 5
    assert progress.longest_streak == 6


def test_streak_gap_resets():
    progress = UserProgress(
        current_streak=9,
        longest_streak=9,
        last_task_completed_date=datetime(2024, 5, 7, 12, 0)
    )
    assert update_streak(progress, date(2024, 5, 10)) == 1
    assert progress.longest_streak == 9


# ============ TESTS AWARD XP ============

def test_award_xp_completion(db, user):
    result = award_xp(db, user.id, 75, task_id=1)

    assert result.xp_awarded == 75
    assert result.new_total_xp == 75
    assert result.new_level == 1
    assert result.level_up is False
    assert result.new_streak == 1

    progress = reload_progress(db, user.id)
    assert progress.total_xp == 75
    assert progress.tasks_completed == 1
    assert progress.last_task_completed_date is not None


def test_award_xp_level_up_and_stage_up(db, user):
    result = award_xp(db, user.id, 150)
    assert result.new_level == 2
    assert result.level_up is True
    assert result.new_character_stage == 2
    assert result.stage_up is True


def test_award_xp_no_level_up_when_level_unchanged(db, user):
    award_xp(db, user.id, 150)
    result = award_xp(db, user.id, 10)
    assert result.new_level == 2
    assert result.level_up is False
    assert result.stage_up is False


def test_deduction_keeps_streak_and_counter(db, user):
    award_xp(db, user.id, 50)
    result = award_xp(db, user.id, -50)

    assert result.new_total_xp == 0
    assert result.new_streak == 1

    progress = reload_progress(db, user.id)
    assert progress.tasks_completed == 1
    assert progress.current_streak == 1


def test_deduction_can_go_negative(db, user):
    result = award_xp(db, user.id, -30)
    assert result.new_total_xp == -30
    assert result.new_level == 1
    assert result.new_character_stage == 1


def test_bonus_is_not_a_completion(db, user):
    result = award_xp(db, user.id, 20, completion=False)

    assert result.new_total_xp == 20
    assert result.new_streak == 0

    progress = reload_progress(db, user.id)
    assert progress.tasks_completed == 0
    assert progress.last_task_completed_date is None


def test_consecutive_days_build_streak(db, user):
    day_one = datetime(2024, 5, 8, 9, 0)
    award_xp(db, user.id, 10, now=day_one)
    award_xp(db, user.id, 10, now=day_one + timedelta(days=1))
    result = award_xp(db, user.id, 10, now=day_one + timedelta(days=2))

    assert result.new_streak == 3
    assert "streak_starter" in result.new_achievements


def test_two_completions_same_day(db, user):
    now = datetime(2024, 5, 8, 9, 0)
    award_xp(db, user.id, 10, now=now)
    result = award_xp(db, user.id, 10, now=now + timedelta(hours=3))
    assert result.new_streak == 1


def test_award_xp_unknown_user(db):
    with pytest.raises(ProgressNotFoundError):
        award_xp(db, 9999, 10)


def test_award_xp_without_commit_leaves_transaction_open(db, user):
    award_xp(db, user.id, 40, commit=False)
    db.rollback()
    assert reload_progress(db, user.id).total_xp == 0


# ============ TESTS ACHIEVEMENTS ============

def test_seed_achievements_is_idempotent(db):
    assert seed_achievements(db) == len(ACHIEVEMENT_CATALOG)
    assert seed_achievements(db) == 0
    assert db.query(Achievement).count() == len(ACHIEVEMENT_CATALOG)


def test_get_achievements_seeds_lazily(db):
    achievements = get_achievements(db)
    assert [a.code for a in achievements] == [d["code"] for d in ACHIEVEMENT_CATALOG]


def test_first_completion_unlocks_first_steps(db, user):
    result = award_xp(db, user.id, 10)
    assert result.new_achievements == ["first_steps"]

    progress = reload_progress(db, user.id)
    assert progress.unlocked_achievements == ["first_steps"]


def test_achievement_unlocked_once(db, user):
    award_xp(db, user.id, 10)
    result = award_xp(db, user.id, 10)
    assert result.new_achievements == []
    assert reload_progress(db, user.id).unlocked_achievements == ["first_steps"]


def test_achievements_survive_xp_loss(db, user):
    result = award_xp(db, user.id, 1200)
    assert "xp_hunter" in result.new_achievements

    award_xp(db, user.id, -1200)
    progress = reload_progress(db, user.id)
    assert "xp_hunter" in progress.unlocked_achievements


def test_achievement_reward_not_added_to_xp(db, user):
    result = award_xp(db, user.id, 10)
    assert "first_steps" in result.new_achievements
    assert result.new_total_xp == 10


def test_evaluate_achievements_thresholds(db, user):
    progress = get_user_progress(db, user.id)
    new_codes = evaluate_achievements(db, progress, {
        "tasks_completed": 10,
        "total_xp": 999,
        "longest_streak": 7,
        "perfect_days": 0
    })
    assert set(new_codes) == {"first_steps", "getting_started", "streak_starter", "consistency_king"}


# ============ TESTS ENDPOINTS ============

def test_progress_view(db, user):
    award_xp(db, user.id, 150)
    view = build_progress_view(reload_progress(db, user.id))
    assert view["current_level"] == 2
    assert view["next_level_xp"] == 400
    assert view["xp_to_next_level"] == 250
    assert view["stage_name"] == "Sprout"


def test_get_progress_endpoint(client, db, user, auth_headers):
    award_xp(db, user.id, 120)

    response = client.get("/progress", headers=auth_headers)
    assert response.status_code == 200
    data = response.json()
    assert data["total_xp"] == 120
    assert data["current_level"] == 2
    assert data["tasks_completed"] == 1
    assert data["unlocked_achievements"] == ["first_steps"]


def test_list_achievements_endpoint(client):
    response = client.get("/achievements")
    assert response.status_code == 200
    codes = [a["code"] for a in response.json()]
    assert codes == [d["code"] for d in ACHIEVEMENT_CATALOG]


def test_achievement_statuses_endpoint(client, db, user, auth_headers):
    award_xp(db, user.id, 10)

    response = client.get("/progress/achievements", headers=auth_headers)
    assert response.status_code == 200
    statuses = {a["code"]: a["unlocked"] for a in response.json()}
    assert statuses["first_steps"] is True
    assert statuses["task_master"] is False
