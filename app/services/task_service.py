"""Task service"""

import logging
from datetime import datetime
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session

from app.core.exceptions import (
    TaskNotFoundError,
    InvalidTaskUpdateError,
    TaskAlreadyCompletedError,
    SuggestionUnavailableError,
    SuggestionAlreadyUsedError
)
from app.core.locks import user_lock
from app.models.task import Task
from app.schemas.progress import XPResult
from app.services.gamification_service import award_xp
from app.services.xp_service import compute_xp

logger = logging.getLogger(__name__)

TASK_STATUSES = ("pending", "in_progress", "completed")

# priority and difficulty_level are deliberately absent
EDITABLE_FIELDS = ("title", "description", "status", "scheduled_for", "duration")


# ============ QUERIES ============

def get_task(db: Session, user_id: int, task_id: int) -> Task:
    task = db.query(Task).filter(
        Task.id == task_id,
        Task.user_id == user_id
    ).first()

    if not task:
        raise TaskNotFoundError()
    return task


def count_subtasks(db: Session, task_id: int) -> int:
    return db.query(Task).filter(Task.parent_task_id == task_id).count()


def get_subtasks(db: Session, user_id: int, task_id: int) -> List[Task]:
    get_task(db, user_id, task_id)
    return db.query(Task).filter(
        Task.parent_task_id == task_id
    ).order_by(Task.created_at).all()


def get_all_tasks(db: Session, user_id: int) -> List[Task]:
    """All tasks, scheduled ones first by date, then newest first."""
    tasks = db.query(Task).filter(Task.user_id == user_id).all()

    # two stable sorts: created_at desc breaks ties of the scheduled_for order
    tasks.sort(key=lambda t: t.created_at or datetime.min, reverse=True)
    tasks.sort(key=lambda t: (t.scheduled_for is None, t.scheduled_for or datetime.min))
    return tasks


def get_tasks_by_status(db: Session, user_id: int, status: str) -> List[Task]:
    return db.query(Task).filter(
        Task.user_id == user_id,
        Task.status == status
    ).all()


def get_scheduled_tasks(db: Session, user_id: int, start: datetime, end: datetime) -> List[Task]:
    return db.query(Task).filter(
        Task.user_id == user_id,
        Task.scheduled_for >= start,
        Task.scheduled_for <= end
    ).order_by(Task.scheduled_for).all()


def search_tasks(db: Session, user_id: int, term: str) -> List[Task]:
    term = term.lower()
    tasks = db.query(Task).filter(Task.user_id == user_id).all()
    return [
        t for t in tasks
        if term in t.title.lower() or (t.description and term in t.description.lower())
    ]


# ============ MUTATIONS ============

def create_task(
    db: Session,
    user_id: int,
    title: str,
    priority: str = "medium",
    difficulty_level: int = 1,
    description: Optional[str] = None,
    scheduled_for: Optional[datetime] = None,
    duration: Optional[int] = None,
    parent_task_id: Optional[int] = None,
    ai_generated: bool = False,
    ai_context: Optional[str] = None,
    suggested_date: Optional[datetime] = None,
    xp_boost: Optional[int] = None,
    suggestion_reason: Optional[str] = None,
    recurrence: Optional[dict] = None
) -> Task:
    """
    Create a pending task and cache its XP value.

    Subtasks are created afterwards, so xp_value never includes the subtask
    bonus; completion recomputes XP with the live subtask count.
    """
    if parent_task_id is not None:
        get_task(db, user_id, parent_task_id)

    new_task = Task(
        user_id=user_id,
        parent_task_id=parent_task_id,
        title=title,
        description=description,
        status="pending",
        priority=priority,
        difficulty_level=difficulty_level,
        xp_value=compute_xp(priority, difficulty_level),
        scheduled_for=scheduled_for,
        duration=duration,
        recurrence=recurrence,
        suggested_date=suggested_date,
        xp_boost=xp_boost,
        suggestion_reason=suggestion_reason,
        used_suggested_date=False,
        ai_generated=ai_generated,
        ai_context=ai_context
    )
    db.add(new_task)
    db.commit()
    db.refresh(new_task)
    return new_task


def completion_xp(db: Session, task: Task) -> int:
    return compute_xp(task.priority, task.difficulty_level, count_subtasks(db, task.id))


def update_task(db: Session, user_id: int, task_id: int, updates: dict) -> Tuple[Task, Optional[XPResult]]:
    """
    Apply user edits to a task.

    Entering "completed" awards the task's XP, leaving it deducts the same
    amount; other status moves have no XP effect. Returns (task, xp_result)
    with xp_result None when no XP event fired.
    """
    forbidden = set(updates) - set(EDITABLE_FIELDS)
    if forbidden:
        raise InvalidTaskUpdateError(f"Fields not editable: {', '.join(sorted(forbidden))}")

    updates = dict(updates)
    for field in ("title", "status"):
        if field in updates and updates[field] is None:
            del updates[field]

    new_status = updates.get("status")
    if new_status is not None and new_status not in TASK_STATUSES:
        raise InvalidTaskUpdateError(f"Invalid status: {new_status}")

    with user_lock(user_id):
        try:
            task = get_task(db, user_id, task_id)
            xp_result = None

            if new_status is not None and new_status != task.status:
                if task.status == "completed":
                    xp_result = award_xp(db, user_id, -completion_xp(db, task), task.id, commit=False)
                elif new_status == "completed":
                    xp_result = award_xp(db, user_id, completion_xp(db, task), task.id, commit=False)

            for field, value in updates.items():
                setattr(task, field, value)
            task.updated_at = datetime.utcnow()

            db.commit()
        except Exception:
            db.rollback()
            raise

    db.refresh(task)
    return task, xp_result


def complete_task(db: Session, user_id: int, task_id: int) -> Tuple[Task, XPResult]:
    """One-shot completion: rejected when the task is already completed."""
    with user_lock(user_id):
        try:
            task = get_task(db, user_id, task_id)

            if task.status == "completed":
                raise TaskAlreadyCompletedError()

            task.status = "completed"
            task.updated_at = datetime.utcnow()
            xp_result = award_xp(db, user_id, completion_xp(db, task), task.id, commit=False)

            db.commit()
        except Exception:
            db.rollback()
            raise

    db.refresh(task)
    return task, xp_result


def delete_task(db: Session, user_id: int, task_id: int) -> bool:
    """Delete a task and its direct subtasks. XP already awarded is kept."""
    task = get_task(db, user_id, task_id)

    subtasks = db.query(Task).filter(Task.parent_task_id == task.id).all()
    for subtask in subtasks:
        db.delete(subtask)
    db.flush()

    db.delete(task)
    db.commit()

    logger.info(f"Deleted task {task_id} and {len(subtasks)} subtask(s) for user {user_id}")
    return True


def accept_date_suggestion(db: Session, user_id: int, task_id: int) -> Tuple[Task, XPResult, int]:
    """
    Schedule the task on its AI-suggested date and grant the XP boost.

    Usable once per task. The boost is a bonus, not a completion: it leaves
    streak and completion counters alone.
    """
    with user_lock(user_id):
        try:
            task = get_task(db, user_id, task_id)

            if not task.suggested_date or not task.xp_boost:
                raise SuggestionUnavailableError()
            if task.used_suggested_date:
                raise SuggestionAlreadyUsedError()

            boost = task.xp_boost
            task.scheduled_for = task.suggested_date
            task.used_suggested_date = True
            task.updated_at = datetime.utcnow()

            xp_result = award_xp(db, user_id, boost, task.id, completion=False, commit=False)

            db.commit()
        except Exception:
            db.rollback()
            raise

    db.refresh(task)
    return task, xp_result, boost
