from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional
from datetime import datetime

from app.core.database import get_db
from app.core.deps import get_current_user
from app.models.user import User
from app.schemas.task import (
    TaskCreate,
    TaskUpdate,
    TaskResponse,
    TaskStatus,
    TaskUpdateResponse,
    TaskCompleteResponse,
    AcceptSuggestionResponse,
    DeleteTaskResponse
)
from app.services import task_service

router = APIRouter(prefix="/tasks", tags=["tasks"])


@router.post("", response_model=TaskResponse, status_code=status.HTTP_201_CREATED)
def create_task(
    task_data: TaskCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return task_service.create_task(
        db,
        current_user.id,
        title=task_data.title,
        priority=task_data.priority,
        difficulty_level=task_data.difficulty_level,
        description=task_data.description,
        scheduled_for=task_data.scheduled_for,
        duration=task_data.duration,
        parent_task_id=task_data.parent_task_id,
        suggested_date=task_data.suggested_date,
        xp_boost=task_data.xp_boost,
        suggestion_reason=task_data.suggestion_reason,
        recurrence=task_data.recurrence.model_dump(mode="json") if task_data.recurrence else None
    )


@router.get("", response_model=List[TaskResponse])
def list_tasks(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    status_filter: Optional[TaskStatus] = Query(None)
):
    """Tasks sorted by scheduled date (unscheduled last), then newest first."""
    tasks = task_service.get_all_tasks(db, current_user.id)
    if status_filter:
        tasks = [t for t in tasks if t.status == status_filter]
    return tasks


@router.get("/search", response_model=List[TaskResponse])
def search(
    q: str = Query(..., min_length=1),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return task_service.search_tasks(db, current_user.id, q)


@router.get("/scheduled", response_model=List[TaskResponse])
def scheduled(
    start: datetime = Query(...),
    end: datetime = Query(...),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return task_service.get_scheduled_tasks(db, current_user.id, start, end)


@router.get("/{task_id}", response_model=TaskResponse)
def get_task(
    task_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return task_service.get_task(db, current_user.id, task_id)


@router.get("/{task_id}/subtasks", response_model=List[TaskResponse])
def get_subtasks(
    task_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return task_service.get_subtasks(db, current_user.id, task_id)


@router.patch("/{task_id}", response_model=TaskUpdateResponse)
def update_task(
    task_id: int,
    task_data: TaskUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    Edit user-controlled fields. Moving a task into or out of "completed"
    awards or deducts its XP; xp_result is null otherwise.
    """
    task, xp_result = task_service.update_task(
        db, current_user.id, task_id, task_data.model_dump(exclude_unset=True)
    )
    return {"task": task, "xp_result": xp_result}


@router.post("/{task_id}/complete", response_model=TaskCompleteResponse)
def complete_task(
    task_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    task, xp_result = task_service.complete_task(db, current_user.id, task_id)
    return {"task": task, "xp_result": xp_result}


@router.post("/{task_id}/accept-suggestion", response_model=AcceptSuggestionResponse)
def accept_suggestion(
    task_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    task, xp_result, boost = task_service.accept_date_suggestion(db, current_user.id, task_id)
    return {"task": task, "xp_result": xp_result, "boost": boost}


@router.delete("/{task_id}", response_model=DeleteTaskResponse)
def delete_task(
    task_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return {"success": task_service.delete_task(db, current_user.id, task_id)}
