"""Pydantic schemas for task request/response validation."""

from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime
from typing import Optional, List, Literal

from app.schemas.progress import XPResult

Priority = Literal["low", "medium", "high", "urgent"]
TaskStatus = Literal["pending", "in_progress", "completed"]


class Recurrence(BaseModel):
    pattern: Literal["daily", "weekly", "monthly"]
    interval: int = Field(1, ge=1)
    end_date: Optional[datetime] = None


class TaskCreate(BaseModel):
    title: str = Field(..., min_length=1)
    description: Optional[str] = None
    priority: Priority = "medium"
    difficulty_level: int = Field(1, ge=1, le=5)
    scheduled_for: Optional[datetime] = None
    duration: Optional[int] = Field(None, gt=0)
    parent_task_id: Optional[int] = None
    suggested_date: Optional[datetime] = None
    xp_boost: Optional[int] = Field(None, ge=10, le=50)
    suggestion_reason: Optional[str] = None
    recurrence: Optional[Recurrence] = None


class TaskUpdate(BaseModel):
    """
    User-editable fields only.

    priority and difficulty_level are rejected: they drive the XP value and
    stay under AI control.
    """

    model_config = ConfigDict(extra="forbid")

    title: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    status: Optional[TaskStatus] = None
    scheduled_for: Optional[datetime] = None
    duration: Optional[int] = Field(None, gt=0)


class TaskResponse(BaseModel):
    id: int
    user_id: int
    parent_task_id: Optional[int]
    title: str
    description: Optional[str]
    status: str
    priority: str
    difficulty_level: int
    xp_value: int
    scheduled_for: Optional[datetime]
    duration: Optional[int]
    recurrence: Optional[dict]
    suggested_date: Optional[datetime]
    xp_boost: Optional[int]
    suggestion_reason: Optional[str]
    used_suggested_date: bool
    ai_generated: bool
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class TaskUpdateResponse(BaseModel):
    task: TaskResponse
    xp_result: Optional[XPResult] = None


class TaskCompleteResponse(BaseModel):
    task: TaskResponse
    xp_result: XPResult


class AcceptSuggestionResponse(BaseModel):
    task: TaskResponse
    xp_result: XPResult
    boost: int


class DeleteTaskResponse(BaseModel):
    success: bool = True
