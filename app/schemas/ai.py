"""
Schemas for the AI endpoints and for the task drafts parsed out of model output.

TaskDraft and SubtaskDraft validate untrusted JSON coming back from the
language model. Every field is cleaned or clamped in a "before" validator so
that a sloppy but well-formed answer still produces usable drafts; only a
structurally wrong answer (not an object) fails validation.
"""

import math
from datetime import datetime, timezone
from typing import Optional, List, Literal, Any

from dateutil.parser import isoparse
from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.schemas.task import TaskResponse

PRIORITIES = ("low", "medium", "high", "urgent")


# ============ FIELD CLEANERS ============

def _round_half_up(number: float) -> int:
    return int(math.floor(number + 0.5))


def _as_number(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def _clean_text(value: Any) -> Optional[str]:
    if value is None or isinstance(value, (dict, list)):
        return None
    text = str(value).strip()
    return text or None


def _clean_priority(value: Any) -> str:
    return value if value in PRIORITIES else "medium"


def _clean_difficulty(value: Any, default: int) -> int:
    number = _as_number(value)
    if not number:
        return default
    return int(max(1, min(5, _round_half_up(number))))


def _clean_timestamp(value: Any) -> Optional[datetime]:
    """Epoch milliseconds (or an ISO string) -> naive UTC datetime."""
    number = _as_number(value)
    if number is not None:
        if number <= 0:
            return None
        try:
            return datetime.fromtimestamp(number / 1000, tz=timezone.utc).replace(tzinfo=None)
        except (OverflowError, OSError, ValueError):
            return None

    if isinstance(value, str) and value.strip():
        try:
            parsed = isoparse(value.strip())
        except (ValueError, OverflowError):
            return None
        if parsed.tzinfo is not None:
            parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
        return parsed

    return None


# ============ DRAFTS ============

class SubtaskDraft(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    title: str = "Untitled Subtask"
    description: Optional[str] = None
    priority: str = "medium"
    difficulty_level: int = Field(1, alias="difficultyLevel")

    @field_validator("title", mode="before")
    @classmethod
    def _title(cls, value):
        return _clean_text(value) or "Untitled Subtask"

    @field_validator("description", mode="before")
    @classmethod
    def _description(cls, value):
        return _clean_text(value)

    @field_validator("priority", mode="before")
    @classmethod
    def _priority(cls, value):
        return _clean_priority(value)

    @field_validator("difficulty_level", mode="before")
    @classmethod
    def _difficulty(cls, value):
        # subtasks are usually small: default to the easiest level
        return _clean_difficulty(value, 1)


class TaskDraft(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    title: str = "Untitled Task"
    description: Optional[str] = None
    priority: str = "medium"
    difficulty_level: int = Field(3, alias="difficultyLevel")
    duration: Optional[int] = None
    scheduled_for: Optional[datetime] = Field(None, alias="scheduledFor")
    suggested_date: Optional[datetime] = Field(None, alias="suggestedDate")
    xp_boost: Optional[int] = Field(None, alias="xpBoost")
    reason: Optional[str] = None
    subtasks: Optional[List[SubtaskDraft]] = None

    @field_validator("title", mode="before")
    @classmethod
    def _title(cls, value):
        return _clean_text(value) or "Untitled Task"

    @field_validator("description", "reason", mode="before")
    @classmethod
    def _text(cls, value):
        return _clean_text(value)

    @field_validator("priority", mode="before")
    @classmethod
    def _priority(cls, value):
        return _clean_priority(value)

    @field_validator("difficulty_level", mode="before")
    @classmethod
    def _difficulty(cls, value):
        return _clean_difficulty(value, 3)

    @field_validator("duration", mode="before")
    @classmethod
    def _duration(cls, value):
        number = _as_number(value)
        if number is None or number <= 0:
            return None
        return max(1, int(_round_half_up(number)))

    @field_validator("scheduled_for", "suggested_date", mode="before")
    @classmethod
    def _timestamp(cls, value):
        return _clean_timestamp(value)

    @field_validator("xp_boost", mode="before")
    @classmethod
    def _xp_boost(cls, value):
        number = _as_number(value)
        if number is None or number <= 0:
            return None
        return int(max(10, min(50, _round_half_up(number))))

    @field_validator("subtasks", mode="before")
    @classmethod
    def _subtasks(cls, value):
        if not isinstance(value, list):
            return None
        # a bare string or number still counts as one (untitled) subtask
        return [item if isinstance(item, dict) else {} for item in value]

    @property
    def has_date_suggestion(self) -> bool:
        return bool(self.suggested_date and self.xp_boost)


# ============ API SCHEMAS ============

class AIContext(BaseModel):
    previous_tasks: Optional[List[str]] = None
    user_timezone: Optional[str] = None
    current_time: Optional[int] = None  # epoch milliseconds


class NaturalLanguageRequest(BaseModel):
    input: str = Field(..., min_length=1)
    input_type: Literal["text", "voice"] = "text"
    context: Optional[AIContext] = None


class SuggestionData(BaseModel):
    suggested_date: datetime
    xp_boost: int
    reason: Optional[str] = None


class AITaskResult(TaskResponse):
    has_date_suggestion: bool = False
    suggestion_data: Optional[SuggestionData] = None


class NaturalLanguageResponse(BaseModel):
    success: bool
    tasks: Optional[List[AITaskResult]] = None
    error: Optional[str] = None


class TranscribeRequest(BaseModel):
    audio_data: str = Field(..., min_length=1)  # base64 encoded audio


class TranscribeResponse(BaseModel):
    success: bool
    text: Optional[str] = None
    error: Optional[str] = None


class AIStatusResponse(BaseModel):
    connected: bool
    status: Optional[int] = None
    error: Optional[str] = None
