"""
AI task parser - natural language -> structured tasks

Pipeline: build the prompt, call the chat model, pull the JSON array out of
the answer, validate/clamp every draft, then create the tasks (parents
first, their subtasks right after).
"""

import json
import logging
import re
from datetime import datetime, timezone
from typing import List, Optional

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.exceptions import AIConfigurationError, LLMError, DomainError
from app.models.ai_trace import AITrace
from app.models.progress import UserProgress
from app.schemas.ai import AIContext, TaskDraft
from app.services.ai_service import chat_completion
from app.services.task_service import create_task

logger = logging.getLogger(__name__)

FALLBACK_TITLE_LENGTH = 100
TRACE_TEXT_LIMIT = 500

JSON_ARRAY_RE = re.compile(r"\[[\s\S]*\]")


TASK_CREATION_SYSTEM_PROMPT = """You are an AI task planning assistant. Your job is to analyze natural language input and create structured, actionable tasks.

IMPORTANT: You must respond with ONLY a valid JSON array. No explanations, no markdown, no additional text.

For each task, determine:
1. title: Clear, actionable task title (required)
2. description: Detailed description if needed (optional)
3. priority: "low", "medium", "high", or "urgent" - YOU DECIDE (required)
4. difficultyLevel: 1-5 scale - YOU DECIDE based on task complexity (required)
5. duration: Estimated minutes (optional)
6. scheduledFor: Unix timestamp if user specified time (optional)
7. suggestedDate: Unix timestamp for optimal timing with reason (optional)
8. xpBoost: Extra XP reward if user accepts suggested date (optional, 10-50)
9. subtasks: Array of subtasks if task is complex (optional)

AI AUTHORITY RULES:
- YOU control priority AND difficulty - these determine XP rewards, preventing user XP farming
- YOU control difficulty level (1-5) based on task complexity, skills needed, time investment
- YOU control priority based on true urgency, importance, and consequences
- Priority levels: low=routine/optional, medium=important, high=urgent/significant, urgent=critical/time-sensitive
- Users can set their own dates, but YOUR suggestions offer rewards
- Suggest dates for: morning routines (early boost), urgent tasks (deadline bonus), habit building

PRIORITY ASSIGNMENT GUIDELINES:
- urgent: Critical deadlines, emergencies, health issues, legal matters
- high: Important deadlines, significant impact on goals, time-sensitive opportunities
- medium: Regular responsibilities, planned activities, skill development
- low: Optional tasks, convenience items, nice-to-have improvements

Date Suggestion Examples:
- "Call doctor" → suggest next morning with +20 XP for early action
- "Exercise" → suggest consistent time with +15 XP for routine building
- "Study" → suggest optimal learning times with +25 XP for peak performance
- "Meal prep" → suggest Sunday with +30 XP for weekly planning

Example response:
[
  {
    "title": "Call doctor for appointment",
    "description": "Schedule annual checkup",
    "priority": "medium",
    "difficultyLevel": 2,
    "duration": 15,
    "suggestedDate": 1704110400000,
    "xpBoost": 20,
    "reason": "Morning calls are more likely to reach receptionist and show proactive health management"
  },
  {
    "title": "Weekly grocery shopping",
    "priority": "medium",
    "difficultyLevel": 3,
    "duration": 60,
    "suggestedDate": 1704196800000,
    "xpBoost": 25,
    "reason": "Sunday planning sets up the week for success and saves time"
  }
]"""


# ============ PROMPT ============

def build_context_prompt(
    user_input: str,
    context: Optional[AIContext] = None,
    progress: Optional[UserProgress] = None
) -> str:
    prompt = f'User input: "{user_input}"\n\n'

    if context and context.current_time:
        try:
            current = datetime.fromtimestamp(context.current_time / 1000, tz=timezone.utc)
            prompt += f"Current time: {current.isoformat()}\n"
        except (OverflowError, OSError, ValueError):
            # out of range for the platform clock: the model works without it
            logger.warning(f"Ignoring out of range current_time: {context.current_time}")

    if context and context.user_timezone:
        prompt += f"User timezone: {context.user_timezone}\n"

    if progress is not None:
        prompt += f"User level: {progress.current_level}\n"
        prompt += f"Current streak: {progress.current_streak} days\n"

    if context and context.previous_tasks:
        prompt += f"Recent tasks: {', '.join(context.previous_tasks)}\n"

    prompt += "\nPlease create structured tasks from this input:"
    return prompt


# ============ RESPONSE PARSING ============

def fallback_draft(raw: str) -> TaskDraft:
    """Single medium/3 task titled with the start of the raw answer"""
    title = raw[:FALLBACK_TITLE_LENGTH]
    if len(raw) > FALLBACK_TITLE_LENGTH:
        title += "..."
    return TaskDraft(title=title, priority="medium", difficulty_level=3)


def parse_ai_response(raw: str) -> List[TaskDraft]:
    """
    Turn the model answer into validated task drafts.

    Prose around the JSON array is tolerated. Anything that is not an array
    of objects degrades to a single fallback draft.
    """
    cleaned = raw.strip()
    match = JSON_ARRAY_RE.search(cleaned)
    if match:
        cleaned = match.group(0)

    try:
        parsed = json.loads(cleaned)
        if not isinstance(parsed, list):
            raise ValueError("AI response is not an array")
        if not all(isinstance(item, dict) for item in parsed):
            raise ValueError("AI response contains non-object items")
        return [TaskDraft.model_validate(item) for item in parsed]

    except (ValueError, ValidationError) as e:
        # json.JSONDecodeError is a ValueError
        logger.warning(f"Failed to parse AI response, using fallback task: {e}")
        return [fallback_draft(raw)]


# ============ PIPELINE ============

def _created_task_payload(task, draft: TaskDraft) -> dict:
    payload = {column.name: getattr(task, column.name) for column in task.__table__.columns}
    payload["has_date_suggestion"] = draft.has_date_suggestion
    payload["suggestion_data"] = {
        "suggested_date": draft.suggested_date,
        "xp_boost": draft.xp_boost,
        "reason": draft.reason
    } if draft.has_date_suggestion else None
    return payload


def create_tasks_from_drafts(db: Session, user_id: int, drafts: List[TaskDraft], ai_context: str) -> List[dict]:
    created = []

    for draft in drafts:
        task = create_task(
            db,
            user_id,
            title=draft.title,
            description=draft.description,
            priority=draft.priority,
            difficulty_level=draft.difficulty_level,
            scheduled_for=draft.scheduled_for,
            duration=draft.duration,
            suggested_date=draft.suggested_date,
            xp_boost=draft.xp_boost,
            suggestion_reason=draft.reason,
            ai_generated=True,
            ai_context=ai_context
        )
        created.append(_created_task_payload(task, draft))

        for subtask in draft.subtasks or []:
            create_task(
                db,
                user_id,
                title=subtask.title,
                description=subtask.description,
                priority=subtask.priority,
                difficulty_level=subtask.difficulty_level,
                parent_task_id=task.id,
                ai_generated=True,
                ai_context=ai_context
            )

    return created


def _record_trace(db: Session, user_id: int, input_type: str, user_input: str, **fields):
    trace = AITrace(
        user_id=user_id,
        analysis_type="parse_tasks",
        input_type=input_type,
        input_text=user_input[:TRACE_TEXT_LIMIT],
        model_used=settings.OPENAI_MODEL,
        **fields
    )
    db.add(trace)
    db.commit()


def process_natural_language_input(
    db: Session,
    user_id: int,
    user_input: str,
    context: Optional[AIContext] = None,
    input_type: str = "text"
) -> dict:
    """
    Create tasks from free text (typed or transcribed).

    Returns {"success": True, "tasks": [...]} or {"success": False,
    "error": "..."}. Only a missing API key raises (AIConfigurationError).
    """
    if not settings.OPENAI_API_KEY:
        raise AIConfigurationError()

    raw = ""
    tokens_used = 0
    execution_time_ms = 0

    try:
        progress = db.query(UserProgress).filter(UserProgress.user_id == user_id).first()

        messages = [
            {"role": "system", "content": TASK_CREATION_SYSTEM_PROMPT},
            {"role": "user", "content": build_context_prompt(user_input, context, progress)}
        ]
        raw, tokens_used, execution_time_ms = chat_completion(messages)

        drafts = parse_ai_response(raw)
        created = create_tasks_from_drafts(db, user_id, drafts, user_input)

    except (LLMError, DomainError, SQLAlchemyError) as e:
        db.rollback()
        logger.error(f"AI processing error: {e}")
        _record_trace(
            db, user_id, input_type, user_input,
            generated_content=raw[:TRACE_TEXT_LIMIT],
            tokens_used=tokens_used,
            execution_time_ms=execution_time_ms,
            success=False,
            error_message=str(e)
        )
        return {"success": False, "error": str(e)}

    _record_trace(
        db, user_id, input_type, user_input,
        generated_content=raw[:TRACE_TEXT_LIMIT],
        tasks_created=len(created),
        tokens_used=tokens_used,
        execution_time_ms=execution_time_ms,
        success=True
    )
    return {"success": True, "tasks": created}
