"""
Router for the AI features.

Endpoints:
- POST /ai/tasks - create tasks from natural language (typed or transcribed)
- POST /ai/transcribe - speech to text
- GET /ai/status - check the model credential
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.deps import get_current_user
from app.models.ai_trace import AITrace
from app.models.user import User
from app.core.config import settings
from app.schemas.ai import (
    NaturalLanguageRequest,
    NaturalLanguageResponse,
    TranscribeRequest,
    TranscribeResponse,
    AIStatusResponse
)
from app.services.ai_service import transcribe_audio, check_connection
from app.services.ai_task_parser import process_natural_language_input

router = APIRouter(prefix="/ai", tags=["ai"])


@router.post("/tasks", response_model=NaturalLanguageResponse, status_code=status.HTTP_201_CREATED)
def create_tasks_from_input(
    request: NaturalLanguageRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    Turn free text into tasks.

    Upstream failures come back as {"success": false, "error": "..."} so the
    client can show them inline. A missing API key is a 503.

    EXAMPLE:
    POST /ai/tasks
    {"input": "call the dentist and prepare the quarterly report"}
    ->
    {"success": true, "tasks": [{"title": "Call the dentist", ...}, ...]}
    """
    return process_natural_language_input(
        db,
        current_user.id,
        request.input,
        context=request.context,
        input_type=request.input_type
    )


@router.post("/transcribe", response_model=TranscribeResponse)
def transcribe(
    request: TranscribeRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    result = transcribe_audio(request.audio_data)

    trace = AITrace(
        user_id=current_user.id,
        analysis_type="transcribe",
        input_type="voice",
        generated_content=(result.get("text") or "")[:500],
        model_used=settings.WHISPER_MODEL,
        success=result["success"],
        error_message=result.get("error")
    )
    db.add(trace)
    db.commit()

    return result


@router.get("/status", response_model=AIStatusResponse)
def ai_status(current_user: User = Depends(get_current_user)):
    return check_connection()
