from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List

from app.core.database import get_db
from app.core.deps import get_current_user
from app.models.user import User
from app.models.ai_trace import AITrace
from app.schemas.ai_trace import AITraceResponse

router = APIRouter(prefix="/ai-traces", tags=["ai-traces"])


@router.get("", response_model=List[AITraceResponse])
def list_ai_traces(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return db.query(AITrace).filter(
        AITrace.user_id == current_user.id
    ).order_by(AITrace.created_at.desc(), AITrace.id.desc()).all()


@router.get("/{trace_id}", response_model=AITraceResponse)
def get_ai_trace(trace_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    trace = db.query(AITrace).filter(
        AITrace.id == trace_id,
        AITrace.user_id == current_user.id
    ).first()
    if not trace:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Trace not found"
        )

    return trace
