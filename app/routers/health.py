import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.database import get_db

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


@router.get("/z")
def healthz():
    # liveness only, no DB or OpenAI call
    return {"status": "ok"}


@router.get("/ready")
def readiness(db: Session = Depends(get_db)):
    """Database reachable? AI features configured?"""
    try:
        db.execute(text("SELECT 1"))
        database_ok = True
    except SQLAlchemyError as e:
        logger.error(f"Readiness check failed: {e}")
        database_ok = False

    content = {
        "status": "ok" if database_ok else "unavailable",
        "database": database_ok,
        "ai_configured": bool(settings.OPENAI_API_KEY)
    }
    return JSONResponse(status_code=200 if database_ok else 503, content=content)
