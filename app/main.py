import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from app.core.config import settings
from app.core.database import engine, Base, SessionLocal
from app.core.exceptions import DomainError
from app.routers import health, auth, tasks, progress, ai, ai_traces
from app.services.achievement_service import seed_achievements

# models imported so create_all sees every table
from app.models.user import User  # noqa: F401
from app.models.progress import UserProgress  # noqa: F401
from app.models.achievement import Achievement  # noqa: F401
from app.models.task import Task  # noqa: F401
from app.models.ai_trace import AITrace  # noqa: F401

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)
logger = logging.getLogger(__name__)

# Init DB
Base.metadata.create_all(bind=engine)

app = FastAPI(
    title="TaskQuest API",
    version="0.1.0"
)


@app.on_event("startup")
def bootstrap_achievements():
    """Seed the achievement catalog once; no-op when already there."""
    db = SessionLocal()
    try:
        seed_achievements(db)
    finally:
        db.close()


@app.exception_handler(DomainError)
async def domain_error_handler(request: Request, exc: DomainError):
    if exc.status_code >= 500:
        logger.error(f"{type(exc).__name__}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


# Routes
app.include_router(health.router, prefix="/health")
app.include_router(auth.router)
app.include_router(tasks.router)
app.include_router(progress.router)
app.include_router(ai.router)
app.include_router(ai_traces.router)
