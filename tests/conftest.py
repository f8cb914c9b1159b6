import os
import sys
from pathlib import Path

# Project root on PYTHONPATH FIRST
sys.path.insert(0, str(Path(__file__).parent.parent))
os.environ.setdefault("DATABASE_URL", "sqlite:///./test.db")

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

# SQLite engine for tests, created BEFORE importing the app
SQLALCHEMY_TEST_DATABASE_URL = "sqlite:///./test.db"
test_engine = create_engine(
    SQLALCHEMY_TEST_DATABASE_URL,
    connect_args={"check_same_thread": False}
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)

# PATCH: swap engine and SessionLocal in core.database BEFORE importing the app
import app.core.database
app.core.database.engine = test_engine
app.core.database.SessionLocal = TestingSessionLocal

# Now import the app (it will use our SQLite engine)
from app.core.config import settings
from app.core.database import Base, get_db
from app.core.security import create_access_token
from app.main import app
from app.models.user import User
from app.services.gamification_service import create_user_progress

def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()

@pytest.fixture(autouse=True)
def setup_teardown():
    """Fresh tables around every test"""
    Base.metadata.drop_all(bind=test_engine)
    Base.metadata.create_all(bind=test_engine)
    yield
    Base.metadata.drop_all(bind=test_engine)

# Override the dependency
app.dependency_overrides[get_db] = override_get_db


@pytest.fixture
def client():
    """FastAPI test client"""
    from fastapi.testclient import TestClient
    return TestClient(app)


@pytest.fixture
def db():
    """DB session for service-level tests"""
    db = TestingSessionLocal()
    yield db
    db.close()


@pytest.fixture
def session_factory():
    """For tests that need one session per thread"""
    return TestingSessionLocal


def make_user(db, email="player@example.com", username="player"):
    """User + progress, as signup creates them"""
    user = User(email=email, username=username)
    user.set_password("pass123")
    db.add(user)
    db.flush()
    create_user_progress(db, user.id)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def user(db):
    return make_user(db)


@pytest.fixture
def auth_token(user):
    return create_access_token(user.id, user.email)


@pytest.fixture
def auth_headers(auth_token):
    return {"Authorization": f"Bearer {auth_token}"}


@pytest.fixture
def other_auth_headers(db):
    """Headers of a second, unrelated user"""
    other = make_user(db, email="other@example.com", username="other")
    return {"Authorization": f"Bearer {create_access_token(other.id, other.email)}"}


@pytest.fixture
def api_key(monkeypatch):
    """Pretend an OpenAI key is configured"""
    monkeypatch.setattr(settings, "OPENAI_API_KEY", "sk-test")
    return "sk-test"


@pytest.fixture
def no_api_key(monkeypatch):
    monkeypatch.setattr(settings, "OPENAI_API_KEY", None)

