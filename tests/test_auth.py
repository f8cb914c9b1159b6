import uuid

from app.core.security import create_refresh_token, verify_token
from app.models.progress import UserProgress


def signup(client, email=None, username=None, password="password123"):
    unique_id = str(uuid.uuid4())[:8]
    return client.post("/auth/signup", json={
        "email": email or f"signup_{unique_id}@example.com",
        "username": username or f"user_{unique_id}",
        "password": password
    })


def test_signup_success(client):
    """Create a user"""
    response = signup(client, email="new@example.com", username="newbie")
    assert response.status_code == 200
    data = response.json()
    assert data["email"] == "new@example.com"
    assert data["username"] == "newbie"
    assert "id" in data
    assert "password_hash" not in data  # never returned


def test_signup_creates_progress(client, db):
    """A fresh user starts at level 1 with an empty record"""
    user_id = signup(client).json()["id"]

    progress = db.query(UserProgress).filter(UserProgress.user_id == user_id).first()
    assert progress is not None
    assert progress.total_xp == 0
    assert progress.current_level == 1
    assert progress.current_streak == 0
    assert progress.character_stage == 1
    assert progress.character_type == "plant"
    assert progress.unlocked_achievements == []
    assert progress.character_customization["color"]


def test_signup_duplicate_email(client):
    signup(client, email="duplicate@example.com")
    response = signup(client, email="duplicate@example.com")
    assert response.status_code == 400
    assert "Email already registered" in response.json()["detail"]


def test_signup_duplicate_username(client):
    signup(client, username="samename")
    response = signup(client, username="samename")
    assert response.status_code == 400
    assert "Username already taken" in response.json()["detail"]


def test_login_success(client):
    signup(client, email="login@example.com")
    response = client.post("/auth/login", json={
        "email": "login@example.com",
        "password": "password123"
    })
    assert response.status_code == 200
    data = response.json()
    assert data["token_type"] == "bearer"
    assert verify_token(data["access_token"])["type"] == "access"
    assert verify_token(data["refresh_token"])["type"] == "refresh"


def test_login_wrong_password(client):
    signup(client, email="wrong@example.com")
    response = client.post("/auth/login", json={
        "email": "wrong@example.com",
        "password": "nope"
    })
    assert response.status_code == 401
    assert response.json()["detail"] == "Incorrect email or password"


def test_refresh_token(client, user):
    token = create_refresh_token(user.id, user.email)
    response = client.post("/auth/refresh", params={"refresh_token": token})
    assert response.status_code == 200
    assert verify_token(response.json()["access_token"])["user_id"] == user.id


def test_refresh_rejects_access_token(client, auth_token):
    response = client.post("/auth/refresh", params={"refresh_token": auth_token})
    assert response.status_code == 401


def test_protected_route_without_token(client):
    assert client.get("/progress").status_code == 401


def test_protected_route_with_bad_token(client):
    response = client.get("/progress", headers={"Authorization": "Bearer not-a-token"})
    assert response.status_code == 401


def test_new_user_progress_endpoint(client):
    signup(client, email="fresh@example.com")
    token = client.post("/auth/login", json={
        "email": "fresh@example.com",
        "password": "password123"
    }).json()["access_token"]

    response = client.get("/progress", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 200
    data = response.json()
    assert data["current_level"] == 1
    assert data["stage_name"] == "Seed"
    assert data["next_level_xp"] == 100
    assert data["xp_to_next_level"] == 100


def test_signup_rejects_short_password(client):
    response = signup(client, email="short@example.com", password="123")
    assert response.status_code == 422


def test_signup_rejects_short_username(client):
    response = signup(client, username="ab")
    assert response.status_code == 422
