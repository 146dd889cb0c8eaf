from datetime import timedelta

from app.core.config import settings
from app.core.security import create_access_token, get_password_hash, verify_password, verify_token
from app.models import AdminUser
from app.services.auth import AuthService


def test_password_hashing():
    hashed = get_password_hash("s3cret-pass")
    assert hashed != "s3cret-pass"
    assert verify_password("s3cret-pass", hashed)
    assert not verify_password("wrong", hashed)
    assert not verify_password("s3cret-pass", "not-a-hash")


def test_expired_token_is_rejected():
    token = create_access_token({"admin_id": 1}, expires_delta=timedelta(minutes=-1))
    assert verify_token(token) is None


def test_login_and_profile(client, admin_headers):
    response = client.post("/api/auth/login", json={"username": "owner", "password": "s3cret-pass"})
    assert response.status_code == 200
    body = response.json()
    assert body["token_type"] == "bearer"
    assert body["user"]["username"] == "owner"

    profile = client.get("/api/auth/profile", headers={"Authorization": f"Bearer {body['access_token']}"})
    assert profile.status_code == 200
    assert profile.json()["email"] == "owner@example.com"


def test_login_with_wrong_password(client, admin_headers):
    response = client.post("/api/auth/login", json={"username": "owner", "password": "guess"})
    assert response.status_code == 401


def test_garbage_token(client):
    response = client.get("/api/auth/profile", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 401


def test_default_admin_seeded_once(db):
    AuthService.seed_default_admin(db)
    AuthService.seed_default_admin(db)

    admins = db.query(AdminUser).all()
    assert len(admins) == 1
    assert admins[0].username == settings.ADMIN_USERNAME
    assert verify_password(settings.ADMIN_PASSWORD, admins[0].password_hash)
