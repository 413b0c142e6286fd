from urllib.parse import parse_qs, urlparse

import httpx
import pytest

from app.database import get_settings
from app.models.models import User
from app.utils.auth import SESSION_COOKIE
from app.utils.encrypt import decrypt, encrypt, hash_password, mask_api_key, verify_password
from app.utils.jwtman import jwt_manager


def test_protected_route_requires_session(anon_client):
    response = anon_client.get("/api/agents")
    assert response.status_code == 401
    assert response.json() == {"message": "Unauthorized"}


def test_register_sets_session_cookie(anon_client):
    response = anon_client.post("/api/auth/register", json={
        "email": "Founder@Example.com", "password": "correct horse", "first_name": "Salem",
    })

    assert response.status_code == 201
    assert response.json()["email"] == "founder@example.com"
    assert SESSION_COOKIE in response.cookies

    me = anon_client.get("/api/auth/user")
    assert me.status_code == 200
    assert me.json()["first_name"] == "Salem"


def test_register_rejects_duplicate_email(anon_client, db):
    db.add(User(id="u-2", email="taken@example.com"))
    db.commit()

    response = anon_client.post("/api/auth/register", json={"email": "taken@example.com", "password": "long enough"})

    assert response.status_code == 409


def test_login_with_password(anon_client, db):
    db.add(User(id="u-3", email="amal@example.com", hashed_password=hash_password("s3cret-pass")))
    db.commit()

    bad = anon_client.post("/api/auth/login", json={"email": "amal@example.com", "password": "wrong"})
    assert bad.status_code == 401

    good = anon_client.post("/api/auth/login", json={"email": "amal@example.com", "password": "s3cret-pass"})
    assert good.status_code == 200
    assert good.json()["id"] == "u-3"


def test_bearer_token_is_accepted(anon_client, db):
    db.add(User(id="u-4", email="bearer@example.com"))
    db.commit()
    token = jwt_manager.issue_token("u-4")

    response = anon_client.get("/api/auth/user", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 200
    assert response.json()["email"] == "bearer@example.com"


def test_logout_blacklists_token(anon_client, db):
    db.add(User(id="u-5", email="bye@example.com"))
    db.commit()
    token = jwt_manager.issue_token("u-5")
    headers = {"Authorization": f"Bearer {token}"}

    response = anon_client.get("/api/logout", headers=headers, follow_redirects=False)

    assert response.status_code == 302
    assert response.headers["location"] == "/"
    assert anon_client.get("/api/auth/user", headers=headers).status_code == 401


def test_expired_token_is_rejected(anon_client, db):
    db.add(User(id="u-6", email="old@example.com"))
    db.commit()
    token = jwt_manager.issue_token("u-6", expiration_minutes=-1)

    response = anon_client.get("/api/auth/user", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 401
    assert response.json()["message"] == "Session has expired"


@pytest.fixture
def oauth_settings(monkeypatch):
    settings = get_settings()
    monkeypatch.setattr(settings, "OAUTH_CLIENT_ID", "falcon-client")
    monkeypatch.setattr(settings, "OAUTH_CLIENT_SECRET", "falcon-secret")
    monkeypatch.setattr(settings, "OAUTH_AUTHORIZE_URL", "https://id.test/authorize")
    monkeypatch.setattr(settings, "OAUTH_TOKEN_URL", "https://id.test/token")
    monkeypatch.setattr(settings, "OAUTH_USERINFO_URL", "https://id.test/userinfo")
    return settings


def test_oauth_login_redirects_with_signed_state(anon_client, oauth_settings):
    response = anon_client.get("/api/auth/login", follow_redirects=False)

    assert response.status_code == 302
    location = urlparse(response.headers["location"])
    assert location.netloc == "id.test"
    query = parse_qs(location.query)
    assert query["client_id"] == ["falcon-client"]
    assert jwt_manager.validate_state(query["state"][0])["redirect"] == "/"


def test_oauth_callback_upserts_user(anon_client, db, upstream, oauth_settings):
    def handler(request):
        if request.url.path == "/token":
            return httpx.Response(200, json={"access_token": "provider-token"})
        assert request.headers["authorization"] == "Bearer provider-token"
        return httpx.Response(200, json={"sub": "oauth-42", "email": "khalid@example.com", "given_name": "Khalid"})

    upstream.handler = handler
    state = jwt_manager.issue_state("/")

    response = anon_client.get(f"/api/auth/callback?code=abc&state={state}", follow_redirects=False)

    assert response.status_code == 302
    assert SESSION_COOKIE in response.cookies
    user = db.get(User, "oauth-42")
    assert user.email == "khalid@example.com"
    assert user.first_name == "Khalid"


def test_oauth_callback_rejects_forged_state(anon_client, oauth_settings):
    state = jwt_manager.issue_token("someone")
    response = anon_client.get(f"/api/auth/callback?code=abc&state={state}", follow_redirects=False)
    assert response.status_code == 400


def test_password_hashing():
    hashed = hash_password("open sesame")
    assert hashed != "open sesame"
    assert verify_password("open sesame", hashed)
    assert not verify_password("open sesame", None)


def test_api_key_encryption_and_masking():
    token = encrypt("sk-abcdef123456")
    assert token != "sk-abcdef123456"
    assert decrypt(token) == "sk-abcdef123456"
    assert decrypt("legacy-plain-key") == "legacy-plain-key"
    assert mask_api_key("sk-abcdef123456") == "sk-a••••3456"
    assert mask_api_key("short") == "••••••••"
