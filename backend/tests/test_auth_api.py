"""Tests for signup, login, logout and the session guard."""

import inspect
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

from sqlalchemy.exc import OperationalError

from api.auth.services import token_service
from api.users.repositories import users_repository
from auth import COOKIE_NAME
from conftest import TEST_SECRET, login, signup


def test_signup_then_login_sets_session_cookie(client):
    response = signup(client)
    assert response.status_code == 200
    assert response.json() == {"message": "User created successfully"}
    assert COOKIE_NAME not in response.cookies

    response = login(client)
    assert response.status_code == 200
    assert response.json() == {"message": "User logged in successfully"}

    set_cookie = response.headers["set-cookie"]
    assert set_cookie.startswith(f"{COOKIE_NAME}=")
    assert "HttpOnly" in set_cookie
    assert "Secure" in set_cookie
    assert "SameSite=strict" in set_cookie
    assert f"Max-Age={30 * 24 * 3600}" in set_cookie


def test_signup_rejects_duplicate_email(client):
    assert signup(client).status_code == 200

    response = signup(client, password="something-else")

    assert response.status_code == 400
    assert response.json() == {"detail": "Email already exists"}


def test_signup_rejects_unparseable_body(client):
    response = client.post(
        "/signup", content=b"{not json", headers={"Content-Type": "application/json"}
    )

    assert response.status_code == 400
    assert response.json() == {"detail": "Invalid request body"}


def test_signup_rejects_missing_password(client):
    response = client.post("/signup", json={"email": "alice@example.com"})

    assert response.status_code == 400


def test_password_is_stored_hashed(app, client):
    signup(client, password="plain-text-pw")

    with app.state.database.session() as session:
        user = users_repository.get_by_email(session, "alice@example.com")

    assert user.password != "plain-text-pw"
    assert user.password.startswith("pbkdf2:sha256")
    assert user.username == "alice"


def test_wrong_password_and_unknown_email_give_same_error(client):
    signup(client)

    wrong_password = login(client, password="nope")
    unknown_email = login(client, email="bob@example.com")

    assert wrong_password.status_code == unknown_email.status_code == 400
    assert wrong_password.json() == unknown_email.json() == {"detail": "Invalid email or password"}
    assert COOKIE_NAME not in wrong_password.cookies


def test_validate_returns_current_user(client, register_and_login):
    register_and_login()

    response = client.get("/validate")

    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "You are logged in"
    assert body["user"]["email"] == "alice@example.com"
    assert "password" not in body["user"]


def test_validate_without_cookie_is_unauthorized(client):
    response = client.get("/validate")

    assert response.status_code == 401
    assert response.json() == {"detail": "Login required"}


def test_validate_with_garbage_token_is_unauthorized(client):
    response = client.get("/validate", headers={"Cookie": f"{COOKIE_NAME}=garbage"})

    assert response.status_code == 401
    assert response.json() == {"detail": "Invalid token"}


def test_guard_rejects_expired_token(client, register_and_login):
    user = register_and_login()
    client.cookies.clear()
    issued = datetime.now(timezone.utc) - timedelta(days=8)
    token = token_service.issue_token(SimpleNamespace(**user), TEST_SECRET, now=issued)

    response = client.get("/validate", headers={"Cookie": f"{COOKIE_NAME}={token}"})

    assert response.status_code == 401
    assert response.json() == {"detail": "Token expired"}


def test_guard_accepts_fresh_token(client, register_and_login):
    user = register_and_login()
    client.cookies.clear()
    issued = datetime.now(timezone.utc) - timedelta(seconds=1)
    token = token_service.issue_token(SimpleNamespace(**user), TEST_SECRET, now=issued)

    response = client.get("/validate", headers={"Cookie": f"{COOKIE_NAME}={token}"})

    assert response.status_code == 200
    assert response.json()["user"]["id"] == user["id"]


def test_guard_rejects_token_for_unknown_user(client):
    ghost = SimpleNamespace(id=999, username="ghost", email="ghost@example.com")
    token = token_service.issue_token(ghost, TEST_SECRET)

    response = client.get("/validate", headers={"Cookie": f"{COOKIE_NAME}={token}"})

    assert response.status_code == 401
    assert response.json() == {"detail": "User not found"}


def test_logout_clears_cookie(client, register_and_login):
    register_and_login()

    response = client.post("/logout")

    assert response.status_code == 200
    assert response.json() == {"message": "User logged out successfully"}
    set_cookie = response.headers["set-cookie"]
    assert set_cookie.startswith(f'{COOKIE_NAME}="";') or set_cookie.startswith(f"{COOKIE_NAME}=;")
    assert "Max-Age=0" in set_cookie
    assert client.get("/validate").status_code == 401


def test_logout_without_session_succeeds(client):
    assert client.post("/logout").status_code == 200


def test_login_without_secret_fails_to_sign(tmp_path):
    from fastapi.testclient import TestClient

    from config import Settings
    from main import create_app

    settings = Settings(data_dir=tmp_path, secret="", password_hash_method="pbkdf2:sha256:1000")
    with TestClient(create_app(settings), base_url="https://testserver") as client:
        signup(client)
        response = login(client)

    assert response.status_code == 500
    assert response.json() == {"detail": "Failed to generate token"}


def _database_down(*args, **kwargs):
    raise OperationalError("SELECT", {}, Exception("database is locked"))


def test_signup_lookup_failure_is_json_error(client, monkeypatch):
    monkeypatch.setattr(users_repository, "email_exists", _database_down)

    response = signup(client)

    assert response.status_code == 500
    assert response.headers["content-type"] == "application/json"
    assert response.json() == {"detail": "Failed to create user"}


def test_signup_insert_failure_is_json_error(client, monkeypatch):
    monkeypatch.setattr(users_repository, "create", _database_down)

    response = signup(client)

    assert response.status_code == 500
    assert response.json() == {"detail": "Failed to create user"}


def test_login_lookup_failure_is_json_error(client, monkeypatch):
    signup(client)
    monkeypatch.setattr(users_repository, "get_by_email", _database_down)

    response = login(client)

    assert response.status_code == 500
    assert response.headers["content-type"] == "application/json"
    assert response.json() == {"detail": "Failed to look up user"}


def test_guard_lookup_failure_is_json_error(client, register_and_login, monkeypatch):
    register_and_login()
    monkeypatch.setattr(users_repository, "get_by_id", _database_down)

    for response in (client.get("/validate"), client.get("/files")):
        assert response.status_code == 500
        assert response.headers["content-type"] == "application/json"
        assert response.json() == {"detail": "Failed to look up user"}


def test_blocking_handlers_run_in_threadpool(app):
    blocking = {"signup", "login", "upload_file", "list_files", "download_file", "delete_file", "get_file_metadata"}
    endpoints = {
        route.endpoint.__name__: route.endpoint
        for route in app.routes
        if getattr(route, "endpoint", None) is not None
    }

    for name in blocking:
        assert not inspect.iscoroutinefunction(endpoints[name]), name
