"""Test configuration and fixtures for MiniDrive."""

import pytest
from fastapi.testclient import TestClient

from config import Settings
from main import create_app

TEST_SECRET = "test-secret"


@pytest.fixture
def settings(tmp_path):
    return Settings(
        data_dir=tmp_path,
        secret=TEST_SECRET,
        password_hash_method="pbkdf2:sha256:1000",
        db_connect_retry_delay=0,
    )


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    # Session cookies are Secure, so talk to the app over https.
    with TestClient(app, base_url="https://testserver") as c:
        yield c


def signup(client, email="alice@example.com", password="s3cret-pass"):
    return client.post("/signup", json={"email": email, "password": password})


def login(client, email="alice@example.com", password="s3cret-pass"):
    return client.post("/login", json={"email": email, "password": password})


@pytest.fixture
def register_and_login(client):
    """Sign up and log in a user, leaving its session cookie on the client."""

    def _register_and_login(email="alice@example.com", password="s3cret-pass"):
        client.cookies.clear()
        assert signup(client, email, password).status_code == 200
        assert login(client, email, password).status_code == 200
        return client.get("/validate").json()["user"]

    return _register_and_login
