import pytest
from fastapi.testclient import TestClient

from notes_drive.config import Settings
from notes_drive.main import create_app

PASSWORD = "StrongPassw0rd!"


@pytest.fixture()
def settings(tmp_path):
    # isolate data dir per test
    return Settings(
        data_dir=tmp_path,
        jwt_secret="dev-secret-for-tests",
        jwt_exp_minutes=15,
        bcrypt_rounds=4,
    )


@pytest.fixture()
def client(settings):
    return TestClient(create_app(settings))


@pytest.fixture()
def login(client):
    """Register (if needed) and log in a user, returning auth headers."""

    def _login(user_id: str = "userA") -> dict:
        client.post("/auth/register", json={"user_id": user_id, "password": PASSWORD})
        r = client.post("/auth/login", json={"user_id": user_id, "password": PASSWORD})
        assert r.status_code == 200
        return {"Authorization": f"Bearer {r.json()['access_token']}"}

    return _login
