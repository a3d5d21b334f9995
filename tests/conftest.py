import pytest
from fastapi.testclient import TestClient

from casetrack.config import Settings
from casetrack.database import Database
from casetrack.main import create_app

SECRET = "test-secret-key-with-enough-length"


def make_settings(tmp_path, **overrides) -> Settings:
    values = dict(
        SECRET_KEY=SECRET,
        DATABASE_URL=f"sqlite:///{tmp_path / 'casetrack.db'}",
        FRONTEND_URL="http://localhost:3000",
        UPLOAD_DIR=str(tmp_path / "uploads"),
        BCRYPT_ROUNDS=4,
        AUTH_RATE_LIMIT=1000,
        API_RATE_LIMIT=1000,
    )
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def settings(tmp_path):
    return make_settings(tmp_path)


@pytest.fixture
def db(settings):
    database = Database(settings.DATABASE_URL)
    database.init_db()
    session = database.SessionLocal()
    try:
        yield session
    finally:
        session.close()
        database.dispose()


@pytest.fixture
def client(settings):
    app = create_app(settings)
    with TestClient(app) as c:
        yield c


def register(client, username, password="secret1"):
    resp = client.post("/api/auth/register", json={"username": username, "password": password})
    assert resp.status_code == 201, resp.text
    return resp.json()


def auth_header(token):
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_token(client):
    return register(client, "alice")["token"]


@pytest.fixture
def user_token(client, admin_token):
    return register(client, "bob", "secret2")["token"]
