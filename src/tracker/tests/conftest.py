import os
import tempfile
import uuid

# the app reads its config at import time, so the test database comes first
_DB_PATH = os.path.join(tempfile.gettempdir(), f"tracker_test_{uuid.uuid4().hex[:8]}.db")
os.environ["DATABASE_URL"] = f"sqlite:///{_DB_PATH}"
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("JWT_ALG", "HS256")

import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy.orm import Session

from src.tracker.main import app as fastapi_app
from src.tracker.infra.db import Base, SessionLocal, engine
from src.tracker.infra import models  # noqa: F401


@pytest.fixture(scope="session", autouse=True)
def _schema():
    """
    Fresh schema for the whole session, removed afterwards.
    """
    Base.metadata.create_all(engine)
    yield
    Base.metadata.drop_all(engine)
    engine.dispose()
    if os.path.exists(_DB_PATH):
        os.remove(_DB_PATH)


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture(scope="session")
def app():
    return fastapi_app


@pytest.fixture
async def client(app):
    """
    HTTP client over the ASGI app, no real server.
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest.fixture
def db_session() -> Session:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def random_email():
    def _make(prefix: str = "user") -> str:
        return f"{prefix}_{uuid.uuid4().hex[:8]}@test.local"

    return _make


@pytest.fixture
def auth_headers():
    def _make(token: str) -> dict:
        return {"Authorization": f"Bearer {token}"}

    return _make


@pytest.fixture
async def register_user(client, random_email):
    """
    Registers through /api/auth/register and returns (token, user_id).
    """
    async def _call(email: str | None = None, password: str = "pass1234"):
        if email is None:
            email = random_email("u")

        r = await client.post("/api/auth/register", json={"email": email, "password": password})
        assert r.status_code == 201, r.text
        token = r.json()["access_token"]

        from src.tracker.core.security import decode_token

        return token, int(decode_token(token)["sub"])

    return _call


@pytest.fixture
async def user(register_user, auth_headers):
    """(headers, user_id) for a fresh free-tier user."""
    token, user_id = await register_user()
    return auth_headers(token), user_id


@pytest.fixture
async def weight_chart(client, user):
    """
    A chart with three weekly weigh-ins (2024-01-01/08/15), posted out of order.
    """
    headers, _ = user
    r = await client.post("/api/charts", headers=headers, json={"name": "Weight", "category": "Health"})
    assert r.status_code == 201, r.text
    chart_id = r.json()["id"]

    for value, day in [(69.2, "2024-01-15"), (70.5, "2024-01-01"), (69.8, "2024-01-08")]:
        r = await client.post(
            f"/api/charts/{chart_id}/data-points",
            headers=headers,
            json={"measurement": value, "date": f"{day}T08:00:00Z", "name": "weigh-in"},
        )
        assert r.status_code == 201, r.text

    return chart_id
