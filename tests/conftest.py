"""Shared fixtures: an app wired to in-memory SQLite and a fake identity provider."""
import secrets
import time
from typing import Any, Dict, Optional

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient

from backoffice.app.core.config import Settings
from backoffice.app.db import models  # noqa: F401 - import to register models
from backoffice.app.db.async_session import create_engine_for_url
from backoffice.app.db.base import Base
from backoffice.app.main import create_app
from backoffice.app.services.identity import TokenVerificationError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

ADMIN_EMAIL = "admin@kuppi.lk"
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


class FakeTokenVerifier:
    """Stands in for the identity provider: knows the tokens it issued."""

    def __init__(self):
        self._claims: Dict[str, Dict[str, Any]] = {}
        self.calls = 0

    def issue(
        self,
        email: Optional[str] = ADMIN_EMAIL,
        issued_at: Optional[float] = None,
        uid: str = "firebase-admin-uid",
    ) -> str:
        token = "fake." + secrets.token_urlsafe(96)
        claims: Dict[str, Any] = {"sub": uid, "iat": int(issued_at if issued_at is not None else time.time())}
        if email is not None:
            claims["email"] = email
        self._claims[token] = claims
        return token

    async def verify(self, token: str) -> Dict[str, Any]:
        self.calls += 1
        try:
            return dict(self._claims[token])
        except KeyError:
            raise TokenVerificationError("invalid", "Unknown token")


def make_settings(**overrides) -> Settings:
    values = dict(
        _env_file=None,
        database_url=TEST_DATABASE_URL,
        admin_emails=ADMIN_EMAIL,
        firebase_project_id="kuppi-test",
        debug=True,
    )
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def verifier() -> FakeTokenVerifier:
    return FakeTokenVerifier()


@pytest.fixture
def app_settings() -> Settings:
    return make_settings()


@pytest.fixture
def client(app_settings, verifier):
    app = create_app(app_settings, token_verifier=verifier)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def admin_headers(verifier) -> Dict[str, str]:
    return {"Authorization": f"Bearer {verifier.issue()}"}


@pytest_asyncio.fixture
async def session():
    """A session on a fresh in-memory database, for store-level tests."""
    engine = create_engine_for_url(TEST_DATABASE_URL)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_maker = async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)
    async with session_maker() as db_session:
        yield db_session

    await engine.dispose()
