# tests/conftest.py: shared test fixtures
import os

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["JWT_SECRET"] = "test-secret-key-for-unit-tests-only-min-32-chars"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["LOG_LEVEL"] = "WARNING"

from planner.core.config import settings
from planner.core.jwt_config import create_session_token
from planner.db.session import Database
from planner.main import create_app
from planner.services.group_services import create_group
from planner.services.user_service import create_user


class FakeMailer:
    """Records outgoing mail instead of talking to SMTP."""

    def __init__(self, deliver: bool = True):
        self.deliver = deliver
        self.sent = []

    async def send_email(self, to, subject, text=None, html=None):
        self.sent.append({"to": to, "subject": subject, "text": text, "html": html})
        return self.deliver

    async def send_password_reset_email(self, email, temp_password):
        self.sent.append({"to": email, "temp_password": temp_password})
        return self.deliver


@pytest_asyncio.fixture(scope="function")
async def database(tmp_path):
    db = Database(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    await db.ensure_schema()
    yield db
    await db.dispose()


@pytest_asyncio.fixture(scope="function")
async def db_session(database):
    async with database.session() as session:
        yield session


@pytest.fixture
def mailer():
    return FakeMailer()


@pytest_asyncio.fixture(scope="function")
async def client(database, mailer):
    app = create_app(database, mailer=mailer)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def make_user(db_session):
    """Factory: ``await make_user("alice")`` registers alice@example.com / secret123."""

    async def _make(username, password="secret123", full_name=None):
        return await create_user(
            db_session,
            username=username,
            email=f"{username}@example.com",
            password=password,
            full_name=full_name,
        )

    return _make


@pytest_asyncio.fixture
async def alice(make_user):
    return await make_user("alice", full_name="Alice Admin")


@pytest_asyncio.fixture
async def bob(make_user):
    return await make_user("bob", full_name="Bob Member")


@pytest_asyncio.fixture
async def carol(make_user):
    return await make_user("carol")


@pytest_asyncio.fixture
async def group(db_session, alice):
    """A group created by alice, who is its admin."""
    return await create_group(db_session, name="Household", creator_id=alice.id)


def auth_headers(user) -> dict:
    """Session cookie for ``user``, sent as a request header."""
    token = create_session_token(user.id)
    return {"Cookie": f"{settings.SESSION_COOKIE_NAME}={token}"}
