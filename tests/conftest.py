"""Shared test fixtures.

Tests run against an in-memory SQLite database holding the game tables,
a frozen clock and a mocked email provider. Redis is never initialized,
so rate limiting lets every request through.
"""

from __future__ import annotations

import os
import tempfile
from collections.abc import AsyncGenerator, Awaitable, Callable
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
import structlog
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from ucp.auth.jwt import create_access_token, reset_keys
from ucp.auth.password import hash_password
from ucp.auth.tokens import TokenAuthority
from ucp.clock import FrozenClock
from ucp.config import get_settings
from ucp.db.base import Base
from ucp.db.models import Account, Activation
from ucp.db.repository import UcpRepository
from ucp.email.dispatch import NotificationDispatcher

TEST_SECRET = "test-action-secret"
NOW = 1_700_000_000
API = "/internal-ucp-api/v1"
PASSWORD = "Parola#123"


def _ensure_test_keys() -> None:
    """Generate an RSA key pair for session tokens and point the settings at it."""
    if os.environ.get("UCP_JWT_PRIVATE_KEY_PATH", "").startswith(tempfile.gettempdir()):
        return

    key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    tmpdir = tempfile.mkdtemp(prefix="ucp_test_keys_")
    private_path = os.path.join(tmpdir, "jwt_private.pem")
    public_path = os.path.join(tmpdir, "jwt_public.pem")
    with open(private_path, "wb") as f:
        f.write(
            key.private_bytes(
                encoding=serialization.Encoding.PEM,
                format=serialization.PrivateFormat.PKCS8,
                encryption_algorithm=serialization.NoEncryption(),
            )
        )
    with open(public_path, "wb") as f:
        f.write(
            key.public_key().public_bytes(
                encoding=serialization.Encoding.PEM,
                format=serialization.PublicFormat.SubjectPublicKeyInfo,
            )
        )

    os.environ["UCP_JWT_PRIVATE_KEY_PATH"] = private_path
    os.environ["UCP_JWT_PUBLIC_KEY_PATH"] = public_path
    os.environ["UCP_ACTION_TOKEN_SECRET"] = TEST_SECRET
    os.environ["UCP_LOG_FORMAT"] = "console"

    get_settings.cache_clear()
    reset_keys()


_ensure_test_keys()


# ---------------------------------------------------------------------------
# Database
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    eng = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield eng
    await eng.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory: async_sessionmaker[AsyncSession]) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest.fixture
def repository(db_session: AsyncSession) -> UcpRepository:
    return UcpRepository(db_session)


@pytest.fixture
def seed_account(
    session_factory: async_sessionmaker[AsyncSession],
) -> Callable[..., Awaitable[None]]:
    """Insert an account directly, bypassing registration."""

    async def _seed(
        username: str,
        email: str | None = None,
        password: str = PASSWORD,
        activated: int = Activation.CONFIRMED,
        admin: int = 0,
        tester: int = 0,
        ip: str | None = "10.0.0.1",
        characters: int = 0,
    ) -> None:
        async with session_factory() as session:
            session.add(
                Account(
                    username=username,
                    email=email or f"{username.lower()}@example.com",
                    password_hash=hash_password(password),
                    activated=activated,
                    admin=admin,
                    tester=tester,
                    ip=ip,
                    characters=characters,
                )
            )
            await session.commit()

    return _seed


# ---------------------------------------------------------------------------
# Collaborators
# ---------------------------------------------------------------------------


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock(NOW)


@pytest.fixture
def tokens() -> TokenAuthority:
    return TokenAuthority(TEST_SECRET)


@pytest.fixture
def mock_email_service() -> MagicMock:
    """Email service whose sends succeed without touching the network."""
    mock_service = MagicMock()
    mock_service.send_template = AsyncMock(return_value=True)
    return mock_service


@pytest_asyncio.fixture
async def notifier(mock_email_service: MagicMock) -> AsyncGenerator[NotificationDispatcher, None]:
    dispatcher = NotificationDispatcher(mock_email_service)
    yield dispatcher
    await dispatcher.drain()


@pytest.fixture
def account_service(repository, tokens, notifier, clock):
    from ucp.accounts.service import AccountService

    return AccountService(
        repository=repository,
        tokens=tokens,
        notifier=notifier,
        clock=clock,
        public_api_url="https://app.ro/internal-ucp-api/v1",
        logger=structlog.get_logger("test"),
    )


@pytest.fixture
def character_service(repository, notifier):
    from ucp.characters.service import CharacterService

    return CharacterService(repository=repository, notifier=notifier, logger=structlog.get_logger("test"))


# ---------------------------------------------------------------------------
# HTTP
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def client(
    session_factory: async_sessionmaker[AsyncSession],
    clock: FrozenClock,
    tokens: TokenAuthority,
    notifier: NotificationDispatcher,
) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client over the app with the database, clock and notifier overridden."""
    from ucp.auth.dependencies import get_clock, get_notifier, get_token_authority
    from ucp.database import get_session
    from ucp.main import create_app

    app = create_app()

    async def _session() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_session] = _session
    app.dependency_overrides[get_clock] = lambda: clock
    app.dependency_overrides[get_notifier] = lambda: notifier
    app.dependency_overrides[get_token_authority] = lambda: tokens

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


def auth_headers(username: str, is_admin: bool = False, is_tester: bool = False) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(username, is_admin, is_tester)}"}


@pytest.fixture
def player_headers() -> dict[str, str]:
    return auth_headers("alice")


@pytest.fixture
def tester_headers() -> dict[str, str]:
    return auth_headers("tina", is_tester=True)


@pytest.fixture
def admin_headers() -> dict[str, str]:
    return auth_headers("adam", is_admin=True)


@pytest.fixture
def make_headers() -> Callable[..., dict[str, str]]:
    return auth_headers
