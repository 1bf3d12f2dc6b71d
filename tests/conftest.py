"""Pytest configuration and fixtures for school_auth.

Environment is set before any school_auth import that reads settings. Unit
and API tests run against in-memory fakes (tests/fakes.py); repository tests
use an in-memory SQLite database (sqlite+aiosqlite).
"""

import os

os.environ.setdefault("JWT_ACCESS_SECRET", "test-access-secret-0123456789abcdef")
os.environ.setdefault("JWT_REFRESH_SECRET", "test-refresh-secret-fedcba9876543210")
os.environ["OTP_DELIVERY_CHANNEL"] = "log"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["DATABASE_URL"] = ""

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from school_auth.application.dtos.session import RequestContext  # noqa: E402
from school_auth.application.services.otp_service import OtpService  # noqa: E402
from school_auth.application.services.session_service import SessionService  # noqa: E402
from school_auth.core.config import get_settings  # noqa: E402
from school_auth.domain.permissions import Permissions  # noqa: E402
from school_auth.infrastructure.persistence import models  # noqa: E402, F401
from school_auth.infrastructure.persistence.database import Base  # noqa: E402
from school_auth.infrastructure.security import (  # noqa: E402
    BcryptPasswordHasher,
    TokenCodec,
)
from tests.fakes import InMemoryStore, RecordingOtpSender  # noqa: E402

get_settings.cache_clear()

PASSWORD = "secret1"
SCHOOL_ID = "school-greenwood"
OTHER_SCHOOL_ID = "school-riverside"


@pytest.fixture(scope="session")
def hasher() -> BcryptPasswordHasher:
    """Low-cost bcrypt for fast tests."""
    return BcryptPasswordHasher(rounds=4)


@pytest.fixture(scope="session")
def password_hash(hasher: BcryptPasswordHasher) -> str:
    return hasher.hash_password(PASSWORD)


@pytest.fixture
def codec() -> TokenCodec:
    return TokenCodec.from_settings(get_settings())


@pytest.fixture
def store() -> InMemoryStore:
    """Store seeded with the platform DEFAULT and PLATFORM_ADMIN roles and three school roles."""
    s = InMemoryStore()
    s.add_role("DEFAULT", [], role_id="role-default")
    s.add_role(
        "PLATFORM_ADMIN",
        [Permissions.PLATFORM_LOGIN, Permissions.PLATFORM_SCHOOL_ASSIGN],
        role_id="role-admin",
    )
    s.add_role(
        "TEACHER",
        [Permissions.ATTENDANCE_MARK, Permissions.STUDENT_VIEW],
        school_id=SCHOOL_ID,
        role_id="role-teacher",
    )
    s.add_role(
        "STUDENT",
        [Permissions.ATTENDANCE_VIEW],
        school_id=SCHOOL_ID,
        role_id="role-student",
    )
    s.add_role(
        "SCHOOL_ADMIN",
        [Permissions.STUDENT_CREATE, Permissions.TEACHER_CREATE],
        school_id=SCHOOL_ID,
        role_id="role-school-admin",
    )
    return s


@pytest.fixture
def sender() -> RecordingOtpSender:
    return RecordingOtpSender()


@pytest.fixture
def otp_service(store: InMemoryStore, sender: RecordingOtpSender) -> OtpService:
    return OtpService(store.otp_repo, sender, store.uow, delivery_timeout=0.5)


@pytest.fixture
def service(
    store: InMemoryStore,
    otp_service: OtpService,
    codec: TokenCodec,
    hasher: BcryptPasswordHasher,
) -> SessionService:
    return SessionService(
        user_repo=store.user_repo,
        role_repo=store.role_repo,
        refresh_token_repo=store.refresh_token_repo,
        otp_service=otp_service,
        token_codec=codec,
        password_hasher=hasher,
        uow=store.uow,
    )


@pytest.fixture
def platform() -> RequestContext:
    return RequestContext.platform()


@pytest.fixture
def school() -> RequestContext:
    return RequestContext.school(SCHOOL_ID, "greenwood")


@pytest.fixture
def app(service: SessionService, codec: TokenCodec):
    """FastAPI app wired to the in-memory service (no database)."""
    from school_auth.api.v1.dependencies import get_session_service, get_token_codec
    from school_auth.main import create_app

    application = create_app()
    application.dependency_overrides[get_session_service] = lambda: service
    application.dependency_overrides[get_token_codec] = lambda: codec
    yield application
    application.dependency_overrides.clear()


@pytest.fixture
async def client(app) -> AsyncClient:
    """Async HTTP client against the FastAPI app (ASGI)."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
async def db_session() -> AsyncSession:
    """Session on a fresh in-memory SQLite database with all tables created."""
    engine = create_async_engine("sqlite+aiosqlite://")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    session_factory = async_sessionmaker(engine, expire_on_commit=False, autoflush=False)
    async with session_factory() as session:
        yield session
    await engine.dispose()
