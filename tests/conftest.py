"""
Test configuration for pytest
"""

import pytest
import os
import uuid
from typing import AsyncGenerator, Dict, Optional

from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

# Test environment variables
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["JWT_SECRET_KEY"] = "test-jwt-secret"
os.environ["ENVIRONMENT"] = "test"
os.environ["DEBUG"] = "false"

from churchflow.core.auth import create_access_token, hash_password  # noqa: E402
from churchflow.core.database import get_session  # noqa: E402
from churchflow.core.tenancy import ChurchContext  # noqa: E402
from churchflow.main import app  # noqa: E402
from churchflow.models import Church, ChurchRole, ChurchUser, User  # noqa: E402
from churchflow.services.churches import create_church  # noqa: E402

# Hashing is slow; every fixture user shares one password
TEST_PASSWORD = "password123"
TEST_PASSWORD_HASH = hash_password(TEST_PASSWORD)


@pytest.fixture
async def engine():
    """In-memory SQLite engine shared by every connection of one test"""
    test_engine = create_async_engine(
        "sqlite+aiosqlite://",
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    # pysqlite's own transaction handling breaks SAVEPOINT; emit BEGIN ourselves
    @event.listens_for(test_engine.sync_engine, "connect")
    def do_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(test_engine.sync_engine, "begin")
    def do_begin(conn):
        conn.exec_driver_sql("BEGIN")

    async with test_engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    yield test_engine

    await test_engine.dispose()


@pytest.fixture
def session_maker(engine):
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db(session_maker) -> AsyncGenerator[AsyncSession, None]:
    """Create a clean database session for each test"""
    async with session_maker() as session:
        yield session


@pytest.fixture
async def client(session_maker) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client against the app, one database session per request"""
    async def override_get_session():
        async with session_maker() as session:
            yield session

    app.dependency_overrides[get_session] = override_get_session
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as test_client:
        yield test_client
    app.dependency_overrides.clear()


class Account:
    """A user with a membership, plus the headers to act as them"""

    def __init__(self, user: User, church: Church, role: ChurchRole):
        self.user = user
        self.church = church
        self.role = role
        self.headers: Dict[str, str] = {"Authorization": f"Bearer {create_access_token(user.id)}"}

    @property
    def context(self) -> ChurchContext:
        return ChurchContext(user_id=self.user.id, church_id=self.church.id, role=self.role)


@pytest.fixture
def make_account(session_maker):
    """Factory: ``await make_account("Grace")`` creates a church with its owner,
    ``await make_account(church=other.church, role=ChurchRole.VOLUNTEER)`` joins one"""
    async def factory(
        church_name: str = "Grace Community",
        church: Optional[Church] = None,
        role: ChurchRole = ChurchRole.OWNER,
    ) -> Account:
        async with session_maker() as session:
            user = User(
                email=f"{uuid.uuid4().hex[:12]}@example.com",
                password_hash=TEST_PASSWORD_HASH,
                name="Test User",
            )
            session.add(user)
            await session.flush()

            if church is None:
                church = await create_church(session, owner_id=user.id, name=church_name)
                role = ChurchRole.OWNER
            else:
                session.add(ChurchUser(church_id=church.id, user_id=user.id, role=role))
            await session.commit()
        return Account(user, church, role)

    return factory


@pytest.fixture
async def owner(make_account) -> Account:
    return await make_account("Grace Community")


@pytest.fixture
async def other_owner(make_account) -> Account:
    return await make_account("Hope Chapel")
