import pytest
import random
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker
from models.models import Base
from models.transaction import TransactionManager
from main import app, build_services
from fakes import (
    FakePullRequestRepository, FakeTeamRepository, FakeTransactionManager,
    FakeUserRepository, InMemoryStore
)
from services.pull_request import PullRequestService
from services.selector import ReviewerSelector
from services.teams import TeamService
from services.users import UserService
import os


# Per-test SQLite file unless a real database is given
TEST_DATABASE_URL = os.getenv("TEST_DATABASE_URL")


@pytest.fixture(scope="function")
async def db_engine(tmp_path):
    """Create a fresh schema for each test."""
    url = TEST_DATABASE_URL or f"sqlite+aiosqlite:///{tmp_path / 'test.db'}"
    engine = create_async_engine(url, echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture(scope="function")
def session_maker(db_engine):
    return async_sessionmaker(db_engine, expire_on_commit=False)


@pytest.fixture(scope="function")
def tm(session_maker):
    return TransactionManager(session_maker)


@pytest.fixture(scope="function")
async def client(session_maker):
    """Create a test client bound to the test database."""
    app.state.services = build_services(session_maker, rng=random.Random(42))
    try:
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
            yield ac
    finally:
        del app.state.services


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def fake_tx(store):
    return FakeTransactionManager(store)


@pytest.fixture
def selector():
    return ReviewerSelector(random.Random(1234))


@pytest.fixture
def team_service(store, fake_tx):
    return TeamService(FakeTeamRepository(store), FakeUserRepository(store), fake_tx)


@pytest.fixture
def user_service(store, fake_tx):
    return UserService(
        FakeUserRepository(store), FakeTeamRepository(store), FakePullRequestRepository(store), fake_tx
    )


@pytest.fixture
def pr_service(store, fake_tx, selector):
    return PullRequestService(FakePullRequestRepository(store), FakeUserRepository(store), fake_tx, selector)
