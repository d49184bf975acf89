"""Pytest configuration and fixtures for Member Import tests with real MongoDB."""

import os
import uuid
from collections.abc import AsyncGenerator

# No pause between submissions in tests; must be set before settings load
os.environ.setdefault("MEMBERIMPORT_IMPORT_SUBMIT_DELAY_MS", "0")

import pytest
import pytest_asyncio
from beanie import init_beanie
from httpx import ASGITransport, AsyncClient
from motor.motor_asyncio import AsyncIOMotorClient
from pymongo.errors import PyMongoError

from memberimport.database import get_document_models
from memberimport.schemas.import_schemas import CreatedMember, MemberRecord
from memberimport.services.import_service import SubmissionChannelError, SubmissionError

# MongoDB connection URL for tests (can be overridden with env var)
TEST_MONGODB_URL = os.environ.get("TEST_MONGODB_URL", "mongodb://localhost:27017")


class FakeMemberApi:
    """In-memory stand-in for the remote createMember operation.

    Records every submission. Members whose first name is in ``reject``
    are refused individually; once ``refuse_after`` members have been
    accepted the channel refuses everything.
    """

    def __init__(self, reject: set[str] | None = None, refuse_after: int | None = None):
        self.reject = reject or set()
        self.refuse_after = refuse_after
        self.submitted: list[MemberRecord] = []
        self.created: list[CreatedMember] = []

    async def __call__(self, record: MemberRecord) -> CreatedMember:
        if self.refuse_after is not None and len(self.created) >= self.refuse_after:
            raise SubmissionChannelError("Unauthorized")
        self.submitted.append(record)
        if record.first_name in self.reject:
            raise SubmissionError(f"Member {record.first_name} already exists")
        created = CreatedMember(
            id=f"member-{len(self.created) + 1}",
            firstName=record.first_name,
            lastName=record.last_name,
            email=record.email,
        )
        self.created.append(created)
        return created


@pytest.fixture
def member_api() -> FakeMemberApi:
    """A member API that accepts every record."""
    return FakeMemberApi()


@pytest_asyncio.fixture(scope="function")
async def mongo_client():
    """Create a MongoDB client for testing, skipping when no server is reachable."""
    client = AsyncIOMotorClient(TEST_MONGODB_URL, serverSelectionTimeoutMS=2000)
    try:
        await client.admin.command("ping")
    except PyMongoError:
        client.close()
        pytest.skip(f"MongoDB not available at {TEST_MONGODB_URL}")
    yield client
    client.close()


@pytest_asyncio.fixture(scope="function")
async def init_test_db(mongo_client):
    """Initialize Beanie with a unique test database, dropped after the test."""
    db_name = f"test_memberimport_{uuid.uuid4().hex[:8]}"
    db = mongo_client[db_name]

    await init_beanie(
        database=db,
        document_models=get_document_models(),
    )
    yield db

    await mongo_client.drop_database(db_name)


@pytest_asyncio.fixture(scope="function")
async def client(init_test_db, member_api) -> AsyncGenerator[AsyncClient, None]:
    """Create an async test client whose member API is ``member_api``."""
    from memberimport.main import app
    from memberimport.routers.import_router import get_member_submit

    # ASGITransport does not run the lifespan, so the database stays ours
    app.dependency_overrides[get_member_submit] = lambda: member_api
    transport = ASGITransport(app=app)
    try:
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            yield ac
    finally:
        app.dependency_overrides.clear()
