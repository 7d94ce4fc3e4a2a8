'''
Pytest configuration for the FastAPI application.

This file sets up fixtures for:
1. A fresh in-memory SQLite database and session for each test.
2. Instances of all service classes, pre-injected with the test session
   and a fixed clock.
3. An httpx client bound to the app with the same session and clock.
4. A small set of known users and subjects.
'''

import pytest
from typing import AsyncGenerator

import httpx
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, AsyncEngine
from sqlalchemy.pool import StaticPool

from tests.constants import (
    TEST_NOW,
    TEST_STUDENT_A_ID,
    TEST_STUDENT_B_ID,
    TEST_ADMIN_ID,
    TEST_STUDENT_A_EMAIL,
    TEST_STUDENT_B_EMAIL,
    TEST_ADMIN_EMAIL
)
from tests.database import factories

# --- Application Imports ---
from peer_tutoring_backend.main import app
from peer_tutoring_backend.database.engine import get_db_session, create_session_factory
from peer_tutoring_backend.database import models as db_models
from peer_tutoring_backend.services.request_store import RequestStore
from peer_tutoring_backend.services.request_service import RequestService
from peer_tutoring_backend.services.user_service import UserService
from peer_tutoring_backend.services.subject_service import SubjectService
from peer_tutoring_backend.services.time_service import TimeService, get_time_service


@pytest.fixture(scope="session")
def anyio_backend():
    """
    Override the default 'anyio_backend' fixture.
    1. Forces the backend to 'asyncio' (aiosqlite has no trio support).
    2. Promotes the scope to 'session'.
    """
    return "asyncio"


# --- 1. Database ---

@pytest.fixture(scope="function")
async def db_engine() -> AsyncGenerator[AsyncEngine, None]:
    """A private in-memory database, with every table created."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(db_models.Base.metadata.create_all)
    try:
        yield engine
    finally:
        await engine.dispose()


@pytest.fixture(scope="function")
async def db_session(db_engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """
    Provides a single session for the test, also used by the factories.
    Nothing is committed; the database disappears with the engine.
    """
    session = create_session_factory(db_engine)()
    factories.test_db_session = session.sync_session
    try:
        yield session
    finally:
        factories.test_db_session = None
        await session.rollback()
        await session.close()


# --- 2. Service Fixtures ---

@pytest.fixture(scope="function")
def time_service() -> TimeService:
    """A clock frozen at TEST_NOW (a Wednesday)."""
    return TimeService(simulation_datetime=TEST_NOW)

@pytest.fixture(scope="function")
def request_store(db_session: AsyncSession) -> RequestStore:
    return RequestStore(db=db_session)

@pytest.fixture(scope="function")
def request_service(request_store: RequestStore, time_service: TimeService) -> RequestService:
    return RequestService(store=request_store, time_service=time_service)

@pytest.fixture(scope="function")
def user_service(db_session: AsyncSession, request_store: RequestStore) -> UserService:
    return UserService(db=db_session, request_store=request_store)

@pytest.fixture(scope="function")
def subject_service(db_session: AsyncSession) -> SubjectService:
    return SubjectService(db=db_session)


# --- 3. API Client ---

@pytest.fixture(scope="function")
async def client(
    db_session: AsyncSession,
    time_service: TimeService
) -> AsyncGenerator[httpx.AsyncClient, None]:
    """
    An httpx client talking to the app in-process.
    The app's lifespan is not run: the session and clock are injected instead.
    """
    async def override_get_db_session() -> AsyncGenerator[AsyncSession, None]:
        yield db_session

    app.dependency_overrides[get_db_session] = override_get_db_session
    app.dependency_overrides[get_time_service] = lambda: time_service

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as test_client:
        yield test_client

    app.dependency_overrides.clear()


# --- 4. Data Fixtures ---

@pytest.fixture(scope="function")
async def test_subject_orm(db_session: AsyncSession) -> db_models.Subjects:
    subject = factories.SubjectFactory(code="MATHEMATICS", display_name="Mathematics")
    await db_session.flush()
    return subject

@pytest.fixture(scope="function")
async def test_other_subject_orm(db_session: AsyncSession) -> db_models.Subjects:
    subject = factories.SubjectFactory(code="PHYSICS", display_name="Physics")
    await db_session.flush()
    return subject

@pytest.fixture(scope="function")
async def test_student_a_orm(db_session: AsyncSession) -> db_models.Users:
    user = factories.UserFactory(id=TEST_STUDENT_A_ID, email=TEST_STUDENT_A_EMAIL, full_name="Alice Example")
    await db_session.flush()
    return user

@pytest.fixture(scope="function")
async def test_student_b_orm(db_session: AsyncSession) -> db_models.Users:
    user = factories.UserFactory(id=TEST_STUDENT_B_ID, email=TEST_STUDENT_B_EMAIL, full_name="Bob Example", year_group=12)
    await db_session.flush()
    return user

@pytest.fixture(scope="function")
async def test_admin_orm(db_session: AsyncSession) -> db_models.Users:
    user = factories.AdminFactory(id=TEST_ADMIN_ID, email=TEST_ADMIN_EMAIL, full_name="Ada Admin")
    await db_session.flush()
    return user
