# tests/conftest.py
from __future__ import annotations

from collections.abc import Callable, Generator, Iterator
from datetime import datetime, timedelta
from itertools import count

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from threadline.db.session import Base
from threadline.db.session import get_db as app_get_session
from threadline.db.time import utcnow
from threadline.main import app as fastapi_app
from threadline.models import Post, User
from threadline.repositories.engagement_repo import EngagementRepository
from threadline.services.posts import PostService

TEST_DB_URL = "sqlite://"

_USERNAME_COUNTER = count(1)


@pytest.fixture(scope="session")
def engine() -> Generator[Engine, None, None]:
    engine = create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def db_session(engine: Engine) -> Iterator[Session]:
    # Services commit their own units of work, so isolation comes from
    # emptying every table afterwards rather than from an outer transaction.
    SessionLocal = sessionmaker(
        bind=engine,
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
    )
    session = SessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()
        with engine.begin() as cleanup_conn:
            for table in reversed(Base.metadata.sorted_tables):
                cleanup_conn.execute(table.delete())


@pytest.fixture()
def repo(db_session: Session) -> EngagementRepository:
    """Return a repository bound to the test session."""
    return EngagementRepository(db_session)


@pytest.fixture(scope="session")
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture(autouse=True)
def override_session_dependency(app: FastAPI, db_session: Session) -> Iterator[None]:
    def _get_session_override() -> Generator[Session, None, None]:
        yield db_session

    app.dependency_overrides[app_get_session] = _get_session_override
    try:
        yield
    finally:
        app.dependency_overrides.pop(app_get_session, None)


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


@pytest.fixture()
def clock() -> Callable[[], datetime]:
    """Return a callable yielding strictly increasing recent timestamps."""
    start = utcnow() - timedelta(minutes=30)
    ticks = count()

    def _next() -> datetime:
        return start + timedelta(seconds=next(ticks))

    return _next


@pytest.fixture()
def make_user(repo: EngagementRepository) -> Callable[..., User]:
    """Return a factory that persists users."""

    def _make(username: str | None = None, display_name: str | None = None) -> User:
        with repo.unit_of_work():
            user = repo.create_user(
                username=username or f"user{next(_USERNAME_COUNTER)}",
                display_name=display_name,
            )
        return user

    return _make


@pytest.fixture()
def make_post(
    repo: EngagementRepository,
    clock: Callable[[], datetime],
) -> Callable[..., Post]:
    """Return a factory that authors posts through the post service."""
    service = PostService(repo)

    def _make(
        author: User,
        content: str = "Hello, thread",
        parent: Post | None = None,
        created_at: datetime | None = None,
    ) -> Post:
        return service.create_post(
            author.id,
            content,
            parent_post_id=parent.id if parent is not None else None,
            created_at=created_at or clock(),
        )

    return _make


@pytest.fixture()
def test_user(make_user: Callable[..., User]) -> User:
    """Create and return a persisted test user."""
    return make_user("alice", "Alice")


@pytest.fixture()
def other_user(make_user: Callable[..., User]) -> User:
    """Create and return a second persisted user."""
    return make_user("bob", "Bob")


@pytest.fixture()
def test_post(make_post: Callable[..., Post], test_user: User) -> Post:
    """Create a baseline root post for tests."""
    return make_post(test_user, "Test post content")
