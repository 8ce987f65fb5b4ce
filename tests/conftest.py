# tests/conftest.py
from __future__ import annotations

import os
from collections.abc import Callable, Generator, Iterator
from itertools import count
from typing import Any

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite://")

from onthebell.core.errors import ExternalDependencyError
from onthebell.core.roles import Role
from onthebell.core.security import create_access_token
from onthebell.db.session import Base
from onthebell.db.session import get_db as app_get_session
from onthebell.main import app as fastapi_app
from onthebell.models import Comment, Post, User
from onthebell.services.storage import get_document_storage

TEST_DB_URL = "sqlite://"

_EMAIL_COUNTER = count(1)


class FakeDocumentStorage:
    """In-memory document store recording deletions."""

    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.deleted: list[str] = []

    def delete(self, reference: str) -> None:
        if self.fail:
            raise ExternalDependencyError("storage unavailable")
        self.deleted.append(reference)


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

        # Ensure each test sees a clean database even if commits occurred.
        with engine.begin() as cleanup_conn:
            for table in reversed(Base.metadata.sorted_tables):
                cleanup_conn.execute(table.delete())


@pytest.fixture(scope="session")
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture()
def storage() -> FakeDocumentStorage:
    return FakeDocumentStorage()


@pytest.fixture(autouse=True)
def override_dependencies(
    app: FastAPI,
    db_session: Session,
    storage: FakeDocumentStorage,
) -> Iterator[None]:
    def _get_session_override() -> Generator[Session, None, None]:
        yield db_session

    app.dependency_overrides[app_get_session] = _get_session_override
    app.dependency_overrides[get_document_storage] = lambda: storage
    try:
        yield
    finally:
        app.dependency_overrides.pop(app_get_session, None)
        app.dependency_overrides.pop(get_document_storage, None)


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


@pytest.fixture()
def make_user(db_session: Session) -> Callable[..., User]:
    """Return a factory persisting users with the given role and attributes."""

    def _make_user(role: Role = Role.user, **fields: Any) -> User:
        n = next(_EMAIL_COUNTER)
        fields.setdefault("email", f"member{n}@example.com")
        fields.setdefault("display_name", f"Member {n}")
        user = User(role=role.value, **fields)
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return _make_user


@pytest.fixture()
def test_user(make_user: Callable[..., User]) -> User:
    """Create and return a regular community member."""
    return make_user(display_name="Test User")


@pytest.fixture()
def other_user(make_user: Callable[..., User]) -> User:
    """Create and return a second regular member."""
    return make_user(display_name="Other User")


@pytest.fixture()
def moderator(make_user: Callable[..., User]) -> User:
    return make_user(Role.moderator, display_name="Mod")


@pytest.fixture()
def admin(make_user: Callable[..., User]) -> User:
    return make_user(Role.admin, display_name="Admin")


@pytest.fixture()
def super_admin(make_user: Callable[..., User]) -> User:
    return make_user(Role.super_admin, display_name="Super Admin")


def auth_headers(user: User) -> dict[str, str]:
    token = create_access_token(user.id)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def headers_for() -> Callable[[User], dict[str, str]]:
    """Return a helper building bearer headers for any user."""
    return auth_headers


@pytest.fixture()
def auth_token(test_user: User) -> dict[str, str]:
    """Return authorization headers for the primary test user."""
    return auth_headers(test_user)


@pytest.fixture()
def admin_token(admin: User) -> dict[str, str]:
    return auth_headers(admin)


@pytest.fixture()
def moderator_token(moderator: User) -> dict[str, str]:
    return auth_headers(moderator)


@pytest.fixture()
def test_post(db_session: Session, other_user: User) -> Post:
    """Create a post written by ``other_user``."""
    post = Post(
        author_id=other_user.id,
        title="Free firewood",
        body="Pick up from Drysdale",
        category="free_items",
    )
    db_session.add(post)
    db_session.commit()
    db_session.refresh(post)
    return post


@pytest.fixture()
def test_comment(db_session: Session, test_post: Post, other_user: User) -> Comment:
    comment = Comment(post_id=test_post.id, author_id=other_user.id, content="Still available?")
    db_session.add(comment)
    db_session.commit()
    db_session.refresh(comment)
    return comment
