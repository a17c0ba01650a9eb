# tests/conftest.py
from __future__ import annotations

import os
from collections.abc import Callable, Generator, Iterator
from datetime import datetime, timedelta
from itertools import count

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault("DATABASE_URL", "sqlite://")

from townsquare.core.security import create_access_token
from townsquare.db.session import Base, build_engine
from townsquare.db.session import get_db as app_get_session
from townsquare.db.time import utcnow
from townsquare.main import app as fastapi_app
from townsquare.models import Comment, Community, Post, Report, User

TEST_DB_URL = "sqlite://"

_USER_COUNTER = count(1)
_COMMUNITY_COUNTER = count(1)


@pytest.fixture()
def engine() -> Generator[Engine, None, None]:
    # One in-memory database per test: services commit and roll back for real.
    engine = build_engine(TEST_DB_URL, poolclass=StaticPool)
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def db_session(engine: Engine) -> Iterator[Session]:
    SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


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
def now() -> datetime:
    """Reference time shared by a test and the rows it creates."""
    return utcnow()


@pytest.fixture()
def make_user(db_session: Session) -> Callable[..., User]:
    """Return a factory that persists users."""

    def _make(username: str | None = None) -> User:
        username = username or f"user{next(_USER_COUNTER)}"
        user = User(username=username, display_name=username.title())
        db_session.add(user)
        db_session.commit()
        return user

    return _make


@pytest.fixture()
def make_community(db_session: Session) -> Callable[..., Community]:
    def _make(creator: User, name: str | None = None) -> Community:
        index = next(_COMMUNITY_COUNTER)
        community = Community(
            slug=f"community-{index}",
            name=name or f"Community {index}",
            creator_user_id=creator.id,
        )
        db_session.add(community)
        db_session.commit()
        return community

    return _make


@pytest.fixture()
def make_post(db_session: Session, now: datetime) -> Callable[..., Post]:
    def _make(
        author: User,
        community: Community,
        *,
        title: str = "A thread worth reading",
        body: str | None = "Body text",
        upvotes: int = 0,
        downvotes: int = 0,
        age: timedelta = timedelta(hours=1),
    ) -> Post:
        post = Post(
            author_user_id=author.id,
            community_id=community.id,
            title=title,
            body_md=body,
            upvotes=upvotes,
            downvotes=downvotes,
            created_at=now - age,
        )
        db_session.add(post)
        db_session.commit()
        return post

    return _make


@pytest.fixture()
def make_comment(db_session: Session, now: datetime) -> Callable[..., Comment]:
    def _make(
        post: Post,
        author: User,
        *,
        body: str = "Interesting point",
        parent: Comment | None = None,
        age: timedelta = timedelta(minutes=5),
    ) -> Comment:
        comment = Comment(
            post_id=post.id,
            author_user_id=author.id,
            parent_id=parent.id if parent is not None else None,
            body=body,
            created_at=now - age,
        )
        db_session.add(comment)
        db_session.commit()
        return comment

    return _make


@pytest.fixture()
def make_report(db_session: Session) -> Callable[..., Report]:
    """Insert a pending report directly, bypassing intake validation."""

    def _make(
        reporter: User,
        target: Post | Comment,
        *,
        reason: str = "Harassment",
        age: timedelta = timedelta(0),
    ) -> Report:
        report = Report(
            reporter_user_id=reporter.id,
            target_type="post" if isinstance(target, Post) else "comment",
            target_id=target.id,
            reason=reason,
            created_at=utcnow() - age,
        )
        db_session.add(report)
        db_session.commit()
        return report

    return _make


@pytest.fixture()
def author(make_user: Callable[..., User]) -> User:
    return make_user("author")


@pytest.fixture()
def community(make_community: Callable[..., Community], make_user: Callable[..., User]) -> Community:
    return make_community(make_user("founder"), name="General")


@pytest.fixture()
def post(make_post: Callable[..., Post], author: User, community: Community) -> Post:
    return make_post(author, community, title="Is this allowed?", body="you are all idiots")


@pytest.fixture()
def jurors(make_user: Callable[..., User]) -> list[User]:
    return [make_user(f"juror{index}") for index in range(1, 7)]


@pytest.fixture()
def auth_headers() -> Callable[[User], dict[str, str]]:
    """Return a helper building bearer headers for a user."""

    def _headers(user: User) -> dict[str, str]:
        return {"Authorization": f"Bearer {create_access_token(user.id)}"}

    return _headers
