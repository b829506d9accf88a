# tests/conftest.py
from __future__ import annotations

import os
from collections.abc import Callable, Generator, Iterator, Sequence
from itertools import count
from typing import Any

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault("SECRET_KEY", "test-secret-key-for-pulsevote")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("PUBLIC_BASE_URL", "https://polls.example.com")

from pulsevote.core.security import create_access_token
from pulsevote.db.session import Base
from pulsevote.db.session import get_db as app_get_session
from pulsevote.db.time import utcnow
from pulsevote.main import app as fastapi_app
from pulsevote.models import (
    AppRole,
    Group,
    GroupMember,
    GroupRole,
    GroupType,
    Preference,
    Profile,
    Survey,
    SurveyOption,
    UserRole,
)

TEST_DB_URL = "sqlite://"

_EMAIL_COUNTER = count(1)


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
    connection = engine.connect()
    transaction = connection.begin()
    # Repository commits and rollbacks map onto SAVEPOINTs inside the outer transaction.
    SessionLocal = sessionmaker(
        bind=connection,
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
        join_transaction_mode="create_savepoint",
    )
    session = SessionLocal()

    try:
        yield session
    finally:
        session.close()

        if transaction.is_active:
            transaction.rollback()
        connection.close()

        # Ensure each test sees a clean database even if commits occurred.
        with engine.begin() as cleanup_conn:
            for table in reversed(Base.metadata.sorted_tables):
                cleanup_conn.execute(table.delete())


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


def _make_profile(db_session: Session, display_name: str, email: str | None = None) -> Profile:
    profile = Profile(
        email=email or f"user{next(_EMAIL_COUNTER)}@example.com",
        display_name=display_name,
        country="US",
    )
    db_session.add(profile)
    db_session.flush()
    db_session.refresh(profile)
    return profile


def auth_headers(profile: Profile) -> dict[str, str]:
    """Return bearer headers for ``profile``."""
    return {"Authorization": f"Bearer {create_access_token(profile.id)}"}


@pytest.fixture()
def test_user(db_session: Session) -> Iterator[Profile]:
    """Create and return the primary signed-in viewer."""
    yield _make_profile(db_session, "Test User", "test.user@example.com")


@pytest.fixture()
def other_user(db_session: Session) -> Iterator[Profile]:
    """Create and return a second viewer."""
    yield _make_profile(db_session, "Other User", "other.user@example.com")


@pytest.fixture()
def admin_user(db_session: Session) -> Iterator[Profile]:
    """Create a profile holding the admin role."""
    profile = _make_profile(db_session, "Admin", "admin@example.com")
    db_session.add(UserRole(user_id=profile.id, role=AppRole.ADMIN))
    db_session.flush()
    yield profile


@pytest.fixture()
def auth_token(test_user: Profile) -> dict[str, str]:
    """Return authorization headers for the primary test user."""
    return auth_headers(test_user)


@pytest.fixture()
def other_auth_token(other_user: Profile) -> dict[str, str]:
    """Return authorization headers for the secondary test user."""
    return auth_headers(other_user)


@pytest.fixture()
def admin_token(admin_user: Profile) -> dict[str, str]:
    """Return authorization headers for the admin."""
    return auth_headers(admin_user)


@pytest.fixture()
def preferences(db_session: Session) -> Iterator[dict[str, Preference]]:
    """Seed a small tag catalog keyed by name."""
    rows = {
        name: Preference(name=name, icon=icon)
        for name, icon in (("Cooking", "🍳"), ("Sports", "⚽"), ("Music", "🎵"))
    }
    db_session.add_all(rows.values())
    db_session.flush()
    yield rows


SurveyFactory = Callable[..., Survey]


@pytest.fixture()
def make_survey(db_session: Session, test_user: Profile) -> SurveyFactory:
    """Return a factory persisting a survey with ``(text, votes)`` options."""
    def _factory(
        title: str = "Best pizza topping?",
        options: Sequence[tuple[str, int]] = (("Cheese", 0), ("Pineapple", 0)),
        **fields: Any,
    ) -> Survey:
        fields.setdefault("author_id", test_user.id)
        fields.setdefault("is_published", True)
        fields.setdefault("created_at", utcnow())
        survey = Survey(title=title, **fields)
        survey.options = [
            SurveyOption(option_text=text, vote_count=votes, position=index)
            for index, (text, votes) in enumerate(options)
        ]
        db_session.add(survey)
        db_session.flush()
        db_session.refresh(survey)
        return survey

    return _factory


@pytest.fixture()
def survey(make_survey: SurveyFactory) -> Survey:
    """A published single-answer survey with options [A: 3 votes, B: 1 vote]."""
    return make_survey(title="Pick one", options=(("A", 3), ("B", 1)))


@pytest.fixture()
def make_group(db_session: Session, test_user: Profile) -> Callable[..., Group]:
    """Return a factory persisting a group owned by ``test_user``."""

    def _factory(
        name: str = "The Smiths",
        group_type: GroupType = GroupType.FAMILY,
        members: Sequence[tuple[Profile, GroupRole]] = (),
    ) -> Group:
        group = Group(name=name, type=group_type, owner_id=test_user.id)
        group.members = [GroupMember(user_id=test_user.id, role=GroupRole.OWNER)]
        group.members.extend(
            GroupMember(user_id=profile.id, role=role) for profile, role in members
        )
        db_session.add(group)
        db_session.flush()
        db_session.refresh(group)
        return group

    return _factory


@pytest.fixture()
def headers_for() -> Callable[[Profile], dict[str, str]]:
    """Return a helper building bearer headers for any profile."""
    return auth_headers
