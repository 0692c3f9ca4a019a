# tests/conftest.py
from __future__ import annotations

import os
from collections.abc import Generator, Iterator
from typing import Any

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault("PYTEST_RUNNING", "true")

from parley_stage.api.v1 import dependencies as deps
from parley_stage.db.session import Base
from parley_stage.db.session import get_db as app_get_session
from parley_stage.main import app as fastapi_app
from parley_stage.models import Identity, Post
from parley_stage.services.content_filter import ContentFilter
from parley_stage.services.identity import NetworkAddressResolver
from tests.factories import (
    IDENTITY_HEADER,
    FakeReputationGate,
    make_identity,
    make_post,
)

TEST_DB_URL = "sqlite://"


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
    SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)
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
def fake_gate() -> FakeReputationGate:
    return FakeReputationGate()


@pytest.fixture()
def content_filter() -> ContentFilter:
    return ContentFilter(["spam"], anonymous_marker="££", anonymous_identity="1.1.1.1")


@pytest.fixture(autouse=True)
def override_dependencies(
    app: FastAPI,
    db_session: Session,
    fake_gate: FakeReputationGate,
    content_filter: ContentFilter,
) -> Iterator[None]:
    def _get_session_override() -> Generator[Session, None, None]:
        try:
            yield db_session
        except Exception:
            db_session.rollback()
            raise

    overrides: dict[Any, Any] = {
        app_get_session: _get_session_override,
        deps.get_reputation_gate_dep: lambda: fake_gate,
        deps.get_identity_resolver_dep: lambda: NetworkAddressResolver(header=IDENTITY_HEADER),
        deps.get_content_filter_dep: lambda: content_filter,
    }
    app.dependency_overrides.update(overrides)
    try:
        yield
    finally:
        for dependency in overrides:
            app.dependency_overrides.pop(dependency, None)


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


@pytest.fixture()
def author(db_session: Session) -> Identity:
    """An established identity who has already started a thread."""
    return make_identity(db_session, "198.51.100.20")


@pytest.fixture()
def author_thread(db_session: Session, author: Identity) -> Post:
    """A one-post thread written by ``author``."""
    return make_post(db_session, author.address, "first thread")
