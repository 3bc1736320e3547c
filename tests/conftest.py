"""
Configuración de fixtures para pytest.

Este módulo contiene fixtures reutilizables para todos los tests.
"""

import pytest
from typing import Generator, List
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool

from crud import CRUD
from tests.models import Base, User, Post, Membership, Bookmark, ApiKey


# ==================== Database Fixtures ====================

@pytest.fixture(scope="function")
def db_engine():
    """Create an in-memory SQLite database engine for testing."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    # Enable foreign keys for SQLite
    @event.listens_for(engine, "connect")
    def set_sqlite_pragma(dbapi_conn, connection_record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def db_session(db_engine) -> Generator[Session, None, None]:
    """Create a new database session for a test."""
    TestingSessionLocal = sessionmaker(
        autocommit=False,
        autoflush=False,
        bind=db_engine
    )
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def crud(db_session: Session) -> CRUD:
    """CRUD bound to the test session, committing every write."""
    return CRUD(db_session, autocommit=True)


# ==================== Data Fixtures ====================

@pytest.fixture
def users(db_session: Session) -> List[User]:
    """Three users: two active (Ana, Bob) and one inactive (Carla)."""
    rows = [
        User(name="Ana Torres", email="ana@example.com", age=30, active=True),
        User(name="Bob Stone", email="bob@example.org", age=None, active=True),
        User(name="Carla Mendez", email="carla@example.com", age=41, active=False),
    ]
    db_session.add_all(rows)
    db_session.commit()
    for row in rows:
        db_session.refresh(row)
    return rows


@pytest.fixture
def post(db_session: Session, users: List[User]) -> Post:
    """A post written by Ana."""
    instance = Post(title="Hello world", body="First post", user_id=users[0].id)
    db_session.add(instance)
    db_session.commit()
    db_session.refresh(instance)
    return instance


@pytest.fixture
def membership(db_session: Session, users: List[User]) -> Membership:
    """Ana owns the admins group."""
    instance = Membership(user_id=users[0].id, group="admins", role="owner")
    db_session.add(instance)
    db_session.commit()
    db_session.refresh(instance)
    return instance


@pytest.fixture
def bookmarks(db_session: Session) -> List[Bookmark]:
    """Two bookmarks whose columns share names with CRUD parameters."""
    rows = [
        Bookmark(url="https://example.com/a", page=3, attrs="bold", opts="pinned"),
        Bookmark(url="https://example.com/b", page=7, attrs="plain", opts="archived"),
    ]
    db_session.add_all(rows)
    db_session.commit()
    for row in rows:
        db_session.refresh(row)
    return rows


@pytest.fixture
def api_key(db_session: Session) -> ApiKey:
    """An API key with a generated UUID primary key."""
    instance = ApiKey(label="deploy")
    db_session.add(instance)
    db_session.commit()
    db_session.refresh(instance)
    return instance
