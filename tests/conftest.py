"""
pytest Fixtures for Book Catalog Tests

Database fixtures use a fresh SQLite in-memory database per test. The
rating coordinator commits and rolls back for real, so tests cannot be
isolated by wrapping them in an outer transaction; recreating the schema
is cheap enough at this size.

SQLite ignores FOR UPDATE. Row-lock behavior is covered separately by
test_concurrency.py against PostgreSQL.
"""

# =============================================================================
# TEST ENVIRONMENT SETUP
# =============================================================================
# Set environment variables BEFORE importing the app
import os

os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["SECRET_KEY"] = "test-secret-key-for-unit-tests-at-least-32-characters-long"

from collections.abc import Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from catalog.database import Base, get_db
from catalog.main import app
from catalog.models import Account, Book
from catalog.services.security import create_access_token


def _enable_foreign_keys(dbapi_connection, connection_record) -> None:
    # SQLite only enforces ON DELETE CASCADE with this pragma
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


# =============================================================================
# DATABASE FIXTURES
# =============================================================================


@pytest.fixture
def engine():
    """
    SQLite in-memory engine with the catalog schema.

    StaticPool keeps the single connection alive, otherwise the in-memory
    database would disappear between connections.
    """
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    event.listen(engine, "connect", _enable_foreign_keys)

    Base.metadata.create_all(bind=engine)

    yield engine

    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db_session(engine) -> Generator[Session, None, None]:
    """A session configured like catalog.database.SessionLocal."""
    TestSessionLocal = sessionmaker(
        autocommit=False,
        autoflush=False,
        bind=engine,
    )
    session = TestSessionLocal()

    yield session

    session.close()


@pytest.fixture
def client(db_session: Session) -> Generator[TestClient, None, None]:
    """Test client whose requests use the test session."""

    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


# =============================================================================
# SAMPLE DATA FIXTURES
# =============================================================================


def make_account(db: Session, username: str, **kwargs) -> Account:
    account = Account(username=username, email=f"{username}@example.com", **kwargs)
    db.add(account)
    db.commit()
    db.refresh(account)
    return account


def auth_header(account: Account) -> dict:
    """Authorization header carrying an access token for the account."""
    token = create_access_token({"sub": str(account.id)})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def reader(db_session: Session) -> Account:
    return make_account(db_session, "reader")


@pytest.fixture
def second_reader(db_session: Session) -> Account:
    return make_account(db_session, "second_reader")


@pytest.fixture
def admin(db_session: Session) -> Account:
    return make_account(db_session, "admin", is_admin=True)


@pytest.fixture
def sample_book(db_session: Session) -> Book:
    """A book nobody has rated yet."""
    book = Book(
        isbn13="9780439023480",
        authors="Suzanne Collins",
        publication_year=2008,
        original_title="The Hunger Games",
        title="The Hunger Games (The Hunger Games, #1)",
        image_url="https://images.gr-assets.com/books/1447303603m/2767052.jpg",
        image_small_url="https://images.gr-assets.com/books/1447303603s/2767052.jpg",
    )
    db_session.add(book)
    db_session.commit()
    db_session.refresh(book)
    return book


@pytest.fixture
def rated_book(db_session: Session) -> Book:
    """
    A book with a pre-existing aggregate block:
    count=9, avg=4.0, one 3-star, three 4-star, five 5-star ratings.
    """
    book = Book(
        isbn13="9780061120080",
        authors="Harper Lee",
        publication_year=1960,
        original_title="To Kill a Mockingbird",
        title="To Kill a Mockingbird",
        rating_count=9,
        rating_avg=4.0,
        rating_1_star=0,
        rating_2_star=0,
        rating_3_star=1,
        rating_4_star=3,
        rating_5_star=5,
    )
    db_session.add(book)
    db_session.commit()
    db_session.refresh(book)
    return book


def reload(db: Session, book: Book) -> Book:
    """Re-read a book row from the database."""
    return db.get(Book, book.id, populate_existing=True)
