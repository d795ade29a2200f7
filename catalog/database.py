"""
Catalog Database

SQLAlchemy 2.0 engine, session factory and declarative base.

Sessions
========
Each HTTP request gets its own session from get_db(), closed when the
request finishes. Nothing here commits: rating mutations commit or roll
back inside the rating coordinator, book administration commits in its
router.
"""

from collections.abc import Generator

from sqlalchemy import create_engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from catalog.config import get_settings

settings = get_settings()

# pre_ping drops connections the server closed while they sat in the pool
engine = create_engine(
    settings.database_url,
    pool_size=settings.db_pool_size,
    max_overflow=settings.db_max_overflow,
    pool_pre_ping=True,
    echo=settings.debug,
)

SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)


class Base(DeclarativeBase):
    """Declarative base of the books, ratings and accounts tables."""


def get_db() -> Generator[Session, None, None]:
    """FastAPI dependency yielding the request's session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def create_tables() -> None:
    """
    Create missing tables straight from the models.

    For local development and seeding; deployed databases are managed
    with `alembic upgrade head`.
    """
    Base.metadata.create_all(bind=engine)
