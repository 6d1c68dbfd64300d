"""
Engine, session factory and declarative base.

The schema is owned by Alembic ("alembic upgrade head"); nothing here creates
tables.
"""

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from perfeval.core.config import settings

engine = create_engine(
    settings.DATABASE_URL,
    pool_pre_ping=True,
    pool_size=settings.DB_POOL_SIZE,
    max_overflow=settings.DB_MAX_OVERFLOW,
    echo=settings.SQL_ECHO,
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    """
    Request-scoped session for FastAPI endpoints (Depends(get_db)).
    Uncommitted work is discarded when the request ends.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db():
    """Import the models so every table is registered on Base.metadata."""
    from perfeval import models  # noqa: F401
