"""
SQLAlchemy engine and session factory.

Usage:
    from db.engine import SessionLocal

    with SessionLocal() as db:
        row = db.get(PendingSignupRow, key)
"""

from typing import Any

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base

from config import Config


def _engine_options(url: str) -> dict[str, Any]:
    if url.startswith("sqlite"):
        # Sessions are opened from the event loop thread and worker threads alike
        return {"connect_args": {"check_same_thread": False}}
    return {
        "pool_pre_ping": True,  # Verify connections before use
        "pool_size": 10,
        "max_overflow": 20,
    }


# Create engine with connection pooling
engine = create_engine(
    Config.DATABASE_URL,
    echo=Config.DB_ECHO,
    **_engine_options(Config.DATABASE_URL),
)

# Session factory
SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)

# Base class for all models
Base = declarative_base()


def init_db(bind=None) -> None:
    """Create all tables that do not exist yet."""
    # Register models on Base.metadata
    import db.models  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)
