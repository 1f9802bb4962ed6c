"""
Database module for the signup service.

Provides SQLAlchemy models, engine and session factory.
"""

from db.engine import Base, SessionLocal, engine, init_db

__all__ = ["Base", "SessionLocal", "engine", "init_db"]
