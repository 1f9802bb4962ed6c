"""
SQLAlchemy models for the signup database.

All models inherit from db.engine.Base.
"""

from db.models.user import User
from db.models.pending import PendingSignupRow

__all__ = [
    "User",
    "PendingSignupRow",
]
