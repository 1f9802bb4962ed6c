"""
Pending signup model.

PendingSignupRow: one unverified signup per normalized email key. The record
body lives in ``payload``; ``version`` guards conditional writes.
"""

from datetime import datetime

from sqlalchemy import Column, DateTime, Integer, JSON, String

from db.engine import Base


class PendingSignupRow(Base):
    __tablename__ = "pending_signups"

    key = Column(String(320), primary_key=True)
    payload = Column(JSON, nullable=False)
    version = Column(Integer, nullable=False, default=1)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f"<PendingSignupRow(key={self.key}, version={self.version})>"
