"""Pending signup records and verification outcomes."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any

from signup.exceptions import ExpiredError, InvalidCodeError, LockedError, NotFoundError


@dataclass
class PendingSignup:
    """One unverified signup, keyed in the store by the normalized email."""

    name: str
    email: str
    encoded_password: str
    otp: str | None
    otp_expires_at: float
    attempts: int = 0
    locked_until: float | None = None
    last_sent_at: float | None = None
    version: int = 0

    def is_locked(self, now: float) -> bool:
        return self.locked_until is not None and self.locked_until > now

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PendingSignup":
        locked_until = data.get("locked_until")
        last_sent_at = data.get("last_sent_at")
        return cls(
            name=data.get("name") or "",
            email=data["email"],
            encoded_password=data.get("encoded_password") or "",
            otp=data.get("otp"),
            otp_expires_at=float(data.get("otp_expires_at") or 0),
            attempts=int(data.get("attempts") or 0),
            locked_until=float(locked_until) if locked_until is not None else None,
            last_sent_at=float(last_sent_at) if last_sent_at is not None else None,
            version=int(data.get("version") or 0),
        )


class VerificationStatus(str, Enum):
    NOT_FOUND = "not_found"
    LOCKED = "locked"
    EXPIRED = "expired"
    INVALID = "invalid"
    VERIFIED = "verified"


@dataclass(frozen=True)
class VerificationOutcome:
    """Result of a single verification attempt.

    Exactly one status applies. ``minutes_remaining`` is set for LOCKED,
    ``attempts_remaining`` for INVALID and ``record`` for VERIFIED.
    """

    status: VerificationStatus
    minutes_remaining: int | None = None
    attempts_remaining: int | None = None
    record: PendingSignup | None = None

    @classmethod
    def not_found(cls) -> "VerificationOutcome":
        return cls(VerificationStatus.NOT_FOUND)

    @classmethod
    def locked(cls, minutes_remaining: int) -> "VerificationOutcome":
        return cls(VerificationStatus.LOCKED, minutes_remaining=minutes_remaining)

    @classmethod
    def expired(cls) -> "VerificationOutcome":
        return cls(VerificationStatus.EXPIRED)

    @classmethod
    def invalid(cls, attempts_remaining: int) -> "VerificationOutcome":
        return cls(VerificationStatus.INVALID, attempts_remaining=attempts_remaining)

    @classmethod
    def verified(cls, record: PendingSignup) -> "VerificationOutcome":
        return cls(VerificationStatus.VERIFIED, record=record)

    @property
    def is_verified(self) -> bool:
        return self.status is VerificationStatus.VERIFIED

    def raise_for_status(self) -> PendingSignup:
        """Return the verified record, or raise the error matching the outcome."""
        if self.status is VerificationStatus.NOT_FOUND:
            raise NotFoundError()
        if self.status is VerificationStatus.LOCKED:
            raise LockedError(self.minutes_remaining or 0)
        if self.status is VerificationStatus.EXPIRED:
            raise ExpiredError()
        if self.status is VerificationStatus.INVALID:
            raise InvalidCodeError(self.attempts_remaining or 0)
        if self.record is None:
            raise ValueError("Verified outcome carries no record")
        return self.record


class AvailabilityStatus(str, Enum):
    AVAILABLE = "available"
    REGISTERED = "registered"
    LOCKED = "locked"
    CODE_SENT = "code_sent"


@dataclass(frozen=True)
class Availability:
    status: AvailabilityStatus
    message: str | None = None
    minutes_remaining: int | None = None

    @property
    def can_sign_up(self) -> bool:
        return self.status in {AvailabilityStatus.AVAILABLE, AvailabilityStatus.CODE_SENT}
