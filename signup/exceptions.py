"""Signup exceptions."""

from __future__ import annotations

from typing import Any


class SignupException(Exception):
    """Base signup exception with HTTP status."""

    def __init__(self, message: str, status_code: int = 400, data: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.data = data or {}


class InvalidEmailError(SignupException):
    def __init__(self, email: str):
        super().__init__(f"Invalid email address: {email!r}", status_code=422)


class PasswordMismatchError(SignupException):
    def __init__(self) -> None:
        super().__init__("Passwords do not match", status_code=400)


class AccountExistsError(SignupException):
    def __init__(self) -> None:
        super().__init__("This email is already registered. Please sign in instead.", status_code=409)


class NotFoundError(SignupException):
    """No pending verification exists for the email; the user must sign up again."""

    def __init__(self) -> None:
        super().__init__("No pending verification found. Please sign up again.", status_code=404)


class LockedError(SignupException):
    """Too many failed attempts; verification and resend are suspended."""

    def __init__(self, minutes_remaining: int):
        super().__init__(
            f"Too many attempts. Try again in {minutes_remaining} minutes.",
            status_code=423,
            data={"minutes_remaining": minutes_remaining},
        )
        self.minutes_remaining = minutes_remaining


class CooldownError(SignupException):
    def __init__(self, seconds_remaining: int):
        super().__init__(
            f"Please wait {seconds_remaining}s before requesting another code.",
            status_code=429,
            data={"seconds_remaining": seconds_remaining},
        )
        self.seconds_remaining = seconds_remaining


class InvalidCodeError(SignupException):
    def __init__(self, attempts_remaining: int):
        super().__init__(
            f"Invalid code. {attempts_remaining} attempts remaining.",
            status_code=401,
            data={"attempts_remaining": attempts_remaining},
        )
        self.attempts_remaining = attempts_remaining


class ExpiredError(SignupException):
    def __init__(self) -> None:
        super().__init__("Verification code expired. Please request a new one.", status_code=410)


class NotificationError(SignupException):
    """The pending record was written but the code could not be delivered.

    Recoverable: the record is kept, so the user can ask for a resend.
    """

    def __init__(self, record: Any = None):
        super().__init__("Failed to send verification email", status_code=502)
        self.record = record


class DecodeError(SignupException):
    """A stored credential could not be decoded; the record is corrupt."""

    def __init__(self) -> None:
        super().__init__("Stored credential is malformed", status_code=500)


class ConcurrentUpdateError(SignupException):
    def __init__(self, key: str):
        super().__init__("Verification record changed concurrently. Please retry.", status_code=409)
        self.key = key
