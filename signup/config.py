"""Signup verification configuration management."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

# Load .env file before reading config
try:
    from dotenv import load_dotenv

    # Try loading from project root
    env_path = Path(__file__).parent.parent / ".env"
    if env_path.exists():
        load_dotenv(env_path, override=True)
    else:
        load_dotenv(override=True)
except ImportError:
    pass


@dataclass(frozen=True)
class SignupConfig:
    """Configuration values for the signup verification flow."""

    OTP_LENGTH: int = int(os.getenv("OTP_LENGTH", "6"))
    OTP_EXPIRY_MINUTES: int = int(os.getenv("OTP_EXPIRY_MINUTES", "10"))
    MAX_OTP_ATTEMPTS: int = int(os.getenv("MAX_OTP_ATTEMPTS", "5"))
    LOCKOUT_MINUTES: int = int(os.getenv("LOCKOUT_MINUTES", "15"))
    RESEND_COOLDOWN_SECONDS: int = int(os.getenv("RESEND_COOLDOWN_SECONDS", "60"))
    MAX_WRITE_CONFLICTS: int = int(os.getenv("MAX_WRITE_CONFLICTS", "3"))

    REGISTER_RATE_LIMIT_PER_HOUR: int = int(os.getenv("REGISTER_RATE_LIMIT_PER_HOUR", "10"))

    EMAIL_PROVIDER: str = os.getenv("EMAIL_PROVIDER", "emailjs")
    EMAIL_FROM_NAME: str = os.getenv("EMAIL_FROM_NAME", "Quiz Master")
    EMAIL_FROM_ADDRESS: str = os.getenv("EMAIL_FROM_ADDRESS", "no-reply@quizmaster.app")
    EMAIL_TIMEOUT_SECONDS: float = float(os.getenv("EMAIL_TIMEOUT_SECONDS", "10"))
    EMAILJS_SERVICE_ID: str | None = os.getenv("EMAILJS_SERVICE_ID")
    EMAILJS_TEMPLATE_ID: str | None = os.getenv("EMAILJS_TEMPLATE_ID")
    EMAILJS_PUBLIC_KEY: str | None = os.getenv("EMAILJS_PUBLIC_KEY")
    RESEND_API_KEY: str | None = os.getenv("RESEND_API_KEY")

    # Pending record store: "sql" (production) or "memory" (testing)
    SIGNUP_STORE: str = os.getenv("SIGNUP_STORE", "sql")


@dataclass(frozen=True)
class SignupPolicy:
    """Verification policy handed to the pending verification service."""

    otp_length: int = 6
    otp_expiry_seconds: int = 10 * 60
    max_attempts: int = 5
    lockout_seconds: int = 15 * 60
    resend_cooldown_seconds: int = 60
    max_write_conflicts: int = 3

    @classmethod
    def from_config(cls) -> "SignupPolicy":
        return cls(
            otp_length=SignupConfig.OTP_LENGTH,
            otp_expiry_seconds=SignupConfig.OTP_EXPIRY_MINUTES * 60,
            max_attempts=SignupConfig.MAX_OTP_ATTEMPTS,
            lockout_seconds=SignupConfig.LOCKOUT_MINUTES * 60,
            resend_cooldown_seconds=SignupConfig.RESEND_COOLDOWN_SECONDS,
            max_write_conflicts=SignupConfig.MAX_WRITE_CONFLICTS,
        )
