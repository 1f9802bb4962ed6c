"""Security utilities for signup verification."""

from __future__ import annotations

import base64
import binascii
import re
import secrets

import bcrypt

from signup.exceptions import DecodeError

# Characters the key-value store does not accept in keys
_RESERVED_KEY_CHARS = re.compile(r"[.#$/\[\]]")


def normalize_email(email: str) -> str:
    return email.strip().lower()


def store_key(email: str) -> str:
    """Derive the store key for an email address."""
    return _RESERVED_KEY_CHARS.sub("_", email.lower())


def generate_otp(length: int = 6) -> str:
    """Generate a numeric code, each digit drawn independently."""
    return "".join(secrets.choice("0123456789") for _ in range(length))


def codes_match(expected: str, submitted: str) -> bool:
    return secrets.compare_digest(expected.encode("utf-8"), submitted.encode("utf-8"))


def encode_credential(password: str) -> str:
    """Reversibly encode a password. This is NOT a hash."""
    return base64.b64encode(password.encode("utf-8")).decode("ascii")


def decode_credential(encoded: str) -> str:
    try:
        return base64.b64decode(encoded.encode("ascii"), validate=True).decode("utf-8")
    except (binascii.Error, UnicodeError, ValueError) as exc:
        raise DecodeError() from exc


def hash_password(password: str) -> str:
    """Hash a password using bcrypt."""
    password_bytes = password.encode("utf-8")
    salt = bcrypt.gensalt()
    hashed = bcrypt.hashpw(password_bytes, salt)
    return hashed.decode("utf-8")
