"""Signup dependency helpers."""

from __future__ import annotations

from typing import Any

from fastapi import Depends, HTTPException, Request

from signup.config import SignupConfig, SignupPolicy
from signup.interfaces.rate_limiter import RateLimiter
from signup.services.email_service import EmailService
from signup.services.pending_service import PendingVerificationService
from signup.services.registration_service import RegistrationService
from signup.stores.memory_store import MemoryKeyValueStore, MemoryRateLimiter, MemoryUserStore


_memory_pending_store = MemoryKeyValueStore()
_memory_user_store = MemoryUserStore()
_memory_rate_limiter = MemoryRateLimiter()

_sql_pending_store: Any = None
_sql_user_store: Any = None


def _get_stores() -> tuple[Any, Any]:
    """Get signup stores based on SIGNUP_STORE config."""
    if SignupConfig.SIGNUP_STORE == "sql":
        global _sql_pending_store, _sql_user_store
        if _sql_pending_store is None:
            from signup.stores.sql_store import SQLKeyValueStore, SQLUserStore

            _sql_pending_store = SQLKeyValueStore()
            _sql_user_store = SQLUserStore()
        return _sql_pending_store, _sql_user_store
    # Fallback to memory store for development/testing
    return _memory_pending_store, _memory_user_store


def get_pending_service() -> PendingVerificationService:
    pending_store, _ = _get_stores()
    return PendingVerificationService(
        store=pending_store,
        notifier=EmailService(),
        policy=SignupPolicy.from_config(),
    )


def get_registration_service(
    pending_service: PendingVerificationService = Depends(get_pending_service),
) -> RegistrationService:
    _, user_store = _get_stores()
    return RegistrationService(pending_service, user_store)


def get_rate_limiter() -> RateLimiter:
    return _memory_rate_limiter


async def enforce_signup_rate_limit(
    request: Request,
    limiter: RateLimiter = Depends(get_rate_limiter),
) -> None:
    client_ip = request.client.host if request.client else "unknown"
    key = f"signup:{client_ip}"
    allowed = await limiter.allow(key, SignupConfig.REGISTER_RATE_LIMIT_PER_HOUR, 3600)
    if not allowed:
        raise HTTPException(status_code=429, detail="Too many signup attempts")
