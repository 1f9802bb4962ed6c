"""Registration flow around pending signup verification."""

from __future__ import annotations

import logging
from typing import Any

from signup.exceptions import AccountExistsError, PasswordMismatchError
from signup.interfaces.user_store import UserStore
from signup.models import Availability, AvailabilityStatus, PendingSignup
from signup.security import hash_password, normalize_email
from signup.services.pending_service import PendingVerificationService

logger = logging.getLogger(__name__)


class RegistrationService:
    def __init__(self, pending_service: PendingVerificationService, user_store: UserStore) -> None:
        self._pending = pending_service
        self._users = user_store

    async def check_availability(self, email: str) -> Availability:
        email = normalize_email(email)
        if await self._users.get_by_email(email):
            return Availability(
                AvailabilityStatus.REGISTERED,
                message="This email is already registered. Please sign in instead.",
            )

        pending = await self._pending.get(email)
        if not pending:
            return Availability(AvailabilityStatus.AVAILABLE)

        now = self._pending.now()
        if pending.is_locked(now):
            minutes = self._pending.minutes_until(pending.locked_until, now)
            return Availability(
                AvailabilityStatus.LOCKED,
                message=f"Account is temporarily locked. Try again in {minutes} minutes.",
                minutes_remaining=minutes,
            )
        if pending.otp and pending.otp_expires_at > now:
            return Availability(
                AvailabilityStatus.CODE_SENT,
                message="A verification code was recently sent. Please check your email.",
            )
        return Availability(AvailabilityStatus.AVAILABLE)

    async def initiate(self, name: str, email: str, password: str, confirm: str) -> PendingSignup:
        if password != confirm:
            raise PasswordMismatchError()

        email = normalize_email(email)
        if await self._users.get_by_email(email):
            raise AccountExistsError()

        return await self._pending.create(name, email, password)

    async def resend(self, email: str) -> PendingSignup:
        return await self._pending.resend(normalize_email(email))

    async def complete(self, email: str, code: str) -> dict[str, Any]:
        """Verify the code, create the account, then drop the pending record."""
        email = normalize_email(email)
        outcome = await self._pending.verify(email, code)
        pending = outcome.raise_for_status()

        existing = await self._users.get_by_email(email)
        if existing:
            # An earlier completion created the account but never promoted
            await self._pending.promote(email)
            return existing

        password = self._pending.reveal_credential(pending)
        user = await self._users.create_user(
            {
                "email": email,
                "name": pending.name or None,
                "hashed_password": hash_password(password),
                "account_status": "active",
            }
        )
        await self._pending.promote(email)
        logger.info(f"Account {user['id']} created for verified signup")
        return user
