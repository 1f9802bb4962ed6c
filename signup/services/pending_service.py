"""Pending signup verification service.

Owns the lifecycle of an unverified signup: creation, one-time code issuance
and validation, resend cooldown, failed-attempt counting, lockout, and
removal once the caller has created the real account.

Every write is conditional on the version read just before it. When another
writer got there first the whole decision is re-evaluated against the fresh
record, so concurrent failed attempts cannot under-count a lockout.
"""

from __future__ import annotations

import logging
import math
import time
from dataclasses import replace
from typing import Callable

from signup.config import SignupPolicy
from signup.exceptions import (
    ConcurrentUpdateError,
    CooldownError,
    InvalidEmailError,
    LockedError,
    NotFoundError,
    NotificationError,
)
from signup.interfaces.key_value_store import KeyValueStore
from signup.interfaces.notifier import Notifier
from signup.models import PendingSignup, VerificationOutcome
from signup.security import (
    codes_match,
    decode_credential,
    encode_credential,
    generate_otp,
    store_key,
)

logger = logging.getLogger(__name__)


class PendingVerificationService:
    def __init__(
        self,
        store: KeyValueStore,
        notifier: Notifier,
        policy: SignupPolicy | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._store = store
        self._notifier = notifier
        self._policy = policy or SignupPolicy()
        self._clock = clock

    @property
    def policy(self) -> SignupPolicy:
        return self._policy

    def now(self) -> float:
        return self._clock()

    def _write_attempts(self) -> range:
        return range(self._policy.max_write_conflicts + 1)

    @staticmethod
    def minutes_until(deadline: float, now: float) -> int:
        return math.ceil((deadline - now) / 60)

    async def get(self, email: str) -> PendingSignup | None:
        data = await self._store.get(store_key(email))
        return PendingSignup.from_dict(data) if data else None

    async def create(self, name: str, email: str, credential_secret: str) -> PendingSignup:
        """Start (or restart) verification for ``email`` and send a fresh code.

        Raises LockedError while a lockout is active. Any other existing record
        is overwritten. NotificationError means the record was written but the
        code did not go out.
        """
        if "@" not in email:
            raise InvalidEmailError(email)

        key = store_key(email)
        for _ in self._write_attempts():
            existing = await self.get(email)
            now = self._clock()
            if existing and existing.is_locked(now):
                raise LockedError(self.minutes_until(existing.locked_until, now))

            record = PendingSignup(
                name=name or "",
                email=email,
                encoded_password=encode_credential(credential_secret),
                otp=generate_otp(self._policy.otp_length),
                otp_expires_at=now + self._policy.otp_expiry_seconds,
                attempts=0,
                locked_until=None,
                last_sent_at=now,
            )
            expected_version = existing.version if existing else 0
            if await self._store.set(key, record.to_dict(), expected_version=expected_version):
                record.version = expected_version + 1
                break
            logger.warning(f"Pending signup {key} changed during create, retrying")
        else:
            raise ConcurrentUpdateError(key)

        logger.info(f"Pending signup created for {key}")
        await self._notify(record)
        return record

    async def resend(self, email: str) -> PendingSignup:
        """Issue a new code, keeping the failed-attempt count."""
        key = store_key(email)
        for _ in self._write_attempts():
            existing = await self.get(email)
            if not existing:
                raise NotFoundError()

            now = self._clock()
            if existing.is_locked(now):
                raise LockedError(self.minutes_until(existing.locked_until, now))

            cooldown = self._policy.resend_cooldown_seconds
            if existing.last_sent_at is not None and now - existing.last_sent_at < cooldown:
                raise CooldownError(math.ceil(cooldown - (now - existing.last_sent_at)))

            fields = {
                "otp": generate_otp(self._policy.otp_length),
                "otp_expires_at": now + self._policy.otp_expiry_seconds,
                "last_sent_at": now,
            }
            if await self._store.update(key, fields, expected_version=existing.version):
                record = replace(existing, version=existing.version + 1, **fields)
                break
            logger.warning(f"Pending signup {key} changed during resend, retrying")
        else:
            raise ConcurrentUpdateError(key)

        logger.info(f"Verification code reissued for {key}")
        await self._notify(record)
        return record

    async def verify(self, email: str, submitted_code: str) -> VerificationOutcome:
        """Check a submitted code. Only failed attempts mutate the record."""
        key = store_key(email)
        for _ in self._write_attempts():
            record = await self.get(email)
            if not record:
                return VerificationOutcome.not_found()

            now = self._clock()
            if record.is_locked(now):
                return VerificationOutcome.locked(self.minutes_until(record.locked_until, now))

            if not record.otp or now >= record.otp_expires_at:
                return VerificationOutcome.expired()

            if codes_match(record.otp, submitted_code):
                return VerificationOutcome.verified(record)

            attempts = record.attempts + 1
            if attempts >= self._policy.max_attempts:
                locked_until = now + self._policy.lockout_seconds
                fields = {"attempts": 0, "locked_until": locked_until}
            else:
                locked_until = None
                fields = {"attempts": attempts}

            if not await self._store.update(key, fields, expected_version=record.version):
                logger.warning(f"Pending signup {key} changed during verify, retrying")
                continue

            if locked_until is not None:
                logger.info(f"Pending signup {key} locked after {attempts} failed attempts")
                return VerificationOutcome.locked(self.minutes_until(locked_until, now))
            return VerificationOutcome.invalid(self._policy.max_attempts - attempts)

        raise ConcurrentUpdateError(key)

    async def promote(self, email: str) -> None:
        """Discard the pending record once the real account exists."""
        key = store_key(email)
        await self._store.remove(key)
        logger.info(f"Pending signup {key} promoted")

    def reveal_credential(self, record: PendingSignup) -> str:
        return decode_credential(record.encoded_password)

    async def _notify(self, record: PendingSignup) -> None:
        try:
            delivered = await self._notifier.send_code(record.name, record.email, record.otp)
        except Exception as exc:
            # The record is already written; the caller can still resend
            logger.warning(f"Notifier raised for {record.email}: {exc!r}")
            raise NotificationError(record) from exc

        if not delivered:
            logger.warning(f"Verification code for {record.email} was not delivered")
            raise NotificationError(record)
