import unittest

import bcrypt

from signup.exceptions import (
    AccountExistsError,
    ExpiredError,
    InvalidCodeError,
    LockedError,
    NotFoundError,
    NotificationError,
    PasswordMismatchError,
)
from signup.models import AvailabilityStatus
from signup.services.pending_service import PendingVerificationService
from signup.services.registration_service import RegistrationService
from signup.stores.memory_store import MemoryKeyValueStore, MemoryUserStore


class FakeClock:
    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeNotifier:
    def __init__(self) -> None:
        self.delivered = True
        self.codes: dict[str, str] = {}

    async def send_code(self, name: str, email: str, code: str) -> bool:
        self.codes[email] = code
        return self.delivered


class FailingUserStore(MemoryUserStore):
    async def create_user(self, data: dict) -> dict:
        raise ConnectionError("auth provider unavailable")


class TestRegistrationService(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.clock = FakeClock()
        self.notifier = FakeNotifier()
        self.pending_store = MemoryKeyValueStore()
        self.users = MemoryUserStore()
        self.pending = PendingVerificationService(self.pending_store, self.notifier, clock=self.clock)
        self.registration = RegistrationService(self.pending, self.users)

    async def test_complete_creates_account_and_removes_pending_record(self):
        await self.registration.initiate("Ann", "Ann@X.com", "pw123456", "pw123456")
        code = self.notifier.codes["ann@x.com"]

        user = await self.registration.complete("ann@x.com", code)

        self.assertEqual(user["email"], "ann@x.com")
        self.assertEqual(user["name"], "Ann")
        self.assertTrue(bcrypt.checkpw(b"pw123456", user["hashed_password"].encode("utf-8")))
        self.assertIsNone(await self.pending.get("ann@x.com"))

    async def test_initiate_rejects_mismatched_passwords(self):
        with self.assertRaises(PasswordMismatchError):
            await self.registration.initiate("Ann", "a@x.com", "pw123456", "pw654321")
        self.assertIsNone(await self.pending.get("a@x.com"))

    async def test_initiate_rejects_registered_email(self):
        await self.users.create_user({"email": "a@x.com", "name": "Ann"})

        with self.assertRaises(AccountExistsError):
            await self.registration.initiate("Ann", "A@x.com", "pw123456", "pw123456")

    async def test_initiate_surfaces_notification_failure_with_record_kept(self):
        self.notifier.delivered = False

        with self.assertRaises(NotificationError):
            await self.registration.initiate("Ann", "a@x.com", "pw123456", "pw123456")

        self.assertIsNotNone(await self.pending.get("a@x.com"))

    async def test_complete_maps_outcomes_to_errors(self):
        with self.assertRaises(NotFoundError):
            await self.registration.complete("a@x.com", "123456")

        await self.registration.initiate("Ann", "a@x.com", "pw123456", "pw123456")
        code = self.notifier.codes["a@x.com"]
        wrong = "000000" if code != "000000" else "111111"

        with self.assertRaises(InvalidCodeError) as ctx:
            await self.registration.complete("a@x.com", wrong)
        self.assertEqual(ctx.exception.attempts_remaining, 4)

        for _ in range(3):
            with self.assertRaises(InvalidCodeError):
                await self.registration.complete("a@x.com", wrong)
        with self.assertRaises(LockedError) as ctx:
            await self.registration.complete("a@x.com", wrong)
        self.assertEqual(ctx.exception.minutes_remaining, 15)

    async def test_complete_with_expired_code(self):
        await self.registration.initiate("Ann", "a@x.com", "pw123456", "pw123456")
        self.clock.advance(10 * 60)

        with self.assertRaises(ExpiredError):
            await self.registration.complete("a@x.com", self.notifier.codes["a@x.com"])

    async def test_account_creation_failure_keeps_pending_record(self):
        registration = RegistrationService(self.pending, FailingUserStore())
        await registration.initiate("Ann", "a@x.com", "pw123456", "pw123456")

        with self.assertRaises(ConnectionError):
            await registration.complete("a@x.com", self.notifier.codes["a@x.com"])

        pending = await self.pending.get("a@x.com")
        self.assertIsNotNone(pending)
        self.assertEqual(pending.attempts, 0)

    async def test_complete_promotes_when_account_already_exists(self):
        await self.registration.initiate("Ann", "a@x.com", "pw123456", "pw123456")
        existing = await self.users.create_user({"email": "a@x.com", "name": "Ann"})

        user = await self.registration.complete("a@x.com", self.notifier.codes["a@x.com"])

        self.assertEqual(user["id"], existing["id"])
        self.assertIsNone(await self.pending.get("a@x.com"))

    async def test_resend_delivers_new_code(self):
        await self.registration.initiate("Ann", "a@x.com", "pw123456", "pw123456")
        self.clock.advance(60)

        record = await self.registration.resend("A@X.com")

        self.assertEqual(self.notifier.codes["a@x.com"], record.otp)


class TestAvailability(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.clock = FakeClock()
        self.notifier = FakeNotifier()
        self.users = MemoryUserStore()
        self.pending = PendingVerificationService(MemoryKeyValueStore(), self.notifier, clock=self.clock)
        self.registration = RegistrationService(self.pending, self.users)

    async def test_unknown_email_is_available(self):
        result = await self.registration.check_availability("a@x.com")
        self.assertEqual(result.status, AvailabilityStatus.AVAILABLE)
        self.assertTrue(result.can_sign_up)

    async def test_registered_email(self):
        await self.users.create_user({"email": "a@x.com"})

        result = await self.registration.check_availability("A@x.com")

        self.assertEqual(result.status, AvailabilityStatus.REGISTERED)
        self.assertFalse(result.can_sign_up)

    async def test_recent_code_warns_but_allows(self):
        await self.registration.initiate("Ann", "a@x.com", "pw123456", "pw123456")

        result = await self.registration.check_availability("a@x.com")

        self.assertEqual(result.status, AvailabilityStatus.CODE_SENT)
        self.assertTrue(result.can_sign_up)

    async def test_expired_code_is_available(self):
        await self.registration.initiate("Ann", "a@x.com", "pw123456", "pw123456")
        self.clock.advance(11 * 60)

        result = await self.registration.check_availability("a@x.com")

        self.assertEqual(result.status, AvailabilityStatus.AVAILABLE)

    async def test_locked_email(self):
        await self.registration.initiate("Ann", "a@x.com", "pw123456", "pw123456")
        for _ in range(5):
            await self.pending.verify("a@x.com", "not-a-code")
        self.clock.advance(5 * 60)

        result = await self.registration.check_availability("a@x.com")

        self.assertEqual(result.status, AvailabilityStatus.LOCKED)
        self.assertEqual(result.minutes_remaining, 10)
        self.assertFalse(result.can_sign_up)


if __name__ == "__main__":
    unittest.main()
