"""Verification email delivery service.

Supports EmailJS and Resend, selected with the EMAIL_PROVIDER env var.
"""

from __future__ import annotations

import logging

import httpx

from signup.config import SignupConfig

logger = logging.getLogger(__name__)

EMAILJS_API_URL = "https://api.emailjs.com/api/v1.0/email/send"
RESEND_API_URL = "https://api.resend.com/emails"


class EmailService:
    """Sends one-time codes; returns False instead of raising on delivery failure."""

    def __init__(
        self,
        provider: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._provider = provider or SignupConfig.EMAIL_PROVIDER
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=SignupConfig.EMAIL_TIMEOUT_SECONDS, transport=self._transport)

    async def send_code(self, name: str, email: str, code: str) -> bool:
        if not code.isdigit():
            logger.warning(f"Refusing to send malformed verification code to {email}")
            return False

        try:
            if self._provider == "emailjs":
                return await self._send_emailjs(name, email, code)
            if self._provider == "resend":
                return await self._send_resend(name, email, code)
        except httpx.HTTPError as exc:
            logger.warning(f"[{self._provider}] Email request to {email} failed: {exc}")
            return False

        logger.warning(f"Unknown email provider: {self._provider}")
        return False

    async def _send_emailjs(self, name: str, email: str, code: str) -> bool:
        missing = [
            key
            for key, value in (
                ("EMAILJS_SERVICE_ID", SignupConfig.EMAILJS_SERVICE_ID),
                ("EMAILJS_TEMPLATE_ID", SignupConfig.EMAILJS_TEMPLATE_ID),
                ("EMAILJS_PUBLIC_KEY", SignupConfig.EMAILJS_PUBLIC_KEY),
            )
            if not value
        ]
        if missing:
            logger.warning(f"[EmailJS] Not configured, missing: {', '.join(missing)}")
            return False

        display_name = name or "User"
        payload = {
            "service_id": SignupConfig.EMAILJS_SERVICE_ID,
            "template_id": SignupConfig.EMAILJS_TEMPLATE_ID,
            "user_id": SignupConfig.EMAILJS_PUBLIC_KEY,
            "template_params": {
                "user_name": display_name,
                "user_email": email,
                "otp_code": code,
                "to_email": email,
                "to_name": display_name,
                "reply_to": email,
            },
        }

        async with self._client() as client:
            response = await client.post(EMAILJS_API_URL, json=payload)

        if response.status_code == 200 and response.text == "OK":
            logger.info(f"[EmailJS] Verification email sent to {email}")
            return True
        logger.warning(f"[EmailJS] Unexpected response for {email}: {response.status_code} {response.text}")
        return False

    async def _send_resend(self, name: str, email: str, code: str) -> bool:
        if not SignupConfig.RESEND_API_KEY:
            logger.warning("[Resend] RESEND_API_KEY not set")
            return False

        greeting = f"Hi {name}," if name else "Hi,"
        payload = {
            "from": f"{SignupConfig.EMAIL_FROM_NAME} <{SignupConfig.EMAIL_FROM_ADDRESS}>",
            "to": [email],
            "subject": "Your verification code",
            "html": (
                f"<p>{greeting}</p>"
                f"<p>Your verification code is <strong>{code}</strong>.</p>"
                f"<p>It expires in {SignupConfig.OTP_EXPIRY_MINUTES} minutes.</p>"
            ),
        }
        headers = {"Authorization": f"Bearer {SignupConfig.RESEND_API_KEY}"}

        async with self._client() as client:
            response = await client.post(RESEND_API_URL, headers=headers, json=payload)

        if response.status_code == 200:
            logger.info(f"[Resend] Verification email sent to {email}")
            return True
        logger.warning(f"[Resend] Unexpected response for {email}: {response.status_code}")
        return False
