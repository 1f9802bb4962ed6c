import json
import unittest
from unittest.mock import patch

import httpx

from signup.config import SignupConfig
from signup.services.email_service import EMAILJS_API_URL, RESEND_API_URL, EmailService


class RecordingTransport:
    def __init__(self, status_code: int = 200, text: str = "OK") -> None:
        self.requests: list[httpx.Request] = []
        self.status_code = status_code
        self.text = text

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self.status_code, text=self.text)

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


def _failing_handler(request: httpx.Request) -> httpx.Response:
    raise httpx.ConnectTimeout("timed out", request=request)


@patch.object(SignupConfig, "EMAILJS_SERVICE_ID", "service_abc")
@patch.object(SignupConfig, "EMAILJS_TEMPLATE_ID", "template_xyz")
@patch.object(SignupConfig, "EMAILJS_PUBLIC_KEY", "public_key")
class TestEmailJSProvider(unittest.IsolatedAsyncioTestCase):
    async def test_posts_template_params(self):
        recorder = RecordingTransport()
        service = EmailService(provider="emailjs", transport=recorder.transport())

        self.assertTrue(await service.send_code("Ann", "a@x.com", "012345"))

        self.assertEqual(len(recorder.requests), 1)
        request = recorder.requests[0]
        self.assertEqual(str(request.url), EMAILJS_API_URL)
        body = json.loads(request.content)
        self.assertEqual(body["service_id"], "service_abc")
        self.assertEqual(body["template_id"], "template_xyz")
        self.assertEqual(body["user_id"], "public_key")
        self.assertEqual(body["template_params"]["otp_code"], "012345")
        self.assertEqual(body["template_params"]["to_email"], "a@x.com")
        self.assertEqual(body["template_params"]["user_name"], "Ann")

    async def test_blank_name_falls_back(self):
        recorder = RecordingTransport()
        service = EmailService(provider="emailjs", transport=recorder.transport())

        await service.send_code("", "a@x.com", "012345")

        body = json.loads(recorder.requests[0].content)
        self.assertEqual(body["template_params"]["to_name"], "User")

    async def test_unexpected_body_is_a_failure(self):
        recorder = RecordingTransport(status_code=200, text="Accepted")
        service = EmailService(provider="emailjs", transport=recorder.transport())

        self.assertFalse(await service.send_code("Ann", "a@x.com", "012345"))

    async def test_http_error_status_is_a_failure(self):
        recorder = RecordingTransport(status_code=400, text="The recipients address is empty")
        service = EmailService(provider="emailjs", transport=recorder.transport())

        self.assertFalse(await service.send_code("Ann", "a@x.com", "012345"))

    async def test_transport_error_is_a_failure(self):
        service = EmailService(provider="emailjs", transport=httpx.MockTransport(_failing_handler))

        self.assertFalse(await service.send_code("Ann", "a@x.com", "012345"))

    async def test_malformed_code_is_not_sent(self):
        recorder = RecordingTransport()
        service = EmailService(provider="emailjs", transport=recorder.transport())

        self.assertFalse(await service.send_code("Ann", "a@x.com", "12ab56"))
        self.assertEqual(recorder.requests, [])


class TestEmailJSNotConfigured(unittest.IsolatedAsyncioTestCase):
    @patch.object(SignupConfig, "EMAILJS_SERVICE_ID", None)
    async def test_missing_configuration_is_a_failure(self):
        recorder = RecordingTransport()
        service = EmailService(provider="emailjs", transport=recorder.transport())

        self.assertFalse(await service.send_code("Ann", "a@x.com", "012345"))
        self.assertEqual(recorder.requests, [])


class TestResendProvider(unittest.IsolatedAsyncioTestCase):
    @patch.object(SignupConfig, "RESEND_API_KEY", "re_test")
    async def test_posts_with_bearer_token(self):
        recorder = RecordingTransport(status_code=200, text='{"id": "email_1"}')
        service = EmailService(provider="resend", transport=recorder.transport())

        self.assertTrue(await service.send_code("Ann", "a@x.com", "654321"))

        request = recorder.requests[0]
        self.assertEqual(str(request.url), RESEND_API_URL)
        self.assertEqual(request.headers["Authorization"], "Bearer re_test")
        body = json.loads(request.content)
        self.assertEqual(body["to"], ["a@x.com"])
        self.assertIn("654321", body["html"])

    @patch.object(SignupConfig, "RESEND_API_KEY", None)
    async def test_missing_api_key_is_a_failure(self):
        service = EmailService(provider="resend", transport=RecordingTransport().transport())

        self.assertFalse(await service.send_code("Ann", "a@x.com", "654321"))


class TestUnknownProvider(unittest.IsolatedAsyncioTestCase):
    async def test_unknown_provider_is_a_failure(self):
        service = EmailService(provider="carrier-pigeon", transport=RecordingTransport().transport())

        self.assertFalse(await service.send_code("Ann", "a@x.com", "654321"))


if __name__ == "__main__":
    unittest.main()
