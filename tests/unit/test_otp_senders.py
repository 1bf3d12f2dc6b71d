"""OTP delivery channels: SMS gateway (httpx MockTransport), SMTP email and factory."""

import json
import smtplib
from email import message_from_string

import httpx
import pytest

from school_auth.core.config import Settings
from school_auth.domain.enums import OtpPurpose
from school_auth.domain.exceptions import OtpDeliveryException
from school_auth.infrastructure.external.otp import (
    EmailOtpSender,
    LogOnlyOtpSender,
    SmsOtpSender,
    create_otp_sender,
)

API_URL = "https://sms.example.test/bulkV2"


def _client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


async def test_sms_sender_posts_code_with_api_key() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"return": True, "request_id": "abc"})

    async with _client(handler) as client:
        sender = SmsOtpSender(API_URL, "key-123", http_client=client)
        await sender.send_otp("9876543210", "482913", OtpPurpose.REGISTRATION)

    [request] = seen
    assert request.headers["authorization"] == "key-123"
    body = json.loads(request.content)
    assert body["numbers"] == "9876543210"
    assert body["variables_values"] == "482913"
    assert body["route"] == "otp"
    assert "482913" in body["message"]


async def test_sms_sender_gateway_rejection_raises() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"return": False, "message": "Invalid numbers"})

    async with _client(handler) as client:
        sender = SmsOtpSender(API_URL, "key-123", http_client=client)
        with pytest.raises(OtpDeliveryException):
            await sender.send_otp("9876543210", "482913", OtpPurpose.REGISTRATION)


async def test_sms_sender_rejection_log_omits_gateway_payload(caplog) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200, json={"return": False, "message": "Invalid numbers", "numbers": ["9876543210"]}
        )

    async with _client(handler) as client:
        sender = SmsOtpSender(API_URL, "key-123", http_client=client)
        with pytest.raises(OtpDeliveryException):
            await sender.send_otp("9876543210", "482913", OtpPurpose.REGISTRATION)

    assert "Invalid numbers" in caplog.text
    assert "9876543210" not in caplog.text


async def test_sms_sender_http_error_status_raises() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(401, json={"return": False})

    async with _client(handler) as client:
        sender = SmsOtpSender(API_URL, "bad-key", http_client=client)
        with pytest.raises(OtpDeliveryException) as exc_info:
            await sender.send_otp("9876543210", "482913", OtpPurpose.PASSWORD_RESET)
    assert exc_info.value.details["reason"] == "gateway status 401"


async def test_sms_sender_transport_error_raises() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    async with _client(handler) as client:
        sender = SmsOtpSender(API_URL, "key-123", http_client=client)
        with pytest.raises(OtpDeliveryException):
            await sender.send_otp("9876543210", "482913", OtpPurpose.REGISTRATION)


async def test_sms_sender_invalid_json_raises() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="<html>ok</html>")

    async with _client(handler) as client:
        sender = SmsOtpSender(API_URL, "key-123", http_client=client)
        with pytest.raises(OtpDeliveryException):
            await sender.send_otp("9876543210", "482913", OtpPurpose.REGISTRATION)


def test_sms_sender_requires_url_and_key() -> None:
    with pytest.raises(ValueError):
        SmsOtpSender("", "key-123")


async def test_log_sender_does_not_raise() -> None:
    await LogOnlyOtpSender().send_otp("9876543210", "482913", OtpPurpose.REGISTRATION)


def _settings(**overrides) -> Settings:
    values = {
        "jwt_access_secret": "a" * 32,
        "jwt_refresh_secret": "b" * 32,
        **overrides,
    }
    return Settings(_env_file=None, **values)


def test_factory_selects_log_channel() -> None:
    assert isinstance(create_otp_sender(_settings(otp_delivery_channel="log")), LogOnlyOtpSender)


def test_factory_selects_sms_channel() -> None:
    settings = _settings(
        otp_delivery_channel="sms", sms_api_url=API_URL, sms_api_key="key-123"
    )
    sender = create_otp_sender(settings)
    assert isinstance(sender, SmsOtpSender)
    assert sender.api_url == API_URL


def test_factory_selects_email_channel() -> None:
    settings = _settings(
        otp_delivery_channel="email",
        smtp_host="smtp.example.test",
        smtp_from_email="no-reply@example.test",
        smtp_password="pw",
    )
    sender = create_otp_sender(settings)
    assert isinstance(sender, EmailOtpSender)
    assert sender.smtp_host == "smtp.example.test"
    assert sender.from_email == "no-reply@example.test"


# Email (SMTP)


class FakeSMTP:
    """Stands in for smtplib.SMTP / SMTP_SSL and records the conversation."""

    instances: list["FakeSMTP"] = []
    refuse_recipient = False

    def __init__(self, host, port, *, context=None, timeout=None) -> None:
        self.host = host
        self.port = port
        self.timeout = timeout
        self.started_tls = False
        self.credentials: tuple[str, str] | None = None
        self.messages: list[tuple[str, list[str], str]] = []
        FakeSMTP.instances.append(self)

    def __enter__(self) -> "FakeSMTP":
        return self

    def __exit__(self, *exc) -> None:
        return None

    def starttls(self, context=None) -> None:
        self.started_tls = True

    def login(self, user: str, password: str) -> None:
        self.credentials = (user, password)

    def sendmail(self, from_addr: str, to_addrs: list[str], msg: str) -> dict:
        if FakeSMTP.refuse_recipient:
            raise smtplib.SMTPRecipientsRefused({to_addrs[0]: (550, b"no such user")})
        self.messages.append((from_addr, to_addrs, msg))
        return {}


@pytest.fixture
def fake_smtp(monkeypatch):
    FakeSMTP.instances = []
    FakeSMTP.refuse_recipient = False
    monkeypatch.setattr(smtplib, "SMTP", FakeSMTP)
    monkeypatch.setattr(smtplib, "SMTP_SSL", FakeSMTP)
    return FakeSMTP


def _email_sender(**overrides) -> EmailOtpSender:
    values = {
        "smtp_port": 587,
        "smtp_user": "mailer",
        "smtp_password": "pw",
        "from_email": "no-reply@example.test",
        **overrides,
    }
    return EmailOtpSender("smtp.example.test", **values)


async def test_email_sender_sends_code_over_starttls(fake_smtp) -> None:
    sender = _email_sender()
    await sender.send_otp(
        "9876543210", "482913", OtpPurpose.REGISTRATION, email="alice@example.com"
    )

    [server] = fake_smtp.instances
    assert (server.host, server.port) == ("smtp.example.test", 587)
    assert server.started_tls is True
    assert server.credentials == ("mailer", "pw")
    [(from_addr, to_addrs, raw)] = server.messages
    assert from_addr == "no-reply@example.test"
    assert to_addrs == ["alice@example.com"]
    message = message_from_string(raw)
    assert message["To"] == "alice@example.com"
    assert message["Subject"] == "Verify your account"
    assert "482913" in message.get_payload(decode=True).decode()


async def test_email_sender_implicit_tls_skips_starttls(fake_smtp) -> None:
    sender = _email_sender(smtp_port=465, use_tls=False)
    await sender.send_otp(
        "9876543210", "482913", OtpPurpose.PASSWORD_RESET, email="alice@example.com"
    )
    [server] = fake_smtp.instances
    assert server.started_tls is False
    message = message_from_string(server.messages[0][2])
    assert message["Subject"] == "Reset your password"


async def test_email_sender_without_address_raises(fake_smtp) -> None:
    with pytest.raises(OtpDeliveryException) as exc_info:
        await _email_sender().send_otp("9876543210", "482913", OtpPurpose.REGISTRATION)
    assert exc_info.value.details["reason"] == "no email address on file"
    assert fake_smtp.instances == []


async def test_email_sender_refused_recipient_raises(fake_smtp) -> None:
    fake_smtp.refuse_recipient = True
    with pytest.raises(OtpDeliveryException) as exc_info:
        await _email_sender().send_otp(
            "9876543210", "482913", OtpPurpose.REGISTRATION, email="ghost@example.com"
        )
    assert exc_info.value.details["reason"] == "recipient refused"


async def test_email_sender_connection_error_raises(monkeypatch) -> None:
    def refuse(*args, **kwargs):
        raise ConnectionRefusedError("connection refused")

    monkeypatch.setattr(smtplib, "SMTP", refuse)
    with pytest.raises(OtpDeliveryException) as exc_info:
        await _email_sender().send_otp(
            "9876543210", "482913", OtpPurpose.REGISTRATION, email="alice@example.com"
        )
    assert exc_info.value.details["reason"] == "smtp delivery failed"


def test_email_sender_requires_host_and_sender() -> None:
    with pytest.raises(ValueError):
        EmailOtpSender("", from_email="no-reply@example.test")
    with pytest.raises(ValueError):
        EmailOtpSender("smtp.example.test")
