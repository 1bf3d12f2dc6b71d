"""OTP sender factory: picks the delivery channel from settings."""

from __future__ import annotations

import httpx

from school_auth.application.interfaces.services import IOtpSender
from school_auth.core.config import Settings
from school_auth.infrastructure.external.otp.email_sender import EmailOtpSender
from school_auth.infrastructure.external.otp.log_sender import LogOnlyOtpSender
from school_auth.infrastructure.external.otp.sms_sender import SmsOtpSender


def create_otp_sender(
    settings: Settings, *, http_client: httpx.AsyncClient | None = None
) -> IOtpSender:
    """Return the sender for settings.otp_delivery_channel ('log', 'sms' or 'email').

    Raises:
        ValueError: If the channel is not supported.
    """
    channel = settings.otp_delivery_channel
    if channel == "log":
        return LogOnlyOtpSender()
    if channel == "sms":
        api_key = settings.sms_api_key.get_secret_value() if settings.sms_api_key else ""
        return SmsOtpSender(
            settings.sms_api_url or "",
            api_key,
            http_client=http_client,
            timeout=settings.otp_delivery_timeout_seconds,
        )
    if channel == "email":
        password = (
            settings.smtp_password.get_secret_value() if settings.smtp_password else None
        )
        return EmailOtpSender(
            settings.smtp_host or "",
            smtp_port=settings.smtp_port,
            smtp_user=settings.smtp_user,
            smtp_password=password,
            use_tls=settings.smtp_use_tls,
            from_email=settings.smtp_from_email,
            from_name=settings.smtp_from_name,
            timeout=settings.otp_delivery_timeout_seconds,
        )
    raise ValueError(f"Unsupported OTP delivery channel: {channel}")
