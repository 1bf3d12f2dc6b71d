"""Log-only OTP sender for local development."""

from __future__ import annotations

from school_auth.domain.enums import OtpPurpose
from school_auth.shared.logging import get_logger
from school_auth.shared.utils.masking import mask_phone_number

logger = get_logger(__name__)


class LogOnlyOtpSender:
    """IOtpSender implementation that logs the code instead of sending an SMS.

    Use when no SMS gateway is configured. Never enable in production: the
    code is written to the log.
    """

    async def send_otp(
        self, phone: str, code: str, purpose: OtpPurpose, *, email: str | None = None
    ) -> None:
        logger.warning(
            "OTP delivery (log channel): %s code for %s is %s",
            purpose.value,
            mask_phone_number(phone),
            code,
        )
