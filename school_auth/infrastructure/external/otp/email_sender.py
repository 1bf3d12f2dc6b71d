"""SMTP email sender for one-time codes."""

from __future__ import annotations

import asyncio
import smtplib
import ssl
from email.mime.text import MIMEText

from school_auth.domain.enums import OtpPurpose
from school_auth.domain.exceptions import OtpDeliveryException
from school_auth.shared.logging import get_logger
from school_auth.shared.utils.masking import mask_email

logger = get_logger(__name__)

SUBJECTS = {
    OtpPurpose.REGISTRATION: "Verify your account",
    OtpPurpose.PASSWORD_RESET: "Reset your password",
}


class EmailOtpSender:
    """Deliver OTPs by email over SMTP.

    With use_tls the connection is upgraded with STARTTLS (port 587);
    otherwise it opens an implicit TLS connection (port 465). smtplib is
    blocking, so each send runs on a worker thread.
    """

    def __init__(
        self,
        smtp_host: str,
        *,
        smtp_port: int = 587,
        smtp_user: str | None = None,
        smtp_password: str | None = None,
        use_tls: bool = True,
        from_email: str | None = None,
        from_name: str = "School Auth",
        timeout: float = 10.0,
    ) -> None:
        if not smtp_host or not (from_email or smtp_user):
            raise ValueError("smtp_host and a sender address are required")
        self.smtp_host = smtp_host
        self.smtp_port = smtp_port
        self.smtp_user = smtp_user
        self._smtp_password = smtp_password
        self.use_tls = use_tls
        self.from_email = from_email or smtp_user
        self.from_name = from_name
        self.timeout = timeout

    def _build_message(self, to_email: str, code: str, purpose: OtpPurpose) -> MIMEText:
        body = (
            f"Your verification code is {code}.\n\n"
            "If you did not request this code, you can ignore this email."
        )
        msg = MIMEText(body, "plain")
        msg["Subject"] = SUBJECTS.get(purpose, "Your verification code")
        msg["From"] = f"{self.from_name} <{self.from_email}>"
        msg["To"] = to_email
        return msg

    def _send(self, to_email: str, msg: MIMEText) -> None:
        context = ssl.create_default_context()
        if self.use_tls:
            server = smtplib.SMTP(self.smtp_host, self.smtp_port, timeout=self.timeout)
        else:
            server = smtplib.SMTP_SSL(
                self.smtp_host, self.smtp_port, context=context, timeout=self.timeout
            )
        with server:
            if self.use_tls:
                server.starttls(context=context)
            if self.smtp_user and self._smtp_password:
                server.login(self.smtp_user, self._smtp_password)
            server.sendmail(self.from_email, [to_email], msg.as_string())

    async def send_otp(
        self, phone: str, code: str, purpose: OtpPurpose, *, email: str | None = None
    ) -> None:
        """Email code to the account address; raise OtpDeliveryException on any SMTP error."""
        if not email:
            raise OtpDeliveryException("no email address on file")
        msg = self._build_message(email, code, purpose)
        try:
            await asyncio.to_thread(self._send, email, msg)
        except smtplib.SMTPRecipientsRefused as e:
            logger.error("SMTP server refused recipient %s", mask_email(email))
            raise OtpDeliveryException("recipient refused") from e
        except smtplib.SMTPAuthenticationError as e:
            logger.error("SMTP authentication failed (code=%s)", e.smtp_code)
            raise OtpDeliveryException("smtp authentication failed") from e
        except (smtplib.SMTPException, OSError) as e:
            logger.error("SMTP delivery failed: %s", type(e).__name__)
            raise OtpDeliveryException("smtp delivery failed") from e
        logger.info("OTP email sent to %s (purpose=%s)", mask_email(email), purpose.value)
