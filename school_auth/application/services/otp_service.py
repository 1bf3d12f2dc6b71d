"""OTP issuance and verification.

Codes are scoped by (user, purpose, school). Issuing a code invalidates the
user's earlier unused codes for the same purpose and scope, stores the new one
and commits before delivery, so a delivery failure leaves a valid stored code
that the client can replace with resend-otp.
"""

from __future__ import annotations

import asyncio
from datetime import timedelta

from school_auth.application.interfaces.repositories import IOtpRepository, IUnitOfWork
from school_auth.application.interfaces.services import IOtpSender
from school_auth.domain.enums import OtpPurpose
from school_auth.domain.exceptions import OtpDeliveryException
from school_auth.shared.logging import get_logger
from school_auth.shared.utils.datetime import utc_now
from school_auth.shared.utils.generators import generate_otp

logger = get_logger(__name__)


class OtpService:
    """Generate, persist, deliver and consume one-time codes."""

    def __init__(
        self,
        otp_repo: IOtpRepository,
        sender: IOtpSender,
        uow: IUnitOfWork,
        *,
        code_length: int = 6,
        ttl: timedelta = timedelta(minutes=10),
        delivery_timeout: float = 10.0,
    ) -> None:
        self._otp_repo = otp_repo
        self._sender = sender
        self._uow = uow
        self.code_length = code_length
        self.ttl = ttl
        self.delivery_timeout = delivery_timeout

    async def issue(
        self,
        user_id: str,
        phone: str,
        purpose: OtpPurpose,
        school_id: str | None = None,
        *,
        email: str | None = None,
    ) -> str:
        """Store a fresh code, commit, then deliver it. Returns the code.

        Pending changes in the same unit of work (e.g. a newly registered
        user) are committed together with the code.

        Raises:
            OtpDeliveryException: delivery failed or timed out; the code stays stored.
        """
        await self._otp_repo.invalidate_active(user_id, purpose, school_id)
        code = generate_otp(self.code_length)
        await self._otp_repo.create(
            user_id=user_id,
            code=code,
            purpose=purpose,
            school_id=school_id,
            expires_at=utc_now() + self.ttl,
        )
        await self._uow.commit()
        await self.deliver(phone, code, purpose, email=email)
        logger.info("OTP issued for user %s (purpose=%s)", user_id, purpose.value)
        return code

    async def deliver(
        self, phone: str, code: str, purpose: OtpPurpose, *, email: str | None = None
    ) -> None:
        """Hand code to the sender, bounded by delivery_timeout."""
        try:
            await asyncio.wait_for(
                self._sender.send_otp(phone, code, purpose, email=email),
                timeout=self.delivery_timeout,
            )
        except TimeoutError as e:
            logger.warning("OTP delivery timed out after %.1fs", self.delivery_timeout)
            raise OtpDeliveryException("delivery timed out") from e
        except OtpDeliveryException:
            logger.warning("OTP delivery failed", exc_info=True)
            raise

    async def verify(
        self,
        user_id: str,
        code: str,
        purpose: OtpPurpose,
        school_id: str | None = None,
    ) -> bool:
        """Consume a matching unused, unexpired code. Returns False if none matched.

        Wrong, expired and already-used codes are indistinguishable to the caller.
        """
        if not code:
            return False
        return await self._otp_repo.consume(
            user_id=user_id,
            code=code,
            purpose=purpose,
            school_id=school_id,
            now=utc_now(),
        )
