"""HTTP SMS gateway sender (Fast2SMS-style bulk API)."""

from __future__ import annotations

import httpx

from school_auth.domain.enums import OtpPurpose
from school_auth.domain.exceptions import OtpDeliveryException
from school_auth.shared.logging import get_logger
from school_auth.shared.utils.masking import mask_phone_number

logger = get_logger(__name__)


class SmsOtpSender:
    """Post OTPs to an SMS gateway.

    The gateway takes a JSON body `{route, variables_values, numbers}` and an
    `authorization` header carrying the API key, and answers `{"return": true}`
    on success. Uses the shared httpx.AsyncClient when one is given.
    """

    def __init__(
        self,
        api_url: str,
        api_key: str,
        *,
        http_client: httpx.AsyncClient | None = None,
        timeout: float = 10.0,
        message_template: str | None = "Your verification code is {code}",
    ) -> None:
        if not api_url or not api_key:
            raise ValueError("api_url and api_key are required")
        self.api_url = api_url
        self._api_key = api_key
        self._http_client = http_client
        self.timeout = timeout
        self.message_template = message_template

    def _payload(self, phone: str, code: str) -> dict[str, str]:
        payload = {"route": "otp", "variables_values": code, "numbers": phone}
        if self.message_template:
            payload["message"] = self.message_template.format(code=code)
        return payload

    async def send_otp(
        self, phone: str, code: str, purpose: OtpPurpose, *, email: str | None = None
    ) -> None:
        """Send code to phone; raise OtpDeliveryException on transport or gateway error."""
        headers = {"authorization": self._api_key, "Content-Type": "application/json"}
        try:
            if self._http_client is not None:
                response = await self._http_client.post(
                    self.api_url,
                    json=self._payload(phone, code),
                    headers=headers,
                    timeout=self.timeout,
                )
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.post(
                        self.api_url, json=self._payload(phone, code), headers=headers
                    )
            response.raise_for_status()
            body = response.json()
        except httpx.HTTPStatusError as e:
            logger.error("SMS gateway returned %s", e.response.status_code)
            raise OtpDeliveryException(f"gateway status {e.response.status_code}") from e
        except httpx.HTTPError as e:
            logger.error("SMS gateway request failed: %s", type(e).__name__)
            raise OtpDeliveryException("gateway unreachable") from e
        except ValueError as e:
            raise OtpDeliveryException("gateway returned invalid JSON") from e

        if not isinstance(body, dict) or not body.get("return"):
            reason = body.get("message") if isinstance(body, dict) else None
            logger.error("SMS gateway rejected message: %s", reason or "no reason given")
            raise OtpDeliveryException("gateway rejected message")
        logger.info(
            "OTP SMS sent to %s (purpose=%s)", mask_phone_number(phone), purpose.value
        )
