"""OtpService unit tests: purpose/scope isolation, replacement and delivery bounds."""

from dataclasses import replace
from datetime import timedelta

import pytest

from school_auth.application.services.otp_service import OtpService
from school_auth.domain.enums import OtpPurpose
from school_auth.domain.exceptions import OtpDeliveryException
from school_auth.shared.utils.datetime import utc_now
from tests.conftest import SCHOOL_ID

USER_ID = "user-1"
PHONE = "9876543210"


async def test_issue_stores_code_and_commits_before_delivery(
    otp_service, store, sender
) -> None:
    code = await otp_service.issue(USER_ID, PHONE, OtpPurpose.REGISTRATION)

    assert len(code) == 6
    assert code.isdigit()
    [stored] = store.otps_for(USER_ID)
    assert stored.code == code
    assert stored.school_id is None
    assert stored.is_used is False
    assert store.uow.commits == 1
    assert sender.sent[-1].code == code


async def test_code_expires_after_ttl(store, sender) -> None:
    svc = OtpService(store.otp_repo, sender, store.uow, ttl=timedelta(minutes=5))
    before = utc_now()
    await svc.issue(USER_ID, PHONE, OtpPurpose.REGISTRATION)
    [stored] = store.otps_for(USER_ID)
    assert before + timedelta(minutes=5) <= stored.expires_at <= utc_now() + timedelta(minutes=5)


async def test_code_length_is_configurable(store, sender) -> None:
    svc = OtpService(store.otp_repo, sender, store.uow, code_length=8)
    code = await svc.issue(USER_ID, PHONE, OtpPurpose.REGISTRATION)
    assert len(code) == 8


async def test_verify_consumes_code_once(otp_service) -> None:
    code = await otp_service.issue(USER_ID, PHONE, OtpPurpose.REGISTRATION)
    assert await otp_service.verify(USER_ID, code, OtpPurpose.REGISTRATION) is True
    assert await otp_service.verify(USER_ID, code, OtpPurpose.REGISTRATION) is False


async def test_verify_rejects_other_purpose(otp_service) -> None:
    code = await otp_service.issue(USER_ID, PHONE, OtpPurpose.REGISTRATION)
    assert await otp_service.verify(USER_ID, code, OtpPurpose.PASSWORD_RESET) is False
    assert await otp_service.verify(USER_ID, code, OtpPurpose.REGISTRATION) is True


async def test_verify_rejects_other_scope(otp_service) -> None:
    code = await otp_service.issue(USER_ID, PHONE, OtpPurpose.PASSWORD_RESET, SCHOOL_ID)
    assert await otp_service.verify(USER_ID, code, OtpPurpose.PASSWORD_RESET, None) is False
    assert await otp_service.verify(USER_ID, code, OtpPurpose.PASSWORD_RESET, "school-x") is False
    assert await otp_service.verify(USER_ID, code, OtpPurpose.PASSWORD_RESET, SCHOOL_ID) is True


async def test_verify_rejects_other_user(otp_service) -> None:
    code = await otp_service.issue(USER_ID, PHONE, OtpPurpose.REGISTRATION)
    assert await otp_service.verify("user-2", code, OtpPurpose.REGISTRATION) is False


async def test_verify_rejects_expired_code(otp_service, store) -> None:
    code = await otp_service.issue(USER_ID, PHONE, OtpPurpose.REGISTRATION)
    store.otps[0] = replace(store.otps[0], expires_at=utc_now() - timedelta(seconds=1))
    assert await otp_service.verify(USER_ID, code, OtpPurpose.REGISTRATION) is False


async def test_verify_empty_code_is_false(otp_service) -> None:
    await otp_service.issue(USER_ID, PHONE, OtpPurpose.REGISTRATION)
    assert await otp_service.verify(USER_ID, "", OtpPurpose.REGISTRATION) is False


async def test_issue_invalidates_previous_code_for_same_purpose_and_scope(
    otp_service, store
) -> None:
    await otp_service.issue(USER_ID, PHONE, OtpPurpose.REGISTRATION)
    await otp_service.issue(USER_ID, PHONE, OtpPurpose.REGISTRATION)
    first, second = store.otps_for(USER_ID)
    assert first.is_used is True
    assert second.is_used is False


async def test_issue_leaves_codes_of_other_purpose_active(otp_service, store) -> None:
    await otp_service.issue(USER_ID, PHONE, OtpPurpose.PASSWORD_RESET)
    await otp_service.issue(USER_ID, PHONE, OtpPurpose.REGISTRATION)
    [reset] = store.otps_for(USER_ID, OtpPurpose.PASSWORD_RESET)
    assert reset.is_used is False


async def test_delivery_failure_raises_after_commit(otp_service, store, sender) -> None:
    sender.fail = True
    with pytest.raises(OtpDeliveryException):
        await otp_service.issue(USER_ID, PHONE, OtpPurpose.REGISTRATION)
    assert store.uow.commits == 1
    assert len(store.otps_for(USER_ID)) == 1


async def test_delivery_timeout_raises_delivery_exception(store, sender) -> None:
    sender.delay = 1.0
    svc = OtpService(store.otp_repo, sender, store.uow, delivery_timeout=0.05)
    with pytest.raises(OtpDeliveryException) as exc_info:
        await svc.issue(USER_ID, PHONE, OtpPurpose.REGISTRATION)
    assert exc_info.value.details["reason"] == "delivery timed out"
    assert sender.sent == []
