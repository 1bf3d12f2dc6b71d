"""Account and session lifecycle.

Registration, OTP verification, login, refresh, logout, password reset and
school account provisioning.

Access tokens carry a snapshot of the role's permissions taken at mint time.
A permission change on the role becomes visible to a user only after the next
login or refresh, which re-reads the live role.
"""

from __future__ import annotations

import asyncio
from typing import Any

from school_auth.application.dtos.role import RoleResult
from school_auth.application.dtos.session import (
    ClientInfo,
    LoginResult,
    OtpDispatchResult,
    RefreshResult,
    RegistrationResult,
    RequestContext,
    SessionUser,
)
from school_auth.application.dtos.token import RefreshTokenCreate
from school_auth.application.dtos.user import UserCreate, UserResult
from school_auth.application.interfaces.repositories import (
    IRefreshTokenRepository,
    IRoleRepository,
    IUnitOfWork,
    IUserRepository,
)
from school_auth.application.interfaces.services import (
    IPasswordHasher,
    ITokenCodec,
    TokenExpiredError,
)
from school_auth.application.services.authorization_service import has_permission
from school_auth.application.services.otp_service import OtpService
from school_auth.domain.enums import OtpPurpose, TokenType
from school_auth.domain.exceptions import (
    AlreadyVerifiedException,
    AuthenticationException,
    AuthorizationException,
    DataIntegrityException,
    InvalidContextException,
    InvalidOrExpiredOtpException,
    ResourceNotFoundException,
    UserAlreadyExistsException,
    ValidationException,
)
from school_auth.domain.permissions import Permissions
from school_auth.domain.rules import validate_password, validate_phone, validate_username
from school_auth.shared.logging import get_logger
from school_auth.shared.utils.datetime import ensure_utc, to_epoch_micros, utc_now
from school_auth.shared.utils.masking import mask_phone_number
from school_auth.shared.utils.user_agent import detect_device_type

logger = get_logger(__name__)

INVALID_CREDENTIALS = "Invalid username or password"


def session_claims(user: UserResult, role: RoleResult) -> dict[str, Any]:
    """Claims embedded in both access and refresh tokens."""
    return {
        "id": user.id,
        "roleId": role.id,
        "roleName": role.name,
        "permissions": list(role.permissions),
    }


class SessionService:
    """Orchestrates the account and session lifecycle over the credential store.

    State that must survive a later failure is committed explicitly through
    the unit of work: the new user and its OTP before delivery, and the
    deletion of an expired refresh token before the refresh call fails.
    """

    def __init__(
        self,
        user_repo: IUserRepository,
        role_repo: IRoleRepository,
        refresh_token_repo: IRefreshTokenRepository,
        otp_service: OtpService,
        token_codec: ITokenCodec,
        password_hasher: IPasswordHasher,
        uow: IUnitOfWork,
        *,
        default_role_name: str = "DEFAULT",
        revoke_sessions_on_password_reset: bool = True,
    ) -> None:
        self._user_repo = user_repo
        self._role_repo = role_repo
        self._refresh_token_repo = refresh_token_repo
        self._otp = otp_service
        self._codec = token_codec
        self._hasher = password_hasher
        self._uow = uow
        self.default_role_name = default_role_name
        self.revoke_sessions_on_password_reset = revoke_sessions_on_password_reset

    # Registration

    async def register(
        self,
        username: str,
        phone: str,
        password: str,
        context: RequestContext,
        email: str | None = None,
    ) -> RegistrationResult:
        """Create an unverified platform account and send it a registration OTP.

        The user and OTP are committed before delivery; if delivery fails the
        OtpDeliveryException propagates and the client can call resend_otp.
        """
        if not context.is_platform:
            raise InvalidContextException("Registration is only allowed in platform context")
        validate_username(username)
        validate_phone(phone)
        validate_password(password)

        if await self._user_repo.get_by_username(username) is not None:
            raise UserAlreadyExistsException()
        role = await self._role_repo.get_by_name(self.default_role_name, None)
        if role is None:
            raise DataIntegrityException(
                "Default role is not configured",
                {"role_name": self.default_role_name},
            )

        password_hash = await asyncio.to_thread(self._hasher.hash_password, password)
        user = await self._user_repo.create_user(
            UserCreate(
                username=username,
                phone=phone,
                password_hash=password_hash,
                role_id=role.id,
                email=email,
            )
        )
        logger.info("Registered user %s; phone verification pending", user.id)
        await self._otp.issue(
            user.id, user.phone, OtpPurpose.REGISTRATION, None, email=user.email
        )
        return RegistrationResult(user_id=user.id, masked_phone=mask_phone_number(user.phone))

    async def verify_otp_for_registration(
        self, username: str, otp: str, context: RequestContext
    ) -> None:
        """Consume the registration OTP and mark the phone verified in one transaction."""
        if not context.is_platform:
            raise InvalidContextException(
                "Registration verification is only allowed in platform context"
            )
        user = await self._user_repo.get_by_username(username)
        if user is None:
            raise ResourceNotFoundException("user")
        if user.is_phone_verified:
            raise AlreadyVerifiedException()
        if not await self._otp.verify(user.id, otp, OtpPurpose.REGISTRATION, None):
            raise InvalidOrExpiredOtpException()
        await self._user_repo.mark_phone_verified(user.id, utc_now())
        await self._uow.commit()
        logger.info("Phone verified for user %s", user.id)

    async def resend_otp(
        self,
        username: str,
        purpose: OtpPurpose,
        context: RequestContext | None = None,
    ) -> OtpDispatchResult:
        """Issue a fresh OTP for purpose, replacing any outstanding one.

        Registration codes are platform scoped. Password reset codes follow
        the same user resolution and scope as forgot_password.
        """
        if purpose == OtpPurpose.PASSWORD_RESET:
            return await self.forgot_password(username, context or RequestContext.platform())

        user = await self._user_repo.get_by_username(username)
        if user is None:
            raise ResourceNotFoundException("user")
        if user.is_phone_verified:
            raise AlreadyVerifiedException()
        self._require_phone(user)
        await self._otp.issue(
            user.id, user.phone, OtpPurpose.REGISTRATION, None, email=user.email
        )
        return OtpDispatchResult(masked_phone=mask_phone_number(user.phone))

    # Sessions

    async def login(
        self,
        username: str,
        password: str,
        context: RequestContext,
        client: ClientInfo | None = None,
    ) -> LoginResult:
        """Authenticate credentials in context and open a refresh session."""
        user = await self._resolve_user(username, context)
        role = await self._load_role(user)
        if context.is_platform and not has_permission(
            Permissions.PLATFORM_LOGIN, role.permissions
        ):
            raise AuthorizationException(
                "Platform login not permitted", permission=Permissions.PLATFORM_LOGIN
            )

        valid = await asyncio.to_thread(
            self._hasher.verify_password, password, user.password_hash
        )
        if not valid:
            raise AuthenticationException(INVALID_CREDENTIALS)

        claims = session_claims(user, role)
        access_token = self._codec.create_access_token(claims)
        refresh_token = self._codec.create_refresh_token(claims)
        now = utc_now()
        client = client or ClientInfo()
        await self._refresh_token_repo.create(
            RefreshTokenCreate(
                token=refresh_token,
                user_id=user.id,
                expires_at=now + self._codec.refresh_ttl,
                ip_address=client.ip_address,
                user_agent=client.user_agent,
                device_type=detect_device_type(client.user_agent),
                last_used_at=now,
            )
        )
        await self._user_repo.record_login(user.id, now)
        removed = await self._refresh_token_repo.delete_expired_or_revoked(user.id, now)
        await self._uow.commit()
        logger.info(
            "User %s logged in (%s context, %d stale sessions removed)",
            user.id,
            context.context.value,
            removed,
        )
        return LoginResult(
            access_token=access_token,
            refresh_token=refresh_token,
            user=SessionUser(
                id=user.id, username=user.username, role_id=role.id, role_name=role.name
            ),
        )

    async def refresh_token(
        self, refresh_token: str, context: RequestContext
    ) -> RefreshResult:
        """Exchange a valid refresh token for a new access/refresh pair.

        The stored row is updated in place, so the presented token stops
        working as soon as this call succeeds.
        """
        try:
            payload = self._codec.verify_refresh_token(refresh_token)
        except TokenExpiredError as e:
            await self._discard_expired(refresh_token)
            raise AuthenticationException("Refresh token expired") from e
        except ValueError as e:
            raise AuthenticationException("Invalid refresh token format") from e

        user = await self._user_repo.get_by_id(payload["id"])
        if user is None:
            raise AuthenticationException("Invalid refresh token")
        role = await self._load_role(user)
        if not user.is_active:
            raise AuthorizationException("User account is not active")
        self._check_refresh_context(user, role, context)

        row = await self._refresh_token_repo.get_by_token(refresh_token)
        if row is None or row.user_id != user.id:
            raise AuthenticationException("Invalid refresh token")
        now = utc_now()
        if ensure_utc(row.expires_at) < now:
            await self._discard_expired(refresh_token)
            raise AuthenticationException("Refresh token expired")

        claims = session_claims(user, role)
        access_token = self._codec.create_access_token(claims)
        new_refresh_token = self._codec.create_refresh_token(claims)
        rotated = await self._refresh_token_repo.rotate(
            refresh_token,
            user.id,
            new_refresh_token,
            now + self._codec.refresh_ttl,
            now,
        )
        if not rotated:
            raise AuthenticationException("Invalid refresh token")
        await self._uow.commit()
        logger.info("Refresh token rotated for user %s", user.id)
        return RefreshResult(access_token=access_token, refresh_token=new_refresh_token)

    async def logout(self, refresh_token: str, user_id: str | None = None) -> None:
        """Delete the refresh session if present. Never reports failure."""
        try:
            deleted = await self._refresh_token_repo.delete_by_token(refresh_token, user_id)
            await self._uow.commit()
        except Exception:
            logger.exception("Logout failed to delete refresh token")
            await self._uow.rollback()
            return
        if deleted:
            logger.info("User %s logged out", user_id or "<unknown>")

    # Password reset

    async def forgot_password(
        self, username: str, context: RequestContext
    ) -> OtpDispatchResult:
        """Send a password reset OTP to the user's phone; returns the masked number."""
        user = await self._resolve_user(username, context)
        self._require_phone(user)
        await self._otp.issue(
            user.id,
            user.phone,
            OtpPurpose.PASSWORD_RESET,
            _otp_scope(context),
            email=user.email,
        )
        return OtpDispatchResult(masked_phone=mask_phone_number(user.phone))

    async def verify_otp_for_password_reset(
        self, username: str, otp: str, context: RequestContext
    ) -> str:
        """Consume the password reset OTP and return a short-lived reset token."""
        user = await self._resolve_user(username, context)
        if not await self._otp.verify(
            user.id, otp, OtpPurpose.PASSWORD_RESET, _otp_scope(context)
        ):
            raise InvalidOrExpiredOtpException()
        await self._uow.commit()
        logger.info("Password reset OTP verified for user %s", user.id)
        return self._codec.create_reset_token(user.id, user.password_changed_at)

    async def reset_password(self, reset_token: str, new_password: str) -> None:
        """Set a new password using a reset token.

        A reset token authorizes one change: it is refused once the password
        has changed since the token was minted (pwdChangedAt claim).
        """
        validate_password(new_password, field="newPassword")
        try:
            payload = self._codec.verify_reset_token(reset_token)
        except ValueError as e:
            raise AuthenticationException("Invalid or expired reset token") from e
        if payload.get("type") != TokenType.RESET_PASSWORD.value:
            raise AuthenticationException("Invalid reset token")

        user_id = payload.get("userId")
        user = await self._user_repo.get_by_id(user_id) if user_id else None
        if user is None:
            raise ResourceNotFoundException("user")
        if payload.get("pwdChangedAt") != to_epoch_micros(user.password_changed_at):
            raise AuthenticationException("Invalid or expired reset token")

        password_hash = await asyncio.to_thread(self._hasher.hash_password, new_password)
        await self._user_repo.update_password(user.id, password_hash, utc_now())
        revoked = 0
        if self.revoke_sessions_on_password_reset:
            revoked = await self._refresh_token_repo.delete_all_for_user(user.id)
        await self._uow.commit()
        logger.info("Password reset for user %s (%d sessions revoked)", user.id, revoked)

    # Account

    async def get_me(self, user_id: str) -> UserResult:
        user = await self._user_repo.get_by_id(user_id)
        if user is None:
            raise ResourceNotFoundException("user")
        return user

    async def assign_school(self, user_id: str, school_id: str) -> UserResult:
        """Attach an account to a school (administrative; caller checks permission)."""
        if not school_id:
            raise ValidationException("schoolId is required", field="schoolId")
        user = await self._user_repo.assign_school(user_id, school_id)
        if user is None:
            raise ResourceNotFoundException("user", user_id)
        await self._uow.commit()
        logger.info("User %s assigned to school %s", user_id, school_id)
        return user

    # Provisioning

    async def provision_school_account(
        self,
        actor_id: str,
        username: str,
        phone: str,
        password: str,
        role_name: str,
        context: RequestContext,
        email: str | None = None,
    ) -> UserResult:
        """Create an active, phone-verified account in the context school.

        The account gets the school's role named role_name. With a subdomain
        in the context the stored username is username@subdomain, which school
        login also resolves from the bare username. The caller must belong to
        the context school; the route checks its permission.
        """
        if not context.is_school or not context.school_id:
            raise InvalidContextException("Account provisioning requires school context")
        actor = await self._user_repo.get_by_id(actor_id)
        if actor is None or actor.school_id != context.school_id:
            raise AuthorizationException("Caller does not belong to this school")
        validate_username(username)
        validate_phone(phone)
        validate_password(password)

        stored_username = username
        if context.subdomain and "@" not in username:
            stored_username = f"{username}@{context.subdomain}"
        if await self._user_repo.get_by_username(stored_username) is not None:
            raise UserAlreadyExistsException("Username already exists")
        if await self._user_repo.get_by_phone(phone) is not None:
            raise UserAlreadyExistsException("Phone number already exists")
        role = await self._role_repo.get_by_name(role_name, context.school_id)
        if role is None:
            raise ResourceNotFoundException("role", role_name)

        password_hash = await asyncio.to_thread(self._hasher.hash_password, password)
        user = await self._user_repo.create_user(
            UserCreate(
                username=stored_username,
                phone=phone,
                password_hash=password_hash,
                role_id=role.id,
                email=email,
                school_id=context.school_id,
                phone_verified_at=utc_now(),
            )
        )
        await self._uow.commit()
        logger.info(
            "Provisioned %s account %s in school %s by %s",
            role.name,
            user.id,
            context.school_id,
            actor_id,
        )
        return user

    # Helpers

    async def _find_user(self, username: str, context: RequestContext) -> UserResult:
        """Resolve username within context; no cross-school match."""
        if context.is_platform:
            user = await self._user_repo.get_by_username(username)
            if user is None:
                raise ResourceNotFoundException("user")
            return user
        if not context.is_school or not context.school_id:
            raise InvalidContextException("School context requires a school id")

        user = await self._user_repo.get_by_username_and_school(username, context.school_id)
        if user is None and context.subdomain and "@" not in username:
            user = await self._user_repo.get_by_username_and_school(
                f"{username}@{context.subdomain}", context.school_id
            )
        if user is not None:
            return user
        if await self._user_repo.get_by_username(username) is not None:
            raise AuthorizationException("User does not belong to this school")
        raise ResourceNotFoundException("user")

    async def _resolve_user(self, username: str, context: RequestContext) -> UserResult:
        """Find the user in context and require an active, phone-verified account."""
        user = await self._find_user(username, context)
        if not user.is_active:
            raise AuthorizationException("User account is not active")
        if not user.is_phone_verified:
            raise AuthorizationException("Phone number is not verified")
        return user

    async def _load_role(self, user: UserResult) -> RoleResult:
        role = await self._role_repo.get_by_id(user.role_id)
        if role is None:
            logger.error("User %s references missing role %s", user.id, user.role_id)
            raise DataIntegrityException(
                "User role not found", {"user_id": user.id, "role_id": user.role_id}
            )
        return role

    def _check_refresh_context(
        self, user: UserResult, role: RoleResult, context: RequestContext
    ) -> None:
        if context.is_platform:
            if not has_permission(Permissions.PLATFORM_LOGIN, role.permissions):
                raise AuthorizationException(
                    "Platform login not permitted", permission=Permissions.PLATFORM_LOGIN
                )
        elif context.is_school:
            if not context.school_id or user.school_id != context.school_id:
                raise AuthenticationException("Invalid refresh token for this school")
        else:
            raise InvalidContextException()

    async def _discard_expired(self, refresh_token: str) -> None:
        """Delete an expired session row and commit before the caller fails."""
        if await self._refresh_token_repo.delete_by_token(refresh_token):
            await self._uow.commit()
            logger.info("Removed expired refresh token")

    @staticmethod
    def _require_phone(user: UserResult) -> None:
        if not user.phone:
            raise ValidationException("No phone number on file", field="phone")


def _otp_scope(context: RequestContext) -> str | None:
    return context.school_id if context.is_school else None
