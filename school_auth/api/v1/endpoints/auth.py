"""Auth API: registration, OTP verification, login, refresh, logout, password reset, me.

Routes use only injected dependencies; every response is wrapped in the
success envelope and every failure is rendered by the exception handlers.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from school_auth.api.v1.dependencies import (
    get_client_info,
    get_current_user,
    get_request_context,
    get_session_service,
)
from school_auth.application.dtos.session import ClientInfo, CurrentUser, RequestContext
from school_auth.application.services.session_service import SessionService
from school_auth.core.limiter import limit_auth, limit_session
from school_auth.schemas.auth import (
    ForgotPasswordRequest,
    LoginData,
    LoginRequest,
    LogoutRequest,
    OtpSentData,
    RefreshData,
    RefreshTokenRequest,
    RegisterRequest,
    RegistrationData,
    ResendOtpRequest,
    ResetPasswordRequest,
    ResetTokenData,
    SessionUserData,
    VerifyOtpRequest,
)
from school_auth.schemas.common import ApiResponse, MessageData
from school_auth.schemas.user import UserProfile

router = APIRouter()

Service = Annotated[SessionService, Depends(get_session_service)]
Context = Annotated[RequestContext, Depends(get_request_context)]


@router.post("/register", response_model=ApiResponse[RegistrationData], status_code=201)
@limit_auth
async def register(
    request: Request, body: RegisterRequest, service: Service, context: Context
):
    """Register a platform account; an OTP is sent to the phone for verification."""
    result = await service.register(
        username=body.username,
        phone=body.phone,
        password=body.password,
        context=context,
        email=str(body.email) if body.email else None,
    )
    return ApiResponse(
        data=RegistrationData(user_id=result.user_id, masked_phone=result.masked_phone)
    )


@router.post("/resend-otp", response_model=ApiResponse[OtpSentData])
@limit_auth
async def resend_otp(
    request: Request, body: ResendOtpRequest, service: Service, context: Context
):
    """Issue a fresh OTP for registration or password reset (previous codes stop working)."""
    result = await service.resend_otp(body.username, body.purpose, context)
    return ApiResponse(data=OtpSentData(masked_phone=result.masked_phone))


@router.post("/verify-otp/registration", response_model=ApiResponse[MessageData])
@limit_auth
async def verify_otp_registration(
    request: Request, body: VerifyOtpRequest, service: Service, context: Context
):
    await service.verify_otp_for_registration(body.username, body.otp, context)
    return ApiResponse(data=MessageData(message="Phone number verified"))


@router.post("/verify-otp/password-reset", response_model=ApiResponse[ResetTokenData])
@limit_auth
async def verify_otp_password_reset(
    request: Request, body: VerifyOtpRequest, service: Service, context: Context
):
    """Exchange a password reset OTP for a short-lived reset token."""
    reset_token = await service.verify_otp_for_password_reset(
        body.username, body.otp, context
    )
    return ApiResponse(data=ResetTokenData(reset_token=reset_token))


@router.post("/login", response_model=ApiResponse[LoginData])
@limit_auth
async def login(
    request: Request,
    body: LoginRequest,
    service: Service,
    context: Context,
    client: Annotated[ClientInfo, Depends(get_client_info)],
):
    """Authenticate in the request context; returns an access/refresh token pair."""
    result = await service.login(body.username, body.password, context, client)
    return ApiResponse(
        data=LoginData(
            access_token=result.access_token,
            refresh_token=result.refresh_token,
            user=SessionUserData(
                id=result.user.id,
                username=result.user.username,
                role_id=result.user.role_id,
                role_name=result.user.role_name,
            ),
        )
    )


@router.post("/refresh-token", response_model=ApiResponse[RefreshData])
@limit_session
async def refresh_token(
    request: Request, body: RefreshTokenRequest, service: Service, context: Context
):
    """Rotate the refresh token; the presented token stops working."""
    result = await service.refresh_token(body.refresh_token, context)
    return ApiResponse(
        data=RefreshData(
            access_token=result.access_token,
            refresh_token=result.refresh_token,
            token_rotated=result.token_rotated,
        )
    )


@router.post("/logout", response_model=ApiResponse[MessageData])
@limit_session
async def logout(
    request: Request,
    body: LogoutRequest,
    service: Service,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
):
    """End a session. Succeeds whether or not the refresh token was found."""
    await service.logout(body.refresh_token, user_id=current_user.id)
    return ApiResponse(data=MessageData(message="Logged out"))


@router.post("/forgot-password", response_model=ApiResponse[OtpSentData])
@limit_auth
async def forgot_password(
    request: Request, body: ForgotPasswordRequest, service: Service, context: Context
):
    """Send a password reset OTP; returns the masked phone number."""
    result = await service.forgot_password(body.username, context)
    return ApiResponse(data=OtpSentData(masked_phone=result.masked_phone))


@router.post("/reset-password", response_model=ApiResponse[MessageData])
@limit_auth
async def reset_password(request: Request, body: ResetPasswordRequest, service: Service):
    await service.reset_password(body.reset_token, body.new_password)
    return ApiResponse(data=MessageData(message="Password reset successful"))


@router.get("/me", response_model=ApiResponse[UserProfile])
@limit_session
async def get_me(
    request: Request,
    service: Service,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
):
    """Return the current user. roleName and permissions are the token snapshot."""
    user = await service.get_me(current_user.id)
    return ApiResponse(
        data=UserProfile(
            id=user.id,
            username=user.username,
            phone=user.phone,
            email=user.email,
            school_id=user.school_id,
            role_id=current_user.role_id,
            role_name=current_user.role_name,
            permissions=list(current_user.permissions),
            is_active=user.is_active,
            is_phone_verified=user.is_phone_verified,
            is_email_verified=user.is_email_verified,
            last_login_at=user.last_login_at,
            created_at=user.created_at,
        )
    )
