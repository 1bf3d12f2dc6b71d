"""User administration API (permission-gated)."""

from typing import Annotated

from fastapi import APIRouter, Depends

from school_auth.api.v1.dependencies import (
    get_request_context,
    get_session_service,
    require_permission,
)
from school_auth.application.dtos.session import CurrentUser, RequestContext
from school_auth.application.dtos.user import UserResult
from school_auth.application.services.session_service import SessionService
from school_auth.domain.enums import SchoolRole
from school_auth.domain.permissions import Permissions
from school_auth.schemas.common import ApiResponse
from school_auth.schemas.user import (
    AssignedUser,
    AssignSchoolRequest,
    ProvisionAccountRequest,
    ProvisionedUser,
)

router = APIRouter()


def _provisioned(user: UserResult) -> ProvisionedUser:
    return ProvisionedUser(
        id=user.id,
        username=user.username,
        school_id=user.school_id,
        role_id=user.role_id,
        is_phone_verified=user.is_phone_verified,
    )


@router.post("/students", response_model=ApiResponse[ProvisionedUser], status_code=201)
async def provision_student(
    body: ProvisionAccountRequest,
    current_user: Annotated[
        CurrentUser, Depends(require_permission(Permissions.STUDENT_CREATE))
    ],
    context: Annotated[RequestContext, Depends(get_request_context)],
    service: Annotated[SessionService, Depends(get_session_service)],
):
    """Create a student account in the context school. Requires student.create."""
    user = await service.provision_school_account(
        current_user.id,
        body.username,
        body.phone,
        body.password,
        SchoolRole.STUDENT.value,
        context,
        email=body.email,
    )
    return ApiResponse(data=_provisioned(user))


@router.post("/teachers", response_model=ApiResponse[ProvisionedUser], status_code=201)
async def provision_teacher(
    body: ProvisionAccountRequest,
    current_user: Annotated[
        CurrentUser, Depends(require_permission(Permissions.TEACHER_CREATE))
    ],
    context: Annotated[RequestContext, Depends(get_request_context)],
    service: Annotated[SessionService, Depends(get_session_service)],
):
    """Create a teacher account in the context school. Requires teacher.create."""
    user = await service.provision_school_account(
        current_user.id,
        body.username,
        body.phone,
        body.password,
        SchoolRole.TEACHER.value,
        context,
        email=body.email,
    )
    return ApiResponse(data=_provisioned(user))


@router.post("/{user_id}/school", response_model=ApiResponse[AssignedUser])
async def assign_school(
    user_id: str,
    body: AssignSchoolRequest,
    _: Annotated[
        CurrentUser, Depends(require_permission(Permissions.PLATFORM_SCHOOL_ASSIGN))
    ],
    service: Annotated[SessionService, Depends(get_session_service)],
):
    """Attach a user to a school. Requires platform.school.assign."""
    user = await service.assign_school(user_id, body.school_id)
    return ApiResponse(
        data=AssignedUser(id=user.id, username=user.username, school_id=user.school_id)
    )
