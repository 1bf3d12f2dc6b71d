"""Health check endpoint. No dependencies; used for liveness probes."""

from fastapi import APIRouter

from school_auth.core.config import get_settings
from school_auth.schemas.common import ApiResponse
from school_auth.schemas.health import HealthData

router = APIRouter()


@router.get("", response_model=ApiResponse[HealthData])
def health_check() -> ApiResponse[HealthData]:
    """Return ok status for liveness."""
    settings = get_settings()
    return ApiResponse(
        data=HealthData(service=settings.app_name, version=settings.app_version)
    )
