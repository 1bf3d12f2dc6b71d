"""Response envelope and base model shared by all API schemas."""

from datetime import datetime
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from school_auth.shared.utils.datetime import utc_now

DataT = TypeVar("DataT")


class CamelModel(BaseModel):
    """Base for request/response bodies: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ApiResponse(BaseModel, Generic[DataT]):
    """Success envelope: {success: true, data, timestamp}."""

    success: bool = True
    data: DataT
    timestamp: datetime = Field(default_factory=utc_now)


class MessageData(BaseModel):
    message: str


def error_body(error: dict[str, Any]) -> dict[str, Any]:
    """Failure envelope: {success: false, error: {message, code, details?}, timestamp}."""
    return {"success": False, "error": error, "timestamp": utc_now().isoformat()}
