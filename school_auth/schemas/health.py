"""Health check schema."""

from pydantic import BaseModel


class HealthData(BaseModel):
    status: str = "ok"
    service: str
    version: str
