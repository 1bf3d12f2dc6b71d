"""API v1: auth and user routes."""

from school_auth.api.v1.router import api_router

__all__ = ["api_router"]
