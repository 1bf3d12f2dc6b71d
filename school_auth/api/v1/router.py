"""API v1 router aggregation.

Auth routes sit directly under the API prefix; user administration under
/users. Health is mounted separately at the application root.
"""

from fastapi import APIRouter

from school_auth.api.v1.endpoints import auth, users

api_router = APIRouter()

api_router.include_router(auth.router, tags=["auth"])
api_router.include_router(users.router, prefix="/users", tags=["users"])
