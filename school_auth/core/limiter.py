"""Rate limiter instance for SlowAPI.

Shared so both main (app.state.limiter) and route modules can use the same
instance without circular imports. Limit strings live here only.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

limiter = Limiter(key_func=get_remote_address)

# Credential and OTP endpoints (brute-force targets).
AUTH_LIMIT = "10/minute"
# Session maintenance endpoints (refresh, logout, me).
SESSION_LIMIT = "60/minute"

limit_auth = limiter.limit(AUTH_LIMIT)
limit_session = limiter.limit(SESSION_LIMIT)
