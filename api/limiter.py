"""
api/limiter.py -- Rate limiter shared by every Lampshop Admin router.

api/main.py mounts it through SlowAPIMiddleware; route modules decorate
handlers with @limiter.limit(READ_LIMIT) or @limiter.limit(WRITE_LIMIT).
All routes count against one in-memory store keyed by client IP, so the
counters reset on restart and are not shared between worker processes.

POST /login takes its limit from LOGIN_RATE_LIMIT (see api/routes/auth.py).
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

READ_LIMIT = "120/minute"
WRITE_LIMIT = "60/minute"

limiter = Limiter(key_func=get_remote_address, storage_uri="memory://")
