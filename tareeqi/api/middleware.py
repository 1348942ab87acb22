"""Rate limiting shared by all routers (slowapi, keyed by client address)."""

from slowapi import Limiter
from slowapi.util import get_remote_address

from tareeqi.config import settings

limiter = Limiter(key_func=get_remote_address)

# Per-route limit string, e.g. ``@limiter.limit(RATE_LIMIT)``
RATE_LIMIT = settings.rate_limit
