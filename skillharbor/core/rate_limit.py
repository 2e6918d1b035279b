"""
Request throttling shared by feature routers.
"""
from slowapi import Limiter
from slowapi.util import get_remote_address

from skillharbor.core import config


def get_authorization_header(request) -> str:
    """
    Extract authorization header for rate limiting.
    Falls back to the client address for anonymous requests.
    """
    auth = request.headers.get("Authorization", "")
    return auth or get_remote_address(request)


limiter = Limiter(
    key_func=get_authorization_header,
    strategy="moving-window",
    enabled=config.RATE_LIMIT_ENABLED,
)
