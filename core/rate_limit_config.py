import logging
import os

from fastapi import Request
from slowapi import Limiter
from slowapi.util import get_remote_address

logger = logging.getLogger(__name__)


def get_user_id_or_ip(request: Request) -> str:
    """
    Get a unique identifier for rate limiting
    Priority:
    1. User ID (if authenticated)
    2. IP address (if not authenticated)
    """
    # Set by the auth dependency on protected routes
    if hasattr(request.state, "user"):
        identifier = f"user_{request.state.user.id}"
        logger.debug(f"Rate limit key: {identifier}")
        return identifier

    identifier = f"ip_{get_remote_address(request)}"
    logger.debug(f"Rate limit key: {identifier}")
    return identifier


TESTING = os.getenv("TESTING", "false").lower() == "true"

REDIS_URL = os.getenv("REDIS_URL", "redis://localhost:6379/0")

if TESTING:
    limiter = Limiter(key_func=get_user_id_or_ip, enabled=False)
    logger.info("Rate limiting DISABLED for testing")
else:
    limiter = Limiter(
        key_func=get_user_id_or_ip,
        default_limits=["1000/hour"],
        storage_uri=REDIS_URL,
        strategy="fixed-window",
    )
    logger.info(f"Rate limiting ENABLED with storage: {REDIS_URL}")
