import logging
import os
import urllib.parse
from typing import Optional

import redis

logger = logging.getLogger(__name__)

# Get Redis URL from environment (format: redis://host:port/db)
REDIS_URL = os.getenv("REDIS_URL", "redis://localhost:6379/0")
TESTING = os.getenv("TESTING", "false").lower() == "true"

parsed = urllib.parse.urlparse(REDIS_URL)

REDIS_HOST = parsed.hostname or "localhost"
REDIS_PORT = parsed.port or 6379
REDIS_DB = int(parsed.path.lstrip("/") or 0)

# Cache expiration times
CONFERENCES_CACHE_TTL = 300
CONFERENCES_CACHE_PREFIX = "conferences:"


def _connect() -> Optional[redis.Redis]:
    if TESTING:
        logger.info("Redis cache disabled (testing mode)")
        return None

    try:
        client = redis.Redis(
            host=REDIS_HOST,
            port=REDIS_PORT,
            db=REDIS_DB,
            decode_responses=True,  # Automatically decode bytes to strings
        )
        client.ping()
        logger.info(f"Redis connected: {REDIS_HOST}:{REDIS_PORT}/{REDIS_DB}")
        return client
    except redis.ConnectionError as e:
        logger.error(f"Redis connection failed: {e}")
        return None


redis_client = _connect()  # pylint: disable=invalid-name


def get_cache(key: str) -> Optional[str]:
    """
    Get value from Redis cache.
    Returns None if key doesn't exist or Redis is unavailable
    """
    if not redis_client:
        return None

    try:
        value = redis_client.get(key)
        if value:
            logger.info(f"Cache HIT: {key}")
        else:
            logger.info(f"Cache MISS: {key}")
        return value  # type: ignore
    except redis.RedisError as e:
        logger.error(f"Redis GET error: {e}")
        return None


def set_cache(key: str, value: str, ttl: int = CONFERENCES_CACHE_TTL) -> bool:
    """
    Set value in Redis cache with expiration time.
    Returns True if successful, False otherwise.
    """
    if not redis_client:
        return False

    try:
        redis_client.setex(key, ttl, value)
        logger.info(f"Cache SET: {key} (TTL: {ttl}s)")
        return True
    except redis.RedisError as e:
        logger.error(f"Redis SET error: {e}")
        return False


def delete_cache(key: str) -> bool:
    if not redis_client:
        return False

    try:
        redis_client.delete(key)
        logger.info(f"Cache DELETE: {key}")
        return True
    except redis.RedisError as e:
        logger.error(f"Redis DELETE error: {e}")
        return False


def conferences_cache_key(page: int) -> str:
    return f"{CONFERENCES_CACHE_PREFIX}page_{page}"


def invalidate_conferences_cache():
    """
    Drop every cached conference page.
    Called whenever a conference is created, updated or deleted.
    """
    if not redis_client:
        return

    try:
        for key in redis_client.scan_iter(match=f"{CONFERENCES_CACHE_PREFIX}*"):
            delete_cache(key)  # type: ignore
        logger.info("Invalidated conferences cache")
    except redis.RedisError as e:
        logger.error(f"Redis SCAN error: {e}")
