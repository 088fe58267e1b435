"""Redis caching setup using fastapi-cache2."""

import hashlib
import logging

from fastapi_cache import FastAPICache
from fastapi_cache.backends.inmemory import InMemoryBackend
from fastapi_cache.backends.redis import RedisBackend

from app.config import get_settings

logger = logging.getLogger(__name__)

CACHE_PREFIX = "league"

# Namespaces used by the standings endpoints
STANDINGS_NAMESPACE = "standings"
STANDINGS_PAGE_NAMESPACE = "standings:page"


def _cache_key_builder(func, namespace: str = "", *, request=None, response=None, args=None, kwargs=None):
    """Key builder that scopes keys by stage and varies them by query string."""
    # fastapi-cache passes the namespace already prefixed, e.g. "league:standings"
    parts = [namespace]

    stage_id = (kwargs or {}).get("stage_id")
    if stage_id is not None:
        parts.append(f"stage:{stage_id}")

    parts.extend([func.__module__, func.__qualname__])

    if request:
        # Include query string for cache variation
        query = str(request.query_params)
        if query:
            parts.append(hashlib.md5(query.encode()).hexdigest())

    return ":".join(parts)


def _init_disabled() -> None:
    # Decorated endpoints still need an initialized FastAPICache
    FastAPICache.init(InMemoryBackend(), prefix=CACHE_PREFIX, enable=False)


async def init_cache():
    """Initialize Redis cache. Call from app lifespan."""
    settings = get_settings()
    if not settings.cache_enabled:
        logger.info("Redis cache disabled via CACHE_ENABLED=false")
        _init_disabled()
        return
    try:
        from redis import asyncio as aioredis
        # JsonCoder decodes bytes itself
        redis = aioredis.from_url(settings.redis_cache_url)
        await redis.ping()
        FastAPICache.init(
            RedisBackend(redis),
            prefix=CACHE_PREFIX,
            expire=settings.cache_ttl_seconds,
            key_builder=_cache_key_builder,
        )
        logger.info("Redis cache initialized (%s)", settings.redis_cache_url)
    except Exception as e:
        logger.warning("Redis cache init failed, caching disabled: %s", e)
        _init_disabled()


async def invalidate_pattern(pattern: str):
    """Delete all cache keys matching a pattern (e.g. 'standings:stage:12:*') under CACHE_PREFIX."""
    try:
        backend = FastAPICache.get_backend()
        redis = getattr(backend, "redis", None)
        if redis is None:
            return
        full_pattern = f"{CACHE_PREFIX}:{pattern}"
        keys = []
        async for key in redis.scan_iter(match=full_pattern):
            keys.append(key)
        if keys:
            await redis.delete(*keys)
            logger.debug("Invalidated %d cache keys matching %s", len(keys), full_pattern)
    except Exception as e:
        logger.warning("Cache invalidation failed for pattern %s: %s", pattern, e)


async def invalidate_stage_standings(stage_id: int):
    """Drop cached views of one stage after its results were corrected."""
    await invalidate_pattern(f"{STANDINGS_NAMESPACE}:stage:{stage_id}:*")
    # The standings page embeds whichever stage it shows
    await invalidate_pattern(f"{STANDINGS_PAGE_NAMESPACE}:*")
