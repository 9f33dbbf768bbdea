import logging
from typing import Optional

from redis.asyncio import Redis, ConnectionPool

from storefront.core.config import settings
from storefront.core.document_store import DocumentStore

logger = logging.getLogger(__name__)

_pool: Optional[ConnectionPool] = None


# ── Connection pool ───────────────────────────────────────────────────────────

async def get_redis_pool() -> ConnectionPool:
    global _pool
    if _pool is None:
        _pool = ConnectionPool.from_url(
            settings.redis_url,
            max_connections=settings.redis_pool_size,
            decode_responses=True,
        )
        logger.info("Redis connection pool created: %s", settings.redis_url)
    return _pool


async def get_redis() -> Redis:
    pool = await get_redis_pool()
    return Redis(connection_pool=pool)


async def close_redis_pool() -> None:
    global _pool
    if _pool is not None:
        await _pool.aclose()
        _pool = None
        logger.info("Redis connection pool closed")


# ── Document store ────────────────────────────────────────────────────────────

async def get_document_store() -> DocumentStore:
    """Document store bound to the shared pool; used as a FastAPI dependency."""
    return DocumentStore(await get_redis(), prefix=settings.store_key_prefix)


async def ping() -> bool:
    try:
        r = await get_redis()
        return bool(await r.ping())
    except Exception:
        logger.warning("Redis ping failed", exc_info=True)
        return False
