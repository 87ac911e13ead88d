"""
Redis Cache Service for catalog reads.
Provides cache-aside helpers with tag-based invalidation and graceful degradation.
"""

import logging
import json
from typing import Any, Optional, Callable, Dict
from datetime import datetime, date
from decimal import Decimal

import redis
from redis.exceptions import RedisError, ConnectionError, TimeoutError
from flask import Flask, current_app

logger = logging.getLogger(__name__)


class CacheService:
    """
    Redis-based caching service.

    Keys pattern: {prefix}:{module}:{key}
    Every key written for a module is also recorded in the tag set
    {prefix}:tag:{module}, so invalidating a module deletes exactly the
    keys it wrote, without scanning the keyspace.
    """

    def __init__(self, app: Optional[Flask] = None, client: Optional[redis.Redis] = None,
                 prefix: str = 'stockpos', default_ttl: int = 60):
        """Initialize cache service, optionally with an already-built client."""
        self.client: Optional[redis.Redis] = client
        self._enabled: bool = client is not None
        self._prefix: str = prefix
        self._default_ttl: int = default_ttl

        if app:
            self.init_app(app)

    def init_app(self, app: Flask) -> None:
        """Initialize Redis client from Flask app config."""
        self._enabled = app.config.get('CACHE_ENABLED', True)
        self._prefix = app.config.get('CACHE_KEY_PREFIX', 'stockpos')
        self._default_ttl = app.config.get('CACHE_DEFAULT_TTL', 60)
        redis_url = app.config.get('REDIS_URL', 'redis://redis:6379/0')

        if not self._enabled:
            logger.info("[CACHE] Cache is DISABLED via config")
            self.client = None
            return

        try:
            self.client = redis.from_url(
                redis_url,
                decode_responses=True,
                socket_connect_timeout=3,
                socket_timeout=3,
                socket_keepalive=True,
                max_connections=50,
                retry_on_timeout=True,
                health_check_interval=30
            )
            self.client.ping()
            logger.info(f"[CACHE] Redis connected: {redis_url}")
        except (ConnectionError, TimeoutError, RedisError) as e:
            logger.warning(f"[CACHE] Redis connection failed: {e}. Cache DISABLED.")
            self._enabled = False
            self.client = None

    def is_available(self) -> bool:
        """Check if cache is available and healthy."""
        if not self._enabled or not self.client:
            return False
        try:
            self.client.ping()
            return True
        except (ConnectionError, RedisError):
            return False

    def _build_key(self, module: str, key: str) -> str:
        return f"{self._prefix}:{module}:{key}"

    def _tag_key(self, module: str) -> str:
        return f"{self._prefix}:tag:{module}"

    def _serialize(self, value: Any) -> str:
        """Serialize Python object to JSON string with Decimal precision."""
        def default_handler(obj: Any) -> Any:
            if isinstance(obj, (datetime, date)):
                return obj.isoformat()
            elif isinstance(obj, Decimal):
                return {"__decimal__": str(obj)}
            raise TypeError(f"Object of type {type(obj)} is not JSON serializable")
        return json.dumps(value, default=default_handler)

    def _deserialize(self, value: str) -> Any:
        """Deserialize JSON string to Python object, reconstructing Decimals."""
        def object_hook(dct: Dict[str, Any]) -> Any:
            if "__decimal__" in dct:
                return Decimal(dct["__decimal__"])
            return dct
        return json.loads(value, object_hook=object_hook)

    def get(self, module: str, key: str) -> Optional[Any]:
        """Get value from cache."""
        if not self.is_available():
            return None
        try:
            value = self.client.get(self._build_key(module, key))
            if value is None:
                return None
            return self._deserialize(value)
        except (RedisError, json.JSONDecodeError) as e:
            logger.warning(f"[CACHE] Get error: {e}")
            return None

    def set(self, module: str, key: str, value: Any, ttl: Optional[int] = None) -> bool:
        """Set value in cache with TTL and record the key under the module tag."""
        if not self.is_available():
            return False
        try:
            cache_key = self._build_key(module, key)
            serialized = self._serialize(value)
            if ttl is None:
                ttl = self._default_ttl
            pipeline = self.client.pipeline()
            pipeline.setex(cache_key, ttl, serialized)
            pipeline.sadd(self._tag_key(module), cache_key)
            pipeline.execute()
            return True
        except (RedisError, TypeError) as e:
            logger.warning(f"[CACHE] Set error: {e}")
            return False

    def delete(self, module: str, key: str) -> bool:
        """Delete specific key from cache."""
        if not self.is_available():
            return False
        try:
            cache_key = self._build_key(module, key)
            pipeline = self.client.pipeline()
            pipeline.delete(cache_key)
            pipeline.srem(self._tag_key(module), cache_key)
            pipeline.execute()
            return True
        except RedisError as e:
            logger.warning(f"[CACHE] Delete error: {e}")
            return False

    def invalidate(self, module: str) -> int:
        """Delete every key recorded under a module tag. Returns the number of keys dropped."""
        if not self.is_available():
            return 0
        try:
            tag_key = self._tag_key(module)
            keys = list(self.client.smembers(tag_key) or ())
            pipeline = self.client.pipeline()
            if keys:
                pipeline.delete(*keys)
            pipeline.delete(tag_key)
            pipeline.execute()
            if keys:
                logger.info(f"[CACHE] INVALIDATE: {tag_key} ({len(keys)} keys)")
            return len(keys)
        except RedisError as e:
            logger.warning(f"[CACHE] Invalidate error: {e}")
            return 0

    def memoize(self, module: str, key: str, loader_fn: Callable[[], Any], ttl: Optional[int] = None) -> Any:
        """Cache-aside pattern: get from cache, or load and cache."""
        cached = self.get(module, key)
        if cached is not None:
            return cached
        value = loader_fn()
        self.set(module, key, value, ttl)
        return value


def init_cache(app: Flask) -> CacheService:
    """Create the cache service and register it on the app."""
    cache = CacheService(app)
    if not hasattr(app, 'extensions'):
        app.extensions = {}
    app.extensions['cache'] = cache
    return cache


def get_cache() -> CacheService:
    """Get the cache service of the current app."""
    cache = current_app.extensions.get('cache')
    if cache is None:
        raise RuntimeError("Cache not initialized.")
    return cache
