import time
import logging
from typing import Optional

import redis

from vendoriq.core.config import settings

logger = logging.getLogger(__name__)


class RedisClient:
    """Thin wrapper around redis-py that tracks whether the server is reachable.

    ``is_connected`` is maintained by the client itself: it is set on a
    successful ping and cleared whenever a command fails with a connection
    or timeout error. Callers poll it to decide whether to use the cache at
    all. Reconnects are attempted lazily, at most once every
    ``retry_seconds``.
    """

    def __init__(self, url: Optional[str] = None, client=None, retry_seconds: Optional[int] = None):
        self.url = url
        self.redis_client = client
        self.is_connected = False
        self.retry_seconds = settings.REDIS_RETRY_SECONDS if retry_seconds is None else retry_seconds
        self._last_attempt = 0.0
        self.connect()

    @property
    def configured(self) -> bool:
        return self.redis_client is not None or bool(self.url)

    def connect(self) -> bool:
        if not self.configured:
            logger.warning("⚠️ Redis configuration not found - running without Redis (OTPs kept in memory)")
            return False

        self._last_attempt = time.monotonic()
        try:
            if self.redis_client is None:
                self.redis_client = redis.from_url(
                    self.url,
                    decode_responses=True,
                    socket_connect_timeout=settings.REDIS_SOCKET_TIMEOUT,
                    socket_timeout=settings.REDIS_SOCKET_TIMEOUT,
                    max_connections=20,
                )
            self.redis_client.ping()
            self.is_connected = True
            logger.info("✅ Redis connected successfully")
        except (ValueError, redis.exceptions.RedisError) as e:
            logger.error(f"❌ Redis connection failed: {e}")
            self.is_connected = False
        return self.is_connected

    def _mark_down(self, operation: str, error: Exception):
        if self.is_connected:
            logger.error(f"❌ Redis {operation} failed, marking cache unavailable: {error}")
        self.is_connected = False

    def refresh(self) -> bool:
        """Re-check connectivity if the cache is down and the retry interval has passed."""
        if not self.is_connected and self.configured:
            if time.monotonic() - self._last_attempt >= self.retry_seconds:
                self.connect()
        return self.is_connected

    def setex(self, key: str, seconds: int, value: str) -> bool:
        if not self.is_connected:
            return False
        try:
            self.redis_client.setex(key, seconds, value)
            return True
        except (redis.exceptions.ConnectionError, redis.exceptions.TimeoutError) as e:
            self._mark_down("setex", e)
        except redis.exceptions.RedisError as e:
            logger.error(f"Redis setex error: {e}")
        return False

    def get(self, key: str) -> Optional[str]:
        if not self.is_connected:
            return None
        try:
            return self.redis_client.get(key)
        except (redis.exceptions.ConnectionError, redis.exceptions.TimeoutError) as e:
            self._mark_down("get", e)
        except redis.exceptions.RedisError as e:
            logger.error(f"Redis get error: {e}")
        return None

    def delete(self, key: str) -> int:
        if not self.is_connected:
            return 0
        try:
            return self.redis_client.delete(key)
        except (redis.exceptions.ConnectionError, redis.exceptions.TimeoutError) as e:
            self._mark_down("delete", e)
        except redis.exceptions.RedisError as e:
            logger.error(f"Redis delete error: {e}")
        return 0

    def exists(self, key: str) -> bool:
        if not self.is_connected:
            return False
        try:
            return bool(self.redis_client.exists(key))
        except (redis.exceptions.ConnectionError, redis.exceptions.TimeoutError) as e:
            self._mark_down("exists", e)
        except redis.exceptions.RedisError as e:
            logger.error(f"Redis exists error: {e}")
        return False

    def health_check(self) -> bool:
        if self.redis_client is None:
            return False
        try:
            self.is_connected = bool(self.redis_client.ping())
        except redis.exceptions.RedisError:
            self.is_connected = False
        return self.is_connected

    def close(self):
        if self.redis_client is not None:
            try:
                self.redis_client.close()
            except redis.exceptions.RedisError as e:
                logger.warning(f"Redis close error: {e}")
        self.is_connected = False
