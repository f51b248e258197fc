"""
Redis lock utility guarding the day rollover across processes
"""
import redis
import logging
import uuid
from contextlib import contextmanager
from typing import Iterator, Optional

logger = logging.getLogger(__name__)

# Delete the key only if it still holds our token
_RELEASE_SCRIPT = """
if redis.call("get", KEYS[1]) == ARGV[1] then
    return redis.call("del", KEYS[1])
end
return 0
"""


class RolloverLock:
    """
    Short-lived SET NX EX lock

    When redis is disabled or unreachable every acquire succeeds and the
    day-rollover marker row in the database is the only guard.
    """

    def __init__(self, redis_url: Optional[str], ttl: int = 60, client=None):
        self.ttl = ttl
        self.redis_client = client

        if self.redis_client is None and redis_url:
            try:
                self.redis_client = redis.from_url(
                    redis_url,
                    decode_responses=True,
                    socket_connect_timeout=5
                )
                # Test connection
                self.redis_client.ping()
                logger.info("Redis connection established")
            except Exception as e:
                logger.warning(f"Redis connection failed: {str(e)}. Rollover lock disabled.")
                self.redis_client = None

    @property
    def enabled(self) -> bool:
        return self.redis_client is not None

    def generate_key(self, day: str) -> str:
        return f"rollover:{day}"

    def acquire(self, key: str) -> Optional[str]:
        """
        Try to take the lock

        Returns:
            A release token, "" when locking is disabled, or None when the
            lock is held by someone else
        """
        if not self.redis_client:
            return ""

        token = uuid.uuid4().hex
        try:
            acquired = self.redis_client.set(key, token, nx=True, ex=self.ttl)
        except redis.RedisError as e:
            logger.error(f"Lock acquire error: {str(e)}")
            return ""

        if acquired:
            logger.info(f"Lock acquired: {key} (TTL: {self.ttl}s)")
            return token

        logger.warning(f"Lock busy: {key}")
        return None

    def release(self, key: str, token: str) -> bool:
        """Release a lock previously returned by ``acquire``"""
        if not self.redis_client or not token:
            return False

        try:
            released = bool(self.redis_client.eval(_RELEASE_SCRIPT, 1, key, token))
            logger.info(f"Lock released: {key}")
            return released
        except redis.RedisError as e:
            logger.error(f"Lock release error: {str(e)}")
            return False

    @contextmanager
    def hold(self, key: str) -> Iterator[bool]:
        """
        Context manager yielding True when the caller owns the lock
        (or locking is disabled) and False when it is busy
        """
        token = self.acquire(key)
        if token is None:
            yield False
            return
        try:
            yield True
        finally:
            self.release(key, token)
