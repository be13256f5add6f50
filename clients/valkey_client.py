"""
Valkey (Redis-compatible) client backing the session store.

Every value written here is a JSON object with a TTL: sessions are the only
thing kept in Valkey, and each one must expire on its own. The URL comes
from Vault; connection problems surface as redis exceptions.
"""

import json
import logging

import redis

logger = logging.getLogger(__name__)


class ValkeyClient:
    """
    JSON-object store with mandatory expiry.

    Usage:
        valkey = ValkeyClient(get_valkey_url())
        valkey.put_json("session:abc", {"principal": {...}}, ttl_seconds=3600)
        payload = valkey.fetch_json("session:abc")  # None once expired
    """

    def __init__(self, url: str, socket_timeout: float = 5.0):
        """
        Open the connection and check it answers.

        Raises:
            redis.ConnectionError: If Valkey is unreachable
        """
        self._redis = redis.from_url(
            url,
            decode_responses=True,
            socket_timeout=socket_timeout,
        )
        self.ping()
        logger.info("Connected to Valkey")

    def ping(self) -> bool:
        self._redis.ping()
        return True

    def put_json(self, key: str, value: dict, ttl_seconds: int) -> None:
        """Write value under key; the key disappears after ttl_seconds."""
        if ttl_seconds <= 0:
            raise ValueError(f"ttl_seconds must be positive, got {ttl_seconds}")
        self._redis.set(key, json.dumps(value), ex=ttl_seconds)

    def fetch_json(self, key: str) -> dict | None:
        """
        The object stored under key, or None if there is none.

        Raises:
            ValueError: If the stored value is not a JSON object
        """
        raw = self._redis.get(key)
        if raw is None:
            return None
        try:
            value = json.loads(raw)
        except json.JSONDecodeError as e:
            raise ValueError(f"Value under '{key}' is not JSON: {e}") from e
        if not isinstance(value, dict):
            raise ValueError(f"Value under '{key}' is not a JSON object")
        return value

    def remove(self, key: str) -> bool:
        """Delete key. True if something was deleted."""
        return bool(self._redis.delete(key))

    def close(self) -> None:
        self._redis.close()
        logger.info("Valkey connection closed")
