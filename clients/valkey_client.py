"""
Valkey (Redis-compatible) client for checkout snapshots and dead letters.

Thin wrapper around redis-py. Connection URL comes from Vault.
Fail-fast: raises on connection failure, never returns fallback values.
"""

import json
import logging

import redis

logger = logging.getLogger(__name__)


class ValkeyClient:
    """
    Redis-compatible client for Valkey.

    Usage:
        client = ValkeyClient("redis://localhost:6379/0")
        client.set_json("checkout:abc", {"state": "sizing"}, expire_seconds=3600)
        snapshot = client.get_json("checkout:abc")  # None if missing or expired
    """

    def __init__(self, url: str):
        """
        Connect and verify the server answers.

        Raises:
            redis.ConnectionError: If connection fails
        """
        self._client = redis.from_url(url, decode_responses=True)
        self._client.ping()
        logger.info("ValkeyClient connected")

    def ping(self) -> bool:
        """Health check. Raises redis.ConnectionError if unreachable."""
        self._client.ping()
        return True

    def get(self, key: str) -> str | None:
        """Value for key, or None if it doesn't exist."""
        return self._client.get(key)

    def set(self, key: str, value: str, expire_seconds: int | None = None) -> None:
        """Set key to value, with a TTL when expire_seconds is given."""
        if expire_seconds is not None:
            self._client.setex(key, expire_seconds, value)
        else:
            self._client.set(key, value)

    def set_json(self, key: str, value: dict | list, expire_seconds: int | None = None) -> None:
        """Store value as JSON."""
        self.set(key, json.dumps(value), expire_seconds)

    def get_json(self, key: str) -> dict | list | None:
        """
        Load a JSON value.

        Returns None if the key doesn't exist.
        Raises ValueError if the stored value is not valid JSON.
        """
        value = self.get(key)
        if value is None:
            return None
        try:
            return json.loads(value)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in key '{key}': {e}")

    def push_json(self, key: str, value: dict) -> int:
        """Append a JSON record to a list. Returns the new list length."""
        return self._client.rpush(key, json.dumps(value))

    def close(self) -> None:
        """Close the connection."""
        self._client.close()
        logger.info("ValkeyClient closed")
