"""
Credential stores.

Every store exposes the same two coroutines:

- load() -> LoadResult(success, data)
- save(key, value) -> None

Values are strings. Stores raise StorageUnavailable when the backend
cannot be reached; callers decide whether that is fatal.
"""

import asyncio
import json
import logging
import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Union

import redis.asyncio as redis
from redis.exceptions import RedisError

logger = logging.getLogger(__name__)


class StorageUnavailable(Exception):
    """The credential store could not be read or written."""


@dataclass
class LoadResult:
    """Snapshot of everything a store currently holds."""
    success: bool
    data: Dict[str, Any] = field(default_factory=dict)


class MemoryCredentialStore:
    """In-process store, used for tests and embedded hosts."""

    def __init__(self, initial: Optional[Dict[str, Any]] = None):
        self._data: Dict[str, Any] = dict(initial or {})

    async def load(self) -> LoadResult:
        return LoadResult(success=True, data=dict(self._data))

    async def save(self, key: str, value: str) -> None:
        self._data[key] = value

    @property
    def data(self) -> Dict[str, Any]:
        return dict(self._data)


class FileCredentialStore:
    """
    JSON file store for desktop installs.

    Saves are serialized per store and replace the file atomically, so
    overlapping saves to different keys both land. A missing file loads as
    an empty, successful result; an unreadable or corrupt one raises
    StorageUnavailable on load and is rewritten from scratch on the next save.
    """

    def __init__(self, path: Union[str, Path]):
        """
        Initialize file store.

        Args:
            path: Location of the JSON credentials file
        """
        self.path = Path(path)
        self._lock = asyncio.Lock()

    async def load(self) -> LoadResult:
        async with self._lock:
            data = await asyncio.to_thread(self._read)
        return LoadResult(success=True, data=data)

    async def save(self, key: str, value: str) -> None:
        async with self._lock:
            await asyncio.to_thread(self._write, key, value)

    def _read(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise StorageUnavailable(f"Cannot read {self.path}: {e}") from e

        if not isinstance(data, dict):
            raise StorageUnavailable(f"Expected a JSON object in {self.path}")
        return data

    def _write(self, key: str, value: str) -> None:
        try:
            data = self._read()
        except StorageUnavailable as e:
            logger.warning(f"{e}; rewriting credentials file from scratch")
            data = {}
        data[key] = value

        tmp_name = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                dir=self.path.parent,
                prefix=f".{self.path.name}.",
                suffix=".tmp",
                delete=False,
            ) as f:
                tmp_name = f.name
                json.dump(data, f, indent=2)
            os.replace(tmp_name, self.path)
        except OSError as e:
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise StorageUnavailable(f"Cannot write {self.path}: {e}") from e


class RedisCredentialStore:
    """Redis hash store, one field per stored value."""

    def __init__(self, redis_client, key: str = "owl:credentials"):
        """
        Initialize Redis store.

        Args:
            redis_client: Async Redis client (decode_responses=True)
            key: Hash holding the credential fields
        """
        self.redis = redis_client
        self.key = key

    @classmethod
    def from_url(cls, url: str, key: str = "owl:credentials") -> "RedisCredentialStore":
        """Build a store with its own connection pool."""
        return cls(redis.from_url(url, decode_responses=True), key=key)

    async def load(self) -> LoadResult:
        try:
            data = await self.redis.hgetall(self.key)
        except RedisError as e:
            raise StorageUnavailable(f"Cannot read {self.key}: {e}") from e

        # Clients created without decode_responses hand back bytes
        decoded = {
            (k.decode("utf-8") if isinstance(k, bytes) else k): (
                v.decode("utf-8") if isinstance(v, bytes) else v
            )
            for k, v in (data or {}).items()
        }
        return LoadResult(success=True, data=decoded)

    async def save(self, key: str, value: str) -> None:
        try:
            await self.redis.hset(self.key, key, value)
        except RedisError as e:
            raise StorageUnavailable(f"Cannot write {self.key}/{key}: {e}") from e

    async def close(self):
        """Close the underlying connection."""
        await self.redis.aclose()
