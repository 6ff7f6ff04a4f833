"""
Storage Module - Black Box Interface

Purpose: Persist the API key and consent flag between runs
Interface: load(), save()
Hidden: Backend specifics (JSON file, Redis hash, memory), serialization

Can be replaced with any key-value backend without affecting other modules.
"""

from .stores import (
    FileCredentialStore,
    LoadResult,
    MemoryCredentialStore,
    RedisCredentialStore,
    StorageUnavailable,
)

__all__ = [
    "FileCredentialStore",
    "LoadResult",
    "MemoryCredentialStore",
    "RedisCredentialStore",
    "StorageUnavailable",
]
