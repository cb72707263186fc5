"""In-process credential store."""

from ddns_challenge.models import Credentials
from ddns_challenge.store.base import Bucket, Store


class MemoryBucket(Bucket):
    def __init__(self) -> None:
        self._entries: dict[str, Credentials] = {}

    async def get(self, key: str) -> Credentials | None:
        return self._entries.get(key)

    async def set(self, key: str, credentials: Credentials) -> None:
        self._entries[key] = credentials

    async def delete(self, key: str) -> None:
        self._entries.pop(key, None)

    def __len__(self) -> int:
        return len(self._entries)


class MemoryStore(Store):
    """Store keeping buckets in memory for the lifetime of the process.

    Opening the same bucket name twice returns the same bucket.
    """

    def __init__(self) -> None:
        self._buckets: dict[str, MemoryBucket] = {}

    async def create_bucket(self, name: str) -> MemoryBucket:
        return self._buckets.setdefault(name, MemoryBucket())
