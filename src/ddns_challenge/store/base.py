"""Abstract base classes for credential stores."""

from abc import ABC, abstractmethod

from ddns_challenge.models import Credentials


class Bucket(ABC):
    """A named key-value namespace holding Credentials per domain."""

    @abstractmethod
    async def get(self, key: str) -> Credentials | None:
        """Return the credentials stored under key, or None."""
        ...

    @abstractmethod
    async def set(self, key: str, credentials: Credentials) -> None:
        """Store credentials under key, replacing any existing entry."""
        ...

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Remove the entry for key. Missing keys are not an error."""
        ...


class Store(ABC):
    """Abstract interface for credential stores.

    A store hands out buckets by name; the challenger keeps its
    per-domain credentials in a single fixed bucket.
    """

    @abstractmethod
    async def create_bucket(self, name: str) -> Bucket:
        """Open (creating if needed) the bucket called name."""
        ...
