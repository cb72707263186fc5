"""JSON file backed credential store."""

import asyncio
import os
import tempfile
import threading
from pathlib import Path

from pydantic import TypeAdapter, ValidationError

from ddns_challenge._logging import get_logger
from ddns_challenge.exceptions import StoreError
from ddns_challenge.models import Credentials
from ddns_challenge.store.base import Bucket, Store

logger = get_logger(__name__)

_entries_adapter = TypeAdapter(dict[str, Credentials])


class FileBucket(Bucket):
    """Bucket persisted as a single JSON object mapping domain to credentials.

    Every write rewrites the whole file through a temporary file and an
    atomic rename, so readers never see a partial document. Read-modify-write
    cycles hold a lock so concurrent writers cannot drop each other's entries.

    Args:
        path: Location of the bucket's JSON file.
    """

    def __init__(self, path: Path):
        self.path = path
        self._lock = threading.Lock()

    def _load(self) -> dict[str, Credentials]:
        if not self.path.exists():
            return {}
        try:
            return _entries_adapter.validate_json(self.path.read_bytes())
        except ValidationError as e:
            logger.error("Unreadable credential store", extra={"path": str(self.path)})
            raise StoreError(f"Unreadable credential store {self.path}: {e}") from e

    def _save(self, entries: dict[str, Credentials]) -> None:
        data = _entries_adapter.dump_json(entries, by_alias=True, indent=2)
        fd, tmp = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.")
        try:
            with os.fdopen(fd, "wb") as fh:
                fh.write(data)
            os.chmod(tmp, 0o600)
            os.replace(tmp, self.path)
        except OSError:
            Path(tmp).unlink(missing_ok=True)
            raise

    def _get(self, key: str) -> Credentials | None:
        with self._lock:
            return self._load().get(key)

    def _set(self, key: str, credentials: Credentials) -> None:
        with self._lock:
            entries = self._load()
            entries[key] = credentials
            self._save(entries)

    def _delete(self, key: str) -> None:
        with self._lock:
            entries = self._load()
            if entries.pop(key, None) is not None:
                self._save(entries)

    async def get(self, key: str) -> Credentials | None:
        return await asyncio.to_thread(self._get, key)

    async def set(self, key: str, credentials: Credentials) -> None:
        await asyncio.to_thread(self._set, key, credentials)

    async def delete(self, key: str) -> None:
        await asyncio.to_thread(self._delete, key)


class FileStore(Store):
    """Store writing one ``<bucket>.json`` file per bucket under a directory.

    Opening the same bucket name twice returns the same bucket, so every
    writer of one file shares its lock.

    Args:
        directory: Directory holding the bucket files (created if missing).
    """

    def __init__(self, directory: str | Path):
        self.directory = Path(directory)
        self._buckets: dict[str, FileBucket] = {}

    async def create_bucket(self, name: str) -> FileBucket:
        await asyncio.to_thread(self.directory.mkdir, parents=True, exist_ok=True)
        logger.debug("Opened file bucket", extra={"bucket": name, "directory": str(self.directory)})
        return self._buckets.setdefault(name, FileBucket(self.directory / f"{name}.json"))
