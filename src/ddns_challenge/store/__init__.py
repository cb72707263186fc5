"""Credential stores used between set() and remove()."""

from collections.abc import Mapping
from typing import Any

from ddns_challenge.exceptions import ConfigurationError
from ddns_challenge.store.base import Bucket, Store
from ddns_challenge.store.file import FileStore
from ddns_challenge.store.memory import MemoryStore

__all__ = ["Bucket", "FileStore", "MemoryStore", "Store", "create_store"]


def create_store(config: "Store | str | Mapping[str, Any] | None" = None) -> Store:
    """Build a store from a short description.

    Args:
        config: A Store instance (returned unchanged), ``None`` or ``"memory"``,
            or a mapping such as ``{"type": "file", "directory": "/var/lib/ddns"}``.

    Returns:
        The store.

    Raises:
        ConfigurationError: If the description names an unknown store type.
    """
    if isinstance(config, Store):
        return config
    if config is None or config == "memory":
        return MemoryStore()
    if isinstance(config, Mapping):
        kind = config.get("type", "memory")
        if kind == "memory":
            return MemoryStore()
        if kind == "file":
            if "directory" not in config:
                raise ConfigurationError("File store requires a 'directory'")
            return FileStore(config["directory"])
        raise ConfigurationError(f"Unknown store type: {kind}")
    raise ConfigurationError(f"Unsupported store configuration: {config!r}")
