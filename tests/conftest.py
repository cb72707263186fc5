"""Pytest fixtures for the ddns_challenge test suite."""

import logging
import logging.handlers
import os
from collections.abc import Generator

import dns.resolver
import pytest

from ddns_challenge import ChallengeOptions, DdnsChallenger, RetryPolicy
from ddns_challenge.models import Credentials, TxtRecord
from ddns_challenge.providers import DnsProvider, ProviderRegistry
from ddns_challenge.resolver import TxtResolver
from ddns_challenge.store import MemoryStore

# Default URLs for local pebble-challtestsrv setup
CHALLTESTSRV_URL = os.environ.get("CHALLTESTSRV_URL", "http://localhost:8055")
CHALLTESTSRV_DNS = os.environ.get("CHALLTESTSRV_DNS", "127.0.0.1")
CHALLTESTSRV_DNS_PORT = int(os.environ.get("CHALLTESTSRV_DNS_PORT", "8053"))


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture(scope="session")
def challtestsrv_url() -> str:
    """Return the pebble-challtestsrv management API URL."""
    return CHALLTESTSRV_URL


@pytest.fixture(scope="session")
def challtestsrv_resolver() -> TxtResolver:
    """Resolver querying pebble-challtestsrv's DNS server."""
    return TxtResolver(nameservers=[CHALLTESTSRV_DNS], port=CHALLTESTSRV_DNS_PORT, lifetime=2.0)


class FakeProvider(DnsProvider):
    """In-memory DNS provider recording every call.

    Published records land in ``zone`` so FakeResolver can serve them.
    """

    name = "fake"

    def __init__(self) -> None:
        self.zone: dict[str, list[str]] = {}
        self.calls: list[tuple[str, str, TxtRecord, Credentials]] = []
        self.fail_update: Exception | None = None
        self.fail_delete: Exception | None = None
        self.publish = True

    async def update(self, name: str, record: TxtRecord, credentials: Credentials) -> None:
        self.calls.append(("update", name, record, credentials))
        if self.fail_update is not None:
            raise self.fail_update
        if self.publish:
            self.zone[name] = [record.content or ""]

    async def delete(self, name: str, record: TxtRecord, credentials: Credentials) -> None:
        self.calls.append(("delete", name, record, credentials))
        if self.fail_delete is not None:
            raise self.fail_delete
        self.zone.pop(name, None)

    def operations(self, operation: str) -> list[tuple[str, str, TxtRecord, Credentials]]:
        return [call for call in self.calls if call[0] == operation]


class FakeResolver(TxtResolver):
    """Resolver answering from a FakeProvider's zone.

    Values are split into 10-character chunks to mimic multi-string TXT records.
    """

    def __init__(self, provider: FakeProvider) -> None:
        super().__init__()
        self.provider = provider
        self.queries: list[str] = []

    async def resolve_txt(self, name: str) -> list[list[str]]:
        self.queries.append(name)
        if name not in self.provider.zone:
            raise dns.resolver.NXDOMAIN()
        return [[value[i : i + 10] for i in range(0, len(value), 10)] for value in self.provider.zone[name]]


@pytest.fixture
def fake_provider() -> FakeProvider:
    return FakeProvider()


@pytest.fixture
def fake_resolver(fake_provider: FakeProvider) -> FakeResolver:
    return FakeResolver(fake_provider)


@pytest.fixture
def registry(fake_provider: FakeProvider) -> ProviderRegistry:
    registry = ProviderRegistry()
    registry.register("fake", fake_provider)
    return registry


@pytest.fixture
def fast_retry() -> RetryPolicy:
    """Retry policy without waits so polling tests run instantly."""
    return RetryPolicy(retries=3, min_timeout=0, max_timeout=0)


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def challenger(
    store: MemoryStore,
    registry: ProviderRegistry,
    fake_resolver: FakeResolver,
    fast_retry: RetryPolicy,
) -> DdnsChallenger:
    """Challenger wired to the fake provider, resolver and a memory store."""
    options = ChallengeOptions(user="alice", password="s3cret", token="tok-123", retry=fast_retry)
    return DdnsChallenger(options, store=store, registry=registry, resolver=fake_resolver)


class LogCapture:
    """Helper class to capture and inspect log records."""

    def __init__(self, handler: logging.handlers.MemoryHandler) -> None:
        self._handler = handler

    @property
    def records(self) -> list[logging.LogRecord]:
        """Get all captured log records."""
        return self._handler.buffer

    def get_records(
        self, level: int | None = None, name: str | None = None
    ) -> list[logging.LogRecord]:
        """Get log records filtered by level and/or logger name.

        Args:
            level: Filter by log level (e.g., logging.INFO).
            name: Filter by logger name prefix (e.g., "ddns_challenge.challenger").

        Returns:
            List of matching log records.
        """
        records = self.records
        if level is not None:
            records = [r for r in records if r.levelno == level]
        if name is not None:
            records = [r for r in records if r.name.startswith(name)]
        return records

    def get_messages(self, level: int | None = None, name: str | None = None) -> list[str]:
        """Get log messages filtered by level and/or logger name."""
        return [r.getMessage() for r in self.get_records(level, name)]

    def clear(self) -> None:
        """Clear all captured log records."""
        self._handler.buffer.clear()


@pytest.fixture
def log_capture() -> Generator[LogCapture]:
    """Capture logs from the ddns_challenge library during a test.

    Usage:
        def test_something(log_capture):
            # do something that logs
            assert "Challenge record removed" in log_capture.get_messages(logging.INFO)
    """
    # Large capacity so the handler never flushes mid-test
    handler = logging.handlers.MemoryHandler(capacity=1000)
    handler.setLevel(logging.DEBUG)

    package_logger = logging.getLogger("ddns_challenge")
    original_level = package_logger.level
    package_logger.setLevel(logging.DEBUG)
    package_logger.addHandler(handler)

    try:
        yield LogCapture(handler)
    finally:
        package_logger.removeHandler(handler)
        package_logger.setLevel(original_level)
        handler.close()
