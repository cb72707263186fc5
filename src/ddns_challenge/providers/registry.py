"""Provider lookup and dispatch by identifier."""

import os
from collections.abc import Callable, Mapping
from typing import Any

import httpx

from ddns_challenge._logging import get_domain_extra, get_logger
from ddns_challenge.exceptions import ConfigurationError, ProviderError
from ddns_challenge.models import Credentials, TxtRecord
from ddns_challenge.providers.base import DnsProvider

logger = get_logger(__name__)

ProviderFactory = Callable[[], DnsProvider]

OPERATIONS = ("update", "delete")


def env_credentials(provider_id: str) -> Credentials:
    """Read ``DNS_<PROVIDER>_USER``/``_PASS``/``_TOKEN`` from the environment."""
    prefix = f"DNS_{provider_id.upper().replace('-', '_')}_"
    return Credentials(
        user=os.environ.get(prefix + "USER"),
        password=os.environ.get(prefix + "PASS"),
        token=os.environ.get(prefix + "TOKEN"),
    )


class ProviderRegistry:
    """Maps provider identifiers to DnsProvider instances.

    Providers may be registered directly or as zero-argument factories;
    a factory runs on first use and its result is reused afterwards. A
    factory that raises stays registered and runs again on the next lookup.
    """

    def __init__(self) -> None:
        self._providers: dict[str, DnsProvider] = {}
        self._factories: dict[str, ProviderFactory] = {}

    def register(self, provider_id: str, provider: DnsProvider | ProviderFactory) -> None:
        """Register a provider (or a factory for one) under provider_id."""
        self._providers.pop(provider_id, None)
        self._factories.pop(provider_id, None)
        if isinstance(provider, DnsProvider):
            self._providers[provider_id] = provider
        else:
            self._factories[provider_id] = provider

    def __contains__(self, provider_id: str) -> bool:
        return provider_id in self._providers or provider_id in self._factories

    def get(self, provider_id: str) -> DnsProvider:
        """Return the provider registered under provider_id.

        Raises:
            ConfigurationError: If nothing is registered under that id.
        """
        if provider_id not in self._providers:
            factory = self._factories.get(provider_id)
            if factory is None:
                raise ConfigurationError(f"Unknown DNS provider: {provider_id}")
            self._providers[provider_id] = factory()
            del self._factories[provider_id]
        return self._providers[provider_id]

    async def execute(
        self,
        provider_id: str,
        operation: str,
        target: str,
        payload: Mapping[str, Any],
    ) -> None:
        """Run a record operation on a provider.

        Args:
            provider_id: Registered provider identifier.
            operation: "update" or "delete".
            target: Fully derived challenge domain.
            payload: Credentials (user/pass/token) plus TXT record fields
                (type/name/ttl/content). Missing credentials fall back to
                ``DNS_<PROVIDER>_*`` environment variables.

        Raises:
            ConfigurationError: Unknown provider or operation.
            ProviderError: The provider's HTTP API failed.
        """
        if operation not in OPERATIONS:
            raise ConfigurationError(f"Unsupported DNS operation: {operation}")

        provider = self.get(provider_id)
        given = Credentials.model_validate(payload)
        fallback = env_credentials(provider_id)
        credentials = Credentials(
            user=given.user or fallback.user,
            password=given.password or fallback.password,
            token=given.token or fallback.token,
        )
        record = TxtRecord(
            name=payload.get("name", target),
            ttl=payload.get("ttl"),
            content=payload.get("content"),
        )

        logger.debug(
            "Executing DNS operation",
            extra={"provider": provider_id, "operation": operation, "record_name": target,
                   **get_domain_extra()},
        )
        try:
            if operation == "update":
                await provider.update(target, record, credentials)
            else:
                await provider.delete(target, record, credentials)
        except httpx.HTTPStatusError as e:
            raise ProviderError(
                provider_id, operation, str(e), status_code=e.response.status_code
            ) from e
        except httpx.HTTPError as e:
            raise ProviderError(provider_id, operation, str(e)) from e
