"""Abstract base class for DNS providers."""

from abc import ABC, abstractmethod

from ddns_challenge.models import Credentials, TxtRecord


class DnsProvider(ABC):
    """Abstract interface for DNS providers.

    DNS providers publish and remove the TXT records used for ACME
    DNS-01 challenge validation. Record names arrive fully derived
    (e.g. ``_acme-challenge.example.com``); providers must not add
    prefixes of their own.
    """

    name: str = "dns"

    @abstractmethod
    async def update(self, name: str, record: TxtRecord, credentials: Credentials) -> None:
        """Create or replace the TXT record at name.

        Args:
            name: Fully derived challenge domain.
            record: The TXT record, including ttl and content.
            credentials: Provider credentials for this call.

        Raises:
            ProviderError: If the provider rejects the change.
        """
        ...

    @abstractmethod
    async def delete(self, name: str, record: TxtRecord, credentials: Credentials) -> None:
        """Delete the TXT record(s) at name.

        Args:
            name: Fully derived challenge domain.
            record: The TXT record (content may be None).
            credentials: Provider credentials for this call.

        Raises:
            ProviderError: If the provider rejects the change.
        """
        ...
