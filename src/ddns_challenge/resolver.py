"""TXT record lookups."""

import dns.asyncresolver
import dns.rdatatype

from ddns_challenge._logging import get_logger

logger = get_logger(__name__)


class TxtResolver:
    """Resolve TXT records through dnspython's asyncio resolver.

    Args:
        nameservers: Nameserver IPs to query instead of the system
            resolver configuration.
        lifetime: Total seconds allowed per lookup (default: 10).
        port: Port the nameservers listen on (default: 53).
    """

    def __init__(
        self,
        nameservers: list[str] | None = None,
        lifetime: float = 10.0,
        port: int = 53,
    ):
        self.nameservers = list(nameservers) if nameservers else None
        self.lifetime = lifetime
        self.port = port

    def _resolver(self) -> dns.asyncresolver.Resolver:
        resolver = dns.asyncresolver.Resolver(configure=self.nameservers is None)
        # Port must be set first; nameservers capture it on assignment
        resolver.port = self.port
        if self.nameservers:
            resolver.nameservers = self.nameservers
        resolver.lifetime = self.lifetime
        return resolver

    async def resolve_txt(self, name: str) -> list[list[str]]:
        """Return the TXT record set at name.

        Each record is returned as its list of character-strings.

        Raises:
            dns.exception.DNSException: NXDOMAIN, no answer, timeout, etc.
        """
        answer = await self._resolver().resolve(name, dns.rdatatype.TXT)
        records = [
            [part.decode("utf-8", errors="replace") for part in rdata.strings]
            for rdata in answer
        ]
        logger.debug("TXT lookup", extra={"record_name": name, "count": len(records)})
        return records
