"""PowerDNS provider for ACME DNS-01 challenges."""

import httpx

from ddns_challenge._logging import get_logger
from ddns_challenge.exceptions import ConfigurationError, ProviderError
from ddns_challenge.models import Credentials, TxtRecord
from ddns_challenge.providers.base import DnsProvider

logger = get_logger(__name__)


class PowerDnsProvider(DnsProvider):
    """DNS provider for PowerDNS authoritative server.

    This provider manages TXT records for ACME DNS-01 challenges
    via the PowerDNS HTTP API. The API key comes from ``api_key`` or,
    when that is unset, from the ``token`` credential of each call.

    Args:
        api_url: Base URL of the PowerDNS API (e.g., "http://localhost:8081").
        api_key: API key for X-API-Key authentication header.
        server_id: PowerDNS server ID (default: "localhost").
        timeout: HTTP request timeout in seconds (default: 30).
    """

    name = "powerdns"

    def __init__(
        self,
        api_url: str,
        api_key: str | None = None,
        server_id: str = "localhost",
        timeout: int = 30,
    ):
        self.api_url = api_url.rstrip("/")
        self.api_key = api_key
        self.server_id = server_id
        self.timeout = timeout

    def _headers(self, credentials: Credentials) -> dict[str, str]:
        api_key = self.api_key or credentials.token
        if not api_key:
            raise ConfigurationError("PowerDNS requires an API key (api_key or token)")
        return {"X-API-Key": api_key}

    async def _find_zone(self, client: httpx.AsyncClient, name: str, headers: dict[str, str]) -> str:
        """Find the apex zone containing the given name.

        Walks from the full name towards the root, testing each
        candidate zone URL until PowerDNS answers 200.

        Args:
            client: HTTP client to query with.
            name: The full record name to find the zone for.
            headers: Authentication headers.

        Returns:
            The zone name (with trailing dot).

        Raises:
            ProviderError: If no matching zone is found.
        """
        parts = name.rstrip(".").split(".")
        for i in range(len(parts)):
            candidate = ".".join(parts[i:]) + "."

            logger.debug("Trying zone candidate", extra={"record_name": name, "candidate": candidate})

            response = await client.get(
                f"{self.api_url}/api/v1/servers/{self.server_id}/zones/{candidate}",
                headers=headers,
            )
            if response.status_code == 200:
                logger.debug("Zone found", extra={"record_name": name, "zone": candidate})
                return candidate

        raise ProviderError(self.name, "lookup", f"No zone found for domain: {name}")

    def _handle_response(self, response: httpx.Response, zone: str, operation: str) -> None:
        """Handle PowerDNS API response status codes.

        Args:
            response: The httpx Response object.
            zone: The zone name (for error messages).
            operation: "update" or "delete".

        Raises:
            ProviderError: For API errors with descriptive messages.
        """
        if response.status_code == 204:
            logger.debug(
                "PowerDNS API request successful",
                extra={"zone": zone, "status_code": response.status_code},
            )
            return

        try:
            detail = response.json().get("error", response.text)
        except ValueError:
            detail = response.text or "Unknown error"

        status_messages = {
            400: f"Bad Request: {detail}",
            404: f"Zone not found: {detail}",
            422: f"Unprocessable Entity: {detail}",
            500: f"Server Error: {detail}",
        }
        message = status_messages.get(
            response.status_code,
            f"Unexpected error ({response.status_code}): {detail}",
        )
        logger.error(
            "PowerDNS API error",
            extra={"zone": zone, "status_code": response.status_code, "detail": detail},
        )
        raise ProviderError(self.name, operation, message, status_code=response.status_code)

    async def _patch_rrset(
        self, name: str, record: TxtRecord, credentials: Credentials, changetype: str
    ) -> None:
        headers = self._headers(credentials)
        record_name = name.rstrip(".") + "."
        operation = "update" if changetype == "REPLACE" else "delete"

        rrset: dict = {"name": record_name, "type": record.type, "changetype": changetype}
        if changetype == "REPLACE":
            rrset["ttl"] = record.ttl
            rrset["records"] = [{"content": f'"{record.content}"', "disabled": False}]

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            zone = await self._find_zone(client, record_name, headers)
            response = await client.patch(
                f"{self.api_url}/api/v1/servers/{self.server_id}/zones/{zone}",
                headers={**headers, "Content-Type": "application/json"},
                json={"rrsets": [rrset]},
            )
        self._handle_response(response, zone, operation)

    async def update(self, name: str, record: TxtRecord, credentials: Credentials) -> None:
        await self._patch_rrset(name, record, credentials, "REPLACE")
        logger.info("TXT record created", extra={"record_name": name, "ttl": record.ttl})

    async def delete(self, name: str, record: TxtRecord, credentials: Credentials) -> None:
        await self._patch_rrset(name, record, credentials, "DELETE")
        logger.info("TXT record deleted", extra={"record_name": name})
