"""Cloudflare provider for ACME DNS-01 challenges."""

from typing import Any

import httpx

from ddns_challenge._logging import get_logger
from ddns_challenge.exceptions import ConfigurationError, ProviderError
from ddns_challenge.models import Credentials, TxtRecord
from ddns_challenge.providers.base import DnsProvider

logger = get_logger(__name__)

CLOUDFLARE_API_URL = "https://api.cloudflare.com/client/v4"


class CloudflareProvider(DnsProvider):
    """DNS provider for the Cloudflare v4 API.

    Authentication uses the call credentials: a ``token`` alone is sent
    as an API token (bearer), while ``user`` plus ``token`` are sent as
    the legacy account email and global API key.

    Args:
        api_url: Base URL of the Cloudflare API.
        timeout: HTTP request timeout in seconds (default: 30).
    """

    name = "cloudflare"

    def __init__(self, api_url: str = CLOUDFLARE_API_URL, timeout: int = 30):
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout

    def _headers(self, credentials: Credentials) -> dict[str, str]:
        if not credentials.token:
            raise ConfigurationError("Cloudflare requires a token")
        if credentials.user:
            return {"X-Auth-Email": credentials.user, "X-Auth-Key": credentials.token}
        return {"Authorization": f"Bearer {credentials.token}"}

    async def _request(
        self,
        client: httpx.AsyncClient,
        method: str,
        path: str,
        operation: str,
        **kwargs: Any,
    ) -> Any:
        """Send a request and unwrap Cloudflare's ``{"success", "result"}`` envelope."""
        response = await client.request(method, f"{self.api_url}{path}", **kwargs)
        try:
            body = response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}

        if response.is_success and body.get("success", False):
            return body.get("result")

        errors = body.get("errors")
        first = errors[0] if isinstance(errors, list) and errors else {}
        message = first.get("message") if isinstance(first, dict) else None
        detail = message or response.text or "Unknown error"
        logger.error(
            "Cloudflare API error",
            extra={"path": path, "status_code": response.status_code, "detail": detail},
        )
        raise ProviderError(self.name, operation, detail, status_code=response.status_code)

    async def _find_zone_id(self, client: httpx.AsyncClient, name: str, operation: str) -> str:
        """Find the id of the most specific zone containing name."""
        parts = name.rstrip(".").split(".")
        for i in range(len(parts) - 1):
            candidate = ".".join(parts[i:])
            zones = await self._request(
                client, "GET", "/zones", operation, params={"name": candidate}
            )
            if zones:
                logger.debug("Zone found", extra={"record_name": name, "zone": candidate})
                return zones[0]["id"]

        raise ProviderError(self.name, operation, f"No zone found for domain: {name}")

    async def update(self, name: str, record: TxtRecord, credentials: Credentials) -> None:
        record_name = name.rstrip(".")
        async with httpx.AsyncClient(timeout=self.timeout, headers=self._headers(credentials)) as client:
            zone_id = await self._find_zone_id(client, record_name, "update")
            await self._request(
                client,
                "POST",
                f"/zones/{zone_id}/dns_records",
                "update",
                json={
                    "type": record.type,
                    "name": record_name,
                    "content": record.content,
                    "ttl": record.ttl,
                },
            )
        logger.info("TXT record created", extra={"record_name": record_name, "ttl": record.ttl})

    async def delete(self, name: str, record: TxtRecord, credentials: Credentials) -> None:
        record_name = name.rstrip(".")
        async with httpx.AsyncClient(timeout=self.timeout, headers=self._headers(credentials)) as client:
            zone_id = await self._find_zone_id(client, record_name, "delete")
            existing = await self._request(
                client,
                "GET",
                f"/zones/{zone_id}/dns_records",
                "delete",
                params={"type": record.type, "name": record_name},
            )
            deleted = 0
            for entry in existing or []:
                if record.content is not None and entry.get("content") != record.content:
                    continue
                await self._request(
                    client, "DELETE", f"/zones/{zone_id}/dns_records/{entry['id']}", "delete"
                )
                deleted += 1
        if not deleted:
            logger.warning("No TXT record to delete", extra={"record_name": record_name})
            return
        logger.info("TXT record deleted", extra={"record_name": record_name, "count": deleted})
