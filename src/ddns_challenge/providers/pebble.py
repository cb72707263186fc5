"""Pebble DNS provider for pebble-challtestsrv."""

import httpx

from ddns_challenge.models import Credentials, TxtRecord
from ddns_challenge.providers.base import DnsProvider


class PebbleProvider(DnsProvider):
    """DNS provider for pebble-challtestsrv.

    Used for testing against the Pebble ACME server. The challenge
    test server answers DNS queries itself, so records are visible
    as soon as the management call returns. Credentials are ignored.

    Args:
        challtestsrv_url: Base URL of the pebble-challtestsrv management API.
    """

    name = "pebble"

    def __init__(self, challtestsrv_url: str):
        self.challtestsrv_url = challtestsrv_url.rstrip("/")

    async def update(self, name: str, record: TxtRecord, credentials: Credentials) -> None:
        async with httpx.AsyncClient() as client:
            response = await client.post(
                f"{self.challtestsrv_url}/set-txt",
                json={"host": name.rstrip(".") + ".", "value": record.content},
            )
        response.raise_for_status()

    async def delete(self, name: str, record: TxtRecord, credentials: Credentials) -> None:
        async with httpx.AsyncClient() as client:
            response = await client.post(
                f"{self.challtestsrv_url}/clear-txt",
                json={"host": name.rstrip(".") + "."},
            )
        response.raise_for_status()
