"""DNS providers for ACME challenge records."""

import os

from ddns_challenge.providers.base import DnsProvider
from ddns_challenge.providers.cloudflare import CLOUDFLARE_API_URL, CloudflareProvider
from ddns_challenge.providers.pebble import PebbleProvider
from ddns_challenge.providers.powerdns import PowerDnsProvider
from ddns_challenge.providers.registry import ProviderRegistry, env_credentials

__all__ = [
    "CloudflareProvider",
    "DnsProvider",
    "PebbleProvider",
    "PowerDnsProvider",
    "ProviderRegistry",
    "default_registry",
    "env_credentials",
]


def default_registry() -> ProviderRegistry:
    """Registry with the built-in providers, configured from the environment.

    Environment:
        DNS_CLOUDFLARE_URL: Cloudflare API base URL.
        DNS_POWERDNS_URL: PowerDNS API base URL (default http://localhost:8081).
        DNS_POWERDNS_SERVER_ID: PowerDNS server id (default localhost).
        DNS_PEBBLE_URL: pebble-challtestsrv URL (default http://localhost:8055).
    """
    registry = ProviderRegistry()
    registry.register(
        "cloudflare",
        lambda: CloudflareProvider(api_url=os.environ.get("DNS_CLOUDFLARE_URL", CLOUDFLARE_API_URL)),
    )
    registry.register(
        "powerdns",
        lambda: PowerDnsProvider(
            api_url=os.environ.get("DNS_POWERDNS_URL", "http://localhost:8081"),
            server_id=os.environ.get("DNS_POWERDNS_SERVER_ID", "localhost"),
        ),
    )
    registry.register(
        "pebble",
        lambda: PebbleProvider(os.environ.get("DNS_PEBBLE_URL", "http://localhost:8055")),
    )
    return registry
