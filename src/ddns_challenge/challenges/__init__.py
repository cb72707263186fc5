"""DNS-01 challenge helpers."""

from ddns_challenge.challenges.dns01 import (
    build_challenge_domain,
    check_challenge,
    compute_dns_txt_value,
    prefixify,
    strip_wildcard,
)

__all__ = [
    "build_challenge_domain",
    "check_challenge",
    "compute_dns_txt_value",
    "prefixify",
    "strip_wildcard",
]
