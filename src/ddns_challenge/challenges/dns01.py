"""DNS-01 challenge record naming and TXT value computation."""

import base64
import hashlib

from ddns_challenge.exceptions import VerificationError


def compute_dns_txt_value(key_authorization: str | None) -> str:
    """Compute the DNS TXT record value for DNS-01 challenge.

    The TXT record value is the base64url-encoded SHA-256 digest
    of the key authorization string. A missing key authorization
    hashes as the empty string.

    Args:
        key_authorization: The key authorization string.

    Returns:
        The base64url-encoded SHA-256 digest (without padding).
    """
    digest = hashlib.sha256((key_authorization or "").encode()).digest()
    return base64.urlsafe_b64encode(digest).rstrip(b"=").decode()


def prefixify(label: str | None) -> str:
    """Turn a label into a name prefix ending in a single dot ("" if empty)."""
    if not label:
        return ""
    return label if label.endswith(".") else f"{label}."


def strip_wildcard(domain: str) -> str:
    """Remove one leading ``*.`` label."""
    return domain.removeprefix("*.")


def build_challenge_domain(domain: str, prefix: str | None = None, test: str | None = None) -> str:
    """Build the name the challenge TXT record lives at.

    ``build_challenge_domain("*.example.com", "_acme-challenge", "_test")``
    gives ``"_test._acme-challenge.example.com"``.

    Args:
        domain: The domain being validated, optionally a wildcard.
        prefix: ACME challenge label, normally ``_acme-challenge``.
        test: Extra leading label used by self-tests.

    Returns:
        The fully derived challenge domain.
    """
    return prefixify(test) + prefixify(prefix) + strip_wildcard(domain)


def check_challenge(records: list[str], expected: str, domain: str = "", attempts: int = 1) -> None:
    """Raise VerificationError unless expected is one of the TXT values."""
    if expected not in records:
        raise VerificationError(domain=domain, expected=expected, records=records, attempts=attempts)
