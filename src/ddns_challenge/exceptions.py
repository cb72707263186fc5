"""Challenge plugin exceptions."""


class ChallengeError(Exception):
    """Base exception for DNS-01 challenge errors."""

    pass


class ConfigurationError(ChallengeError):
    """Missing or invalid configuration (e.g. no DNS provider selected)."""

    pass


class UnsupportedOperationError(ChallengeError):
    """Operation has no meaning for the dns-01 challenge type."""

    pass


class StoreError(ChallengeError):
    """Credential store could not be read or written."""

    pass


class VerificationError(ChallengeError):
    """Published TXT record was never observed with the expected value.

    Args:
        domain: The challenge domain that was queried.
        expected: The digest that should have been present.
        records: TXT values seen on the last lookup.
        attempts: Number of lookups performed.
    """

    def __init__(
        self,
        domain: str,
        expected: str,
        records: list[str] | None = None,
        attempts: int = 1,
    ):
        self.domain = domain
        self.expected = expected
        self.records = list(records or [])
        self.attempts = attempts
        super().__init__(
            f"TXT record {self.records!r} at {domain} doesn't match {expected!r} "
            f"after {attempts} attempt(s)"
        )


class ProviderError(ChallengeError):
    """DNS provider failed to update or delete a record.

    Args:
        provider: Provider identifier (e.g. "cloudflare").
        operation: "update" or "delete".
        detail: Human-readable failure detail.
        status_code: HTTP status code from the provider API, if any.
    """

    def __init__(
        self,
        provider: str,
        operation: str,
        detail: str,
        status_code: int | None = None,
    ):
        self.provider = provider
        self.operation = operation
        self.detail = detail
        self.status_code = status_code
        super().__init__(f"{provider} {operation} failed: {detail}")
