"""Pydantic models for challenge options, credentials and TXT records."""

from collections.abc import Iterator, Mapping
from enum import StrEnum
from typing import Any, Literal

from pydantic import AliasChoices, BaseModel, Field

DEFAULT_ACME_CHALLENGE_PREFIX = "_acme-challenge"
DEFAULT_TTL = 120


class CleanupPolicy(StrEnum):
    """What remove() does with stored credentials when the remote delete fails."""

    KEEP = "keep"
    FORGET = "forget"


class RetryPolicy(BaseModel):
    """Exponential backoff schedule for DNS propagation polling.

    The first lookup happens immediately; each of the ``retries`` follow-up
    lookups waits ``min_timeout * factor**n`` seconds, capped at ``max_timeout``.
    """

    retries: int = Field(default=10, ge=0)
    factor: float = Field(default=2.0, ge=1.0)
    min_timeout: float = Field(default=1.0, ge=0)
    max_timeout: float = Field(default=5.0, ge=0)

    model_config = {"frozen": True}

    def delays(self) -> Iterator[float]:
        """Yield the wait before each retry, in seconds."""
        for attempt in range(self.retries):
            yield min(self.min_timeout * self.factor**attempt, self.max_timeout)


class Credentials(BaseModel):
    """Provider credentials stored per domain between set() and remove()."""

    user: str | None = None
    password: str | None = Field(default=None, alias="pass")
    token: str | None = None

    model_config = {"populate_by_name": True}

    def to_payload(self) -> dict[str, str | None]:
        return self.model_dump(by_alias=True)


class TxtRecord(BaseModel):
    """TXT record handed to a DNS provider."""

    type: Literal["TXT"] = "TXT"
    name: str
    ttl: int | None = None
    content: str | None = None


class ChallengeOptions(BaseModel):
    """Options for a DdnsChallenger.

    Instances are immutable. Per-call overrides are applied with merge(),
    which only takes the fields the override explicitly sets.
    """

    dns: str | None = None
    ttl: int = DEFAULT_TTL
    user: str | None = None
    password: str | None = Field(default=None, alias="pass")
    token: str | None = None
    acme_challenge_prefix: str | None = Field(
        default=DEFAULT_ACME_CHALLENGE_PREFIX,
        validation_alias=AliasChoices(
            "acme_challenge_prefix", "acmeChallengePrefix", "acmeChallengeDns"
        ),
    )
    debug: bool = False
    test: str | None = None
    cleanup_policy: CleanupPolicy = CleanupPolicy.KEEP
    retry: RetryPolicy = Field(default_factory=RetryPolicy)

    model_config = {"frozen": True, "populate_by_name": True}

    @property
    def credentials(self) -> Credentials:
        return Credentials(user=self.user, password=self.password, token=self.token)

    def merge(self, overrides: "ChallengeOptions | Mapping[str, Any] | None") -> "ChallengeOptions":
        """Return new options with the fields set in overrides taking precedence.

        Args:
            overrides: Another ChallengeOptions or a mapping using field names
                or their aliases. Unknown keys are ignored.

        Returns:
            A new ChallengeOptions instance.
        """
        if overrides is None:
            return self
        if not isinstance(overrides, ChallengeOptions):
            overrides = ChallengeOptions.model_validate(dict(overrides))
        update = {name: getattr(overrides, name) for name in overrides.model_fields_set}
        return self.model_copy(update=update)
