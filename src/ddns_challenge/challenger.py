"""DNS-01 challenge orchestration for ACME clients."""

import asyncio
from collections.abc import Awaitable, Callable, Mapping
from typing import Any, TypeVar

import dns.exception

from ddns_challenge._logging import Timer, get_domain_extra, get_logger, reset_domain, set_domain
from ddns_challenge.challenges.dns01 import (
    build_challenge_domain,
    check_challenge,
    compute_dns_txt_value,
)
from ddns_challenge.exceptions import (
    ConfigurationError,
    UnsupportedOperationError,
    VerificationError,
)
from ddns_challenge.models import ChallengeOptions, CleanupPolicy, RetryPolicy
from ddns_challenge.providers import ProviderRegistry, default_registry
from ddns_challenge.resolver import TxtResolver
from ddns_challenge.store import Bucket, Store, create_store

logger = get_logger(__name__)

T = TypeVar("T")

Overrides = ChallengeOptions | Mapping[str, Any] | None

BUCKET_NAME = "lebot-ddns"
TEST_LABEL = "_test"
TEST_RETRIES = 5


class DdnsChallenger:
    """DNS-01 challenge plugin backed by a dynamic DNS provider.

    ``set`` publishes ``_acme-challenge.<domain>`` with the key authorization
    digest and waits until it resolves; ``remove`` deletes it again using the
    credentials remembered by ``set``. Every operation takes per-call
    overrides merged over the options given here.

    Args:
        options: Base options (ChallengeOptions or a mapping of its fields).
        store: Credential store, or a description accepted by create_store().
        registry: Provider registry (default: built-in providers).
        resolver: TXT resolver used to verify propagation.
    """

    def __init__(
        self,
        options: Overrides = None,
        *,
        store: Store | str | Mapping[str, Any] | None = None,
        registry: ProviderRegistry | None = None,
        resolver: TxtResolver | None = None,
    ):
        if isinstance(options, ChallengeOptions):
            self.options = options
        else:
            self.options = ChallengeOptions.model_validate(dict(options or {}))
        self.store = create_store(store)
        self.registry = registry if registry is not None else default_registry()
        self.resolver = resolver if resolver is not None else TxtResolver()
        self._bucket: Bucket | None = None

    @classmethod
    def create(cls, options: Overrides = None, **kwargs: Any) -> "DdnsChallenger":
        return cls(options, **kwargs)

    def get_options(self) -> ChallengeOptions:
        return self.options

    async def _get_bucket(self) -> Bucket:
        if self._bucket is None:
            self._bucket = await self.store.create_bucket(BUCKET_NAME)
        return self._bucket

    def _challenge_domain(self, options: ChallengeOptions, domain: str) -> str:
        return build_challenge_domain(domain, options.acme_challenge_prefix, options.test)

    @staticmethod
    def _require_provider(options: ChallengeOptions) -> str:
        if not options.dns:
            logger.error("No DNS provider configured", extra=get_domain_extra())
            raise ConfigurationError("`dns` provider is required.")
        return options.dns

    async def set(
        self,
        overrides: Overrides,
        domain: str,
        challenge: str,
        key_authorization: str | None = None,
    ) -> str:
        """Publish the challenge TXT record and wait until it resolves.

        Credentials are stored before the provider is called so that
        remove() can clean up even when the update fails half-way.

        Args:
            overrides: Per-call options merged over the instance options.
            domain: Domain being validated (wildcards allowed).
            challenge: ACME challenge token (informational).
            key_authorization: Key authorization to publish the digest of.

        Returns:
            The published TXT value.

        Raises:
            ConfigurationError: No DNS provider configured.
            ProviderError: The provider rejected the update.
            VerificationError: The record never resolved to the digest.
        """
        options = self.options.merge(overrides)
        token = set_domain(domain)
        try:
            provider_id = self._require_provider(options)
            digest = compute_dns_txt_value(key_authorization)
            challenge_domain = self._challenge_domain(options, domain)

            if not key_authorization:
                logger.warning(
                    "SANITY FAIL: missing keyAuthorization",
                    extra={"domain": domain, "challenge": challenge},
                )

            credentials = options.credentials
            bucket = await self._get_bucket()
            await bucket.set(domain, credentials)

            await self.registry.execute(
                provider_id,
                "update",
                challenge_domain,
                {
                    **credentials.to_payload(),
                    "type": "TXT",
                    "name": challenge_domain,
                    "ttl": options.ttl,
                    "content": digest,
                },
            )
            logger.info(
                "Challenge record published",
                extra={"domain": domain, "record_name": challenge_domain, "provider": provider_id},
            )

            if options.debug:
                logger.info(
                    "Test DNS record: dig TXT +noall +answer '%s' # %s",
                    challenge_domain,
                    challenge,
                )

            await self._wait_for_record(options, domain, challenge_domain, digest)
            return digest
        except Exception as e:
            logger.error(
                "Challenge set failed",
                extra={"domain": domain, "error": str(e), "error_type": type(e).__name__},
            )
            raise
        finally:
            reset_domain(token)

    async def _wait_for_record(
        self, options: ChallengeOptions, domain: str, challenge_domain: str, digest: str
    ) -> None:
        """Poll loopback() until digest shows up, backing off per options.retry."""
        delays = options.retry.delays()
        attempts = 0
        records: list[str] = []

        with Timer() as timer:
            while True:
                attempts += 1
                try:
                    records = await self.loopback(options, domain)
                except dns.exception.DNSException:
                    records = []

                if digest in records:
                    break

                delay = next(delays, None)
                if delay is None:
                    raise VerificationError(challenge_domain, digest, records, attempts)
                logger.debug(
                    "TXT record not visible yet",
                    extra={"record_name": challenge_domain, "attempt": attempts, "retry_in": delay},
                )
                await asyncio.sleep(delay)

        logger.info(
            "TXT record propagated",
            extra={"record_name": challenge_domain, "attempts": attempts, "elapsed_ms": timer.elapsed_ms},
        )

    async def get(self, overrides: Overrides, domain: str, challenge: str) -> None:
        raise UnsupportedOperationError(
            "Challenge.get() does not need an implementation for dns-01. "
            "(did you mean Challenge.loopback?)"
        )

    async def remove(self, overrides: Overrides, domain: str, challenge: str) -> None:
        """Delete the challenge TXT record published by set().

        Does nothing (beyond a warning) when no credentials are stored for
        domain. When the provider delete fails the stored credentials are
        kept or dropped according to ``cleanup_policy`` and the error is
        re-raised.

        Raises:
            ConfigurationError: No DNS provider configured.
            ProviderError: The provider rejected the delete.
        """
        options = self.options.merge(overrides)
        token = set_domain(domain)
        try:
            provider_id = self._require_provider(options)
            bucket = await self._get_bucket()

            credentials = await bucket.get(domain)
            if credentials is None:
                logger.warning(
                    "Could not remove challenge record: already removed",
                    extra={"domain": domain},
                )
                return

            challenge_domain = self._challenge_domain(options, domain)
            try:
                await self.registry.execute(
                    provider_id,
                    "delete",
                    challenge_domain,
                    {**credentials.to_payload(), "type": "TXT", "name": challenge_domain},
                )
            except Exception as e:
                logger.error(
                    "Challenge record delete failed",
                    extra={
                        "domain": domain,
                        "record_name": challenge_domain,
                        "cleanup_policy": str(options.cleanup_policy),
                        "error": str(e),
                    },
                )
                if options.cleanup_policy is CleanupPolicy.FORGET:
                    await bucket.delete(domain)
                raise

            await bucket.delete(domain)
            logger.info(
                "Challenge record removed",
                extra={"domain": domain, "record_name": challenge_domain, "provider": provider_id},
            )
        finally:
            reset_domain(token)

    async def loopback(self, overrides: Overrides, domain: str) -> list[str]:
        """Resolve the challenge TXT records for domain.

        Returns:
            One string per TXT record, its character-strings joined.
        """
        options = self.options.merge(overrides)
        challenge_domain = self._challenge_domain(options, domain)
        try:
            records = await self.resolver.resolve_txt(challenge_domain)
        except dns.exception.DNSException as e:
            logger.warning(
                "TXT lookup failed",
                extra={"record_name": challenge_domain, "error": str(e), "error_type": type(e).__name__},
            )
            raise
        return ["".join(parts) for parts in records]

    async def test(
        self,
        overrides: Overrides,
        domain: str,
        challenge: str,
        key_authorization: str | None = None,
    ) -> str:
        """Run set, loopback and remove against a test-labelled record.

        The record lives under the ``test`` label (default ``_test``) so a
        self-check never touches the real challenge name. Removal runs even
        when the loopback stage fails. Its retries keep the stored credentials
        between attempts; a ``forget`` cleanup policy only drops them once
        every attempt has failed.

        Returns:
            The digest that was published.
        """
        options = self.options.merge(overrides)
        if not options.test:
            options = options.model_copy(update={"test": TEST_LABEL})
        retry = options.retry.model_copy(update={"retries": TEST_RETRIES})

        digest = await self.set(options, domain, challenge, key_authorization)
        try:
            records = await self._retry(lambda: self.loopback(options, domain), retry, "loopback")
        finally:
            await self._remove_with_retry(options, domain, challenge, retry)

        check_challenge(records, digest, domain=self._challenge_domain(options, domain))
        return digest

    async def _remove_with_retry(
        self, options: ChallengeOptions, domain: str, challenge: str, retry: RetryPolicy
    ) -> None:
        keep = options.model_copy(update={"cleanup_policy": CleanupPolicy.KEEP})
        try:
            await self._retry(lambda: self.remove(keep, domain, challenge), retry, "remove")
        except Exception:
            if options.cleanup_policy is CleanupPolicy.FORGET:
                await (await self._get_bucket()).delete(domain)
            raise

    async def _retry(
        self, operation: Callable[[], Awaitable[T]], policy: RetryPolicy, name: str
    ) -> T:
        delays = policy.delays()
        attempt = 0
        while True:
            attempt += 1
            try:
                return await operation()
            except ConfigurationError:
                raise
            except Exception as e:
                delay = next(delays, None)
                if delay is None:
                    logger.error(
                        "Giving up after retries",
                        extra={"operation": name, "attempts": attempt, "error": str(e)},
                    )
                    raise
                logger.warning(
                    "Retrying after failure",
                    extra={"operation": name, "attempt": attempt, "retry_in": delay, "error": str(e)},
                )
                await asyncio.sleep(delay)
