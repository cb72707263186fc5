"""Unit tests for options, credentials and exceptions."""

import pytest
from pydantic import ValidationError

from ddns_challenge.exceptions import (
    ChallengeError,
    ConfigurationError,
    ProviderError,
    UnsupportedOperationError,
    VerificationError,
)
from ddns_challenge.models import (
    ChallengeOptions,
    CleanupPolicy,
    Credentials,
    RetryPolicy,
    TxtRecord,
)


class TestChallengeOptions:
    """Tests for ChallengeOptions defaults and merging."""

    def test_defaults(self):
        options = ChallengeOptions()

        assert options.dns is None
        assert options.ttl == 120
        assert options.acme_challenge_prefix == "_acme-challenge"
        assert options.debug is False
        assert options.test is None
        assert options.cleanup_policy is CleanupPolicy.KEEP
        assert options.retry == RetryPolicy()

    def test_accepts_aliases(self):
        """Camel-case prefix names and 'pass' are accepted."""
        assert ChallengeOptions.model_validate({"acmeChallengeDns": "_x"}).acme_challenge_prefix == "_x"
        assert ChallengeOptions.model_validate({"acmeChallengePrefix": "_y"}).acme_challenge_prefix == "_y"
        assert ChallengeOptions.model_validate({"pass": "pw"}).password == "pw"

    def test_frozen(self):
        options = ChallengeOptions(dns="fake")

        with pytest.raises(ValidationError):
            options.dns = "other"

    def test_merge_override_wins(self):
        base = ChallengeOptions(dns="cloudflare", ttl=300, user="alice")

        merged = base.merge({"dns": "fake", "token": "t"})

        assert merged.dns == "fake"
        assert merged.token == "t"
        assert merged.ttl == 300
        assert merged.user == "alice"

    def test_merge_does_not_mutate_base(self):
        base = ChallengeOptions(dns="cloudflare")

        base.merge({"dns": "fake"})

        assert base.dns == "cloudflare"

    def test_merge_unset_fields_keep_base(self):
        """Defaults of the override do not clobber base values."""
        base = ChallengeOptions(ttl=300, acme_challenge_prefix="_custom")

        merged = base.merge(ChallengeOptions(debug=True))

        assert merged.ttl == 300
        assert merged.acme_challenge_prefix == "_custom"
        assert merged.debug is True

    def test_merge_none(self):
        base = ChallengeOptions(dns="fake")

        assert base.merge(None) is base

    def test_merge_ignores_unknown_keys(self):
        merged = ChallengeOptions().merge({"dns": "fake", "store": "memory"})

        assert merged.dns == "fake"

    def test_merge_validates_values(self):
        with pytest.raises(ValidationError):
            ChallengeOptions().merge({"ttl": "soon"})

    def test_credentials_property(self):
        options = ChallengeOptions(user="u", password="p", token="t")

        assert options.credentials == Credentials(user="u", password="p", token="t")


class TestRetryPolicy:
    def test_default_delays_capped_at_max_timeout(self):
        """Defaults back off 1, 2, 4 then stay at the 5 second cap."""
        delays = list(RetryPolicy().delays())

        assert delays == [1.0, 2.0, 4.0, 5.0, 5.0, 5.0, 5.0, 5.0, 5.0, 5.0]

    def test_zero_retries(self):
        assert list(RetryPolicy(retries=0).delays()) == []

    def test_negative_retries_rejected(self):
        with pytest.raises(ValidationError):
            RetryPolicy(retries=-1)


class TestCredentials:
    def test_payload_uses_pass_key(self):
        payload = Credentials(user="u", password="p", token="t").to_payload()

        assert payload == {"user": "u", "pass": "p", "token": "t"}

    def test_validate_from_payload_with_extra_fields(self):
        creds = Credentials.model_validate({"pass": "p", "type": "TXT", "name": "x"})

        assert creds.password == "p"
        assert creds.user is None


class TestTxtRecord:
    def test_type_is_txt(self):
        record = TxtRecord(name="_acme-challenge.example.com", ttl=120, content="abc")

        assert record.type == "TXT"

    def test_rejects_other_types(self):
        with pytest.raises(ValidationError):
            TxtRecord(type="A", name="example.com")


class TestExceptions:
    def test_hierarchy(self):
        for exc_type in (ConfigurationError, UnsupportedOperationError, ProviderError, VerificationError):
            assert issubclass(exc_type, ChallengeError)

    def test_verification_error_fields(self):
        error = VerificationError("_acme-challenge.example.com", "digest", ["nope"], attempts=4)

        assert error.domain == "_acme-challenge.example.com"
        assert error.expected == "digest"
        assert error.records == ["nope"]
        assert error.attempts == 4
        assert "after 4 attempt(s)" in str(error)

    def test_provider_error_fields(self):
        error = ProviderError("powerdns", "update", "Bad Request: nope", status_code=400)

        assert error.provider == "powerdns"
        assert error.operation == "update"
        assert error.status_code == 400
        assert str(error) == "powerdns update failed: Bad Request: nope"
