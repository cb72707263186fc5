"""ddns_challenge - DNS-01 challenge plugin for ACME clients."""

from ddns_challenge.challenger import DdnsChallenger
from ddns_challenge.models import ChallengeOptions, CleanupPolicy, RetryPolicy

__all__ = ["ChallengeOptions", "CleanupPolicy", "DdnsChallenger", "RetryPolicy"]
__version__ = "0.1.0"
