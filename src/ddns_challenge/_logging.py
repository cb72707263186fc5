"""Package logger setup and per-operation log context.

Each challenge operation works on exactly one domain. ``set()`` and
``remove()`` record it in a context variable so code further down the call
(provider dispatch, store errors) can tag its log records with it without
threading the domain through every signature.
"""

import logging
import time
from contextvars import ContextVar, Token

logging.getLogger("ddns_challenge").addHandler(logging.NullHandler())

_domain: ContextVar[str | None] = ContextVar("ddns_challenge_domain", default=None)


def set_domain(domain: str | None) -> Token[str | None]:
    """Mark domain as the one the current task is working on."""
    return _domain.set(domain)


def reset_domain(token: Token[str | None]) -> None:
    _domain.reset(token)


def get_domain_extra() -> dict[str, str]:
    """Return ``{"domain": ...}`` for a log call's ``extra``, or ``{}`` outside an operation."""
    domain = _domain.get()
    return {"domain": domain} if domain else {}


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


class Timer:
    """Stopwatch for propagation waits; ``elapsed_ms`` is set on exit."""

    def __init__(self) -> None:
        self.elapsed_ms = 0.0
        self._started = 0.0

    def __enter__(self) -> "Timer":
        self._started = time.monotonic()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.elapsed_ms = round((time.monotonic() - self._started) * 1000, 1)
