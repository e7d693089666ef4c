"""Bounded retry around a single provider call."""

from __future__ import annotations

import logging
import random
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable

from app.errors import ValidationError
from app.providers import BaseRateProvider, CanonicalRateResponse, ProviderUnavailable

logger = logging.getLogger(__name__)


class AttemptOutcome(str, Enum):
    """Terminal result of one logical provider attempt."""

    SUCCESS = "success"
    EMPTY_DATA = "empty_data"
    FAILURE = "failure"


class ErrorKind(str, Enum):
    PROVIDER_UNAVAILABLE = "provider_unavailable"
    VALIDATION = "validation"
    UNEXPECTED = "unexpected"


@dataclass(frozen=True)
class AggregationAttempt:
    """Ledger entry for one provider, with retries collapsed into it."""

    provider_name: str
    outcome: AttemptOutcome
    error_kind: ErrorKind | None = None
    message: str | None = None
    calls: int = 1

    @property
    def succeeded(self) -> bool:
        return self.outcome is AttemptOutcome.SUCCESS

    def describe(self) -> str:
        if self.outcome is AttemptOutcome.FAILURE:
            kind = self.error_kind.value if self.error_kind else "unknown"
            return f"{self.provider_name}=failure({kind}: {self.message})"
        return f"{self.provider_name}={self.outcome.value}"


@dataclass(frozen=True)
class FetchResult:
    attempt: AggregationAttempt
    response: CanonicalRateResponse | None = None


@dataclass(frozen=True)
class RetryPolicy:
    """Retry settings shared by every provider.

    Backoff defaults to zero so retries are immediate.
    """

    max_attempts: int = 2
    backoff_seconds: float = 0.0
    backoff_jitter: float = 0.0

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got {self.max_attempts}")
        if self.backoff_seconds < 0 or self.backoff_jitter < 0:
            raise ValueError("backoff_seconds and backoff_jitter must not be negative")

    def compute_backoff(self, attempt: int) -> float:
        if self.backoff_seconds <= 0:
            return 0.0
        base = self.backoff_seconds * (2 ** (attempt - 1))
        jitter = random.uniform(-self.backoff_jitter, self.backoff_jitter) if self.backoff_jitter else 0.0
        return max(base + jitter, 0.0)


def fetch_with_retry(
    provider: BaseRateProvider,
    base: str,
    policy: RetryPolicy,
    *,
    sleep: Callable[[float], None] = time.sleep,
) -> FetchResult:
    """Call ``provider`` until it answers, runs out of attempts, or fails hard.

    Only :class:`ProviderUnavailable` is retried. An absent or empty response
    is a terminal ``EMPTY_DATA`` answer. Never raises.
    """

    name = _provider_name(provider)
    calls = 0
    last_error: ProviderUnavailable | None = None

    while calls < policy.max_attempts:
        calls += 1
        try:
            response = provider.fetch_latest_rates(base)
        except ProviderUnavailable as exc:
            last_error = exc
            if calls >= policy.max_attempts:
                break
            delay = policy.compute_backoff(calls)
            logger.warning(
                "Provider %s failed for %s (attempt %s/%s): %s",
                name,
                base,
                calls,
                policy.max_attempts,
                exc,
            )
            if delay:
                sleep(delay)
            continue
        except ValidationError as exc:
            return FetchResult(
                AggregationAttempt(name, AttemptOutcome.FAILURE, ErrorKind.VALIDATION, str(exc), calls)
            )
        except Exception as exc:
            logger.exception("Provider %s raised an unexpected error for %s", name, base)
            return FetchResult(
                AggregationAttempt(
                    name,
                    AttemptOutcome.FAILURE,
                    ErrorKind.UNEXPECTED,
                    f"{exc.__class__.__name__}: {exc}",
                    calls,
                )
            )

        if response is None or not response.rates:
            return FetchResult(AggregationAttempt(name, AttemptOutcome.EMPTY_DATA, calls=calls))
        return FetchResult(AggregationAttempt(name, AttemptOutcome.SUCCESS, calls=calls), response)

    return FetchResult(
        AggregationAttempt(
            name,
            AttemptOutcome.FAILURE,
            ErrorKind.PROVIDER_UNAVAILABLE,
            str(last_error) if last_error is not None else None,
            calls,
        )
    )


def _provider_name(provider: BaseRateProvider) -> str:
    return getattr(provider, "name", provider.__class__.__name__)
