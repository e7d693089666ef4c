"""Ordered fallback across the configured FX providers."""

from __future__ import annotations

import logging
import time
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from time import perf_counter
from typing import Callable

from app.logging import provider_log_extra
from app.providers import BaseRateProvider, CanonicalRateResponse

from .retry import AggregationAttempt, AttemptOutcome, RetryPolicy, fetch_with_retry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AggregationResult:
    chosen: CanonicalRateResponse | None
    attempts: tuple[AggregationAttempt, ...] = ()

    @property
    def has_data(self) -> bool:
        return self.chosen is not None

    def describe_attempts(self) -> str:
        return ", ".join(attempt.describe() for attempt in self.attempts) or "no providers configured"


class RateAggregator:
    """Walk providers in configured order and return the first usable answer.

    Configuration order is the only tie-break: the same configuration always
    selects the same provider for the same upstream answers. The aggregator
    never raises; every provider tried is recorded in the attempt ledger.
    """

    def __init__(
        self,
        providers: Mapping[str, BaseRateProvider],
        order: Sequence[str],
        policy: RetryPolicy | None = None,
        *,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._providers = dict(providers)
        self._order = tuple(order)
        self._policy = policy or RetryPolicy()
        self._sleep = sleep

        missing = [name for name in self._order if name not in self._providers]
        if missing:
            logger.warning("Configured providers not registered and will be skipped: %s", missing)

    @property
    def order(self) -> tuple[str, ...]:
        return self._order

    def aggregate(self, base: str) -> AggregationResult:
        attempts: list[AggregationAttempt] = []

        for name in self._order:
            provider = self._providers.get(name)
            if provider is None:
                logger.debug("Skipping unregistered provider %s for %s", name, base)
                continue

            logger.debug("Provider attempt start: provider=%s, base=%s", name, base)
            start = perf_counter()
            result = fetch_with_retry(provider, base, self._policy, sleep=self._sleep)
            duration = (perf_counter() - start) * 1000
            attempt = result.attempt
            attempts.append(attempt)

            extra = provider_log_extra(
                provider=attempt.provider_name,
                base=base,
                event="provider.fetch",
                status=attempt.outcome.value,
                duration_ms=duration,
                attempts=attempt.calls,
                error=attempt.message,
            )
            if attempt.outcome is AttemptOutcome.FAILURE:
                logger.warning("Provider attempt failed: %s", attempt.message, extra=extra)
                continue
            if result.response is None or not result.response.rates:
                logger.debug("Provider attempt returned no data", extra=extra)
                continue

            logger.info(
                "Provider selected: provider=%s, base=%s, rates=%s",
                attempt.provider_name,
                result.response.base_currency,
                len(result.response.rates),
                extra=extra,
            )
            return AggregationResult(chosen=result.response, attempts=tuple(attempts))

        logger.info("No provider returned rates for base=%s. Attempts=%s", base, len(attempts))
        return AggregationResult(chosen=None, attempts=tuple(attempts))


def create_aggregator(
    providers: Mapping[str, BaseRateProvider],
    order: Sequence[str],
    max_attempts: int = 2,
    backoff_seconds: float = 0.0,
) -> RateAggregator:
    return RateAggregator(
        providers,
        order,
        RetryPolicy(max_attempts=max_attempts, backoff_seconds=backoff_seconds),
    )


def init_aggregator(app) -> RateAggregator:
    """Create the aggregator from app config and store it on the Flask app."""

    providers = app.extensions.get("fx_providers") or {}
    backoff = float(app.config.get("PROVIDERS_RETRY_BACKOFF_SECONDS", 0))
    policy = RetryPolicy(
        max_attempts=int(app.config.get("PROVIDERS_RETRY_MAX_ATTEMPTS", 2)),
        backoff_seconds=backoff,
        backoff_jitter=backoff / 2,
    )
    aggregator = RateAggregator(providers, app.config.get("PROVIDERS_ORDER", []), policy)
    app.extensions["fx_aggregator"] = aggregator
    return aggregator
