"""Service layer modules."""

from .aggregator import AggregationResult, RateAggregator, create_aggregator, init_aggregator
from .currency_directory import CurrencyDirectory, SqlCurrencyDirectory, init_directory
from .provider_probe import ProbeStatus, ProviderProbe, ProviderProbeReport, probe_providers
from .rate_store import RateStore, SqlRateStore
from .refresh import (
    CurrencyOutcome,
    RefreshCancelled,
    RefreshService,
    RefreshSummary,
    init_refresh_service,
)
from .retry import (
    AggregationAttempt,
    AttemptOutcome,
    ErrorKind,
    FetchResult,
    RetryPolicy,
    fetch_with_retry,
)
from .scheduler import ensure_refresh_state, init_scheduler, run_refresh, shutdown_scheduler

__all__ = [
    "AggregationAttempt",
    "AggregationResult",
    "AttemptOutcome",
    "CurrencyDirectory",
    "CurrencyOutcome",
    "ErrorKind",
    "FetchResult",
    "ProbeStatus",
    "ProviderProbe",
    "ProviderProbeReport",
    "RateAggregator",
    "RateStore",
    "RefreshCancelled",
    "RefreshService",
    "RefreshSummary",
    "RetryPolicy",
    "SqlCurrencyDirectory",
    "SqlRateStore",
    "create_aggregator",
    "ensure_refresh_state",
    "fetch_with_retry",
    "init_aggregator",
    "init_directory",
    "init_refresh_service",
    "init_scheduler",
    "probe_providers",
    "run_refresh",
    "shutdown_scheduler",
]
