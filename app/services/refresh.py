"""Refresh orchestration across every tracked currency."""

from __future__ import annotations

import contextvars
import logging
import threading
import uuid
from collections.abc import Iterator, Sequence
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from time import perf_counter

from app.logging import refresh_log_extra, refresh_run_context

from .aggregator import RateAggregator
from .currency_directory import CurrencyDirectory
from .rate_store import RateStore

logger = logging.getLogger(__name__)


class RefreshCancelled(RuntimeError):
    """Raised when a refresh run is cancelled before every currency was started."""

    def __init__(self, started: int, total: int) -> None:
        super().__init__(f"Refresh cancelled after starting {started} of {total} currencies")
        self.started = started
        self.total = total


@dataclass
class RefreshSummary:
    currencies_in_system: int = 0
    currencies_processed: int = 0
    providers_with_data: int = 0
    rates_saved: int = 0
    failures: list[str] = field(default_factory=list)

    def as_dict(self) -> dict[str, object]:
        return {
            "currencies_in_system": self.currencies_in_system,
            "currencies_processed": self.currencies_processed,
            "providers_with_data": self.providers_with_data,
            "rates_saved": self.rates_saved,
            "failures": list(self.failures),
        }


@dataclass(frozen=True)
class CurrencyOutcome:
    """What one currency contributed to the run."""

    base: str
    had_data: bool = False
    rates_saved: int = 0
    failure: str | None = None


class RefreshService:
    """Aggregate and persist rates for each tracked currency as the base.

    Currencies are independent: each is handled by a worker and reports a
    :class:`CurrencyOutcome`; only the calling thread folds outcomes into the
    summary. A failing currency never aborts the run.
    """

    def __init__(
        self,
        directory: CurrencyDirectory,
        store: RateStore,
        aggregator: RateAggregator,
        *,
        max_workers: int = 1,
    ) -> None:
        if max_workers < 1:
            raise ValueError("max_workers must be at least 1")
        self._directory = directory
        self._store = store
        self._aggregator = aggregator
        self._max_workers = max_workers

    def refresh_all(self, cancel_event: threading.Event | None = None) -> RefreshSummary:
        run_id = uuid.uuid4().hex
        start = perf_counter()
        codes = self._directory.list_codes()
        known = frozenset(code.upper() for code in codes)
        logger.info(
            "Refresh run started for %s currencies",
            len(codes),
            extra=refresh_log_extra(run_id=run_id, event="refresh.start", status="running", currencies=len(codes)),
        )

        summary = RefreshSummary(currencies_in_system=len(codes))
        with refresh_run_context(run_id):
            for outcome in self._run(codes, known, cancel_event):
                summary.currencies_processed += 1
                if outcome.had_data:
                    summary.providers_with_data += 1
                summary.rates_saved += outcome.rates_saved
                if outcome.failure:
                    summary.failures.append(outcome.failure)

        duration = (perf_counter() - start) * 1000
        logger.info(
            "Refresh run completed: %s currencies in system, %s processed, %s providers with data, "
            "%s rates saved, %s failures",
            summary.currencies_in_system,
            summary.currencies_processed,
            summary.providers_with_data,
            summary.rates_saved,
            len(summary.failures),
            extra=refresh_log_extra(
                run_id=run_id,
                event="refresh.complete",
                status="partial" if summary.failures else "success",
                duration_ms=duration,
                rates_saved=summary.rates_saved,
                failures=len(summary.failures),
            ),
        )
        return summary

    def _run(
        self,
        codes: Sequence[str],
        known: frozenset[str],
        cancel_event: threading.Event | None,
    ) -> Iterator[CurrencyOutcome]:
        """Yield outcomes in directory order while keeping at most ``max_workers`` in flight."""

        if self._max_workers == 1:
            for index, code in enumerate(codes):
                if cancel_event is not None and cancel_event.is_set():
                    raise RefreshCancelled(index, len(codes))
                yield self.process_currency(code, known)
            return

        with ThreadPoolExecutor(max_workers=self._max_workers, thread_name_prefix="fx-refresh") as pool:
            pending: dict[int, Future[CurrencyOutcome]] = {}
            finished: dict[int, CurrencyOutcome] = {}
            next_to_yield = 0
            started = 0
            while next_to_yield < len(codes):
                while started < len(codes) and len(pending) < self._max_workers:
                    if cancel_event is not None and cancel_event.is_set():
                        wait(pending.values())
                        raise RefreshCancelled(started, len(codes))
                    pending[started] = pool.submit(
                        contextvars.copy_context().run, self.process_currency, codes[started], known
                    )
                    started += 1

                done, _ = wait(pending.values(), return_when=FIRST_COMPLETED)
                for index in [i for i, future in pending.items() if future in done]:
                    finished[index] = pending.pop(index).result()

                while next_to_yield in finished:
                    yield finished.pop(next_to_yield)
                    next_to_yield += 1

    def process_currency(self, base: str, known: frozenset[str]) -> CurrencyOutcome:
        """Aggregate and persist rates for one base currency. Never raises."""

        try:
            result = self._aggregator.aggregate(base)
        except Exception as exc:
            logger.exception("Aggregation crashed for %s", base)
            return CurrencyOutcome(base, failure=f"Aggregation failed for {base}: {exc}")

        chosen = result.chosen
        if chosen is None:
            return CurrencyOutcome(
                base,
                failure=f"No provider returned rates for {base}: {result.describe_attempts()}",
            )

        saved = 0
        for target, rate in chosen.rates.items():
            if target == base.upper() or target not in known:
                continue
            try:
                self._store.save_rate(base.upper(), target, rate, chosen.observed_at, chosen.provider_name)
            except Exception as exc:
                logger.warning("Failed to save rate %s->%s: %s", base, target, exc)
                return CurrencyOutcome(
                    base,
                    had_data=True,
                    rates_saved=saved,
                    failure=f"Failed to save rates for {base} (at {base}->{target}): {exc}",
                )
            saved += 1

        logger.debug("Saved %s rates for %s from %s", saved, base, chosen.provider_name)
        return CurrencyOutcome(base, had_data=True, rates_saved=saved)


def init_refresh_service(app) -> RefreshService:
    """Create the refresh service from the app's directory, store and aggregator."""

    from .rate_store import SqlRateStore

    service = RefreshService(
        directory=app.extensions["currency_directory"],
        store=app.extensions.get("rate_store") or SqlRateStore(),
        aggregator=app.extensions["fx_aggregator"],
        max_workers=int(app.config.get("REFRESH_MAX_WORKERS", 1)),
    )
    app.extensions["fx_refresh_service"] = service
    return service
