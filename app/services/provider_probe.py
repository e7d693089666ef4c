"""One-shot availability probe across the registered providers."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from time import perf_counter

from app.errors import ValidationError
from app.providers import BaseRateProvider, ProviderUnavailable

logger = logging.getLogger(__name__)


class ProbeStatus(str, Enum):
    UP = "UP"
    NO_DATA = "NO_DATA"
    DOWN = "DOWN"
    DEGRADED = "DEGRADED"
    UNKNOWN = "UNKNOWN"


@dataclass(frozen=True)
class ProviderProbe:
    provider_name: str
    status: ProbeStatus
    duration_ms: float
    detail: str | None = None


@dataclass(frozen=True)
class ProviderProbeReport:
    status: ProbeStatus
    probes: tuple[ProviderProbe, ...] = field(default_factory=tuple)

    @property
    def available(self) -> int:
        return sum(1 for probe in self.probes if probe.status is ProbeStatus.UP)


def probe_providers(providers: Mapping[str, BaseRateProvider], base: str = "USD") -> ProviderProbeReport:
    """Call every provider once, without retries, and classify the answers.

    The overall status is ``DOWN`` when no provider is up and ``DEGRADED``
    when fewer than half are.
    """

    if not providers:
        logger.warning("No exchange rate providers configured")
        return ProviderProbeReport(status=ProbeStatus.UNKNOWN)

    probes: list[ProviderProbe] = []
    for name, provider in providers.items():
        start = perf_counter()
        try:
            response = provider.fetch_latest_rates(base)
        except (ProviderUnavailable, ValidationError) as exc:
            probes.append(ProviderProbe(name, ProbeStatus.DOWN, _elapsed(start), str(exc)))
            logger.warning("Provider %s is down: %s", name, exc)
            continue
        except Exception as exc:
            probes.append(ProviderProbe(name, ProbeStatus.DOWN, _elapsed(start), exc.__class__.__name__))
            logger.exception("Unexpected error checking provider %s", name)
            continue

        if response is not None and response.rates:
            probes.append(ProviderProbe(name, ProbeStatus.UP, _elapsed(start)))
        else:
            probes.append(ProviderProbe(name, ProbeStatus.NO_DATA, _elapsed(start)))

    report_probes = tuple(probes)
    available = sum(1 for probe in report_probes if probe.status is ProbeStatus.UP)
    if available == 0:
        overall = ProbeStatus.DOWN
    elif available < len(report_probes) / 2:
        overall = ProbeStatus.DEGRADED
    else:
        overall = ProbeStatus.UP
    return ProviderProbeReport(status=overall, probes=report_probes)


def _elapsed(start: float) -> float:
    return round((perf_counter() - start) * 1000, 3)
