from __future__ import annotations

from app.providers import ProviderUnavailable
from app.services.provider_probe import ProbeStatus, probe_providers
from tests.fixtures import ScriptedProvider, make_response


def _providers(*providers):
    return {provider.name: provider for provider in providers}


def test_all_providers_up():
    report = probe_providers(
        _providers(
            ScriptedProvider("a", make_response("a", "USD", EUR="0.9")),
            ScriptedProvider("b", make_response("b", "USD", EUR="0.91")),
        )
    )

    assert report.status is ProbeStatus.UP
    assert report.available == 2


def test_minority_up_is_degraded():
    report = probe_providers(
        _providers(
            ScriptedProvider("a", make_response("a", "USD", EUR="0.9")),
            ScriptedProvider("b", ProviderUnavailable("refused")),
            ScriptedProvider("c", None),
        )
    )

    assert report.status is ProbeStatus.DEGRADED
    assert [probe.status for probe in report.probes] == [ProbeStatus.UP, ProbeStatus.DOWN, ProbeStatus.NO_DATA]
    assert report.probes[1].detail == "refused"


def test_no_provider_up_is_down_and_probe_does_not_retry():
    failing = ScriptedProvider("a", ProviderUnavailable("refused"), make_response("a", "USD", EUR="0.9"))

    report = probe_providers(_providers(failing, ScriptedProvider("b", RuntimeError("bug"))))

    assert report.status is ProbeStatus.DOWN
    assert len(failing.calls) == 1
    assert report.probes[1].detail == "RuntimeError"


def test_no_providers_is_unknown():
    report = probe_providers({})

    assert report.status is ProbeStatus.UNKNOWN
    assert report.probes == ()
