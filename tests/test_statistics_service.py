import threading

import pytest

from courier_desk.models.domain import SteadfastCredentials
from courier_desk.services.statistics import service as statistics_service
from courier_desk.services.statistics import CourierStatisticsService, QueryTracker, build_statistics

CREDENTIALS = SteadfastCredentials(api_key="key", secret_key="secret")


class DummyHoorin:
    calls: list[str] = []

    def search(self, phone: str) -> dict:
        DummyHoorin.calls.append(phone)
        return {"Summaries": {"Pathao": {"Total Delivery": 10, "Successful Delivery": 8, "Canceled Delivery": 2}}}


class FailingHoorin:
    def search(self, phone: str) -> dict:
        raise RuntimeError("aggregator down")


class DummySteadfast:
    def __init__(self, credentials: SteadfastCredentials) -> None:
        self.credentials = credentials

    def fraud_check(self, phone: str) -> dict:
        return {"status": 200, "total_parcels": "5", "total_delivered": "5", "total_cancelled": "0"}


class FailingSteadfast(DummySteadfast):
    def fraud_check(self, phone: str) -> dict:
        raise TimeoutError("steadfast timed out")


@pytest.fixture(autouse=True)
def reset_calls():
    DummyHoorin.calls = []
    yield


def test_build_statistics_combines_both_feeds(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(statistics_service, "HoorinClient", DummyHoorin)
    monkeypatch.setattr(statistics_service, "SteadfastClient", DummySteadfast)

    report = build_statistics("01712345678", CREDENTIALS)

    assert report.combined.total == 15
    assert report.combined.success_rate == 87
    assert report.errors == []


def test_dedicated_feed_skipped_without_credentials(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(statistics_service, "HoorinClient", DummyHoorin)
    monkeypatch.setattr(statistics_service, "SteadfastClient", FailingSteadfast)

    report = build_statistics("01712345678", None)

    assert report.combined.total == 10
    assert report.sources["steadfast"] is False
    assert report.errors == []


def test_one_failing_feed_does_not_abort_the_other(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(statistics_service, "HoorinClient", FailingHoorin)
    monkeypatch.setattr(statistics_service, "SteadfastClient", DummySteadfast)

    report = build_statistics("01712345678", CREDENTIALS)

    assert report.combined.total == 5
    assert report.sources == {"aggregator": False, "steadfast": True}
    assert any("aggregator down" in error for error in report.errors)


def test_both_feeds_failing_returns_empty_report(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(statistics_service, "HoorinClient", FailingHoorin)
    monkeypatch.setattr(statistics_service, "SteadfastClient", FailingSteadfast)

    report = build_statistics("01712345678", CREDENTIALS)

    assert report.combined.total == 0
    assert report.combined.success_rate == 0
    assert len(report.errors) == 2


def test_lookup_normalizes_phone(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(statistics_service, "HoorinClient", DummyHoorin)

    lookup = CourierStatisticsService().lookup("+880 1712-345678")

    assert lookup.phone == "01712345678"
    assert DummyHoorin.calls == ["01712345678"]
    assert lookup.superseded is False
    assert lookup.report is not None


def test_lookup_rejects_invalid_phone(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(statistics_service, "HoorinClient", DummyHoorin)

    with pytest.raises(ValueError, match="Invalid Bangladesh phone number format"):
        CourierStatisticsService().lookup("02712345678")
    assert DummyHoorin.calls == []


def test_query_tracker_last_query_wins() -> None:
    tracker = QueryTracker()
    first = tracker.begin()
    second = tracker.begin()

    assert not tracker.is_current(first)
    assert tracker.is_current(second)


def test_superseded_lookup_discards_its_result(monkeypatch: pytest.MonkeyPatch) -> None:
    tracker = QueryTracker()
    service = CourierStatisticsService(tracker)
    started = threading.Event()
    release = threading.Event()

    class SlowHoorin(DummyHoorin):
        def search(self, phone: str) -> dict:
            if phone == "01712345678":
                started.set()
                release.wait(timeout=5)
            return super().search(phone)

    monkeypatch.setattr(statistics_service, "HoorinClient", SlowHoorin)

    results = {}
    worker = threading.Thread(target=lambda: results.setdefault("stale", service.lookup("01712345678")))
    worker.start()
    assert started.wait(timeout=5)

    fresh = service.lookup("01912345678")
    release.set()
    worker.join(timeout=5)

    assert fresh.superseded is False
    assert results["stale"].superseded is True
    assert results["stale"].report is None
