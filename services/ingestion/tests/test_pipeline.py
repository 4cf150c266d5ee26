"""Tests for the ingestion orchestrator."""

from datetime import UTC, date, datetime

import pytest
from unittest.mock import MagicMock

from dropwatch_common import DomainStatus, FetchError, StoreError
from dropwatch_schemas import CandidateDomain
from dropwatch_store import DomainStore
from dropwatch_ingestion.availability import (
    AvailabilityValidator,
    SignalChecker,
    SignalOutcome,
)
from dropwatch_ingestion.config import IngestionSettings
from dropwatch_ingestion.fetchers import AcquisitionResult
from dropwatch_ingestion.pipeline import DropIngestionPipeline

NOW = datetime(2025, 10, 19, 12, 0, tzinfo=UTC)
DROP = date(2025, 10, 22)


class FakeAcquisition:
    def __init__(self, candidates=None, synthetic=False, error=None, parse_stats=None):
        self.candidates = candidates or []
        self.synthetic = synthetic
        self.error = error
        self.parse_stats = parse_stats or {}

    async def acquire(self, now):
        if self.error:
            raise self.error
        return AcquisitionResult(
            candidates=list(self.candidates),
            synthetic=self.synthetic,
            parse_stats=dict(self.parse_stats),
        )


class FixedChecker(SignalChecker):
    def __init__(self, outcomes, whois_failed=False):
        self.name = "whois"
        self.outcomes = outcomes
        self.whois_failed = whois_failed

    async def check(self, domain, context):
        if self.whois_failed:
            context.whois_failed = True
        return self.result(self.outcomes.get(domain, SignalOutcome.POSITIVE), "scripted")


class RecordingSleep:
    def __init__(self):
        self.calls = []

    async def __call__(self, seconds):
        self.calls.append(seconds)


def candidates(*names, synthetic=False):
    return [
        CandidateDomain.from_drop_date(
            name,
            DROP,
            registrar="GoDaddy.com, LLC",
            source="synthetic" if synthetic else "dropcatch",
            is_synthetic=synthetic,
        )
        for name in names
    ]


@pytest.fixture
def store(tmp_path):
    domain_store = DomainStore(f"sqlite:///{tmp_path / 'pipeline.db'}")
    domain_store.init_schema()
    yield domain_store
    domain_store.close()


def make_pipeline(store, acquisition, checker=None, enabled=True, sleep=None, **settings):
    settings.setdefault("sweep_after_ingest", False)
    validator = AvailabilityValidator([checker or FixedChecker({})], enabled=enabled)
    return DropIngestionPipeline(
        acquisition=acquisition,
        validator=validator,
        store=store,
        settings=IngestionSettings(**settings),
        sleep=sleep or RecordingSleep(),
        clock=lambda: NOW,
    )


@pytest.mark.asyncio
async def test_confirmed_candidates_are_stored(store):
    pipeline = make_pipeline(store, FakeAcquisition(candidates("getcloudhub.com")))

    summary = await pipeline.run()

    assert summary.fetched == 1
    assert summary.accepted == 1
    assert summary.quality_tiers["premium"] == 1

    record = store.get("getcloudhub.com")
    assert record.status is DomainStatus.PENDING_DELETE
    assert record.days_until_drop == 3
    assert record.expiry_date == date(2025, 8, 8)
    assert record.popularity_score == 85
    assert record.category == "tech"
    assert record.slug == "getcloudhub-com"
    assert record.title == "getcloudhub.com - Premium Domain Dropping in 3 Days"
    assert record.metadata["nameQuality"] == 30


@pytest.mark.asyncio
async def test_quality_gate_skips_low_scores(store):
    checker = FixedChecker({})
    pipeline = make_pipeline(
        store,
        FakeAcquisition(candidates("getcloudhub.com", "xqzzy123.com", "a1b2c3d4e5f6g7.xyz")),
        checker=checker,
        min_score=30,
    )

    summary = await pipeline.run()

    assert summary.accepted == 1
    assert summary.rejected_low_score == 2
    assert store.get("xqzzy123.com") is None


@pytest.mark.asyncio
async def test_rejected_candidates_are_not_stored(store):
    checker = FixedChecker({"datahub.io": SignalOutcome.NEGATIVE})
    pipeline = make_pipeline(
        store, FakeAcquisition(candidates("getcloudhub.com", "datahub.io")), checker=checker
    )

    summary = await pipeline.run()

    assert summary.accepted == 1
    assert summary.rejected_validation == 1
    assert store.get("datahub.io") is None


@pytest.mark.asyncio
async def test_max_candidates_bounds_validation(store):
    pipeline = make_pipeline(
        store,
        FakeAcquisition(candidates("getcloudhub.com", "ai.com", "datahub.io")),
        max_candidates=2,
    )

    summary = await pipeline.run()

    assert summary.fetched == 3
    assert summary.scored == 2
    assert store.count() == 2
    assert store.get("ai.com") is not None
    assert store.get("getcloudhub.com") is not None


@pytest.mark.asyncio
async def test_run_is_idempotent(store):
    acquisition = FakeAcquisition(candidates("getcloudhub.com", "ai.com"))

    first = await make_pipeline(store, acquisition).run()
    created_at = store.get("ai.com").created_at
    second = await make_pipeline(store, acquisition).run()

    assert first.accepted == second.accepted == 2
    assert store.count() == 2
    assert store.get("ai.com").created_at == created_at


@pytest.mark.asyncio
async def test_delay_after_each_validated_candidate(store):
    sleep = RecordingSleep()
    pipeline = make_pipeline(
        store,
        FakeAcquisition(candidates("getcloudhub.com", "datahub.io", "xqzzy123.com")),
        sleep=sleep,
        request_delay_seconds=2.0,
    )

    await pipeline.run()

    # the low-score candidate never reaches validation
    assert sleep.calls == [2.0, 2.0]


@pytest.mark.asyncio
async def test_no_delay_when_validation_disabled(store):
    sleep = RecordingSleep()
    pipeline = make_pipeline(
        store,
        FakeAcquisition(candidates("getcloudhub.com", "datahub.io")),
        enabled=False,
        sleep=sleep,
    )

    summary = await pipeline.run()

    assert summary.accepted == 2
    assert sleep.calls == []


@pytest.mark.asyncio
async def test_cooldown_after_consecutive_whois_failures(store):
    sleep = RecordingSleep()
    pipeline = make_pipeline(
        store,
        FakeAcquisition(
            candidates("getcloudhub.com", "datahub.io", "cloudapp.dev", "shopnow.co", "ai.com")
        ),
        checker=FixedChecker({}, whois_failed=True),
        sleep=sleep,
        request_delay_seconds=2.0,
        whois_cooldown_after=2,
        whois_cooldown_seconds=12.0,
    )

    summary = await pipeline.run()

    assert summary.whois_failures == 5
    assert summary.cooldowns == 2
    assert sleep.calls.count(12.0) == 2
    assert sleep.calls.count(2.0) == 5


@pytest.mark.asyncio
async def test_cooldown_counter_resets_on_success(store):
    sleep = RecordingSleep()
    pipeline = make_pipeline(
        store,
        FakeAcquisition(candidates("getcloudhub.com", "datahub.io")),
        checker=FixedChecker({}, whois_failed=True),
        sleep=sleep,
        whois_cooldown_after=2,
    )
    pipeline.cooldown.record(False)

    await pipeline.run()
    assert pipeline.cooldown.cooldowns_triggered == 1

    pipeline.cooldown.record(False)
    assert pipeline.cooldown.consecutive_failures == 0


@pytest.mark.asyncio
async def test_upsert_failure_is_counted(store):
    failing_store = MagicMock(wraps=store)
    failing_store.upsert.side_effect = StoreError("disk full")
    pipeline = make_pipeline(
        failing_store, FakeAcquisition(candidates("getcloudhub.com", "datahub.io"))
    )

    summary = await pipeline.run()

    assert summary.upsert_failures == 2
    assert summary.accepted == 0


@pytest.mark.asyncio
async def test_validation_exception_is_counted_and_run_continues(store):
    class BrokenChecker(SignalChecker):
        name = "whois"

        async def check(self, domain, context):
            if domain == "datahub.io":
                raise RuntimeError("boom")
            return self.result(SignalOutcome.POSITIVE, "ok")

    pipeline = make_pipeline(
        store,
        FakeAcquisition(candidates("getcloudhub.com", "datahub.io")),
        checker=BrokenChecker(),
    )

    summary = await pipeline.run()

    assert summary.validation_errors == 1
    assert summary.accepted == 1


@pytest.mark.asyncio
async def test_synthetic_run_is_marked(store):
    pipeline = make_pipeline(
        store, FakeAcquisition(candidates("getcloudhub.com", synthetic=True), synthetic=True)
    )

    summary = await pipeline.run()

    assert summary.synthetic_feed is True
    assert store.get("getcloudhub.com").metadata["synthetic"] is True


@pytest.mark.asyncio
async def test_acquisition_failure_propagates(store):
    pipeline = make_pipeline(store, FakeAcquisition(error=FetchError("feed down")))

    with pytest.raises(FetchError):
        await pipeline.run()


@pytest.mark.asyncio
async def test_sweep_and_metrics_after_ingestion(store):
    sweep = MagicMock()
    metrics = MagicMock()
    pipeline = make_pipeline(
        store,
        FakeAcquisition(
            candidates("getcloudhub.com"), parse_stats={"rows": 3, "parsed": 1, "bad_date": 2}
        ),
        sweep_after_ingest=True,
    )
    pipeline.sweep = sweep
    pipeline.metrics = metrics

    summary = await pipeline.run()

    sweep.run.assert_called_once()
    assert summary.swept is True

    metrics.push_ingestion_summary.assert_called_once()
    kwargs = metrics.push_ingestion_summary.call_args.kwargs
    assert kwargs["outcomes"]["accepted"] == 1
    assert kwargs["execution_ts"] == NOW
    assert kwargs["synthetic_feed"] is False
    assert kwargs["parse_stats"] == {"rows": 3, "parsed": 1, "bad_date": 2}
    assert summary.parse_stats["bad_date"] == 2


@pytest.mark.asyncio
async def test_sweep_skipped_when_disabled(store):
    sweep = MagicMock()
    pipeline = make_pipeline(
        store, FakeAcquisition(candidates("getcloudhub.com")), sweep_after_ingest=False
    )
    pipeline.sweep = sweep

    summary = await pipeline.run()

    sweep.run.assert_not_called()
    assert summary.swept is False
