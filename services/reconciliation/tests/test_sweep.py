"""Tests for the lifecycle sweep."""

from datetime import UTC, datetime, timedelta

import pytest
from unittest.mock import MagicMock, patch

from dropwatch_common import ConfigurationError, DomainStatus, StoreError
from dropwatch_schemas import CandidateDomain, DomainRecord, QualityScore
from dropwatch_store import DomainStore
from dropwatch_reconciliation import LifecycleSweep, ReconciliationSettings
from dropwatch_reconciliation.main import main

NOW = datetime(2025, 10, 19, 12, 0, tzinfo=UTC)


@pytest.fixture
def store(tmp_path):
    domain_store = DomainStore(f"sqlite:///{tmp_path / 'sweep.db'}")
    domain_store.init_schema()
    yield domain_store
    domain_store.close()


def add_record(store, domain, days_out, now=NOW):
    candidate = CandidateDomain.from_drop_date(domain, now.date() + timedelta(days=days_out))
    store.upsert(
        DomainRecord.from_candidate(
            candidate, QualityScore(total=60, reasoning="test"), "general", now
        )
    )


def make_sweep(store, now, **settings):
    return LifecycleSweep(store, ReconciliationSettings(**settings), clock=lambda: now)


def test_nothing_to_update_when_dates_unchanged(store):
    add_record(store, "soon.com", 3)
    add_record(store, "later.com", 20)

    report = make_sweep(store, NOW, prune_out_of_window=False).run()

    assert report.examined == 2
    assert report.updated == 0
    assert report.transitions == {}


def test_statuses_age_with_the_clock(store):
    add_record(store, "soon.com", 3)  # pending_delete today
    add_record(store, "later.com", 20)  # redemption today
    add_record(store, "window.com", 8)  # pending_delete today

    report = make_sweep(store, NOW + timedelta(days=5), prune_out_of_window=False).run()

    assert report.examined == 3
    assert report.updated == 3
    assert report.transitions == {"dropped": 1}

    soon = store.get("soon.com")
    assert soon.status is DomainStatus.DROPPED
    assert soon.days_until_drop == -2
    assert store.get("later.com").status is DomainStatus.REDEMPTION
    assert store.get("later.com").days_until_drop == 15
    assert store.get("window.com").days_until_drop == 3
    assert report.status_counts["dropped"] == 1
    assert report.status_counts["redemption"] == 1
    assert report.status_counts["pending_delete"] == 1
    assert report.status_counts["active"] == 0


def test_dropped_records_are_skipped_on_later_sweeps(store):
    add_record(store, "soon.com", 3)
    later = NOW + timedelta(days=5)
    make_sweep(store, later, prune_out_of_window=False).run()

    report = make_sweep(store, later + timedelta(days=1), prune_out_of_window=False).run()

    assert report.examined == 0
    assert store.get("soon.com").days_until_drop == -2


def test_old_dropped_records_are_deleted(store):
    add_record(store, "soon.com", 3)

    report = make_sweep(store, NOW + timedelta(days=40), prune_out_of_window=False).run()

    assert report.transitions == {"dropped": 1}
    assert report.deleted_dropped == 1
    assert store.get("soon.com") is None


def test_recently_dropped_records_are_kept(store):
    add_record(store, "soon.com", 3)

    report = make_sweep(store, NOW + timedelta(days=20), prune_out_of_window=False).run()

    assert report.deleted_dropped == 0
    assert store.get("soon.com").status is DomainStatus.DROPPED


def test_pruning_keeps_only_the_drop_window(store):
    add_record(store, "window.com", 8)  # pending, 3 days out after the sweep
    add_record(store, "edge.com", 15)  # pending, 10 days out after the sweep
    add_record(store, "early.com", 40)  # still redemption after the sweep
    add_record(store, "far.com", 19)  # pending, 14 days out after the sweep

    report = make_sweep(store, NOW + timedelta(days=5)).run()

    assert report.pruned_early == 1
    assert report.pruned_out_of_window == 1
    assert store.get("window.com") is not None
    assert store.get("edge.com") is not None
    assert store.get("early.com") is None
    assert store.get("far.com") is None


def test_update_failure_is_counted(store):
    add_record(store, "soon.com", 3)
    failing = MagicMock(wraps=store)
    failing.update_lifecycle.side_effect = StoreError("locked")

    report = make_sweep(failing, NOW + timedelta(days=5), prune_out_of_window=False).run()

    assert report.update_failures == 1
    assert report.updated == 0


def test_status_buckets_are_pushed(store):
    add_record(store, "window.com", 3)
    metrics = MagicMock()
    sweep = LifecycleSweep(
        store, ReconciliationSettings(), metrics=metrics, clock=lambda: NOW
    )

    report = sweep.run()

    metrics.push_status_buckets.assert_called_once()
    kwargs = metrics.push_status_buckets.call_args.kwargs
    assert kwargs["status_counts"] == report.status_counts
    assert kwargs["sweep_counts"]["updated"] == 0
    assert kwargs["execution_ts"] == NOW


# ==================== Settings ====================


def test_settings_from_environment(monkeypatch):
    monkeypatch.setenv("PRUNE_OUT_OF_WINDOW", "false")
    monkeypatch.setenv("DROP_WINDOW_MAX_DAYS", "14")

    settings = ReconciliationSettings.from_env()

    assert settings.prune_out_of_window is False
    assert settings.window_min_days == 0
    assert settings.window_max_days == 14
    assert settings.dropped_retention_days == 30


def test_settings_reject_inverted_window(monkeypatch):
    monkeypatch.setenv("DROP_WINDOW_MIN_DAYS", "12")
    monkeypatch.setenv("DROP_WINDOW_MAX_DAYS", "5")

    with pytest.raises(ConfigurationError):
        ReconciliationSettings.from_env()


# ==================== CLI ====================


def test_cli_runs_sweep_and_exits_zero(tmp_path):
    database_url = f"sqlite:///{tmp_path / 'cli.db'}"

    with patch("dropwatch_reconciliation.main.setup_logging", return_value=MagicMock()):
        with pytest.raises(SystemExit) as exc_info:
            main(["--database-url", database_url, "--no-prune"])

    assert exc_info.value.code == 0


def test_cli_exits_one_on_bad_settings(monkeypatch):
    monkeypatch.setenv("DROP_WINDOW_MIN_DAYS", "not-a-number")

    with patch("dropwatch_reconciliation.main.setup_logging", return_value=MagicMock()):
        with pytest.raises(SystemExit) as exc_info:
            main([])

    assert exc_info.value.code == 1
