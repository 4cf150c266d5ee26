"""
End-to-end test: mock feed and resolver -> pipeline -> SQL store.

Runs the real fetcher, parser, scorer, DNS checker and store against
local aiohttp servers. Only the blocking WHOIS call is replaced.
"""

from datetime import date, timedelta

import pytest

from dropwatch_common import AuthenticationError, DomainStatus
from dropwatch_schemas import DomainQuery
from dropwatch_store import DomainStore
from dropwatch_ingestion.availability import build_validator
from dropwatch_ingestion.config import IngestionSettings
from dropwatch_ingestion.main import build_pipeline

from fixtures.sample_data import E2E_NOW


def write_feed_config(tmp_path, feed_server):
    config_file = tmp_path / "feed.yaml"
    config_file.write_text(
        "feed:\n"
        "  name: dropcatch\n"
        f"  auth_url: {feed_server.make_url('/authorize')}\n"
        f"  download_url: {feed_server.make_url('/download')}\n"
        "  file_type: Csv\n"
    )
    return str(config_file)


@pytest.fixture
def store(tmp_path):
    domain_store = DomainStore(f"sqlite:///{tmp_path / 'e2e.db'}")
    yield domain_store
    domain_store.close()


def make_settings(tmp_path, doh_server, **overrides):
    values = {
        "database_url": f"sqlite:///{tmp_path / 'e2e.db'}",
        "request_delay_seconds": 0,
        "dns_resolver_url": str(doh_server.make_url("/resolve")),
        "http_retries": 1,
        "whois_retry_attempts": 1,
        "whois_retry_delay_seconds": 0,
        "sweep_after_ingest": False,
    }
    values.update(overrides)
    return IngestionSettings(**values)


def make_pipeline(settings, config_path, store, whois_records):
    """Build the production pipeline with a fixed clock and an in-memory WHOIS."""
    pipeline = build_pipeline(settings, config_path=config_path, store=store)
    pipeline.validator = build_validator(
        settings, whois_lookup=lambda domain: whois_records.get(domain, {})
    )
    pipeline.clock = lambda: E2E_NOW
    if pipeline.sweep is not None:
        pipeline.sweep.clock = lambda: E2E_NOW
    return pipeline


@pytest.mark.asyncio
async def test_feed_to_store(
    tmp_path, store, mock_feed_server, mock_doh_server, feed_credentials, sample_whois_records
):
    """The getcloudhub.com drop lands in the store with its lifecycle fields."""
    settings = make_settings(tmp_path, mock_doh_server)
    config_path = write_feed_config(tmp_path, mock_feed_server)
    pipeline = make_pipeline(settings, config_path, store, sample_whois_records)

    summary = await pipeline.run()

    assert summary.fetched == 3
    assert summary.parse_stats["bad_date"] == 1  # broken-row.com
    assert summary.rejected_low_score == 1  # xqzzy123.com
    assert summary.rejected_validation == 1  # ai.com still resolves
    assert summary.accepted == 1
    assert summary.synthetic_feed is False
    assert mock_feed_server.requests == {"authorize": 1, "download": 1}

    record = store.get("getcloudhub.com")
    assert record.status is DomainStatus.PENDING_DELETE
    assert record.drop_date == date(2025, 10, 22)
    assert record.expiry_date == date(2025, 8, 8)
    assert record.days_until_drop == 3
    assert record.popularity_score == 85
    assert record.category == "tech"
    assert record.registrar == "GoDaddy.com LLC"
    assert store.get("ai.com") is None
    assert store.get("xqzzy123.com") is None

    stats = store.stats(E2E_NOW)
    assert stats.total_pending == 1
    assert stats.hot_domains == 1
    assert stats.by_tld == {"com": 1}


@pytest.mark.asyncio
async def test_second_run_is_idempotent(
    tmp_path, store, mock_feed_server, mock_doh_server, feed_credentials, sample_whois_records
):
    settings = make_settings(tmp_path, mock_doh_server)
    config_path = write_feed_config(tmp_path, mock_feed_server)

    await make_pipeline(settings, config_path, store, sample_whois_records).run()
    first = store.get("getcloudhub.com")
    summary = await make_pipeline(settings, config_path, store, sample_whois_records).run()
    second = store.get("getcloudhub.com")

    assert summary.accepted == 1
    assert store.count() == 1
    assert second.created_at == first.created_at
    assert second.days_until_drop == first.days_until_drop


@pytest.mark.parametrize("accept_missing_expiry,stored", [(True, True), (False, False)])
@pytest.mark.asyncio
async def test_missing_whois_data_policy(
    tmp_path,
    store,
    mock_feed_server,
    mock_doh_server,
    feed_credentials,
    accept_missing_expiry,
    stored,
):
    """With no WHOIS data, clear DNS alone decides only when the policy allows it."""
    settings = make_settings(
        tmp_path, mock_doh_server, accept_missing_expiry=accept_missing_expiry
    )
    config_path = write_feed_config(tmp_path, mock_feed_server)

    summary = await make_pipeline(settings, config_path, store, {}).run()

    assert (store.get("getcloudhub.com") is not None) is stored
    assert summary.accepted == (1 if stored else 0)


@pytest.mark.asyncio
async def test_sweep_after_ingest_updates_store(
    tmp_path, store, mock_feed_server, mock_doh_server, feed_credentials, sample_whois_records
):
    settings = make_settings(tmp_path, mock_doh_server, sweep_after_ingest=True)
    config_path = write_feed_config(tmp_path, mock_feed_server)
    pipeline = make_pipeline(settings, config_path, store, sample_whois_records)

    summary = await pipeline.run()

    assert summary.swept is True

    # A week later the domain has dropped
    pipeline.sweep.clock = lambda: E2E_NOW + timedelta(days=7)
    report = pipeline.sweep.run()

    assert report.transitions == {"dropped": 1}
    assert store.get("getcloudhub.com").status is DomainStatus.DROPPED
    page = store.query(DomainQuery(status=DomainStatus.DROPPED))
    assert [domain.domain_name for domain in page.domains] == ["getcloudhub.com"]


@pytest.mark.asyncio
async def test_rejected_credentials_fail_the_run(
    tmp_path, store, mock_feed_server, mock_doh_server, monkeypatch
):
    monkeypatch.setenv("DROPCATCH_CLIENT_ID", "wrong")
    monkeypatch.setenv("DROPCATCH_CLIENT_SECRET", "wrong")
    settings = make_settings(tmp_path, mock_doh_server)
    config_path = write_feed_config(tmp_path, mock_feed_server)
    pipeline = make_pipeline(settings, config_path, store, {})

    with pytest.raises(AuthenticationError):
        await pipeline.run()

    assert mock_feed_server.requests["download"] == 0
    assert store.count() == 0


@pytest.mark.asyncio
async def test_synthetic_fallback_marks_every_record(
    tmp_path, store, mock_feed_server, mock_doh_server, monkeypatch
):
    monkeypatch.delenv("DROPCATCH_CLIENT_ID", raising=False)
    monkeypatch.delenv("DROPCATCH_CLIENT_SECRET", raising=False)
    settings = make_settings(tmp_path, mock_doh_server, allow_synthetic_feed=True)
    config_path = write_feed_config(tmp_path, mock_feed_server)
    pipeline = make_pipeline(settings, config_path, store, {})

    summary = await pipeline.run()

    assert summary.synthetic_feed is True
    assert summary.fetched == 50
    assert mock_feed_server.requests["authorize"] == 0
    page = store.query(DomainQuery(limit=100))
    assert page.domains
    assert all(domain.metadata["synthetic"] is True for domain in page.domains)
