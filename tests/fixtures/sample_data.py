"""Sample data fixtures for testing."""

import io
import zipfile
from datetime import datetime, UTC

import pytest

# Fixed clock for end-to-end runs: getcloudhub.com drops three days later
E2E_NOW = datetime(2025, 10, 19, 12, 0, tzinfo=UTC)

CLIENT_ID = "test-client"
CLIENT_SECRET = "test-secret"
ACCESS_TOKEN = "test-token"


def build_zip(csv_text, name="dropping-domains.csv"):
    """Pack csv_text as the single entry of an in-memory zip archive."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as archive:
        archive.writestr(name, csv_text)
    return buffer.getvalue()


@pytest.fixture
def sample_feed_csv():
    """Drop list as the auction house exports it, including one bad row."""
    return (
        "DomainName,DropDate,Registrar\n"
        "GetCloudHub.com,10/22/2025,GoDaddy.com LLC\n"
        "ai.com,10/24/2025,MarkMonitor Inc.\n"
        "xqzzy123.com,10/23/2025,NameCheap Inc.\n"
        "broken-row.com,not-a-date,NameCheap Inc.\n"
    )


@pytest.fixture
def sample_feed_zip(sample_feed_csv):
    return build_zip(sample_feed_csv)


@pytest.fixture
def resolving_domains():
    """Domains the mock DoH resolver answers with an A record."""
    return {"ai.com"}


@pytest.fixture
def sample_whois_records():
    """WHOIS payloads keyed by domain, shaped like python-whois output."""
    return {
        "getcloudhub.com": {
            "domain_name": "GETCLOUDHUB.COM",
            "expiration_date": datetime(2025, 8, 8, 4, 0),
            "status": "pendingDelete https://icann.org/epp#pendingDelete",
        },
    }


@pytest.fixture
def feed_credentials(monkeypatch):
    monkeypatch.setenv("DROPCATCH_CLIENT_ID", CLIENT_ID)
    monkeypatch.setenv("DROPCATCH_CLIENT_SECRET", CLIENT_SECRET)
