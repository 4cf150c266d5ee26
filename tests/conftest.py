"""Pytest configuration and fixtures for integration tests."""

from fixtures.mock_servers import mock_doh_server, mock_feed_server
from fixtures.sample_data import (
    feed_credentials,
    resolving_domains,
    sample_feed_csv,
    sample_feed_zip,
    sample_whois_records,
)

__all__ = [
    # Mock server fixtures
    "mock_feed_server",
    "mock_doh_server",
    # Sample data fixtures
    "sample_feed_csv",
    "sample_feed_zip",
    "resolving_domains",
    "sample_whois_records",
    "feed_credentials",
]
