"""Tests for the zipped CSV drop feed parser."""

import io
import zipfile
from datetime import date

import pytest

from dropwatch_common import FeedArchiveError, ParseError
from dropwatch_ingestion.parsers import DropFeedParser, resolve_column
from dropwatch_ingestion.parsers.dropcatch_parser import (
    DOMAIN_COLUMN_ALIASES,
    DOMAIN_COLUMN_PATTERN,
    DROP_DATE_COLUMN_ALIASES,
    DROP_DATE_COLUMN_PATTERN,
)


def make_zip(csv_text, name="dropping.csv"):
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as archive:
        archive.writestr(name, csv_text)
    return buffer.getvalue()


# ==================== Column resolution ====================


def test_resolve_column_prefers_exact_alias():
    headers = ["Name", "DomainName", "DropDate"]
    assert resolve_column(headers, DOMAIN_COLUMN_ALIASES, DOMAIN_COLUMN_PATTERN) == "DomainName"


def test_resolve_column_falls_back_to_pattern():
    headers = ["Listing Domain", "Expected Drop Date (UTC)"]
    assert (
        resolve_column(headers, DOMAIN_COLUMN_ALIASES, DOMAIN_COLUMN_PATTERN) == "Listing Domain"
    )
    assert (
        resolve_column(headers, DROP_DATE_COLUMN_ALIASES, DROP_DATE_COLUMN_PATTERN)
        == "Expected Drop Date (UTC)"
    )


def test_resolve_column_missing():
    assert resolve_column(["Price"], DROP_DATE_COLUMN_ALIASES, DROP_DATE_COLUMN_PATTERN) is None


# ==================== Parsing ====================


def test_parse_standard_columns():
    """Test parsing the canonical DomainName/DropDate/Registrar layout."""
    parser = DropFeedParser()
    content = make_zip(
        "DomainName,DropDate,Registrar\n"
        "GetCloudHub.com,10/22/2025,GoDaddy.com LLC\n"
        "aitools.io,2025-10-25,\n"
    )

    candidates = parser.parse(content)

    assert len(candidates) == 2

    first = candidates[0]
    assert first.domain_name == "getcloudhub.com"
    assert first.drop_date == date(2025, 10, 22)
    assert first.expiry_date == date(2025, 8, 8)
    assert first.registrar == "GoDaddy.com LLC"
    assert first.source == "dropcatch"
    assert first.is_synthetic is False

    assert candidates[1].registrar == "Unknown"


@pytest.mark.parametrize("domain_header", ["Domain", "DomainName", "domain"])
def test_parse_alias_columns(domain_header):
    """Test that every domain header alias is bound."""
    parser = DropFeedParser()
    content = make_zip(f"{domain_header},drop_date\nexample-shop.com,2025-11-01\n")

    candidates = parser.parse(content)

    assert [c.domain_name for c in candidates] == ["example-shop.com"]
    assert candidates[0].drop_date == date(2025, 11, 1)


def test_parse_strips_bom_and_header_whitespace():
    parser = DropFeedParser()
    content = make_zip("\ufeffDomainName , DropDate \ndatahub.io,10/30/2025\n")

    candidates = parser.parse(content)

    assert candidates[0].domain_name == "datahub.io"


def test_parse_skips_bad_rows():
    """Test that bad dates, empty names and invalid names are skipped and counted."""
    parser = DropFeedParser()
    content = make_zip(
        "DomainName,DropDate\n"
        "gooddomain.com,2025-10-22\n"
        "baddate.com,not-a-date\n"
        ",2025-10-22\n"
        "localhost,2025-10-22\n"
        "gooddomain.com,2025-10-23\n"
    )

    candidates = parser.parse(content)

    assert [c.domain_name for c in candidates] == ["gooddomain.com"]
    stats = parser.get_statistics()
    assert stats["rows"] == 5
    assert stats["parsed"] == 1
    assert stats["bad_date"] == 1
    assert stats["empty_name"] == 1
    assert stats["invalid_name"] == 1


def test_parse_skips_unrepresentable_drop_date():
    """Test that a sentinel date like 0001-01-01 is a bad row, not a failed batch."""
    parser = DropFeedParser()
    content = make_zip(
        "DomainName,DropDate\n"
        "gooddomain.com,2025-10-22\n"
        "sentinel.com,0001-01-01\n"
    )

    candidates = parser.parse(content)

    assert [c.domain_name for c in candidates] == ["gooddomain.com"]
    assert parser.get_statistics()["bad_date"] == 1
    assert parser.get_statistics()["parsed"] == 1


def test_parse_missing_drop_date_column():
    parser = DropFeedParser()
    content = make_zip("DomainName,Price\nexample.com,10\n")

    with pytest.raises(ParseError) as exc_info:
        parser.parse(content)

    assert "missing" in str(exc_info.value)


def test_parse_empty_zip():
    """Test that an archive with no entries is a fatal archive error."""
    parser = DropFeedParser()
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w"):
        pass

    with pytest.raises(FeedArchiveError) as exc_info:
        parser.parse(buffer.getvalue())

    assert "Zip file is empty" in str(exc_info.value)


def test_parse_corrupt_archive():
    parser = DropFeedParser()

    with pytest.raises(FeedArchiveError):
        parser.parse(b"this is not a zip file")


def test_parse_empty_content():
    parser = DropFeedParser()

    with pytest.raises(FeedArchiveError):
        parser.parse(b"")


def test_reset_statistics():
    parser = DropFeedParser()
    parser.parse(make_zip("DomainName,DropDate\nexample.com,2025-10-22\n"))

    parser.reset_statistics()

    assert all(value == 0 for value in parser.get_statistics().values())


def test_statistics_cover_latest_file_only():
    parser = DropFeedParser()
    parser.parse(make_zip("DomainName,DropDate\nexample.com,2025-10-22\nbroken.com,nope\n"))

    parser.parse(make_zip("DomainName,DropDate\nother.com,2025-10-22\n"))

    stats = parser.get_statistics()
    assert stats["rows"] == 1
    assert stats["parsed"] == 1
    assert stats["bad_date"] == 0
