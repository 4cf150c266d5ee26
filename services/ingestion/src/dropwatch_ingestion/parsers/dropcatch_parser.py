"""Zipped CSV drop list parser."""

import csv
import io
import re
import zipfile
from typing import Dict, List, Optional, Sequence

import structlog

from dropwatch_common import (
    FeedArchiveError,
    ParseError,
    constants,
    parse_date,
    to_utc_date,
)
from dropwatch_schemas import CandidateDomain, clean_domain
from dropwatch_ingestion.parsers.base_parser import BaseParser

logger = structlog.get_logger()

DOMAIN_COLUMN_ALIASES = ("DomainName", "Domain", "domain", "name")
DROP_DATE_COLUMN_ALIASES = ("DropDate", "drop_date", "DropDateUtc", "dropDate")
REGISTRAR_COLUMN_ALIASES = ("Registrar", "registrar", "RegistrarName")

DOMAIN_COLUMN_PATTERN = re.compile(r"domain|name", re.IGNORECASE)
DROP_DATE_COLUMN_PATTERN = re.compile(r"drop.*date", re.IGNORECASE)

# Individual bad rows are logged up to this many, then only counted
MAX_LOGGED_BAD_ROWS = 20


def resolve_column(
    headers: Sequence[str], aliases: Sequence[str], pattern: Optional[re.Pattern] = None
) -> Optional[str]:
    """
    Pick the header that holds a logical field.

    Exact aliases win in the order given; otherwise the first header
    matching pattern is used.
    """
    for alias in aliases:
        if alias in headers:
            return alias
    if pattern is not None:
        for header in headers:
            if pattern.search(header):
                return header
    return None


class DropFeedParser(BaseParser):
    """Parser for the auction house drop list: a zip whose first entry is a CSV.

    Example CSV:
        DomainName,DropDate,Registrar
        getcloudhub.com,10/22/2025,GoDaddy.com LLC
    """

    def __init__(self, source_name: str = "dropcatch"):
        """
        Initialize drop feed parser.

        Args:
            source_name: Name of the feed
        """
        super().__init__(source_name, "zip_csv")
        self.stats = {
            "rows": 0,
            "parsed": 0,
            "bad_date": 0,
            "empty_name": 0,
            "invalid_name": 0,
        }

    def extract_csv(self, content: bytes) -> str:
        """
        Return the first archive entry decoded as UTF-8.

        Raises:
            FeedArchiveError: If the archive is corrupt or empty
        """
        try:
            with zipfile.ZipFile(io.BytesIO(content)) as archive:
                entries = [info for info in archive.infolist() if not info.is_dir()]
                if not entries:
                    raise FeedArchiveError(
                        "Zip file is empty", context={"source_name": self.source_name}
                    )
                raw = archive.read(entries[0])
        except zipfile.BadZipFile as e:
            raise FeedArchiveError(
                "Feed archive is not a valid zip file",
                context={"source_name": self.source_name, "content_length": len(content)},
                original_error=e,
            ) from e

        logger.info(
            "Feed archive extracted",
            source=self.source_name,
            entry=entries[0].filename,
            size_bytes=len(raw),
        )
        # utf-8-sig drops a leading BOM if the exporter wrote one
        return raw.decode("utf-8-sig", errors="replace")

    def _skip_bad_date(self, line_number: int, domain: str, value, logged: int) -> int:
        """Count a row with an unusable drop date; returns the updated logged count."""
        self.stats["bad_date"] += 1
        if logged < MAX_LOGGED_BAD_ROWS:
            logger.warning(
                "Skipping row with invalid drop date",
                source=self.source_name,
                line_number=line_number,
                domain=domain,
                value=value,
            )
            logged += 1
        return logged

    def parse_rows(self, text: str) -> List[CandidateDomain]:
        """
        Parse CSV text into candidates.

        Raises:
            ParseError: If the header has no domain or drop-date column
        """
        reader = csv.DictReader(io.StringIO(text))
        headers = [header.strip() for header in (reader.fieldnames or [])]
        reader.fieldnames = headers

        domain_column = resolve_column(headers, DOMAIN_COLUMN_ALIASES, DOMAIN_COLUMN_PATTERN)
        drop_column = resolve_column(headers, DROP_DATE_COLUMN_ALIASES, DROP_DATE_COLUMN_PATTERN)
        registrar_column = resolve_column(headers, REGISTRAR_COLUMN_ALIASES)

        if domain_column is None or drop_column is None:
            raise ParseError(
                "Feed CSV is missing a domain or drop date column",
                context={"source_name": self.source_name, "columns": headers},
            )

        logger.info(
            "Feed columns resolved",
            source=self.source_name,
            domain_column=domain_column,
            drop_date_column=drop_column,
            registrar_column=registrar_column,
        )

        candidates: List[CandidateDomain] = []
        seen = set()
        bad_rows_logged = 0

        for line_number, row in enumerate(reader, start=2):
            self.stats["rows"] += 1

            raw_name = (row.get(domain_column) or "").strip()
            if not raw_name:
                self.stats["empty_name"] += 1
                continue

            drop = parse_date(row.get(drop_column))
            if drop is None:
                bad_rows_logged = self._skip_bad_date(
                    line_number, raw_name, row.get(drop_column), bad_rows_logged
                )
                continue

            domain = clean_domain(raw_name)
            if domain is None:
                self.stats["invalid_name"] += 1
                logger.debug(
                    "Skipping row with invalid domain",
                    source=self.source_name,
                    line_number=line_number,
                    domain=raw_name,
                )
                continue

            if domain in seen:
                continue

            registrar = (row.get(registrar_column) or "").strip() if registrar_column else ""
            try:
                candidate = CandidateDomain.from_drop_date(
                    domain,
                    to_utc_date(drop),
                    registrar=registrar or constants.UNKNOWN_REGISTRAR,
                    source=self.source_name,
                )
            except (OverflowError, ValueError):
                # Sentinel dates such as 0001-01-01 have no representable expiry
                bad_rows_logged = self._skip_bad_date(
                    line_number, raw_name, row.get(drop_column), bad_rows_logged
                )
                continue

            seen.add(domain)
            candidates.append(candidate)
            self.stats["parsed"] += 1

        return candidates

    def parse(self, content: bytes, metadata: Optional[dict] = None) -> List[CandidateDomain]:
        """
        Parse a zipped drop list.

        Args:
            content: Zip archive bytes
            metadata: Optional metadata from fetcher

        Returns:
            List of CandidateDomain objects, one per valid unique domain

        Raises:
            FeedArchiveError: If the archive is empty or corrupt
            ParseError: If the CSV header cannot be bound
        """
        if not content:
            raise FeedArchiveError(
                f"Empty content from source {self.source_name}",
                context={"source_name": self.source_name},
            )

        self.reset_statistics()
        logger.info(
            "Parsing drop feed",
            source=self.source_name,
            content_length=len(content),
        )

        candidates = self.parse_rows(self.extract_csv(content))

        logger.info(
            "Drop feed parsing complete",
            source=self.source_name,
            **self.get_statistics(),
        )

        return candidates

    def get_statistics(self) -> Dict[str, int]:
        return self.stats.copy()

    def reset_statistics(self):
        for key in self.stats:
            self.stats[key] = 0
