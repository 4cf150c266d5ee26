"""Feed acquisition: fetch, parse and optionally fall back to synthetic data."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional

import structlog

from dropwatch_common import FetchError, ParseError
from dropwatch_schemas import CandidateDomain
from dropwatch_ingestion.fetchers.base_fetcher import BaseFetcher
from dropwatch_ingestion.fetchers.synthetic import SyntheticFeed
from dropwatch_ingestion.parsers import BaseParser

logger = structlog.get_logger()


@dataclass
class AcquisitionResult:
    candidates: List[CandidateDomain]
    synthetic: bool = False
    parse_stats: Dict[str, int] = field(default_factory=dict)


class FeedAcquisition:
    """Turns the upstream feed into a list of normalized candidates."""

    def __init__(
        self,
        fetcher: BaseFetcher,
        parser: BaseParser,
        synthetic_feed: Optional[SyntheticFeed] = None,
    ):
        """
        Args:
            fetcher: Downloads the raw feed
            parser: Turns the raw feed into candidates
            synthetic_feed: Fallback dataset; None makes feed failures fatal
        """
        self.fetcher = fetcher
        self.parser = parser
        self.synthetic_feed = synthetic_feed

    async def acquire(self, now: datetime) -> AcquisitionResult:
        """
        Fetch and parse the feed.

        Raises:
            FetchError: Feed unreachable or credentials rejected (no fallback)
            ParseError: Archive empty/corrupt or CSV unusable (no fallback)
        """
        try:
            result = await self.fetcher.fetch()
            candidates = self.parser.parse(result["content"], result["metadata"])
        except (FetchError, ParseError) as e:
            if self.synthetic_feed is None:
                raise

            logger.warning(
                "Feed unavailable, falling back to synthetic dataset",
                source=self.fetcher.source_name,
                error=str(e),
                error_type=type(e).__name__,
            )
            return AcquisitionResult(
                candidates=self.synthetic_feed.candidates(now),
                synthetic=True,
            )

        stats = getattr(self.parser, "stats", {})
        logger.info(
            "Feed acquired",
            source=self.fetcher.source_name,
            candidates=len(candidates),
        )
        return AcquisitionResult(candidates=candidates, parse_stats=dict(stats))
