"""Base parser abstract class."""

from abc import ABC, abstractmethod
from typing import List, Optional
from dropwatch_schemas import CandidateDomain


class BaseParser(ABC):
    """Abstract base class for drop feed parsers."""

    def __init__(self, source_name: str, source_format: str):
        """
        Initialize parser.

        Args:
            source_name: Name of the feed
            source_format: Format of the raw file (e.g. zip_csv)
        """
        self.source_name = source_name
        self.source_format = source_format

    @abstractmethod
    def parse(self, content: bytes, metadata: Optional[dict] = None) -> List[CandidateDomain]:
        """
        Parse raw feed content into candidates.

        Args:
            content: Raw content to parse
            metadata: Optional metadata from fetcher

        Returns:
            List of CandidateDomain objects

        Raises:
            ParseError: If parsing fails
        """
        pass
