"""Base fetcher abstract class."""

from abc import ABC, abstractmethod
from typing import Dict, Any


class BaseFetcher(ABC):
    """Abstract base class for drop feed fetchers."""

    def __init__(self, source_name: str, url: str):
        """
        Initialize fetcher.

        Args:
            source_name: Name of the feed
            url: URL the feed file is downloaded from
        """
        self.source_name = source_name
        self.url = url

    @abstractmethod
    async def fetch(self) -> Dict[str, Any]:
        """
        Download the raw feed file.

        Returns:
            Dictionary containing:
                - content: The downloaded archive as bytes
                - metadata: Metadata about the fetch (status, size, etc.)

        Raises:
            FetchError: If fetching fails
        """
        pass
