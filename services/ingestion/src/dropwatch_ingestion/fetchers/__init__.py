"""Feed fetchers."""

from dropwatch_ingestion.fetchers.base_fetcher import BaseFetcher
from dropwatch_ingestion.fetchers.dropcatch_fetcher import DropCatchFetcher
from dropwatch_ingestion.fetchers.synthetic import SyntheticFeed, SYNTHETIC_SOURCE
from dropwatch_ingestion.fetchers.acquisition import AcquisitionResult, FeedAcquisition

__all__ = [
    "BaseFetcher",
    "DropCatchFetcher",
    "SyntheticFeed",
    "SYNTHETIC_SOURCE",
    "AcquisitionResult",
    "FeedAcquisition",
]
