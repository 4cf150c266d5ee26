"""Ingestion configuration."""

from dropwatch_ingestion.config.settings import (
    DEFAULT_FEED_CONFIG,
    FeedConfig,
    IngestionSettings,
    load_feed_config,
)

__all__ = ["DEFAULT_FEED_CONFIG", "FeedConfig", "IngestionSettings", "load_feed_config"]
