"""Drop feed ingestion entry point."""

import argparse
import asyncio
import sys
import uuid
from typing import List, Optional

import structlog

from dropwatch_common import bind_run_context, constants, setup_logging
from dropwatch_monitoring import PrometheusMetrics
from dropwatch_store import DomainStore
from dropwatch_reconciliation import LifecycleSweep, ReconciliationSettings
from dropwatch_ingestion.availability import build_validator
from dropwatch_ingestion.config import IngestionSettings, load_feed_config
from dropwatch_ingestion.fetchers import DropCatchFetcher, FeedAcquisition, SyntheticFeed
from dropwatch_ingestion.parsers import DropFeedParser
from dropwatch_ingestion.pipeline import DropIngestionPipeline

logger = structlog.get_logger()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Drop Domain Ingestion Service")
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to feed configuration file (default: packaged feed.yaml)",
    )
    parser.add_argument(
        "--database-url",
        type=str,
        default=None,
        help="SQLAlchemy database URL (default: from DATABASE_URL env var)",
    )
    parser.add_argument(
        "--max-candidates",
        type=int,
        default=None,
        help="Maximum candidates validated per run (default: 300)",
    )
    parser.add_argument(
        "--min-score",
        type=int,
        default=None,
        help="Minimum quality score to validate (default: 30)",
    )
    parser.add_argument(
        "--no-validation",
        action="store_true",
        help="Store every candidate above the quality gate without availability checks",
    )
    parser.add_argument(
        "--signal-order",
        type=str,
        default=None,
        choices=["whois_first", "scrape_first"],
        help="Signal tried after DNS (default: whois_first)",
    )
    parser.add_argument(
        "--allow-synthetic",
        action="store_true",
        help="Fall back to the built-in dataset when the feed is unavailable",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=constants.DEFAULT_LOG_LEVEL,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)",
    )
    parser.add_argument(
        "--json-logs",
        action="store_true",
        help="Output logs in JSON format",
    )
    return parser


def build_pipeline(
    settings: IngestionSettings,
    config_path: Optional[str] = None,
    store: Optional[DomainStore] = None,
) -> DropIngestionPipeline:
    """Wire settings, feed config and store into a ready pipeline."""
    feed_config = load_feed_config(config_path)

    if store is None:
        store = DomainStore(settings.database_url)
    store.init_schema()

    acquisition = FeedAcquisition(
        fetcher=DropCatchFetcher(
            feed_config,
            timeout=settings.http_timeout,
            retries=settings.http_retries,
            backoff=settings.http_backoff,
        ),
        parser=DropFeedParser(source_name=feed_config.name),
        synthetic_feed=SyntheticFeed() if settings.allow_synthetic_feed else None,
    )

    validator = build_validator(
        settings, registrar_search_url=feed_config.registrar_search_url
    )

    metrics = None
    if settings.pushgateway_url:
        metrics = PrometheusMetrics(pushgateway_url=settings.pushgateway_url)

    sweep = None
    if settings.sweep_after_ingest:
        sweep = LifecycleSweep(
            store,
            ReconciliationSettings.from_env(database_url=settings.database_url),
            metrics=metrics,
        )

    return DropIngestionPipeline(
        acquisition=acquisition,
        validator=validator,
        store=store,
        settings=settings,
        sweep=sweep,
        metrics=metrics,
    )


def main(argv: Optional[List[str]] = None) -> None:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    global logger
    logger = setup_logging(
        level=args.log_level,
        service_name="ingestion",
        json_format=args.json_logs,
    )
    bind_run_context(run_id=uuid.uuid4().hex[:12], job="ingestion")

    try:
        settings = IngestionSettings.from_env(
            database_url=args.database_url,
            max_candidates=args.max_candidates,
            min_score=args.min_score,
            enable_validation=False if args.no_validation else None,
            signal_order=args.signal_order,
            allow_synthetic_feed=True if args.allow_synthetic else None,
        )

        logger.info(
            "Starting ingestion service",
            config_path=args.config,
            database=settings.database_url.split("://", 1)[0],
            log_level=args.log_level,
        )

        pipeline = build_pipeline(settings, config_path=args.config)
        try:
            summary = asyncio.run(pipeline.run())
        finally:
            pipeline.store.close()

        logger.info(
            "Service completed successfully",
            accepted=summary.accepted,
            synthetic_feed=summary.synthetic_feed,
        )
        sys.exit(0)

    except KeyboardInterrupt:
        logger.info("Service interrupted by user")
        sys.exit(0)

    except Exception as e:
        logger.error("Service failed", error=str(e), error_type=type(e).__name__)
        sys.exit(1)


if __name__ == "__main__":
    main()
