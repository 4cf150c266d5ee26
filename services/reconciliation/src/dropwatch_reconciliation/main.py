"""Store reconciliation entry point."""

import argparse
import sys
import uuid
from typing import List, Optional

import structlog

from dropwatch_common import bind_run_context, constants, setup_logging
from dropwatch_monitoring import PrometheusMetrics
from dropwatch_store import DomainStore
from dropwatch_reconciliation.settings import ReconciliationSettings
from dropwatch_reconciliation.sweep import LifecycleSweep

logger = structlog.get_logger()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Drop Domain Store Reconciliation")
    parser.add_argument(
        "--database-url",
        type=str,
        default=None,
        help="SQLAlchemy database URL (default: from DATABASE_URL env var)",
    )
    parser.add_argument(
        "--no-prune",
        action="store_true",
        help="Keep records outside the drop window",
    )
    parser.add_argument(
        "--window-min-days",
        type=int,
        default=None,
        help="Lower bound of the pending_delete window (default: 0)",
    )
    parser.add_argument(
        "--window-max-days",
        type=int,
        default=None,
        help="Upper bound of the pending_delete window (default: 10)",
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


def main(argv: Optional[List[str]] = None) -> None:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    global logger
    logger = setup_logging(
        level=args.log_level,
        service_name="reconciliation",
        json_format=args.json_logs,
    )
    bind_run_context(run_id=uuid.uuid4().hex[:12], job="reconciliation")

    try:
        settings = ReconciliationSettings.from_env(
            database_url=args.database_url,
            prune_out_of_window=False if args.no_prune else None,
            window_min_days=args.window_min_days,
            window_max_days=args.window_max_days,
        )

        store = DomainStore(settings.database_url)
        store.init_schema()

        metrics = None
        if settings.pushgateway_url:
            metrics = PrometheusMetrics(
                pushgateway_url=settings.pushgateway_url, subsystem="reconciliation"
            )

        try:
            report = LifecycleSweep(store, settings, metrics=metrics).run()
        finally:
            store.close()

        logger.info(
            "Service completed successfully",
            updated=report.updated,
            deleted=report.deleted_dropped + report.pruned_early + report.pruned_out_of_window,
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
