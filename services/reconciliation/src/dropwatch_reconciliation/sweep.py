"""Lifecycle sweep over the domain store."""

import time
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Callable, Dict, Optional

import structlog

from dropwatch_common import (
    DomainStatus,
    StoreError,
    days_until_drop,
    lifecycle_status,
    to_utc_date,
    utc_now,
)
from dropwatch_monitoring import PrometheusMetrics
from dropwatch_store import DomainStore
from dropwatch_reconciliation.settings import ReconciliationSettings

logger = structlog.get_logger()

# Never worth keeping once the sweep prunes to the drop window
EARLY_STATUSES = (DomainStatus.GRACE, DomainStatus.REDEMPTION)


@dataclass
class SweepReport:
    """What one sweep looked at and changed."""

    examined: int = 0
    updated: int = 0
    update_failures: int = 0
    transitions: Dict[str, int] = field(default_factory=dict)
    deleted_dropped: int = 0
    pruned_early: int = 0
    pruned_out_of_window: int = 0
    status_counts: Dict[str, int] = field(default_factory=dict)
    duration_seconds: float = 0.0

    def action_counts(self) -> Dict[str, int]:
        return {
            "updated": self.updated,
            "update_failures": self.update_failures,
            "deleted_dropped": self.deleted_dropped,
            "pruned_early": self.pruned_early,
            "pruned_out_of_window": self.pruned_out_of_window,
        }


class LifecycleSweep:
    """
    Ages stored records through the registry lifecycle.

    Status and days_until_drop are recomputed from the stored dates; old
    dropped records are deleted, and with pruning on so is everything
    outside the pending_delete drop window.
    """

    def __init__(
        self,
        store: DomainStore,
        settings: ReconciliationSettings,
        metrics: Optional[PrometheusMetrics] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.store = store
        self.settings = settings
        self.metrics = metrics
        self.clock = clock

    def refresh_statuses(self, now: datetime, report: SweepReport) -> None:
        """Rewrite status/days for every non-dropped record whose values moved."""
        for record in self.store.list_not_dropped():
            report.examined += 1

            status = lifecycle_status(record.expiry_date, now)
            days_left = days_until_drop(record.drop_date, now)

            if status == record.status and days_left == record.days_until_drop:
                continue

            try:
                self.store.update_lifecycle(record.domain_name, status, days_left, now)
            except StoreError as e:
                report.update_failures += 1
                logger.error(
                    "Failed to update domain lifecycle",
                    domain=record.domain_name,
                    error=str(e),
                )
                continue

            report.updated += 1
            if status != record.status:
                report.transitions[status.value] = report.transitions.get(status.value, 0) + 1
                if status is DomainStatus.DROPPED:
                    logger.info("Domain dropped", domain=record.domain_name)

    def run(self) -> SweepReport:
        """
        Run one sweep.

        Returns:
            SweepReport with the counts of every step

        Raises:
            StoreError: If a bulk read or delete fails
        """
        started = time.monotonic()
        now = self.clock()
        report = SweepReport()

        logger.info(
            "Starting lifecycle sweep",
            prune_out_of_window=self.settings.prune_out_of_window,
            window_min_days=self.settings.window_min_days,
            window_max_days=self.settings.window_max_days,
        )

        self.refresh_statuses(now, report)

        cutoff = to_utc_date(now) - timedelta(days=self.settings.dropped_retention_days)
        report.deleted_dropped = self.store.delete_dropped_before(cutoff)

        if self.settings.prune_out_of_window:
            report.pruned_early = self.store.delete_by_status(EARLY_STATUSES)
            report.pruned_out_of_window = self.store.delete_pending_outside_window(
                self.settings.window_min_days, self.settings.window_max_days
            )

        report.status_counts = self.store.status_counts()
        report.duration_seconds = round(time.monotonic() - started, 3)

        logger.info(
            "Lifecycle sweep complete",
            examined=report.examined,
            updated=report.updated,
            transitions=report.transitions,
            deleted_dropped=report.deleted_dropped,
            pruned_early=report.pruned_early,
            pruned_out_of_window=report.pruned_out_of_window,
            status_counts=report.status_counts,
            duration_seconds=report.duration_seconds,
        )

        if self.metrics is not None:
            self.metrics.push_status_buckets(
                status_counts=report.status_counts,
                sweep_counts=report.action_counts(),
                execution_ts=now,
            )

        return report
