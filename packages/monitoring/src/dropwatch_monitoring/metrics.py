"""Utilities for publishing run snapshots to Prometheus."""

from __future__ import annotations

import os
import socket
from dataclasses import dataclass, field
from datetime import datetime
from typing import Mapping, MutableMapping, Optional

import structlog
from prometheus_client import CollectorRegistry, Gauge, push_to_gateway

logger = structlog.get_logger(__name__)


@dataclass(slots=True)
class PrometheusMetrics:
    """Helper to publish ingestion and sweep snapshots to a Pushgateway."""

    pushgateway_url: Optional[str] = None
    job_name: str = "dropwatch"
    namespace: str = "dropwatch"
    subsystem: str = "ingestion"
    default_labels: MutableMapping[str, str] = field(default_factory=dict)
    timeout_seconds: int = 5
    _hostname: str = field(init=False, repr=False)

    def __post_init__(self) -> None:
        if not self.pushgateway_url:
            self.pushgateway_url = os.getenv(
                "PROMETHEUS_PUSHGATEWAY_URL",
                "http://prometheus-pushgateway:9091",
            )
        if not self.default_labels:
            self.default_labels = {
                "environment": os.getenv("ENVIRONMENT", "development"),
                "pipeline": self.subsystem,
            }
        self._hostname = socket.gethostname()

    @property
    def _metric_prefix(self) -> str:
        return f"{self.namespace}_{self.subsystem}".replace("-", "_")

    def _push(self, registry: CollectorRegistry, run_kind: str) -> None:
        try:
            push_to_gateway(
                self.pushgateway_url,
                job=self.job_name,
                registry=registry,
                grouping_key={"instance": self._hostname, "run": run_kind},
                timeout=self.timeout_seconds,
            )
        except Exception as exc:  # noqa: BLE001
            logger.warning(
                "Failed to push metrics to Prometheus Pushgateway",
                pushgateway_url=self.pushgateway_url,
                error=str(exc),
            )

    def push_ingestion_summary(
        self,
        outcomes: Mapping[str, int],
        quality_tiers: Mapping[str, int],
        execution_ts: datetime,
        duration_seconds: Optional[float] = None,
        synthetic_feed: bool = False,
        parse_stats: Optional[Mapping[str, int]] = None,
    ) -> None:
        """
        Push the outcome counters of one ingestion run.

        Args:
            outcomes: Counter name -> value (fetched, accepted, rejected_low_score, ...)
            quality_tiers: Tier name -> number of accepted domains
            execution_ts: When the run started
            duration_seconds: Wall-clock duration of the run
            synthetic_feed: Whether the run fell back to the built-in dataset
            parse_stats: Feed row counters (rows, parsed, bad_date, empty_name, invalid_name)
        """
        registry = CollectorRegistry()
        labelnames = sorted(self.default_labels)

        outcome_metric = Gauge(
            f"{self._metric_prefix}_candidates",
            "Candidates per outcome in the latest ingestion run",
            labelnames=["outcome", *labelnames],
            registry=registry,
        )
        for outcome, value in outcomes.items():
            outcome_metric.labels(outcome=outcome, **self.default_labels).set(float(value))

        tier_metric = Gauge(
            f"{self._metric_prefix}_accepted_by_tier",
            "Accepted domains per quality tier in the latest ingestion run",
            labelnames=["tier", *labelnames],
            registry=registry,
        )
        for tier, value in quality_tiers.items():
            tier_metric.labels(tier=tier, **self.default_labels).set(float(value))

        synthetic_metric = Gauge(
            f"{self._metric_prefix}_synthetic_feed",
            "1 when the run used the built-in development dataset",
            labelnames=labelnames,
            registry=registry,
        )
        synthetic_metric.labels(**self.default_labels).set(1.0 if synthetic_feed else 0.0)

        if parse_stats:
            feed_rows_metric = Gauge(
                f"{self._metric_prefix}_feed_rows",
                "Feed rows per parse outcome in the latest ingestion run",
                labelnames=["kind", *labelnames],
                registry=registry,
            )
            for kind, value in parse_stats.items():
                feed_rows_metric.labels(kind=kind, **self.default_labels).set(float(value))

        last_run_metric = Gauge(
            f"{self._metric_prefix}_last_run_timestamp",
            "UTC timestamp of the latest ingestion run",
            labelnames=labelnames,
            registry=registry,
        )
        last_run_metric.labels(**self.default_labels).set(execution_ts.timestamp())

        if duration_seconds is not None:
            duration_metric = Gauge(
                f"{self._metric_prefix}_run_duration_seconds",
                "Runtime of the latest ingestion run in seconds",
                labelnames=labelnames,
                registry=registry,
            )
            duration_metric.labels(**self.default_labels).set(duration_seconds)

        self._push(registry, run_kind="ingestion")

    def push_status_buckets(
        self,
        status_counts: Mapping[str, int],
        sweep_counts: Mapping[str, int],
        execution_ts: datetime,
    ) -> None:
        """Push store size per lifecycle status plus what the sweep changed."""
        registry = CollectorRegistry()
        labelnames = sorted(self.default_labels)

        status_metric = Gauge(
            f"{self._metric_prefix}_records",
            "Stored domain records per lifecycle status",
            labelnames=["status", *labelnames],
            registry=registry,
        )
        for status, value in status_counts.items():
            status_metric.labels(status=status, **self.default_labels).set(float(value))

        sweep_metric = Gauge(
            f"{self._metric_prefix}_sweep_changes",
            "Records changed by the latest reconciliation sweep",
            labelnames=["action", *labelnames],
            registry=registry,
        )
        for action, value in sweep_counts.items():
            sweep_metric.labels(action=action, **self.default_labels).set(float(value))

        last_run_metric = Gauge(
            f"{self._metric_prefix}_last_sweep_timestamp",
            "UTC timestamp of the latest reconciliation sweep",
            labelnames=labelnames,
            registry=registry,
        )
        last_run_metric.labels(**self.default_labels).set(execution_ts.timestamp())

        self._push(registry, run_kind="reconciliation")
