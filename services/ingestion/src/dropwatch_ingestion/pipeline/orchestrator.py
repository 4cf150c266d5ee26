"""Ingestion orchestration: acquire, score, validate, store."""

import asyncio
import time
from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any, Awaitable, Callable, Dict, Optional

import structlog

from dropwatch_common import PipelineException, StoreError, utc_now
from dropwatch_monitoring import PrometheusMetrics
from dropwatch_schemas import CandidateDomain, DomainRecord, QualityScore
from dropwatch_store import DomainStore
from dropwatch_ingestion.availability import AvailabilityValidator, FailureCooldown
from dropwatch_ingestion.config import IngestionSettings
from dropwatch_ingestion.fetchers import FeedAcquisition
from dropwatch_ingestion.scoring import categorize_domain, quality_tier, rank_candidates

logger = structlog.get_logger()

Sleep = Callable[[float], Awaitable[Any]]


@dataclass
class IngestionSummary:
    """Counters for one ingestion run."""

    fetched: int = 0
    scored: int = 0
    accepted: int = 0
    rejected_low_score: int = 0
    rejected_validation: int = 0
    validation_errors: int = 0
    whois_failures: int = 0
    cooldowns: int = 0
    upsert_failures: int = 0
    quality_tiers: Dict[str, int] = field(
        default_factory=lambda: {"premium": 0, "good": 0, "average": 0}
    )
    parse_stats: Dict[str, int] = field(default_factory=dict)
    synthetic_feed: bool = False
    duration_seconds: float = 0.0
    swept: bool = False

    def outcomes(self) -> Dict[str, int]:
        return {
            "fetched": self.fetched,
            "scored": self.scored,
            "accepted": self.accepted,
            "rejected_low_score": self.rejected_low_score,
            "rejected_validation": self.rejected_validation,
            "validation_errors": self.validation_errors,
            "whois_failures": self.whois_failures,
            "cooldowns": self.cooldowns,
            "upsert_failures": self.upsert_failures,
        }

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


class DropIngestionPipeline:
    """
    Runs one ingestion pass end to end.

    Candidates are handled strictly one at a time: WHOIS servers throttle
    aggressively, so pacing comes from a fixed delay between validations
    and a cooldown after repeated WHOIS failures.
    """

    def __init__(
        self,
        acquisition: FeedAcquisition,
        validator: AvailabilityValidator,
        store: DomainStore,
        settings: IngestionSettings,
        sweep=None,
        metrics: Optional[PrometheusMetrics] = None,
        sleep: Sleep = asyncio.sleep,
        clock: Callable[[], datetime] = utc_now,
    ):
        """
        Initialize the pipeline.

        Args:
            acquisition: Feed fetch + parse (with optional synthetic fallback)
            validator: Availability cascade
            store: Destination for confirmed candidates
            settings: Run settings
            sweep: LifecycleSweep run after ingestion, if any
            metrics: Pushgateway publisher, if configured
            sleep: Awaitable sleep (injected by tests)
            clock: Source of the run's reference time
        """
        self.acquisition = acquisition
        self.validator = validator
        self.store = store
        self.settings = settings
        self.sweep = sweep
        self.metrics = metrics
        self.sleep = sleep
        self.clock = clock
        self.cooldown = FailureCooldown(
            threshold=settings.whois_cooldown_after,
            cooldown_seconds=settings.whois_cooldown_seconds,
        )

    def build_record(
        self, candidate: CandidateDomain, score: QualityScore, now: datetime
    ) -> DomainRecord:
        return DomainRecord.from_candidate(
            candidate,
            score=score,
            category=categorize_domain(candidate.domain_name),
            now=now,
        )

    async def process_candidate(
        self,
        candidate: CandidateDomain,
        score: QualityScore,
        now: datetime,
        summary: IngestionSummary,
    ) -> None:
        """Gate, validate and store one candidate, updating the summary."""
        domain = candidate.domain_name

        if score.total < self.settings.min_score:
            summary.rejected_low_score += 1
            logger.debug(
                "Below quality gate",
                domain=domain,
                score=score.total,
                min_score=self.settings.min_score,
            )
            return

        try:
            result = await self.validator.validate(domain, now)
        except Exception as e:
            summary.validation_errors += 1
            logger.error(
                "Validation error",
                domain=domain,
                error=str(e),
                error_type=type(e).__name__,
            )
            await self._pace()
            return

        if result.whois_failed:
            summary.whois_failures += 1
        if self.cooldown.record(result.whois_failed):
            summary.cooldowns += 1
            await self.sleep(self.cooldown.cooldown_seconds)

        if not result.confirmed:
            summary.rejected_validation += 1
            logger.info("Domain rejected", domain=domain, reason=result.reason)
            await self._pace()
            return

        record = self.build_record(candidate, score, now)
        try:
            self.store.upsert(record)
        except StoreError as e:
            summary.upsert_failures += 1
            logger.error("Failed to store domain", domain=domain, error=str(e))
        else:
            summary.accepted += 1
            tier = quality_tier(score.total)
            summary.quality_tiers[tier] = summary.quality_tiers.get(tier, 0) + 1
            logger.info(
                "Domain accepted",
                domain=domain,
                score=score.total,
                status=record.status.value,
                days_until_drop=record.days_until_drop,
                reason=result.reason,
            )

        await self._pace()

    async def _pace(self) -> None:
        if self.validator.enabled and self.settings.request_delay_seconds > 0:
            await self.sleep(self.settings.request_delay_seconds)

    def _run_sweep(self, summary: IngestionSummary) -> None:
        try:
            self.sweep.run()
        except StoreError as e:
            logger.error("Post-ingestion sweep failed", error=str(e))
        else:
            summary.swept = True

    async def run(self) -> IngestionSummary:
        """
        Run the complete ingestion pipeline.

        Returns:
            IngestionSummary for the run

        Raises:
            PipelineException: If the feed could not be acquired
        """
        started = time.monotonic()
        now = self.clock()
        summary = IngestionSummary()

        logger.info(
            "Starting ingestion pipeline",
            min_score=self.settings.min_score,
            max_candidates=self.settings.max_candidates,
            validation=self.validator.enabled,
            signals=self.validator.signal_names,
        )

        try:
            acquired = await self.acquisition.acquire(now)
        except PipelineException as e:
            logger.error(
                "Feed acquisition failed",
                error=str(e),
                error_type=type(e).__name__,
            )
            raise

        summary.fetched = len(acquired.candidates)
        summary.synthetic_feed = acquired.synthetic
        summary.parse_stats = dict(acquired.parse_stats)
        if acquired.synthetic:
            logger.warning("Running on synthetic feed data", candidates=summary.fetched)

        ranked = rank_candidates(acquired.candidates, self.settings.max_candidates)
        summary.scored = len(ranked)

        logger.info(
            "Candidates ranked",
            fetched=summary.fetched,
            kept=summary.scored,
            top_score=ranked[0][1].total if ranked else None,
        )

        for index, (candidate, score) in enumerate(ranked, start=1):
            try:
                await self.process_candidate(candidate, score, now, summary)
            except Exception as e:
                summary.validation_errors += 1
                logger.error(
                    "Candidate failed",
                    domain=candidate.domain_name,
                    error=str(e),
                    error_type=type(e).__name__,
                )

            if index % 25 == 0:
                logger.info("Progress", processed=index, total=summary.scored, **summary.outcomes())

        if self.sweep is not None and self.settings.sweep_after_ingest:
            self._run_sweep(summary)

        summary.duration_seconds = round(time.monotonic() - started, 3)

        logger.info("Ingestion pipeline complete", **summary.as_dict())

        if self.metrics is not None:
            self.metrics.push_ingestion_summary(
                outcomes=summary.outcomes(),
                quality_tiers=summary.quality_tiers,
                parse_stats=summary.parse_stats,
                execution_ts=now,
                duration_seconds=summary.duration_seconds,
                synthetic_feed=summary.synthetic_feed,
            )

        return summary
