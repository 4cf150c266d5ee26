"""Ordered cascade of availability signals."""

from datetime import datetime
from typing import List, Optional, Sequence

import structlog

from dropwatch_common import TTLCache, utc_now
from dropwatch_ingestion.availability.dns_checker import DnsChecker
from dropwatch_ingestion.availability.registrar_checker import RegistrarSearchChecker
from dropwatch_ingestion.availability.signals import (
    SignalChecker,
    SignalOutcome,
    ValidationContext,
    ValidationResult,
    Verdict,
)
from dropwatch_ingestion.availability.whois_checker import WhoisChecker, WhoisLookup

logger = structlog.get_logger()

VALIDATION_DISABLED_REASON = "validation disabled"
NO_SIGNAL_REASON = "No conclusive signal"


class AvailabilityValidator:
    """
    Folds an ordered list of signal checkers into one verdict.

    The first positive or negative outcome decides; when every checker is
    unknown the domain is rejected.
    """

    def __init__(self, checkers: Sequence[SignalChecker], enabled: bool = True):
        self.checkers: List[SignalChecker] = list(checkers)
        self.enabled = enabled

    @property
    def signal_names(self) -> List[str]:
        return [checker.name for checker in self.checkers]

    async def validate(self, domain: str, now: Optional[datetime] = None) -> ValidationResult:
        """
        Run the cascade for one domain.

        Args:
            domain: Fully qualified domain name
            now: Reference time for expiry arithmetic (defaults to current UTC)

        Returns:
            ValidationResult carrying every signal that was consulted
        """
        if not self.enabled:
            return ValidationResult(
                domain=domain, verdict=Verdict.CONFIRMED, reason=VALIDATION_DISABLED_REASON
            )

        context = ValidationContext(domain=domain, now=now or utc_now())

        for checker in self.checkers:
            signal = await checker.check(domain, context)
            context.signals.append(signal)

            logger.debug(
                "Signal checked",
                domain=domain,
                signal=signal.signal,
                outcome=signal.outcome.value,
                reason=signal.reason,
            )

            if signal.outcome is SignalOutcome.UNKNOWN:
                continue

            verdict = (
                Verdict.CONFIRMED if signal.outcome is SignalOutcome.POSITIVE else Verdict.REJECTED
            )
            return ValidationResult(
                domain=domain,
                verdict=verdict,
                reason=signal.reason,
                signals=list(context.signals),
                whois_failed=context.whois_failed,
            )

        return ValidationResult(
            domain=domain,
            verdict=Verdict.REJECTED,
            reason=NO_SIGNAL_REASON,
            signals=list(context.signals),
            whois_failed=context.whois_failed,
        )


def build_validator(
    settings,
    registrar_search_url: Optional[str] = None,
    whois_lookup: Optional[WhoisLookup] = None,
    cache: Optional[TTLCache] = None,
) -> AvailabilityValidator:
    """
    Assemble the checker cascade from ingestion settings.

    DNS always runs first. signal_order decides whether WHOIS or the
    registrar scrape comes next; the scrape is left out entirely unless
    enable_registrar_check is set.

    Args:
        settings: IngestionSettings for this run
        registrar_search_url: Search page URL template from the feed config
        whois_lookup: Blocking WHOIS function (defaults to python-whois)
        cache: TTL cache shared by the network checkers
    """
    if cache is None:
        cache = TTLCache(settings.cache_ttl_seconds)

    dns = DnsChecker(
        resolver_url=settings.dns_resolver_url,
        timeout=settings.dns_timeout_seconds,
        cache=cache,
    )

    whois_kwargs = {}
    if whois_lookup is not None:
        whois_kwargs["lookup"] = whois_lookup
    whois_checker = WhoisChecker(
        retry_attempts=settings.whois_retry_attempts,
        retry_delay_seconds=settings.whois_retry_delay_seconds,
        accept_missing_expiry=settings.accept_missing_expiry,
        trust_dns_on_failure=settings.trust_dns_on_whois_failure,
        **whois_kwargs,
    )

    checkers: List[SignalChecker] = [dns]

    if settings.enable_registrar_check:
        registrar_kwargs = {}
        if registrar_search_url:
            registrar_kwargs["search_url"] = registrar_search_url
        registrar = RegistrarSearchChecker(cache=cache, **registrar_kwargs)

        if settings.signal_order == "scrape_first":
            checkers.extend([registrar, whois_checker])
        else:
            checkers.extend([whois_checker, registrar])
    else:
        checkers.append(whois_checker)

    validator = AvailabilityValidator(checkers, enabled=settings.enable_validation)

    logger.info(
        "Availability validator ready",
        enabled=validator.enabled,
        signals=validator.signal_names,
    )

    return validator
