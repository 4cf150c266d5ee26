"""WHOIS expiry-window check."""

import asyncio
from typing import Any, Callable, Dict, Mapping

import structlog
import whois
from tenacity import AsyncRetrying, retry_if_exception, stop_after_attempt, wait_fixed

from dropwatch_common import WhoisLookupError, constants, days_since
from dropwatch_ingestion.availability.signals import (
    SignalChecker,
    SignalOutcome,
    SignalResult,
    ValidationContext,
)
from dropwatch_ingestion.availability.whois_record import WhoisRecord

logger = structlog.get_logger()

TRANSIENT_ERROR_TOKENS = (
    "econnrefused",
    "etimedout",
    "socket hang up",
    "econnreset",
    "connection reset",
    "connection refused",
    "timed out",
)
NOT_FOUND_TOKENS = (
    "no match",
    "not found",
    "no data found",
    "no entries found",
    "status: free",
)

WhoisLookup = Callable[[str], Mapping[str, Any]]


def is_transient_whois_error(error: BaseException) -> bool:
    """Connection resets, refusals and timeouts are worth retrying; nothing else is."""
    if isinstance(error, (ConnectionError, TimeoutError)):
        return True
    message = str(error).lower()
    return any(token in message for token in TRANSIENT_ERROR_TOKENS)


def python_whois_lookup(domain: str) -> Dict[str, Any]:
    """
    Blocking WHOIS query through python-whois.

    A "no match" answer means the registry has no record, which is reported
    as an empty mapping rather than an error.
    """
    try:
        entry = whois.whois(domain)
    except whois.parser.PywhoisError as e:
        if any(token in str(e).lower() for token in NOT_FOUND_TOKENS):
            return {}
        raise
    return dict(entry) if entry else {}


class WhoisChecker(SignalChecker):
    """
    Confirms a domain sits 60-80 days past expiry according to WHOIS.

    Clearly registered records (active status, fresh creation date, named
    registrar) and expiries outside the window are negative. Missing data
    is only accepted when DNS was clear and the matching policy allows it.
    """

    name = "whois"

    def __init__(
        self,
        lookup: WhoisLookup = python_whois_lookup,
        retry_attempts: int = constants.DEFAULT_WHOIS_RETRY_ATTEMPTS,
        retry_delay_seconds: float = constants.DEFAULT_WHOIS_RETRY_DELAY_SECONDS,
        accept_missing_expiry: bool = True,
        trust_dns_on_failure: bool = True,
    ):
        """
        Initialize WHOIS checker.

        Args:
            lookup: Blocking function returning the raw WHOIS mapping
            retry_attempts: Total attempts for transient failures
            retry_delay_seconds: Fixed wait between attempts
            accept_missing_expiry: Confirm DNS-clear domains whose WHOIS has no expiry
            trust_dns_on_failure: Confirm DNS-clear domains when WHOIS is unreachable
        """
        self.lookup = lookup
        self.retry_attempts = retry_attempts
        self.retry_delay_seconds = retry_delay_seconds
        self.accept_missing_expiry = accept_missing_expiry
        self.trust_dns_on_failure = trust_dns_on_failure

    async def query(self, domain: str) -> Mapping[str, Any]:
        """
        Run the lookup in a worker thread with bounded retry.

        Raises:
            WhoisLookupError: If every attempt failed
        """
        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(self.retry_attempts),
                wait=wait_fixed(self.retry_delay_seconds),
                retry=retry_if_exception(is_transient_whois_error),
                reraise=True,
            ):
                with attempt:
                    if attempt.retry_state.attempt_number > 1:
                        logger.info(
                            "Retrying WHOIS lookup",
                            domain=domain,
                            attempt=attempt.retry_state.attempt_number,
                        )
                    return await asyncio.to_thread(self.lookup, domain)
        except Exception as e:
            raise WhoisLookupError(
                "WHOIS lookup failed",
                context={"domain": domain, "attempts": self.retry_attempts},
                original_error=e,
            ) from e

    def _missing_data(self, context: ValidationContext, reason: str) -> SignalResult:
        # WHOIS answered without an expiry; only clear DNS can turn that into a confirm
        if context.dns_clear and self.accept_missing_expiry:
            return self.result(SignalOutcome.POSITIVE, f"{reason}; no DNS records")
        return self.result(SignalOutcome.NEGATIVE, reason)

    async def check(self, domain: str, context: ValidationContext) -> SignalResult:
        try:
            raw = await self.query(domain)
        except WhoisLookupError as e:
            context.whois_failed = True
            logger.warning("WHOIS unavailable", domain=domain, error=str(e))
            if context.dns_clear and self.trust_dns_on_failure:
                return self.result(SignalOutcome.POSITIVE, "WHOIS failed; trusting clear DNS")
            return self.result(SignalOutcome.UNKNOWN, "WHOIS lookup failed")

        record = WhoisRecord(raw)

        if record.is_empty:
            return self._missing_data(context, "No WHOIS data")

        evidence = record.registration_evidence(context.now)
        if evidence:
            return self.result(SignalOutcome.NEGATIVE, evidence)

        expiry = record.expiry
        if expiry is None:
            logger.debug(
                "No parseable expiry in WHOIS",
                domain=domain,
                fields=sorted(record.raw)[:30],
            )
            return self._missing_data(context, "No WHOIS expiry date")

        elapsed = days_since(expiry, context.now)
        if elapsed < 0:
            return self.result(
                SignalOutcome.NEGATIVE, f"Registered until {expiry.date().isoformat()}"
            )

        if (
            constants.DROP_WINDOW_MIN_DAYS_SINCE_EXPIRY
            <= elapsed
            <= constants.DROP_WINDOW_MAX_DAYS_SINCE_EXPIRY
        ):
            return self.result(SignalOutcome.POSITIVE, f"Expired {elapsed} days ago")

        return self.result(
            SignalOutcome.NEGATIVE, f"Outside drop window ({elapsed} days since expiry)"
        )
