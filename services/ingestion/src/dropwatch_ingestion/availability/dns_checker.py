"""DNS-over-HTTPS existence check."""

import asyncio
from typing import Optional, Sequence

import aiohttp
import structlog

from dropwatch_common import TTLCache, constants
from dropwatch_ingestion.availability.signals import (
    SignalChecker,
    SignalOutcome,
    SignalResult,
    ValidationContext,
)

logger = structlog.get_logger()

# DoH JSON status codes that mean the answer is trustworthy
NOERROR = 0
NXDOMAIN = 3


class DnsChecker(SignalChecker):
    """
    Asks a DoH resolver whether the domain has DNS records.

    Records found means the domain is still registered and in use, which
    vetoes every other signal. No records only marks the domain as
    "DNS clear" for later checkers; it never confirms on its own.
    """

    name = "dns"

    def __init__(
        self,
        resolver_url: str = constants.DEFAULT_DOH_URL,
        timeout: float = constants.DEFAULT_DNS_TIMEOUT,
        record_types: Sequence[str] = ("A",),
        cache: Optional[TTLCache] = None,
    ):
        """
        Initialize DNS checker.

        Args:
            resolver_url: JSON DoH endpoint (Google/Cloudflare style)
            timeout: Per-request timeout in seconds
            record_types: Record types queried concurrently
            cache: Shared TTL cache for definitive answers
        """
        self.resolver_url = resolver_url
        self.timeout = timeout
        self.record_types = tuple(record_types)
        self.cache = cache

    async def _query(
        self, session: aiohttp.ClientSession, domain: str, record_type: str
    ) -> Optional[bool]:
        """True if records exist, False if none, None if the lookup failed."""
        try:
            async with session.get(
                self.resolver_url,
                params={"name": domain, "type": record_type},
                headers={"Accept": "application/dns-json"},
                timeout=aiohttp.ClientTimeout(total=self.timeout),
            ) as response:
                if response.status != 200:
                    logger.debug(
                        "DoH lookup returned error status",
                        domain=domain,
                        record_type=record_type,
                        status=response.status,
                    )
                    return None
                payload = await response.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            logger.debug(
                "DoH lookup failed",
                domain=domain,
                record_type=record_type,
                error=str(e),
                error_type=type(e).__name__,
            )
            return None

        if not isinstance(payload, dict) or payload.get("Status", NOERROR) not in (
            NOERROR,
            NXDOMAIN,
        ):
            return None

        return bool(payload.get("Answer"))

    async def has_records(self, domain: str) -> Optional[bool]:
        """
        Query every configured record type concurrently.

        Returns:
            True if any type has records, False if all answered empty,
            None if no type gave records and at least one lookup failed
        """
        cache_key = ("dns", domain)
        if self.cache is not None:
            cached = self.cache.get(cache_key)
            if cached is not None:
                return cached

        async with aiohttp.ClientSession() as session:
            answers = await asyncio.gather(
                *(self._query(session, domain, record_type) for record_type in self.record_types)
            )

        if any(answer is True for answer in answers):
            found: Optional[bool] = True
        elif all(answer is False for answer in answers):
            found = False
        else:
            found = None

        if found is not None and self.cache is not None:
            self.cache.set(cache_key, found)

        return found

    async def check(self, domain: str, context: ValidationContext) -> SignalResult:
        found = await self.has_records(domain)

        if found is True:
            return self.result(SignalOutcome.NEGATIVE, "DNS records found")

        if found is False:
            context.dns_clear = True
            return self.result(SignalOutcome.UNKNOWN, "No DNS records")

        return self.result(SignalOutcome.UNKNOWN, "DNS lookup failed")
