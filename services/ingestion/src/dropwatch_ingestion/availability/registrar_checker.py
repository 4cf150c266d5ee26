"""Registrar search page scrape."""

import asyncio
import re
from typing import Optional

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

# Taken markers win when a page carries both kinds
TAKEN_MARKERS = (
    re.compile(r"is\s+taken", re.IGNORECASE),
    re.compile(r"already\s+registered", re.IGNORECASE),
    re.compile(r"\"available\"\s*:\s*false", re.IGNORECASE),
)
AVAILABLE_MARKERS = (
    re.compile(r"is\s+available", re.IGNORECASE),
    re.compile(r"\"available\"\s*:\s*true", re.IGNORECASE),
)


def classify_search_page(html: str) -> SignalOutcome:
    """Read a registrar search result page for taken/available markers."""
    if any(marker.search(html) for marker in TAKEN_MARKERS):
        return SignalOutcome.NEGATIVE
    if any(marker.search(html) for marker in AVAILABLE_MARKERS):
        return SignalOutcome.POSITIVE
    return SignalOutcome.UNKNOWN


class RegistrarSearchChecker(SignalChecker):
    """
    Best-effort scrape of a registrar's public search page.

    Registrars block automated traffic often; a 403/429 or any other
    non-200 answer is an ordinary unknown, not an error.
    """

    name = "registrar"

    def __init__(
        self,
        search_url: str = constants.DEFAULT_REGISTRAR_SEARCH_URL,
        timeout: float = constants.DEFAULT_REGISTRAR_TIMEOUT,
        cache: Optional[TTLCache] = None,
    ):
        """
        Initialize registrar checker.

        Args:
            search_url: Search page URL with a {domain} placeholder
            timeout: Request timeout in seconds
            cache: Shared TTL cache for definitive answers
        """
        self.search_url = search_url
        self.timeout = timeout
        self.cache = cache

    async def fetch_page(self, domain: str) -> Optional[str]:
        """Return the page body, or None when blocked or unreachable."""
        url = self.search_url.format(domain=domain)
        try:
            async with aiohttp.ClientSession() as session:
                async with session.get(
                    url,
                    headers={
                        "User-Agent": constants.BROWSER_USER_AGENT,
                        "Accept": "text/html,application/json",
                    },
                    timeout=aiohttp.ClientTimeout(total=self.timeout),
                ) as response:
                    if response.status != 200:
                        logger.debug(
                            "Registrar search not usable",
                            domain=domain,
                            status=response.status,
                            blocked=response.status in (403, 429),
                        )
                        return None
                    return await response.text()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.debug(
                "Registrar search failed",
                domain=domain,
                error=str(e),
                error_type=type(e).__name__,
            )
            return None

    async def check(self, domain: str, context: ValidationContext) -> SignalResult:
        cache_key = ("registrar", domain)
        if self.cache is not None:
            cached = self.cache.get(cache_key)
            if cached is not None:
                return cached

        html = await self.fetch_page(domain)
        if html is None:
            return self.result(SignalOutcome.UNKNOWN, "Registrar search unavailable")

        outcome = classify_search_page(html)
        if outcome is SignalOutcome.NEGATIVE:
            result = self.result(outcome, "Registrar reports domain taken")
        elif outcome is SignalOutcome.POSITIVE:
            result = self.result(outcome, "Registrar reports domain available")
        else:
            return self.result(outcome, "No availability marker on registrar page")

        if self.cache is not None:
            self.cache.set(cache_key, result)
        return result
