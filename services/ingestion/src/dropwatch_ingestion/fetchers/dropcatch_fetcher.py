"""DropCatch feed fetcher: bearer-token auth plus zipped CSV download."""

import asyncio
from typing import Any, Dict

import aiohttp
import structlog
from tenacity import (
    AsyncRetrying,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception,
)

from dropwatch_common import AuthenticationError, FetchError, constants
from dropwatch_ingestion.config import FeedConfig
from dropwatch_ingestion.fetchers.base_fetcher import BaseFetcher

logger = structlog.get_logger()

HTTP_ERRORS = (aiohttp.ClientError, asyncio.TimeoutError)


def is_transient_http_error(error: BaseException) -> bool:
    """Connection failures, timeouts, 429 and 5xx are retried; other statuses are final."""
    if isinstance(error, aiohttp.ClientResponseError):
        return error.status == 429 or error.status >= 500
    return isinstance(error, HTTP_ERRORS)


class DropCatchFetcher(BaseFetcher):
    """Fetches the day's dropping-domains file from the DropCatch API."""

    def __init__(
        self,
        config: FeedConfig,
        timeout: int = constants.DEFAULT_HTTP_TIMEOUT,
        retries: int = constants.DEFAULT_HTTP_RETRIES,
        backoff: float = constants.DEFAULT_HTTP_BACKOFF,
    ):
        """
        Initialize DropCatch fetcher.

        Args:
            config: Feed endpoints and credentials
            timeout: Request timeout in seconds
            retries: Number of attempts per request
            backoff: Initial backoff time for retries
        """
        super().__init__(config.name, config.download_url)
        self.config = config
        self.timeout = timeout
        self.retries = retries
        self.backoff = backoff

    def _retrying(self) -> AsyncRetrying:
        return AsyncRetrying(
            stop=stop_after_attempt(self.retries),
            wait=wait_exponential(multiplier=self.backoff, min=self.backoff),
            retry=retry_if_exception(is_transient_http_error),
            reraise=True,
        )

    async def authenticate(self, session: aiohttp.ClientSession) -> str:
        """
        Exchange client credentials for a bearer token.

        Raises:
            AuthenticationError: Missing credentials, rejected credentials or no token
        """
        if not (self.config.client_id and self.config.client_secret):
            raise AuthenticationError(
                "Feed credentials are not configured",
                context={
                    "source_name": self.source_name,
                    "env": "DROPCATCH_CLIENT_ID/DROPCATCH_CLIENT_SECRET",
                },
            )

        payload: Dict[str, Any] = {}
        async for attempt in self._retrying():
            with attempt:
                async with session.post(
                    self.config.auth_url,
                    json={
                        "clientId": self.config.client_id,
                        "clientSecret": self.config.client_secret,
                    },
                    timeout=aiohttp.ClientTimeout(total=self.timeout),
                ) as response:
                    if response.status in (401, 403):
                        raise AuthenticationError(
                            "Feed rejected credentials",
                            context={
                                "source_name": self.source_name,
                                "url": self.config.auth_url,
                                "status_code": response.status,
                            },
                        )
                    response.raise_for_status()
                    payload = await response.json(content_type=None) or {}

        token = payload.get("token") if isinstance(payload, dict) else None
        if not token:
            raise AuthenticationError(
                "Feed authorization response carried no token",
                context={"source_name": self.source_name, "url": self.config.auth_url},
            )

        logger.info("Feed authentication successful", source=self.source_name)
        return token

    async def fetch(self) -> Dict[str, Any]:
        """
        Authenticate and download the zipped feed file.

        Returns:
            Dictionary containing:
                - content: Zip archive bytes
                - metadata: Metadata (http_status, content_length, etc.)

        Raises:
            AuthenticationError: If authentication fails
            FetchError: If the feed rejects the download or every retry fails
        """
        logger.info(
            "Starting feed fetch",
            source=self.source_name,
            url=self.url,
            timeout=self.timeout,
        )

        try:
            async with aiohttp.ClientSession() as session:
                token = await self.authenticate(session)

                async for attempt in self._retrying():
                    with attempt:
                        async with session.get(
                            self.url,
                            params={"fileType": self.config.file_type},
                            headers={
                                "Authorization": f"Bearer {token}",
                                "User-Agent": constants.BROWSER_USER_AGENT,
                                "Accept": "application/zip, application/octet-stream",
                            },
                            timeout=aiohttp.ClientTimeout(total=self.timeout),
                        ) as response:
                            response.raise_for_status()
                            content = await response.read()

                            metadata = {
                                "http_status": response.status,
                                "content_length": len(content),
                                "content_type": response.headers.get("Content-Type", ""),
                                "source_url": self.url,
                            }

                            logger.info(
                                "Feed fetch successful",
                                source=self.source_name,
                                status=response.status,
                                content_length=len(content),
                            )

                            return {
                                "content": content,
                                "metadata": metadata,
                            }

        except HTTP_ERRORS as e:
            status_code = getattr(e, "status", None)
            if is_transient_http_error(e):
                message = f"Failed to fetch from {self.url} after {self.retries} attempts"
            else:
                message = f"Feed rejected request to {self.url} with status {status_code}"
            logger.error(
                "Feed fetch failed",
                source=self.source_name,
                url=self.url,
                status_code=status_code,
                attempts=self.retries,
                error=str(e),
            )
            raise FetchError(
                message=message,
                context={
                    "source_name": self.source_name,
                    "url": self.url,
                    "status_code": status_code,
                    "attempts": self.retries,
                    "timeout": self.timeout,
                },
                original_error=e,
            )
