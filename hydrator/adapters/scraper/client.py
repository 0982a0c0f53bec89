from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, Any

import httpx
from pydantic import ValidationError

from hydrator.adapters.scraper.exceptions import ScraperRequestError
from hydrator.adapters.scraper.models import HealthResponse, ScrapedContent, ScrapeResult
from hydrator.config.scraper import DEFAULT_SCRAPER_URL
from hydrator.core.logging_utils import truncate_log_content

if TYPE_CHECKING:
    from typing import Self

    from hydrator.config.scraper import ScraperConfig

logger = logging.getLogger(__name__)

SCRAPE_ENDPOINT = "/scrape"
HEALTH_ENDPOINT = "/health"
EXIT_ENDPOINT = "/exit"

# Health and exit are cheap; only scrape gets the long timeout
CONTROL_TIMEOUT_SEC = 10.0


class ScraperClient:
    """Async client for the webmeatscraper content extraction service."""

    def __init__(
        self,
        base_url: str = DEFAULT_SCRAPER_URL,
        timeout_sec: float = 80.0,
        *,
        max_connections: int = 10,
        max_keepalive_connections: int = 5,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if not base_url:
            msg = "Scraper base URL is required"
            raise ValueError(msg)
        if timeout_sec <= 0:
            msg = "Scraper timeout must be positive"
            raise ValueError(msg)

        self._base_url = base_url.rstrip("/")
        self._timeout = float(timeout_sec)
        self._limits = httpx.Limits(
            max_connections=int(max_connections),
            max_keepalive_connections=int(max_keepalive_connections),
        )
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            timeout=self._timeout,
            limits=self._limits,
            transport=transport,
        )

    @classmethod
    def from_config(cls, config: ScraperConfig, **kwargs: Any) -> Self:
        return cls(config.base_url, config.timeout_sec, **kwargs)

    @property
    def base_url(self) -> str:
        return self._base_url

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def scrape(self, url: str) -> ScrapeResult:
        """Fetch and extract one page.

        Returns the parsed content together with the raw response body so
        callers can dump it for debugging.

        Raises:
            ValueError: ``url`` is empty
            ScraperRequestError: transport failure, non-200 status or a
                body that is not valid scrape JSON
        """
        if not url or not url.strip():
            msg = "URL to scrape is required"
            raise ValueError(msg)

        logger.debug("scrape_request", extra={"url": url})
        started = time.perf_counter()
        try:
            resp = await self._client.post(SCRAPE_ENDPOINT, json={"url": url})
        except httpx.HTTPError as exc:
            msg = f"scrape request failed: {exc}"
            raise ScraperRequestError(msg, url=url, original_error=exc) from exc

        latency_ms = int((time.perf_counter() - started) * 1000)
        if resp.status_code != httpx.codes.OK:
            excerpt = truncate_log_content(resp.text, 200)
            msg = f"scraper returned HTTP {resp.status_code}: {excerpt}"
            raise ScraperRequestError(msg, url=url, status_code=resp.status_code)

        try:
            content = ScrapedContent.model_validate_json(resp.content)
        except ValidationError as exc:
            msg = "scraper returned an invalid JSON body"
            raise ScraperRequestError(
                msg, url=url, status_code=resp.status_code, original_error=exc
            ) from exc

        logger.debug(
            "scrape_response",
            extra={
                "url": url,
                "latency_ms": latency_ms,
                "content_len": len(content.content),
                "has_metadata": content.metadata is not None,
            },
        )
        return ScrapeResult(content=content, raw_json=resp.text)

    async def health(self) -> HealthResponse:
        """Check that the scraper is up.

        A 200 response counts as healthy even when the body is not the
        usual JSON document.
        """
        try:
            resp = await self._client.get(HEALTH_ENDPOINT, timeout=CONTROL_TIMEOUT_SEC)
        except httpx.HTTPError as exc:
            msg = f"health check failed: {exc}"
            raise ScraperRequestError(msg, url=self._base_url, original_error=exc) from exc

        if resp.status_code != httpx.codes.OK:
            msg = f"health check returned HTTP {resp.status_code}"
            raise ScraperRequestError(msg, url=self._base_url, status_code=resp.status_code)

        try:
            return HealthResponse.model_validate_json(resp.content)
        except ValidationError:
            logger.debug("scraper_health_body_unparsed", extra={"body_len": len(resp.content)})
            return HealthResponse()

    async def exit(self) -> None:
        """Ask the scraper process to shut down."""
        try:
            resp = await self._client.get(EXIT_ENDPOINT, timeout=CONTROL_TIMEOUT_SEC)
        except httpx.HTTPError as exc:
            msg = f"exit request failed: {exc}"
            raise ScraperRequestError(msg, url=self._base_url, original_error=exc) from exc

        if resp.status_code != httpx.codes.OK:
            msg = f"exit returned HTTP {resp.status_code}"
            raise ScraperRequestError(msg, url=self._base_url, status_code=resp.status_code)
        logger.info("scraper_exit_requested", extra={"base_url": self._base_url})
