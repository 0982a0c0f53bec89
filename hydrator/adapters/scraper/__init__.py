"""Client for the content scraper service (webmeatscraper)."""

from hydrator.adapters.scraper.client import ScraperClient
from hydrator.adapters.scraper.exceptions import (
    ScraperError,
    ScraperRequestError,
    ScraperUnavailableError,
)
from hydrator.adapters.scraper.models import ScrapedContent, ScrapeMetadata, ScrapeResult

__all__ = [
    "ScrapeMetadata",
    "ScrapeResult",
    "ScrapedContent",
    "ScraperClient",
    "ScraperError",
    "ScraperRequestError",
    "ScraperUnavailableError",
]
