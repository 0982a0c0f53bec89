"""Tests for the scraper service client and its response models."""

from __future__ import annotations

import json

import httpx
import pytest

from hydrator.adapters.scraper.client import ScraperClient
from hydrator.adapters.scraper.exceptions import ScraperRequestError
from hydrator.adapters.scraper.models import ScrapedContent

SCRAPE_BODY = {
    "content": "Article body",
    "image": None,
    "metadata": {
        "author": "Ada Lovelace",
        "title": "Notes",
        "og:image": "https://a.example/og.png",
        "twitterImage": "https://a.example/tw.png",
        "datePublished": "2024-01-01",
    },
}


def _client(handler) -> ScraperClient:
    return ScraperClient("http://scraper.local:7878/", transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_scrape_posts_url_and_parses_body():
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=SCRAPE_BODY)

    async with _client(handler) as client:
        result = await client.scrape("https://blog.example/post")

    assert seen[0].method == "POST"
    assert seen[0].url == httpx.URL("http://scraper.local:7878/scrape")
    assert json.loads(seen[0].content) == {"url": "https://blog.example/post"}

    content = result.content
    assert content.content == "Article body"
    assert content.metadata is not None
    assert content.metadata.author == "Ada Lovelace"
    assert content.metadata.og_image == "https://a.example/og.png"
    assert content.metadata.twitter_image == "https://a.example/tw.png"
    assert content.metadata.date_published == "2024-01-01"
    assert json.loads(result.raw_json) == SCRAPE_BODY


@pytest.mark.asyncio
async def test_scrape_non_200_raises_with_status():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(502, text="upstream exploded")

    async with _client(handler) as client:
        with pytest.raises(ScraperRequestError) as exc_info:
            await client.scrape("https://blog.example/post")

    assert exc_info.value.status_code == 502
    assert "upstream exploded" in str(exc_info.value)


@pytest.mark.asyncio
async def test_scrape_invalid_json_raises():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="<html>not json</html>")

    async with _client(handler) as client:
        with pytest.raises(ScraperRequestError):
            await client.scrape("https://blog.example/post")


@pytest.mark.asyncio
async def test_scrape_transport_error_raises():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    async with _client(handler) as client:
        with pytest.raises(ScraperRequestError) as exc_info:
            await client.scrape("https://blog.example/post")

    assert isinstance(exc_info.value.original_error, httpx.ReadTimeout)


@pytest.mark.asyncio
async def test_scrape_requires_url():
    async with _client(lambda request: httpx.Response(200, json={})) as client:
        with pytest.raises(ValueError):
            await client.scrape("  ")


@pytest.mark.asyncio
async def test_health_parses_status():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/health"
        return httpx.Response(200, json={"status": "healthy", "version": "1.2.0"})

    async with _client(handler) as client:
        health = await client.health()

    assert health.status == "healthy"
    assert health.version == "1.2.0"


@pytest.mark.asyncio
async def test_health_plain_200_counts_as_ok():
    async with _client(lambda request: httpx.Response(200, text="OK")) as client:
        health = await client.health()

    assert health.status == "ok"


@pytest.mark.asyncio
async def test_health_error_status_raises():
    async with _client(lambda request: httpx.Response(503, text="starting")) as client:
        with pytest.raises(ScraperRequestError):
            await client.health()


@pytest.mark.asyncio
async def test_exit_calls_exit_endpoint():
    paths: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        paths.append(request.url.path)
        return httpx.Response(200, json={"status": "shutting down"})

    async with _client(handler) as client:
        await client.exit()

    assert paths == ["/exit"]


def test_base_url_trailing_slash_stripped():
    client = ScraperClient("http://scraper.local:7878/")
    assert client.base_url == "http://scraper.local:7878"


class TestScrapedContentModel:
    def test_missing_fields_default(self):
        content = ScrapedContent.model_validate({})
        assert content.content == ""
        assert content.image is None
        assert content.metadata is None

    def test_image_objects_and_lists_are_flattened(self):
        content = ScrapedContent.model_validate(
            {
                "content": None,
                "image": {"url": "https://a.example/obj.png"},
                "metadata": {"ogImage": ["", "https://a.example/first.png"]},
            }
        )
        assert content.content == ""
        assert content.image == "https://a.example/obj.png"
        assert content.metadata is not None
        assert content.metadata.og_image == "https://a.example/first.png"

    def test_author_lists_are_joined(self):
        content = ScrapedContent.model_validate(
            {"metadata": {"author": [{"name": "Ada"}, "Charles"]}}
        )
        assert content.metadata is not None
        assert content.metadata.author == "Ada, Charles"
