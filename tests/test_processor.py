"""Tests for the bookmark processing pipeline.

The store, scraper and uploader are AsyncMock fakes; the pipeline's
collaborators are exercised separately.
"""

from __future__ import annotations

import asyncio
from datetime import UTC, datetime
from unittest.mock import AsyncMock

import pytest

from hydrator.adapters.notion.uploader import UploadFailedError, UploadTimeoutError
from hydrator.adapters.scraper.exceptions import ScraperRequestError, ScraperUnavailableError
from hydrator.adapters.scraper.models import HealthResponse
from hydrator.bookmarks.models import Bookmark
from hydrator.pipeline.models import ImageOutcome, ProcessingOptions, RecordState
from hydrator.pipeline.processor import BookmarkProcessor
from tests.conftest import make_scrape_result

FIXED_NOW = datetime(2024, 5, 1, 12, 0, tzinfo=UTC)
OG_IMAGE = "https://a.example/og.png"


def _store(bookmarks: list[Bookmark] | None = None) -> AsyncMock:
    store = AsyncMock()
    store.get_unprocessed.return_value = bookmarks or []
    store.update.side_effect = lambda bookmark_id, bookmark: bookmark
    return store


def _scraper(*results) -> AsyncMock:
    scraper = AsyncMock()
    scraper.health.return_value = HealthResponse(status="ok")
    scraper.scrape.side_effect = list(results)
    return scraper


def _processor(store, scraper, uploader=None, **options) -> BookmarkProcessor:
    return BookmarkProcessor(
        store,
        scraper,
        uploader,
        ProcessingOptions(**options),
        now=lambda: FIXED_NOW,
    )


def _bookmark(n: int = 1, **fields) -> Bookmark:
    return Bookmark(id=f"bm-{n}", title=f"Article {n}", url=f"https://site.example/{n}", **fields)


def _persisted(store: AsyncMock) -> list[Bookmark]:
    return [call.args[1] for call in store.update.await_args_list]


# ---------------------------------------------------------------------------
# Metadata merge
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_existing_author_and_image_are_never_overwritten():
    original = _bookmark(author="Jane Doe", image_url="https://a.example/mine.png")
    store = _store()
    scraper = _scraper(
        make_scrape_result(
            image="https://a.example/direct.png",
            metadata={"author": "Someone Else", "ogImage": OG_IMAGE},
        )
    )

    result = await _processor(store, scraper, upload_enabled=False).process_all([original])

    saved = _persisted(store)[0]
    assert saved.author == "Jane Doe"
    assert saved.image_url == "https://a.example/mine.png"
    assert result.succeeded == 1


@pytest.mark.asyncio
async def test_empty_author_and_image_are_filled_from_scrape():
    store = _store()
    scraper = _scraper(
        make_scrape_result(
            metadata={"author": "Ada", "ogImage": OG_IMAGE, "twitterImage": "https://a.example/tw.png"}
        )
    )

    await _processor(store, scraper, upload_enabled=False).process_all([_bookmark()])

    saved = _persisted(store)[0]
    assert saved.author == "Ada"
    assert saved.image_url == OG_IMAGE


@pytest.mark.asyncio
async def test_persisted_record_is_processed_with_cleared_error():
    store = _store()
    scraper = _scraper(make_scrape_result())
    stale = _bookmark(error="Failed to scrape URL: earlier attempt")

    await _processor(store, scraper).process_all([stale])

    saved = _persisted(store)[0]
    assert saved.processed is True
    assert saved.error == ""
    assert saved.date_processed == FIXED_NOW


# ---------------------------------------------------------------------------
# Upload and fallback policy
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_successful_upload_sets_image_and_cover():
    store = _store()
    scraper = _scraper(make_scrape_result(metadata={"ogImage": OG_IMAGE}))
    uploader = AsyncMock()
    uploader.upload.return_value = "fu_42"

    result = await _processor(store, scraper, uploader).process_all([_bookmark()])

    uploader.upload.assert_awaited_once()
    assert uploader.upload.await_args.args[0] == OG_IMAGE
    assert _persisted(store)[0].image_url == OG_IMAGE
    store.set_cover.assert_awaited_once_with("bm-1", "fu_42")
    assert result.outcomes[0].image is ImageOutcome.ATTACHED


@pytest.mark.asyncio
async def test_failed_upload_with_fallback_keeps_external_url_and_no_cover():
    store = _store()
    scraper = _scraper(make_scrape_result(metadata={"ogImage": OG_IMAGE}))
    uploader = AsyncMock()
    uploader.upload.side_effect = UploadFailedError("file upload failed", source_url=OG_IMAGE)

    result = await _processor(
        store, scraper, uploader, fallback_to_external_url=True
    ).process_all([_bookmark()])

    assert _persisted(store)[0].image_url == OG_IMAGE
    store.set_cover.assert_not_awaited()
    assert result.succeeded == 1
    assert result.outcomes[0].image is ImageOutcome.FALLBACK


@pytest.mark.asyncio
async def test_failed_upload_without_fallback_drops_image():
    store = _store()
    scraper = _scraper(make_scrape_result(metadata={"ogImage": OG_IMAGE}))
    uploader = AsyncMock()
    uploader.upload.side_effect = UploadFailedError("file upload failed", source_url=OG_IMAGE)

    result = await _processor(
        store, scraper, uploader, fallback_to_external_url=False
    ).process_all([_bookmark()])

    saved = _persisted(store)[0]
    assert saved.image_url == ""
    assert saved.processed is True
    store.set_cover.assert_not_awaited()
    assert result.succeeded == 1
    assert result.outcomes[0].image is ImageOutcome.DROPPED


@pytest.mark.asyncio
async def test_upload_timeout_follows_fallback_policy():
    store = _store()
    scraper = _scraper(make_scrape_result(image="https://a.example/direct.png"))
    uploader = AsyncMock()
    uploader.upload.side_effect = UploadTimeoutError("upload timed out after 30s")

    await _processor(store, scraper, uploader).process_all([_bookmark()])

    assert _persisted(store)[0].image_url == "https://a.example/direct.png"
    store.set_cover.assert_not_awaited()


@pytest.mark.asyncio
async def test_upload_disabled_sets_image_directly():
    store = _store()
    scraper = _scraper(make_scrape_result(metadata={"image": "https://a.example/generic.png"}))
    uploader = AsyncMock()

    result = await _processor(store, scraper, uploader, upload_enabled=False).process_all(
        [_bookmark()]
    )

    uploader.upload.assert_not_awaited()
    assert _persisted(store)[0].image_url == "https://a.example/generic.png"
    assert result.outcomes[0].image is ImageOutcome.SKIPPED


@pytest.mark.asyncio
async def test_no_image_candidate_skips_upload():
    store = _store()
    scraper = _scraper(make_scrape_result(metadata={"author": "Ada"}))
    uploader = AsyncMock()

    result = await _processor(store, scraper, uploader).process_all([_bookmark()])

    uploader.upload.assert_not_awaited()
    assert _persisted(store)[0].image_url == ""
    assert result.outcomes[0].image is None


@pytest.mark.asyncio
async def test_shutdown_event_is_passed_to_uploader():
    store = _store()
    scraper = _scraper(make_scrape_result(image="https://a.example/direct.png"))
    uploader = AsyncMock()
    uploader.upload.return_value = "fu_1"
    event = asyncio.Event()

    await _processor(store, scraper, uploader).process_all([_bookmark()], shutdown_event=event)

    assert uploader.upload.await_args.kwargs["shutdown_event"] is event


# ---------------------------------------------------------------------------
# Failure isolation and counting
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_scrape_failure_annotates_record_and_batch_continues():
    bookmarks = [_bookmark(1), _bookmark(2), _bookmark(3)]
    store = _store()
    scraper = _scraper(
        make_scrape_result(),
        ScraperRequestError("scraper returned HTTP 500: boom", url="https://site.example/2"),
        make_scrape_result(),
    )

    result = await _processor(store, scraper).process_all(bookmarks)

    assert result.total == 3
    assert result.succeeded == 2
    assert result.failed == 1
    assert [o.state for o in result.outcomes] == [
        RecordState.DONE,
        RecordState.SCRAPE_FAILED,
        RecordState.DONE,
    ]

    store.set_error.assert_awaited_once()
    failed_id, message = store.set_error.await_args.args
    assert failed_id == "bm-2"
    assert message.startswith("Failed to scrape URL:")

    saved_ids = [b.id for b in _persisted(store)]
    assert saved_ids == ["bm-1", "bm-3"]
    assert all(b.processed and b.error == "" for b in _persisted(store))

    # Exactly one of processed/error holds for every record
    assert bookmarks[1].processed is False
    assert bookmarks[1].error == message


@pytest.mark.asyncio
async def test_failed_error_annotation_does_not_abort_batch():
    store = _store()
    store.set_error.side_effect = RuntimeError("notion down")
    scraper = _scraper(ScraperRequestError("connection refused"), make_scrape_result())

    result = await _processor(store, scraper).process_all([_bookmark(1), _bookmark(2)])

    assert result.failed == 1
    assert result.succeeded == 1


@pytest.mark.asyncio
async def test_persist_failure_counts_as_failed_and_skips_cover():
    store = _store()
    store.update.side_effect = RuntimeError("update_page failed")
    scraper = _scraper(make_scrape_result(image="https://a.example/direct.png"))
    uploader = AsyncMock()
    uploader.upload.return_value = "fu_1"

    result = await _processor(store, scraper, uploader).process_all([_bookmark()])

    assert result.failed == 1
    assert result.outcomes[0].state is RecordState.PERSIST_FAILED
    store.set_cover.assert_not_awaited()


@pytest.mark.asyncio
async def test_cover_failure_is_best_effort():
    store = _store()
    store.set_cover.side_effect = RuntimeError("cover rejected")
    scraper = _scraper(make_scrape_result(image="https://a.example/direct.png"))
    uploader = AsyncMock()
    uploader.upload.return_value = "fu_1"

    result = await _processor(store, scraper, uploader).process_all([_bookmark()])

    assert result.succeeded == 1
    assert result.failed == 0
    assert result.outcomes[0].state is RecordState.DONE
    store.update.assert_awaited_once()


@pytest.mark.asyncio
async def test_records_are_processed_in_worklist_order():
    bookmarks = [_bookmark(n) for n in (3, 1, 2)]
    store = _store()
    scraper = _scraper(*[make_scrape_result() for _ in bookmarks])

    await _processor(store, scraper).process_all(bookmarks)

    scraped_urls = [call.args[0] for call in scraper.scrape.await_args_list]
    assert scraped_urls == [b.url for b in bookmarks]


@pytest.mark.asyncio
async def test_shutdown_skips_records_not_started():
    event = asyncio.Event()
    store = _store()

    async def scrape_then_shutdown(url):
        event.set()
        return make_scrape_result()

    scraper = _scraper()
    scraper.scrape.side_effect = scrape_then_shutdown

    result = await _processor(store, scraper).process_all(
        [_bookmark(1), _bookmark(2), _bookmark(3)], shutdown_event=event
    )

    assert result.succeeded == 1
    assert result.skipped == 2
    assert result.total == result.succeeded + result.failed + result.skipped
    assert scraper.scrape.await_count == 1


@pytest.mark.asyncio
async def test_shutdown_abandons_scrape_in_flight():
    event = asyncio.Event()
    store = _store()
    scrape_cancelled = asyncio.Event()

    async def slow_scrape(url):
        try:
            await asyncio.sleep(30)
        except asyncio.CancelledError:
            scrape_cancelled.set()
            raise
        return make_scrape_result()

    scraper = _scraper()
    scraper.scrape.side_effect = slow_scrape
    asyncio.get_running_loop().call_later(0.05, event.set)

    result = await asyncio.wait_for(
        _processor(store, scraper).process_all(
            [_bookmark(1), _bookmark(2)], shutdown_event=event
        ),
        timeout=5,
    )

    assert scrape_cancelled.is_set()
    assert [o.state for o in result.outcomes] == [RecordState.SKIPPED, RecordState.SKIPPED]
    assert result.skipped == 2
    assert result.failed == 0
    assert scraper.scrape.await_count == 1
    store.update.assert_not_awaited()
    store.set_error.assert_not_awaited()


# ---------------------------------------------------------------------------
# run()
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_run_fetches_worklist_after_health_check():
    store = _store([_bookmark()])
    scraper = _scraper(make_scrape_result())

    result = await _processor(store, scraper).run(limit=5)

    scraper.health.assert_awaited_once()
    store.get_unprocessed.assert_awaited_once_with(5)
    assert result.total == 1
    assert result.correlation_id


@pytest.mark.asyncio
async def test_run_aborts_when_scraper_unhealthy():
    store = _store([_bookmark()])
    scraper = _scraper()
    scraper.health.side_effect = ScraperRequestError("health check returned HTTP 503")

    with pytest.raises(ScraperUnavailableError):
        await _processor(store, scraper).run()

    store.get_unprocessed.assert_not_awaited()
    scraper.scrape.assert_not_awaited()


@pytest.mark.asyncio
async def test_empty_worklist_reports_zero():
    result = await _processor(_store([]), _scraper()).run()

    assert result.total == 0
    assert result.succeeded == result.failed == result.skipped == 0
