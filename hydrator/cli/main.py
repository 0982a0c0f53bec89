"""Command line entry point: ``hydrator process|health|list``."""

from __future__ import annotations

import argparse
import asyncio
import dataclasses
import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from hydrator.adapters.notion.client import NotionClient
from hydrator.adapters.notion.errors import NotionError
from hydrator.adapters.notion.uploader import ImageUploader
from hydrator.adapters.scraper.client import ScraperClient
from hydrator.adapters.scraper.exceptions import ScraperError
from hydrator.bookmarks.models import BookmarkFilter
from hydrator.bookmarks.service import BookmarkService
from hydrator.config import load_config
from hydrator.core.logging_utils import setup_json_logging
from hydrator.core.shutdown import install_signal_handlers, remove_signal_handlers
from hydrator.pipeline.models import ProcessingOptions, RecordState
from hydrator.pipeline.processor import BookmarkProcessor

if TYPE_CHECKING:
    from hydrator.bookmarks.models import Bookmark
    from hydrator.config import AppConfig
    from hydrator.pipeline.models import RunResult

logger = logging.getLogger(__name__)

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def _non_negative_int(value: str) -> int:
    try:
        parsed = int(value)
    except ValueError as exc:
        msg = f"invalid number: {value!r}"
        raise argparse.ArgumentTypeError(msg) from exc
    if parsed < 0:
        msg = "must be 0 or greater"
        raise argparse.ArgumentTypeError(msg)
    return parsed


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse CLI arguments."""
    parser = argparse.ArgumentParser(
        prog="hydrator",
        description="Enrich Notion bookmarks with scraped metadata and cover images",
        allow_abbrev=False,
    )
    parser.add_argument(
        "--log-level",
        choices=LOG_LEVELS,
        help="Override the configured log level for this session.",
    )
    parser.add_argument(
        "--env-file",
        type=Path,
        help="Path to a .env file with the environment for this run.",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    process = commands.add_parser("process", help="Process all unprocessed bookmarks.")
    process.add_argument(
        "--limit",
        type=_non_negative_int,
        default=0,
        help="Process at most N bookmarks (0 = all).",
    )
    process.add_argument(
        "--dry-run",
        action="store_true",
        help="Only list the bookmarks that would be processed.",
    )
    process.add_argument(
        "--stop-scraper",
        action="store_true",
        help="Ask the scraper service to exit once the batch is done.",
    )

    commands.add_parser("health", help="Check scraper and Notion reachability.")

    list_cmd = commands.add_parser("list", help="Print bookmarks.")
    list_cmd.add_argument(
        "--unprocessed", action="store_true", help="Only bookmarks not processed yet."
    )
    list_cmd.add_argument("--limit", type=_non_negative_int, default=0)

    return parser.parse_args(argv)


def _prepare_config(args: argparse.Namespace) -> AppConfig:
    """Load configuration, optionally applying CLI overrides."""
    if args.env_file:
        load_dotenv(args.env_file, override=False)

    cfg = load_config()
    if args.log_level:
        runtime = cfg.runtime.model_copy(update={"log_level": args.log_level})
        cfg = dataclasses.replace(cfg, runtime=runtime)
    return cfg


def _print_bookmarks(bookmarks: list[Bookmark]) -> None:
    if not bookmarks:
        print("No bookmarks found.")
        return
    for idx, bookmark in enumerate(bookmarks, 1):
        print(f"{idx}. {bookmark.title or '(untitled)'}")
        print(f"   ID: {bookmark.id}")
        print(f"   URL: {bookmark.url or '-'}")
        if bookmark.error:
            print(f"   Error: {bookmark.error}")
    print(f"\n{len(bookmarks)} bookmark(s)")


def _print_summary(result: RunResult) -> None:
    if result.total == 0:
        print("No unprocessed bookmarks found.")
        return

    print("=== Processing Complete ===")
    print(f"Total: {result.total} bookmarks")
    print(f"Succeeded: {result.succeeded}")
    print(f"Failed: {result.failed}")
    if result.skipped:
        print(f"Skipped (shutdown): {result.skipped}")
    print(f"Duration: {result.duration_seconds:.1f}s")

    failures = [o for o in result.outcomes if o.state in (RecordState.SCRAPE_FAILED, RecordState.PERSIST_FAILED)]
    if failures:
        print("\nFailures:")
        for outcome in failures:
            print(f"  {outcome.bookmark_id} [{outcome.state}] {outcome.error or ''}".rstrip())


async def run_process(cfg: AppConfig, args: argparse.Namespace) -> int:
    shutdown_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    installed = install_signal_handlers(loop, shutdown_event)
    try:
        async with (
            NotionClient.from_config(cfg.notion) as notion,
            ScraperClient.from_config(cfg.scraper) as scraper,
        ):
            store = BookmarkService(notion, cfg.notion.bookmarks_db_id)
            if args.dry_run:
                _print_bookmarks(await store.get_unprocessed(args.limit))
                return 0

            uploader = ImageUploader.from_config(notion, cfg.upload) if cfg.upload.enabled else None
            processor = BookmarkProcessor(
                store, scraper, uploader, ProcessingOptions.from_config(cfg)
            )
            try:
                result = await processor.run(limit=args.limit, shutdown_event=shutdown_event)
            except (ScraperError, NotionError) as exc:
                print(f"Error: {exc}", file=sys.stderr)
                return 1

            _print_summary(result)

            if args.stop_scraper:
                try:
                    await scraper.exit()
                except ScraperError as exc:
                    logger.warning("scraper_exit_failed", extra={"error": str(exc)})
            return 0
    finally:
        remove_signal_handlers(loop, installed)


async def run_health(cfg: AppConfig) -> int:
    healthy = True
    async with (
        NotionClient.from_config(cfg.notion) as notion,
        ScraperClient.from_config(cfg.scraper) as scraper,
    ):
        try:
            health = await scraper.health()
            print(f"Scraper ({scraper.base_url}): {health.status}")
        except ScraperError as exc:
            print(f"Scraper ({scraper.base_url}): unavailable - {exc}")
            healthy = False

        if await notion.health_check():
            print("Notion: ok")
        else:
            print("Notion: unavailable")
            healthy = False
    return 0 if healthy else 1


async def run_list(cfg: AppConfig, args: argparse.Namespace) -> int:
    async with NotionClient.from_config(cfg.notion) as notion:
        store = BookmarkService(notion, cfg.notion.bookmarks_db_id)
        bookmark_filter = BookmarkFilter(
            processed=False if args.unprocessed else None, limit=args.limit
        )
        try:
            bookmarks = await store.list(bookmark_filter)
        except NotionError as exc:
            print(f"Error: {exc}", file=sys.stderr)
            return 1
    _print_bookmarks(bookmarks)
    return 0


async def dispatch(cfg: AppConfig, args: argparse.Namespace) -> int:
    if args.command == "process":
        return await run_process(cfg, args)
    if args.command == "health":
        return await run_health(cfg)
    return await run_list(cfg, args)


def main(argv: list[str] | None = None) -> int:
    """Entry point for the ``hydrator`` console script."""
    args = parse_args(argv)
    try:
        cfg = _prepare_config(args)
    except RuntimeError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return 1

    setup_json_logging(cfg.runtime.log_level, json_output=cfg.runtime.log_json)

    try:
        return asyncio.run(dispatch(cfg, args))
    except KeyboardInterrupt:  # pragma: no cover - user cancelled
        return 130
    except Exception as exc:
        logger.exception("cli_command_failed", exc_info=exc)
        return 1


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
