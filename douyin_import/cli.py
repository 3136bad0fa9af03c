from __future__ import annotations

import argparse
import sys
from typing import Optional

from rich.console import Console

from .auth import AuthSession
from .config import Settings, load_settings
from .douyin import load_douyin_playlist
from .errors import ImporterError
from .importer import FixedDelay, ImportController
from .log_utils import init_summaries, result_row, setup_logging, write_summary_row
from .matcher import SongResolver, get_strategy
from .netease import NeteaseAuth, NeteasePlaylist, NeteaseSearch
from .types import TrackResult
from .utils import parse_playlist_id

console = Console()


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="douyin-netease-import",
        description="Import a Douyin (Qishui) playlist into a NetEase Cloud Music playlist",
    )
    p.add_argument("--url", default=None, help="Douyin playlist share URL (prompted if omitted)")
    p.add_argument("--playlist-id", default=None, help="NetEase playlist ID to import into (prompted if omitted)")
    p.add_argument("--strategy", choices=["first", "exact", "fuzzy"], default=None, help="Match strategy (default: first)")
    p.add_argument("--delay", type=float, default=None, help="Pause between tracks in seconds (default: 1)")
    p.add_argument("--poll-interval", type=float, default=None, help="QR status poll interval in seconds (default: 2)")
    p.add_argument("--max-auth-retries", type=int, default=None, help="Give up login after N failed status checks")
    p.add_argument("--no-progress", action="store_true", help="Disable the progress bar")
    return p.parse_args(argv)


def apply_overrides(settings: Settings, args: argparse.Namespace) -> Settings:
    if args.strategy:
        settings.match_strategy = args.strategy
    if args.delay is not None:
        settings.import_delay = args.delay
    if args.poll_interval is not None:
        settings.poll_interval = args.poll_interval
    if args.max_auth_retries is not None:
        settings.max_auth_retries = args.max_auth_retries
    return settings


def prompt_source_url(default_url: str) -> str:
    url = input(f"Enter Douyin Playlist URL (e.g., {default_url}): ").strip()
    if not url:
        console.print("Using default URL...")
        url = default_url
    return url


def prompt_playlist_id() -> str:
    return input("Enter NetEase Playlist ID to import to: ").strip()


def main(argv: Optional[list[str]] = None) -> int:
    args = parse_args(argv)
    try:
        settings = apply_overrides(load_settings(), args)
    except ValueError as e:
        console.print(f"[red]Invalid configuration: {e}[/red]")
        return 1

    logger, log_path = setup_logging(settings.logs_dir)
    csv_path, json_path = init_summaries(settings.reports_dir)

    def record(result: TrackResult) -> None:
        write_summary_row(csv_path, json_path, result_row(result))

    try:
        strategy = get_strategy(settings.match_strategy, settings.fuzzy_threshold)
        url = args.url or prompt_source_url(settings.default_url)
        playlist_id = parse_playlist_id(args.playlist_id if args.playlist_id is not None else prompt_playlist_id())

        session = AuthSession(
            NeteaseAuth(logger=logger),
            console,
            logger,
            poll_interval=settings.poll_interval,
            max_retries=settings.max_auth_retries,
        )
        session.login()
        console.print("NetEase Login flow completed.")

        tracks = load_douyin_playlist(url, logger=logger)
        console.print(f"Found {len(tracks)} songs from Douyin.")

        resolver = SongResolver(
            NeteaseSearch(),
            strategy=strategy,
            limit=settings.search_limit,
            logger=logger,
        )
        controller = ImportController(
            resolver,
            NeteasePlaylist(),
            console,
            logger,
            pacing=FixedDelay(settings.import_delay),
            on_result=record,
            progress=not args.no_progress,
        )
        summary = controller.run(tracks, playlist_id, session)
    except (ImporterError, ValueError) as e:
        logger.debug("Fatal error", exc_info=True)
        console.print(f"[red]{type(e).__name__}: {e}[/red]")
        return 1
    except KeyboardInterrupt:
        logger.info("Interrupted by user.")
        return 1

    console.print(f"Import completed. Success: {summary.success_count}, Failed: {summary.fail_count}")
    console.print(f"Log: {log_path}")
    console.print(f"CSV: {csv_path}")
    console.print(f"JSON: {json_path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
