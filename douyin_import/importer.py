from __future__ import annotations

import logging
import time
from typing import Callable, List, Optional, Protocol, Sequence

from rich.console import Console
from rich.markup import escape
from tqdm import tqdm

from .auth import AuthSession
from .errors import InvalidPlaylistId, SearchError, TrackAlreadyPresent
from .matcher import SongResolver
from .types import (
    ADD_FAILED,
    ADDED,
    ALREADY_PRESENT,
    NOT_FOUND,
    SEARCH_FAILED,
    ImportSummary,
    Track,
    TrackResult,
)

DEFAULT_IMPORT_DELAY = 1.0
OK_CODE = 200


class PlaylistTransport(Protocol):
    def add_tracks(self, playlist_id: int, track_ids: List[int]) -> int: ...


class Pacing(Protocol):
    def wait(self) -> None: ...


class FixedDelay:
    def __init__(self, seconds: float = DEFAULT_IMPORT_DELAY, sleep: Callable[[float], None] = time.sleep) -> None:
        self.seconds = seconds
        self._sleep = sleep

    def wait(self) -> None:
        if self.seconds > 0:
            self._sleep(self.seconds)


class NoDelay:
    def wait(self) -> None:
        return None


_LABELS = {
    ADDED: "[green]Added.[/green]",
    ALREADY_PRESENT: "[cyan]Already in playlist.[/cyan]",
    NOT_FOUND: "[yellow]Not found.[/yellow]",
    SEARCH_FAILED: "[red]Search failed[/red]",
    ADD_FAILED: "[red]Add failed[/red]",
}


class ImportController:
    """Search every source track on NetEase and add the hits to one playlist.

    Per-track failures are recorded and the loop moves on; only setup errors
    (bad playlist id, failed login) escape ``run``.
    """

    def __init__(
        self,
        resolver: SongResolver,
        playlists: PlaylistTransport,
        console: Console,
        logger: logging.Logger,
        pacing: Optional[Pacing] = None,
        on_result: Optional[Callable[[TrackResult], None]] = None,
        progress: bool = False,
    ) -> None:
        self.resolver = resolver
        self.playlists = playlists
        self.console = console
        self.logger = logger
        self.pacing = pacing if pacing is not None else FixedDelay()
        self.on_result = on_result
        self.progress = progress

    def run(self, tracks: Sequence[Track], playlist_id: int, session: AuthSession) -> ImportSummary:
        if playlist_id <= 0:
            raise InvalidPlaylistId(f"Invalid playlist ID: {playlist_id}")
        session.ensure_authenticated()

        summary = ImportSummary()
        total = len(tracks)
        for i, track in enumerate(tqdm(tracks, desc="Import", disable=not self.progress), 1):
            result = self._import_one(i, track, playlist_id)
            summary.record(result)
            self._report(result, total)
            self.pacing.wait()

        self.logger.debug(f"Import completed. Success: {summary.success_count}, Failed: {summary.fail_count}")
        return summary

    def _import_one(self, index: int, track: Track, playlist_id: int) -> TrackResult:
        try:
            song_id = self.resolver.resolve(track.title, track.artist)
        except SearchError as e:
            return TrackResult(index, track, SEARCH_FAILED, error=str(e))
        if song_id is None:
            return TrackResult(index, track, NOT_FOUND)

        try:
            code = self.playlists.add_tracks(playlist_id, [song_id])
        except TrackAlreadyPresent:
            return TrackResult(index, track, ALREADY_PRESENT, track_id=song_id)
        except Exception as e:
            return TrackResult(index, track, ADD_FAILED, track_id=song_id, error=str(e))
        if code != OK_CODE:
            return TrackResult(index, track, ADD_FAILED, track_id=song_id, error=f"api code: {code}")
        return TrackResult(index, track, ADDED, track_id=song_id)

    def _report(self, result: TrackResult, total: int) -> None:
        t = result.track
        line = f"[{result.index}/{total}] Processing: {escape(t.title)} - {escape(t.artist)} ... {_LABELS[result.outcome]}"
        if result.error:
            line += f": {escape(result.error)}"
        self.console.print(line)
        self.logger.debug(f"{result.index}/{total} {t.title} - {t.artist}: {result.outcome} {result.error or ''}".rstrip())
        if self.on_result is not None:
            self.on_result(result)
