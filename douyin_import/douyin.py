from __future__ import annotations

import logging
from typing import Any, Callable, List, Optional

from .page import extract_embedded_json, fetch_html
from .types import Track

ROUTER_DATA_MARKER = "_ROUTER_DATA ="
DEFAULT_PLAYLIST_URL = "https://qishui.douyin.com/s/iHpcChBN/"


def _get(node: Any, key: str) -> Any:
    return node.get(key) if isinstance(node, dict) else None


def _track_from_media(media: dict) -> Track:
    track = _get(_get(media, "entity"), "track") or {}
    artists = _get(track, "artists")
    if not isinstance(artists, list):
        artists = []
    names = [str(a.get("name") or "") for a in artists if isinstance(a, dict)]
    return Track(title=str(_get(track, "name") or ""), artist=", ".join(names))


def parse_playlist(doc: Any) -> List[Track]:
    """Return the playlist's tracks in page order.

    Path: loaderData -> playlist_page -> medias. Media entries whose type is
    not "track" (ads, banners) are skipped.
    """
    medias = _get(_get(_get(doc, "loaderData"), "playlist_page"), "medias")
    if not isinstance(medias, list):
        return []
    return [_track_from_media(m) for m in medias if _get(m, "type") == "track"]


def load_douyin_playlist(
    url: str,
    fetch: Callable[[str], str] = fetch_html,
    marker: str = ROUTER_DATA_MARKER,
    logger: Optional[logging.Logger] = None,
) -> List[Track]:
    log = logger or logging.getLogger(__name__)
    log.debug(f"Fetching playlist page {url}")
    html = fetch(url)
    doc = extract_embedded_json(html, marker)
    tracks = parse_playlist(doc)
    log.debug(f"Found {len(tracks)} songs from Douyin.")
    return tracks
