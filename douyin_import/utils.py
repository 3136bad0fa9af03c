from __future__ import annotations

import re
from datetime import datetime
from pathlib import Path

from tenacity import retry, stop_after_attempt, wait_random_exponential

from .errors import InvalidPlaylistId


def now_timestamp_str() -> str:
    return datetime.now().strftime("%Y%m%d_%H%M%S")


def ensure_dir(path: Path) -> None:
    path.mkdir(parents=True, exist_ok=True)


_feat_re = re.compile(r"\b(feat\.|ft\.)\b.*", re.IGNORECASE)
_paren_re = re.compile(r"\s*[\[(（][^\])）]*(remaster|live|edit|version|伴奏|现场)[^\])）]*[\])）]", re.IGNORECASE)
_brackets_re = re.compile(r"\s*[\[(（].*?[\])）]", re.IGNORECASE)
_ws_re = re.compile(r"\s+")


def strip_suffixes(text: str) -> str:
    """Remove common suffixes like (Live), (Remastered 2011), （伴奏）."""
    if not text:
        return text
    t = _paren_re.sub("", text)
    t = _brackets_re.sub("", t)
    return _ws_re.sub(" ", t).strip()


def remove_feat(text: str) -> str:
    if not text:
        return text
    return _feat_re.sub("", text).strip()


def normalize_str(s: str | None) -> str:
    return _ws_re.sub(" ", (s or "")).strip().casefold()


def split_artists(artist: str | None) -> list[str]:
    return [a.strip() for a in re.split(r"[,/&、]", artist or "") if a.strip()]


def clamp(v: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, v))


def parse_playlist_id(value: str | int | None) -> int:
    """Parse an operator-supplied NetEase playlist id; zero or garbage is rejected."""
    if isinstance(value, int):
        pid = value
    else:
        text = (value or "").strip()
        if not text.isdigit():
            raise InvalidPlaylistId(f"Invalid playlist ID: {value!r}")
        pid = int(text)
    if pid <= 0:
        raise InvalidPlaylistId(f"Invalid playlist ID: {value!r}")
    return pid


@retry(reraise=True, stop=stop_after_attempt(3), wait=wait_random_exponential(multiplier=1, max=10))
def call_with_retries(func, *args, **kwargs):
    """Call a NetEase API function, retrying with exponential backoff and jitter.

    The last exception is re-raised once the attempts are used up.
    """
    return func(*args, **kwargs)
