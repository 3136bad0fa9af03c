from __future__ import annotations

import logging
from typing import Callable, Dict, List, Optional, Protocol

from rapidfuzz import fuzz, utils as fuzz_utils

from .errors import SearchError
from .types import SearchCandidate
from .utils import clamp, normalize_str, remove_feat, split_artists, strip_suffixes

DEFAULT_SEARCH_LIMIT = 3

MatchStrategy = Callable[[List[SearchCandidate], str, str], Optional[SearchCandidate]]


class SearchTransport(Protocol):
    def search(self, query: str, offset: int, limit: int) -> List[SearchCandidate]: ...


def first_result(cands: List[SearchCandidate], title: str, artist: str) -> Optional[SearchCandidate]:
    # No artist check: the top hit is taken as a plausible match.
    return cands[0] if cands else None


def exact_match(cands: List[SearchCandidate], title: str, artist: str) -> Optional[SearchCandidate]:
    """First candidate whose title matches and which shares at least one artist."""
    want_title = normalize_str(strip_suffixes(title))
    want_artists = {normalize_str(a) for a in split_artists(artist)}
    for c in cands:
        if normalize_str(strip_suffixes(c.name)) != want_title:
            continue
        if not want_artists or want_artists & {normalize_str(a) for a in c.artists}:
            return c
    return None


def score_candidate(title: str, artist: str, cand: SearchCandidate) -> float:
    """Score in [0,1]: fuzzy title 0.6, fuzzy artist 0.4."""
    lt_title = strip_suffixes(title or "")
    lt_artist = remove_feat(artist or "")
    cand_title = strip_suffixes(cand.name)
    cand_artist = ", ".join(cand.artists)

    t_score = fuzz.token_set_ratio(lt_title, cand_title, processor=fuzz_utils.default_process) / 100.0 if lt_title and cand_title else 0.0
    if not lt_artist:
        return clamp(t_score, 0.0, 1.0)
    a_score = fuzz.token_set_ratio(lt_artist, cand_artist, processor=fuzz_utils.default_process) / 100.0 if cand_artist else 0.0
    return clamp(0.6 * t_score + 0.4 * a_score, 0.0, 1.0)


class FuzzyScored:
    def __init__(self, threshold: float = 0.8) -> None:
        self.threshold = threshold

    def __call__(self, cands: List[SearchCandidate], title: str, artist: str) -> Optional[SearchCandidate]:
        best = None
        best_score = -1.0
        for c in cands:
            s = score_candidate(title, artist, c)
            if s > best_score:
                best, best_score = c, s
        if best is None or best_score < self.threshold:
            return None
        return best


def get_strategy(name: str, fuzzy_threshold: float = 0.8) -> MatchStrategy:
    strategies: Dict[str, MatchStrategy] = {
        "first": first_result,
        "exact": exact_match,
        "fuzzy": FuzzyScored(fuzzy_threshold),
    }
    try:
        return strategies[name]
    except KeyError:
        raise ValueError(f"unknown match strategy {name!r} (expected one of {', '.join(strategies)})") from None


class SongResolver:
    """Map a (title, artist) pair to a NetEase song id with one search call."""

    def __init__(
        self,
        search: SearchTransport,
        strategy: MatchStrategy = first_result,
        limit: int = DEFAULT_SEARCH_LIMIT,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.search = search
        self.strategy = strategy
        self.limit = limit
        self.logger = logger or logging.getLogger(__name__)

    def resolve(self, title: str, artist: str) -> Optional[int]:
        """Return the matched song id, or None when nothing usable came back.

        Raises SearchError when the search call itself fails.
        """
        query = f"{title} {artist}".strip()
        try:
            cands = self.search.search(query, offset=0, limit=self.limit)
        except Exception as e:
            raise SearchError(f"search failed for {query!r}: {e}") from e

        picked = self.strategy(list(cands or []), title, artist)
        if picked is None or not picked.id:
            self.logger.debug(f"No match for {query!r} among {len(cands or [])} results")
            return None
        self.logger.debug(f"{query!r} -> {picked.id} {picked.name} / {', '.join(picked.artists)}")
        return picked.id
