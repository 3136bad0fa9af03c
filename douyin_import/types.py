from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


@dataclass(frozen=True)
class Track:
    """Source track as listed on the Douyin playlist page."""
    title: str
    artist: str


@dataclass(frozen=True)
class AuthToken:
    key: str


@dataclass
class SearchCandidate:
    id: int
    name: str
    artists: List[str] = field(default_factory=list)


class AuthStatus(Enum):
    WAITING = "WAITING"
    SCANNED = "SCANNED"
    SUCCESS = "SUCCESS"
    EXPIRED = "EXPIRED"
    TRANSIENT_ERROR = "TRANSIENT_ERROR"

    @classmethod
    def from_code(cls, code: Optional[int]) -> "AuthStatus":
        return _STATUS_CODES.get(code, cls.TRANSIENT_ERROR)


# 800: expired, 801: waiting, 802: scanned, 803: success
_STATUS_CODES = {
    800: AuthStatus.EXPIRED,
    801: AuthStatus.WAITING,
    802: AuthStatus.SCANNED,
    803: AuthStatus.SUCCESS,
}


class AuthState(Enum):
    INIT = "INIT"
    KEY_CREATED = "KEY_CREATED"
    CODE_GENERATED = "CODE_GENERATED"
    WAITING = "WAITING"
    SCANNED = "SCANNED"
    SUCCESS = "SUCCESS"
    EXPIRED = "EXPIRED"


# Per-track outcome constants
ADDED = "ADDED"
ALREADY_PRESENT = "ALREADY_PRESENT"
NOT_FOUND = "NOT_FOUND"
SEARCH_FAILED = "SEARCH_FAILED"
ADD_FAILED = "ADD_FAILED"

SUCCESS_OUTCOMES = frozenset({ADDED, ALREADY_PRESENT})


@dataclass
class TrackResult:
    index: int
    track: Track
    outcome: str
    track_id: Optional[int] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.outcome in SUCCESS_OUTCOMES


@dataclass
class ImportSummary:
    success_count: int = 0
    fail_count: int = 0
    results: List[TrackResult] = field(default_factory=list)

    def record(self, result: TrackResult) -> None:
        self.results.append(result)
        if result.ok:
            self.success_count += 1
        else:
            self.fail_count += 1

    @property
    def total(self) -> int:
        return self.success_count + self.fail_count
