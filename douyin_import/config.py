from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from .auth import DEFAULT_POLL_INTERVAL
from .douyin import DEFAULT_PLAYLIST_URL
from .importer import DEFAULT_IMPORT_DELAY
from .matcher import DEFAULT_SEARCH_LIMIT

ENV_PREFIX = "DOUYIN_IMPORT_"


@dataclass
class Settings:
    default_url: str = DEFAULT_PLAYLIST_URL
    poll_interval: float = DEFAULT_POLL_INTERVAL
    import_delay: float = DEFAULT_IMPORT_DELAY
    search_limit: int = DEFAULT_SEARCH_LIMIT
    match_strategy: str = "first"
    fuzzy_threshold: float = 0.8
    max_auth_retries: Optional[int] = None
    logs_dir: Path = Path("logs")
    reports_dir: Path = Path("reports")


def _load_env() -> None:
    # Load .env if present
    load_dotenv(override=False)


def _env(name: str) -> Optional[str]:
    v = os.getenv(ENV_PREFIX + name)
    return v.strip() if v and v.strip() else None


def load_settings() -> Settings:
    """Build Settings from defaults overridden by DOUYIN_IMPORT_* variables.

    Recognized: DEFAULT_URL, POLL_INTERVAL, DELAY, SEARCH_LIMIT, STRATEGY,
    FUZZY_THRESHOLD, MAX_AUTH_RETRIES (empty or "unlimited" = no cap),
    LOGS_DIR, REPORTS_DIR.
    """
    _load_env()
    s = Settings()
    if _env("DEFAULT_URL"):
        s.default_url = _env("DEFAULT_URL")
    if _env("POLL_INTERVAL"):
        s.poll_interval = float(_env("POLL_INTERVAL"))
    if _env("DELAY"):
        s.import_delay = float(_env("DELAY"))
    if _env("SEARCH_LIMIT"):
        s.search_limit = int(_env("SEARCH_LIMIT"))
    if _env("STRATEGY"):
        s.match_strategy = _env("STRATEGY").lower()
    if _env("FUZZY_THRESHOLD"):
        s.fuzzy_threshold = float(_env("FUZZY_THRESHOLD"))
    retries = _env("MAX_AUTH_RETRIES")
    if retries and retries.lower() != "unlimited":
        s.max_auth_retries = int(retries)
    if _env("LOGS_DIR"):
        s.logs_dir = Path(_env("LOGS_DIR"))
    if _env("REPORTS_DIR"):
        s.reports_dir = Path(_env("REPORTS_DIR"))
    return s
