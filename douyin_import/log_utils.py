from __future__ import annotations

import csv
import json
import logging
from pathlib import Path
from typing import Any, Dict

from .types import TrackResult
from .utils import ensure_dir, now_timestamp_str

SUMMARY_FIELDS = ["index", "title", "artist", "decision", "track_id", "error"]


def setup_logging(logs_dir: Path = Path("logs"), console_level: int = logging.INFO) -> tuple[logging.Logger, Path]:
    """Initialize logging to console (INFO) and file per run.

    Returns (logger, log_file_path)
    """
    ts = now_timestamp_str()
    ensure_dir(logs_dir)
    log_path = logs_dir / f"import-{ts}.log"

    logger = logging.getLogger("douyin_import")
    logger.setLevel(logging.DEBUG)
    logger.handlers.clear()
    logger.propagate = False

    # Console handler
    ch = logging.StreamHandler()
    ch.setLevel(console_level)
    ch.setFormatter(logging.Formatter("%(levelname)s | %(message)s"))
    logger.addHandler(ch)

    # File handler
    fh = logging.FileHandler(log_path, encoding="utf-8")
    fh.setLevel(logging.DEBUG)
    fh.setFormatter(
        logging.Formatter(
            "%(asctime)s | %(levelname)s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    logger.addHandler(fh)

    logger.debug("Logging initialized")
    return logger, log_path


def init_summaries(reports_dir: Path = Path("reports")) -> tuple[Path, Path]:
    ts = now_timestamp_str()
    ensure_dir(reports_dir)
    csv_path = reports_dir / f"summary-{ts}.csv"
    json_path = reports_dir / f"summary-{ts}.json"
    csv_path.touch()
    json_path.touch()
    return csv_path, json_path


def _csv_write_header_if_empty(csv_path: Path, fieldnames: list[str]) -> None:
    if csv_path.stat().st_size == 0:
        with csv_path.open("w", newline="", encoding="utf-8") as f:
            csv.DictWriter(f, fieldnames=fieldnames).writeheader()


def result_row(result: TrackResult) -> Dict[str, Any]:
    return {
        "index": result.index,
        "title": result.track.title,
        "artist": result.track.artist,
        "decision": result.outcome,
        "track_id": result.track_id,
        "error": result.error,
    }


def write_summary_row(csv_path: Path, json_path: Path, row: Dict[str, Any]) -> None:
    """Append a row to CSV, and JSON as NDJSON (one JSON per line)."""
    _csv_write_header_if_empty(csv_path, SUMMARY_FIELDS)
    with csv_path.open("a", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=SUMMARY_FIELDS)
        writer.writerow({k: row.get(k) for k in SUMMARY_FIELDS})
    with json_path.open("a", encoding="utf-8") as f:
        f.write(json.dumps(row, ensure_ascii=False) + "\n")
