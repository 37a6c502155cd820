"""Ranch statistics files and payout backups.

Stats files are plain JSON objects keyed by player mention:

    {"<@123>": {"milk": 10, "eggs": 4}}

Blocking file work runs in a worker thread so the Discord event loop keeps ticking.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
import time
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from .config import Ranch

logger = logging.getLogger("stats")

StatsRecord = Dict[str, Dict[str, Any]]


def _read_stats(path: str) -> StatsRecord:
    with open(path, "r", encoding="utf-8") as f:
        raw = f.read()

    # Empty file means "no stats yet", not a parse error.
    stats = json.loads(raw or "{}")
    if not isinstance(stats, dict):
        raise ValueError(f"Stats file {path} must contain a JSON object")
    return stats


def _write_json(path: Path, payload: Any) -> None:
    with open(path, "w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2, ensure_ascii=False)


async def read_stats(path: str) -> StatsRecord:
    """Load a ranch stats file. Raises on unreadable files and malformed JSON."""
    return await asyncio.to_thread(_read_stats, path)


async def ensure_backup_dir(backup_dir: str | os.PathLike) -> Path:
    path = Path(backup_dir)
    await asyncio.to_thread(path.mkdir, parents=True, exist_ok=True)
    return path


def backup_path(backup_dir: str | os.PathLike, ranch_name: str, epoch_ms: Optional[int] = None) -> Path:
    if epoch_ms is None:
        epoch_ms = int(time.time() * 1000)
    return Path(backup_dir) / f"payout_{ranch_name}_{epoch_ms}.json"


async def write_backup(backup_dir: str | os.PathLike, ranch_name: str, stats: StatsRecord) -> Path:
    """Write a verbatim snapshot of `stats`. The source stats file is never touched."""
    path = backup_path(backup_dir, ranch_name)
    await asyncio.to_thread(_write_json, path, stats)
    return path


async def wipe_stats(ranches: Iterable[Ranch]) -> List[str]:
    """Reset every configured stats file to an empty object.

    Returns the names of the ranches that were wiped. Ranches without a
    data file are skipped, and a failure on one file does not stop the rest.
    """
    wiped: List[str] = []
    for ranch in ranches:
        if not ranch.data_file:
            continue
        try:
            await asyncio.to_thread(_write_json, Path(ranch.data_file), {})
            wiped.append(ranch.name)
            logger.info("[%s] Stats wiped (%s)", ranch.name, ranch.data_file)
        except OSError as e:
            logger.error("[%s] Failed to wipe stats: %s", ranch.name, e)
    return wiped
