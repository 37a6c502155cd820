# ==========================================================
# RanchBot – Configuration
#
# Features:
#   - Ranch list loaded from config.json (name, dataFile, payoutChannelId)
#   - Runtime knobs (prefix, backup dir, tracking week start)
#   - Environment overrides (RANCHBOT_CONFIG, DISCORD_TOKEN)
# ==========================================================

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

DEFAULT_CONFIG_PATH = os.getenv("RANCHBOT_CONFIG", "config.json")

DEFAULTS: Dict[str, Any] = {
    "prefix": "!",
    "trackingWeekStart": "sunday",
    "backupDir": "backups",
    "ranches": [],
}


class ConfigError(Exception):
    """Raised when config.json is missing or malformed."""


@dataclass(frozen=True)
class Ranch:
    name: str
    data_file: Optional[str] = None
    payout_channel_id: Optional[int] = None


@dataclass(frozen=True)
class BotConfig:
    prefix: str = "!"
    tracking_week_start: str = "sunday"
    backup_dir: str = "backups"
    ranches: List[Ranch] = field(default_factory=list)


def _parse_channel_id(raw: Any) -> Optional[int]:
    """Accept ints or numeric strings (Discord snowflakes are often quoted in JSON)."""
    if raw is None or raw == "":
        return None
    if isinstance(raw, bool):
        raise ConfigError(f"Invalid payoutChannelId: {raw!r}")
    if isinstance(raw, int):
        return raw
    value = str(raw).strip()
    if not value.isdigit():
        raise ConfigError(f"Invalid payoutChannelId: {raw!r}")
    return int(value)


def parse_ranch(row: Dict[str, Any]) -> Ranch:
    if not isinstance(row, dict):
        raise ConfigError(f"Ranch entry must be an object, got {type(row).__name__}")

    name = str(row.get("name") or "").strip()
    if not name:
        raise ConfigError("Ranch entry is missing a name")

    # Missing dataFile/payoutChannelId is allowed here; the payout loop skips those ranches.
    return Ranch(
        name=name,
        data_file=row.get("dataFile") or None,
        payout_channel_id=_parse_channel_id(row.get("payoutChannelId")),
    )


def parse_config(data: Dict[str, Any]) -> BotConfig:
    if not isinstance(data, dict):
        raise ConfigError("config.json must contain a JSON object")

    cfg = DEFAULTS.copy()
    cfg.update(data)

    ranches = cfg.get("ranches") or []
    if not isinstance(ranches, list):
        raise ConfigError("'ranches' must be a list")

    return BotConfig(
        prefix=str(cfg["prefix"]),
        tracking_week_start=str(cfg["trackingWeekStart"]).strip().lower(),
        backup_dir=str(cfg["backupDir"]),
        ranches=[parse_ranch(r) for r in ranches],
    )


def load_config(path: str | os.PathLike | None = None) -> BotConfig:
    """Load config.json (or the file named by RANCHBOT_CONFIG)."""
    config_path = Path(path or DEFAULT_CONFIG_PATH)
    if not config_path.exists():
        raise ConfigError(f"Config file not found: {config_path}")

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigError(f"Config file {config_path} is not valid JSON: {e}") from e

    return parse_config(data)
