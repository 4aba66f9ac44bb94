"""Load gol-boards settings from a YAML file (see life.yaml)."""
from __future__ import annotations

from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

DEFAULT_DATABASE = "data/life.duckdb"


@dataclass(frozen=True)
class LifeConfig:
    database: str = DEFAULT_DATABASE
    event_log: Optional[Path] = Path("logs") / "events.log"
    default_max_steps: int = 100
    open_retry_seconds: float = 10.0


def _parse(raw: Dict[str, Any]) -> LifeConfig:
    known = {f.name for f in fields(LifeConfig)}
    unknown = set(raw) - known
    if unknown:
        raise ValueError(f"unknown config key(s): {sorted(unknown)}")

    defaults = LifeConfig()
    database = raw.get("database", defaults.database)
    if not isinstance(database, str) or not database:
        raise ValueError("database must be a non-empty string")

    event_log = raw.get("event_log", defaults.event_log)
    if event_log is not None:
        if not isinstance(event_log, (str, Path)):
            raise ValueError("event_log must be a path or null")
        event_log = Path(event_log)

    max_steps = raw.get("default_max_steps", defaults.default_max_steps)
    if isinstance(max_steps, bool) or not isinstance(max_steps, int) or max_steps < 0:
        raise ValueError("default_max_steps must be a non-negative integer")

    retry = raw.get("open_retry_seconds", defaults.open_retry_seconds)
    if isinstance(retry, bool) or not isinstance(retry, (int, float)) or retry < 0:
        raise ValueError("open_retry_seconds must be a non-negative number")

    return LifeConfig(
        database=database,
        event_log=event_log,
        default_max_steps=max_steps,
        open_retry_seconds=float(retry),
    )


def load_config(path: Optional[Path] = None) -> LifeConfig:
    """
    Read settings from `path`. With no path the built-in defaults are used;
    keys missing from the file fall back to the same defaults.
    Raises ValueError on unknown keys or badly typed values.
    """
    if path is None:
        return LifeConfig()
    raw = yaml.safe_load(Path(path).read_text(encoding="utf-8"))
    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ValueError(f"{path}: top level must be a mapping")
    return _parse(raw)
