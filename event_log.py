from __future__ import annotations

import json
import pathlib
import time
from typing import Any, Optional

# Default path of the board event log
LOG_PATH = pathlib.Path("logs") / "events.log"


def log_event(event: str, *, log_file: Optional[pathlib.Path] = LOG_PATH, **fields: Any) -> None:
    """Append one board lifecycle event to the log file.

    Each line is a JSON object with the keys:
      - ts: ISO timestamp (UTC)
      - event: event name, e.g. "board_created" or "convergence_exhausted"
      - any extra keyword fields (board, step, max_steps, ...)

    Passing log_file=None disables logging.
    """
    if log_file is None:
        return
    log_file = pathlib.Path(log_file)
    log_file.parent.mkdir(parents=True, exist_ok=True)
    entry = {
        "ts": time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime()),
        "event": event,
        **fields,
    }
    with log_file.open("a", encoding="utf-8") as fp:
        fp.write(json.dumps(entry, ensure_ascii=False) + "\n")
