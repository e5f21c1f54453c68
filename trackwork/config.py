"""Runtime configuration threaded through store and engine calls."""

import os
from dataclasses import dataclass
from pathlib import Path

FILE_ENV_VAR = "TRACK_WORK_FILE"


@dataclass(frozen=True)
class Config:
    file: Path
    debug: bool = False


def default_file() -> Path | None:
    """Return the storage path from the environment, if set."""
    value = os.environ.get(FILE_ENV_VAR, "").strip()
    return Path(value).expanduser() if value else None
