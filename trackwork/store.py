"""Read and rewrite the CSV file holding all work sessions."""

import csv
import sys
from dataclasses import dataclass
from datetime import datetime, timedelta
from pathlib import Path

from trackwork.errors import StoreError

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S %z"
HEADER = ["Start", "End", "Objective"]


@dataclass
class Session:
    start: datetime
    end: datetime | None = None
    objective: str = ""

    @property
    def is_open(self) -> bool:
        return self.end is None

    def duration(self, now: datetime | None = None) -> timedelta:
        """Elapsed time, measured against *now* while the session is open."""
        end = self.end or now or local_now()
        return end - self.start


def local_now() -> datetime:
    """Current wall-clock time with the system UTC offset, whole seconds."""
    return datetime.now().astimezone().replace(microsecond=0)


def format_timestamp(dt: datetime) -> str:
    return dt.strftime(TIMESTAMP_FORMAT)


def parse_timestamp(text: str) -> datetime:
    return datetime.strptime(text.strip(), TIMESTAMP_FORMAT)


def decodable(row: list[str]) -> bool:
    """False if any field carries bytes that were not valid UTF-8."""
    try:
        "".join(row).encode("utf-8")
    except UnicodeEncodeError:
        return False
    return True


def parse_row(row: list[str]) -> Session | None:
    """Convert one CSV row to a Session, or None if the row is malformed."""
    if not row or not row[0].strip() or not decodable(row):
        return None
    try:
        start = parse_timestamp(row[0])
        end_text = row[1].strip() if len(row) > 1 else ""
        end = parse_timestamp(end_text) if end_text else None
    except ValueError:
        return None
    objective = row[2] if len(row) > 2 else ""
    return Session(start=start, end=end, objective=objective)


def load(path: Path, debug: bool = False) -> list[Session]:
    """Load all sessions in file order. A missing file holds no sessions.

    Malformed rows are dropped with a warning on stderr; they will not be
    written back by the next save.
    """
    if not path.exists():
        return []

    sessions: list[Session] = []
    try:
        # undecodable bytes survive as surrogates so parse_row can skip just that row
        with open(path, newline="", encoding="utf-8", errors="surrogateescape") as f:
            reader = csv.reader(f)
            next(reader, None)  # header
            for row in reader:
                if debug:
                    print(row)
                if not row:
                    continue
                session = parse_row(row)
                if session is None:
                    print(
                        f"Warning: skipping malformed row {reader.line_num} in {path}",
                        file=sys.stderr,
                    )
                    continue
                sessions.append(session)
    except (OSError, csv.Error) as e:
        raise StoreError(f"Storage file could not be read: {path} ({e})") from e

    return sessions


def save(path: Path, sessions: list[Session], debug: bool = False) -> None:
    """Truncate *path* and write the header plus one row per session."""
    if debug:
        for session in sessions:
            print(session)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", newline="", encoding="utf-8") as f:
            writer = csv.writer(f)
            writer.writerow(HEADER)
            for session in sessions:
                writer.writerow([
                    format_timestamp(session.start),
                    format_timestamp(session.end) if session.end else "",
                    session.objective,
                ])
    except OSError as e:
        raise StoreError(f"Storage file could not be written: {path} ({e})") from e
