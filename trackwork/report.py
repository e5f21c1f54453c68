"""Filter sessions by month and report time worked per day or per session."""

from collections import defaultdict
from dataclasses import dataclass
from datetime import date, datetime, timedelta

import orjson
from rich import box
from rich.console import Console
from rich.table import Table
from rich.text import Text

from trackwork.store import Session, format_timestamp, local_now

console = Console(soft_wrap=True)


@dataclass(frozen=True)
class Scope:
    """Date range applied before reporting. ``delta`` is None for all time."""

    delta: int | None = 0

    @classmethod
    def month(cls, delta: int = 0) -> "Scope":
        if delta < 0:
            raise ValueError("month delta must not be negative")
        return cls(delta=delta)

    @classmethod
    def all_time(cls) -> "Scope":
        return cls(delta=None)

    @property
    def is_all_time(self) -> bool:
        return self.delta is None


# --- Filtering / aggregation ---

def shift_month(year: int, month: int, delta: int) -> tuple[int, int]:
    """Return (year, month) lying *delta* calendar months before the given one."""
    index = year * 12 + (month - 1) - delta
    shifted_year, shifted_month = divmod(index, 12)
    return shifted_year, shifted_month + 1


def max_month_delta(today: datetime | None = None) -> int:
    """Largest delta whose target month still falls in year 1 or later."""
    today = today or local_now()
    return (today.year - 1) * 12 + today.month - 1


def month_filter(sessions: list[Session], delta: int, today: datetime | None = None) -> list[Session]:
    """Keep sessions starting in the month *delta* months before the current one."""
    if delta < 0:
        raise ValueError("month delta must not be negative")
    today = today or local_now()
    year, month = shift_month(today.year, today.month, delta)
    return [s for s in sessions if s.start.year == year and s.start.month == month]


def apply_scope(sessions: list[Session], scope: Scope, now: datetime | None = None) -> list[Session]:
    if scope.is_all_time:
        return list(sessions)
    return month_filter(sessions, scope.delta, today=now)


def aggregate_by_day(sessions: list[Session], now: datetime | None = None) -> list[tuple[date, timedelta]]:
    """Sum session durations per start date; open sessions count up to *now*."""
    now = now or local_now()
    buckets: dict[date, timedelta] = defaultdict(timedelta)
    for s in sessions:
        buckets[s.start.date()] += s.duration(now)
    return sorted(buckets.items())


# --- Formatting ---

def fmt_duration(td: timedelta, seconds: bool = False) -> str:
    """Format as HH:MM, or HH:MM:SS when *seconds* is set. Hours do not wrap."""
    total = int(td.total_seconds())
    sign = "-" if total < 0 else ""
    h, rem = divmod(abs(total), 3600)
    m, s = divmod(rem, 60)
    if seconds:
        return f"{sign}{h:02d}:{m:02d}:{s:02d}"
    return f"{sign}{h:02d}:{m:02d}"


def scope_title(scope: Scope, now: datetime | None = None) -> str:
    if scope.is_all_time:
        return "All time"
    now = now or local_now()
    year, month = shift_month(now.year, now.month, scope.delta)
    return date(year, month, 1).strftime("%B %Y")


# --- Reports ---

def report_days(sessions: list[Session], title: str, now: datetime, out: Console) -> timedelta:
    """Print one row per day plus the total."""
    days = aggregate_by_day(sessions, now)

    table = Table(title=f"{title} ({len(days)} days)", title_style="bold", box=box.ROUNDED, expand=False)
    table.add_column("Date", style="white", no_wrap=True)
    table.add_column("Duration", justify="right", style="cyan", no_wrap=True)

    total = timedelta()
    for day, worked in days:
        table.add_row(day.isoformat(), fmt_duration(worked))
        total += worked

    table.add_section()
    table.add_row(Text("TOTAL", style="bold"), fmt_duration(total), style="bold")
    if len(days) > 1:
        table.add_row(Text("AVERAGE", style="dim bold"), fmt_duration(total / len(days)), style="dim")

    out.print()
    out.print(table)
    out.print()
    return total


def report_sessions(sessions: list[Session], title: str, now: datetime, out: Console) -> timedelta:
    """Print one row per session in file order plus the total."""
    table = Table(title=f"{title} ({len(sessions)} sessions)", title_style="bold", box=box.ROUNDED, expand=False)
    table.add_column("Date", style="white", no_wrap=True)
    table.add_column("Start", no_wrap=True)
    table.add_column("End", no_wrap=True)
    table.add_column("Duration", justify="right", style="cyan", no_wrap=True)
    table.add_column("Objective", style="magenta")

    total = timedelta()
    for s in sessions:
        worked = s.duration(now)
        table.add_row(
            s.start.strftime("%Y-%m-%d"),
            s.start.strftime("%H:%M"),
            s.end.strftime("%H:%M") if s.end else "",
            fmt_duration(worked),
            s.objective,
        )
        total += worked

    table.add_section()
    table.add_row(Text("TOTAL", style="bold"), "", "", fmt_duration(total), "", style="bold")

    out.print()
    out.print(table)
    out.print()
    return total


def report(
    sessions: list[Session],
    scope: Scope | None = None,
    uncompressed: bool = False,
    now: datetime | None = None,
    out: Console | None = None,
) -> timedelta:
    """Print the report for *scope* (default: current month) and return the total."""
    scope = scope or Scope()
    now = now or local_now()
    out = out or console
    selected = apply_scope(sessions, scope, now)
    title = scope_title(scope, now)
    if uncompressed:
        return report_sessions(selected, title, now, out)
    return report_days(selected, title, now, out)


def report_json(
    sessions: list[Session],
    scope: Scope | None = None,
    uncompressed: bool = False,
    now: datetime | None = None,
) -> None:
    """Output the report data as JSON for programmatic use."""
    scope = scope or Scope()
    now = now or local_now()
    selected = apply_scope(sessions, scope, now)

    output: dict = {"scope": scope_title(scope, now)}
    if uncompressed:
        output["sessions"] = [
            {
                "start": format_timestamp(s.start),
                "end": format_timestamp(s.end) if s.end else None,
                "duration_seconds": int(s.duration(now).total_seconds()),
                "objective": s.objective,
            }
            for s in selected
        ]
        total = sum((s.duration(now) for s in selected), timedelta())
    else:
        days = aggregate_by_day(selected, now)
        output["days"] = [
            {"date": day.isoformat(), "duration_seconds": int(worked.total_seconds())}
            for day, worked in days
        ]
        total = sum((worked for _, worked in days), timedelta())
    output["total_seconds"] = int(total.total_seconds())
    print(orjson.dumps(output, option=orjson.OPT_INDENT_2).decode())
