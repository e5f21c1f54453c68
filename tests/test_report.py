import io
from datetime import date, timedelta

import orjson
import pytest
from rich.console import Console

from conftest import at
from trackwork.report import (
    Scope,
    aggregate_by_day,
    fmt_duration,
    max_month_delta,
    month_filter,
    report,
    report_json,
    scope_title,
    shift_month,
)
from trackwork.store import Session

NOW = at(2026, 3, 3, 10, 15)

SESSIONS = [
    Session(at(2026, 2, 27, 9, 0), at(2026, 2, 27, 17, 0), "february"),
    Session(at(2026, 3, 2, 9, 0), at(2026, 3, 2, 12, 30), "morning"),
    Session(at(2026, 3, 2, 13, 0), at(2026, 3, 2, 14, 0), "afternoon"),
    Session(at(2026, 3, 3, 9, 0), None, "running"),
]


def render(**kwargs):
    buf = io.StringIO()
    total = report(SESSIONS, now=NOW, out=Console(file=buf, width=120), **kwargs)
    return total, buf.getvalue()


@pytest.mark.parametrize(
    "year, month, delta, expected",
    [
        (2026, 3, 0, (2026, 3)),
        (2026, 3, 3, (2025, 12)),
        (2026, 1, 1, (2025, 12)),
        (2026, 1, 12, (2025, 1)),
        (2026, 1, 13, (2024, 12)),
        (2026, 12, 11, (2026, 1)),
    ],
)
def test_shift_month(year, month, delta, expected):
    assert shift_month(year, month, delta) == expected


def test_month_filter_delta_13_in_january():
    sessions = [
        Session(at(2024, 12, 5, 9, 0), at(2024, 12, 5, 10, 0)),
        Session(at(2025, 12, 5, 9, 0), at(2025, 12, 5, 10, 0)),
        Session(at(2024, 11, 30, 9, 0), at(2024, 11, 30, 10, 0)),
    ]
    assert month_filter(sessions, 13, today=at(2026, 1, 15)) == [sessions[0]]


def test_month_filter_current_month():
    kept = month_filter(SESSIONS, 0, today=NOW)
    assert [s.objective for s in kept] == ["morning", "afternoon", "running"]


def test_month_filter_rejects_negative_delta():
    with pytest.raises(ValueError):
        month_filter(SESSIONS, -1, today=NOW)
    with pytest.raises(ValueError):
        Scope.month(-1)


def test_aggregate_same_day_sums_durations():
    sessions = [
        Session(at(2026, 3, 3, 7, 0), at(2026, 3, 3, 8, 0)),
        Session(at(2026, 3, 3, 8, 30), at(2026, 3, 3, 8, 45)),
        Session(at(2026, 3, 3, 9, 0), None),
    ]
    assert aggregate_by_day(sessions, now=NOW) == [
        (date(2026, 3, 3), timedelta(hours=2, minutes=30)),
    ]


def test_aggregate_groups_by_start_date():
    days = aggregate_by_day(SESSIONS, now=NOW)
    assert [d for d, _ in days] == [date(2026, 2, 27), date(2026, 3, 2), date(2026, 3, 3)]
    assert days[1][1] == timedelta(hours=4, minutes=30)


def test_fmt_duration():
    assert fmt_duration(timedelta(hours=1, minutes=5, seconds=9)) == "01:05"
    assert fmt_duration(timedelta(hours=1, minutes=5, seconds=9), seconds=True) == "01:05:09"
    assert fmt_duration(timedelta(hours=30)) == "30:00"
    assert fmt_duration(timedelta(minutes=-3)) == "-00:03"


def test_compressed_report_current_month():
    total, out = render()
    assert total == timedelta(hours=5, minutes=45)
    assert "March 2026" in out
    assert "2026-03-02" in out and "04:30" in out
    assert "2026-03-03" in out and "01:15" in out
    assert "2026-02-27" not in out
    assert "TOTAL" in out and "05:45" in out


def test_uncompressed_report_lists_sessions():
    total, out = render(scope=Scope.month(0), uncompressed=True)
    assert total == timedelta(hours=5, minutes=45)
    assert "morning" in out and "afternoon" in out and "running" in out
    assert "12:30" in out
    assert "february" not in out


def test_all_time_and_previous_month():
    total, out = render(scope=Scope.all_time())
    assert total == timedelta(hours=13, minutes=45)
    assert "All time" in out

    total, out = render(scope=Scope.month(1))
    assert total == timedelta(hours=8)
    assert "February 2026" in out


def test_report_json(capsys):
    report_json(SESSIONS, Scope.month(0), now=NOW)
    data = orjson.loads(capsys.readouterr().out)
    assert data["days"] == [
        {"date": "2026-03-02", "duration_seconds": 16200},
        {"date": "2026-03-03", "duration_seconds": 4500},
    ]
    assert data["total_seconds"] == 20700


def test_report_json_uncompressed(capsys):
    report_json(SESSIONS, Scope.all_time(), uncompressed=True, now=NOW)
    data = orjson.loads(capsys.readouterr().out)
    assert len(data["sessions"]) == 4
    assert data["sessions"][-1]["end"] is None
    assert data["sessions"][-1]["duration_seconds"] == 4500


def test_max_month_delta_reaches_year_one():
    today = at(2026, 3, 3)
    limit = max_month_delta(today)
    assert shift_month(2026, 3, limit) == (1, 1)
    assert scope_title(Scope.month(limit), today).startswith("January ")
