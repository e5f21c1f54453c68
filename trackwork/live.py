"""Live display of the running session, stopped by Ctrl-C.

Two producers feed one queue: a ticker thread pushes ``TICK`` once a second
and the SIGINT handler pushes ``STOP``. The display loop blocks on the queue
and handles events in arrival order. ``SimpleQueue.put`` is reentrant, so the
signal handler may call it directly.
"""

import queue
import signal
import threading
from collections.abc import Callable
from datetime import datetime

from rich.console import Console
from rich.live import Live
from rich.text import Text

from trackwork import sessions as engine
from trackwork import store
from trackwork.config import Config
from trackwork.report import console, fmt_duration, report

TICK = "tick"
STOP = "stop"


class EventSource:
    """Install the ticker thread and SIGINT handler for the duration of a block."""

    def __init__(self, interval: float = 1.0):
        self.interval = interval
        self.events: queue.SimpleQueue[str] = queue.SimpleQueue()
        self._halt = threading.Event()
        self._thread: threading.Thread | None = None
        self._previous_handler = None

    def _tick_loop(self) -> None:
        while not self._halt.wait(self.interval):
            self.events.put(TICK)

    def _on_sigint(self, signum, frame) -> None:
        self.events.put(STOP)

    def __enter__(self) -> "queue.SimpleQueue[str]":
        self._previous_handler = signal.signal(signal.SIGINT, self._on_sigint)
        self._thread = threading.Thread(target=self._tick_loop, name="trackwork-ticker", daemon=True)
        self._thread.start()
        return self.events

    def __exit__(self, *exc) -> None:
        self._halt.set()
        if self._thread is not None:
            self._thread.join()
        signal.signal(signal.SIGINT, self._previous_handler)


def elapsed_line(start: datetime, now: datetime) -> Text:
    return Text(f"Duration: {fmt_duration(now - start, seconds=True)}", style="bold cyan")


def watch(events: "queue.SimpleQueue[str]", start: datetime, clock: Callable[[], datetime], out: Console) -> None:
    """Redraw the elapsed time on every TICK until the first STOP."""
    with Live(elapsed_line(start, clock()), console=out, auto_refresh=False) as live:
        while True:
            event = events.get()
            if event == STOP:
                break
            live.update(elapsed_line(start, clock()), refresh=True)


def adopt_or_begin(config: Config, clock: Callable[[], datetime], out: Console) -> datetime:
    """Return the start of the open session, starting one if none is open."""
    current = engine.open_session(store.load(config.file, debug=config.debug))
    if current is not None:
        out.print(f"Tracking work started at {current.start:%Y-%m-%d %H:%M}")
        return current.start
    start = clock()
    out.print(f"Tracking work starting now {start:%Y-%m-%d %H:%M}")
    engine.begin(config, "", now=start)
    return start


def run_live(
    config: Config,
    objective: str = "",
    events: "queue.SimpleQueue[str] | None" = None,
    out: Console | None = None,
    clock: Callable[[], datetime] = store.local_now,
) -> None:
    """Adopt or start a session, display it live, and end it on interrupt.

    The ticker and SIGINT handler are installed before the session is adopted
    or started, so an early Ctrl-C is queued rather than lost. When *events*
    is given nothing is installed and the caller supplies every event.
    """
    out = out or console
    if events is None:
        with EventSource() as produced:
            start = adopt_or_begin(config, clock, out)
            watch(produced, start, clock, out)
    else:
        start = adopt_or_begin(config, clock, out)
        watch(events, start, clock, out)

    out.print("Tracking finished")
    now = clock()
    sessions = engine.end_current(config, objective, now=now)
    report(sessions, now=now, out=out)
