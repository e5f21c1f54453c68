"""Start and stop rules: at most one open session, and it is always last."""

from datetime import datetime

from trackwork import store
from trackwork.config import Config
from trackwork.errors import TransitionError
from trackwork.store import Session


def open_session(sessions: list[Session]) -> Session | None:
    """Return the last session if it is still running."""
    if sessions and sessions[-1].is_open:
        return sessions[-1]
    return None


def begin(config: Config, objective: str = "", now: datetime | None = None) -> list[Session]:
    """Append a new open session and persist. Fails if one is already open."""
    sessions = store.load(config.file, debug=config.debug)
    if open_session(sessions) is not None:
        raise TransitionError("Last entry has no end. Please first correct this error")
    sessions.append(Session(start=now or store.local_now(), objective=objective))
    store.save(config.file, sessions, debug=config.debug)
    return sessions


def end_current(config: Config, objective: str = "", now: datetime | None = None) -> list[Session]:
    """Close the open session, replacing its objective, and persist."""
    sessions = store.load(config.file, debug=config.debug)
    current = open_session(sessions)
    if current is None:
        if not sessions:
            raise TransitionError("No entries yet. There was no work to track!")
        raise TransitionError("Last entry already finished. There was no work to track!")
    current.end = now or store.local_now()
    current.objective = objective
    store.save(config.file, sessions, debug=config.debug)
    return sessions
