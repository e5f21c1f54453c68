"""Errors surfaced to the command line."""


class TrackError(Exception):
    """Base class for failures reported to the user with a non-zero exit."""


class StoreError(TrackError):
    """The storage file could not be read or written."""


class TransitionError(TrackError):
    """A session was started while one is open, or stopped while none is."""
