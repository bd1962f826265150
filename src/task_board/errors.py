"""Error kinds raised by board operations and persistence adapters."""

from __future__ import annotations


class BoardError(Exception):
    """Base class for every error the board engine raises."""

    pass


class ValidationError(BoardError, ValueError):
    """A required field is empty or a board payload breaks an invariant."""

    pass


class NotFoundError(BoardError, LookupError):
    """A referenced column or task id does not exist."""

    pass


class OutOfRangeError(BoardError, IndexError):
    """A move index falls outside the valid bounds of its column."""

    pass


class BoardIOError(BoardError, OSError):
    """The storage medium could not be read or written."""

    pass
