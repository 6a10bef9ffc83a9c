"""Exception hierarchy and skip reasons for x11hunter.

Fatal conditions raise a HuntError subclass and abort the run.
Per-candidate problems are never raised; they map to a SkipReason instead.
"""

from enum import Enum


class HuntError(Exception):
    """Base class for conditions that end a hunt without an answer."""


class InvalidBoundsError(HuntError, ValueError):
    """Sampling bounds are inconsistent (max < min, percent > 100, ...)."""


class ProcSourceError(HuntError):
    """The candidate source could not be enumerated at all."""


class NoCandidatesError(HuntError):
    """No processes owned by the invoking user were found."""


class NoDisplayFoundError(HuntError):
    """No sampled process carried a (matching) DISPLAY."""


class SkipReason(Enum):
    """Why a candidate was excluded from the popularity contest."""

    NOT_NUMERIC = "non-digit chars in filename"
    UNDECODABLE = "non-Unicode chars in filename"
    OWNER_UNKNOWN = "owner lookup failed"
    NOT_OWNED = "not my process"
    UNREADABLE = "vanished or inaccessible"
    NO_DISPLAY = "no DISPLAY"
    WRONG_DISPLAY = "wrong DISPLAY"
