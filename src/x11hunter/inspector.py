"""Extract DISPLAY/XAUTHORITY observations from candidate processes."""

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from pathlib import Path

from x11hunter import logging as xlog
from x11hunter.environ import iter_environ
from x11hunter.errors import SkipReason
from x11hunter.procfs import Candidate

DISPLAY = "DISPLAY"
XAUTHORITY = "XAUTHORITY"

EnvironReader = Callable[[Path], bytes]


@dataclass(frozen=True)
class Observation:
    """The X11 connection details one process was started with."""

    display: str
    xauthority: str | None = None

    @property
    def key(self) -> tuple[str, str | None]:
        return (self.display, self.xauthority)


def extract_observation(
    pairs: Iterable[tuple[str, str]],
    display_filter: str | None = None,
) -> Observation | SkipReason:
    """Pick DISPLAY and XAUTHORITY out of parsed environment pairs.

    The first occurrence of each key wins and scanning stops once both have
    been seen. If ``display_filter`` is given, a DISPLAY that differs from it
    rejects the whole environment.

    Returns:
        An Observation, or the SkipReason explaining why there is none.
    """
    display: str | None = None
    xauthority: str | None = None
    for key, value in pairs:
        if key == DISPLAY and display is None:
            if display_filter is not None and value != display_filter:
                return SkipReason.WRONG_DISPLAY
            display = value
        elif key == XAUTHORITY and xauthority is None:
            xauthority = value
        if display is not None and xauthority is not None:
            break
    if display is None:
        return SkipReason.NO_DISPLAY
    return Observation(display=display, xauthority=xauthority)


def read_environ(path: Path) -> bytes:
    """Read a raw environment block in one go."""
    with open(path, "rb") as f:
        return f.read()


class ProcessInspector:
    """Reads one candidate's environment and turns it into an Observation.

    Args:
        display_filter: Only accept processes whose DISPLAY equals this.
        reader: Callable returning the raw environment block for a path.
            Defaults to reading the file from disk.
    """

    def __init__(
        self,
        display_filter: str | None = None,
        reader: EnvironReader = read_environ,
    ) -> None:
        self.display_filter = display_filter
        self._reader = reader

    def inspect(self, candidate: Candidate) -> Observation | None:
        """Return the candidate's Observation, or None if it has to be skipped."""
        try:
            block = self._reader(candidate.environ_path)
        except OSError:
            # Process exited or dropped privileges since it was listed
            xlog.candidate_skipped(candidate.path, SkipReason.UNREADABLE)
            return None

        result = extract_observation(iter_environ(block), self.display_filter)
        if isinstance(result, SkipReason):
            xlog.candidate_skipped(candidate.path, result)
            return None

        xlog.observation(candidate.path, result.display, result.xauthority)
        return result
