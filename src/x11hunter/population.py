"""Popularity contest over (DISPLAY, XAUTHORITY) observations."""

from collections.abc import Iterable
from dataclasses import dataclass

from x11hunter.errors import NoDisplayFoundError
from x11hunter.inspector import Observation

PairKey = tuple[str, str | None]


@dataclass(frozen=True)
class Entry:
    """One distinct (display, xauthority) pair and how often it was seen."""

    display: str
    xauthority: str | None
    population: int


class PopulationTable:
    """Frequency table of observed (display, xauthority) pairs.

    The absent-XAUTHORITY variant is a separate key from any present value.
    Keys remember the order in which they were first observed; ranking is a
    stable sort on count, so equal counts keep first-observed order.
    """

    def __init__(self) -> None:
        self._counts: dict[PairKey, int] = {}
        self.total = 0

    def add(self, observation: Observation) -> None:
        """Count one observation."""
        key = observation.key
        self._counts[key] = self._counts.get(key, 0) + 1
        self.total += 1

    def __len__(self) -> int:
        return len(self._counts)

    def __contains__(self, key: object) -> bool:
        return key in self._counts

    def count(self, display: str, xauthority: str | None = None) -> int:
        """Return the population of one pair (0 if never seen)."""
        return self._counts.get((display, xauthority), 0)

    def ranked(self) -> list[Entry]:
        """All entries, most popular first."""
        entries = [Entry(d, x, n) for (d, x), n in self._counts.items()]
        return sorted(entries, key=lambda e: e.population, reverse=True)

    def winner(self) -> Entry:
        """The most popular entry.

        Raises:
            NoDisplayFoundError: If nothing has been observed.
        """
        if not self._counts:
            raise NoDisplayFoundError("Didn't find DISPLAY in any processes.")
        return self.ranked()[0]


def aggregate(observations: Iterable[Observation]) -> PopulationTable:
    """Build a PopulationTable from a stream of observations."""
    table = PopulationTable()
    for observation in observations:
        table.add(observation)
    return table
