"""Bounded random sampling of candidate processes."""

import random
from collections.abc import Sequence
from dataclasses import dataclass
from typing import TypeVar

from x11hunter.errors import InvalidBoundsError

T = TypeVar("T")


@dataclass(frozen=True)
class SamplingBounds:
    """How many candidates to look at.

    ``percent`` of the owned population is the ideal sample, kept within
    ``minimum`` and ``maximum``.
    """

    minimum: int = 10
    maximum: int = 50
    percent: int = 25

    def validate(self) -> "SamplingBounds":
        """Check the bounds are consistent, returning self for chaining.

        Raises:
            InvalidBoundsError: If any bound is negative, max < min, or
                percent > 100.
        """
        if self.minimum < 0 or self.maximum < 0:
            raise InvalidBoundsError("--min and --max must not be negative")
        if self.maximum < self.minimum:
            raise InvalidBoundsError("--max must be greater than or equal to --min")
        if not 0 <= self.percent <= 100:
            raise InvalidBoundsError("--percent must be in the range 0 to 100 inclusive")
        return self


def compute_target(n: int, bounds: SamplingBounds) -> int:
    """Return how many observations to collect from a population of ``n``.

    ``percent`` of ``n`` is rounded half up using integer arithmetic
    (``(n * percent + 50) // 100``), clamped to ``[minimum, maximum]``, and
    finally capped at ``n``: a population smaller than ``minimum`` is used
    in full.

    >>> compute_target(10, SamplingBounds(0, 50, 25))
    3
    >>> compute_target(9, SamplingBounds(0, 50, 25))
    2
    """
    ideal = (n * bounds.percent + 50) // 100
    target = max(min(ideal, bounds.maximum), bounds.minimum)
    return min(target, n)


class Sampler:
    """Uniform sampling without replacement.

    The randomness source is injectable so tests can pin the permutation.
    """

    def __init__(self, rng: random.Random | None = None) -> None:
        self._rng = rng if rng is not None else random.Random()

    def shuffle(self, candidates: Sequence[T]) -> list[T]:
        """Return a uniformly shuffled copy of ``candidates``."""
        shuffled = list(candidates)
        self._rng.shuffle(shuffled)
        return shuffled

    def sample(self, candidates: Sequence[T], bounds: SamplingBounds) -> list[T]:
        """Return a random subset of ``candidates`` sized by ``bounds``."""
        target = compute_target(len(candidates), bounds)
        return self.shuffle(candidates)[:target]
