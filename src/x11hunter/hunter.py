"""The hunt: enumerate, filter, sample, inspect, aggregate, select.

One straight pass with no retries. Everything it reads is local OS state
that would not change by asking again within the same run.
"""

import random
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path

from x11hunter import logging as xlog
from x11hunter.config import Config
from x11hunter.inspector import EnvironReader, Observation, ProcessInspector, read_environ
from x11hunter.population import Entry, PopulationTable, aggregate
from x11hunter.procfs import OwnerLookup, scan_candidates, stat_owner
from x11hunter.sampler import Sampler, SamplingBounds, compute_target


@dataclass(frozen=True)
class HuntSettings:
    """Everything a hunt needs to know, already merged from file and flags."""

    bounds: SamplingBounds = SamplingBounds()
    proc_path: Path = Path("/proc")
    display_filter: str | None = None

    @classmethod
    def from_config(cls, config: Config) -> "HuntSettings":
        """Build settings from a Config, validating sampling bounds.

        Raises:
            InvalidBoundsError: If the sampling bounds are inconsistent.
        """
        return cls(
            bounds=config.sampling.bounds(),
            proc_path=config.proc_path,
            display_filter=config.display_filter,
        )


@dataclass(frozen=True)
class HuntResult:
    """Outcome of a successful hunt."""

    winner: Entry
    table: PopulationTable
    target: int
    candidate_count: int
    inspected: int


def hunt(
    settings: HuntSettings,
    *,
    rng: random.Random | None = None,
    uid: int | None = None,
    owner_lookup: OwnerLookup = stat_owner,
    reader: EnvironReader = read_environ,
) -> HuntResult:
    """Find the most popular (DISPLAY, XAUTHORITY) pair among the user's processes.

    Candidates are walked in a uniformly random order. Only candidates that
    yield an observation count towards the sample target; the walk stops as
    soon as the target is met or the pool runs out.

    Raises:
        InvalidBoundsError: If the sampling bounds are inconsistent.
        ProcSourceError: If the process table cannot be enumerated.
        NoCandidatesError: If the user owns no processes.
        NoDisplayFoundError: If no inspected process had a matching DISPLAY.
    """
    bounds = settings.bounds.validate()
    candidates = scan_candidates(settings.proc_path, uid=uid, owner_lookup=owner_lookup)

    target = compute_target(len(candidates), bounds)
    xlog.sample_target(target, len(candidates))

    inspector = ProcessInspector(display_filter=settings.display_filter, reader=reader)
    inspected = 0

    def observations() -> Iterator[Observation]:
        nonlocal inspected
        seen = 0
        for candidate in Sampler(rng).shuffle(candidates):
            if seen >= target:
                xlog.enough_seen()
                return
            inspected += 1
            observation = inspector.inspect(candidate)
            if observation is not None:
                seen += 1
                yield observation

    table = aggregate(observations())

    ranked = table.ranked()
    xlog.population_results(ranked)
    winner = table.winner()
    xlog.winner_chosen(winner)
    return HuntResult(
        winner=winner,
        table=table,
        target=target,
        candidate_count=len(candidates),
        inspected=inspected,
    )
