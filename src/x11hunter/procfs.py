"""Candidate enumeration over a /proc-style process table.

Each numerically named top-level entry of the source directory is one
candidate process. Ownership comes from the entry's st_uid, which the kernel
sets to the effective uid of the process.
"""

import os
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from pathlib import Path

from x11hunter import logging as xlog
from x11hunter.errors import NoCandidatesError, ProcSourceError, SkipReason

DEFAULT_PROC_PATH = Path("/proc")

# Maps a candidate directory to the uid that owns it. Raises OSError when the
# entry disappeared or cannot be stat'ed.
OwnerLookup = Callable[[Path], int]


@dataclass(frozen=True)
class Candidate:
    """One process considered as a source of truth for DISPLAY."""

    pid: int
    path: Path

    @property
    def environ_path(self) -> Path:
        """Path of the raw environment block for this process."""
        return self.path / "environ"


def stat_owner(path: Path) -> int:
    """Return the owning uid of a /proc entry."""
    return os.stat(path).st_uid


def _classify_name(name: str) -> SkipReason | None:
    try:
        name.encode("utf-8")
    except UnicodeEncodeError:
        return SkipReason.UNDECODABLE
    if not (name.isascii() and name.isdigit()):
        return SkipReason.NOT_NUMERIC
    return None


def list_candidates(proc_path: Path = DEFAULT_PROC_PATH) -> list[Candidate]:
    """List every numerically named entry of ``proc_path`` as a Candidate.

    Raises:
        ProcSourceError: If ``proc_path`` cannot be enumerated.
    """
    try:
        names = sorted(os.listdir(proc_path))
    except OSError as e:
        raise ProcSourceError(f"Unable to walk {proc_path}: {e.strerror or e}") from e

    candidates = []
    for name in names:
        path = Path(proc_path) / name
        reason = _classify_name(name)
        if reason is not None:
            xlog.candidate_skipped(path, reason)
            continue
        candidates.append(Candidate(pid=int(name), path=path))
    return candidates


def filter_owned(
    candidates: Iterable[Candidate],
    uid: int,
    owner_lookup: OwnerLookup = stat_owner,
) -> list[Candidate]:
    """Keep only candidates owned by ``uid``.

    A failing owner lookup means the process exited between enumeration and
    the lookup; such candidates are dropped.
    """
    owned = []
    for candidate in candidates:
        try:
            owner = owner_lookup(candidate.path)
        except OSError:
            xlog.candidate_skipped(candidate.path, SkipReason.OWNER_UNKNOWN)
            continue
        if owner != uid:
            xlog.candidate_skipped(candidate.path, SkipReason.NOT_OWNED)
            continue
        owned.append(candidate)
    return owned


def scan_candidates(
    proc_path: Path = DEFAULT_PROC_PATH,
    uid: int | None = None,
    owner_lookup: OwnerLookup = stat_owner,
) -> list[Candidate]:
    """Enumerate ``proc_path`` and return the candidates owned by ``uid``.

    ``uid`` defaults to the effective uid of the current process.

    Raises:
        ProcSourceError: If ``proc_path`` cannot be enumerated.
        NoCandidatesError: If no owned candidate remains.
    """
    if uid is None:
        uid = os.geteuid()
    owned = filter_owned(list_candidates(proc_path), uid, owner_lookup)
    if not owned:
        raise NoCandidatesError(
            "Didn't find any processes owned by this user. Nothing we can do."
        )
    xlog.candidates_found(len(owned))
    return owned
