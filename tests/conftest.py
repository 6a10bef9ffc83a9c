"""Shared test fixtures for x11hunter."""

import os
from collections.abc import Callable
from pathlib import Path

import pytest

from x11hunter import logging as xlog
from x11hunter.config import Config

ME = os.geteuid()
SOMEONE_ELSE = ME + 1000


@pytest.fixture(autouse=True)
def quiet_logging():
    """Start every test with default (non-verbose, no file) logging."""
    xlog.configure(Config())
    yield
    xlog.set_verbose(False)


def make_environ(pairs: list[tuple[str, str]], terminated: bool = True) -> bytes:
    """Build a raw environment block from (key, value) pairs."""
    block = "\0".join(f"{k}={v}" for k, v in pairs)
    if terminated and pairs:
        block += "\0"
    return block.encode()


def make_proc(root: Path, processes: dict[int, bytes | None], extras=("self", "sys")) -> Path:
    """Create a fake /proc tree under ``root``.

    Args:
        root: Directory to build the tree in
        processes: pid -> raw environ block (None = no environ file)
        extras: Non-numeric entries to add alongside the pid directories
    """
    proc = root / "proc"
    proc.mkdir()
    for name in extras:
        (proc / name).mkdir()
    for pid, environ in processes.items():
        pid_dir = proc / str(pid)
        pid_dir.mkdir()
        if environ is not None:
            (pid_dir / "environ").write_bytes(environ)
    return proc


def owners(mapping: dict[int, int], default: int = ME) -> Callable[[Path], int]:
    """Owner lookup that reads uids from ``mapping`` by pid."""

    def lookup(path: Path) -> int:
        return mapping.get(int(path.name), default)

    return lookup


@pytest.fixture
def x11_session(tmp_path: Path) -> Path:
    """A fake /proc where most processes share one X11 session."""
    session = make_environ([("HOME", "/home/me"), ("DISPLAY", ":0"), ("XAUTHORITY", "/run/xauth")])
    stray = make_environ([("DISPLAY", ":1"), ("XAUTHORITY", "/tmp/.Xauth-other")])
    headless = make_environ([("HOME", "/home/me"), ("SHELL", "/bin/sh")])
    processes: dict[int, bytes | None] = {}
    for pid in range(100, 106):
        processes[pid] = session
    processes[200] = stray
    processes[300] = headless
    return make_proc(tmp_path, processes)
