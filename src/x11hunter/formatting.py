"""Shell-ready formatting of the chosen environment.

Output is a single line of ``NAME=VALUE`` assignments meant for
``export `x11hunter``` or ``env `x11hunter` program args...``.
"""

import string

from x11hunter.population import Entry

SAFE_CHARS = frozenset(string.ascii_letters + string.digits + "-_.:/")

# Variables that steer common toolkits to X11 when a Wayland compositor is
# also running. Applied in this order after DISPLAY/XAUTHORITY.
FORCE_X11 = (
    ("GDK_BACKEND", "x11"),
    ("QT_QPA_PLATFORM", "xcb"),
    ("CLUTTER_BACKEND", "x11"),
    ("SDL_VIDEO_DRIVER", "x11"),
    ("SDL_VIDEODRIVER", "x11"),
    ("XDG_SESSION_TYPE", "x11"),
    ("ELM_DISPLAY", "x11"),
    ("WINIT_UNIX_BACKEND", "x11"),  # obsolete, still seen in the wild
)


def escape_for_shell(value: str) -> str:
    """Return ``value`` in a form safe to paste into a Bourne shell.

    Values made only of ``[A-Za-z0-9._:/-]`` are returned unchanged. Anything
    else is single-quoted, with embedded single quotes written as ``'\\''``.
    """
    if value and all(ch in SAFE_CHARS for ch in value):
        return value
    return "'" + value.replace("'", "'\\''") + "'"


class EnvList:
    """Ordered list of shell-escaped ``NAME=VALUE`` assignments."""

    def __init__(self) -> None:
        self._assignments: list[str] = []

    def add(self, name: str, value: str) -> None:
        self._assignments.append(f"{escape_for_shell(name)}={escape_for_shell(value)}")

    def __len__(self) -> int:
        return len(self._assignments)

    def render(self) -> str:
        """Space-separated assignments, newline-terminated."""
        return " ".join(self._assignments) + "\n"


def build_env_list(winner: Entry, kill_wayland: bool = False) -> EnvList:
    """Assignments for the winning pair, plus the X11 overrides if requested."""
    env_list = EnvList()
    env_list.add("DISPLAY", winner.display)
    if winner.xauthority is not None:
        env_list.add("XAUTHORITY", winner.xauthority)
    if kill_wayland:
        for name, value in FORCE_X11:
            env_list.add(name, value)
    return env_list
