"""Centralized diagnostic logging with Rich formatting.

This module provides:
1. Icon vocabulary (Icon class namespace)
2. Level-based styling
3. Core log functions (log, info, error)
4. Domain helpers (candidate_skipped, observation, population_results, etc.)
5. Structlog configuration (configure, get_structlog)

Everything here writes to stderr. Stdout is reserved for the export line.
Console output is only shown in verbose mode, except for fatal errors.
JSON file output via structlog is separate (machine-parseable, no colors)
and only enabled when a log file is configured.
"""

from __future__ import annotations

import logging
import logging.handlers
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING

import structlog
from rich.console import Console
from rich.markup import escape

if TYPE_CHECKING:
    from x11hunter.config import Config
    from x11hunter.errors import SkipReason
    from x11hunter.population import Entry

# Rich console for human-readable diagnostics
_console = Console(stderr=True, highlight=False, emoji=False)

# Set by configure() / set_verbose()
_verbose = False

_log = structlog.get_logger()


# ─────────────────────────────────────────────────────────────────────────────
# Icons
# ─────────────────────────────────────────────────────────────────────────────


class Icon:
    """Icon vocabulary for console output."""

    OK = "[bold green]✓[/]"
    FAIL = "[bold red]✗[/]"
    SKIP = "[dim]·[/]"
    SHUFFLE = "🔀"
    SEEN = "[cyan]👁[/]"
    DECIDE = "⚖"


# ─────────────────────────────────────────────────────────────────────────────
# Level Styles
# ─────────────────────────────────────────────────────────────────────────────

_LEVEL_STYLES = {
    "info": "[bright_blue]\\[info][/]",
    "error": "[bold red]\\[err][/] ",
}


# ─────────────────────────────────────────────────────────────────────────────
# Core Functions
# ─────────────────────────────────────────────────────────────────────────────


def set_verbose(verbose: bool) -> None:
    """Turn chatty console output on or off."""
    global _verbose
    _verbose = verbose


def is_verbose() -> bool:
    return _verbose


def log(level: str, msg: str, icon: str = "") -> None:
    """Print a log message with timestamp and level to stderr.

    Args:
        level: Log level (info, error)
        msg: Message to print (can include Rich markup)
        icon: Optional icon to show after level (e.g., Icon.OK)
    """
    ts = datetime.now().strftime("%H:%M:%S")
    lvl = _LEVEL_STYLES.get(level, f"[{level}]")
    icon_part = f" {icon}" if icon else ""
    _console.print(f"[dim]{ts}[/] {lvl}{icon_part} {msg}", soft_wrap=True)


def info(msg: str, icon: str = "") -> None:
    """Log an info message (verbose only)."""
    if _verbose:
        log("info", msg, icon)


def error(msg: str, icon: str = "") -> None:
    """Log an error message. Always shown."""
    log("error", msg, icon)


# ─────────────────────────────────────────────────────────────────────────────
# Domain Helpers
# ─────────────────────────────────────────────────────────────────────────────


def _show(value: str | None) -> str:
    return "[dim]None[/]" if value is None else f"[cyan]{escape(repr(value))}[/]"


def candidate_skipped(path: Path, reason: SkipReason) -> None:
    """Log a candidate dropped from consideration."""
    _log.debug("candidate_skipped", path=str(path), reason=reason.name.lower())
    info(f"Skipping [dim]{escape(str(path))}[/] ({reason.value})", Icon.SKIP)


def candidates_found(count: int) -> None:
    """Log the size of the owned candidate pool."""
    _log.info("candidates_found", count=count)
    suffix = "" if count == 1 else "s"
    info(f"Found [cyan]{count}[/] proc{suffix}. Shuffling.", Icon.SHUFFLE)


def sample_target(target: int, population: int) -> None:
    """Log how many observations will be collected."""
    _log.info("sample_target", target=target, population=population)
    info(f"Looking for [cyan]{target}[/] of {population} processes")


def observation(path: Path, display: str, xauthority: str | None) -> None:
    """Log one (DISPLAY, XAUTHORITY) observation."""
    _log.debug("observation", path=str(path), display=display, xauthority=xauthority)
    info(
        f"[dim]{escape(str(path))}[/]: DISPLAY={_show(display)} XAUTHORITY={_show(xauthority)}",
        Icon.SEEN,
    )


def enough_seen() -> None:
    """Log early exit from the inspection loop."""
    _log.debug("enough_seen")
    info("We've seen enough. Let's decide.", Icon.DECIDE)


def population_results(entries: list[Entry]) -> None:
    """Log the ranked results of the popularity contest."""
    _log.info(
        "population_results",
        entries=[[e.display, e.xauthority, e.population] for e in entries],
    )
    if not _verbose:
        return
    info("Results of the popularity contest:")
    for n, entry in enumerate(entries, start=1):
        info(
            f"    #{n}: DISPLAY={_show(entry.display)} "
            f"XAUTHORITY={_show(entry.xauthority)} population={entry.population}"
        )


def winner_chosen(entry: Entry) -> None:
    """Log the final decision."""
    _log.info(
        "winner_chosen",
        display=entry.display,
        xauthority=entry.xauthority,
        population=entry.population,
    )
    info(f"Winner: DISPLAY={_show(entry.display)}", Icon.OK)


def fatal(msg: str) -> None:
    """Log a condition that ends the run. Always shown."""
    _log.error("hunt_failed", error=msg)
    error(escape(msg), Icon.FAIL)


# ─────────────────────────────────────────────────────────────────────────────
# Structlog Configuration
# ─────────────────────────────────────────────────────────────────────────────


def _add_source(source: str) -> structlog.types.Processor:
    """Create a processor that adds a source field to log events."""

    def processor(
        logger: structlog.types.WrappedLogger,
        method_name: str,
        event_dict: structlog.types.EventDict,
    ) -> structlog.types.EventDict:
        event_dict["source"] = source
        return event_dict

    return processor


def configure(config: Config) -> None:
    """Configure console verbosity and structlog output.

    Console output goes to stderr via Rich and is gated on verbosity.
    When ``config.log_path`` is set, structlog events are also written to
    a rotating JSON Lines file; otherwise they are discarded.

    Args:
        config: Application config
    """
    set_verbose(config.logging.verbose)

    stdlib_root = logging.getLogger()
    for handler in stdlib_root.handlers:
        handler.close()
    stdlib_root.handlers.clear()
    level = logging.DEBUG if config.logging.verbose else logging.INFO
    stdlib_root.setLevel(level)

    log_path = config.log_path
    if log_path is None:
        stdlib_root.addHandler(logging.NullHandler())
    else:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            log_path,
            maxBytes=config.logging.log_max_bytes,
            backupCount=config.logging.log_backup_count,
            encoding="utf-8",
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(
            structlog.stdlib.ProcessorFormatter(
                processor=structlog.processors.JSONRenderer(),
                foreign_pre_chain=[
                    structlog.contextvars.merge_contextvars,
                    structlog.processors.TimeStamper(fmt="iso", utc=False, key="ts"),
                    structlog.processors.add_log_level,
                    _add_source("x11hunter"),
                    structlog.processors.format_exc_info,
                ],
            )
        )
        stdlib_root.addHandler(file_handler)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.processors.TimeStamper(fmt="iso", utc=False, key="ts"),
            structlog.processors.add_log_level,
            _add_source("x11hunter"),
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )


def get_structlog() -> structlog.stdlib.BoundLogger:
    """Get a structlog logger instance for machine-parseable events."""
    return structlog.get_logger()
