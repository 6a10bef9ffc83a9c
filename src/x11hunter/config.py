"""Configuration system for x11hunter."""

import os
from dataclasses import dataclass, field, fields, is_dataclass
from pathlib import Path

import tomlkit

from x11hunter.errors import InvalidBoundsError
from x11hunter.sampler import SamplingBounds


@dataclass
class SamplingConfig:
    """How many of the user's processes to look at."""

    min: int = 10  # Minimum number of processes to look at
    max: int = 50  # Maximum number of processes to look at
    percent: int = 25  # Ideal percentage of owned processes to look at

    def bounds(self) -> SamplingBounds:
        """Return validated SamplingBounds for these settings.

        Raises:
            InvalidBoundsError: If the settings are inconsistent.
        """
        return SamplingBounds(minimum=self.min, maximum=self.max, percent=self.percent).validate()


@dataclass
class SourceConfig:
    """Where candidate processes come from."""

    proc_path: str = "/proc"


@dataclass
class OutputConfig:
    """What ends up on stdout."""

    display: str = ""  # Only accept processes using this DISPLAY ("" = any)
    kill_wayland: bool = False  # Append variables forcing X11 over Wayland


@dataclass
class LoggingConfig:
    """Diagnostic output configuration."""

    verbose: bool = False  # Chatty progress on stderr
    log_file: str = ""  # JSON Lines event log ("" = disabled)
    log_max_bytes: int = 1024 * 1024  # Max log file size (1MB)
    log_backup_count: int = 2  # Number of backup log files to keep


def _dataclass_to_table(obj: object) -> tomlkit.items.Table:
    """Convert a dataclass instance to a tomlkit Table recursively."""
    table = tomlkit.table()
    for f in fields(obj):  # type: ignore[arg-type]
        value = getattr(obj, f.name)
        if is_dataclass(value) and not isinstance(value, type):
            table.add(f.name, _dataclass_to_table(value))
        else:
            table.add(f.name, value)
    return table


def _config_home() -> Path:
    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg)
    return Path.home() / ".config"


@dataclass
class Config:
    """Main configuration container."""

    sampling: SamplingConfig = field(default_factory=SamplingConfig)
    source: SourceConfig = field(default_factory=SourceConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @property
    def config_dir(self) -> Path:
        """Configuration directory."""
        return _config_home() / "x11hunter"

    @property
    def config_path(self) -> Path:
        """Path to config file."""
        return self.config_dir / "config.toml"

    @property
    def proc_path(self) -> Path:
        """Root of the candidate source."""
        return Path(self.source.proc_path)

    @property
    def display_filter(self) -> str | None:
        """DISPLAY value to insist on, or None to accept any."""
        return self.output.display or None

    @property
    def log_path(self) -> Path | None:
        """JSON event log path, or None when file logging is off."""
        if not self.logging.log_file:
            return None
        return Path(self.logging.log_file).expanduser()

    def save(self, path: Path | None = None) -> None:
        """Save config to TOML file."""
        path = path or self.config_path
        path.parent.mkdir(parents=True, exist_ok=True)

        doc = tomlkit.document()
        for name in ("sampling", "source", "output", "logging"):
            doc.add(name, _dataclass_to_table(getattr(self, name)))
            doc.add(tomlkit.nl())

        path.write_text(tomlkit.dumps(doc))

    @classmethod
    def load(cls, path: Path | None = None) -> "Config":
        """Load config from TOML file, returning defaults for missing values.

        All defaults come from the dataclass definitions, so Config() and
        Config.load() of a missing file are identical.

        Raises:
            ValueError: If the file cannot be parsed or holds invalid values.
        """
        defaults = cls()
        path = path or defaults.config_path
        if not path.exists():
            return defaults

        try:
            with open(path) as f:
                data = tomlkit.load(f)
        except tomlkit.exceptions.TOMLKitError as e:
            raise ValueError(f"Failed to parse config file {path}: {e}") from e

        return cls(
            sampling=_load_sampling_config(_section(data, "sampling")),
            source=_load_source_config(_section(data, "source")),
            output=_load_output_config(_section(data, "output")),
            logging=_load_logging_config(_section(data, "logging")),
        )


def _section(data: dict, name: str) -> dict:
    section = data.get(name, {})
    if not isinstance(section, dict):
        raise ValueError(f"[{name}] must be a table, got {section!r}")
    return section


def _expect(value: object, kind: type, name: str) -> None:
    # bool is an int subclass; refuse it where a number is wanted
    if not isinstance(value, kind) or (kind is int and isinstance(value, bool)):
        raise ValueError(f"{name} must be {kind.__name__}, got {value!r}")


def _load_sampling_config(data: dict) -> SamplingConfig:
    """Load sampling config from TOML data, using dataclass defaults for missing fields."""
    d = SamplingConfig()
    cfg = SamplingConfig(
        min=data.get("min", d.min),
        max=data.get("max", d.max),
        percent=data.get("percent", d.percent),
    )
    for name in ("min", "max", "percent"):
        _expect(getattr(cfg, name), int, f"sampling.{name}")
    try:
        cfg.bounds()
    except InvalidBoundsError as e:
        raise ValueError(f"Invalid [sampling] section: {e}") from e
    return cfg


def _load_source_config(data: dict) -> SourceConfig:
    """Load source config from TOML data."""
    d = SourceConfig()
    proc_path = data.get("proc_path", d.proc_path)
    _expect(proc_path, str, "source.proc_path")
    return SourceConfig(proc_path=str(proc_path))


def _load_output_config(data: dict) -> OutputConfig:
    """Load output config from TOML data."""
    d = OutputConfig()
    display = data.get("display", d.display)
    kill_wayland = data.get("kill_wayland", d.kill_wayland)
    _expect(display, str, "output.display")
    _expect(kill_wayland, bool, "output.kill_wayland")
    return OutputConfig(display=str(display), kill_wayland=bool(kill_wayland))


def _load_logging_config(data: dict) -> LoggingConfig:
    """Load logging config from TOML data."""
    d = LoggingConfig()
    cfg = LoggingConfig(
        verbose=data.get("verbose", d.verbose),
        log_file=data.get("log_file", d.log_file),
        log_max_bytes=data.get("log_max_bytes", d.log_max_bytes),
        log_backup_count=data.get("log_backup_count", d.log_backup_count),
    )
    _expect(cfg.verbose, bool, "logging.verbose")
    _expect(cfg.log_file, str, "logging.log_file")
    _expect(cfg.log_max_bytes, int, "logging.log_max_bytes")
    _expect(cfg.log_backup_count, int, "logging.log_backup_count")
    if cfg.log_max_bytes < 0 or cfg.log_backup_count < 0:
        raise ValueError("logging.log_max_bytes and logging.log_backup_count must be >= 0")
    return cfg
