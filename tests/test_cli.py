"""Tests for CLI commands."""

import shlex
from pathlib import Path

import pytest
import structlog
from click.testing import CliRunner

from x11hunter.cli import main
from x11hunter.formatting import FORCE_X11
from tests.conftest import make_environ, make_proc


@pytest.fixture
def runner() -> CliRunner:
    """Create a CLI test runner."""
    return CliRunner()


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch, tmp_path: Path) -> Path:
    """Point the default config location at an empty temp directory."""
    config_home = tmp_path / "config-home"
    monkeypatch.setenv("XDG_CONFIG_HOME", str(config_home))
    return config_home / "x11hunter" / "config.toml"


def _assignments(output: str) -> dict[str, str]:
    return dict(word.split("=", 1) for word in shlex.split(output))


class TestHuntCommand:
    """Tests for the bare x11hunter invocation."""

    def test_prints_export_line(self, runner: CliRunner, x11_session: Path) -> None:
        """The winning pair is printed as shell assignments on stdout."""
        result = runner.invoke(main, ["--proc-path", str(x11_session), "--min", "8"])

        assert result.exit_code == 0, result.output
        assert result.stdout == "DISPLAY=:0 XAUTHORITY=/run/xauth\n"

    def test_display_filter(self, runner: CliRunner, x11_session: Path) -> None:
        """--display restricts the contest to one display."""
        result = runner.invoke(
            main, ["--proc-path", str(x11_session), "--min", "8", "--display", ":1"]
        )

        assert result.exit_code == 0
        assert _assignments(result.stdout) == {
            "DISPLAY": ":1",
            "XAUTHORITY": "/tmp/.Xauth-other",
        }

    def test_kill_wayland(self, runner: CliRunner, x11_session: Path) -> None:
        """--kill-wayland appends the X11 overrides."""
        result = runner.invoke(main, ["--proc-path", str(x11_session), "--min", "8", "-k"])

        assert result.exit_code == 0
        assignments = _assignments(result.stdout)
        assert assignments["DISPLAY"] == ":0"
        for name, value in FORCE_X11:
            assert assignments[name] == value

    def test_quoted_values(self, runner: CliRunner, tmp_path: Path) -> None:
        """Values outside the safe set come out single-quoted."""
        block = make_environ([("DISPLAY", ":0"), ("XAUTHORITY", "/home/o'neil/x auth")])
        proc = make_proc(tmp_path, {1: block})

        result = runner.invoke(main, ["--proc-path", str(proc)])

        assert result.exit_code == 0
        assert result.stdout == "DISPLAY=:0 XAUTHORITY='/home/o'\\''neil/x auth'\n"

    def test_verbose_goes_to_stderr(self, runner: CliRunner, x11_session: Path) -> None:
        """-v narrates on stderr and leaves stdout clean."""
        result = runner.invoke(main, ["--proc-path", str(x11_session), "--min", "8", "-v"])

        assert result.exit_code == 0
        assert result.stdout == "DISPLAY=:0 XAUTHORITY=/run/xauth\n"
        assert "Results of the popularity contest" in result.stderr
        assert "no DISPLAY" in result.stderr

    def test_config_file_values_used(
        self, runner: CliRunner, x11_session: Path, isolated_config: Path
    ) -> None:
        """Settings from the config file apply when no flag overrides them."""
        isolated_config.parent.mkdir(parents=True)
        isolated_config.write_text(
            f'[source]\nproc_path = "{x11_session}"\n\n'
            '[sampling]\nmin = 8\n\n[output]\ndisplay = ":1"\n'
        )

        result = runner.invoke(main, [])

        assert result.exit_code == 0, result.output
        assert result.stdout.startswith("DISPLAY=:1 ")

    def test_flags_override_config_file(
        self, runner: CliRunner, x11_session: Path, tmp_path: Path
    ) -> None:
        """Command-line flags beat config-file values."""
        config_file = tmp_path / "custom.toml"
        config_file.write_text(
            f'[source]\nproc_path = "{x11_session}"\n\n[output]\ndisplay = ":1"\n'
        )

        result = runner.invoke(
            main, ["--config", str(config_file), "--min", "8", "--display", ":0"]
        )

        assert result.exit_code == 0, result.output
        assert result.stdout.startswith("DISPLAY=:0 ")


class TestHuntFailures:
    """Fatal conditions exit 1 with nothing on stdout."""

    def test_max_below_min(self, runner: CliRunner, x11_session: Path) -> None:
        """--max < --min is a usage error."""
        result = runner.invoke(
            main, ["--proc-path", str(x11_session), "--min", "10", "--max", "5"]
        )

        assert result.exit_code == 1
        assert result.stdout == ""
        assert "--max must be greater than or equal to --min" in result.stderr

    def test_percent_above_100(self, runner: CliRunner, x11_session: Path) -> None:
        """--percent above 100 is a usage error."""
        result = runner.invoke(main, ["--proc-path", str(x11_session), "-p", "101"])

        assert result.exit_code == 1
        assert result.stdout == ""
        assert "--percent must be in the range 0 to 100 inclusive" in result.stderr

    def test_missing_proc(self, runner: CliRunner, tmp_path: Path) -> None:
        """An unreadable process table is fatal."""
        result = runner.invoke(main, ["--proc-path", str(tmp_path / "nope")])

        assert result.exit_code == 1
        assert result.stdout == ""
        assert "Unable to walk" in result.stderr

    def test_no_processes(self, runner: CliRunner, tmp_path: Path) -> None:
        """An empty process table is fatal."""
        proc = make_proc(tmp_path, {})
        result = runner.invoke(main, ["--proc-path", str(proc)])

        assert result.exit_code == 1
        assert result.stdout == ""
        assert "Didn't find any processes owned by this user" in result.stderr

    def test_no_display(self, runner: CliRunner, tmp_path: Path) -> None:
        """No process with DISPLAY is fatal."""
        proc = make_proc(tmp_path, {1: make_environ([("HOME", "/h")])})
        result = runner.invoke(main, ["--proc-path", str(proc)])

        assert result.exit_code == 1
        assert result.stdout == ""
        assert "Didn't find DISPLAY in any processes." in result.stderr

    def test_broken_config_file(self, runner: CliRunner, isolated_config: Path) -> None:
        """An unparseable config file is fatal for a hunt."""
        isolated_config.parent.mkdir(parents=True)
        isolated_config.write_text("[sampling\n")

        result = runner.invoke(main, [])

        assert result.exit_code == 1
        assert result.stdout == ""
        assert "Failed to parse config file" in result.stderr

    @pytest.mark.parametrize(
        "content",
        [
            "[sampling\n",
            "[sampling]\nmin = 20\nmax = 5\n",
            "sampling = 3\n",
        ],
    )
    def test_bad_config_file_keeps_stdout_clean(
        self, runner: CliRunner, isolated_config: Path, content: str
    ) -> None:
        """Config errors raised before logging is set up never reach stdout."""
        structlog.reset_defaults()
        isolated_config.parent.mkdir(parents=True)
        isolated_config.write_text(content)

        result = runner.invoke(main, [])

        assert result.exit_code == 1
        assert result.stdout == ""
        assert isinstance(result.exception, SystemExit)
        assert result.stderr.strip()


class TestPopulationCommand:
    """Tests for the population command."""

    def test_ranked_table(self, runner: CliRunner, x11_session: Path) -> None:
        """population lists every pair, most popular first."""
        result = runner.invoke(main, ["--proc-path", str(x11_session), "--min", "8", "population"])

        assert result.exit_code == 0, result.output
        lines = result.stdout.splitlines()
        assert "8 owned" in lines[0]
        assert "7 with DISPLAY" in lines[0]
        assert "Population" in lines[1]
        assert lines[3].split() == ["1", "6", ":0", "/run/xauth"]
        assert lines[4].split() == ["2", "1", ":1", "/tmp/.Xauth-other"]
        assert "DISPLAY=" not in result.stdout

    def test_failure_exit_code(self, runner: CliRunner, tmp_path: Path) -> None:
        """population fails like the bare command."""
        result = runner.invoke(main, ["--proc-path", str(tmp_path / "nope"), "population"])
        assert result.exit_code == 1


class TestConfigCommands:
    """Tests for the config command group."""

    def test_config_path(self, runner: CliRunner, isolated_config: Path) -> None:
        """config path prints the default location."""
        result = runner.invoke(main, ["config", "path"])
        assert result.exit_code == 0
        assert result.stdout.strip() == str(isolated_config)

    def test_config_init_and_show(self, runner: CliRunner, isolated_config: Path) -> None:
        """config init writes defaults that config show then reports."""
        result = runner.invoke(main, ["config", "init"])
        assert result.exit_code == 0
        assert isolated_config.exists()
        assert "Created default config" in result.stdout

        result = runner.invoke(main, ["config", "show"])
        assert result.exit_code == 0
        assert "Exists: True" in result.stdout
        assert "min = 10" in result.stdout
        assert "proc_path = /proc" in result.stdout

    def test_config_init_refuses_overwrite(
        self, runner: CliRunner, isolated_config: Path
    ) -> None:
        """config init does not clobber an existing file without --force."""
        isolated_config.parent.mkdir(parents=True)
        isolated_config.write_text("[sampling]\npercent = 30\n")

        result = runner.invoke(main, ["config", "init"])
        assert result.exit_code == 1
        assert "already exists" in result.stderr
        assert "percent = 30" in isolated_config.read_text()

        result = runner.invoke(main, ["config", "init", "--force"])
        assert result.exit_code == 0
        assert "percent = 25" in isolated_config.read_text()

    def test_config_init_repairs_broken_file(
        self, runner: CliRunner, isolated_config: Path
    ) -> None:
        """A broken config file can still be replaced with config init --force."""
        isolated_config.parent.mkdir(parents=True)
        isolated_config.write_text("[sampling\n")

        result = runner.invoke(main, ["config", "init", "--force"])
        assert result.exit_code == 0
        assert "percent = 25" in isolated_config.read_text()

    def test_config_show_reflects_flags(self, runner: CliRunner) -> None:
        """config show reports command-line overrides."""
        result = runner.invoke(main, ["--percent", "40", "-k", "config", "show"])
        assert result.exit_code == 0
        assert "percent = 40" in result.stdout
        assert "kill_wayland = True" in result.stdout
