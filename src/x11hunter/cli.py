"""CLI commands for x11hunter."""

from pathlib import Path

import click
from click.core import ParameterSource


def _given(ctx: click.Context, name: str) -> bool:
    """True if the option was set on the command line (not left at its default)."""
    return ctx.get_parameter_source(name) not in (None, ParameterSource.DEFAULT)


def _apply_overrides(ctx: click.Context, config, **options) -> None:
    """Copy explicitly given command-line options over config-file values."""
    if _given(ctx, "display"):
        config.output.display = options["display"]
    if _given(ctx, "kill_wayland"):
        config.output.kill_wayland = options["kill_wayland"]
    if _given(ctx, "verbose"):
        config.logging.verbose = options["verbose"]
    if _given(ctx, "min_"):
        config.sampling.min = options["min_"]
    if _given(ctx, "max_"):
        config.sampling.max = options["max_"]
    if _given(ctx, "percent"):
        config.sampling.percent = options["percent"]
    if _given(ctx, "proc_path"):
        config.source.proc_path = str(options["proc_path"])


def _fail(msg: str) -> None:
    from x11hunter import logging as xlog

    xlog.fatal(msg)
    raise SystemExit(1)


def _run_hunt(config):
    """Run a hunt for ``config``, exiting with status 1 on any fatal condition."""
    from x11hunter.errors import HuntError
    from x11hunter.hunter import HuntSettings, hunt

    try:
        return hunt(HuntSettings.from_config(config))
    except HuntError as e:
        _fail(str(e))


@click.group(invoke_without_command=True)
@click.option(
    "--display",
    "-d",
    default=None,
    help='Only look for processes using a specific display, e.g. ":0"',
)
@click.option(
    "--kill-wayland",
    "-k",
    is_flag=True,
    help="Add extra environment variables to force X11 over Wayland.",
)
@click.option("--verbose", "-v", is_flag=True, help="Be chatty (on stderr).")
@click.option(
    "--min", "min_", type=int, default=None, help="Minimum number of processes to look at."
)
@click.option(
    "--max", "max_", type=int, default=None, help="Maximum number of processes to look at."
)
@click.option(
    "--percent", "-p", type=int, default=None, help="Ideal percentage of processes to look at."
)
@click.option(
    "--proc-path",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Look inside this directory instead of /proc.",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Read configuration from this file.",
)
@click.version_option(package_name="x11hunter")
@click.pass_context
def main(
    ctx: click.Context,
    display: str | None,
    kill_wayland: bool,
    verbose: bool,
    min_: int | None,
    max_: int | None,
    percent: int | None,
    proc_path: Path | None,
    config_path: Path | None,
) -> None:
    """Snoop through /proc and find out how to contact your desktop session's X11 server.

    Prints the results in a form ready to ingest into a Bourne-compatible
    shell. Best usage if you trust this program:

        export `x11hunter`

    Or, to run just one program:

        env `x11hunter` name_of_program args...
    """
    from x11hunter import logging as xlog
    from x11hunter.config import Config

    # structlog prints to stdout until configured; a bad config file logs before that
    xlog.configure(Config())
    try:
        config = Config.load(config_path)
    except ValueError as e:
        if ctx.invoked_subcommand != "config":
            _fail(str(e))
        # Still allow `config init --force` to repair a broken file
        click.echo(f"Warning: {e}", err=True)
        config = Config()

    _apply_overrides(
        ctx,
        config,
        display=display,
        kill_wayland=kill_wayland,
        verbose=verbose,
        min_=min_,
        max_=max_,
        percent=percent,
        proc_path=proc_path,
    )
    xlog.configure(config)

    ctx.ensure_object(dict)
    ctx.obj["config"] = config
    ctx.obj["config_file"] = config_path or config.config_path

    # If a subcommand was invoked, let it handle things
    if ctx.invoked_subcommand is not None:
        return

    from x11hunter.formatting import build_env_list

    result = _run_hunt(config)
    env_list = build_env_list(result.winner, kill_wayland=config.output.kill_wayland)
    click.echo(env_list.render(), nl=False)


@main.command()
@click.pass_context
def population(ctx: click.Context) -> None:
    """Show the full popularity contest instead of the export line."""
    config = ctx.obj["config"]
    result = _run_hunt(config)

    click.echo(
        f"Processes: {result.candidate_count} owned, {result.inspected} inspected, "
        f"{result.table.total} with DISPLAY (target {result.target})"
    )
    click.echo(f"{'#':>3}  {'Population':>10}  {'DISPLAY':12}  XAUTHORITY")
    click.echo("-" * 60)
    for n, entry in enumerate(result.table.ranked(), start=1):
        xauthority = entry.xauthority if entry.xauthority is not None else "-"
        click.echo(f"{n:>3}  {entry.population:>10}  {entry.display:12}  {xauthority}")


@main.group()
def config() -> None:
    """Manage configuration."""
    pass


@config.command("show")
@click.pass_context
def config_show(ctx: click.Context) -> None:
    """Display the effective configuration."""
    cfg = ctx.obj["config"]
    config_file = ctx.obj["config_file"]

    click.echo(f"Config file: {config_file}")
    click.echo(f"Exists: {config_file.exists()}")
    click.echo()
    click.echo("[sampling]")
    click.echo(f"  min = {cfg.sampling.min}")
    click.echo(f"  max = {cfg.sampling.max}")
    click.echo(f"  percent = {cfg.sampling.percent}")
    click.echo()
    click.echo("[source]")
    click.echo(f"  proc_path = {cfg.source.proc_path}")
    click.echo()
    click.echo("[output]")
    click.echo(f"  display = {cfg.output.display!r}")
    click.echo(f"  kill_wayland = {cfg.output.kill_wayland}")
    click.echo()
    click.echo("[logging]")
    click.echo(f"  verbose = {cfg.logging.verbose}")
    click.echo(f"  log_file = {cfg.logging.log_file!r}")


@config.command("path")
@click.pass_context
def config_path_cmd(ctx: click.Context) -> None:
    """Print where the config file lives."""
    click.echo(str(ctx.obj["config_file"]))


@config.command("init")
@click.option("--force", "-f", is_flag=True, help="Overwrite an existing config file")
@click.pass_context
def config_init(ctx: click.Context, force: bool) -> None:
    """Write a config file holding the default settings."""
    from x11hunter.config import Config

    config_file = ctx.obj["config_file"]
    if config_file.exists() and not force:
        click.echo(f"Error: {config_file} already exists (use --force to overwrite)", err=True)
        raise SystemExit(1)

    Config().save(config_file)
    click.echo(f"Created default config at {config_file}")
