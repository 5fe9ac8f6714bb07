"""CLI interface for backstep"""

import logging
import subprocess
from datetime import timedelta
from pathlib import Path
from typing import Optional, Tuple

import click

from backstep.application.backoff import Backoff
from backstep.domain.config import IntervalsConfig
from backstep.domain.context import Context
from backstep.domain.errors import BackoffError
from backstep.domain.tries import INFINITE_TRIES
from backstep.infrastructure.config.config_manager import ConfigManager, ConfigurationError
from backstep.infrastructure.intervals.base import Intervals
from backstep.infrastructure.intervals.factory import IntervalsFactory

logger = logging.getLogger(__name__)

# Seconds between checks of a running command
POLL_INTERVAL = 0.05
# Seconds a terminated command gets to exit before it is killed
TERMINATE_GRACE = 1.0


def setup_logging(verbose: bool = False) -> None:
    """Setup logging configuration"""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        force=True,
    )
    logging.getLogger().setLevel(level)


def _die(message: str, verbose: bool = False, exc: Optional[Exception] = None) -> None:
    """Exit with a user-friendly error message"""
    if exc is not None:
        logger.error(message, exc_info=verbose)
    else:
        logger.error(message)
    raise click.ClickException(message)


def _load_config(ctx: click.Context) -> ConfigManager:
    try:
        return ConfigManager(config_path=ctx.obj.get("config_path"))
    except ConfigurationError as e:
        _die(str(e), verbose=ctx.obj.get("verbose", False), exc=e)


def _create_intervals(
    intervals_config: IntervalsConfig,
    kind_override: Optional[str],
    verbose: bool,
) -> Intervals:
    """Create interval policy from config

    Args:
        intervals_config: Interval configuration
        kind_override: Optional policy kind from CLI
        verbose: Verbose mode for error reporting

    Returns:
        Intervals instance
    """
    if kind_override:
        intervals_config = intervals_config.model_copy(update={"kind": kind_override.lower()})
    try:
        return IntervalsFactory.create(intervals_config)
    except (ValueError, BackoffError) as e:
        _die(str(e), verbose=verbose, exc=e)


def _format_duration(duration: timedelta) -> str:
    return f"{duration.total_seconds():g}s"


def _stop(proc: subprocess.Popen) -> None:
    """Terminate proc, killing it if it outlives TERMINATE_GRACE seconds."""
    proc.terminate()
    try:
        proc.wait(timeout=TERMINATE_GRACE)
    except subprocess.TimeoutExpired:
        logger.warning(f"Command ignored SIGTERM, killing pid {proc.pid}")
        proc.kill()
        proc.wait()


def run_command(command: Tuple[str, ...], ctx: Context) -> bool:
    """Run command once; terminate it if ctx is done before it exits

    Returns:
        True if the command exited with status 0
    """
    logger.info(f"Running: {' '.join(command)}")
    try:
        proc = subprocess.Popen(command)
    except OSError as e:
        logger.error(f"Failed to start command: {e}")
        return False

    while proc.poll() is None:
        if ctx.wait(POLL_INTERVAL):
            logger.warning("Context done, terminating command")
            _stop(proc)
            return False
    returncode = proc.returncode

    if returncode != 0:
        logger.info(f"Command exited with status {returncode}")
    return returncode == 0


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.option(
    "--config",
    type=click.Path(exists=True, path_type=Path),
    help="Path to .backstep.yml config file",
)
@click.pass_context
def cli(ctx, verbose: bool, config: Path):
    """backstep - retry commands with exponential backoff"""
    ctx.ensure_object(dict)
    setup_logging(verbose)
    ctx.obj["config_path"] = config
    ctx.obj["verbose"] = verbose


@cli.command()
@click.option("--count", "-n", type=click.IntRange(1, INFINITE_TRIES + 1), default=8, show_default=True,
              help="Number of intervals to print")
@click.option("--kind", type=str, help="Interval policy (exponential, exponential_jitter). Overrides config.")
@click.pass_context
def series(ctx, count: int, kind: Optional[str]):
    """Print the wait series of the configured interval policy."""
    verbose = ctx.obj.get("verbose", False)
    config_manager = _load_config(ctx)
    intervals = _create_intervals(config_manager.get_intervals_config(), kind, verbose)

    last = timedelta(0)
    for i in range(count):
        last = intervals.next(i, last)
        click.echo(f"{i}\t{_format_duration(last)}")


@cli.command(name="exec", context_settings={"ignore_unknown_options": True})
@click.argument("command", nargs=-1, required=True, type=click.UNPROCESSED)
@click.option("--tries", type=click.IntRange(1, INFINITE_TRIES),
              help=f"Maximum number of runs ({INFINITE_TRIES} = unlimited). Overrides config.")
@click.option("--timeout", type=click.FloatRange(min=0, min_open=True),
              help="Overall deadline in seconds. Overrides config.")
@click.option("--kind", type=str, help="Interval policy (exponential, exponential_jitter). Overrides config.")
@click.pass_context
def exec_command(ctx, command: Tuple[str, ...], tries: Optional[int], timeout: Optional[float], kind: Optional[str]):
    """Run COMMAND until it exits with status 0.

    Use `--` to separate backstep options from the command's own options.
    """
    verbose = ctx.obj.get("verbose", False)
    config_manager = _load_config(ctx)
    backoff_config = config_manager.get_backoff_config()
    intervals = _create_intervals(config_manager.get_intervals_config(), kind, verbose)

    tries = tries or backoff_config.tries
    if timeout is None and backoff_config.timeout is not None:
        timeout = backoff_config.timeout.total_seconds()

    run_ctx = Context.with_timeout(timeout) if timeout is not None else Context.background()
    with run_ctx:
        try:
            Backoff(intervals).retry(run_ctx, tries, lambda c: run_command(command, c))
        except BackoffError as e:
            _die(f"Command failed: {e}", verbose=verbose, exc=e)

    click.echo("Command succeeded")


def main():
    """Main entry point"""
    cli(obj={})


if __name__ == "__main__":
    main()
