"""CLI entry point for sleeptimer.

Uses Click to expose the ``sleeptimer`` command group.  ``sleeptimer run``
acts as the host application for a :class:`TimerPlugin`: it launches a
program and terminates it when the timer expires.
"""

from __future__ import annotations

import logging
import subprocess
import sys

import click

import sleeptimer
from sleeptimer.core.menu import DEFAULT_MENU, MenuItem, MenuItemKind
from sleeptimer.core.plugin import TimerPlugin
from sleeptimer.core.timer import MAX_MINUTES, MIN_MINUTES
from sleeptimer.log_setup import setup_logging

logger = logging.getLogger(__name__)

# Exit status used by shells when a command cannot be executed.
_EXIT_CANNOT_RUN = 127


def _find_preset(menu: tuple[MenuItem, ...], label: str) -> MenuItem:
    """Return the fixed item of *menu* called *label*, or raise a usage error."""
    for item in menu:
        if item.kind is MenuItemKind.FIXED and item.label == label:
            return item
    choices = ", ".join(i.label for i in menu if i.kind is MenuItemKind.FIXED)
    raise click.UsageError(f"Unknown preset {label!r}. Choose from: {choices}")


def _terminate(process: subprocess.Popen, grace: float) -> None:
    """Ask *process* to exit, killing it if it is still alive after *grace* seconds."""
    if process.poll() is not None:
        return
    logger.info("Timer expired, terminating process %d", process.pid)
    process.terminate()
    try:
        process.wait(timeout=grace)
    except subprocess.TimeoutExpired:
        logger.warning("Process %d ignored SIGTERM, killing it", process.pid)
        process.kill()


def _exit_status(returncode: int) -> int:
    """Map a Popen return code to a shell-style exit status."""
    if returncode < 0:
        return 128 - returncode
    return returncode


@click.group()
@click.version_option(version=sleeptimer.__version__, prog_name="sleeptimer")
@click.option("-v", "--verbose", is_flag=True, help="Log timer activity to stderr.")
def cli(verbose: bool) -> None:
    """sleeptimer: quit a program after a set number of minutes."""
    setup_logging(logging.DEBUG if verbose else logging.WARNING)


@cli.command(context_settings={"ignore_unknown_options": True, "allow_interspersed_args": False})
@click.option(
    "--minutes",
    type=click.IntRange(MIN_MINUTES, MAX_MINUTES),
    envvar="SLEEPTIMER_MINUTES",
    help="Quit after this many minutes.",
)
@click.option(
    "--preset",
    envvar="SLEEPTIMER_PRESET",
    help="Quit after a preset from the timer menu, e.g. 30m.",
)
@click.option(
    "--grace",
    type=click.FloatRange(min=0),
    default=5.0,
    show_default=True,
    envvar="SLEEPTIMER_GRACE",
    help="Seconds to wait after SIGTERM before sending SIGKILL.",
)
@click.option(
    "--unit-seconds",
    type=click.FloatRange(min=0, min_open=True),
    default=60.0,
    hidden=True,
)
@click.argument("command", nargs=-1, required=True, type=click.UNPROCESSED)
def run(
    minutes: int | None,
    preset: str | None,
    grace: float,
    unit_seconds: float,
    command: tuple[str, ...],
) -> None:
    """Run COMMAND and terminate it when the timer expires."""
    if (minutes is None) == (preset is None):
        raise click.UsageError("Specify exactly one of --minutes or --preset.")

    # The timer is only armed once the child exists.
    plugin = TimerPlugin(lambda: _terminate(process, grace), unit_seconds=unit_seconds)
    item = _find_preset(plugin.menu, preset) if preset is not None else None

    # The timer thread must exist before the child does.
    plugin.activate()
    try:
        try:
            process = subprocess.Popen(list(command))
        except OSError as exc:
            click.echo(f"sleeptimer: cannot run {command[0]}: {exc}", err=True)
            sys.exit(_EXIT_CANNOT_RUN)

        if item is not None:
            plugin.trigger(item)
        else:
            plugin.on_adjustable(minutes)
        returncode = process.wait()
    finally:
        plugin.deactivate()
    sys.exit(_exit_status(returncode))


@cli.command()
def presets() -> None:
    """List the entries of the timer menu."""
    for item in DEFAULT_MENU:
        click.echo(item.label)
