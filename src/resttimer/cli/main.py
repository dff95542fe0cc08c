"""CLI entry point for rest-timer.

Uses Click to expose the ``resttimer`` command group.  ``rest`` drives a
:class:`RestPeriod` on an asyncio event loop and redraws the countdown in
place on every tick.
"""

from __future__ import annotations

import asyncio
import logging
import sys
from typing import Callable, TypeVar

import click

import resttimer
from resttimer.core.period import RestPeriod
from resttimer.core.timer import (
    INTENSITIES,
    ConfigurationError,
    InvalidStateError,
    format_time,
    get_rest_time_recommendation,
)

T = TypeVar("T")


def _run(action: Callable[[], T]) -> T:
    """Execute *action*, converting timer errors to a CLI error.

    The message is printed to stderr and the process exits with code 1.
    """
    try:
        return action()
    except (ConfigurationError, InvalidStateError) as exc:
        click.echo(str(exc), err=True)
        sys.exit(1)


def _bell() -> None:
    click.echo("\a", nl=False)


async def _countdown(duration: int, sound: bool) -> None:
    """Run one rest period to completion on the current event loop."""
    finished = asyncio.Event()
    period: RestPeriod

    def render(remaining: int) -> None:
        line = f"{format_time(remaining)}  {period.message()}"
        click.echo(f"\r{line:<32}", nl=False)

    with RestPeriod(
        duration,
        on_complete=finished.set,
        on_skip=finished.set,
        on_tick=render,
        on_alert=_bell,
        sound_enabled=sound,
    ) as period:
        period.start()
        await finished.wait()

    click.echo()
    click.echo("Rest complete. Time for your next set!")


def _run_rest(duration: int, sound: bool) -> None:
    asyncio.run(_countdown(duration, sound))


@click.group()
@click.version_option(version=resttimer.__version__, prog_name="resttimer")
@click.option(
    "-v",
    "--verbose",
    is_flag=True,
    envvar="RESTTIMER_VERBOSE",
    help="Log timer events to stderr.",
)
def cli(verbose: bool) -> None:
    """resttimer: count down the rest between workout sets."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")


@cli.command()
@click.argument("seconds", type=int, required=False)
@click.option(
    "--type",
    "exercise_type",
    default="strength",
    show_default=True,
    help="Exercise type used to pick a rest length when SECONDS is omitted.",
)
@click.option(
    "--intensity",
    type=click.Choice(INTENSITIES),
    default="moderate",
    show_default=True,
    help="Set intensity used to pick a rest length when SECONDS is omitted.",
)
@click.option(
    "--sound/--no-sound",
    default=True,
    envvar="RESTTIMER_SOUND",
    show_default=True,
    help="Ring the terminal bell when the rest is over.",
)
def rest(seconds: int | None, exercise_type: str, intensity: str, sound: bool) -> None:
    """Count down a rest of SECONDS, or the recommended rest for the set."""
    if seconds is None:
        seconds = get_rest_time_recommendation(exercise_type, intensity)
    try:
        _run(lambda: _run_rest(seconds, sound))
    except KeyboardInterrupt:
        click.echo()
        click.echo("Rest skipped.")


@cli.command()
@click.argument("exercise_type", metavar="TYPE")
@click.argument("intensity", type=click.Choice(INTENSITIES))
def recommend(exercise_type: str, intensity: str) -> None:
    """Show the recommended rest for a TYPE of exercise at INTENSITY."""
    seconds = get_rest_time_recommendation(exercise_type, intensity)
    click.echo(f"{seconds} seconds ({format_time(seconds)})")


@cli.command("format")
@click.argument("seconds", type=click.IntRange(min=0))
def format_(seconds: int) -> None:
    """Print SECONDS as M:SS."""
    click.echo(format_time(seconds))
