"""biopipe CLI main entry point with global options."""

import os
import signal

import click

from ..config import get_settings


@click.group()
@click.option(
    "--home", type=click.Path(), help="biopipe home directory (overrides $BIOPIPE_HOME)"
)
@click.pass_context
def cli(ctx, home):
    """biopipe - record streaming pipelines for sequence data."""
    if home:
        # Commands read settings from the environment
        os.environ["BIOPIPE_HOME"] = home
    ctx.obj = get_settings(home)


# Register commands at module level so tests can import cli with commands attached
from .commands.catalog import commands
from .commands.explain import explain
from .commands.run import run

cli.add_command(run)
cli.add_command(explain)
cli.add_command(commands)


def _interrupt(signum, frame):
    click.echo("\nInterrupted", err=True)
    os._exit(130)


def main():
    """Entry point for CLI."""
    if not get_settings().debug:
        signal.signal(signal.SIGINT, _interrupt)
    try:
        cli()
    finally:
        signal.signal(signal.SIGINT, signal.default_int_handler)


if __name__ == "__main__":
    main()
