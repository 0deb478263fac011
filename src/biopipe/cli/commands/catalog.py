"""Commands command - list the available pipeline commands."""

import click

from ...commands import list_commands


@click.command()
def commands():
    """List pipeline commands with a one line summary."""
    entries = list_commands()
    width = max(len(name) for name, _ in entries)
    for name, summary in entries:
        click.echo(f"{name.ljust(width)}  {summary}")
