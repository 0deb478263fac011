"""Explain command - show a pipeline definition as a Python expression."""

import sys

import click

from ...errors import OptionError, PipelineError
from ...models import load_pipeline


@click.command()
@click.argument("pipeline_file", type=click.Path(exists=True, dir_okay=False))
def explain(pipeline_file):
    """Print the pipeline in PIPELINE_FILE without running it.

    Options are validated, so this also checks a definition before a run.
    """
    try:
        definition = load_pipeline(pipeline_file)
        pipeline = definition.build()
    except (OptionError, PipelineError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    click.echo(f"# {definition.name}")
    click.echo(str(pipeline))
