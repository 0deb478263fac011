"""Run command - build a pipeline from a definition file and run it."""

import sys

import click

from ...errors import OptionError, PipelineError
from ...models import load_pipeline


@click.command()
@click.argument("pipeline_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--fork", "strategy", flag_value="fork", help="Run each command in a forked process.")
@click.option("--thread", "strategy", flag_value="thread", help="Run each command in a thread.")
@click.option("--verbose", is_flag=True, help="Print command status after the run.")
@click.option("--progress", is_flag=True, help="Show live status on stderr.")
@click.option("--email", help="Mail the pipeline and its status to this address.")
@click.option("--subject", help="Mail subject (requires --email).")
def run(pipeline_file, strategy, verbose, progress, email, subject):
    """Run the pipeline defined in PIPELINE_FILE.

    PIPELINE_FILE is JSON with a list of steps::

        {"name": "filter",
         "steps": [{"command": "read_fasta", "options": {"input": "in.fna"}},
                   {"command": "write_fasta", "options": {"output": "out.fna"}}]}

    Examples:
        biopipe run filter.json
        biopipe run filter.json --thread --verbose
    """
    options = {}
    if strategy:
        options[strategy] = True
    if verbose:
        options["verbose"] = True
    if progress:
        options["progress"] = True
    if email:
        options["email"] = email
    if subject:
        options["subject"] = subject

    try:
        pipeline = load_pipeline(pipeline_file).build()
        pipeline.run(**options)
    except (OptionError, PipelineError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
