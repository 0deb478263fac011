"""Pytest configuration and shared fixtures."""

import threading
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from biopipe import Stream, mail
from biopipe.cli import cli


@pytest.fixture(autouse=True)
def biopipe_env(tmp_path, monkeypatch):
    """Run every test in the test environment with a private home.

    BIOPIPE_ENV=test makes Pipeline.run re-raise errors and keeps mail in
    ``biopipe.mail.deliveries``.
    """
    home = tmp_path / "biopipe_home"
    monkeypatch.setenv("BIOPIPE_ENV", "test")
    monkeypatch.setenv("BIOPIPE_HOME", str(home))
    for name in ("BIOPIPE_DEBUG", "BIOPIPE_VERBOSE", "BIOPIPE_TMPDIR", "BIOPIPE_CORES_MAX"):
        monkeypatch.delenv(name, raising=False)

    mail.deliveries.clear()
    yield home
    mail.deliveries.clear()


@pytest.fixture
def cli_runner():
    """Provide Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def invoke(cli_runner):
    """Helper to invoke the CLI with args.

    Usage:
        result = invoke(["run", "pipeline.json"])  # exit_code, output, etc.
    """

    def _invoke(args, input_data=None):
        return cli_runner.invoke(cli, args, input=input_data)

    return _invoke


@pytest.fixture
def collect():
    """Run a pipeline into a Stream pipe and return the output records.

    A reader thread drains the pipe so no strategy blocks on a full pipe.

    Usage:
        records = collect(pipeline, input=[{"A": 1}], thread=True)
    """

    def _collect(pipeline, **options):
        reader, writer = Stream.pipe()
        records = []
        thread = threading.Thread(target=lambda: records.extend(reader))
        thread.start()
        try:
            pipeline.run(output=writer, **options)
        finally:
            writer.close()
            thread.join()
            reader.close()
        return records

    return _collect


@pytest.fixture
def fasta_file(tmp_path):
    """Provide a small FASTA file."""
    path = tmp_path / "test.fna"
    path.write_text(">test1\natcg\n>test2\ngatc\n")
    return path


@pytest.fixture
def which_all():
    """Pretend every external program is installed."""
    with patch("biopipe.process_utils.shutil.which", return_value="/usr/bin/tool") as mock_which:
        yield mock_which
