"""Tests for the execution strategies and Command stream handling."""

import pytest

from biopipe import BP, ClosedStreamError, PipelineError, RecordError
from biopipe.command import Command
from biopipe.executor import (
    EnumerateStrategy,
    ForkStrategy,
    ThreadStrategy,
    select_strategy,
)

STRATEGIES = [{}, {"fork": True}, {"thread": True}]


class Closable:
    """Iterable sink/source counting close() calls."""

    def __init__(self, records=()):
        self.records = list(records)
        self.written = []
        self.closed = 0

    def __iter__(self):
        return iter(self.records)

    def write(self, record):
        self.written.append(record)

    def close(self):
        self.closed += 1


def _records(n):
    return [{"NAME": f"rec{i}", "COUNT": (i * 7919) % n, "SEQ": "atcg" * (i % 5 + 1)} for i in range(n)]


def _pipeline():
    return (
        BP()
        .grab(select="atcgatcg", keys="SEQ")
        .merge_values(keys="NAME,COUNT", delimiter=":")
        .grab(evaluate=":COUNT % 3 != 0")
    )


def test_select_strategy():
    assert isinstance(select_strategy(), EnumerateStrategy)
    assert isinstance(select_strategy(fork=True), ForkStrategy)
    assert isinstance(select_strategy(thread=True), ThreadStrategy)


@pytest.mark.parametrize("strategy", STRATEGIES)
def test_strategies_preserve_order(collect, strategy):
    """Every strategy yields the same records in the same order."""
    expected = collect(_pipeline(), input=_records(500))
    assert expected

    assert collect(_pipeline(), input=_records(500), **strategy) == expected


@pytest.mark.parametrize("strategy", STRATEGIES)
def test_strategies_sort(collect, strategy):
    records = collect(BP().grab(select="a").sort(key="COUNT"), input=_records(97), **strategy)
    assert [r["COUNT"] for r in records] == list(range(97))


@pytest.mark.parametrize("strategy", STRATEGIES)
def test_strategies_many_records(collect, strategy):
    """Streams larger than any pipe or queue buffer flow through."""
    records = [{"ID": i, "SEQ": "a" * 100} for i in range(5000)]
    result = collect(BP().grab(select="a").grab(select="a"), input=records, **strategy)
    assert [r["ID"] for r in result] == list(range(5000))


@pytest.mark.parametrize("strategy", STRATEGIES)
def test_strategies_collect_status(collect, strategy):
    """Status of every command is available after the run, forked ones too."""
    p = BP().grab(select="a").grab(select="b", keys="NAME")
    collect(p, input=[{"NAME": "a"}, {"NAME": "ab"}, {"NAME": "c"}], **strategy)

    assert p.status[0]["records_in"] == 3
    assert p.status[0]["records_out"] == 2
    assert p.status[1]["records_in"] == 2
    assert p.status[1]["records_out"] == 1
    assert all(status["status"] == "done" for status in p.status)


def test_enumerate_failure_raises_original_error():
    with pytest.raises(RecordError):
        BP().grab(select="a").sort(key="COUNT").run(input=[{"NAME": "a"}])


def test_forked_failure_raises_pipeline_error(collect):
    """A failing forked stage is reported by name after all units were joined."""
    p = BP().grab(select="a").sort(key="COUNT").grab(select="a")

    with pytest.raises(PipelineError, match="sort failed: RecordError"):
        collect(p, input=[{"NAME": "a"}] * 2000, fork=True)


@pytest.mark.parametrize("strategy", [{}, {"thread": True}])
def test_thread_failure_raises_original_error(collect, strategy):
    """Threads raise the same error as the enumerate strategy."""
    p = BP().grab(select="a").sort(key="COUNT").grab(select="a")

    with pytest.raises(RecordError, match="Sort key COUNT missing"):
        collect(p, input=[{"NAME": "a"}] * 2000, **strategy)


@pytest.mark.parametrize("strategy", [{"fork": True}, {"thread": True}])
def test_head_failure_raises_original_error(collect, strategy):
    p = BP().sort(key="COUNT").grab(select="a")

    with pytest.raises(RecordError):
        collect(p, input=[{"NAME": "a"}], **strategy)


def test_command_run_closes_streams():
    """Input and output are closed once when run returns."""
    source = Closable([{"A": 1}, {"A": 2}])
    sink = Closable()

    def lmb(input, status):
        yield from input

    command = Command("pass", {}, {}, lmb)
    status = command.run(source, sink)

    assert sink.written == [{"A": 1}, {"A": 2}]
    assert source.closed == 1
    assert sink.closed == 1
    assert status["status"] == "done"


def test_command_run_closes_streams_on_error():
    source = Closable([{"A": 1}])
    sink = Closable()

    def lmb(input, status):
        for record in input:
            yield record
            raise ValueError("boom")

    command = Command("fail", {}, {}, lmb)
    with pytest.raises(ValueError):
        command.run(source, sink)

    assert source.closed == 1
    assert sink.closed == 1
    assert command.status["status"] == "running"


def test_command_run_discards_without_output():
    def lmb(input, status):
        yield {"A": 1}

    command = Command("gen", {}, {}, lmb)
    command.run(None, None)
    assert command.status["status"] == "done"


def test_command_each_closes_input():
    source = Closable([{"A": 1}, {"A": 2}])

    def lmb(input, status):
        yield from input

    command = Command("pass", {}, {}, lmb)
    assert list(command.each(source)) == [{"A": 1}, {"A": 2}]
    assert source.closed == 1


def test_enumerate_closes_output():
    sink = Closable()

    def lmb(input, status):
        yield {"A": 1}

    EnumerateStrategy().execute([Command("gen", {}, {}, lmb)], None, sink)
    assert sink.written == [{"A": 1}]
    assert sink.closed == 1


def test_command_str():
    def lmb(input, status):
        yield from input

    assert str(Command("pass", {"a": 1}, {}, lmb)) == ".pass()"
    assert str(Command("pass", {"a": 1}, {"a": "x", "b": 2}, lmb)) == '.pass(a="x", b=2)'


def test_closed_stream_error_is_stream_error():
    from biopipe import StreamError

    assert issubclass(ClosedStreamError, StreamError)
