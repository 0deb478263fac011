"""Tests for record streams."""

import threading

import pytest

from biopipe import ClosedStreamError, Stream
from biopipe.stream import close_if_closable


def _drain(reader, into):
    thread = threading.Thread(target=lambda: into.extend(reader))
    thread.start()
    return thread


@pytest.mark.parametrize("factory", [Stream.pipe, Stream.queue_pipe])
def test_reader_yields_until_writer_closed(factory):
    reader, writer = factory()
    records = []
    thread = _drain(reader, records)

    for i in range(100):
        writer.write({"ID": i, "SEQ": "atcg"})
    writer.close()
    thread.join(timeout=10)

    assert records == [{"ID": i, "SEQ": "atcg"} for i in range(100)]
    reader.close()


@pytest.mark.parametrize("factory", [Stream.pipe, Stream.queue_pipe])
def test_close_is_idempotent(factory):
    reader, writer = factory()
    writer.close()
    writer.close()
    assert list(reader) == []
    reader.close()
    reader.close()


@pytest.mark.parametrize("factory", [Stream.pipe, Stream.queue_pipe])
def test_write_after_close_fails(factory):
    reader, writer = factory()
    writer.close()
    with pytest.raises(ClosedStreamError):
        writer.write({"A": 1})
    reader.close()


@pytest.mark.parametrize("factory", [Stream.pipe, Stream.queue_pipe])
def test_write_after_reader_closed_fails(factory):
    """A dead consumer makes its producer fail instead of hang."""
    reader, writer = factory()
    reader.close()

    with pytest.raises(ClosedStreamError):
        for i in range(100000):
            writer.write({"ID": i, "SEQ": "a" * 100})
    writer.close()


def test_queue_pipe_blocks_when_full():
    reader, writer = Stream.queue_pipe(maxsize=2)
    done = threading.Event()

    def produce():
        for i in range(10):
            writer.write({"ID": i})
        writer.close()
        done.set()

    thread = threading.Thread(target=produce)
    thread.start()

    assert not done.wait(timeout=0.2)
    assert [r["ID"] for r in reader] == list(range(10))
    thread.join(timeout=10)
    assert done.is_set()


def test_queue_pipe_keeps_objects():
    """Records cross a queue pipe without being copied."""
    reader, writer = Stream.queue_pipe()
    record = {"A": [1, 2]}
    writer.write(record)
    writer.close()
    assert next(iter(reader)) is record


def test_close_if_closable():
    class Thing:
        closed = False

        def close(self):
            self.closed = True

    thing = Thing()
    close_if_closable(thing)
    close_if_closable([1, 2])
    close_if_closable(None)
    assert thing.closed
