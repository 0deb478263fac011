"""Record streams connecting pipeline stages.

A stream is a connected (reader, writer) pair. The writer appends records
and signals end of stream on ``close()``; the reader yields records until
the writer closed and the buffer is drained.

Two transports exist:
- ``Stream.pipe()``: an OS pipe carrying serialized records. Works across
  forked processes as well as threads.
- ``Stream.queue_pipe()``: a bounded in-memory queue. Threads only, no
  serialization.
"""

from __future__ import annotations

import os
import queue
import threading
from typing import Any, Dict, Iterator, Tuple

from .errors import ClosedStreamError
from .serializer import Serializer

Record = Dict[str, Any]

QUEUE_SIZE = 1000
POLL_INTERVAL = 0.05

_EOF = object()


class PipeReader:
    """Read end of an OS pipe."""

    def __init__(self, fd: int):
        self._io = os.fdopen(fd, "rb")
        self._serializer = Serializer(self._io)

    @property
    def closed(self) -> bool:
        return self._io.closed

    def __iter__(self) -> Iterator[Record]:
        if self.closed:
            return
        yield from self._serializer

    def close(self) -> None:
        if not self._io.closed:
            self._io.close()


class PipeWriter:
    """Write end of an OS pipe."""

    def __init__(self, fd: int):
        self._io = os.fdopen(fd, "wb")
        self._serializer = Serializer(self._io)

    @property
    def closed(self) -> bool:
        return self._io.closed

    def write(self, record: Record) -> None:
        if self._io.closed:
            raise ClosedStreamError("Write on closed stream")
        try:
            self._serializer.write(record)
        except BrokenPipeError as e:
            self._discard()
            raise ClosedStreamError("Reader end of stream is closed") from e

    def close(self) -> None:
        if self._io.closed:
            return
        try:
            self._io.close()
        except BrokenPipeError:
            # Reader went away; nothing left to deliver to.
            self._discard()

    def _discard(self) -> None:
        try:
            os.close(self._io.fileno())
        except (OSError, ValueError):
            pass
        try:
            self._io.close()
        except (OSError, ValueError):
            pass

    def __enter__(self) -> "PipeWriter":
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()


class _Channel:
    def __init__(self, maxsize: int):
        self.queue: "queue.Queue[Any]" = queue.Queue(maxsize=maxsize)
        self.reader_closed = threading.Event()


class QueueReader:
    """Read end of an in-memory queue pipe."""

    def __init__(self, channel: _Channel):
        self._channel = channel
        self._eof = False
        self.closed = False

    def __iter__(self) -> Iterator[Record]:
        while not (self._eof or self.closed):
            item = self._channel.queue.get()
            if item is _EOF:
                self._eof = True
                return
            yield item

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        self._channel.reader_closed.set()


class QueueWriter:
    """Write end of an in-memory queue pipe.

    ``write`` blocks while the queue is full and fails fast once the reader
    end is closed, so a dead consumer cannot hang its producer.
    """

    def __init__(self, channel: _Channel):
        self._channel = channel
        self.closed = False

    def write(self, record: Record) -> None:
        if self.closed:
            raise ClosedStreamError("Write on closed stream")
        self._put(record)

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        try:
            self._put(_EOF)
        except ClosedStreamError:
            pass

    def _put(self, item: Any) -> None:
        while True:
            if self._channel.reader_closed.is_set():
                raise ClosedStreamError("Reader end of stream is closed")
            try:
                self._channel.queue.put(item, timeout=POLL_INTERVAL)
                return
            except queue.Full:
                continue

    def __enter__(self) -> "QueueWriter":
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()


class Stream:
    """Factory for connected (reader, writer) pairs."""

    @staticmethod
    def pipe() -> Tuple[PipeReader, PipeWriter]:
        read_fd, write_fd = os.pipe()
        return PipeReader(read_fd), PipeWriter(write_fd)

    @staticmethod
    def queue_pipe(maxsize: int = QUEUE_SIZE) -> Tuple[QueueReader, QueueWriter]:
        channel = _Channel(maxsize)
        return QueueReader(channel), QueueWriter(channel)


def close_if_closable(obj: Any) -> None:
    """Close ``obj`` if it is closable."""
    close = getattr(obj, "close", None)
    if callable(close):
        close()


__all__ = [
    "PipeReader",
    "PipeWriter",
    "QueueReader",
    "QueueWriter",
    "Record",
    "Stream",
    "close_if_closable",
]
