"""LineChannel: blocking single-consumer hand-off between a producer thread and the reader."""

import queue
import threading

from varnishlog.errors import ChannelClosed

_CLOSED = object()


class LineChannel:
    """A closable queue of raw lines that iterates until closed and drained.

    ``put`` blocks while a bounded channel is full. Iteration blocks until the
    next line arrives and stops once ``close`` has been called and every line
    put before it has been consumed. Only one consumer may iterate.
    """

    def __init__(self, maxsize: int = 0):
        self._queue: queue.Queue = queue.Queue(maxsize=maxsize)
        self._lock = threading.Lock()
        self._closed = False
        self._drained = False

    @property
    def closed(self) -> bool:
        return self._closed

    def put(self, line: str) -> None:
        if self._closed:
            raise ChannelClosed("put on closed channel")
        self._queue.put(line)

    def close(self) -> None:
        """Mark the producer side done. Never blocks; closing twice is a no-op."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
        try:
            self._queue.put_nowait(_CLOSED)
        except queue.Full:
            # the consumer is not blocked on a full queue; __next__ stops once it empties
            pass

    def __iter__(self):
        return self

    def __next__(self) -> str:
        if self._drained or (self._closed and self._queue.empty()):
            self._drained = True
            raise StopIteration
        item = self._queue.get()
        if item is _CLOSED:
            self._drained = True
            raise StopIteration
        return item
