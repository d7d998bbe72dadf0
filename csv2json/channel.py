"""
Hand-off primitives between the producer and serializer threads.

HandoffChannel has capacity zero: send() returns only once the consumer has
taken the record, so at most one record is in flight.
"""

from __future__ import annotations

import threading
from typing import Any, Iterator, Optional

from .errors import PipelineAborted

_EMPTY = object()


class HandoffChannel:
    def __init__(self):
        self._cond = threading.Condition()
        self._item: Any = _EMPTY
        self._closed = False
        self._error: Optional[BaseException] = None

    def _check_aborted(self) -> None:
        if self._error is not None:
            raise PipelineAborted(f"pipeline aborted: {self._error}") from self._error

    def send(self, item: Any) -> None:
        with self._cond:
            if self._closed:
                raise RuntimeError("send on closed channel")
            self._cond.wait_for(lambda: self._item is _EMPTY or self._error is not None)
            self._check_aborted()
            self._item = item
            self._cond.notify_all()
            # wait for the consumer to take it
            self._cond.wait_for(lambda: self._item is _EMPTY or self._error is not None)
            self._check_aborted()

    def close(self) -> None:
        with self._cond:
            self._closed = True
            self._cond.notify_all()

    def abort(self, error: BaseException) -> None:
        with self._cond:
            if self._error is None:
                self._error = error
            self._cond.notify_all()

    def receive(self) -> Any:
        """Next item, or StopIteration once the channel is closed and drained."""
        with self._cond:
            self._cond.wait_for(
                lambda: self._item is not _EMPTY or self._closed or self._error is not None
            )
            self._check_aborted()
            if self._item is _EMPTY:
                raise StopIteration
            item, self._item = self._item, _EMPTY
            self._cond.notify_all()
            return item

    def __iter__(self) -> Iterator[Any]:
        while True:
            try:
                item = self.receive()
            except StopIteration:
                return
            yield item


class CompletionSignal:
    """
    One-shot signal from the serializer: set() once the closing bracket is
    flushed, fail(error) if it stopped before that. Either wakes wait().
    """

    def __init__(self):
        self._event = threading.Event()
        self.error: Optional[BaseException] = None

    def set(self) -> None:
        if self._event.is_set():
            raise RuntimeError("completion already signalled")
        self._event.set()

    def fail(self, error: BaseException) -> None:
        if self._event.is_set():
            raise RuntimeError("completion already signalled")
        self.error = error
        self._event.set()

    def is_set(self) -> bool:
        return self._event.is_set()

    def completed(self) -> bool:
        return self._event.is_set() and self.error is None

    def wait(self, timeout: Optional[float] = None) -> bool:
        return self._event.wait(timeout)
