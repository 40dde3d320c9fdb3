"""Iteration over an error and the errors that caused it."""

from __future__ import annotations

from collections import deque
from typing import Deque, Iterator, Optional, Tuple


def source_of(error: BaseException) -> Optional[BaseException]:
    """The error that caused ``error``, if any.

    A callable ``source`` is asked first, then a ``source`` attribute holding
    an exception, then the explicit cause and finally the implicit context.
    """
    source = getattr(error, "source", None)
    if callable(source):
        return source()
    if isinstance(source, BaseException):
        return source
    cause = getattr(error, "__cause__", None)
    if cause is not None:
        return cause
    if getattr(error, "__suppress_context__", False):
        return None
    return getattr(error, "__context__", None)


def _walk(error: Optional[BaseException]) -> Iterator[BaseException]:
    while error is not None:
        yield error
        error = source_of(error)


class Chain:
    """An iterator from an error down to its root cause, usable from both ends."""

    __slots__ = ("_next", "_buffer")

    def __init__(self, head: Optional[BaseException] = None) -> None:
        self._next = head
        self._buffer: Optional[Deque[BaseException]] = None if head is not None else deque()

    def __iter__(self) -> "Chain":
        return self

    def __next__(self) -> BaseException:
        if self._buffer is not None:
            if not self._buffer:
                raise StopIteration
            return self._buffer.popleft()
        error = self._next
        if error is None:
            raise StopIteration
        self._next = source_of(error)
        return error

    def next_back(self) -> Optional[BaseException]:
        """Take the deepest remaining cause, or None when nothing is left."""
        if self._buffer is None:
            self._buffer = deque(_walk(self._next))
            self._next = None
        return self._buffer.pop() if self._buffer else None

    def __reversed__(self) -> Iterator[BaseException]:
        while (error := self.next_back()) is not None:
            yield error

    def __len__(self) -> int:
        if self._buffer is not None:
            return len(self._buffer)
        return sum(1 for _ in _walk(self._next))

    def size_hint(self) -> Tuple[int, Optional[int]]:
        length = len(self)
        return length, length

    def __copy__(self) -> "Chain":
        clone = Chain.__new__(Chain)
        clone._next = self._next
        clone._buffer = deque(self._buffer) if self._buffer is not None else None
        return clone