"""Errors that carry a message describing what was being done when they occurred."""

from __future__ import annotations

import contextlib
from typing import Any, Callable, Iterator, Optional, TypeVar

from .backtrace import Backtrace

T = TypeVar("T")

_ESCAPES = {
    "\t": "\\t",
    "\r": "\\r",
    "\n": "\\n",
    "\\": "\\\\",
    "'": "\\'",
    '"': '\\"',
    "\0": "\\0",
}


def _escape_char(char: str) -> str:
    escaped = _ESCAPES.get(char)
    if escaped is not None:
        return escaped
    if char.isprintable():
        return char
    return f"\\u{{{ord(char):x}}}"


def quoted(text: str) -> str:
    """Wrap ``text`` in double quotes, escaping quotes, backslashes and controls."""
    return '"' + "".join(_escape_char(char) for char in text) + '"'


def _debug_of(error: BaseException, alternate: bool) -> str:
    render = getattr(error, "debug", None)
    if callable(render):
        return render(alternate)
    return repr(error)


def _backtrace_if_absent(error: BaseException) -> Backtrace:
    existing = getattr(error, "backtrace", None)
    if isinstance(existing, Backtrace):
        return existing
    return Backtrace.capture()


class ContextError(Exception):
    """An error wrapped with a context value that describes it.

    The context is what the error displays as; the wrapped error is its source.
    """

    def __init__(self, context: Any, error: BaseException) -> None:
        super().__init__(context, error)
        self.context = context
        self.error = error
        self.backtrace = _backtrace_if_absent(error)

    def __str__(self) -> str:
        return str(self.context)

    def __repr__(self) -> str:
        return self.debug(False)

    def source(self) -> BaseException:
        """The wrapped error."""
        return self.error

    def debug(self, alternate: bool = False) -> str:
        """Describe the context and the wrapped error; ``alternate`` spreads it over lines."""
        context = quoted(str(self.context))
        source = _debug_of(self.error, alternate)
        if not alternate:
            return f"Error {{ context: {context}, source: {source} }}"
        source = source.replace("\n", "\n    ")
        return f"Error {{\n    context: {context},\n    source: {source},\n}}"


class MissingValueError(Exception):
    """Raised when a required value is absent; it displays as its context."""

    def __init__(self, context: Any) -> None:
        super().__init__(context)
        self.context = context
        self.backtrace = Backtrace.capture()

    def __str__(self) -> str:
        return str(self.context)


def add_context(error: BaseException, context: Any) -> ContextError:
    """Wrap ``error`` so that it displays as ``context``."""
    return ContextError(context, error)


def with_context(error: BaseException, factory: Callable[[], Any]) -> ContextError:
    """Wrap ``error`` with a context produced by calling ``factory``."""
    return ContextError(factory(), error)


def require(value: Optional[T], context: Any) -> T:
    """Return ``value``, or raise MissingValueError with ``context`` if it is None."""
    if value is None:
        raise MissingValueError(context)
    return value


@contextlib.contextmanager
def wrap_errors(context: Any) -> Iterator[None]:
    """Re-raise any Exception from the block as a ContextError carrying ``context``.

    Usable both as a ``with`` block and as a function decorator.
    """
    try:
        yield
    except Exception as error:
        raise add_context(error, context) from error