"""Checks that raise a descriptive error when a condition does not hold."""

from __future__ import annotations

import operator
from typing import Any, Callable, Dict, Optional

from .backtrace import Backtrace
from .context import quoted
from .partition import split_comparison

# Each side's rendering must fit in this many UTF-8 bytes to be shown.
_RENDER_LIMIT = 40

_OPERATORS: Dict[str, Callable[[Any, Any], Any]] = {
    "==": operator.eq,
    "!=": operator.ne,
    "<": operator.lt,
    "<=": operator.le,
    ">": operator.gt,
    ">=": operator.ge,
}

_DEFAULT_MESSAGE = "Condition failed"


class ConditionFailed(Exception):
    """Raised when a checked condition is false."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message
        self.backtrace = Backtrace.capture()

    def __str__(self) -> str:
        return self.message


def _debug(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        return quoted(value)
    describe = getattr(value, "debug", None)
    if callable(describe):
        return describe(False)
    return repr(value)


def _fits(text: str) -> bool:
    if " " in text or "\n" in text:
        return False
    return len(text.encode("utf-8")) <= _RENDER_LIMIT


def render(message: str, lhs: Any, rhs: Any) -> ConditionFailed:
    """Build the error for a failed comparison.

    Both operands are appended as ``(lhs vs rhs)`` when each renders to at
    most 40 bytes without spaces or newlines; otherwise only ``message`` is kept.
    """
    left = _debug(lhs)
    right = _debug(rhs)
    if _fits(left) and _fits(right):
        return ConditionFailed(f"{message} ({left} vs {right})")
    return ConditionFailed(message)


def ensure(condition: Any, message: Any = None, *args: Any) -> None:
    """Raise unless ``condition`` is true.

    A string ``message`` is formatted with ``args`` (``{{`` and ``}}`` stand for
    literal braces); an exception given as ``message`` is raised as it is; any
    other object is shown through ``str``.
    """
    if condition:
        return
    if message is None:
        raise ConditionFailed(_DEFAULT_MESSAGE)
    if isinstance(message, BaseException):
        raise message
    if isinstance(message, str):
        raise ConditionFailed(message.format(*args))
    raise ConditionFailed(str(message))


def ensure_compare(lhs: Any, op: str, rhs: Any, expression: Optional[str] = None) -> None:
    """Raise unless ``lhs op rhs`` holds, for ``op`` one of the comparisons.

    ``expression`` is the condition's source text. When it splits cleanly at
    a single top-level comparison, the message shows it normalised and the two
    operands; otherwise it shows the text alone.
    """
    try:
        compare = _OPERATORS[op]
    except KeyError:
        raise ValueError(f"unsupported comparison operator {op!r}") from None
    if compare(lhs, rhs):
        return
    if expression is None:
        text = f"{_debug(lhs)} {op} {_debug(rhs)}"
        raise ConditionFailed(f"{_DEFAULT_MESSAGE}: `{text}`")
    comparison = split_comparison(expression)
    if comparison is None:
        raise ConditionFailed(f"{_DEFAULT_MESSAGE}: `{expression.strip()}`")
    raise render(f"{_DEFAULT_MESSAGE}: `{comparison}`", lhs, rhs)