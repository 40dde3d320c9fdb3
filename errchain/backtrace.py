"""Stack snapshots that are taken only when the environment asks for them."""

from __future__ import annotations

import enum
import functools
import inspect
import itertools
import os
import threading
from dataclasses import dataclass
from pathlib import Path
from types import CodeType
from typing import Iterable, Optional, Tuple

LIB_BACKTRACE_VAR = "ERRCHAIN_LIB_BACKTRACE"
BACKTRACE_VAR = "ERRCHAIN_BACKTRACE"

_RawFrame = Tuple[CodeType, Optional[int], int]


@functools.lru_cache(maxsize=None)
def backtrace_enabled() -> bool:
    """Whether backtraces are captured; decided once from the environment.

    ``ERRCHAIN_LIB_BACKTRACE`` wins over ``ERRCHAIN_BACKTRACE``; any value
    other than ``"0"`` enables capture.
    """
    value = os.environ.get(LIB_BACKTRACE_VAR)
    if value is None:
        value = os.environ.get(BACKTRACE_VAR)
    return value is not None and value != "0"


class BacktraceStatus(enum.Enum):
    """Whether a backtrace holds frames, and if not, why."""

    UNSUPPORTED = "unsupported"
    DISABLED = "disabled"
    CAPTURED = "captured"


def _current_dir() -> Optional[Path]:
    try:
        return Path.cwd()
    except OSError:
        return None


def _display_path(filename: str, short: bool, cwd: Optional[Path]) -> str:
    """Show a path relative to ``cwd`` in short form, as it is otherwise."""
    path = Path(filename)
    if short and cwd is not None and path.is_absolute():
        try:
            relative = path.relative_to(cwd)
        except ValueError:
            pass
        else:
            return f".{os.sep}{relative}"
    return filename


def _column(code: CodeType, lasti: int) -> Optional[int]:
    positions = getattr(code, "co_positions", None)
    if positions is None or lasti < 0:
        return None
    position = next(itertools.islice(positions(), lasti // 2, None), None)
    if position is None or position[2] is None:
        return None
    return position[2] + 1


@dataclass(frozen=True)
class BacktraceSymbol:
    """One resolved frame: function name and source location."""

    name: Optional[str]
    filename: Optional[str]
    lineno: Optional[int]
    colno: Optional[int] = None

    def _debug(self, cwd: Optional[Path]) -> str:
        parts = [f'fn: "{self.name}"' if self.name is not None else "fn: <unknown>"]
        if self.filename is not None:
            parts.append(f'file: "{_display_path(self.filename, True, cwd)}"')
        if self.lineno is not None:
            parts.append(f"line: {self.lineno}")
        return "{ " + ", ".join(parts) + " }"


def _resolve(raw: _RawFrame) -> BacktraceSymbol:
    code, lineno, lasti = raw
    name = getattr(code, "co_qualname", code.co_name)
    return BacktraceSymbol(name, code.co_filename, lineno, _column(code, lasti))


class Backtrace:
    """A snapshot of the call stack, resolved to symbols on first use."""

    __slots__ = ("_status", "_raw", "_actual_start", "_symbols", "_lock")

    def __init__(
        self,
        status: BacktraceStatus,
        raw_frames: Iterable[_RawFrame] = (),
        actual_start: int = 0,
    ) -> None:
        self._status = status
        self._raw: Tuple[_RawFrame, ...] = tuple(raw_frames)
        self._actual_start = actual_start
        self._symbols: Optional[Tuple[BacktraceSymbol, ...]] = None
        self._lock = threading.Lock()

    @classmethod
    def capture(cls) -> "Backtrace":
        """Take a snapshot of the stack, starting from the caller."""
        if not backtrace_enabled():
            return cls(BacktraceStatus.DISABLED)
        frame = inspect.currentframe()
        raw = []
        while frame is not None:
            raw.append((frame.f_code, frame.f_lineno, frame.f_lasti))
            frame = frame.f_back
        if not raw:
            return cls(BacktraceStatus.UNSUPPORTED)
        # The first frame is this method itself.
        return cls(BacktraceStatus.CAPTURED, raw, actual_start=1)

    def status(self) -> BacktraceStatus:
        return self._status

    def _resolved(self) -> Tuple[BacktraceSymbol, ...]:
        with self._lock:
            if self._symbols is None:
                self._symbols = tuple(_resolve(raw) for raw in self._raw)
            return self._symbols

    def frames(self) -> Tuple[BacktraceSymbol, ...]:
        """The symbols from the caller of ``capture`` outwards."""
        if self._status is not BacktraceStatus.CAPTURED:
            return ()
        return self._resolved()[self._actual_start:]

    def format(self, full: bool = False) -> str:
        """Render one entry per frame; ``full`` keeps every frame and path."""
        if self._status is BacktraceStatus.UNSUPPORTED:
            return "unsupported backtrace"
        if self._status is BacktraceStatus.DISABLED:
            return "disabled backtrace"
        symbols = self._resolved() if full else self.frames()
        cwd = _current_dir()
        lines = []
        for index, symbol in enumerate(symbols):
            name = symbol.name if symbol.name is not None else "<unknown>"
            lines.append(f"{index:>4}: {name}")
            if symbol.filename is not None:
                location = _display_path(symbol.filename, not full, cwd)
                if symbol.lineno is not None:
                    location += f":{symbol.lineno}"
                    if symbol.colno is not None:
                        location += f":{symbol.colno}"
                lines.append(f"             at {location}")
        return "".join(line + "\n" for line in lines)

    def __str__(self) -> str:
        return self.format(False)

    def __repr__(self) -> str:
        if self._status is BacktraceStatus.UNSUPPORTED:
            return "<unsupported>"
        if self._status is BacktraceStatus.DISABLED:
            return "<disabled>"
        cwd = _current_dir()
        entries = ", ".join(symbol._debug(cwd) for symbol in self.frames())
        return f"Backtrace [{entries}]"