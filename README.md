# errchain

Attach context to exceptions, walk the chain of causes, and check
conditions with failure messages that show the values involved.

## Installation

```
pip install errchain
```

The package has no runtime dependencies. Tests need `pytest`
(`pip install errchain[test]`).

## Adding context

`add_context(error, context)` wraps an exception in a `ContextError` that
displays as the context and keeps the original exception as its source:

```python
from errchain.context import add_context, with_context

try:
    open("settings.toml")
except OSError as exc:
    raise add_context(exc, "failed to load config") from exc
```

`with_context(error, factory)` calls `factory` to produce the context.
`wrap_errors(context)` works as a context manager or a decorator and re-raises
any `Exception` that escapes the block as a `ContextError` carrying the
context:

```python
from errchain.context import wrap_errors

with wrap_errors("failed to start server"):
    start()
```

`require(value, context)` returns `value` unless it is `None`, in which case
it raises `MissingValueError`, which displays as the context.

On a `ContextError`:

- `str()` gives the context only;
- `source()` returns the wrapped error;
- `debug(alternate=False)` gives `Error { context: "...", source: ... }`, and
  with `alternate=True` spreads the same over indented lines, nesting inner
  `ContextError`s.

`quoted(text)` wraps a string in double quotes, escaping quotes, backslashes
and control characters.

## Walking the chain

`Chain(error)` iterates over an error and each of its causes, outermost
first:

```python
from errchain.chain import Chain

for cause in Chain(error):
    print(cause)

root = next(reversed(Chain(error)))
```

The cause of an error is found by `source_of(error)`: a callable `source`
method first, then a `source` attribute holding an exception, then
`__cause__`, then `__context__` unless it is suppressed.

A `Chain` reports its remaining length through `len()` and `size_hint()`,
can be consumed from the deep end with `next_back()` (which returns `None`
when nothing is left), and can be copied with `copy.copy`. `Chain()` with no
argument is empty.

## Checking conditions

```python
from errchain.ensure import ensure, ensure_compare

ensure(port > 0, "port must be positive, got {}", port)

v = 1
ensure_compare(v + v, "==", 1, "v + v == 1")
# ConditionFailed: Condition failed: `v + v == 1` (2 vs 1)
```

`ensure(condition, message=None, *args)` raises `ConditionFailed` when the
condition is false. A string message is formatted with `args`; an exception
given as the message is raised as it is; with no message the text is
`Condition failed`.

`ensure_compare(lhs, op, rhs, expression=None)` compares with one of `==`,
`!=`, `<`, `<=`, `>`, `>=` (any other operator raises `ValueError`). When the
comparison fails and `expression` splits cleanly at a single top-level
comparison, the message shows the expression and, when each operand renders
to at most 40 bytes with no spaces or newlines, both operands as
`(lhs vs rhs)`. Booleans render as `true`/`false` and strings quoted.
`render(message, lhs, rhs)` builds such an error directly.

`split_comparison(expression)` in `errchain.partition` returns a
`Comparison` (`lhs`, `op`, `rhs`) or `None` when the expression has no single
top-level comparison or cannot be split without changing its meaning.
`tokenize(text)` in `errchain.tokens` splits expression text into `Token`s,
raising `TokenizeError` on unbalanced delimiters or unterminated literals.

## Backtraces

`Backtrace.capture()` records the current call stack when the
`ERRCHAIN_LIB_BACKTRACE` environment variable, or failing that
`ERRCHAIN_BACKTRACE`, is set to anything other than `0`; the decision is made
once per process by `backtrace_enabled()`. Otherwise the backtrace is
recorded as disabled. `status()` returns a `BacktraceStatus`, `frames()` the
resolved `BacktraceSymbol`s, and `format(full=False)` or `str()` renders the
stack, showing paths under the current directory in short form unless
`full` is true. `ContextError`, `MissingValueError` and `ConditionFailed`
each carry a `backtrace` attribute.

## What it does not do

Python cannot see the source text of an argument, so `ensure_compare` shows
the expression only when it is passed in as `expression`; without it the
message shows the two operand representations around the operator.