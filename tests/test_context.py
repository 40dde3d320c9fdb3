import pytest

from errchain.chain import Chain
from errchain.context import (
    ContextError,
    MissingValueError,
    add_context,
    quoted,
    require,
    with_context,
    wrap_errors,
)


class LowLevel(Exception):
    pass


class _Message:
    def __init__(self, message):
        self.message = message

    def __str__(self):
        return self.message


class MidLevel(_Message):
    pass


class HighLevel(_Message):
    pass


def make_chain():
    low = LowLevel("no such file or directory")
    mid = add_context(low, MidLevel("failed to load config"))
    high = add_context(mid, HighLevel("failed to start server"))
    return high, mid, low


class PermissionDenied(Exception):
    def debug(self, alternate):
        if alternate:
            return 'Custom {\n    kind: PermissionDenied,\n    error: "oh no!",\n}'
        return 'Custom { kind: PermissionDenied, error: "oh no!" }'

    def __str__(self):
        return "oh no!"


EXPECTED_ALTDEBUG_G = (
    "Error {\n"
    '    context: "f failed",\n'
    "    source: Custom {\n"
    "        kind: PermissionDenied,\n"
    '        error: "oh no!",\n'
    "    },\n"
    "}"
)

EXPECTED_ALTDEBUG_H = (
    "Error {\n"
    '    context: "g failed",\n'
    "    source: Error {\n"
    '        context: "f failed",\n'
    "        source: Custom {\n"
    "            kind: PermissionDenied,\n"
    '            error: "oh no!",\n'
    "        },\n"
    "    },\n"
    "}"
)


def test_inference():
    parse = wrap_errors("...")(int)
    assert parse("1") == 1


def test_chain_messages():
    high, _, _ = make_chain()
    assert [str(error) for error in Chain(high)] == [
        "failed to start server",
        "failed to load config",
        "no such file or directory",
    ]


def test_context_values_are_kept():
    high, mid, low = make_chain()
    assert isinstance(high.context, HighLevel)
    assert isinstance(mid.context, MidLevel)
    assert high.source() is mid
    assert mid.source() is low


def test_root_cause():
    high, _, low = make_chain()
    root = list(Chain(high))[-1]
    assert root is low
    assert str(root) == "no such file or directory"


def test_io_source():
    error = add_context(OSError("oh no!"), "context")
    assert str(error.source()) == "oh no!"
    assert str(error) == "context"


def test_context_of_context_error():
    inner = add_context(ValueError("oh no!"), "it failed")
    outer = add_context(inner, "outer")
    assert outer.source() is inner
    assert str(inner.source()) == "oh no!"


def test_backtrace_reused_from_inner():
    inner = add_context(ValueError("oh no!"), "inner")
    outer = add_context(inner, "outer")
    assert outer.backtrace is inner.backtrace


def test_with_context_calls_factory():
    calls = []

    def factory():
        calls.append(1)
        return "lazy"

    error = with_context(KeyError("k"), factory)
    assert str(error) == "lazy"
    assert calls == [1]
    assert isinstance(error.source(), KeyError)


def test_require_present():
    assert require(5, "there is no T") == 5
    assert require(0, "there is no T") == 0


def test_require_absent():
    with pytest.raises(MissingValueError) as info:
        require(None, "there is no T")
    assert str(info.value) == "there is no T"
    assert info.value.context == "there is no T"


def test_wrap_errors_failure():
    with pytest.raises(ContextError) as info:
        with wrap_errors("parse failed"):
            int("x")
    error = info.value
    assert str(error) == "parse failed"
    assert isinstance(error.source(), ValueError)
    assert error.__cause__ is error.source()


def test_wrap_errors_as_decorator():
    def _parse(value):
        return int(value)

    helper = wrap_errors("in helper")(_parse)

    assert helper("7") == 7
    with pytest.raises(ContextError) as info:
        helper("nope")
    assert str(info.value) == "in helper"
    assert isinstance(info.value.source(), ValueError)
    assert helper("8") == 8


def test_wrap_errors_leaves_base_exceptions():
    def interrupt():
        raise KeyboardInterrupt("stop")

    wrapped = wrap_errors("context")(interrupt)
    with pytest.raises(KeyboardInterrupt) as info:
        wrapped()
    assert type(info.value) is KeyboardInterrupt
    assert str(info.value) == "stop"


def test_debug_plain():
    error = add_context(PermissionDenied(), "f failed")
    assert repr(error) == (
        'Error { context: "f failed", source: Custom { kind: PermissionDenied, error: "oh no!" } }'
    )


def test_altdebug():
    g = add_context(PermissionDenied(), "f failed")
    h = add_context(g, "g failed")
    assert g.debug(True) == EXPECTED_ALTDEBUG_G
    assert h.debug(True) == EXPECTED_ALTDEBUG_H


def test_debug_uses_repr_for_plain_errors():
    error = add_context(ValueError("bad"), "ctx")
    assert error.debug(False) == "Error { context: \"ctx\", source: ValueError('bad') }"


def test_quoted():
    assert quoted('say "hi"\n') == '"say \\"hi\\"\\n"'
    assert quoted("it's") == '"it\\\'s"'
    assert quoted("plain") == '"plain"'
    assert quoted("a\\b\t") == '"a\\\\b\\t"'