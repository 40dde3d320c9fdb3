import pytest

from errchain.ensure import ConditionFailed, ensure, ensure_compare, render


class _Unit:
    """Compares equal to itself and never less or greater; shows as ``()``."""

    def __eq__(self, other):
        return isinstance(other, _Unit)

    def __ne__(self, other):
        return not isinstance(other, _Unit)

    def __lt__(self, other):
        return False

    def __gt__(self, other):
        return False

    def __hash__(self):
        return 0

    def __repr__(self):
        return "()"


class _Variant:
    def __gt__(self, other):
        return False

    def __repr__(self):
        return "U"


def _message(lhs, op, rhs, expression):
    with pytest.raises(ConditionFailed) as info:
        ensure_compare(lhs, op, rhs, expression)
    return str(info.value)


def test_ensure_with_message():
    v = 1
    assert ensure(1 + 1 == 2, "This is correct") is None
    assert ensure(v + v == 2, "This is correct, v: {}", v) is None
    with pytest.raises(ConditionFailed) as info:
        ensure(v + v == 1, "This is not correct, v: {}", v)
    assert str(info.value) == "This is not correct, v: 1"


def test_ensure_default_message():
    with pytest.raises(ConditionFailed) as info:
        ensure(False)
    assert str(info.value) == "Condition failed"


def test_brace_escape():
    with pytest.raises(ConditionFailed) as info:
        ensure(False, "unterminated ${{..}} expression")
    assert str(info.value) == "unterminated ${..} expression"


def test_ensure_raises_given_error():
    error = ValueError("oh no!")
    with pytest.raises(ValueError) as info:
        ensure(False, error)
    assert info.value is error


def test_ensure_non_string_message():
    with pytest.raises(ConditionFailed) as info:
        ensure(0, 42)
    assert info.value.message == "42"


def test_macros_comparison():
    v = 1
    assert ensure_compare(v + v, "==", 2, "v + v == 2") is None
    assert _message(v + v, "==", 1, "v + v == 1") == "Condition failed: `v + v == 1` (2 vs 1)"


@pytest.mark.parametrize(
    "lhs, op, rhs, expression, expected",
    [
        (1, "==", 2, "*x == 2", "Condition failed: `*x == 2` (1 vs 2)"),
        (-2, "==", 1, "!x == 1", "Condition failed: `!x == 1` (-2 vs 1)"),
        (1, "==", 2, "if false {}.t(1) == 2", "Condition failed: `if false {}.t(1) == 2` (1 vs 2)"),
        (2, ">", 3, "[false, false].len() > 3", "Condition failed: `[false, false].len() > 3` (2 vs 3)"),
        (1, ">=", 3, "{ let x = 1; x } >= 3", "Condition failed: `{ let x = 1; x } >= 3` (1 vs 3)"),
        (1, "==", 2, "crate::S.t(1) == 2", "Condition failed: `crate::S.t(1) == 2` (1 vs 2)"),
        (1, "==", 2, "Error::msg::<&str>.t(1) == 2", "Condition failed: `Error::msg::<&str>.t(1) == 2` (1 vs 2)"),
        (1, "==", 2, "Chain::<'static>::new.t(1) == 2", "Condition failed: `Chain::<'static>::new.t(1) == 2` (1 vs 2)"),
        (109, "==", 99, "b\"hmm\"[1] == b'c'", "Condition failed: `b\"hmm\"[1] == b'c'` (109 vs 99)"),
        (3, "==", 2, "(2, 3).1 == 2", "Condition failed: `(2, 3).1 == 2` (3 vs 2)"),
        (0, ">", 1, "'\\0' as u8 > 1", "Condition failed: `'\\0' as u8 > 1` (0 vs 1)"),
        (True, "==", False, "err.is::<&str>() == false", "Condition failed: `err.is::<&str>() == false` (true vs false)"),
    ],
)
def test_carried_cases(lhs, op, rhs, expression, expected):
    assert _message(lhs, op, rhs, expression) == expected


def test_unit_operands():
    assert _message(_Unit(), "!=", _Unit(), "f::<1>() != ()") == "Condition failed: `f::<1>() != ()` (() vs ())"
    assert _message(_Unit(), "!=", _Unit(), "f::<-1>() != ()") == "Condition failed: `f::<-1>() != ()` (() vs ())"
    assert (
        _message(_Unit(), "<", _Unit(), "while false == true && false {} < ()")
        == "Condition failed: `while false == true && false {} < ()` (() vs ())"
    )


def test_turbofish_spacing():
    assert (
        _message(_Variant(), ">", _Variant(), "E::U::<>>E::U::<u8>")
        == "Condition failed: `E::U::<> > E::U::<u8>` (U vs U)"
    )


def test_low_precedence_binary_operator():
    assert (
        _message(False, "==", True, "false == true && false")
        == "Condition failed: `false == true && false`"
    )


def test_whitespace_in_operand():
    point = "Point {\n    x: 0,\n    y: 0,\n}"
    assert (
        _message("", "==", point, "\"\" == format!(\"{:#?}\", point)")
        == "Condition failed: `\"\" == format!(\"{:#?}\", point)`"
    )


def test_too_long():
    assert (
        _message("", "==", "x" * 10, "\"\" == \"x\".repeat(10)")
        == "Condition failed: `\"\" == \"x\".repeat(10)` (\"\" vs \"xxxxxxxxxx\")"
    )
    assert _message("", "==", "x" * 80, "\"\" == \"x\".repeat(80)") == "Condition failed: `\"\" == \"x\".repeat(80)`"


def test_render_limit_boundary():
    assert str(render("msg", "x" * 38, 1)) == f"msg (\"{'x' * 38}\" vs 1)"
    assert str(render("msg", "x" * 39, 1)) == "msg"


def test_render_returns_condition_failed():
    error = render("Condition failed: `a == b`", 1, 2)
    assert isinstance(error, ConditionFailed)
    assert error.message == "Condition failed: `a == b` (1 vs 2)"


def test_render_escapes_strings():
    assert str(render("m", "a\"b", "")) == 'm ("a\\"b" vs "")'


def test_compare_without_expression():
    assert _message(1, "<", 0, None) == "Condition failed: `1 < 0`"


def test_unknown_operator():
    with pytest.raises(ValueError):
        ensure_compare(1, "<>", 2, "1 <> 2")