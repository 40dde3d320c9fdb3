"""Splitting of a condition's source text at its top-level comparison operator."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Union

from .tokens import Token, TokenKind, TokenizeError, tokenize


@dataclass(frozen=True)
class Comparison:
    """A condition of the form ``lhs op rhs`` with ``op`` a comparison."""

    lhs: str
    op: str
    rhs: str

    def __str__(self) -> str:
        return f"{self.lhs} {self.op} {self.rhs}"


@dataclass
class _Group:
    open: Token
    close: Token
    items: List["_Item"] = field(default_factory=list)

    @property
    def offset(self) -> int:
        return self.open.offset

    @property
    def end(self) -> int:
        return self.close.end


_Item = Union[Token, _Group]

_CONTROL_FLOW = frozenset({"return", "break", "continue", "yield", "move"})
_HIGH_BINARY = frozenset({"+", "-", "*", "/", "%", "^", "&", "|", "<<", ">>"})
_COMPARISON = frozenset({"==", "<=", "<", "!=", ">=", ">"})
_LOW_BINARY = frozenset(
    {"&&", "||", "=", "+=", "-=", "*=", "/=", "%=", "^=", "&=", "|=", "<<=", ">>="}
)
_PAT_PUNCT = frozenset({"|", "ref", "mut", "@", "..", "..=", "&", "&&", "_"})


class _Fallback(Exception):
    """The expression is not a plain comparison that can be split."""


def _build(tokens: List[Token]) -> List[_Item]:
    root: List[_Item] = []
    stack: List[tuple] = []
    current = root
    for token in tokens:
        if token.kind is TokenKind.OPEN:
            stack.append((current, token))
            current = []
        elif token.kind is TokenKind.CLOSE:
            parent, opener = stack.pop()
            parent.append(_Group(opener, token, current))
            current = parent
        else:
            current.append(token)
    return root


class _Parser:
    def __init__(self, items: List[_Item]) -> None:
        self.items = list(items)
        self.pos = 0
        self.stack: List[str] = []
        self.split: Optional[Token] = None

    # -- inspection helpers --

    def peek(self, ahead: int = 0) -> Optional[_Item]:
        index = self.pos + ahead
        return self.items[index] if index < len(self.items) else None

    def punct(self, text: str, ahead: int = 0) -> bool:
        item = self.peek(ahead)
        return isinstance(item, Token) and item.kind is TokenKind.PUNCT and item.text == text

    def word(self, text: Optional[str] = None, ahead: int = 0) -> bool:
        item = self.peek(ahead)
        return (
            isinstance(item, Token)
            and item.kind is TokenKind.IDENT
            and (text is None or item.text == text)
        )

    def literal(self, ahead: int = 0) -> bool:
        item = self.peek(ahead)
        if not isinstance(item, Token):
            return False
        return item.kind is TokenKind.LITERAL or (
            item.kind is TokenKind.IDENT and item.text in ("true", "false")
        )

    def lifetime(self, ahead: int = 0) -> bool:
        item = self.peek(ahead)
        return isinstance(item, Token) and item.kind is TokenKind.LIFETIME

    def group(self, delimiter: str, ahead: int = 0) -> bool:
        item = self.peek(ahead)
        return isinstance(item, _Group) and item.open.text == delimiter

    def any_group(self, ahead: int = 0) -> bool:
        return isinstance(self.peek(ahead), _Group)

    def neg_literal(self, ahead: int = 0) -> int:
        """Length of a (possibly negated) literal at ``ahead``, or 0."""
        if self.literal(ahead):
            return 1
        if self.punct("-", ahead) and self.literal(ahead + 1):
            return 2
        return 0

    def split_head(self, ahead: int, length: int) -> None:
        """Break a compound punctuation token into two tokens."""
        index = self.pos + ahead
        token = self.items[index]
        assert isinstance(token, Token)
        head = Token(TokenKind.PUNCT, token.text[:length], token.offset)
        tail = Token(TokenKind.PUNCT, token.text[length:], token.offset + length)
        self.items[index : index + 1] = [head, tail]

    def take(self, count: int = 1) -> None:
        self.pos += count

    def pop(self) -> str:
        if not self.stack:
            raise _Fallback
        return self.stack.pop()

    # -- driver --

    def run(self) -> Optional[Token]:
        state = "0"
        while True:
            if self.peek() is None:
                if state == "atom" and not self.stack and self.split is not None:
                    return self.split
                if state in ("cond", "epath", "tpath", "object") and self.stack:
                    state = "atom" if state == "cond" else self.pop()
                    continue
                raise _Fallback
            state = getattr(self, "_state_" + state)()

    # -- states --

    def _state_0(self) -> str:
        if self.word() and self.peek().text in _CONTROL_FLOW:
            raise _Fallback
        for text in ("*", "!", "-"):
            if self.punct(text):
                self.take()
                return "0"
        if self.word("let"):
            self.take()
            return "pat"
        if self.lifetime() and self.punct(":", 1):
            self.take(2)
            return "0"
        for text in ("&", "&&"):
            if self.punct(text):
                self.take(2 if self.word("mut", 1) else 1)
                return "0"
        if self.word("if") or self.word("match") or self.word("while"):
            self.stack.append("cond")
            self.take()
            return "0"
        if self.word("for"):
            self.stack.append("cond")
            self.take()
            return "pat"
        if self.any_group():
            self.take()
            return "atom"
        if self.word("loop") and self.group("{", 1):
            self.take(2)
            return "atom"
        if self.word("async") and self.group("{", 1):
            self.take(2)
            return "atom"
        if self.word("async") and self.word("move", 1) and self.group("{", 2):
            self.take(3)
            return "atom"
        if self.word("unsafe") and self.group("{", 1):
            self.take(2)
            return "atom"
        if self.literal():
            self.take()
            return "atom"
        if self.punct("::") and self.word(ahead=1):
            self.stack.append("atom")
            self.take(2)
            return "epath"
        if self.word():
            self.stack.append("atom")
            self.take()
            return "epath"
        if self.punct("<"):
            self.stack.extend(["atom", "epath", "qpath"])
            self.take()
            return "type"
        raise _Fallback

    def _generic_open(self, ahead: int, push: str) -> Optional[str]:
        """Handle ``<``, ``<<`` or ``<-`` opening generic arguments at ``ahead``."""
        if self.punct("<", ahead):
            self.take(ahead + 1)
        elif self.punct("<<", ahead) or self.punct("<-", ahead):
            self.split_head(ahead, 1)
            self.take(ahead + 1)
        else:
            return None
        self.stack.append(push)
        return "generic"

    def _state_epath(self) -> str:
        if self.punct("::"):
            state = self._generic_open(1, "epath")
            if state:
                return state
            if self.word(ahead=1):
                self.take(2)
                return "epath"
        if self.punct("!") and self.any_group(1):
            self.take(2)
        return self.pop()

    def _state_cond(self) -> str:
        if self.word("else") and self.word("if", 1):
            self.stack.append("cond")
            self.take(2)
            return "0"
        if self.word("else") and self.group("{", 1):
            self.take(2)
        return "atom"

    def _state_atom(self) -> str:
        if self.stack and self.stack[-1] == "cond" and self.group("{"):
            self.stack.pop()
            self.take()
            return "cond"
        if self.any_group() or self.punct("?"):
            self.take()
            return "atom"
        if self.punct(".") and self.word(ahead=1):
            if self.punct("::", 2):
                self.take(2)
                state = self._generic_open(1, "atom")
                if state:
                    return state
                raise _Fallback
            self.take(2)
            return "atom"
        if self.punct(".") and self.literal(1):
            self.take(2)
            return "atom"
        if self.word("as"):
            self.stack.append("atom")
            self.take()
            return "type"
        item = self.peek()
        if isinstance(item, Token) and item.kind is TokenKind.PUNCT:
            if item.text in _HIGH_BINARY:
                self.take()
                return "0"
            if item.text in _COMPARISON:
                if not self.stack:
                    if self.split is not None:
                        raise _Fallback
                    self.split = item
                self.take()
                return "0"
            if item.text in _LOW_BINARY and self.stack:
                self.take()
                return "0"
        raise _Fallback

    def _state_type(self) -> str:
        if self.group("[") or self.group("("):
            self.take()
            return self.pop()
        if self.punct("*") and (self.word("const", 1) or self.word("mut", 1)):
            self.take(2)
            return "type"
        if self.punct("&") or self.punct("&&"):
            count = 1
            if self.lifetime(count):
                count += 1
            if self.word("mut", count):
                count += 1
            self.take(count)
            return "type"
        if self.word("unsafe") or self.word("impl") or self.word("dyn"):
            self.take()
            return "type"
        if self.word("extern"):
            self.take(2 if self.literal(1) else 1)
            return "type"
        if self.word("fn") and self.group("(", 1):
            if self.punct("->", 2):
                self.take(3)
                return "type"
            self.take(2)
            return self.pop()
        if self.word("_") or self.punct("!"):
            self.take()
            return self.pop()
        if self.word("for") and self.punct("<", 1):
            self.stack.append("type")
            self.take(2)
            return "generic"
        if self.punct("::") and self.word(ahead=1):
            self.take(2)
            return "tpath"
        if self.word():
            self.take()
            return "tpath"
        if self.punct("<"):
            self.stack.extend(["tpath", "qpath"])
            self.take()
            return "type"
        raise _Fallback

    def _state_tpath(self) -> str:
        state = self._generic_open(0, "tpath")
        if state:
            return state
        if self.punct("::"):
            state = self._generic_open(1, "tpath")
            if state:
                return state
            if self.word(ahead=1):
                self.take(2)
                return "tpath"
            if self.group("(", 1):
                if self.punct("->", 2):
                    self.take(3)
                    return "type"
                self.take(2)
                return "object"
        if self.group("("):
            if self.punct("->", 1):
                self.take(2)
                return "type"
            self.take()
            return "object"
        if self.punct("!") and self.any_group(1):
            self.take(2)
            return self.pop()
        return "object"

    def _state_qpath(self) -> str:
        if self.punct(">") and self.punct("::", 1) and self.word(ahead=2):
            self.take(3)
            return self.pop()
        if self.word("as"):
            self.stack.append("qpath")
            self.take()
            return "type"
        raise _Fallback

    def _state_object(self) -> str:
        if self.stack and self.stack[-1] == "arglist" and self.punct("+"):
            if self.punct("::", 1) and self.word(ahead=2):
                self.take(3)
                return "tpath"
            if self.word(ahead=1):
                self.take(2)
                return "tpath"
        return self.pop()

    def _close_angle(self) -> Optional[str]:
        if self.punct(">"):
            self.take()
            return self.pop()
        if self.punct(">>"):
            self.split_head(0, 1)
            self.take()
            return self.pop()
        return None

    def _state_generic(self) -> str:
        state = self._close_angle()
        if state:
            return state
        length = self.neg_literal()
        if length or self.group("{") or self.lifetime():
            self.take(length or 1)
            self.stack.append("arglist") if False else None
            return "arglist"
        self.stack.append("arglist")
        if self.word() and self.punct("=", 1):
            self.take(2)
        return "type"

    def _state_arglist(self) -> str:
        if self.punct(","):
            self.take()
            return "generic"
        state = self._close_angle()
        if state:
            return state
        raise _Fallback

    def _state_pat(self) -> str:
        if self.punct("=") or self.word("in"):
            self.take()
            return "0"
        item = self.peek()
        if isinstance(item, Token) and item.text in _PAT_PUNCT:
            self.take()
            return "pat"
        length = self.neg_literal()
        if length or self.any_group():
            self.take(length or 1)
            return "pat"
        if self.punct("::") and self.word(ahead=1):
            self.stack.append("pat")
            self.take(2)
            return "epath"
        if self.word():
            self.stack.append("pat")
            self.take()
            return "epath"
        if self.punct("<"):
            self.stack.extend(["pat", "epath", "qpath"])
            self.take()
            return "type"
        raise _Fallback


def split_comparison(expression: str) -> Optional[Comparison]:
    """Split ``expression`` at its top-level comparison operator.

    Returns None when the expression has no such operator, has more than
    one, or cannot be partitioned without changing what it means.
    """
    try:
        items = _build(tokenize(expression))
    except TokenizeError:
        return None
    if not items:
        return None
    parser = _Parser(items)
    try:
        op = parser.run()
    except _Fallback:
        return None
    if op is None:
        return None
    lhs = expression[: op.offset].strip()
    rhs = expression[op.end :].strip()
    if not lhs or not rhs:
        return None
    return Comparison(lhs, op.text, rhs)