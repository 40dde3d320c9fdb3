"""Splitting of expression source text into tokens and balanced delimiters."""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass
from typing import List, Tuple


class TokenKind(enum.Enum):
    IDENT = "ident"
    LIFETIME = "lifetime"
    LITERAL = "literal"
    PUNCT = "punct"
    OPEN = "open"
    CLOSE = "close"


@dataclass(frozen=True)
class Token:
    """One token and where it starts in the source text."""

    kind: TokenKind
    text: str
    offset: int

    @property
    def end(self) -> int:
        return self.offset + len(self.text)

    def __str__(self) -> str:
        return self.text


class TokenizeError(ValueError):
    """The text cannot be split into tokens."""

    def __init__(self, message: str, offset: int) -> None:
        super().__init__(f"{message} at offset {offset}")
        self.offset = offset


_PAIRS = {"(": ")", "[": "]", "{": "}"}
_CLOSERS = frozenset(_PAIRS.values())

_PUNCTS = sorted(
    [
        "<<=", ">>=", "...", "..=",
        "::", "->", "=>", "==", "!=", "<=", ">=", "&&", "||",
        "+=", "-=", "*=", "/=", "%=", "^=", "&=", "|=", "<<", ">>", "..",
        "+", "-", "*", "/", "%", "^", "!", "&", "|", "=", "<", ">",
        "@", ".", ",", ";", ":", "#", "$", "?", "~",
    ],
    key=len,
    reverse=True,
)

_RAW_STRING_START = re.compile(r'[bc]?r(#*)"')
_STRING_START = re.compile(r'[bc]?"')
_NUMBER = re.compile(
    r"""
    (?:
        0x[0-9a-fA-F_]+
      | 0o[0-7_]+
      | 0b[01_]+
      | [0-9][0-9_]*
        (?: \.[0-9][0-9_]* | \.(?![.\w]) )?
        (?: [eE][+-]?[0-9_]*[0-9][0-9_]* )?
    )
    (?: [A-Za-z_][A-Za-z0-9_]* )?
    """,
    re.VERBOSE,
)


def _is_ident_start(char: str) -> bool:
    return char == "_" or char.isalpha()


def _ident_end(text: str, pos: int) -> int:
    while pos < len(text) and (text[pos] == "_" or text[pos].isalnum()):
        pos += 1
    return pos


def _skip_trivia(text: str, pos: int) -> int:
    length = len(text)
    while pos < length:
        if text[pos].isspace():
            pos += 1
        elif text.startswith("//", pos):
            newline = text.find("\n", pos)
            pos = length if newline < 0 else newline + 1
        elif text.startswith("/*", pos):
            start, depth, pos = pos, 1, pos + 2
            while depth:
                if pos >= length:
                    raise TokenizeError("unterminated block comment", start)
                if text.startswith("/*", pos):
                    depth += 1
                    pos += 2
                elif text.startswith("*/", pos):
                    depth -= 1
                    pos += 2
                else:
                    pos += 1
        else:
            break
    return pos


def _scan_string(text: str, quote: int) -> int:
    pos = quote + 1
    while pos < len(text):
        char = text[pos]
        if char == "\\":
            pos += 2
            continue
        if char == '"':
            return pos + 1
        pos += 1
    raise TokenizeError("unterminated string literal", quote)


def _scan_quote(text: str, quote: int, allow_lifetime: bool) -> Tuple[TokenKind, int]:
    pos = quote + 1
    if pos >= len(text):
        raise TokenizeError("unterminated character literal", quote)
    if text[pos] == "\\":
        close = text.find("'", pos + 2)
        if close < 0:
            raise TokenizeError("unterminated character literal", quote)
        return TokenKind.LITERAL, close + 1
    if pos + 1 < len(text) and text[pos + 1] == "'":
        return TokenKind.LITERAL, pos + 2
    if allow_lifetime and _is_ident_start(text[pos]):
        return TokenKind.LIFETIME, _ident_end(text, pos)
    raise TokenizeError("unterminated character literal", quote)


def _scan(text: str, pos: int) -> Tuple[TokenKind, int]:
    char = text[pos]
    if char in _PAIRS:
        return TokenKind.OPEN, pos + 1
    if char in _CLOSERS:
        return TokenKind.CLOSE, pos + 1

    raw = _RAW_STRING_START.match(text, pos)
    if raw:
        terminator = '"' + raw.group(1)
        close = text.find(terminator, raw.end())
        if close < 0:
            raise TokenizeError("unterminated raw string literal", pos)
        return TokenKind.LITERAL, close + len(terminator)
    plain = _STRING_START.match(text, pos)
    if plain:
        return TokenKind.LITERAL, _scan_string(text, plain.end() - 1)
    if text.startswith("b'", pos):
        return _scan_quote(text, pos + 1, allow_lifetime=False)
    if char == "'":
        return _scan_quote(text, pos, allow_lifetime=True)

    if text.startswith("r#", pos) and pos + 2 < len(text) and _is_ident_start(text[pos + 2]):
        return TokenKind.IDENT, _ident_end(text, pos + 2)
    if _is_ident_start(char):
        return TokenKind.IDENT, _ident_end(text, pos)
    if char.isdigit():
        number = _NUMBER.match(text, pos)
        if number:
            return TokenKind.LITERAL, number.end()

    for punct in _PUNCTS:
        if text.startswith(punct, pos):
            return TokenKind.PUNCT, pos + len(punct)
    raise TokenizeError(f"unexpected character {char!r}", pos)


def tokenize(text: str) -> List[Token]:
    """Split ``text`` into tokens, checking that delimiters are balanced."""
    tokens: List[Token] = []
    open_stack: List[Token] = []
    pos = 0
    while True:
        pos = _skip_trivia(text, pos)
        if pos >= len(text):
            break
        kind, end = _scan(text, pos)
        token = Token(kind, text[pos:end], pos)
        if kind is TokenKind.OPEN:
            open_stack.append(token)
        elif kind is TokenKind.CLOSE:
            if not open_stack:
                raise TokenizeError(f"unmatched {token.text!r}", pos)
            opener = open_stack.pop()
            if _PAIRS[opener.text] != token.text:
                raise TokenizeError(f"mismatched {token.text!r}", pos)
        tokens.append(token)
        pos = end
    if open_stack:
        opener = open_stack[-1]
        raise TokenizeError(f"unclosed {opener.text!r}", opener.offset)
    return tokens