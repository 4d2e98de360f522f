"""Lexical analysis of AtomC source text."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import IntEnum, auto

from .utils import AtomCError


class TokenCode(IntEnum):
    """Token kinds, in the order used for display."""

    ID = 0
    # keywords
    TYPE_CHAR = auto()
    TYPE_DOUBLE = auto()
    ELSE = auto()
    IF = auto()
    TYPE_INT = auto()
    RETURN = auto()
    STRUCT = auto()
    VOID = auto()
    WHILE = auto()
    # constants
    INT = auto()
    DOUBLE = auto()
    CHAR = auto()
    STRING = auto()
    # delimiters
    COMMA = auto()
    SEMICOLON = auto()
    LPAR = auto()
    RPAR = auto()
    LBRACKET = auto()
    RBRACKET = auto()
    LACC = auto()
    RACC = auto()
    END = auto()
    # operators
    ADD = auto()
    SUB = auto()
    MUL = auto()
    DIV = auto()
    DOT = auto()
    AND = auto()
    OR = auto()
    NOT = auto()
    ASSIGN = auto()
    EQUAL = auto()
    NOTEQ = auto()
    LESS = auto()
    LESSEQ = auto()
    GREATER = auto()
    GREATEREQ = auto()


@dataclass(frozen=True)
class Token:
    """A token with its source line and, for constants and names, its value."""

    code: TokenCode
    line: int
    value: str | int | float | None = None


_KEYWORDS = {
    "char": TokenCode.TYPE_CHAR,
    "double": TokenCode.TYPE_DOUBLE,
    "else": TokenCode.ELSE,
    "if": TokenCode.IF,
    "int": TokenCode.TYPE_INT,
    "return": TokenCode.RETURN,
    "struct": TokenCode.STRUCT,
    "void": TokenCode.VOID,
    "while": TokenCode.WHILE,
}

_SINGLE = {
    ",": TokenCode.COMMA,
    ";": TokenCode.SEMICOLON,
    "(": TokenCode.LPAR,
    ")": TokenCode.RPAR,
    "[": TokenCode.LBRACKET,
    "]": TokenCode.RBRACKET,
    "{": TokenCode.LACC,
    "}": TokenCode.RACC,
    "+": TokenCode.ADD,
    "-": TokenCode.SUB,
    "*": TokenCode.MUL,
    ".": TokenCode.DOT,
}

# first char -> (code when followed by "=", code otherwise)
_WITH_EQ = {
    "!": (TokenCode.NOTEQ, TokenCode.NOT),
    "=": (TokenCode.EQUAL, TokenCode.ASSIGN),
    "<": (TokenCode.LESSEQ, TokenCode.LESS),
    ">": (TokenCode.GREATEREQ, TokenCode.GREATER),
}

_DOUBLED = {"&": TokenCode.AND, "|": TokenCode.OR}

_ESCAPES = {
    "a": "\a",
    "b": "\b",
    "f": "\f",
    "n": "\n",
    "r": "\r",
    "t": "\t",
    "v": "\v",
    "\\": "\\",
    "'": "'",
    '"': '"',
    "0": "\0",
}

_IDENT_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")
_MANTISSA_RE = re.compile(r"[0-9]+(\.[0-9]+)?")
_DIGITS_RE = re.compile(r"[0-9]+")


def _escape(ch: str) -> str:
    try:
        return _ESCAPES[ch]
    except KeyError:
        raise AtomCError(f"secventa de escape invalida: \\{ch}") from None


def tokenize(source: str) -> list[Token]:
    """Split source text into tokens; the last one is always END."""
    tokens: list[Token] = []
    line = 1
    pos = 0
    length = len(source)

    def at(index: int) -> str:
        return source[index] if index < length else "\0"

    def add(code: TokenCode, value: str | int | float | None = None) -> None:
        tokens.append(Token(code, line, value))

    while True:
        ch = at(pos)
        if ch in " \t":
            pos += 1
        elif ch in "\r\n":
            if ch == "\r" and at(pos + 1) == "\n":
                pos += 1
            line += 1
            pos += 1
        elif ch == "\0":
            add(TokenCode.END)
            return tokens
        elif ch in _SINGLE:
            add(_SINGLE[ch])
            pos += 1
        elif ch == "/":
            if at(pos + 1) == "/":
                pos += 2
                while at(pos) not in "\0\n\r":
                    pos += 1
            else:
                add(TokenCode.DIV)
                pos += 1
        elif ch in _DOUBLED:
            if at(pos + 1) != ch:
                raise AtomCError(f"caracter invalid: {ch}")
            add(_DOUBLED[ch])
            pos += 2
        elif ch in _WITH_EQ:
            with_eq, alone = _WITH_EQ[ch]
            if at(pos + 1) == "=":
                add(with_eq)
                pos += 2
            else:
                add(alone)
                pos += 1
        elif ch == "'":
            pos += 1
            current = at(pos)
            if current == "\\":
                pos += 1
                value = _escape(at(pos))
            else:
                if current == "\0":
                    raise AtomCError("lipseste apostroful de inchidere")
                if current == "'":
                    raise AtomCError("apostrof fara escape in caracter")
                value = current
            pos += 1
            if at(pos) != "'":
                raise AtomCError("lipseste apostroful de inchidere")
            add(TokenCode.CHAR, value)
            pos += 1
        elif ch == '"':
            pos += 1
            chars: list[str] = []
            while at(pos) != '"':
                current = at(pos)
                if current == "\0":
                    raise AtomCError("lipseste ghilimeaua de inchidere")
                if current == "\\":
                    pos += 1
                    current = _escape(at(pos))
                chars.append(current)
                pos += 1
            pos += 1
            add(TokenCode.STRING, "".join(chars))
        elif match := _IDENT_RE.match(source, pos):
            text = match.group()
            pos = match.end()
            keyword = _KEYWORDS.get(text)
            if keyword is not None:
                add(keyword)
            else:
                add(TokenCode.ID, text)
        elif match := _MANTISSA_RE.match(source, pos):
            is_double = match.group(1) is not None
            end = match.end()
            if at(end) in "eE":
                is_double = True
                end += 1
                if at(end) in "+-":
                    end += 1
                digits = _DIGITS_RE.match(source, end)
                if digits is None:
                    raise AtomCError("cifre lipsa dupa exponent")
                end = digits.end()
            number = source[pos:end]
            pos = end
            if is_double:
                add(TokenCode.DOUBLE, float(number))
            else:
                add(TokenCode.INT, int(number))
        else:
            raise AtomCError(f"caracter invalid: {ch} ({ord(ch)})")


def format_tokens(tokens: list[Token]) -> str:
    """Render tokens grouped by source line."""
    parts: list[str] = []
    current_line = -1
    for tk in tokens:
        if tk.line != current_line:
            if current_line != -1:
                parts.append("\n")
            parts.append(f"Line {tk.line:<3d}: ")
            current_line = tk.line
        parts.append(tk.code.name)
        if tk.code in (TokenCode.ID, TokenCode.STRING, TokenCode.CHAR):
            parts.append(f":{tk.value}")
        elif tk.code == TokenCode.INT:
            parts.append(f":{tk.value:d}")
        elif tk.code == TokenCode.DOUBLE:
            parts.append(f":{tk.value:.2f}")
        parts.append(" ")
    parts.append("\n")
    return "".join(parts)


def show_tokens(tokens: list[Token]) -> None:
    """Print tokens grouped by source line."""
    print(format_tokens(tokens), end="")