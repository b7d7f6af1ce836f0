"""Lox tokenizer: lexes source into a flat token list."""

from __future__ import annotations

from dataclasses import dataclass

from .errors import Reporter, StaticError


# Token type constants
TK_LEFT_PAREN = "LEFT_PAREN"
TK_RIGHT_PAREN = "RIGHT_PAREN"
TK_LEFT_BRACE = "LEFT_BRACE"
TK_RIGHT_BRACE = "RIGHT_BRACE"
TK_COMMA = "COMMA"
TK_DOT = "DOT"
TK_MINUS = "MINUS"
TK_PLUS = "PLUS"
TK_SEMICOLON = "SEMICOLON"
TK_SLASH = "SLASH"
TK_STAR = "STAR"
TK_BANG = "BANG"
TK_BANG_EQUAL = "BANG_EQUAL"
TK_EQUAL = "EQUAL"
TK_EQUAL_EQUAL = "EQUAL_EQUAL"
TK_GREATER = "GREATER"
TK_GREATER_EQUAL = "GREATER_EQUAL"
TK_LESS = "LESS"
TK_LESS_EQUAL = "LESS_EQUAL"
TK_IDENT = "IDENTIFIER"
TK_STRING = "STRING"
TK_NUMBER = "NUMBER"
TK_EOF = "EOF"

# Keyword tokens use the keyword text as their type.
KEYWORDS: set[str] = {
    "and",
    "class",
    "else",
    "false",
    "fun",
    "for",
    "if",
    "nil",
    "or",
    "print",
    "return",
    "super",
    "this",
    "true",
    "var",
    "while",
}

SINGLE_OPS: dict[str, str] = {
    "(": TK_LEFT_PAREN,
    ")": TK_RIGHT_PAREN,
    "{": TK_LEFT_BRACE,
    "}": TK_RIGHT_BRACE,
    ",": TK_COMMA,
    ".": TK_DOT,
    "-": TK_MINUS,
    "+": TK_PLUS,
    ";": TK_SEMICOLON,
    "*": TK_STAR,
}

# Operators that become a two-character token when followed by '='.
EQUAL_OPS: dict[str, tuple[str, str]] = {
    "!": (TK_BANG, TK_BANG_EQUAL),
    "=": (TK_EQUAL, TK_EQUAL_EQUAL),
    "<": (TK_LESS, TK_LESS_EQUAL),
    ">": (TK_GREATER, TK_GREATER_EQUAL),
}


class LexError(StaticError):
    """Error during tokenization."""


@dataclass(frozen=True)
class Token:
    """A token with type, source text, literal value, and line."""

    type: str
    lexeme: str
    literal: float | str | None
    line: int

    def __str__(self) -> str:
        return self.type + " " + self.lexeme + " " + _literal_text(self.literal)


def _literal_text(literal: float | str | None) -> str:
    if literal is None:
        return "null"
    return str(literal)


def _is_digit(c: str) -> bool:
    return c >= "0" and c <= "9"


def _is_alpha(c: str) -> bool:
    return (c >= "a" and c <= "z") or (c >= "A" and c <= "Z") or c == "_"


def _is_alnum(c: str) -> bool:
    return _is_alpha(c) or _is_digit(c)


def tokenize(source: str, reporter: Reporter) -> list[Token]:
    """Tokenize Lox source into a flat list ending with TK_EOF.

    Lexical errors go to `reporter` and scanning carries on with the next
    character, so one pass surfaces every bad character in the file.
    """
    tokens: list[Token] = []
    pos = 0
    line = 1
    length = len(source)

    while pos < length:
        c = source[pos]

        # Newlines
        if c == "\n":
            pos += 1
            line += 1
            continue

        # Whitespace
        if c == " " or c == "\t" or c == "\r":
            pos += 1
            continue

        # Line comment: //
        if c == "/" and pos + 1 < length and source[pos + 1] == "/":
            while pos < length and source[pos] != "\n":
                pos += 1
            continue

        start_pos = pos

        # String literal: "...", may span lines
        if c == '"':
            pos += 1
            while pos < length and source[pos] != '"':
                if source[pos] == "\n":
                    line += 1
                pos += 1
            if pos >= length:
                reporter.error(LexError("Unterminated string.", line))
                continue
            pos += 1  # skip closing "
            raw = source[start_pos:pos]
            tokens.append(Token(TK_STRING, raw, raw[1:-1], line))
            continue

        # Number: digits with an optional fractional part
        if _is_digit(c):
            while pos < length and _is_digit(source[pos]):
                pos += 1
            if (
                pos + 1 < length
                and source[pos] == "."
                and _is_digit(source[pos + 1])
            ):
                pos += 1
                while pos < length and _is_digit(source[pos]):
                    pos += 1
            raw = source[start_pos:pos]
            tokens.append(Token(TK_NUMBER, raw, float(raw), line))
            continue

        # Identifier or keyword
        if _is_alpha(c):
            while pos < length and _is_alnum(source[pos]):
                pos += 1
            word = source[start_pos:pos]
            if word in KEYWORDS:
                tokens.append(Token(word, word, None, line))
            else:
                tokens.append(Token(TK_IDENT, word, None, line))
            continue

        # One- or two-character operators, longest match first
        if c in EQUAL_OPS:
            single, double = EQUAL_OPS[c]
            if pos + 1 < length and source[pos + 1] == "=":
                tokens.append(Token(double, source[pos : pos + 2], None, line))
                pos += 2
            else:
                tokens.append(Token(single, c, None, line))
                pos += 1
            continue

        if c == "/":
            tokens.append(Token(TK_SLASH, c, None, line))
            pos += 1
            continue

        if c in SINGLE_OPS:
            tokens.append(Token(SINGLE_OPS[c], c, None, line))
            pos += 1
            continue

        reporter.error(LexError("Unexpected character.", line))
        pos += 1

    tokens.append(Token(TK_EOF, "", None, line))
    return tokens
