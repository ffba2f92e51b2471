"""Lexical analysis for xod language. Converts one line of text into a lazy sequence of tokens.

Tokens can be loosely defined as follows:

```
<int>     ::= <digit>+                              ; decimal
            | ("0x" | "0X") <hex_digit>+            ; hexadecimal
            | ("0o" | "0O") <oct_digit>+            ; octal
            | ("0b" | "0B") <bin_digit>+            ; binary
<ident>   ::= (<letter> | "_") (<letter> | <digit> | "_")*
<keyword> ::= "if" | "while" | "for" | "in"
<op>      ::= "**" | "<<" | ">>" | "==" | "!=" | "<=" | ">="
            | "&" | "|" | "^" | "~" | "!" | "+" | "-" | "*" | "/" | "%" | "<" | ">" | "="
<punct>   ::= "(" | ")" | "{" | "}" | "[" | "]" | "," | ";"     ; a newline is also emitted as ";"
```
"""

import logging
import string
from dataclasses import dataclass, field

from xod.lang.error import LexError


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Token:
    """Immutable token produced by tokenize. pos is the offset of the token's first character in the line."""
    INT = "INT"
    IDENT = "IDENT"
    OP = "OP"
    KEYWORD = "KEYWORD"
    PUNCT = "PUNCT"
    EOF = "EOF"

    kind: str
    value: object
    pos: int
    text: str = ""
    base: int = field(default=10, compare=False)

    @property
    def end(self):
        return self.pos + max(len(self.text), 1)

    def is_(self, kind, *values):
        """Whether or not this token has kind and, if given, one of values."""
        return self.kind == kind and (not values or self.value in values)

    def __str__(self):
        return self.text if self.kind != Token.EOF else "end of input"


KEYWORDS = ("if", "while", "for", "in")
OPERATORS = ("**", "<<", ">>", "==", "!=", "<=", ">=", "&", "|", "^", "~", "!", "+", "-", "*", "/", "%", "<", ">", "=")
PUNCTUATION = "(){}[],;"

PREFIXES = {"x": (16, string.hexdigits), "o": (8, string.octdigits), "b": (2, "01")}
IDENT_START = string.ascii_letters + "_"
IDENT_CHARS = IDENT_START + string.digits


def _read_int(line, pos):
    """Reads an integer literal starting at pos. Returns (token, next pos)."""
    start = pos
    base, digits = 10, string.digits

    if line[pos] == "0" and line[pos + 1:pos + 2].lower() in PREFIXES:
        base, digits = PREFIXES[line[pos + 1].lower()]
        pos += 2

    body_start = pos
    while pos < len(line) and line[pos] in digits:
        pos += 1

    if pos == body_start:
        raise LexError("malformed literal '{}': no digits after prefix", line[start:pos], start=start, end=pos)

    if pos < len(line) and line[pos] in IDENT_CHARS:
        end = pos
        while end < len(line) and line[end] in IDENT_CHARS:
            end += 1
        msg = "malformed literal '{}': '{}' is not a base {} digit"
        raise LexError(msg, (line[start:end], line[pos], base), start=pos, end=pos + 1)

    text = line[start:pos]
    return Token(Token.INT, int(line[body_start:pos], base), start, text, base), pos


def _read_ident(line, pos):
    """Reads an identifier or keyword starting at pos. Returns (token, next pos)."""
    start = pos
    while pos < len(line) and line[pos] in IDENT_CHARS:
        pos += 1

    word = line[start:pos]
    kind = Token.KEYWORD if word in KEYWORDS else Token.IDENT
    return Token(kind, word, start, word), pos


def tokenize(line):
    """Generates the tokens of line, followed by a single EOF token. Raises LexError with the offending offset."""
    pos = 0
    while pos < len(line):
        char = line[pos]

        if char == "\n":
            yield Token(Token.PUNCT, ";", pos, "\n")
            pos += 1

        elif char.isspace():
            pos += 1

        elif char in string.digits:
            token, pos = _read_int(line, pos)
            yield token

        elif char in IDENT_START:
            token, pos = _read_ident(line, pos)
            yield token

        elif char in PUNCTUATION:
            yield Token(Token.PUNCT, char, pos, char)
            pos += 1

        else:
            for op in OPERATORS:  # two-character operators come first
                if line.startswith(op, pos):
                    yield Token(Token.OP, op, pos, op)
                    pos += len(op)
                    break
            else:
                raise LexError("unrecognized character '{}'", char, start=pos, end=pos + 1)

    yield Token(Token.EOF, None, len(line))


def tokens(line):
    """Returns the list of tokens in line. Used by the parser, which needs lookahead."""
    result = list(tokenize(line))
    logger.debug("tokens: %s", " ".join(str(token) for token in result[:-1]))
    return result
