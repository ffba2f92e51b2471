"""Recursive descent parser for xod language.

The grammar can be loosely defined as follows:

```
<program>    ::= <statement> (<sep> <statement>)*        ; <sep> is ";" or a newline
<statement>  ::= <if> | <while> | <for> | <assignment> | <expression>
<if>         ::= "if" "(" <expression> ")" <block>
<while>      ::= "while" "(" <expression> ")" <block>
<for>        ::= "for" "(" <ident> "in" <expression> ")" <block>
<block>      ::= "{" <statement>* "}"                    ; may be empty
<assignment> ::= <ident> "=" <expression>
<expression> ::= <unary> (<binop> <unary>)*              ; see below (*)
<unary>      ::= ("~" | "!") <unary> | <postfix>         ; unary "-" is rejected, values are unsigned
<postfix>    ::= <primary> ("[" <expression> "]")*
<primary>    ::= <int> | <ident> | <ident> "(" <args> ")" | "(" <expression> ")" | "[" <args> "]"
```

(*) There is no precedence table for binary operators. One nesting level holds exactly one binary operator: `a & b`
is fine, but in `a & b | c` it is unclear which applies first, so the parser refuses it with AmbiguousExpression and
asks for `(a & b) | c` or `a & (b | c)`. The same goes for a repeated operator: `a + b + c` must be written
`(a + b) + c`. Parenthesized expressions start a new level.
"""

import logging

from xod.lang.ast import (Assignment, BinaryOp, Block, Call, CONTROL, For, Identifier, If, Index, IntegerLiteral,
                          ListLiteral, UnaryOp, While)
from xod.lang.error import AmbiguousExpression, UnexpectedToken, UnterminatedBlock
from xod.lang.lexical import Token, tokens


logger = logging.getLogger(__name__)


BITWISE = ("&", "|", "^", "<<", ">>")
ARITHMETIC = ("+", "-", "*", "/", "%", "**")
COMPARISON = ("==", "!=", "<", "<=", ">", ">=")
BINARY_OPS = BITWISE + ARITHMETIC + COMPARISON
UNARY_OPS = ("~", "!")

CLOSING = {"(": ")", "[": "]", "{": "}"}


class Parser:
    """Parses one logical line. Parser(line).parse() returns a tuple of statement nodes."""

    def __init__(self, line):
        self.line = line
        self.tokens = tokens(line)
        self.idx = 0
        self.open = []  # stack of opening tokens still waiting for their closing token

    @property
    def current(self):
        return self.tokens[self.idx]

    @property
    def previous(self):
        """Last consumed token."""
        return self.tokens[max(self.idx - 1, 0)]

    def peek(self, offset=1):
        return self.tokens[min(self.idx + offset, len(self.tokens) - 1)]

    def advance(self):
        token = self.current
        if not token.is_(Token.EOF):
            self.idx += 1
        return token

    def expect(self, kind, value, description=None):
        """Consumes and returns current token if it matches kind/value, otherwise raises a ParseError."""
        token = self.current
        if token.is_(kind, *(() if value is None else (value,))):
            return self.advance()

        if token.is_(Token.EOF) and self.open:
            opening = self.open[-1]
            raise UnterminatedBlock(opening.value, start=opening.pos, end=opening.end)

        raise UnexpectedToken(description or f"'{value}'", token, start=token.pos, end=token.end)

    def _open(self, value):
        token = self.expect(Token.PUNCT, value)
        self.open.append(token)
        return token

    def _close(self, value):
        token = self.expect(Token.PUNCT, value)
        self.open.pop()
        return token

    def skip_separators(self):
        while self.current.is_(Token.PUNCT, ";"):
            self.advance()

    def parse(self):
        """Parses the whole line and returns its statements. Raises a ParseError on invalid grammar."""
        statements = self.statements(until=Token.EOF)
        logger.debug("parsed:\n%s", "\n".join(stmt.display() for stmt in statements))
        return statements

    def statements(self, until):
        """Parses statements until the terminator (EOF or a closing brace) is found, without consuming it."""
        statements = []
        self.skip_separators()

        while not self._at_end(until):
            statement = self.statement()
            statements.append(statement)

            if self.current.is_(Token.PUNCT, ";"):
                self.skip_separators()
            elif not self._at_end(until) and not isinstance(statement, CONTROL):
                raise UnexpectedToken("';' or a new line", self.current, start=self.current.pos, end=self.current.end)

        return tuple(statements)

    def _at_end(self, until):
        if until == Token.EOF:
            return self.current.is_(Token.EOF)
        if self.current.is_(Token.EOF):
            opening = self.open[-1]
            raise UnterminatedBlock(opening.value, start=opening.pos, end=opening.end)
        return self.current.is_(Token.PUNCT, "}")

    def statement(self):
        token = self.current

        if token.is_(Token.KEYWORD, "if"):
            return self.if_statement()
        elif token.is_(Token.KEYWORD, "while"):
            return self.while_statement()
        elif token.is_(Token.KEYWORD, "for"):
            return self.for_statement()
        elif token.is_(Token.IDENT) and self.peek().is_(Token.OP, "="):
            return self.assignment()
        return self.expression()

    def block(self):
        self.skip_separators()
        opening = self._open("{")
        statements = self.statements(until="}")
        self._close("}")
        return Block(statements, pos=opening.pos, stop=self.previous.end)

    def condition(self):
        """Parses the parenthesized header of if/while."""
        self._open("(")
        condition = self.expression()
        self._close(")")
        return condition

    def if_statement(self):
        keyword = self.advance()
        condition = self.condition()
        body = self.block()
        return If(condition, body, pos=keyword.pos, stop=body.end)

    def while_statement(self):
        keyword = self.advance()
        condition = self.condition()
        body = self.block()
        return While(condition, body, pos=keyword.pos, stop=body.end)

    def for_statement(self):
        keyword = self.advance()
        self._open("(")
        name = self.expect(Token.IDENT, None, "a loop variable")
        self.expect(Token.KEYWORD, "in")
        iterable = self.expression()
        self._close(")")
        body = self.block()
        return For(name.value, iterable, body, pos=keyword.pos, stop=body.end)

    def assignment(self):
        name = self.advance()
        self.advance()  # "="
        value = self.expression()
        return Assignment(name.value, value, pos=name.pos, stop=self.previous.end)

    def expression(self):
        """Parses a binary expression at the current nesting level, refusing ambiguous operator mixes before any
        BinaryOp is built.
        """
        start = self.current
        left = self.unary()
        if not self.current.is_(Token.OP, *BINARY_OPS):
            return left

        op = self.advance()
        right = self.unary()

        second = self.current
        if second.is_(Token.OP, *BINARY_OPS):
            raise AmbiguousExpression(op.value, second.value, start=second.pos, end=second.end)

        return BinaryOp(op.value, left, right, pos=start.pos, stop=self.previous.end)

    def unary(self):
        token = self.current
        if token.is_(Token.OP, *UNARY_OPS):
            self.advance()
            operand = self.unary()
            return UnaryOp("~", operand, pos=token.pos, stop=self.previous.end)
        elif token.is_(Token.OP, "-"):
            msg = "{}, found unary '{}': negative values are not supported"
            raise UnexpectedToken("a value", "-", start=token.pos, end=token.end, msg=msg)
        return self.postfix()

    def postfix(self):
        node = self.primary()
        while self.current.is_(Token.PUNCT, "["):
            self._open("[")
            index = self.expression()
            self._close("]")
            node = Index(node, index, pos=node.pos, stop=self.previous.end)
        return node

    def arguments(self, closing):
        """Parses a comma-separated expression list up to closing, which is consumed."""
        args = []
        if not self.current.is_(Token.PUNCT, closing):
            args.append(self.expression())
            while self.current.is_(Token.PUNCT, ","):
                self.advance()
                args.append(self.expression())
        self._close(closing)
        return tuple(args)

    def primary(self):
        token = self.current

        if token.is_(Token.INT):
            self.advance()
            return IntegerLiteral(token.value, token.base, pos=token.pos, stop=token.end)

        elif token.is_(Token.IDENT):
            self.advance()
            if self.current.is_(Token.PUNCT, "("):
                self._open("(")
                args = self.arguments(")")
                return Call(token.value, args, pos=token.pos, stop=self.previous.end)
            return Identifier(token.value, pos=token.pos, stop=token.end)

        elif token.is_(Token.PUNCT, "("):
            self._open("(")
            node = self.expression()
            self._close(")")
            return node

        elif token.is_(Token.PUNCT, "["):
            self._open("[")
            items = self.arguments("]")
            return ListLiteral(items, pos=token.pos, stop=self.previous.end)

        elif token.is_(Token.EOF) and self.open:
            opening = self.open[-1]
            raise UnterminatedBlock(opening.value, start=opening.pos, end=opening.end)

        raise UnexpectedToken("a value", token, start=token.pos, end=token.end)


def parse(line):
    """Returns the statements of line as a tuple of AST nodes."""
    return Parser(line).parse()
