from typing import List, Optional

from lua_errors import GrammarError
from lua_tokenizer import ELLIPSIS, Token, TokenType

INDENT_WIDTH = 4

# (left, right) binding powers; right < left marks right associativity
BINARY_PRIORITY = {
    "or": (1, 1),
    "and": (2, 2),
    "<": (3, 3),
    ">": (3, 3),
    "<=": (3, 3),
    ">=": (3, 3),
    "~=": (3, 3),
    "==": (3, 3),
    "|": (4, 4),
    "~": (5, 5),
    "&": (6, 6),
    "<<": (7, 7),
    ">>": (7, 7),
    "..": (9, 8),
    "+": (10, 10),
    "-": (10, 10),
    "*": (11, 11),
    "/": (11, 11),
    "//": (11, 11),
    "%": (11, 11),
    "^": (14, 13),
}

UNARY_OPERATORS = {"-", "#", "not", "~"}
UNARY_PRIORITY = 12

LITERAL_TYPES = (TokenType.NUMBER, TokenType.STRING, TokenType.CONSTANT)

# How a prefix expression ends
CALL = "call"
VARIABLE = "variable"
PARENTHESIZED = "parenthesized"


class FormatAccumulator:
    """Output text under construction plus the comments waiting for a line break."""

    def __init__(self):
        self.parts: List[str] = []
        self.pending_comments: List[str] = []

    def write(self, text):
        self.parts.append(text)

    def queue_comment(self, text):
        self.pending_comments.append(text)

    def flush_comments(self, indent):
        for comment in self.pending_comments:
            if self.parts:
                self.parts.append("\n" + " " * indent)
            self.parts.append(comment)
        self.pending_comments = []

    def line_break(self, indent, comment_indent=None, blank=False):
        """Start a new line at ``indent``, first emitting pending comments
        on their own lines at ``comment_indent`` (defaults to ``indent``)."""
        if blank and self.parts:
            self.parts.append("\n")
        self.flush_comments(indent if comment_indent is None else comment_indent)
        if self.parts:
            self.parts.append("\n" + " " * indent)

    def getvalue(self):
        return "".join(self.parts)


class ExpressionFormatter:
    """Precedence-climbing renderer for expressions and table constructors.

    Works on reduced tokens (whitespace removed, comments kept). Comments are
    never visible to the rendering methods: consuming a token moves every
    comment that follows it into the accumulator's pending buffer.

    This is an abstract base: function bodies need ``block()``, which only
    ``BlockEngine`` provides. Instantiate ``BlockEngine`` to format anything
    that may contain a ``function`` literal.
    """

    def __init__(self, tokens: List[Token]):
        self.tokens = tokens
        self.pos = 0
        self.out = FormatAccumulator()
        self._collect_comments()

    def current(self) -> Optional[Token]:
        if self.pos < len(self.tokens):
            return self.tokens[self.pos]
        return None

    def peek(self, offset=0) -> Optional[Token]:
        index = self.pos
        while index < len(self.tokens):
            token = self.tokens[index]
            if token.type != TokenType.COMMENT:
                if offset == 0:
                    return token
                offset -= 1
            index += 1
        return None

    def check(self, value, offset=0):
        token = self.peek(offset)
        return token is not None and token.value == value

    def next(self) -> Token:
        token = self.current()
        if token is None:
            raise self.error("unexpected end of input")
        self.pos += 1
        self._collect_comments()
        return token

    def expect(self, value) -> Token:
        if not self.check(value):
            raise self.error(f"'{value}' expected")
        return self.next()

    def expect_name(self) -> str:
        token = self.current()
        if token is None or token.type != TokenType.NAME:
            raise self.error("<name> expected")
        return self.next().value

    def error(self, message, token=None):
        if token is None:
            token = self.current()
        if token is None:
            near = "<eof>"
            last = self.tokens[-1] if self.tokens else None
            line, col = (last.line, last.col) if last else (1, 1)
        else:
            near = f"'{token.value}'"
            line, col = token.line, token.col
        return GrammarError(f"{message} near {near}", line, col)

    def _collect_comments(self):
        while self.pos < len(self.tokens) and self.tokens[self.pos].type == TokenType.COMMENT:
            self.out.queue_comment(self.tokens[self.pos].value)
            self.pos += 1

    # Statement-level hooks, provided by BlockEngine

    def block(self, indent):
        raise NotImplementedError("statement blocks are rendered by BlockEngine")

    def close_block(self, indent, keyword):
        self.out.line_break(indent, comment_indent=indent + INDENT_WIDTH)
        self.expect(keyword)
        self.out.write(keyword)

    # Expressions

    def expression(self, indent, limit=0):
        token = self.current()
        if token is None:
            raise self.error("expression expected")

        if token.type == TokenType.OPERATOR and token.value in UNARY_OPERATORS:
            self.next()
            self.out.write(token.value)
            operand = self.current()
            if token.value == "not":
                self.out.write(" ")
            elif token.value == "-" and operand is not None and operand.value.startswith("-"):
                self.out.write(" ")
            self.expression(indent, UNARY_PRIORITY)
        else:
            self.simple_expression(indent)

        token = self.current()
        while (
            token is not None
            and token.type == TokenType.OPERATOR
            and token.value in BINARY_PRIORITY
            and BINARY_PRIORITY[token.value][0] > limit
        ):
            self.next()
            self.out.write(f" {token.value} ")
            self.expression(indent, BINARY_PRIORITY[token.value][1])
            token = self.current()

    def expression_list(self, indent):
        self.expression(indent)
        while self.check(","):
            self.next()
            self.out.write(", ")
            self.expression(indent)

    def simple_expression(self, indent):
        token = self.current()
        if token.type in LITERAL_TYPES:
            self.next()
            self.out.write(token.value)
        elif token.type == TokenType.OPERATOR and token.value == "{":
            self.table(indent)
        elif token.type == TokenType.KEYWORD and token.value == "function":
            self.next()
            self.out.write("function")
            self.function_body(indent)
        else:
            self.primary_expression(indent)

    def primary_expression(self, indent):
        """Render a prefix and its suffix chain.

        Returns ``CALL``, ``VARIABLE`` or ``PARENTHESIZED`` depending on how
        the chain ends; only a ``VARIABLE`` can be assigned to.
        """
        token = self.current()
        if token is None:
            raise self.error("unexpected symbol")
        if token.type == TokenType.OPERATOR and token.value == "(":
            self.next()
            self.out.write("(")
            self.expression(indent)
            self.expect(")")
            self.out.write(")")
            kind = PARENTHESIZED
        elif token.type == TokenType.NAME:
            self.next()
            self.out.write(token.value)
            kind = VARIABLE
        else:
            raise self.error("unexpected symbol", token)

        while True:
            token = self.current()
            if token is None:
                return kind
            if token.type == TokenType.STRING:
                self.next()
                self.out.write(" " + token.value)
                kind = CALL
            elif token.type != TokenType.OPERATOR:
                return kind
            elif token.value in (".", ":"):
                self.next()
                self.out.write(token.value + self.expect_name())
                kind = VARIABLE
            elif token.value == "[":
                self.next()
                close = self.open_index()
                self.expression(indent)
                self.expect("]")
                self.out.write(close)
                kind = VARIABLE
            elif token.value == "{":
                self.table(indent)
                kind = CALL
            elif token.value == "(":
                self.next()
                self.out.write("(")
                if not self.check(")"):
                    self.expression_list(indent)
                self.expect(")")
                self.out.write(")")
                kind = CALL
            else:
                return kind

    def open_index(self):
        """Write the '[' of an index or table key and return its closer.

        A long-bracket string right after '[' would merge into a longer
        opener, so both brackets are padded with a space in that case.
        """
        token = self.current()
        if token is not None and token.type == TokenType.STRING and token.value.startswith("["):
            self.out.write("[ ")
            return " ]"
        self.out.write("[")
        return "]"

    def parameters(self):
        self.expect("(")
        names = []
        if not self.check(")"):
            while True:
                token = self.current()
                if token is not None and token.type == TokenType.CONSTANT and token.value == ELLIPSIS:
                    names.append(self.next().value)
                    break
                names.append(self.expect_name())
                if not self.check(","):
                    break
                self.next()
        self.expect(")")
        self.out.write("(" + ", ".join(names) + ")")

    def function_body(self, indent):
        self.parameters()
        self.block(indent + INDENT_WIDTH)
        self.close_block(indent, "end")

    # Table constructors

    def table(self, indent):
        self.expect("{")
        if self.check("}"):
            self.next()
            self.out.write("{}")
            return

        self.out.write("{")
        field_indent = indent + INDENT_WIDTH
        while True:
            self.out.line_break(field_indent)
            self.field(field_indent)
            if self.check(",") or self.check(";"):
                self.next()
                if self.check("}"):
                    break
                self.out.write(",")
            elif self.check("}"):
                break
            else:
                raise self.error("'}' expected")
        self.out.line_break(indent, comment_indent=field_indent)
        self.expect("}")
        self.out.write("}")

    def field(self, indent):
        token = self.current()
        if token is None:
            raise self.error("'}' expected")
        if token.type == TokenType.OPERATOR and token.value == "[":
            self.next()
            close = self.open_index()
            self.expression(indent)
            self.expect("]")
            self.expect("=")
            self.out.write(close + " = ")
            self.expression(indent)
        elif token.type == TokenType.NAME and self.check("=", 1):
            self.next()
            self.next()
            self.out.write(token.value + " = ")
            self.expression(indent)
        else:
            self.expression(indent)
