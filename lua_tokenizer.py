import re
from dataclasses import dataclass
from enum import Enum
from typing import List

from lua_errors import LexError


class TokenType(Enum):
    # Raw lexical classes produced by the tokenizer
    NAME = "NAME"
    SCIHEXNUMBER = "SCIHEXNUMBER"
    HEXNUMBER = "HEXNUMBER"
    SCINUMBER = "SCINUMBER"
    NUMBER = "NUMBER"
    BLOCKCOMMENT = "BLOCKCOMMENT"
    LINECOMMENT = "LINECOMMENT"
    BLOCKQUOTE = "BLOCKQUOTE"
    DQUOTE = "DQUOTE"
    SQUOTE = "SQUOTE"
    OPERATOR = "OPERATOR"
    WHITESPACE = "WHITESPACE"
    INVALID = "INVALID"

    # Kinds only assigned by the reducer
    KEYWORD = "KEYWORD"
    CONSTANT = "CONSTANT"
    STRING = "STRING"
    COMMENT = "COMMENT"


OPERATORS = {
    "+", "-", "*", "/", "%", "^", "#", "==", "~=", "<=", ">=", "<", ">", "=",
    "(", ")", "{", "}", "[", "]", "::", ";", ":", ",", ".", "..",
}

# Only accepted when the language version enables them
BITWISE_OPERATORS = {"&", "~", "|", "<<", ">>", "//"}

ELLIPSIS = "..."

ALL_OPERATORS = OPERATORS | BITWISE_OPERATORS | {ELLIPSIS}

OPERATOR_CHARS = ";:=.,[](){}+-*/^%<>~#&|"

# Returned by a matcher that found the opening of a construct but not its end
UNFINISHED = -1

_NAME = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")
_SCIHEXNUMBER = re.compile(r"0[xX](?:[0-9a-fA-F]+\.?[0-9a-fA-F]*|\.[0-9a-fA-F]+)[pP][+-]?\d+")
_HEXNUMBER = re.compile(r"0[xX](?:[0-9a-fA-F]+\.?[0-9a-fA-F]*|\.[0-9a-fA-F]+)")
_SCINUMBER = re.compile(r"(?:\d+\.?\d*|\.\d+)[eE][+-]?\d+")
_NUMBER = re.compile(r"\d+\.?\d*|\.\d+")
_LINECOMMENT = re.compile(r"--[^\r\n]*")
_LONG_OPEN = re.compile(r"\[(=*)\[")
_OPERATOR = re.compile("[" + re.escape(OPERATOR_CHARS) + "]{1,3}")
_WHITESPACE = re.compile(r"\s+")
_INVALID = re.compile("[^A-Za-z0-9_\\s\"'" + re.escape(OPERATOR_CHARS) + "]+")


def _regex(pattern):
    def match(text, pos):
        m = pattern.match(text, pos)
        return m.end() if m else None
    return match


def _match_long_bracket(text, pos, prefix=""):
    if not text.startswith(prefix, pos):
        return None
    m = _LONG_OPEN.match(text, pos + len(prefix))
    if m is None:
        return None
    close = "]" + m.group(1) + "]"
    end = text.find(close, m.end())
    if end < 0:
        return UNFINISHED
    return end + len(close)


def _match_block_comment(text, pos):
    return _match_long_bracket(text, pos, "--")


def _match_quoted(quote):
    def match(text, pos):
        if not text.startswith(quote, pos):
            return None
        start = pos + 1
        while True:
            end = text.find(quote, start)
            if end < 0:
                return UNFINISHED
            # An odd run of backslashes escapes the quote
            backslashes = 0
            while text[end - 1 - backslashes] == "\\":
                backslashes += 1
            if backslashes % 2 == 0:
                return end + 1
            start = end + 1
    return match


def _match_operator(text, pos):
    m = _OPERATOR.match(text, pos)
    if m is None:
        return None
    candidate = m.group()
    while len(candidate) > 1 and candidate not in ALL_OPERATORS:
        candidate = candidate[:-1]
    return pos + len(candidate)


# Tried in order; the first class that matches wins.
LEXICAL_CLASSES = [
    (TokenType.NAME, _regex(_NAME)),
    (TokenType.SCIHEXNUMBER, _regex(_SCIHEXNUMBER)),
    (TokenType.HEXNUMBER, _regex(_HEXNUMBER)),
    (TokenType.SCINUMBER, _regex(_SCINUMBER)),
    (TokenType.NUMBER, _regex(_NUMBER)),
    (TokenType.BLOCKCOMMENT, _match_block_comment),
    (TokenType.LINECOMMENT, _regex(_LINECOMMENT)),
    (TokenType.BLOCKQUOTE, _match_long_bracket),
    (TokenType.DQUOTE, _match_quoted('"')),
    (TokenType.SQUOTE, _match_quoted("'")),
    (TokenType.OPERATOR, _match_operator),
    (TokenType.WHITESPACE, _regex(_WHITESPACE)),
    (TokenType.INVALID, _regex(_INVALID)),
]


@dataclass(frozen=True)
class Token:
    type: TokenType
    value: str
    line: int
    col: int

    def __repr__(self):
        return f"{self.type.value}({self.value!r}) at {self.line}:{self.col}"


class LuaTokenizer:
    """Splits Lua source into positioned tokens of the raw lexical classes.

    Text may be fed in chunks. Only tokens ending before the last newline
    seen so far are emitted; the rest (including an unclosed string) stays
    in ``pending`` until more text arrives or ``finish()`` is called.
    """

    def __init__(self, text=""):
        self.pending = text
        self.line = 1
        self.col = 1
        self.tokens: List[Token] = []

    def add(self, type_, value):
        self.tokens.append(Token(type_, value, self.line, self.col))
        newlines = value.count("\n")
        if newlines:
            self.line += newlines
            self.col = len(value) - value.rfind("\n")
        else:
            self.col += len(value)

    def feed(self, chunk):
        self.pending += chunk
        self._scan(final=False)

    def finish(self) -> List[Token]:
        self._scan(final=True)
        if self.pending:
            if self.pending.startswith("--"):
                message = "unfinished long comment"
            elif self.pending.startswith("["):
                message = "unfinished long string"
            else:
                message = "unfinished string"
            raise LexError(message, self.line, self.col)
        return self.tokens

    def tokenize(self) -> List[Token]:
        return self.finish()

    def _scan(self, final):
        text = self.pending
        limit = len(text) if final else text.rfind("\n")
        pos = 0
        while pos < len(text):
            for type_, matcher in LEXICAL_CLASSES:
                end = matcher(text, pos)
                if end is not None:
                    break
            else:
                break
            if end == UNFINISHED or end > limit:
                break
            self.add(type_, text[pos:end])
            pos = end
        self.pending = text[pos:]


def tokenize(text) -> List[Token]:
    return LuaTokenizer(text).tokenize()
