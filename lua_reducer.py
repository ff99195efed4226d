import logging
from dataclasses import replace
from typing import List

from lua_errors import LexError, OperatorError
from lua_tokenizer import BITWISE_OPERATORS, ELLIPSIS, OPERATORS, Token, TokenType

logger = logging.getLogger(__name__)

DEFAULT_VERSION = 1
GOTO_VERSION = 2
BITWISE_VERSION = 3

TRIM_NONE = 0
TRIM_WHITESPACE = 1
TRIM_COMMENTS = 2

KEYWORDS = {
    "break", "do", "else", "elseif", "end", "for", "function", "if", "in",
    "local", "repeat", "return", "then", "until", "while",
}

WORD_OPERATORS = {"and", "not", "or"}

CONSTANTS = {"true", "false", "nil", ELLIPSIS}

# Lexical variants that collapse into one final kind
COLLAPSED_TYPES = {
    TokenType.DQUOTE: TokenType.STRING,
    TokenType.SQUOTE: TokenType.STRING,
    TokenType.BLOCKQUOTE: TokenType.STRING,
    TokenType.LINECOMMENT: TokenType.COMMENT,
    TokenType.BLOCKCOMMENT: TokenType.COMMENT,
    TokenType.HEXNUMBER: TokenType.NUMBER,
    TokenType.SCINUMBER: TokenType.NUMBER,
    TokenType.SCIHEXNUMBER: TokenType.NUMBER,
}

CLOSING_BRACKETS = {")", "]", "}"}


def keywords_for(version):
    if version >= GOTO_VERSION:
        return KEYWORDS | {"goto"}
    return KEYWORDS


def classify(token: Token, version=DEFAULT_VERSION, keywords=None) -> Token:
    """Return ``token`` with its final kind, validating operators."""
    if keywords is None:
        keywords = keywords_for(version)

    if token.type == TokenType.OPERATOR:
        if token.value == ELLIPSIS:
            return replace(token, type=TokenType.CONSTANT)
        if token.value not in OPERATORS and (version < BITWISE_VERSION or token.value not in BITWISE_OPERATORS):
            raise OperatorError(f"invalid operator '{token.value}'", token.line, token.col)
        return token

    if token.type == TokenType.NAME:
        if token.value in keywords:
            return replace(token, type=TokenType.KEYWORD)
        if token.value in WORD_OPERATORS:
            return replace(token, type=TokenType.OPERATOR)
        if token.value in CONSTANTS:
            return replace(token, type=TokenType.CONSTANT)
        return token

    if token.type == TokenType.INVALID:
        raise LexError("invalid characters", token.line, token.col)

    if token.type in COLLAPSED_TYPES:
        return replace(token, type=COLLAPSED_TYPES[token.type])
    return token


def _folds_after(previous):
    # A '-' is unary after any operator except a closing bracket, after a
    # keyword other than 'end', and at the start of the stream.
    if previous is None:
        return True
    if previous.type == TokenType.OPERATOR:
        return previous.value not in CLOSING_BRACKETS
    if previous.type == TokenType.KEYWORD:
        return previous.value != "end"
    return False


def _previous_code(kept, index):
    while index >= 0:
        if kept[index].type != TokenType.COMMENT:
            return kept[index]
        index -= 1
    return None


def reduce_tokens(tokens, version=DEFAULT_VERSION, trim=TRIM_NONE) -> List[Token]:
    """Classify ``tokens`` and, when trimming, drop whitespace (and comments
    for ``TRIM_COMMENTS``) after folding unary minus into number literals."""
    keywords = keywords_for(version)
    reduced = [classify(token, version, keywords) for token in tokens]
    if trim == TRIM_NONE:
        return reduced

    kept: List[Token] = []
    folded = 0
    for token in reduced:
        if token.type == TokenType.WHITESPACE:
            continue
        if trim >= TRIM_COMMENTS and token.type == TokenType.COMMENT:
            continue
        if (
            token.type == TokenType.NUMBER
            and kept
            and kept[-1].type == TokenType.OPERATOR
            and kept[-1].value == "-"
            and _folds_after(_previous_code(kept, len(kept) - 2))
        ):
            minus = kept.pop()
            token = replace(token, value="-" + token.value, line=minus.line, col=minus.col)
            folded += 1
        kept.append(token)

    logger.debug("reduced %d tokens to %d, folded %d negative literals", len(reduced), len(kept), folded)
    return kept


def reduce(tokens, version=DEFAULT_VERSION, trim=TRIM_NONE):
    """Trim mode yields the kept token texts; otherwise the classified tokens."""
    if trim == TRIM_NONE:
        return reduce_tokens(tokens, version, trim)
    return [token.value for token in reduce_tokens(tokens, version, trim)]
