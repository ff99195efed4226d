class LuaFormatError(Exception):
    """Base class for errors raised while formatting Lua source."""

    kind = "error"

    def __init__(self, message, line, col):
        super().__init__(message)
        self.message = message
        self.line = line
        self.col = col

    def __str__(self):
        return f"[{self.__class__.__name__}] {self.line}:{self.col}: {self.message}"


class LexError(LuaFormatError):
    """Unterminated string/comment or characters no lexical class accepts."""

    kind = "lex"


class OperatorError(LuaFormatError):
    """Operator symbol not enabled for the selected language version."""

    kind = "operator"


class GrammarError(LuaFormatError):
    """Token sequence the statement walker cannot place."""

    kind = "grammar"
