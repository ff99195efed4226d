from lua_formatter import BINARY_PRIORITY, CALL, INDENT_WIDTH, VARIABLE, ExpressionFormatter
from lua_tokenizer import TokenType

BLOCK_END = {"end", "else", "elseif", "until"}

# Tokens after which 'return' carries no expression list
RETURN_END = BLOCK_END | {";", "::"}


class BlockEngine(ExpressionFormatter):
    """Recursive-descent statement walker that drives indentation.

    Each statement is rendered on its own line at the block's indent; nested
    bodies are rendered one ``INDENT_WIDTH`` deeper and closed at the
    enclosing indent. Pending comments are flushed at every line break.
    """

    STATEMENTS = {
        "break": "break_statement",
        "goto": "goto_statement",
        "::": "label_statement",
        ";": "empty_statement",
        "do": "do_statement",
        "while": "while_statement",
        "repeat": "repeat_statement",
        "if": "if_statement",
        "for": "for_statement",
        "function": "function_statement",
        "local": "local_statement",
        "return": "return_statement",
    }

    def format(self):
        self.block(0)
        token = self.current()
        if token is not None:
            raise self.error("'<eof>' expected", token)
        self.out.flush_comments(0)
        text = self.out.getvalue()
        return text + "\n" if text else text

    def block(self, indent):
        blank = False
        while True:
            token = self.current()
            if token is None or (token.type == TokenType.KEYWORD and token.value in BLOCK_END):
                return
            self.out.line_break(indent, blank=blank)
            blank = bool(self.statement(indent))

    def statement(self, indent):
        """Render one statement; returns True for named function declarations."""
        token = self.current()
        if token.type in (TokenType.KEYWORD, TokenType.OPERATOR):
            handler = self.STATEMENTS.get(token.value)
            if handler is not None:
                return getattr(self, handler)(indent)
            if token.type == TokenType.OPERATOR and token.value in BINARY_PRIORITY:
                raise self.error("unexpected binary operator", token)
        return self.expression_statement(indent)

    def break_statement(self, indent):
        self.next()
        self.out.write("break")

    def goto_statement(self, indent):
        self.next()
        self.out.write("goto " + self.expect_name())

    def label_statement(self, indent):
        self.next()
        name = self.expect_name()
        self.expect("::")
        self.out.write(f"::{name}::")

    def empty_statement(self, indent):
        self.next()
        self.out.write(";")

    def do_statement(self, indent):
        self.next()
        self.out.write("do")
        self.block(indent + INDENT_WIDTH)
        self.close_block(indent, "end")

    def while_statement(self, indent):
        self.next()
        self.out.write("while ")
        self.expression(indent)
        self.expect("do")
        self.out.write(" do")
        self.block(indent + INDENT_WIDTH)
        self.close_block(indent, "end")

    def repeat_statement(self, indent):
        self.next()
        self.out.write("repeat")
        self.block(indent + INDENT_WIDTH)
        self.close_block(indent, "until")
        self.out.write(" ")
        self.expression(indent)

    def if_statement(self, indent):
        self.next()
        self.out.write("if ")
        self.expression(indent)
        self.expect("then")
        self.out.write(" then")
        self.block(indent + INDENT_WIDTH)
        while self.check("elseif"):
            self.close_block(indent, "elseif")
            self.out.write(" ")
            self.expression(indent)
            self.expect("then")
            self.out.write(" then")
            self.block(indent + INDENT_WIDTH)
        if self.check("else"):
            self.close_block(indent, "else")
            self.block(indent + INDENT_WIDTH)
        self.close_block(indent, "end")

    def for_statement(self, indent):
        self.next()
        name = self.expect_name()
        if self.check("="):
            self.next()
            self.out.write(f"for {name} = ")
            self.expression(indent)
            self.expect(",")
            self.out.write(", ")
            self.expression(indent)
            if self.check(","):
                self.next()
                self.out.write(", ")
                self.expression(indent)
        else:
            names = [name]
            while self.check(","):
                self.next()
                names.append(self.expect_name())
            self.expect("in")
            self.out.write("for " + ", ".join(names) + " in ")
            self.expression_list(indent)
        self.expect("do")
        self.out.write(" do")
        self.block(indent + INDENT_WIDTH)
        self.close_block(indent, "end")

    def function_statement(self, indent):
        self.next()
        name = self.expect_name()
        while self.check("."):
            self.next()
            name += "." + self.expect_name()
        if self.check(":"):
            self.next()
            name += ":" + self.expect_name()
        self.out.write("function " + name)
        self.function_body(indent)
        return True

    def local_statement(self, indent):
        self.next()
        if self.check("function"):
            self.next()
            self.out.write("local function " + self.expect_name())
            self.function_body(indent)
            return True

        names = [self.local_name()]
        while self.check(","):
            self.next()
            names.append(self.local_name())
        self.out.write("local " + ", ".join(names))
        if self.check("="):
            self.next()
            self.out.write(" = ")
            self.expression_list(indent)

    def local_name(self):
        name = self.expect_name()
        if self.check("<"):
            self.next()
            name += f" <{self.expect_name()}>"
            self.expect(">")
        return name

    def return_statement(self, indent):
        self.next()
        self.out.write("return")
        token = self.current()
        if token is None or (token.value in RETURN_END and token.type in (TokenType.KEYWORD, TokenType.OPERATOR)):
            return
        self.out.write(" ")
        self.expression_list(indent)

    def expression_statement(self, indent):
        start = self.current()
        kind = self.primary_expression(indent)
        if not (self.check(",") or self.check("=")):
            if kind != CALL:
                raise self.error("syntax error", start)
            return
        while True:
            if kind != VARIABLE:
                raise self.error("syntax error", start)
            if not self.check(","):
                break
            self.next()
            self.out.write(", ")
            start = self.current()
            kind = self.primary_expression(indent)
        self.expect("=")
        self.out.write(" = ")
        self.expression_list(indent)
