import os
import sys
import unittest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from lua_beautify import format_lua
from lua_errors import GrammarError


class TestStatements(unittest.TestCase):

    def test_local_declarations(self):
        self.assertEqual(format_lua("local x"), "local x\n")
        self.assertEqual(format_lua("local a,b=1,2"), "local a, b = 1, 2\n")

    def test_local_attribute(self):
        self.assertEqual(format_lua("local x <const> = 5"), "local x <const> = 5\n")
        self.assertEqual(format_lua("local f<close>, y"), "local f <close>, y\n")

    def test_local_function(self):
        self.assertEqual(
            format_lua("local function f(a, b) return a + b end"),
            "local function f(a, b)\n    return a + b\nend\n",
        )

    def test_dotted_and_method_function_names(self):
        self.assertEqual(format_lua("function M.a.b:c(x) end"), "function M.a.b:c(x)\nend\n")

    def test_blank_line_after_function_declarations(self):
        self.assertEqual(
            format_lua("function f() end function g() end x = 1"),
            "function f()\nend\n\nfunction g()\nend\n\nx = 1\n",
        )

    def test_no_blank_line_before_block_end(self):
        self.assertEqual(
            format_lua("do local function f() end end"),
            "do\n    local function f()\n    end\nend\n",
        )

    def test_if_elseif_else(self):
        self.assertEqual(
            format_lua("if a then b() elseif c then d() else e() end"),
            "if a then\n    b()\nelseif c then\n    d()\nelse\n    e()\nend\n",
        )

    def test_while(self):
        self.assertEqual(
            format_lua("while i < 10 do i = i + 1 end"),
            "while i < 10 do\n    i = i + 1\nend\n",
        )

    def test_repeat_until(self):
        self.assertEqual(
            format_lua("repeat x = x - 1 until x == 0"),
            "repeat\n    x = x - 1\nuntil x == 0\n",
        )

    def test_numeric_for(self):
        self.assertEqual(
            format_lua("for i=1,10,2 do print(i) end"),
            "for i = 1, 10, 2 do\n    print(i)\nend\n",
        )
        self.assertEqual(format_lua("for i = 10, 1, -1 do end"), "for i = 10, 1, -1 do\nend\n")

    def test_generic_for(self):
        self.assertEqual(
            format_lua("for k,v in pairs(t) do end"),
            "for k, v in pairs(t) do\nend\n",
        )

    def test_do_block(self):
        self.assertEqual(format_lua("do end"), "do\nend\n")

    def test_nested_indentation(self):
        self.assertEqual(
            format_lua("while true do if x then break end end"),
            "while true do\n    if x then\n        break\n    end\nend\n",
        )

    def test_return_forms(self):
        self.assertEqual(format_lua("return"), "return\n")
        self.assertEqual(format_lua("return 1,2"), "return 1, 2\n")
        self.assertEqual(format_lua("function f() return end"), "function f()\n    return\nend\n")
        self.assertEqual(
            format_lua("if x then return else return 1 end"),
            "if x then\n    return\nelse\n    return 1\nend\n",
        )

    def test_return_before_separator(self):
        self.assertEqual(format_lua("return;"), "return\n;\n")

    def test_separator_is_standalone(self):
        self.assertEqual(format_lua("a = 1; b = 2"), "a = 1\n;\nb = 2\n")

    def test_goto_and_label(self):
        self.assertEqual(
            format_lua("goto continue ::continue::", version=2),
            "goto continue\n::continue::\n",
        )

    def test_multiple_assignment(self):
        self.assertEqual(format_lua("a, b.c, d[1] = 1, 2, 3"), "a, b.c, d[1] = 1, 2, 3\n")

    def test_call_statements(self):
        self.assertEqual(format_lua("(f)()"), "(f)()\n")
        self.assertEqual(format_lua("f{1}"), "f{\n    1\n}\n")
        self.assertEqual(format_lua("a.b:c 'x'"), "a.b:c 'x'\n")


class TestCommentReattachment(unittest.TestCase):

    def test_header_and_trailing_comment(self):
        self.assertEqual(
            format_lua("-- header\nlocal x = 1 -- trailing\nprint(x)\n"),
            "-- header\nlocal x = 1\n-- trailing\nprint(x)\n",
        )

    def test_comment_at_end_of_block(self):
        self.assertEqual(format_lua("do\n  x()\n  -- c\nend"), "do\n    x()\n    -- c\nend\n")

    def test_comment_after_then(self):
        self.assertEqual(
            format_lua("if x then -- why\n  y()\nend"),
            "if x then\n    -- why\n    y()\nend\n",
        )

    def test_comments_inside_table(self):
        self.assertEqual(
            format_lua("t = { -- first\n 1, -- one\n 2 -- two\n}"),
            "t = {\n    -- first\n    1,\n    -- one\n    2\n    -- two\n}\n",
        )

    def test_comment_in_empty_table(self):
        self.assertEqual(format_lua("t = { -- c\n}\nx = 1"), "t = {}\n-- c\nx = 1\n")

    def test_comment_only(self):
        self.assertEqual(format_lua("-- just a comment"), "-- just a comment\n")

    def test_empty_input(self):
        self.assertEqual(format_lua(""), "")
        self.assertEqual(format_lua("  \n\t\n"), "")

    def test_trailing_block_comment_is_appended(self):
        self.assertEqual(format_lua("x = 1\n--[[ end ]]"), "x = 1\n--[[ end ]]\n")

    def test_comment_before_function_stays_with_it(self):
        self.assertEqual(
            format_lua("function f() end\n-- about g\nfunction g() end"),
            "function f()\nend\n\n-- about g\nfunction g()\nend\n",
        )

    def test_comment_inside_expression_moves_to_next_line(self):
        self.assertEqual(format_lua("x = 1 + -- c\n 2\ny = 3"), "x = 1 + 2\n-- c\ny = 3\n")

    def test_comment_in_anonymous_function(self):
        self.assertEqual(format_lua("f(function()\n -- inner\nend)"), "f(function()\n    -- inner\nend)\n")

    def test_comment_before_else_and_until(self):
        self.assertEqual(
            format_lua("if a then\n b()\n -- before else\nelse\n c()\nend"),
            "if a then\n    b()\n    -- before else\nelse\n    c()\nend\n",
        )
        self.assertEqual(
            format_lua("repeat\n x()\n -- c\nuntil y"),
            "repeat\n    x()\n    -- c\nuntil y\n",
        )

    def test_multiline_block_comment_verbatim(self):
        source = "do\n--[[\n  keep   this\n]]\nend"
        self.assertEqual(format_lua(source), "do\n    --[[\n  keep   this\n]]\nend\n")


class TestGrammarErrors(unittest.TestCase):

    def assertGrammarError(self, source, message, position=None, version=1):
        with self.assertRaises(GrammarError) as ctx:
            format_lua(source, version)
        self.assertEqual(ctx.exception.message, message)
        self.assertEqual(ctx.exception.kind, "grammar")
        if position is not None:
            self.assertEqual((ctx.exception.line, ctx.exception.col), position)

    def test_binary_operator_at_statement_start(self):
        self.assertGrammarError("+ x", "unexpected binary operator near '+'", (1, 1))

    def test_missing_end(self):
        self.assertGrammarError("if x then", "'end' expected near <eof>", (1, 6))

    def test_stray_terminator(self):
        self.assertGrammarError("x = 1\nend", "'<eof>' expected near 'end'", (2, 1))

    def test_bare_expression_statement(self):
        self.assertGrammarError("x", "syntax error near 'x'")

    def test_call_as_assignment_target(self):
        self.assertGrammarError("f() = 1", "syntax error near 'f'")

    def test_parenthesized_assignment_target(self):
        self.assertGrammarError("(a) = 1", "syntax error near '('", (1, 1))
        self.assertGrammarError("x, (y) = 1, 2", "syntax error near '('", (1, 4))

    def test_parenthesized_prefix_with_suffix_is_assignable(self):
        self.assertEqual(format_lua("(a).b = 1"), "(a).b = 1\n")
        self.assertEqual(format_lua("(a)[1] = 1"), "(a)[1] = 1\n")

    def test_missing_operand(self):
        self.assertGrammarError("x = = 1", "unexpected symbol near '='", (1, 5))

    def test_missing_function_name(self):
        self.assertGrammarError("local function (x) end", "<name> expected near '('")

    def test_numeric_for_needs_limit(self):
        self.assertGrammarError("for i = 1 do end", "',' expected near 'do'")

    def test_table_fields_need_separators(self):
        self.assertGrammarError("t = {1 2}", "'}' expected near '2'")

    def test_unclosed_parenthesis(self):
        self.assertGrammarError("x = (1", "')' expected near <eof>")

    def test_goto_needs_version_two(self):
        self.assertGrammarError("goto done", "syntax error near 'goto'")


if __name__ == "__main__":
    unittest.main()
