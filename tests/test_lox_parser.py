import pytest

from lox.lox_ast import (
    Assign, Binary, Block, Call, Expression, Function, If, Literal, Print, Var, Variable, While,
)
from lox.lox_errors import Diagnostics
from lox.lox_parser import Parser
from lox.lox_printer import AstPrinter
from lox.lox_scanner import Scanner


def parse(src: str):
    diagnostics = Diagnostics()
    tokens = Scanner(src, diagnostics).scan_tokens()
    statements = Parser(tokens, diagnostics).parse()
    return statements, diagnostics

def parse_ok(src: str):
    statements, diagnostics = parse(src)
    assert not diagnostics.had_error, diagnostics.messages
    return statements

def pformat_all(src: str):
    printer = AstPrinter()
    return [printer.pformat(s) for s in parse_ok(src)]


# (id, source, expected printed statements)
PRECEDENCE_CASES = [
    ("factor_binds_tighter_than_term", "1 + 2 * 3;", ["(; (+ 1.0 (* 2.0 3.0)))"]),
    ("term_is_left_associative", "1 - 2 - 3;", ["(; (- (- 1.0 2.0) 3.0))"]),
    ("factor_is_left_associative", "8 / 4 / 2;", ["(; (/ (/ 8.0 4.0) 2.0))"]),
    ("grouping_overrides", "(1 + 2) * 3;", ["(; (* (group (+ 1.0 2.0)) 3.0))"]),
    ("unary_nests", "!!true;", ["(; (! (! true)))"]),
    ("unary_above_factor", "-1 * 2;", ["(; (* (- 1.0) 2.0))"]),
    ("comparison_above_equality", "1 < 2 == true;", ["(; (== (< 1.0 2.0) true))"]),
    ("and_above_or", "a or b and c;", ["(; (or (var a) (and (var b) (var c))))"]),
    ("assignment_is_right_associative", "a = b = 1;", ["(; (= a (= b 1.0)))"]),
    ("call_chain", "f(1)(2);", ["(; (call (call (var f) 1.0) 2.0))"]),
    ("call_no_args", "f();", ["(; (call (var f)))"]),
    ("literals", 'print nil; print "s";', ['(print nil)', '(print "s")']),
]

@pytest.mark.parametrize("test_id, source, expected", PRECEDENCE_CASES, ids=[c[0] for c in PRECEDENCE_CASES])
def test_expression_precedence(test_id, source, expected):
    assert pformat_all(source) == expected


def test_var_declaration_with_and_without_initializer():
    a, b = parse_ok("var a; var b = 2;")
    assert isinstance(a, Var) and a.name.lexeme == "a" and a.initializer is None
    assert isinstance(b, Var) and isinstance(b.initializer, Literal) and b.initializer.value == 2.0


def test_dangling_else_binds_to_nearest_if():
    (outer,) = parse_ok("if (a) if (b) print 1; else print 2;")
    assert isinstance(outer, If)
    assert outer.else_branch is None
    inner = outer.then_branch
    assert isinstance(inner, If)
    assert isinstance(inner.else_branch, Print)


def test_for_loop_desugars_to_block_with_while():
    (stmt,) = parse_ok("for (var i = 0; i < 3; i = i + 1) print i;")
    assert isinstance(stmt, Block)
    init, loop = stmt.statements
    assert isinstance(init, Var) and init.name.lexeme == "i"
    assert isinstance(loop, While)
    assert isinstance(loop.condition, Binary)
    body, increment = loop.body.statements
    assert isinstance(body, Print)
    assert isinstance(increment, Expression) and isinstance(increment.expression, Assign)


def test_for_loop_without_clauses_loops_on_true():
    (stmt,) = parse_ok("for (;;) print 1;")
    assert isinstance(stmt, While)
    assert isinstance(stmt.condition, Literal) and stmt.condition.value is True
    assert isinstance(stmt.body, Print)


def test_for_loop_with_expression_initializer():
    (stmt,) = parse_ok("for (i = 0; i < 1;) print i;")
    assert isinstance(stmt, Block)
    assert isinstance(stmt.statements[0], Expression)
    assert isinstance(stmt.statements[1].body, Print)


def test_function_declaration():
    (fn,) = parse_ok("fun add(a, b) { return a + b; }")
    assert isinstance(fn, Function)
    assert fn.name.lexeme == "add"
    assert [p.lexeme for p in fn.params] == ["a", "b"]
    assert len(fn.body) == 1
    assert AstPrinter().pformat(fn) == "(fun add (a b) (return (+ (var a) (var b))))"


def test_call_keeps_closing_paren_for_error_location():
    (stmt,) = parse_ok("f(1,\n2\n);")
    call = stmt.expression
    assert isinstance(call, Call)
    assert call.paren.lexeme == ")"
    assert call.paren.line == 3
    assert len(call.arguments) == 2


def test_nodes_are_distinct_by_identity():
    (stmt,) = parse_ok("a + a;")
    left, right = stmt.expression.left, stmt.expression.right
    assert isinstance(left, Variable) and isinstance(right, Variable)
    assert left != right
    assert len({left, right}) == 2


# --- Errors and recovery ---

ERROR_CASES = [
    ("missing_semicolon", "print 1", "[line 1] Error at end: Expect ';' after value."),
    ("missing_expression", "print ;", "[line 1] Error at ';': Expect expression."),
    ("unclosed_group", "(1;", "[line 1] Error at ';': Expect ')' after expression."),
    ("var_needs_name", "var 1;", "[line 1] Error at '1': Expect variable name."),
    ("unclosed_block", "{ print 1;", "[line 1] Error at end: Expect '}' after block."),
    ("if_needs_paren", "if a", "[line 1] Error at 'a': Expect '(' after 'if'."),
    ("fun_needs_name", "fun (", "[line 1] Error at '(': Expect function name."),
    ("class_is_not_an_expression", "class;", "[line 1] Error at 'class': Expect expression."),
]

@pytest.mark.parametrize("test_id, source, message", ERROR_CASES, ids=[c[0] for c in ERROR_CASES])
def test_syntax_errors(test_id, source, message):
    _, diagnostics = parse(source)
    assert diagnostics.had_error
    assert diagnostics.messages[0] == message


def test_invalid_assignment_target_is_reported_without_aborting():
    statements, diagnostics = parse("1 + 2 = 3; print 4;")
    assert diagnostics.messages == ["[line 1] Error at '=': Invalid assignment target."]
    # The statement still parses, and so does the next one.
    assert len(statements) == 2
    assert isinstance(statements[1], Print)


def test_panic_mode_recovers_at_statement_boundary():
    src = "var = 1;\nprint 2;\nvar b 3;\nprint 4;"
    statements, diagnostics = parse(src)
    assert diagnostics.messages == [
        "[line 1] Error at '=': Expect variable name.",
        "[line 3] Error at '3': Expect ';' after variable declaration.",
    ]
    assert [AstPrinter().pformat(s) for s in statements] == ["(print 2.0)", "(print 4.0)"]


def test_recovery_stops_at_statement_keyword():
    statements, diagnostics = parse("1 + ; fun f() {}")
    assert diagnostics.had_error
    assert len(statements) == 1
    assert isinstance(statements[0], Function)


def _names(n):
    return ", ".join(f"a{i}" for i in range(n))

def test_too_many_parameters_is_reported_but_parsing_continues():
    statements, diagnostics = parse(f"fun f({_names(256)}) {{}} print 1;")
    assert diagnostics.messages == ["[line 1] Error at 'a255': Can't have more than 255 parameters."]
    assert len(statements) == 2
    assert len(statements[0].params) == 256


def test_too_many_arguments_is_reported_but_parsing_continues():
    statements, diagnostics = parse(f"f({_names(256)});")
    assert diagnostics.messages == ["[line 1] Error at 'a255': Can't have more than 255 arguments."]
    assert len(statements) == 1


def test_255_parameters_is_allowed():
    parse_ok(f"fun f({_names(255)}) {{}}")


def test_parse_expression_returns_none_on_error():
    diagnostics = Diagnostics()
    tokens = Scanner("1 +", diagnostics).scan_tokens()
    assert Parser(tokens, diagnostics).parse_expression() is None
    assert diagnostics.had_error
