from lox.lox_ast import Assign, Variable
from lox.lox_errors import Diagnostics
from lox.lox_parser import Parser
from lox.lox_resolver import Resolver
from lox.lox_scanner import Scanner


def resolve(src: str):
    diagnostics = Diagnostics()
    tokens = Scanner(src, diagnostics).scan_tokens()
    statements = Parser(tokens, diagnostics).parse()
    assert not diagnostics.had_error, diagnostics.messages
    locals_map = Resolver(diagnostics).resolve(statements)
    return statements, locals_map, diagnostics

def distances_by_name(locals_map):
    """name -> sorted list of distances recorded for references to it."""
    out = {}
    for expr, depth in locals_map.items():
        out.setdefault(expr.name.lexeme, []).append(depth)
    return {k: sorted(v) for k, v in out.items()}


def test_globals_are_not_recorded():
    _, locals_map, diagnostics = resolve("var a = 1; print a; a = 2;")
    assert locals_map == {}
    assert not diagnostics.had_error


def test_local_in_same_block_has_distance_zero():
    _, locals_map, _ = resolve("{ var a = 1; print a; }")
    assert distances_by_name(locals_map) == {"a": [0]}


def test_distance_counts_enclosing_scopes():
    _, locals_map, _ = resolve("{ var a = 1; { { print a; } } }")
    assert distances_by_name(locals_map) == {"a": [2]}


def test_assignment_is_resolved():
    (block,), locals_map, _ = resolve("{ var a; { a = 1; } }")
    (assign_expr, depth), = locals_map.items()
    assert isinstance(assign_expr, Assign)
    assert depth == 1


def test_parameters_live_in_function_scope():
    _, locals_map, _ = resolve("fun f(x) { return x; }")
    assert distances_by_name(locals_map) == {"x": [0]}


def test_closure_reference_to_enclosing_function_local():
    src = """
    fun outer() {
      var count = 0;
      fun inner() { count = count + 1; return count; }
      return inner;
    }
    """
    _, locals_map, _ = resolve(src)
    # count is read twice and assigned once from inside inner: one scope out.
    assert distances_by_name(locals_map)["count"] == [1, 1, 1]
    # inner is referenced from outer's own scope.
    assert distances_by_name(locals_map)["inner"] == [0]


def test_each_reference_is_keyed_by_identity():
    _, locals_map, _ = resolve("{ var a = 1; print a + a; }")
    refs = [e for e in locals_map if isinstance(e, Variable)]
    assert len(refs) == 2


def test_function_can_reference_itself():
    _, locals_map, diagnostics = resolve("{ fun f() { f(); } }")
    assert not diagnostics.had_error
    assert distances_by_name(locals_map) == {"f": [1]}


def test_global_reference_inside_function_stays_unresolved():
    src = """
    var a = "global";
    {
      fun show() { print a; }
      var a = "block";
    }
    """
    _, locals_map, _ = resolve(src)
    # The `a` in show() is bound to the global one, which is not tracked.
    assert locals_map == {}


def test_reading_local_in_own_initializer_is_an_error():
    _, _, diagnostics = resolve("{ var a = 1; { var a = a; } }")
    assert diagnostics.messages == [
        "[line 1] Error at 'a': Can't read local variable in its own initializer."
    ]


def test_global_self_reference_is_not_a_resolver_error():
    _, _, diagnostics = resolve("var a = a;")
    assert not diagnostics.had_error


def test_return_at_top_level_is_an_error():
    _, _, diagnostics = resolve("return 1;")
    assert diagnostics.messages == ["[line 1] Error at 'return': Can't return from top-level code."]


def test_return_inside_function_is_fine():
    _, _, diagnostics = resolve("fun f() { if (true) { return; } }")
    assert not diagnostics.had_error


def test_resolver_scopes_are_balanced_after_run():
    diagnostics = Diagnostics()
    tokens = Scanner("{ fun f(a) { { var b; } } }", diagnostics).scan_tokens()
    resolver = Resolver(diagnostics)
    resolver.resolve(Parser(tokens, diagnostics).parse())
    assert resolver.scopes == []
