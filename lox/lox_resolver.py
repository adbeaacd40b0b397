"""
Static pass that binds every local variable reference to its scope.

The resolver walks the statements once, before they run, keeping a stack
of the lexical scopes it is inside. For each variable read or assignment
it records how many scopes out the declaration lives. The interpreter
uses that distance to find the binding directly, so a closure always sees
the variable that was in scope where it was written, never whatever
happens to be in scope where it is called.

Globals are not tracked: a reference with no recorded distance is looked
up in the global environment at run time.
"""

from enum import Enum, auto
from typing import Dict, Iterable, List, Optional

from lox.lox_ast import (
    Expr, Stmt,
    Assign, Binary, Call, Grouping, Literal, Logical, Unary, Variable,
    Block, Expression, Function, If, Print, Return, Var, While,
)
from lox.lox_errors import Diagnostics
from lox.lox_tokens import Token


class FunctionType(Enum):
    NONE = auto()
    FUNCTION = auto()


class Resolver:
    def __init__(self, diagnostics: Optional[Diagnostics] = None):
        self.diagnostics = diagnostics if diagnostics is not None else Diagnostics()
        # Each scope maps a name to whether its initializer has finished.
        self.scopes: List[Dict[str, bool]] = []
        self.locals: Dict[Expr, int] = {}
        self.current_function = FunctionType.NONE

    def resolve(self, statements: Iterable[Stmt]) -> Dict[Expr, int]:
        """Resolves a list of top-level statements and returns the distance map."""
        self._resolve_statements(statements)
        return self.locals

    def _resolve_statements(self, statements: Iterable[Stmt]):
        for statement in statements:
            self._resolve_stmt(statement)

    def _resolve_stmt(self, stmt: Stmt):
        match stmt:
            case Block(statements=statements):
                self._begin_scope()
                self._resolve_statements(statements)
                self._end_scope()
            case Var(name=name, initializer=initializer):
                self._declare(name)
                if initializer is not None:
                    self._resolve_expr(initializer)
                self._define(name)
            case Function(name=name):
                # Defined before the body so the function can call itself.
                self._declare(name)
                self._define(name)
                self._resolve_function(stmt, FunctionType.FUNCTION)
            case Expression(expression=expression) | Print(expression=expression):
                self._resolve_expr(expression)
            case If(condition=condition, then_branch=then_branch, else_branch=else_branch):
                self._resolve_expr(condition)
                self._resolve_stmt(then_branch)
                if else_branch is not None:
                    self._resolve_stmt(else_branch)
            case While(condition=condition, body=body):
                self._resolve_expr(condition)
                self._resolve_stmt(body)
            case Return(keyword=keyword, value=value):
                if self.current_function == FunctionType.NONE:
                    self.diagnostics.error_at(keyword, "Can't return from top-level code.")
                if value is not None:
                    self._resolve_expr(value)
            case _:
                raise TypeError(f"Unknown statement node: {type(stmt).__name__}")

    def _resolve_expr(self, expr: Expr):
        match expr:
            case Variable(name=name):
                if self.scopes and self.scopes[-1].get(name.lexeme) is False:
                    self.diagnostics.error_at(name, "Can't read local variable in its own initializer.")
                self._resolve_local(expr, name)
            case Assign(name=name, value=value):
                self._resolve_expr(value)
                self._resolve_local(expr, name)
            case Binary(left=left, right=right) | Logical(left=left, right=right):
                self._resolve_expr(left)
                self._resolve_expr(right)
            case Call(callee=callee, arguments=arguments):
                self._resolve_expr(callee)
                for argument in arguments:
                    self._resolve_expr(argument)
            case Grouping(expression=expression):
                self._resolve_expr(expression)
            case Unary(right=right):
                self._resolve_expr(right)
            case Literal():
                pass
            case _:
                raise TypeError(f"Unknown expression node: {type(expr).__name__}")

    def _resolve_function(self, function: Function, kind: FunctionType):
        enclosing_function = self.current_function
        self.current_function = kind

        self._begin_scope()
        for param in function.params:
            self._declare(param)
            self._define(param)
        self._resolve_statements(function.body)
        self._end_scope()

        self.current_function = enclosing_function

    def _resolve_local(self, expr: Expr, name: Token):
        for hops, scope in enumerate(reversed(self.scopes)):
            if name.lexeme in scope:
                self.locals[expr] = hops
                return
        # Not found: global.

    def _begin_scope(self):
        self.scopes.append({})

    def _end_scope(self):
        self.scopes.pop()

    def _declare(self, name: Token):
        if not self.scopes:
            return
        self.scopes[-1][name.lexeme] = False

    def _define(self, name: Token):
        if not self.scopes:
            return
        self.scopes[-1][name.lexeme] = True
