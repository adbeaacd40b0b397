"""
A pretty-printer for Lox syntax trees, used for debugging the parser.
"""

from lox.lox_ast import (
    Assign, Binary, Call, Grouping, Literal, Logical, Unary, Variable,
    Block, Expression, Function, If, Print, Return, Var, While,
)


class AstPrinter:
    """Formats AST nodes as parenthesized prefix forms, e.g. `(* (- 123) (group 45.67))`."""

    def __init__(self):
        self._handlers = self._create_handlers()

    def pformat(self, node) -> str:
        """Public entry point to format a node."""
        return self._get_handler(node)(node)

    def _get_handler(self, node):
        handler = self._handlers.get(type(node))
        if handler is None:
            raise TypeError(f"Cannot print node of type {type(node).__name__}")
        return handler

    def _create_handlers(self):
        return {
            Assign: lambda n: self._parenthesize("=", n.name.lexeme, n.value),
            Binary: lambda n: self._parenthesize(n.operator.lexeme, n.left, n.right),
            Call: lambda n: self._parenthesize("call", n.callee, *n.arguments),
            Grouping: lambda n: self._parenthesize("group", n.expression),
            Literal: self._pformat_literal,
            Logical: lambda n: self._parenthesize(n.operator.lexeme, n.left, n.right),
            Unary: lambda n: self._parenthesize(n.operator.lexeme, n.right),
            Variable: lambda n: self._parenthesize("var", n.name.lexeme),
            Block: lambda n: self._parenthesize("block", *n.statements),
            Expression: lambda n: self._parenthesize(";", n.expression),
            Function: self._pformat_function,
            If: self._pformat_if,
            Print: lambda n: self._parenthesize("print", n.expression),
            Return: self._pformat_return,
            Var: self._pformat_var,
            While: lambda n: self._parenthesize("while", n.condition, n.body),
        }

    def _pformat_literal(self, node) -> str:
        value = node.value
        if value is None:
            return "nil"
        if isinstance(value, bool):
            return "true" if value else "false"
        if isinstance(value, str):
            return f'"{value}"'
        return str(value)

    def _pformat_function(self, node) -> str:
        params = " ".join(p.lexeme for p in node.params)
        return self._parenthesize("fun", node.name.lexeme, f"({params})", *node.body)

    def _pformat_if(self, node) -> str:
        if node.else_branch is None:
            return self._parenthesize("if", node.condition, node.then_branch)
        return self._parenthesize("if", node.condition, node.then_branch, node.else_branch)

    def _pformat_return(self, node) -> str:
        if node.value is None:
            return "(return)"
        return self._parenthesize("return", node.value)

    def _pformat_var(self, node) -> str:
        if node.initializer is None:
            return self._parenthesize("var", node.name.lexeme)
        return self._parenthesize("var", node.name.lexeme, "=", node.initializer)

    def _parenthesize(self, name: str, *parts) -> str:
        # Strings are emitted as-is; nodes are formatted recursively.
        rendered = [p if isinstance(p, str) else self.pformat(p) for p in parts]
        return f"({' '.join([name] + rendered)})"
