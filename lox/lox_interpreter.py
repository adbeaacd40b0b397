"""
The core Lox interpreter: a tree-walking evaluator over the parsed AST.
"""
import math
import sys
from typing import Any, Callable, Dict, List, Optional

from lox.lox_ast import (
    Expr, Stmt,
    Assign, Binary, Call, Grouping, Literal, Logical, Unary, Variable,
    Block, Expression, Function, If, Print, Return, Var, While,
)
from lox.lox_datatypes import Environment, LoxCallable, LoxFunction, ReturnValue
from lox.lox_errors import Diagnostics, LoxRuntimeError
from lox.lox_tokens import Token, TokenType

DEFAULT_MAX_CALL_DEPTH = 200

# Host frames one Lox call can take, counting nested blocks and expressions.
FRAMES_PER_CALL = 25


def is_truthy(value: Any) -> bool:
    """nil and false are falsy; everything else, including 0 and "", is truthy."""
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    return True


def is_equal(a: Any, b: Any) -> bool:
    if a is None:
        return b is None
    # No coercion between kinds: true is not 1, "1" is not 1.
    if type(a) is not type(b):
        return False
    if isinstance(a, float):
        # Boxed-number equality: NaN equals NaN, 0 and -0 differ.
        if math.isnan(a) or math.isnan(b):
            return math.isnan(a) and math.isnan(b)
        return a == b and math.copysign(1.0, a) == math.copysign(1.0, b)
    return a == b


def stringify(value: Any) -> str:
    """Formats a runtime value the way `print` shows it."""
    if value is None:
        return "nil"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "Infinity" if value > 0 else "-Infinity"
        text = str(value)
        if text.endswith(".0"):
            text = text[:-2]
        return text
    return str(value)


def ensure_recursion_headroom(max_call_depth: int):
    """Raises the host recursion limit so the call-depth guard trips first."""
    needed = max_call_depth * FRAMES_PER_CALL + 1000
    if sys.getrecursionlimit() < needed:
        sys.setrecursionlimit(needed)


def _divide(left: float, right: float) -> float:
    if right == 0.0:
        # IEEE-754 semantics instead of ZeroDivisionError.
        if left == 0.0 or math.isnan(left):
            return math.nan
        return math.copysign(math.inf, left) * math.copysign(1.0, right)
    return left / right


class Interpreter:
    """Evaluates statements against a chain of environments.

    Variable references found by the resolver are looked up at a fixed
    distance up the chain; everything else is looked up in globals (or, in
    dynamic lookup mode, by walking the chain from the current frame).
    """
    def __init__(self,
                 diagnostics: Optional[Diagnostics] = None,
                 output: Optional[Callable[[str], None]] = None,
                 max_call_depth: Optional[int] = DEFAULT_MAX_CALL_DEPTH,
                 dynamic_lookup: bool = False):
        self.diagnostics = diagnostics if diagnostics is not None else Diagnostics()
        self.output = output if output is not None else print
        self.max_call_depth = max_call_depth
        if max_call_depth is not None:
            ensure_recursion_headroom(max_call_depth)
        self.dynamic_lookup = dynamic_lookup
        self.globals = Environment()
        self.environment = self.globals
        # Resolved distances, keyed by node identity. Kept across runs so that
        # functions declared earlier in a session still resolve.
        self.locals: Dict[Expr, int] = {}
        self.call_depth = 0

    def interpret(self, statements: List[Stmt], locals: Optional[Dict[Expr, int]] = None):
        """Runs top-level statements. A runtime error is reported and skips
        the rest of this run; it is not raised to the caller."""
        if locals:
            self.locals.update(locals)
        try:
            for statement in statements:
                # Only reachable without the resolver: a top-level return ends the run.
                if self.execute(statement) is not None:
                    break
        except LoxRuntimeError as e:
            self.diagnostics.runtime_error(e)
        finally:
            # A runtime error can leave us inside a block or call frame.
            self.environment = self.globals
            self.call_depth = 0

    # -----------------------------------------------------------------
    # Statements
    # -----------------------------------------------------------------

    def execute(self, stmt: Stmt) -> Optional[ReturnValue]:
        match stmt:
            case Expression(expression=expression):
                self.evaluate(expression)
            case Print(expression=expression):
                self.output(stringify(self.evaluate(expression)))
            case Var(name=name, initializer=initializer):
                value = None
                if initializer is not None:
                    value = self.evaluate(initializer)
                self.environment.define(name.lexeme, value)
            case Block(statements=statements):
                return self.execute_block(statements, Environment(self.environment))
            case If(condition=condition, then_branch=then_branch, else_branch=else_branch):
                if is_truthy(self.evaluate(condition)):
                    return self.execute(then_branch)
                if else_branch is not None:
                    return self.execute(else_branch)
            case While(condition=condition, body=body):
                while is_truthy(self.evaluate(condition)):
                    completion = self.execute(body)
                    if completion is not None:
                        return completion
            case Function(name=name):
                self.environment.define(name.lexeme, LoxFunction(stmt, self.environment))
            case Return(value=value):
                return ReturnValue(self.evaluate(value) if value is not None else None)
            case _:
                raise TypeError(f"Unknown statement node: {type(stmt).__name__}")
        return None

    def execute_block(self, statements, environment: Environment) -> Optional[ReturnValue]:
        previous = self.environment
        try:
            self.environment = environment
            for statement in statements:
                completion = self.execute(statement)
                if completion is not None:
                    return completion
            return None
        finally:
            self.environment = previous

    # -----------------------------------------------------------------
    # Expressions
    # -----------------------------------------------------------------

    def evaluate(self, expr: Expr) -> Any:
        match expr:
            case Literal(value=value):
                return value
            case Grouping(expression=expression):
                return self.evaluate(expression)
            case Logical(left=left, operator=operator, right=right):
                value = self.evaluate(left)
                if operator.type == TokenType.OR:
                    if is_truthy(value):
                        return value
                elif not is_truthy(value):
                    return value
                return self.evaluate(right)
            case Unary(operator=operator, right=right):
                return self._unary(operator, self.evaluate(right))
            case Binary(left=left, operator=operator, right=right):
                # Both operands are evaluated, left first, before any type check.
                return self._binary(operator, self.evaluate(left), self.evaluate(right))
            case Variable(name=name):
                return self._look_up_variable(name, expr)
            case Assign(name=name, value=value_expr):
                value = self.evaluate(value_expr)
                distance = self.locals.get(expr)
                if distance is not None:
                    self.environment.assign_at(distance, name.lexeme, value)
                elif self.dynamic_lookup:
                    self.environment.assign(name, value)
                else:
                    self.globals.assign(name, value)
                return value
            case Call(callee=callee_expr, paren=paren, arguments=argument_exprs):
                callee = self.evaluate(callee_expr)
                arguments = [self.evaluate(argument) for argument in argument_exprs]
                return self._call(callee, arguments, paren)
            case _:
                raise TypeError(f"Unknown expression node: {type(expr).__name__}")

    def _look_up_variable(self, name: Token, expr: Expr) -> Any:
        distance = self.locals.get(expr)
        if distance is not None:
            return self.environment.get_at(distance, name.lexeme)
        if self.dynamic_lookup:
            return self.environment.get(name)
        return self.globals.get(name)

    def _unary(self, operator: Token, right: Any) -> Any:
        match operator.type:
            case TokenType.BANG:
                return not is_truthy(right)
            case TokenType.MINUS:
                self._check_number_operand(operator, right)
                return -right
        raise TypeError(f"Unknown unary operator: {operator.lexeme}")

    def _binary(self, operator: Token, left: Any, right: Any) -> Any:
        match operator.type:
            case TokenType.BANG_EQUAL:
                return not is_equal(left, right)
            case TokenType.EQUAL_EQUAL:
                return is_equal(left, right)
            case TokenType.PLUS:
                if isinstance(left, float) and isinstance(right, float):
                    return left + right
                if isinstance(left, str) and isinstance(right, str):
                    return left + right
                raise LoxRuntimeError(operator, "Operands must be two numbers or two strings.")

        self._check_number_operands(operator, left, right)
        match operator.type:
            case TokenType.GREATER:
                return left > right
            case TokenType.GREATER_EQUAL:
                return left >= right
            case TokenType.LESS:
                return left < right
            case TokenType.LESS_EQUAL:
                return left <= right
            case TokenType.MINUS:
                return left - right
            case TokenType.STAR:
                return left * right
            case TokenType.SLASH:
                return _divide(left, right)
        raise TypeError(f"Unknown binary operator: {operator.lexeme}")

    def _call(self, callee: Any, arguments: List[Any], paren: Token) -> Any:
        if not isinstance(callee, LoxCallable):
            raise LoxRuntimeError(paren, "Can only call functions.")

        if len(arguments) != callee.arity():
            raise LoxRuntimeError(
                paren, f"Expected {callee.arity()} arguments but got {len(arguments)}.")

        if self.max_call_depth is not None and self.call_depth >= self.max_call_depth:
            raise LoxRuntimeError(paren, "Stack overflow.")

        self.call_depth += 1
        try:
            return callee.call(self, arguments)
        except RecursionError:
            raise LoxRuntimeError(paren, "Stack overflow.") from None
        finally:
            self.call_depth -= 1

    @staticmethod
    def _check_number_operand(operator: Token, operand: Any):
        if isinstance(operand, float):
            return
        raise LoxRuntimeError(operator, "Operand must be a number.")

    @staticmethod
    def _check_number_operands(operator: Token, left: Any, right: Any):
        if isinstance(left, float) and isinstance(right, float):
            return
        raise LoxRuntimeError(operator, "Operands must be numbers.")
