"""
Defines the core runtime types for the Lox interpreter.

Runtime values are plain Python objects: None (nil), bool, float, str,
plus the callables defined here.
"""

from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Optional, TYPE_CHECKING

from lox.lox_errors import LoxRuntimeError
from lox.lox_tokens import Token

if TYPE_CHECKING:
    from lox.lox_ast import Function
    from lox.lox_interpreter import Interpreter


# =================================================================
# Environments
# =================================================================

class Environment:
    """A scope frame: name bindings plus a link to the enclosing frame.

    Frames are created per block and per call. A closure keeps a reference
    to the frame it was defined in, which keeps that frame (and everything
    it encloses) alive for as long as the closure is. Several closures can
    share one frame and see each other's writes.
    """
    def __init__(self, enclosing: Optional['Environment'] = None):
        self.values: Dict[str, Any] = {}
        self.enclosing = enclosing

    def define(self, name: str, value: Any):
        """Binds name in this frame only. Redefinition overwrites."""
        self.values[name] = value

    def get(self, name: Token) -> Any:
        env = self
        while env is not None:
            if name.lexeme in env.values:
                return env.values[name.lexeme]
            env = env.enclosing
        raise LoxRuntimeError(name, f"Undefined variable '{name.lexeme}'.")

    def assign(self, name: Token, value: Any):
        env = self
        while env is not None:
            if name.lexeme in env.values:
                env.values[name.lexeme] = value
                return
            env = env.enclosing
        raise LoxRuntimeError(name, f"Undefined variable '{name.lexeme}'.")

    def ancestor(self, distance: int) -> 'Environment':
        env = self
        for _ in range(distance):
            env = env.enclosing
        return env

    def get_at(self, distance: int, name: str) -> Any:
        # A miss here means the resolver and interpreter disagree: let KeyError through.
        return self.ancestor(distance).values[name]

    def assign_at(self, distance: int, name: str, value: Any):
        frame = self.ancestor(distance)
        if name not in frame.values:
            raise KeyError(name)
        frame.values[name] = value

    def __contains__(self, name: str) -> bool:
        """Checks this frame and its enclosing frames."""
        env = self
        while env is not None:
            if name in env.values:
                return True
            env = env.enclosing
        return False

    def __repr__(self) -> str:
        keys = ', '.join(self.values.keys())
        enclosing_id = f", enclosing=#{id(self.enclosing)}" if self.enclosing else ""
        return f"<Environment values=[{keys}]{enclosing_id}>"


# =================================================================
# Callables
# =================================================================

class LoxCallable(ABC):
    """Abstract base class for all values callable from Lox code."""

    @abstractmethod
    def arity(self) -> int: raise NotImplementedError

    @abstractmethod
    def call(self, interpreter: 'Interpreter', arguments: List[Any]) -> Any: raise NotImplementedError


class LoxFunction(LoxCallable):
    """A function declared in Lox with `fun`.

    This is a closure, bundling the declaration with the environment that
    was active where it was declared (not where it is called).
    """
    def __init__(self, declaration: 'Function', closure: Environment):
        self.declaration = declaration
        self.closure = closure

    def arity(self) -> int:
        return len(self.declaration.params)

    def call(self, interpreter: 'Interpreter', arguments: List[Any]) -> Any:
        environment = Environment(self.closure)
        for param, argument in zip(self.declaration.params, arguments):
            environment.define(param.lexeme, argument)

        completion = interpreter.execute_block(self.declaration.body, environment)
        if isinstance(completion, ReturnValue):
            return completion.value
        return None

    def __str__(self) -> str:
        return f"<fn {self.declaration.name.lexeme}>"

    def __repr__(self) -> str:
        return f"<LoxFunction {self.declaration.name.lexeme}/{self.arity()}>"


class NativeFunction(LoxCallable):
    """A host-provided function with a fixed arity."""
    def __init__(self, name: str, arity: int, fn: Callable[..., Any]):
        self.name = name
        self._arity = arity
        self.fn = fn

    def arity(self) -> int:
        return self._arity

    def call(self, interpreter: 'Interpreter', arguments: List[Any]) -> Any:
        return self.fn(*arguments)

    def __str__(self) -> str:
        return "<native fn>"

    def __repr__(self) -> str:
        return f"<NativeFunction {self.name}/{self._arity}>"


# =================================================================
# Control flow
# =================================================================

class ReturnValue:
    """Completion of a statement that executed `return`.

    Statement execution yields None when it completes normally and a
    ReturnValue when a return is unwinding; enclosing statements pass it
    straight up until the function call that owns it unwraps it.
    """
    __slots__ = ("value",)

    def __init__(self, value: Any):
        self.value = value

    def __repr__(self) -> str:
        return f"ReturnValue({self.value!r})"
