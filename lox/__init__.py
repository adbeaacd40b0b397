from lox.lox_tokens import Token, TokenType
from lox.lox_errors import Diagnostics, LoxRuntimeError
from lox.lox_scanner import Scanner
from lox.lox_parser import Parser
from lox.lox_resolver import Resolver
from lox.lox_datatypes import Environment, LoxCallable, LoxFunction, NativeFunction
from lox.lox_interpreter import Interpreter
from lox.lox_printer import AstPrinter
from lox.lox_runtime import ExecutionResult, ScriptRunner

__all__ = [
    "Token", "TokenType", "Diagnostics", "LoxRuntimeError", "Scanner", "Parser",
    "Resolver", "Environment", "LoxCallable", "LoxFunction", "NativeFunction",
    "Interpreter", "AstPrinter", "ExecutionResult", "ScriptRunner",
]
