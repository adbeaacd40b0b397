"""
Error types and the diagnostics accumulator used by every pipeline stage.

A `Diagnostics` instance is passed to the scanner, parser, resolver and
interpreter of a run. It collects formatted reports and tracks whether a
static (scan/parse/resolve) or runtime error occurred, so the caller can
decide whether to keep going and which exit code to use.
"""

from typing import Callable, List, Optional

from lox.lox_tokens import Token, TokenType


class LoxRuntimeError(Exception):
    """Raised while evaluating a program. Carries the token used for line reporting."""
    def __init__(self, token: Token, message: str):
        super().__init__(message)
        self.token = token
        self.message = message


class ParseError(Exception):
    """Internal to the parser: unwinds to the declaration loop, which resynchronizes."""
    pass


class Diagnostics:
    def __init__(self, sink: Optional[Callable[[str], None]] = None):
        self.sink = sink
        self.messages: List[str] = []
        self._had_error = False
        self._had_runtime_error = False

    @property
    def had_error(self) -> bool:
        return self._had_error

    @property
    def had_runtime_error(self) -> bool:
        return self._had_runtime_error

    def error(self, line: int, message: str):
        self._report(line, "", message)

    def error_at(self, token: Token, message: str):
        if token.type == TokenType.EOF:
            self._report(token.line, " at end", message)
        else:
            self._report(token.line, f" at '{token.lexeme}'", message)

    def runtime_error(self, err: LoxRuntimeError):
        self._emit(f"{err.message}\n[line {err.token.line}]")
        self._had_runtime_error = True

    def reset(self):
        """Clears flags and collected messages. Called between prompt lines."""
        self.messages.clear()
        self._had_error = False
        self._had_runtime_error = False

    def _report(self, line: int, where: str, message: str):
        self._emit(f"[line {line}] Error{where}: {message}")
        self._had_error = True

    def _emit(self, text: str):
        self.messages.append(text)
        if self.sink is not None:
            self.sink(text)
