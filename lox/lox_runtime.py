import inspect
import os
import sys
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Literal, Optional

from lox.lox_datatypes import Environment, NativeFunction
from lox.lox_errors import Diagnostics
from lox.lox_interpreter import DEFAULT_MAX_CALL_DEPTH, Interpreter
from lox.lox_parser import Parser
from lox.lox_resolver import Resolver
from lox.lox_scanner import Scanner

# ===================================================================
# 1. Debug output and configuration
# ===================================================================


_FROM_ENV = object()


def _dbg(*parts):
    if os.environ.get("LOX_DEBUG"):
        print("[DBG]", *parts, file=sys.stderr)


def _max_call_depth_from_env() -> Optional[int]:
    raw = os.environ.get("LOX_MAX_CALL_DEPTH")
    if not raw:
        return DEFAULT_MAX_CALL_DEPTH
    try:
        depth = int(raw)
    except ValueError:
        _dbg(f"ignoring LOX_MAX_CALL_DEPTH={raw!r}: not an integer")
        return DEFAULT_MAX_CALL_DEPTH
    # Zero or negative disables the guard; only the host recursion limit applies.
    return depth if depth > 0 else None


# ===================================================================
# 2. Native functions
# ===================================================================


class StdLib:
    """Contains Python implementations for the Lox built-ins.

    Every `_name` method is bound into the global environment as `name`,
    with its arity taken from the method signature.
    """

    def _clock(self) -> float:
        return time.time()

    def install(self, environment: Environment):
        for name, member in inspect.getmembers(self):
            if name.startswith('_') and not name.startswith('__') and callable(member):
                lox_name = name[1:]
                arity = len(inspect.signature(member).parameters)
                environment.define(lox_name, NativeFunction(lox_name, arity, member))


# ===================================================================
# 3. Script execution
# ===================================================================

Effect = Dict[str, Any]


@dataclass
class ExecutionResult:
    """The structured result of one run."""
    status: Literal['success', 'error', 'runtime-error']
    output: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    side_effects: List[Effect] = field(default_factory=list)

    @property
    def exit_code(self) -> int:
        if self.status == 'error':
            return 65
        if self.status == 'runtime-error':
            return 70
        return 0

    def format_error(self) -> str:
        return "\n".join(self.errors)


class ScriptRunner:
    """Scans, parses, resolves and executes Lox code.

    One runner keeps one interpreter, so globals defined by one call to
    `handle_script` are visible to the next, as the interactive prompt needs.

    `output` and `errors` receive each printed line and each error report as
    it happens. With `record=False` the runner keeps nothing itself, so the
    result carries only status and error reports.
    """

    def __init__(self,
                 max_call_depth: Any = _FROM_ENV,
                 resolve: bool = True,
                 output: Optional[Callable[[str], None]] = None,
                 errors: Optional[Callable[[str], None]] = None,
                 record: bool = True):
        self.resolve = resolve
        self.record = record
        self.side_effects: List[Effect] = []
        self._output_lines: List[str] = []
        self._extra_output = output
        self._extra_errors = errors
        self.diagnostics = Diagnostics(sink=self._emit_stderr)

        if max_call_depth is _FROM_ENV:
            max_call_depth = _max_call_depth_from_env()

        self.interpreter = Interpreter(
            diagnostics=self.diagnostics,
            output=self._emit_stdout,
            max_call_depth=max_call_depth,
            dynamic_lookup=not resolve,
        )
        StdLib().install(self.interpreter.globals)

    def _emit_stdout(self, text: str):
        if self.record:
            self._output_lines.append(text)
            self.side_effects.append({'topics': ['stdout'], 'message': text})
        if self._extra_output is not None:
            self._extra_output(text)

    def _emit_stderr(self, text: str):
        if self.record:
            self.side_effects.append({'topics': ['stderr'], 'message': text})
        if self._extra_errors is not None:
            self._extra_errors(text)

    def parse(self, source_code: str):
        """Scans and parses without running. Returns the statements; errors
        land in `self.diagnostics`."""
        tokens = Scanner(source_code, self.diagnostics).scan_tokens()
        _dbg(f"scanned {len(tokens)} tokens")
        statements = Parser(tokens, self.diagnostics).parse()
        _dbg(f"parsed {len(statements)} statements")
        return statements

    def handle_script(self, source_code: str) -> ExecutionResult:
        """The main entry point to execute a script."""
        # Clear per-run state
        self.diagnostics.reset()
        self.side_effects = []
        self._output_lines = []

        # 1. Scan and parse
        statements = self.parse(source_code)
        if self.diagnostics.had_error:
            return self._result('error')

        # 2. Resolve
        locals_map = None
        if self.resolve:
            locals_map = Resolver(self.diagnostics).resolve(statements)
            _dbg(f"resolved {len(locals_map)} local references")
            if self.diagnostics.had_error:
                return self._result('error')

        # 3. Evaluate
        self.interpreter.interpret(statements, locals_map)
        if self.diagnostics.had_runtime_error:
            return self._result('runtime-error')
        return self._result('success')

    def _result(self, status) -> ExecutionResult:
        return ExecutionResult(
            status=status,
            output=list(self._output_lines),
            errors=list(self.diagnostics.messages),
            side_effects=self.side_effects,
        )
