import sys
from pathlib import Path

from lox.lox_printer import AstPrinter
from lox.lox_runtime import ScriptRunner

USAGE = "Usage: klox [script]"


def read_line(prompt: str) -> str:
    """A basic input prompt. Returns "" at end of input."""
    sys.stdout.write(prompt)
    sys.stdout.flush()
    return sys.stdin.readline()


def emit(text: str):
    # Program output and error reports share the output channel, a line at a time.
    print(text, flush=True)


def make_runner(resolve: bool) -> ScriptRunner:
    return ScriptRunner(resolve=resolve, output=emit, errors=emit, record=False)


def print_ast(source: str):
    """Prints each statement that parses. Errors are left to the run that follows."""
    printer = AstPrinter()
    for stmt in ScriptRunner(record=False).parse(source):
        print(printer.pformat(stmt))


def run_script_file(file_path: str, resolve: bool = True, show_ast: bool = False) -> int:
    """Run a Lox script file non-interactively and return the exit status."""
    p = Path(file_path)
    try:
        source = p.read_text(encoding="utf-8")
    except FileNotFoundError:
        print(f"Error: file not found: {file_path}", file=sys.stderr)
        return 66
    except UnicodeDecodeError as e:
        print(f"Error: {file_path} is not valid UTF-8: {e.reason}", file=sys.stderr)
        return 65
    except OSError as e:
        print(f"Error: cannot read {file_path}: {e.strerror}", file=sys.stderr)
        return 66
    runner = make_runner(resolve)
    if show_ast:
        print_ast(source)
    return runner.handle_script(source).exit_code


def repl(resolve: bool = True, show_ast: bool = False) -> int:
    """Interactive prompt. Each line is a separate run against the same globals."""
    runner = make_runner(resolve)
    while True:
        raw = read_line("> ")
        if raw == "":
            print()
            break
        line = raw.strip()
        if not line:
            continue
        if line == "exit":
            break
        if show_ast:
            print_ast(line)
        # Errors are reported and the session carries on.
        runner.handle_script(line)
    return 0


def main(argv=None) -> int:
    """Run a script file when provided, otherwise start the interactive prompt."""
    args = list(sys.argv[1:] if argv is None else argv)
    flags = {a for a in args if a.startswith("--")}
    positional = [a for a in args if not a.startswith("--")]

    unknown = flags - {"--no-resolve", "--print-ast"}
    if unknown or len(positional) > 1:
        print(USAGE)
        return 64

    resolve = "--no-resolve" not in flags
    show_ast = "--print-ast" in flags
    if positional:
        return run_script_file(positional[0], resolve=resolve, show_ast=show_ast)
    return repl(resolve=resolve, show_ast=show_ast)


if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        print()
        sys.exit(130)
