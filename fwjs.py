import argparse
import sys
from pathlib import Path

from fwjs.fwjs_runtime import ScriptRunner
from fwjs.fwjs_printer import Printer
from fwjs.fwjs_serialize import deserialize, serialize, detect_format
from fwjs.fwjs_datatypes import NullVal, FwjsError


# A basic input prompt; tests replace it.
def read_line(prompt: str) -> str:
    sys.stdout.write(prompt)
    sys.stdout.flush()
    return sys.stdin.readline()


def _print_value(printer: Printer, value):
    if value is not None and not isinstance(value, NullVal):
        print(printer.pformat(value))


def run_program_file(file_path: str, fmt=None, show_tree=False, dump=False, recursion_limit=None) -> int:
    """Run an FWJS tree document non-interactively and return an exit status."""
    runner = ScriptRunner(recursion_limit=recursion_limit)
    printer = Printer()
    p = Path(file_path)
    try:
        source = p.read_text(encoding="utf-8")
    except FileNotFoundError:
        print(f"Error: file not found: {file_path}", file=sys.stderr)
        return 1
    fmt = fmt or detect_format(filename=p.name, data_hint=source)

    if show_tree or dump:
        try:
            expr = runner.transformer.transform(deserialize(source, fmt=fmt))
        except (ValueError, RecursionError, FwjsError) as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1
        if dump:
            print(serialize(runner.transformer.to_data(expr), fmt='yaml'), end='')
            return 0
        print(printer.pformat(expr))

    result = runner.handle_document(source, fmt=fmt)
    if result.status == 'error':
        print(result.format_error(), file=sys.stderr)
        return 1
    _print_value(printer, result.value)
    return 0


def repl(recursion_limit=None):
    print("FWJS REPL v0.1")
    print("Enter one JSON or YAML tree per line. Type 'exit' or press Ctrl+D to quit.")

    runner = ScriptRunner(recursion_limit=recursion_limit)
    printer = Printer()

    while True:
        raw = read_line(">> ")
        if raw == "":
            print("\nExiting.")
            break
        line = raw.strip()
        if not line:
            continue
        if line == "exit":
            break

        result = runner.handle_document(line)
        if result.status == 'error':
            print(result.format_error(), file=sys.stderr)
            continue
        _print_value(printer, result.value)


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="fwjs",
        description="Evaluate FWJS expression trees stored as JSON or YAML documents.",
    )
    parser.add_argument("program", nargs="?", help="tree document to run; omit to start the REPL")
    parser.add_argument("--format", choices=["json", "yaml"], default=None,
                        help="document format (default: from suffix or content)")
    parser.add_argument("--show-tree", action="store_true",
                        help="print the program in source form before running it")
    parser.add_argument("--dump", action="store_true",
                        help="print the normalized tree as YAML and exit")
    parser.add_argument("--recursion-limit", type=int, default=None,
                        help="host recursion limit while evaluating")
    return parser


def main(argv=None) -> int:
    """Run a program file when provided, otherwise start the interactive REPL."""
    args = build_arg_parser().parse_args(argv)
    if args.program:
        return run_program_file(
            args.program,
            fmt=args.format,
            show_tree=args.show_tree,
            dump=args.dump,
            recursion_limit=args.recursion_limit,
        )
    repl(recursion_limit=args.recursion_limit)
    return 0


if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        print("\nExiting.")
