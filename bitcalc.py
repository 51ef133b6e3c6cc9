"""bitcalc entry point and REPL wiring."""
from __future__ import annotations
import argparse
import os
import sys
from typing import Callable, List, Optional, Sequence

from evaluator import DEFAULT_MAX_DEPTH, ErrorFormatter, Evaluator
from lexer import CalcError, Lexer, Token
from render import render_result
from runner import DEFAULT_PUSH_COMMAND, PUSH_COMMAND_ENV, CommandError, CommandRunner


EXIT_OK = 0
EXIT_EVAL_ERROR = 1
EXIT_COMMAND_FAILED = 3


def _describe_tokens(tokens: Sequence[Token]) -> str:
    return " ".join(f"{token.kind}({token.value})" for token in tokens)


def evaluate_arguments(
    arguments: Sequence[str],
    *,
    max_depth: int = DEFAULT_MAX_DEPTH,
    debug: int = 0,
    error_json: bool = False,
) -> int:
    verbose = debug >= 2
    evaluator = Evaluator(max_depth=max_depth)
    try:
        tokens = Lexer(arguments).tokenize()
        if debug:
            print(f"Tokens: {_describe_tokens(tokens)}", file=sys.stderr)
        result = evaluator.evaluate(tokens)
    except CalcError as error:
        formatter = ErrorFormatter(evaluator)
        print(formatter.format_text(error, verbose=verbose), file=sys.stderr)
        if error_json:
            print(formatter.to_json(error), file=sys.stderr)
        return EXIT_EVAL_ERROR

    if verbose:
        for line in evaluator.logger.format_lines():
            print(f"  {line}", file=sys.stderr)
    for line in render_result(result):
        print(line)
    return EXIT_OK


def run_push(command: str) -> int:
    try:
        result = CommandRunner(command).run()
    except CommandError as error:
        print(f"Warning: {error.message}", file=sys.stderr)
        return EXIT_COMMAND_FAILED
    if not result.ok:
        print(f"Warning: '{command}' exited with status {result.returncode}", file=sys.stderr)
        return EXIT_COMMAND_FAILED
    return EXIT_OK


def run_repl(
    *,
    max_depth: int = DEFAULT_MAX_DEPTH,
    debug: int = 0,
    error_json: bool = False,
    input_provider: Optional[Callable[[str], str]] = None,
) -> int:
    read_line = input_provider or input
    print("\x1b[38;2;153;221;255mbitcalc\033[0m REPL. One expression per line, Ctrl+D to quit.") # "bitcalc" in light blue
    prompt = "\x1b[38;2;153;221;255m>>>\033[0m "

    while True:
        try:
            line = read_line(prompt)
        except EOFError:
            print()
            break

        arguments = line.split()
        if not arguments:
            continue
        evaluate_arguments(arguments, max_depth=max_depth, debug=debug, error_json=error_json)

    return EXIT_OK


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bitcalc",
        description="Integer expression calculator with hex and binary output",
        epilog="Operators: + (add), x (multiply), / (divide). Group with [ and ], "
        "each as its own argument: bitcalc -c [ 3 + 4 ] x 0x2",
    )
    parser.add_argument("-c", "--calc", nargs="+", metavar="TOKEN", help="Expression tokens; omit to start the REPL")
    parser.add_argument("-d", "--debug", action="count", default=0, help="Print tokens (-d) and the reduction trace (-dd) to stderr")
    parser.add_argument("-p", "--push", action="store_true", help="Run the external push command after evaluating")
    parser.add_argument(
        "--push-command",
        default=os.environ.get(PUSH_COMMAND_ENV, DEFAULT_PUSH_COMMAND),
        help=f"Command run by --push (default: ${PUSH_COMMAND_ENV} or '{DEFAULT_PUSH_COMMAND}')",
    )
    parser.add_argument("--max-depth", type=int, default=DEFAULT_MAX_DEPTH, help="Maximum bracket nesting depth")
    parser.add_argument("--error-json", action="store_true", help="Also emit a JSON error report on failure")
    return parser


def run_cli(argv: Optional[List[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.max_depth < 0:
        parser.error("--max-depth must be >= 0")

    if args.calc is None:
        if args.push:
            return run_push(args.push_command)
        return run_repl(max_depth=args.max_depth, debug=args.debug, error_json=args.error_json)

    code = evaluate_arguments(args.calc, max_depth=args.max_depth, debug=args.debug, error_json=args.error_json)
    if args.push:
        push_code = run_push(args.push_command)
        if code == EXIT_OK:
            code = push_code
    return code


if __name__ == "__main__":
    raise SystemExit(run_cli())
