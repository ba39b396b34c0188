import argparse
import sys
from pathlib import Path

from csfn.csfn_printer import Printer
from csfn.csfn_runner import run_program
from csfn.csfn_serialize import deserialize, format_for_filename


def run_program_file(file_path: str, *, verbose: bool = False, max_steps=None) -> int:
    """Run a JSON/YAML program file and print the final scope. Returns the exit status."""
    p = Path(file_path)
    try:
        source = p.read_text(encoding="utf-8")
    except FileNotFoundError:
        print(f"Error: file not found: {file_path}", file=sys.stderr)
        return 1
    data = deserialize(source, fmt=format_for_filename(p.name))
    if isinstance(data, str):
        print(f"Error: could not parse program: {file_path}", file=sys.stderr)
        return 1

    result = run_program(data, max_steps=max_steps)
    printer = Printer()
    if verbose:
        for effect in result.side_effects:
            indent = "  " * effect.get("depth", 0)
            topic = effect["topics"][0]
            suffix = f" -> {effect['control_flow']}" if "control_flow" in effect else ""
            print(f"{indent}[{topic}] {effect['message']}{suffix}")
    if result.status == 'error':
        print(result.format_error(), file=sys.stderr)
        return 1
    print(printer.pformat(result.scope))
    return 0


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(prog="csfn", description="Run an invocation program.")
    parser.add_argument("program", help="path to a .json or .yaml program")
    parser.add_argument("-v", "--verbose", action="store_true", help="print each step")
    parser.add_argument("--max-steps", type=int, default=None, help="step budget (default: $CSFN_MAX_STEPS or 10000)")
    args = parser.parse_args(argv)
    return run_program_file(args.program, verbose=args.verbose, max_steps=args.max_steps)


if __name__ == "__main__":
    raise SystemExit(main())
