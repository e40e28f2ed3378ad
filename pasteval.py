import argparse
import asyncio
import json
import os
import sys

from evaluator import Evaluator, set_verbose, transform_source
from evalcore.config import Settings, find_config, load_settings
from evalcore.errors import EvalSyntaxError
from evalcore.rewriter import MODULES_NAME
from evalcore.sandbox import Sandbox

CONFIG_FILE = "pasteval.json"

def log(message):
    """Log informational messages to stderr."""
    print(f"\033[92m\033[1mINFO:\033[0m {message}", file=sys.stderr)

def read_source(filepath):
    if filepath is None or filepath == "-":
        # Read from stdin
        return sys.stdin.read()
    if not os.path.exists(filepath):
        print(f"Error: File '{filepath}' not found.", file=sys.stderr)
        sys.exit(1)
    with open(filepath, 'r') as f:
        return f.read()

def parse_bindings(pairs):
    """Turn NAME=VALUE pairs into a dict. Values are JSON, or plain strings if not JSON."""
    bindings = {}
    for pair in pairs or []:
        name, sep, raw = pair.partition("=")
        if not sep:
            print(f"Error: Binding '{pair}' must look like NAME=VALUE.", file=sys.stderr)
            sys.exit(1)
        try:
            bindings[name.strip()] = json.loads(raw)
        except ValueError:
            bindings[name.strip()] = raw
    return bindings

def cmd_run(args, settings):
    source_code = read_source(args.filename)
    for path in settings.module_paths + (args.module_path or []):
        if path not in sys.path:
            sys.path.insert(0, path)

    evaluator = Evaluator(settings=settings)
    result = asyncio.run(evaluator.evaluate(source_code, parse_bindings(args.bind)))

    if args.json:
        print(json.dumps(result.to_dict(), indent=2))
    else:
        for line in (result.output_html if args.html else result.output):
            print(line)
        if result.error is None and result.result is not None:
            print(repr(result.result))

    if result.error is not None:
        if not args.json:
            print(f"Error: {result.error}", file=sys.stderr)
        sys.exit(1)

def cmd_transform(args, settings):
    source_code = read_source(args.filename)
    try:
        transformed = transform_source(source_code, settings.filename)
    except EvalSyntaxError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    names = [settings.console_name]
    if settings.capture_print:
        names.append("print")
    sandbox = Sandbox(console_name=settings.console_name, capture_print=settings.capture_print)
    print(sandbox.build_script(transformed, names + [MODULES_NAME]), end="")

def cmd_init(args, settings):
    if os.path.exists(CONFIG_FILE):
        log(f"{CONFIG_FILE} already exists, leaving it untouched.")
        return
    with open(CONFIG_FILE, "w") as f:
        json.dump(Settings().model_dump(), f, indent=2)
    log(f"Created {CONFIG_FILE} with default settings.")


def main():
    parser = argparse.ArgumentParser(description="pasteval CLI")
    parser.add_argument("--verbose", action="store_true", help="Enable verbose output (sent to stderr)")
    subparsers = parser.add_subparsers(dest="command")

    run = subparsers.add_parser("run", help="Evaluate a file as if pasted into a console")
    run.add_argument("filename", nargs="?", default="-", help="File to run (default: read from stdin)")
    run.add_argument("--bind", action="append", metavar="NAME=VALUE", help="Bind a name (JSON value) for the program")
    run.add_argument("--module-path", action="append", help="Extra directory to import modules from")
    run.add_argument("--html", action="store_true", help="Print the HTML rendering of the output")
    run.add_argument("--json", action="store_true", help="Print the whole result as JSON")

    transform = subparsers.add_parser("transform", help="Show the generated function source")
    transform.add_argument("filename", nargs="?", default="-", help="File to transform (default: read from stdin)")

    subparsers.add_parser("init", help="Write a default pasteval.json")

    args = parser.parse_args()
    set_verbose(args.verbose)

    settings = load_settings(on_error=log)
    if args.verbose and find_config():
        log(f"Using settings from {find_config()}")

    if args.command == "run": cmd_run(args, settings)
    elif args.command == "transform": cmd_transform(args, settings)
    elif args.command == "init": cmd_init(args, settings)
    else: parser.print_help()

if __name__ == "__main__":
    main()
