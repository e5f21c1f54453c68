"""Command line entry point: now, stop, live and info."""

import argparse
import sys
from pathlib import Path

from trackwork import sessions as engine
from trackwork import store
from trackwork.config import FILE_ENV_VAR, Config, default_file
from trackwork.errors import TrackError
from trackwork.live import run_live
from trackwork.report import Scope, max_month_delta, report, report_json


def month_delta(value: str) -> int:
    """argparse type for the number of months to look back."""
    try:
        delta = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid month delta: {value!r}") from None
    if delta < 0:
        raise argparse.ArgumentTypeError("month delta must not be negative")
    limit = max_month_delta()
    if delta > limit:
        raise argparse.ArgumentTypeError(f"month delta must be at most {limit}")
    return delta


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="trackwork",
        description="A simple work tracker.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="Examples:\n"
               "  trackwork -f work.csv now -o 'write report'\n"
               "  trackwork stop -o 'report drafted'\n"
               "  trackwork live\n"
               "  trackwork info --uncompressed month 1\n"
               "  trackwork info all\n",
    )
    parser.add_argument("--debug", "-d", action="store_true", help="Print parsed arguments and raw records")
    parser.add_argument(
        "--file", "-f", type=Path, default=default_file(),
        help=f"The file where the working data is stored (default: ${FILE_ENV_VAR})",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    for name, help_text in [
        ("now", "Start tracking work now"),
        ("stop", "Stop the currently tracked session"),
        ("live", "Start or display the current session, stop it on Ctrl-C"),
    ]:
        p = sub.add_parser(name, help=help_text)
        p.add_argument("--objective", "-o", default="", help="The objective for this work session")

    info = sub.add_parser("info", help="Display time worked so far")
    info.add_argument(
        "--uncompressed", "-u", action="store_true",
        help="Show each session, otherwise one line per date",
    )
    info.add_argument("--json", "-j", action="store_true", help="Output as JSON")
    scopes = info.add_subparsers(dest="scope")
    month = scopes.add_parser("month", help="Show data from <delta> months ago")
    month.add_argument("delta", nargs="?", type=month_delta, default=0, help="Months back (default: 0)")
    scopes.add_parser("all", help="Show data for all tracked dates")

    return parser


def scope_from_args(args: argparse.Namespace) -> Scope:
    if args.scope == "all":
        return Scope.all_time()
    if args.scope == "month":
        return Scope.month(args.delta)
    return Scope()


def run(args: argparse.Namespace, config: Config) -> None:
    command = args.command

    if command == "now":
        sessions = engine.begin(config, args.objective)
        report(sessions)
    elif command == "stop":
        sessions = engine.end_current(config, args.objective)
        report(sessions)
    elif command == "live":
        run_live(config, args.objective)
    elif command == "info":
        sessions = store.load(config.file, debug=config.debug)
        scope = scope_from_args(args)
        if args.json:
            report_json(sessions, scope, uncompressed=args.uncompressed)
        else:
            report(sessions, scope, uncompressed=args.uncompressed)


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.file is None:
        parser.error(f"no storage file given: use --file or set {FILE_ENV_VAR}")

    config = Config(file=args.file, debug=args.debug)
    if config.debug:
        print(args)

    try:
        run(args, config)
    except TrackError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
