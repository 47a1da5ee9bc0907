#!/usr/bin/env python3

import argparse
from collections.abc import Callable, Sequence


def _coerce_exit_code(code: object) -> int:
    if code is None:
        return 0
    if isinstance(code, int):
        return code
    return 1


def _run_command(command: Callable[[argparse.Namespace], None], args: argparse.Namespace) -> int:
    """
    Normalize command handlers that call sys.exit().

    This keeps process termination centralized in this module's entrypoint.
    """
    try:
        command(args)
    except SystemExit as exc:
        return _coerce_exit_code(exc.code)
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """Main entry point for the CLI."""
    parser = argparse.ArgumentParser(
        description="SmartRation receipt scanner",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Commands:
  scan <image>               OCR a receipt photo and print the parsed record
  parse <ocr.json>           Re-parse a saved OCR response (no OCR call)
  serve [--host] [--port]    Start the receipt upload server

Environment:
  GOOGLE_VISION_API_KEY      required by scan and serve
  SMARTRATION_LOG_LEVEL      DEBUG shows why each receipt line was skipped
""",
    )

    parser.add_argument(
        "--log-level",
        type=str.lower,
        choices=["debug", "info", "warning", "error"],
        help="Override SMARTRATION_LOG_LEVEL for this run",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    scan_parser = subparsers.add_parser("scan", help="Scan a receipt image")
    scan_parser.add_argument("image", help="Path to receipt image")
    scan_parser.add_argument("--json", action="store_true", help="Print the meal-planning JSON payload")
    scan_parser.add_argument("--save-ocr", metavar="PATH", help="Save the raw OCR annotations as JSON")

    parse_parser = subparsers.add_parser("parse", help="Parse a saved OCR JSON file")
    parse_parser.add_argument("ocr_json", help="Path to OCR JSON saved by 'scan --save-ocr'")
    parse_parser.add_argument("--json", action="store_true", help="Print the meal-planning JSON payload")

    serve_parser = subparsers.add_parser("serve", help="Start receipt upload server")
    serve_parser.add_argument("--host", default="0.0.0.0", help="Host to bind to (default: 0.0.0.0)")
    serve_parser.add_argument("--port", type=int, default=8000, help="Port to bind to (default: 8000)")

    args = parser.parse_args(argv)

    if args.log_level:
        from smartration.runtime import parse_log_level, set_log_level

        set_log_level(parse_log_level(args.log_level))

    if args.command is None:
        parser.print_help()
        return 1

    if args.command == "scan":
        from smartration.cli.receipt import cmd_scan

        return _run_command(cmd_scan, args)
    elif args.command == "parse":
        from smartration.cli.receipt import cmd_parse

        return _run_command(cmd_parse, args)
    elif args.command == "serve":
        from smartration.cli.receipt import cmd_serve

        return _run_command(cmd_serve, args)

    return 1


if __name__ == "__main__":
    raise SystemExit(main())
