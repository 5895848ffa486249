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


def _add_scan_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("image", help="Path to the scanned image")
    parser.add_argument("--catalog", required=True, help="Product catalog (.json or .csv)")
    parser.add_argument("--ocr-url", default=None, help="Use the OCR service at this URL instead of Tesseract")


def main(argv: Sequence[str] | None = None) -> int:
    """Main entry point for the CLI."""
    parser = argparse.ArgumentParser(
        description="Delivery and recipe scanning CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Commands:
  scan-delivery <image> --catalog FILE
                             Scan a delivery note and match its lines
  scan-recipe <image> --catalog FILE
                             Scan a recipe sheet
  correct <raw name> <product id> --catalog FILE
                             Remember that a scanned name means a product

Notes:
  configuration and learned corrections live in $STOCKSCAN_HOME (default ~/.stockscan)
""",
    )
    parser.add_argument("--config", default=None, help="Path to config.toml (default: $STOCKSCAN_HOME/config.toml)")
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Log debug details, including recognized text, to stderr"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    delivery_parser = subparsers.add_parser("scan-delivery", help="Scan a delivery note image")
    _add_scan_arguments(delivery_parser)

    recipe_parser = subparsers.add_parser("scan-recipe", help="Scan a recipe sheet image")
    _add_scan_arguments(recipe_parser)

    correct_parser = subparsers.add_parser("correct", help="Record a scanned name -> product correction")
    correct_parser.add_argument("raw_name", help="Name as it appears on scans")
    correct_parser.add_argument("product_id", help="Catalog id of the product it refers to")
    correct_parser.add_argument("--catalog", required=True, help="Product catalog (.json or .csv)")

    args = parser.parse_args(argv)

    if args.verbose:
        import logging

        from stockscan.runtime.logging import set_log_level

        set_log_level(logging.DEBUG)

    if args.command is None:
        parser.print_help()
        return 1

    if args.command == "scan-delivery":
        from stockscan.cli.scan import cmd_scan_delivery

        return _run_command(cmd_scan_delivery, args)
    elif args.command == "scan-recipe":
        from stockscan.cli.scan import cmd_scan_recipe

        return _run_command(cmd_scan_recipe, args)
    elif args.command == "correct":
        from stockscan.cli.scan import cmd_correct

        return _run_command(cmd_correct, args)

    return 1


if __name__ == "__main__":
    raise SystemExit(main())
