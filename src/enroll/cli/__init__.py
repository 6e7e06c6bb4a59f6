"""Enroll CLI — validate or submit a registration from the command line.

Entry point registered as ``enroll`` in ``pyproject.toml``::

    [project.scripts]
    enroll = "enroll.cli:main"
"""

import argparse
import sys


def _add_field_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--username", default="", help="Account username (3-20 characters)")
    parser.add_argument(
        "--fav-language",
        dest="fav_language",
        default="",
        help="Favorite programming language (e.g. javascript, rust)",
    )
    parser.add_argument(
        "--fav-food",
        dest="fav_food",
        default="",
        help="Favorite food (pizza, spaghetti, broccoli)",
    )
    parser.add_argument(
        "--agree",
        dest="agreement",
        action="store_true",
        help="Accept the terms of service",
    )


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for the ``enroll`` command."""
    parser = argparse.ArgumentParser(
        prog="enroll",
        description="Enroll — account registration form with validation and submission.",
    )
    subparsers = parser.add_subparsers(dest="command")

    # -- enroll validate ----------------------------------------------------
    validate_parser = subparsers.add_parser("validate", help="Check values against the form rules")
    _add_field_arguments(validate_parser)

    # -- enroll submit ------------------------------------------------------
    submit_parser = subparsers.add_parser("submit", help="Validate and send a registration")
    _add_field_arguments(submit_parser)
    submit_parser.add_argument(
        "--endpoint",
        default=None,
        help="Registration endpoint URL (default: $ENROLL_ENDPOINT or the public endpoint)",
    )
    submit_parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Request timeout in seconds",
    )
    submit_parser.add_argument(
        "--log-level",
        dest="log_level",
        default=None,
        help="Log level (debug, info, warning, error, critical)",
    )

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    if args.command == "validate":
        from enroll.cli._validate import run_validate

        run_validate(args)
    elif args.command == "submit":
        from enroll.cli._submit import run_submit

        run_submit(args)
