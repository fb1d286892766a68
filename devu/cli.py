"""
Command-line interface for devu.

This module is responsible for argument parsing, resolving the
configuration once, and delegating to the command functions.
"""

from __future__ import annotations

import argparse
import sys
from typing import List, Optional, Sequence, Tuple

from .commands import COMMANDS, devu_help, version_string
from .config import load_config
from .errors import DevuError
from .logging_utils import configure_logging
from .output import RED, colorize


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="devu",
        description="Developer shortcuts for git. Run without a command to list them all.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (can be specified multiple times).",
    )
    parser.add_argument("--version", action="version", version=version_string())

    subparsers = parser.add_subparsers(dest="command", metavar="<command>")
    for spec in COMMANDS:
        sub = subparsers.add_parser(spec.name, aliases=list(spec.aliases), help=spec.summary)
        # Only shown in --help; the arguments themselves never reach argparse.
        sub.add_argument("args", nargs="*", help=spec.arguments or "unused")
        sub.set_defaults(handler=spec.handler)

    return parser


def split_command_args(argv: Sequence[str]) -> Tuple[List[str], List[str]]:
    """
    Split argv after the command name.

    Everything following the command belongs to the command verbatim, so
    `devu commit -WIP stuff` commits "-WIP stuff" instead of argparse
    rejecting "-WIP" as an unknown option.
    """

    names = {name for spec in COMMANDS for name in (spec.name, *spec.aliases)}
    for index, token in enumerate(argv):
        if token in names:
            return list(argv[: index + 1]), list(argv[index + 1:])
    return list(argv), []


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_arg_parser()
    head, command_args = split_command_args(sys.argv[1:] if argv is None else argv)
    args = parser.parse_args(head)

    configure_logging(verbosity=args.verbose)

    handler = getattr(args, "handler", devu_help)

    try:
        config = load_config()
        handler(config, command_args)
    except KeyboardInterrupt:
        # Graceful shutdown on Ctrl+C
        return 130
    except DevuError as exc:
        print(colorize(f"devu: error: {exc}", RED), file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":  # pragma: no cover - manual invocation
    raise SystemExit(main())
