"""
Colored terminal output.

Lines are wrapped in ANSI SGR codes unless NO_COLOR is set.
"""

from __future__ import annotations

import os
import shlex
from typing import Iterable, Optional, Sequence

GREEN = 32
RED = 31
BLUE = 34
YELLOW = 33


def colorize(message: str, color: Optional[int] = None) -> str:
    if color is None or os.environ.get("NO_COLOR"):
        return message
    return f"\033[0;{color}m{message}\033[0m"


def echo(message: str = "", color: Optional[int] = None) -> None:
    print(colorize(message, color))


def echo_lines(lines: Iterable[str], color: Optional[int] = None) -> None:
    for line in lines:
        echo(line, color)


def echo_command(args: Sequence[str]) -> None:
    """Show a command before it runs, e.g. `=> git checkout main`."""

    echo(f"=> {shlex.join(args)}", YELLOW)
