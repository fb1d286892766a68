"""
Structured help blocks printed when a command is run without its
required arguments.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Sequence, Tuple

from .output import RED, echo
from .sequences import print_per_line


@dataclass
class CommandHelp:
    summary: Sequence[str]
    usage: Sequence[str]
    arguments: Sequence[Tuple[str, str]] = field(default_factory=tuple)
    examples: Sequence[str] = field(default_factory=tuple)
    aliases: Sequence[str] = field(default_factory=tuple)
    usage_title: str = "USAGE"


def render_help(help_block: CommandHelp) -> List[Tuple[str, bool]]:
    """
    Return (line, is_heading) pairs for a help block.

    Sections without content are left out entirely.
    """

    lines: List[Tuple[str, bool]] = [("", False)]
    lines.extend((line, False) for line in help_block.summary)
    lines.append(("", False))

    sections: List[Tuple[str, List[str]]] = [
        (help_block.usage_title, print_per_line("  ", help_block.usage)),
    ]
    if help_block.arguments:
        width = max(len(name) for name, _ in help_block.arguments)
        sections.append(
            (
                "ARGUMENTS",
                [f"  {name.ljust(width)} # {text}" for name, text in help_block.arguments],
            )
        )
    if help_block.examples:
        sections.append(("EXAMPLES", print_per_line("  ", help_block.examples)))
    if help_block.aliases:
        sections.append(("ALIASES", print_per_line("  ", help_block.aliases)))

    for title, body in sections:
        lines.append((title, True))
        lines.extend((line, False) for line in body)
        lines.append(("", False))

    return lines


def show_help(help_block: CommandHelp) -> None:
    for line, is_heading in render_help(help_block):
        echo(line, RED if is_heading else None)
