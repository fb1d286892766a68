"""
Helpers over ordered string sequences.
"""

from __future__ import annotations

from typing import Iterable, List, Optional, Sequence

from .predicates import is_blank


def join(separator: str, items: Iterable[str]) -> str:
    return separator.join(items)


def includes(needle: Optional[str], haystack: Sequence[str]) -> bool:
    """
    Return True if needle equals one of the items exactly.

    Substrings do not count: includes("x", ["xy"]) is False.
    """

    if is_blank(needle):
        return False
    return any(item == needle for item in haystack)


def print_per_line(prefix: str, items: Iterable[str]) -> List[str]:
    return [f"{prefix}{item}" for item in items]


def to_csv(items: Iterable[str]) -> str:
    return join(", ", items)


def to_bullet_list(items: Iterable[str]) -> List[str]:
    return print_per_line("- ", items)
