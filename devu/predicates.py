"""
Small yes/no questions about strings and the filesystem.

The typed parsers (parse_bool, parse_number, parse_count) are the real
implementation; the is_* predicates are thin views over them.
"""

from __future__ import annotations

import os
import re
from typing import Optional, Union

PathLike = Union[str, "os.PathLike[str]"]

TRUTHY_TOKENS = ("true", "TRUE", "yes", "YES", "y", "Y", "1")
FALSY_TOKENS = ("false", "FALSE", "no", "NO", "n", "N", "0")

# Optional sign, then "12", "12.", "12.5" or ".5". No exponents.
_NUMBER_RE = re.compile(r"^[+-]?([0-9]+([.][0-9]*)?|[.][0-9]+)$")
_COUNT_RE = re.compile(r"^[0-9]+$")


def is_blank(value: Optional[str]) -> bool:
    return not value


def is_present(value: Optional[str]) -> bool:
    return not is_blank(value)


def parse_bool(value: Optional[str]) -> Optional[bool]:
    """
    Parse a boolean token.

    Returns True or False for the recognized tokens (case-sensitive) and
    None for anything else, so callers can tell "false" from "garbage".
    """

    if value in TRUTHY_TOKENS:
        return True
    if value in FALSY_TOKENS:
        return False
    return None


def parse_number(value: Optional[str]) -> Optional[float]:
    if is_blank(value) or not _NUMBER_RE.match(value):
        return None
    return float(value)


def parse_count(value: Optional[str]) -> Optional[int]:
    """Parse a non-negative integer such as a commit count."""

    if is_blank(value) or not _COUNT_RE.match(value):
        return None
    return int(value)


def is_numeric(value: Optional[str]) -> bool:
    return parse_number(value) is not None


def is_true(value: Optional[str]) -> bool:
    return parse_bool(value) is True


def file_exists(path: PathLike) -> bool:
    return os.path.isfile(path)


def is_directory(path: PathLike) -> bool:
    return os.path.isdir(path)
