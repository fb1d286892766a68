"""
Configuration model for devu.

The CLI resolves a Config once per invocation and passes it down into
every command so behavior can be adjusted without relying on global
state.

Overrides live in a `.devu` file in the project directory or, failing
that, in the user's home directory. Only the first file found is
applied; the two are never merged. The file is plain `KEY=value`
lines, e.g.:

    # .devu
    PROJECT_KEY=ACME
    COMMITS_REQUIRE_ISSUE_KEY=true
    PROTECTED_BRANCHES=(main release)
"""

from __future__ import annotations

import logging
import re
import shlex
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from .errors import ConfigError
from .predicates import file_exists, parse_bool

LOG = logging.getLogger(__name__)

CONFIG_FILE_NAME = ".devu"

DEFAULT_PROTECTED_BRANCHES = ("main", "master", "development")


@dataclass(frozen=True)
class Config:
    """
    Settings shared by all devu commands.

    source is the override file the values came from, or None when the
    built-in defaults are in effect.
    """

    branch_description_word_separator: str = "-"
    branch_issue_id_separator: str = "/"
    commits_require_issue_key: bool = False
    issue_id_regex: str = "[0-9]+"
    project_key: str = "DEVU"
    protected_branches: Tuple[str, ...] = field(default=DEFAULT_PROTECTED_BRANCHES)
    source: Optional[Path] = None


# File key -> Config attribute.
_KEYS: Dict[str, str] = {
    "BRANCH_DESCRIPTION_WORD_SEPARATOR": "branch_description_word_separator",
    "BRANCH_ISSUE_ID_SEPARATOR": "branch_issue_id_separator",
    "COMMITS_REQUIRE_ISSUE_KEY": "commits_require_issue_key",
    "ISSUE_ID_REGEX": "issue_id_regex",
    "PROJECT_KEY": "project_key",
    "PROTECTED_BRANCHES": "protected_branches",
}


def config_file(cwd: Optional[Path] = None, home: Optional[Path] = None) -> Optional[Path]:
    """
    Return the override file that applies, if any.

    The project file wins over the home file.
    """

    cwd = Path.cwd() if cwd is None else Path(cwd)
    home = Path.home() if home is None else Path(home)

    for candidate in (cwd / CONFIG_FILE_NAME, home / CONFIG_FILE_NAME):
        if file_exists(candidate):
            return candidate
    return None


def load_config(cwd: Optional[Path] = None, home: Optional[Path] = None) -> Config:
    path = config_file(cwd=cwd, home=home)
    if path is None:
        LOG.info("No %s config file, using defaults", CONFIG_FILE_NAME)
        return Config()

    LOG.info("Loading config from %s", path)
    overrides = parse_config_text(path.read_text(encoding="utf-8"), path=path)
    return replace(Config(), source=path, **overrides)


def parse_config_text(text: str, path: Optional[Path] = None) -> Dict[str, object]:
    """
    Parse the contents of a .devu file into Config keyword overrides.

    Raises ConfigError for lines that are not KEY=value assignments or
    whose values do not make sense for the key.
    """

    where = str(path) if path is not None else "<config>"
    overrides: Dict[str, object] = {}

    for lineno, raw_line in enumerate(text.splitlines(), start=1):
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if line.startswith("export "):
            line = line[len("export "):].lstrip()

        key, sep, raw_value = line.partition("=")
        key = key.strip()
        if not sep or not key:
            raise ConfigError(f"{where}:{lineno}: expected KEY=value, got {raw_line!r}")

        attr = _KEYS.get(key)
        if attr is None:
            LOG.warning("%s:%d: ignoring unknown key %s", where, lineno, key)
            continue

        try:
            overrides[attr] = _parse_value(key, _strip_comment(raw_value))
        except ValueError as exc:
            raise ConfigError(f"{where}:{lineno}: {exc}") from exc

    return overrides


def _strip_comment(raw_value: str) -> str:
    # As in a shell, "#" only starts a comment after whitespace: KEY=a#b keeps "a#b".
    return re.split(r"\s+#", raw_value, maxsplit=1)[0].strip()


def _parse_value(key: str, raw_value: str) -> object:
    if key == "PROTECTED_BRANCHES":
        return tuple(_split_list(raw_value))

    tokens = shlex.split(raw_value)
    value = tokens[0] if len(tokens) == 1 else " ".join(tokens)

    if key == "BRANCH_ISSUE_ID_SEPARATOR" and not value:
        raise ValueError(f"{key} must not be empty")

    if key == "COMMITS_REQUIRE_ISSUE_KEY":
        if not value:
            return False
        parsed = parse_bool(value)
        if parsed is None:
            raise ValueError(f"{key} must be a boolean such as true or false, got {value!r}")
        return parsed

    if key == "ISSUE_ID_REGEX":
        try:
            re.compile(value)
        except re.error as exc:
            raise ValueError(f"{key} is not a valid regular expression: {exc}") from exc

    return value


def _split_list(raw_value: str) -> List[str]:
    value = raw_value.strip()
    # Shell array syntax from older config files: (main master)
    if value.startswith("(") and value.endswith(")"):
        value = value[1:-1]
    return [item for item in shlex.split(value.replace(",", " ")) if item]


def describe_config(config: Config) -> List[str]:
    return [
        f"BRANCH_DESCRIPTION_WORD_SEPARATOR={config.branch_description_word_separator}",
        f"BRANCH_ISSUE_ID_SEPARATOR={config.branch_issue_id_separator}",
        f"COMMITS_REQUIRE_ISSUE_KEY={str(config.commits_require_issue_key).lower()}",
        f"ISSUE_ID_REGEX={config.issue_id_regex}",
        f"PROJECT_KEY={config.project_key}",
        f"PROTECTED_BRANCHES=({' '.join(config.protected_branches)})",
    ]
