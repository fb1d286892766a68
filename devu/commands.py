"""
User-facing devu commands.

Each command takes the resolved Config and its positional arguments.
A command run without a required argument prints its help block and
returns normally. Anything that should stop the command raises a
DevuError, which the CLI reports.
"""

from __future__ import annotations

import logging
import re
import webbrowser
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Tuple

from . import __version__, git_adapter
from .config import Config, describe_config
from .errors import NoDefaultBranch, ValidationError
from .output import GREEN, RED, YELLOW, echo, echo_command, echo_lines
from .predicates import is_blank, is_directory, parse_count
from .sequences import includes, join, to_bullet_list, to_csv
from .usage import CommandHelp, show_help

LOG = logging.getLogger(__name__)

MENU_PROMPT = "Enter [number] to checkout: "


def _first(args: Sequence[str]) -> str:
    return args[0] if args else ""


def _words(args: Sequence[str]) -> List[str]:
    # Arguments may be quoted ("new branch name") or not; either way each
    # whitespace separated word becomes one part of the branch name.
    return " ".join(args).split()


# Branches
# ---------------------------------------------------------------------


def branch_create(config: Config, args: List[str]) -> None:
    words = _words(args)
    if not words:
        show_help(
            CommandHelp(
                summary=["Create a new branch."],
                usage_title="USAGE (spaces allowed in name)",
                usage=["branch.create <branch>"],
                examples=[
                    "branch.create feature/branch_name",
                    "branch.create 123-branch_name",
                    "branch.create new branch name",
                ],
            )
        )
        return

    git_adapter.create_branch(join(config.branch_description_word_separator, words))


def branch_current(config: Config, args: List[str]) -> None:
    echo(git_adapter.current_branch())


def branch_delete(config: Config, args: List[str]) -> None:
    branch = _first(args)
    if is_blank(branch):
        show_help(
            CommandHelp(
                summary=[
                    "Delete a local branch.",
                    "",
                    "Cannot delete protected branches:",
                    *to_bullet_list(config.protected_branches),
                ],
                usage=["branch.delete <branch>"],
                examples=[
                    "branch.delete feature/branch_name",
                    "branch.delete 123-branch_name",
                ],
                aliases=["dlb"],
            )
        )
        return

    if includes(branch, config.protected_branches):
        raise ValidationError(
            f"Cannot delete protected branch '{branch}' "
            f"(protected: {to_csv(config.protected_branches)})"
        )

    echo("Deleting local branch only...", YELLOW)
    git_adapter.delete_branch(branch, force=True)


def branch_default(config: Config, args: List[str]) -> None:
    try:
        echo(git_adapter.default_branch())
    except NoDefaultBranch:
        echo("You do not seem to have a default REMOTE branch.", RED)
        echo("Set one with: git remote set-head origin --auto")


def branches(config: Config, args: List[str]) -> None:
    git_adapter.branches()


def checkout(config: Config, args: List[str]) -> None:
    branch = _first(args)
    if is_blank(branch):
        show_help(
            CommandHelp(
                summary=["Checkout a branch."],
                usage=["checkout <branch>"],
                examples=[
                    "checkout main",
                    "checkout 123-branch_name",
                    "checkout 456/another_branch_name",
                ],
                aliases=["co"],
            )
        )
        return

    git_adapter.checkout(branch)


def checkout_file(config: Config, args: List[str]) -> None:
    path = _first(args)
    if is_blank(path):
        show_help(
            CommandHelp(
                summary=["Checkout a single file from the default branch."],
                usage=["checkout.file <file>"],
                examples=["checkout.file README.md"],
                aliases=["cf"],
            )
        )
        return

    git_adapter.restore_file(git_adapter.default_branch(), path)


def checkout_issue(config: Config, args: List[str]) -> None:
    """
    Checkout the local branch whose name carries the given issue ID.

    With several candidates the user picks one from a numbered menu. A
    bad pick aborts; the command has to be run again.
    """

    issue_id = _first(args)
    if is_blank(issue_id):
        show_help(
            CommandHelp(
                summary=[
                    "Checkout branch prefixed with the issue ID.",
                    "",
                    "If there are more than one branch with the",
                    "same issue ID, you will be asked to clarify",
                    "which branch you want to checkout.",
                ],
                usage=["checkout.issue <issue_id>"],
                examples=["checkout.issue 1234"],
                aliases=["ci"],
            )
        )
        return

    matched = git_adapter.branches_matching(f"{issue_id}{config.branch_issue_id_separator}")
    LOG.debug("Branches matching issue %s: %s", issue_id, matched)

    if not matched:
        echo(f"No local branches found for issue ID: {issue_id}", RED)
        return

    if len(matched) == 1:
        git_adapter.checkout(matched[0])
        return

    for number, branch in enumerate(matched, start=1):
        echo(f"[{number}] {branch}")

    choice = _select(MENU_PROMPT, len(matched))
    if choice is None:
        echo("Invalid number.", RED)
        return

    git_adapter.checkout(matched[choice - 1])


def _select(prompt: str, count: int) -> Optional[int]:
    """Ask once for a number in [1, count]; None if the answer is anything else."""

    try:
        answer = input(prompt).strip()
    except EOFError:
        return None

    number = parse_count(answer)
    if number is None or not 1 <= number <= count:
        return None
    return number


def issue(config: Config, args: List[str]) -> None:
    if len(args) < 2:
        show_help(
            CommandHelp(
                summary=["Create a branch for the issue ID."],
                usage=["issue <issue_id> <branch>"],
                arguments=[
                    ("<issue_id>", f"Must follow format: {config.issue_id_regex}"),
                    ("<branch>", "May include spaces between words"),
                ],
                examples=["issue 1234 branch_name", "issue 1234 branch name"],
            )
        )
        return

    issue_id, words = args[0], _words(args[1:])
    if not re.fullmatch(config.issue_id_regex, issue_id):
        raise ValidationError(f"<issue_id> must follow format: {config.issue_id_regex}")

    description = join(config.branch_description_word_separator, words)
    git_adapter.create_branch(f"{issue_id}{config.branch_issue_id_separator}{description}")


def main_pull(config: Config, args: List[str]) -> None:
    git_adapter.checkout(git_adapter.default_branch())
    git_adapter.pull()


# Commits
# ---------------------------------------------------------------------


def extract_issue_id(config: Config, branch: str) -> Optional[str]:
    """
    Return the issue ID a branch name starts with.

    123-branch_name => 123
    """

    match = re.match(f"(?:{config.issue_id_regex})", branch)
    if match is None or is_blank(match.group(0)):
        return None
    return match.group(0)


def prefix_commit_message(config: Config, message: str, branch: str) -> str:
    """
    Prepend `<PROJECT_KEY>-<issue_id> - ` unless the message already has it.
    """

    if re.match(f"{re.escape(config.project_key)}-(?:{config.issue_id_regex})", message):
        return message

    issue_id = extract_issue_id(config, branch)
    if issue_id is None:
        raise ValidationError(
            f"Commits require an issue key but branch '{branch}' does not start "
            f"with an issue ID matching {config.issue_id_regex}"
        )
    return f"{config.project_key}-{issue_id} - {message}"


def commit(config: Config, args: List[str]) -> None:
    """
    Stage everything, commit and push the current branch.

    Stops at the first git failure; whatever git already did stays done.
    """

    if not args:
        show_help(
            CommandHelp(
                summary=[
                    "Commit changes and push to remote.",
                    "",
                    "Quotes are optional unless the <message> contains",
                    "quote or special characters.",
                ],
                usage=["commit <message>"],
                examples=['commit Fix issue #1234', 'commit "Fix issue #1234"'],
            )
        )
        return

    message = " ".join(args)
    branch = git_adapter.current_branch()
    if is_blank(branch):
        raise ValidationError("Cannot commit and push from a detached HEAD.")

    if config.commits_require_issue_key:
        prefixed = prefix_commit_message(config, message, branch)
        if prefixed != message:
            echo("Prepending issue key to commit message.", YELLOW)
        message = prefixed
    else:
        echo("Commits do not require issue key.", YELLOW)

    git_adapter.stage_all()
    git_adapter.commit(message)
    git_adapter.push(branch)


def _log_limit(args: Sequence[str]) -> Optional[int]:
    raw = _first(args)
    if is_blank(raw):
        return None
    limit = parse_count(raw)
    if limit is None:
        raise ValidationError("Argument must be a number.")
    return limit


def commits(config: Config, args: List[str]) -> None:
    git_adapter.log(limit=_log_limit(args), oneline=True)


def git_log(config: Config, args: List[str]) -> None:
    git_adapter.log(limit=_log_limit(args))


def uncommit(config: Config, args: List[str]) -> None:
    raw = _first(args) or "1"
    count = parse_count(raw)
    if count is None or count < 1:
        raise ValidationError("Argument must be a number.")

    git_adapter.reset_soft(count)


def sha(config: Config, args: List[str]) -> None:
    echo(git_adapter.current_sha(short=_first(args) != "full"))


def force_push(config: Config, args: List[str]) -> None:
    git_adapter.push(git_adapter.current_branch(), force_with_lease=True)


def git_diff(config: Config, args: List[str]) -> None:
    git_adapter.diff()


def git_pull(config: Config, args: List[str]) -> None:
    git_adapter.pull()


def git_status(config: Config, args: List[str]) -> None:
    git_adapter.status()


# Pull requests
# ---------------------------------------------------------------------


def pull_request(config: Config, args: List[str]) -> None:
    """
    Open the web page that creates a pre-filled pull request.

    Targets the default branch unless another branch is given.
    """

    source = git_adapter.current_branch()
    if is_blank(source):
        raise ValidationError("Cannot create a PR from a detached HEAD.")

    target = _first(args)
    if is_blank(target):
        target = git_adapter.default_branch()

    if target == source:
        raise ValidationError("Cannot create a PR to the same branch.")

    echo(f"From: {source}")
    echo(f"To: {target}")

    remote = git_adapter.parse_remote_url(git_adapter.remote_url())
    url = git_adapter.pull_request_url(remote, target=target, source=source)
    echo(url)
    webbrowser.open(url)


# Git helpers
# ---------------------------------------------------------------------


def git_config_get(config: Config, args: List[str]) -> None:
    remaining = list(args)
    location = "global"
    if remaining and remaining[0] in ("global", "local"):
        location = remaining.pop(0)

    key = _first(remaining)
    if is_blank(key):
        show_help(
            CommandHelp(
                summary=["Get a git configuration value."],
                usage=["git.config.get <location> <key>"],
                arguments=[
                    ("<location>", "global (default), local"),
                    ("<key>", "e.g. user.name, user.email"),
                ],
                examples=[
                    "git.config.get global user.name",
                    "git.config.get user.name # default to global",
                ],
            )
        )
        return

    echo_command(["git", "config", f"--{location}", key])
    echo(git_adapter.config_get(key, location=location))


def git_is_valid_repo(config: Config, args: List[str]) -> None:
    if not git_adapter.is_valid_repo():
        raise ValidationError("Not in a git directory.")
    echo("Inside a git repository.", GREEN)


# Housekeeping
# ---------------------------------------------------------------------


def log_cleanup(config: Config, args: List[str]) -> None:
    log_dir = Path("log")
    if not is_directory(log_dir):
        echo("No logs directory found at log/", RED)
        return

    log_files = sorted(path for path in log_dir.glob("*.log*") if path.is_file())
    if not log_files:
        echo("No log files to remove.")
        return

    echo_command(["rm", *(str(path) for path in log_files)])
    for path in log_files:
        path.unlink()
    LOG.info("Removed %d log files", len(log_files))


# devu itself
# ---------------------------------------------------------------------


def version_string() -> str:
    return f"DEVU Developer Utilities {__version__}"


def devu_version(config: Config, args: List[str]) -> None:
    echo(version_string())


def devu_config(config: Config, args: List[str]) -> None:
    if config.source is not None:
        echo(f"Config file: {config.source}")
    else:
        echo("No .devu config file, using defaults.")
    echo("----")
    echo_lines(describe_config(config))


def devu_help(config: Config, args: List[str]) -> None:
    echo()
    echo(version_string())
    echo()
    echo("Developer shortcuts for git.")
    echo()
    echo("Run <command> without args to see the usage (if applicable).")
    echo()

    for group in ("HELP", "COMMANDS (alias)"):
        echo(group, RED)
        echo_lines(_overview_lines([spec for spec in COMMANDS if spec.group == group]))
        echo()


def _overview_lines(specs: Sequence["CommandSpec"]) -> List[str]:
    signatures = [f"{spec.name} {spec.arguments}".rstrip() for spec in specs]
    aliases = [f"({', '.join(spec.aliases)})" if spec.aliases else "" for spec in specs]
    left = max(len(text) for text in signatures)
    right = max(len(text) for text in aliases)
    return [
        f"  {signature.ljust(left)} {alias.rjust(right)} # {spec.summary}"
        for signature, alias, spec in zip(signatures, aliases, specs)
    ]


@dataclass(frozen=True)
class CommandSpec:
    name: str
    handler: Callable[[Config, List[str]], None]
    summary: str
    arguments: str = ""
    aliases: Tuple[str, ...] = ()
    group: str = "COMMANDS (alias)"


COMMANDS: Tuple[CommandSpec, ...] = (
    CommandSpec("devu.help", devu_help, "Show this help message", aliases=("help",), group="HELP"),
    CommandSpec("devu.config", devu_config, "Show the configuration", group="HELP"),
    CommandSpec("devu.version", devu_version, "Show the DEVU version", group="HELP"),
    CommandSpec("branch.create", branch_create, "Create a new branch", "<branch>"),
    CommandSpec("branch.current", branch_current, "Show the current branch"),
    CommandSpec("branch.delete", branch_delete, "Delete a local branch", "<branch>", ("dlb",)),
    CommandSpec("branch.default", branch_default, "Show the default branch"),
    CommandSpec("branches", branches, "Show local branches", aliases=("b",)),
    CommandSpec("commits", commits, "Show commits (defaults to all)", "[<number>]", ("glo",)),
    CommandSpec("checkout", checkout, "Checkout a branch", "<branch>", ("co",)),
    CommandSpec(
        "checkout.file",
        checkout_file,
        "Checkout a single file from the default branch",
        "<file>",
        ("cf",),
    ),
    CommandSpec(
        "checkout.issue",
        checkout_issue,
        "Checkout a branch prefixed with the issue ID",
        "<issue_id>",
        ("ci",),
    ),
    CommandSpec("commit", commit, "Commit changes and push to remote", "<message>"),
    CommandSpec("force-push", force_push, "Force push changes to remote (with lease)"),
    CommandSpec("gd", git_diff, "Git diff"),
    CommandSpec("gl", git_log, "Git log (defaults to all)", "[<number>]"),
    CommandSpec("gp", git_pull, "Git pull latest changes"),
    CommandSpec("gs", git_status, "Git status"),
    CommandSpec("issue", issue, "Create a branch for the given issue ID", "<issue_id> <branch>"),
    CommandSpec("log.cleanup", log_cleanup, "Remove 'log/*.log' files"),
    CommandSpec("main-pull", main_pull, "Switch to default branch and pull changes", aliases=("mp",)),
    CommandSpec(
        "pull-request",
        pull_request,
        "Open the URL to create a pre-filled pull request",
        "[<branch>]",
        ("pr",),
    ),
    CommandSpec("sha", sha, "Show the SHA of the current commit", "[full]"),
    CommandSpec("uncommit", uncommit, "Soft uncommit/undo last number of commits", "[<number=1>]"),
    CommandSpec(
        "git.config.get",
        git_config_get,
        "Get a git configuration value",
        "[global|local] <key>",
    ),
    CommandSpec("git.is-valid-repo", git_is_valid_repo, "Check the current directory is a git repo"),
)
