"""
Git integration for devu.

Every devu command talks to git through this module. There are three
ways a command runs:

  - _run_git captures output for commands whose text we parse
    (branch names, SHAs, the origin URL);
  - _execute_git announces a mutating command, captures its output and
    relays it to the terminal once it succeeds;
  - _passthrough_git announces a command and lets git write straight to
    the terminal (pager, progress meters, colors).

A non-zero exit always raises VcsCommandFailed. Nothing is retried.
"""

from __future__ import annotations

import logging
import re
import subprocess
import sys
from dataclasses import dataclass
from typing import List, Optional
from urllib.parse import urlencode

from .errors import NoDefaultBranch, UnparsableRemoteUrl, VcsCommandFailed
from .output import echo_command
from .predicates import is_blank

LOG = logging.getLogger(__name__)

DEFAULT_REMOTE = "origin"
_REMOTE_HEAD_PREFIX = f"refs/remotes/{DEFAULT_REMOTE}/"

# user@host:owner/name(.git)
_SCP_URL_RE = re.compile(
    r"^(?P<user>[^@/:\s]+)@(?P<host>[^@/:\s]+):(?P<owner>[^/\s]+)/(?P<name>[^/\s]+?)(?:\.git)?/?$"
)


@dataclass(frozen=True)
class RemoteUrl:
    """
    Components of an scp-style remote such as git@github.com:acme/widgets.git.
    """

    user: str
    host: str
    owner: str
    name: str


def _run_git(
    args: list[str],
    cwd: Optional[str] = None,
) -> subprocess.CompletedProcess[str]:
    """
    Run a git command and return the completed process.

    stdout and stderr are captured; on failure stderr becomes part of
    the raised VcsCommandFailed.
    """

    cmd = ["git", *args]
    LOG.debug("Running git command: %s", " ".join(cmd))
    try:
        completed = subprocess.run(
            cmd,
            cwd=cwd,
            check=False,
            text=True,
            capture_output=True,
        )
    except OSError as exc:  # noqa: BLE001
        raise VcsCommandFailed(cmd, returncode=-1, stderr=f"failed to execute git: {exc}") from exc

    if completed.returncode != 0:
        LOG.debug("git stderr: %s", completed.stderr)
        raise VcsCommandFailed(cmd, completed.returncode, completed.stderr or "")

    return completed


def _execute_git(args: list[str], cwd: Optional[str] = None) -> None:
    echo_command(["git", *args])
    completed = _run_git(args, cwd=cwd)
    # git reports most progress ("Switched to branch ...") on stderr.
    if completed.stdout:
        sys.stdout.write(completed.stdout)
    if completed.stderr:
        sys.stderr.write(completed.stderr)


def _passthrough_git(args: list[str], cwd: Optional[str] = None) -> None:
    cmd = ["git", *args]
    echo_command(cmd)
    LOG.debug("Running git command (passthrough): %s", " ".join(cmd))
    try:
        completed = subprocess.run(cmd, cwd=cwd, check=False)
    except OSError as exc:  # noqa: BLE001
        raise VcsCommandFailed(cmd, returncode=-1, stderr=f"failed to execute git: {exc}") from exc

    if completed.returncode != 0:
        raise VcsCommandFailed(cmd, completed.returncode)


# Reading repository state
# ---------------------------------------------------------------------


def current_branch(cwd: Optional[str] = None) -> str:
    """
    Return the checked-out branch name, or "" for a detached HEAD.
    """

    return _run_git(["branch", "--show-current"], cwd=cwd).stdout.strip()


def default_branch(cwd: Optional[str] = None) -> str:
    """
    Return the branch origin's symbolic HEAD points to.

    Technically git has no "default" branch; this is the one a fresh
    clone checks out, which is what people mean by main.
    """

    try:
        ref = _run_git(["symbolic-ref", f"{_REMOTE_HEAD_PREFIX}HEAD"], cwd=cwd).stdout.strip()
    except VcsCommandFailed as exc:
        raise NoDefaultBranch() from exc

    branch = ref[len(_REMOTE_HEAD_PREFIX):] if ref.startswith(_REMOTE_HEAD_PREFIX) else ref
    if is_blank(branch):
        raise NoDefaultBranch()
    return branch


def list_branches(cwd: Optional[str] = None) -> List[str]:
    """
    Return local branch names in ref order.
    """

    output = _run_git(
        ["for-each-ref", "--format=%(refname:short)", "refs/heads/"], cwd=cwd
    ).stdout
    return [line.strip() for line in output.splitlines() if line.strip()]


def branches_matching(pattern: str, cwd: Optional[str] = None) -> List[str]:
    """
    Return local branches whose name contains pattern, in ref order.

    The order is what numbered menus are built from, so it must not be
    re-sorted here.
    """

    return [branch for branch in list_branches(cwd=cwd) if pattern in branch]


def current_sha(short: bool = True, cwd: Optional[str] = None) -> str:
    args = ["rev-parse", "--short=7", "HEAD"] if short else ["rev-parse", "HEAD"]
    return _run_git(args, cwd=cwd).stdout.strip()


def config_get(key: str, location: str = "global", cwd: Optional[str] = None) -> str:
    return _run_git(["config", f"--{location}", key], cwd=cwd).stdout.strip()


def is_valid_repo(cwd: Optional[str] = None) -> bool:
    try:
        _run_git(["rev-parse", "--git-dir"], cwd=cwd)
    except VcsCommandFailed:
        return False
    return True


def remote_url(cwd: Optional[str] = None) -> str:
    return _run_git(["ls-remote", "--get-url"], cwd=cwd).stdout.strip()


def parse_remote_url(url: str) -> RemoteUrl:
    """
    Split `user@host:owner/name.git` into its parts.

    Only the scp-like form is understood. HTTPS and ssh:// remotes raise
    UnparsableRemoteUrl instead of yielding half-parsed garbage.
    """

    match = _SCP_URL_RE.match(url.strip())
    if match is None:
        raise UnparsableRemoteUrl(url)
    return RemoteUrl(**match.groupdict())


def repo_host(cwd: Optional[str] = None) -> str:
    return parse_remote_url(remote_url(cwd=cwd)).host


def repo_owner(cwd: Optional[str] = None) -> str:
    return parse_remote_url(remote_url(cwd=cwd)).owner


def repo_name(cwd: Optional[str] = None) -> str:
    return parse_remote_url(remote_url(cwd=cwd)).name


def pull_request_url(remote: RemoteUrl, target: str, source: str) -> str:
    """
    Return the web URL that opens a pre-filled pull request from source into target.
    """

    query = urlencode({"expand": 1, "title": source})
    return f"https://{remote.host}/{remote.owner}/{remote.name}/compare/{target}...{source}?{query}"


# Changing repository state
# ---------------------------------------------------------------------


def checkout(ref: str, cwd: Optional[str] = None) -> None:
    _execute_git(["checkout", ref], cwd=cwd)


def create_branch(name: str, cwd: Optional[str] = None) -> None:
    """
    Create a new branch from HEAD and switch to it.
    """

    _execute_git(["checkout", "-b", name], cwd=cwd)


def delete_branch(name: str, force: bool = False, cwd: Optional[str] = None) -> None:
    # -D deletes even if the branch is not merged.
    _execute_git(["branch", "-D" if force else "-d", name], cwd=cwd)


def restore_file(from_branch: str, path: str, cwd: Optional[str] = None) -> None:
    _execute_git(["restore", "--source", from_branch, path], cwd=cwd)


def stage_all(cwd: Optional[str] = None) -> None:
    _execute_git(["add", "."], cwd=cwd)


def commit(message: str, cwd: Optional[str] = None) -> None:
    _execute_git(["commit", "-m", message], cwd=cwd)


def reset_soft(count: int, cwd: Optional[str] = None) -> None:
    _execute_git(["reset", "--soft", f"HEAD~{count}"], cwd=cwd)


def push(branch: str, force_with_lease: bool = False, cwd: Optional[str] = None) -> None:
    """
    Push branch to origin.

    A normal push also sets the upstream so the first push of a new
    branch works. force_with_lease only overwrites the remote ref if it
    has not moved since the last fetch.
    """

    if force_with_lease:
        args = ["push", "--force-with-lease", DEFAULT_REMOTE, branch]
    else:
        args = ["push", "--set-upstream", DEFAULT_REMOTE, branch]
    _passthrough_git(args, cwd=cwd)


def pull(cwd: Optional[str] = None) -> None:
    _passthrough_git(["pull"], cwd=cwd)


def diff(cwd: Optional[str] = None) -> None:
    _passthrough_git(["diff"], cwd=cwd)


def status(cwd: Optional[str] = None) -> None:
    _passthrough_git(["status"], cwd=cwd)


def log(limit: Optional[int] = None, oneline: bool = False, cwd: Optional[str] = None) -> None:
    args = ["log"]
    if oneline:
        args.append("--oneline")
    if limit is not None:
        args.extend(["-n", str(limit)])
    _passthrough_git(args, cwd=cwd)


def branches(cwd: Optional[str] = None) -> None:
    """Show local branches the way `git branch` does, current one starred."""

    _passthrough_git(["branch"], cwd=cwd)
