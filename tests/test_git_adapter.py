import subprocess

from devu import git_adapter
from devu.errors import NoDefaultBranch, UnparsableRemoteUrl, VcsCommandFailed
from devu.git_adapter import RemoteUrl, _run_git, parse_remote_url, pull_request_url


def _completed(stdout="", returncode=0, stderr=""):
    return subprocess.CompletedProcess(
        args=["git"], returncode=returncode, stdout=stdout, stderr=stderr
    )


def _record_runs(monkeypatch, outputs):
    """Fake subprocess.run; outputs maps a git subcommand to its CompletedProcess."""

    calls = []

    def fake_run(cmd, **kwargs):
        calls.append(cmd)
        return outputs.get(cmd[1], _completed())

    monkeypatch.setattr("devu.git_adapter.subprocess.run", fake_run)
    return calls


def test_run_git_includes_stderr_details_on_failure(monkeypatch):
    def fake_run(*args, **kwargs):
        return subprocess.CompletedProcess(
            args=["git", "status"],
            returncode=128,
            stdout="",
            stderr="fatal: not a git repository",
        )

    monkeypatch.setattr("devu.git_adapter.subprocess.run", fake_run)

    try:
        _run_git(["status"])
    except VcsCommandFailed as exc:
        message = str(exc)
        assert "git status" in message
        assert "fatal: not a git repository" in message
        assert exc.command == ["git", "status"]
        assert exc.returncode == 128
    else:
        raise AssertionError("expected VcsCommandFailed to be raised")


def test_run_git_reports_missing_git_binary(monkeypatch):
    def fake_run(*args, **kwargs):
        raise FileNotFoundError("git")

    monkeypatch.setattr("devu.git_adapter.subprocess.run", fake_run)

    try:
        _run_git(["status"])
    except VcsCommandFailed as exc:
        assert "failed to execute git" in str(exc)
    else:
        raise AssertionError("expected VcsCommandFailed to be raised")


def test_list_branches_keeps_ref_order(monkeypatch):
    calls = _record_runs(
        monkeypatch,
        {"for-each-ref": _completed("100/foo\n100/bar\n200/baz\n")},
    )

    assert git_adapter.list_branches() == ["100/foo", "100/bar", "200/baz"]
    assert calls == [["git", "for-each-ref", "--format=%(refname:short)", "refs/heads/"]]


def test_branches_matching_filters_by_substring(monkeypatch):
    _record_runs(monkeypatch, {"for-each-ref": _completed("100/foo\n100/bar\n200/baz\n1100/qux\n")})

    assert git_adapter.branches_matching("100/") == ["100/foo", "100/bar", "1100/qux"]
    assert git_adapter.branches_matching("300/") == []


def test_current_branch_is_blank_when_detached(monkeypatch):
    _record_runs(monkeypatch, {"branch": _completed("\n")})

    assert git_adapter.current_branch() == ""


def test_default_branch_strips_remote_prefix(monkeypatch):
    calls = _record_runs(monkeypatch, {"symbolic-ref": _completed("refs/remotes/origin/main\n")})

    assert git_adapter.default_branch() == "main"
    assert calls == [["git", "symbolic-ref", "refs/remotes/origin/HEAD"]]


def test_default_branch_missing_raises_no_default_branch(monkeypatch):
    _record_runs(
        monkeypatch,
        {
            "symbolic-ref": _completed(
                returncode=128, stderr="fatal: ref refs/remotes/origin/HEAD is not a symbolic ref"
            )
        },
    )

    try:
        git_adapter.default_branch()
    except NoDefaultBranch as exc:
        assert "git remote set-head origin --auto" in str(exc)
    else:
        raise AssertionError("expected NoDefaultBranch to be raised")


def test_current_sha_short_and_full(monkeypatch):
    calls = _record_runs(monkeypatch, {"rev-parse": _completed("abc1234\n")})

    assert git_adapter.current_sha() == "abc1234"
    git_adapter.current_sha(short=False)

    assert calls == [
        ["git", "rev-parse", "--short=7", "HEAD"],
        ["git", "rev-parse", "HEAD"],
    ]


def test_is_valid_repo(monkeypatch):
    _record_runs(monkeypatch, {"rev-parse": _completed(".git\n")})
    assert git_adapter.is_valid_repo() is True

    _record_runs(monkeypatch, {"rev-parse": _completed(returncode=128)})
    assert git_adapter.is_valid_repo() is False


def test_mutating_commands_use_expected_git_arguments(monkeypatch, capsys):
    calls = _record_runs(monkeypatch, {})

    git_adapter.checkout("main")
    git_adapter.create_branch("42/fix-bug")
    git_adapter.delete_branch("old", force=True)
    git_adapter.delete_branch("merged")
    git_adapter.restore_file("main", "README.md")
    git_adapter.stage_all()
    git_adapter.commit("DEVU-42 - fix bug")
    git_adapter.reset_soft(2)
    git_adapter.push("42/fix-bug")
    git_adapter.push("42/fix-bug", force_with_lease=True)
    git_adapter.log()
    git_adapter.log(limit=5, oneline=True)

    assert calls == [
        ["git", "checkout", "main"],
        ["git", "checkout", "-b", "42/fix-bug"],
        ["git", "branch", "-D", "old"],
        ["git", "branch", "-d", "merged"],
        ["git", "restore", "--source", "main", "README.md"],
        ["git", "add", "."],
        ["git", "commit", "-m", "DEVU-42 - fix bug"],
        ["git", "reset", "--soft", "HEAD~2"],
        ["git", "push", "--set-upstream", "origin", "42/fix-bug"],
        ["git", "push", "--force-with-lease", "origin", "42/fix-bug"],
        ["git", "log"],
        ["git", "log", "--oneline", "-n", "5"],
    ]
    # Every mutating command is announced before it runs.
    assert "=> git checkout main" in capsys.readouterr().out


def test_passthrough_failure_raises(monkeypatch):
    _record_runs(monkeypatch, {"pull": _completed(returncode=1)})

    try:
        git_adapter.pull()
    except VcsCommandFailed as exc:
        assert exc.command == ["git", "pull"]
    else:
        raise AssertionError("expected VcsCommandFailed to be raised")


def test_parse_remote_url_scp_form():
    assert parse_remote_url("git@github.com:acme/widgets.git") == RemoteUrl(
        user="git", host="github.com", owner="acme", name="widgets"
    )
    assert parse_remote_url("git@gitlab.example.org:team/my.tool.git\n").name == "my.tool"
    assert parse_remote_url("git@github.com:acme/widgets").name == "widgets"


def test_parse_remote_url_rejects_other_forms():
    for url in (
        "https://github.com/acme/widgets.git",
        "ssh://git@github.com/acme/widgets.git",
        "/srv/git/widgets.git",
        "",
    ):
        try:
            parse_remote_url(url)
        except UnparsableRemoteUrl as exc:
            assert exc.url == url
        else:
            raise AssertionError(f"expected UnparsableRemoteUrl for {url!r}")


def test_repo_parts_come_from_origin_url(monkeypatch):
    _record_runs(monkeypatch, {"ls-remote": _completed("git@github.com:acme/widgets.git\n")})

    assert git_adapter.repo_host() == "github.com"
    assert git_adapter.repo_owner() == "acme"
    assert git_adapter.repo_name() == "widgets"


def test_pull_request_url():
    remote = RemoteUrl(user="git", host="github.com", owner="acme", name="widgets")

    url = pull_request_url(remote, target="main", source="42/fix-bug")

    assert url == (
        "https://github.com/acme/widgets/compare/main...42/fix-bug"
        "?expand=1&title=42%2Ffix-bug"
    )
