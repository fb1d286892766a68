from devu import cli
from devu.errors import ValidationError, VcsCommandFailed


def _isolate_config(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("HOME", str(tmp_path / "home"))


def test_cli_dispatches_aliases_with_resolved_config(monkeypatch, tmp_path, capsys):
    _isolate_config(monkeypatch, tmp_path)
    (tmp_path / ".devu").write_text("BRANCH_ISSUE_ID_SEPARATOR=-\n")
    patterns = []
    checked_out = []

    def fake_branches_matching(pattern):
        patterns.append(pattern)
        return ["1234-login"]

    monkeypatch.setattr("devu.git_adapter.branches_matching", fake_branches_matching)
    monkeypatch.setattr("devu.git_adapter.checkout", checked_out.append)

    assert cli.main(["ci", "1234"]) == 0
    assert cli.main(["checkout.issue"]) == 0

    assert patterns == ["1234-"]
    assert checked_out == ["1234-login"]
    assert "checkout.issue <issue_id>" in capsys.readouterr().out


def test_cli_without_command_shows_overview(monkeypatch, tmp_path, capsys):
    _isolate_config(monkeypatch, tmp_path)

    assert cli.main([]) == 0

    out = capsys.readouterr().out
    assert "checkout.issue <issue_id>" in out
    assert "pull-request" in out


def test_cli_missing_argument_prints_help_and_succeeds(monkeypatch, tmp_path, capsys):
    _isolate_config(monkeypatch, tmp_path)

    assert cli.main(["issue"]) == 0
    assert "issue <issue_id> <branch>" in capsys.readouterr().out


def test_cli_reports_validation_errors(monkeypatch, tmp_path, capsys):
    _isolate_config(monkeypatch, tmp_path)

    assert cli.main(["dlb", "main"]) == 1
    assert "Cannot delete protected branch 'main'" in capsys.readouterr().err


def test_cli_reports_git_failures(monkeypatch, tmp_path, capsys):
    _isolate_config(monkeypatch, tmp_path)

    def failing_checkout(ref):
        raise VcsCommandFailed(["git", "checkout", ref], 1, "error: pathspec 'nope' did not match")

    monkeypatch.setattr("devu.git_adapter.checkout", failing_checkout)

    assert cli.main(["co", "nope"]) == 1
    err = capsys.readouterr().err
    assert "devu: error: git command failed: git checkout nope" in err
    assert "did not match" in err


def test_cli_reports_bad_config_file(monkeypatch, tmp_path, capsys):
    _isolate_config(monkeypatch, tmp_path)
    (tmp_path / ".devu").write_text("this is not config\n")

    assert cli.main(["devu.config"]) == 1
    assert ".devu:1" in capsys.readouterr().err


def test_cli_keyboard_interrupt(monkeypatch, tmp_path):
    _isolate_config(monkeypatch, tmp_path)

    def interrupted(config, args):
        raise KeyboardInterrupt

    monkeypatch.setattr("devu.cli.devu_help", interrupted)

    assert cli.main([]) == 130


def test_cli_validation_error_is_not_raised(monkeypatch, tmp_path):
    _isolate_config(monkeypatch, tmp_path)

    def refuse(config, args):
        raise ValidationError("nope")

    monkeypatch.setattr("devu.cli.devu_help", refuse)

    assert cli.main([]) == 1


def test_cli_passes_dash_arguments_through_to_command(monkeypatch, tmp_path):
    _isolate_config(monkeypatch, tmp_path)
    messages = []
    monkeypatch.setattr("devu.git_adapter.current_branch", lambda: "42/fix")
    monkeypatch.setattr("devu.git_adapter.stage_all", lambda: None)
    monkeypatch.setattr("devu.git_adapter.commit", messages.append)
    monkeypatch.setattr("devu.git_adapter.push", lambda branch: None)

    assert cli.main(["-v", "commit", "-WIP", "stuff", "--now"]) == 0

    assert messages == ["-WIP stuff --now"]


def test_split_command_args():
    assert cli.split_command_args(["-v", "co", "-b"]) == (["-v", "co"], ["-b"])
    assert cli.split_command_args(["-v"]) == (["-v"], [])
