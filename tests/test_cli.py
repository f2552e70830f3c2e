from click.testing import CliRunner

from monosplit import cli as cli_module
from monosplit.cli import cli
from monosplit.models import SplitDirection
from monosplit.runner import RunnerError


class FakeRunner:
    """Stands in for Runner and remembers the state it was given."""

    states = []
    status = 0
    error = None

    def __init__(self, state):
        self.state = state
        FakeRunner.states.append(state)

    def run(self):
        if FakeRunner.error is not None:
            raise FakeRunner.error
        return FakeRunner.status


def _invoke(monkeypatch, args, status=0, error=None):
    FakeRunner.states = []
    FakeRunner.status = status
    FakeRunner.error = error
    monkeypatch.setattr(cli_module, "Runner", FakeRunner)
    return CliRunner().invoke(cli, args)


def test_help_lists_commands():
    result = CliRunner().invoke(cli, ["--help"])

    assert result.exit_code == 0
    assert "split-in" in result.output
    assert "split-out" in result.output


def test_split_out_flags(monkeypatch):
    result = _invoke(
        monkeypatch,
        ["split-out", "lib.toml", "--dry-run", "-v", "--rebase", "-o", "mylib"],
    )

    assert result.exit_code == 0
    state = FakeRunner.states[0]
    assert state.direction == SplitDirection.SPLIT_OUT
    assert state.repo_file_path == "lib.toml"
    assert state.dry_run
    assert state.verbose
    assert state.should_rebase
    assert not state.should_topbase
    assert state.output_branch == "mylib"
    assert state.input_branch is None


def test_split_in_flags(monkeypatch):
    result = _invoke(monkeypatch, ["split-in", "lib.toml", "-t", "--input-branch", "vendor"])

    assert result.exit_code == 0
    state = FakeRunner.states[0]
    assert state.direction == SplitDirection.SPLIT_IN
    assert state.should_topbase
    assert not state.dry_run
    assert state.input_branch == "vendor"
    assert state.output_branch is None


def test_repo_file_is_required(monkeypatch):
    result = _invoke(monkeypatch, ["split-out"])

    assert result.exit_code == 2
    assert FakeRunner.states == []


def test_pipeline_status_is_exit_status(monkeypatch):
    result = _invoke(monkeypatch, ["split-in", "lib.toml", "--rebase"], status=1)

    assert result.exit_code == 1


def test_runner_error_is_reported(monkeypatch):
    result = _invoke(
        monkeypatch,
        ["split-out", "lib.toml"],
        error=RunnerError("Failed to run. Missing dependency 'git-filter-repo'"),
    )

    assert result.exit_code == 1
    assert "Error:" in result.output
    assert "git-filter-repo" in result.output


def test_version_reports_dependencies(monkeypatch):
    monkeypatch.setattr(
        cli_module.process,
        "executed_successfully",
        lambda args: "filter-repo" not in args,
    )

    result = CliRunner().invoke(cli, ["version"])

    assert result.exit_code == 0
    assert "monosplit version 0.1.0" in result.output
    assert "git-filter-repo: not found" in result.output
