import subprocess
from pathlib import Path

import pytest


def run_git(args, cwd: Path) -> subprocess.CompletedProcess[str]:
    return subprocess.run(
        ["git", *args],
        cwd=str(cwd),
        text=True,
        capture_output=True,
        check=True,
    )


def init_repo(path: Path, branch: str = "main") -> Path:
    """Create an empty repository on `branch` with a commit identity."""
    path.mkdir(parents=True, exist_ok=True)
    run_git(["init", "-q"], cwd=path)
    run_git(["symbolic-ref", "HEAD", f"refs/heads/{branch}"], cwd=path)
    run_git(["config", "user.name", "monosplit"], cwd=path)
    run_git(["config", "user.email", "monosplit@example.com"], cwd=path)
    run_git(["config", "commit.gpgsign", "false"], cwd=path)
    return path


def commit_files(repo: Path, files: dict[str, str], message: str) -> str:
    """Write files, commit them, and return the new commit sha."""
    for name, content in files.items():
        target = repo / name
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content)
        run_git(["add", name], cwd=repo)
    run_git(["commit", "-q", "-m", message], cwd=repo)
    return run_git(["rev-parse", "HEAD"], cwd=repo).stdout.strip()


def repo_snapshot(repo: Path) -> dict[str, str]:
    """Everything a split could change: refs, HEAD, index and working tree."""
    return {
        "refs": run_git(["for-each-ref"], cwd=repo).stdout,
        "head": run_git(["symbolic-ref", "-q", "HEAD"], cwd=repo).stdout,
        "status": run_git(["status", "--porcelain", "--ignored"], cwd=repo).stdout,
        "files": run_git(["ls-files", "-s"], cwd=repo).stdout,
    }


@pytest.fixture
def monorepo(tmp_path):
    """A monorepo with a lib/ subproject and some unrelated files."""
    repo = init_repo(tmp_path / "mono")
    commit_files(repo, {"lib/a.txt": "a1\n", "app/main.txt": "main\n"}, "initial")
    commit_files(repo, {"lib/a.txt": "a2\n", "lib/tmp/junk.txt": "junk\n"}, "update lib")
    commit_files(repo, {"app/main.txt": "main2\n"}, "update app")
    return repo
