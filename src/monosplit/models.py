"""Data models for monosplit."""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from monosplit.git import GitOperations


class SplitDirection(str, Enum):
    """Which way history is moved."""

    SPLIT_IN = "split-in"  # external project -> subdirectory of this repo
    SPLIT_OUT = "split-out"  # subdirectory of this repo -> standalone branch


class OutputMode(str, Enum):
    """Whether commands are executed or only described."""

    REAL = "real"
    SIMULATED = "simulated"

    @property
    def prefix(self) -> str:
        """Prefix for narration lines, a shell comment when simulating."""
        if self is OutputMode.SIMULATED:
            return "   # "
        return ""


@dataclass
class RepoFile:
    """One parsed split mapping."""

    repo_name: str | None = None
    remote_repo: str | None = None
    remote_branch: str | None = None
    include: list[str] | None = None
    include_as: list[str] | None = None  # (local, remote) pairs, flattened
    exclude: list[str] | None = None


@dataclass
class ExecResult:
    """Result of running an external command."""

    status: int
    stdout: str
    stderr: str


@dataclass
class RunnerState:
    """Mutable pipeline context, one per invocation."""

    direction: SplitDirection
    repo_file_path: str

    # Options
    dry_run: bool = False
    verbose: bool = False
    should_rebase: bool = False
    should_topbase: bool = False

    # Identity
    current_dir: Path = field(default_factory=Path)
    repo_root_dir: Path = field(default_factory=Path)
    git: "GitOperations | None" = None

    # Captured as the pipeline advances
    repo_file: RepoFile = field(default_factory=RepoFile)
    repo_original_ref: str | None = None
    topbase_top_ref: str | None = None
    input_branch: str | None = None
    output_branch: str | None = None
    include_arg_str: list[str] | None = None
    include_as_arg_str: list[str] | None = None
    exclude_arg_str: list[str] | None = None

    status: int = 0

    @property
    def mode(self) -> OutputMode:
        return OutputMode.SIMULATED if self.dry_run else OutputMode.REAL
