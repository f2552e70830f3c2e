"""Process execution for monosplit."""

import subprocess
from pathlib import Path
from typing import Sequence

from monosplit.models import ExecResult


class ProcessError(Exception):
    """Command could not be executed."""

    pass


def execute(args: Sequence[str], cwd: str | Path | None = None) -> ExecResult:
    """Run a command to completion and capture its output."""
    try:
        result = subprocess.run(
            list(args),
            cwd=cwd,
            capture_output=True,
            text=True,
        )
    except OSError as e:
        raise ProcessError(f"Failed to execute '{' '.join(args)}': {e}")

    return ExecResult(
        status=result.returncode,
        stdout=result.stdout,
        stderr=result.stderr,
    )


def executed_successfully(args: Sequence[str]) -> bool:
    """Check that a command can be run and exits with status 0."""
    try:
        return execute(args).status == 0
    except ProcessError:
        return False
