"""monosplit - Monorepo History Splitter.

Move a subdirectory's history out of a monorepo, or bring another
project's history into one, without squashing it.
"""

__version__ = "0.1.0"

from monosplit.models import RepoFile, RunnerState, SplitDirection
from monosplit.runner import Runner, RunnerError

__all__ = [
    "__version__",
    "Runner",
    "RunnerError",
    "RunnerState",
    "RepoFile",
    "SplitDirection",
]
