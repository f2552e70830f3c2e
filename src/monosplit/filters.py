"""Build argument vectors for git filter-repo."""

from typing import Sequence


FILTER_ENGINE = ["git", "filter-repo"]


def generate_filter_arg_vec(args: Sequence[str], output_branch: str) -> list[str]:
    """
    Build the full filter-repo invocation.

    `args` are passed through verbatim and in order; the rewrite is then
    restricted to `output_branch` and forced even if a previous run left
    its metadata behind. The branch is passed as a full ref so a branch
    named like a directory in the tree is not ambiguous to git.
    """
    return [*FILTER_ENGINE, *args, "--refs", f"refs/heads/{output_branch}", "--force"]


def include_args(include: Sequence[str]) -> list[str]:
    """Keep only the given paths."""
    arg_vec = []
    for path in include:
        arg_vec.extend(["--path", path])
    return arg_vec


def include_as_args(include_as: Sequence[str], reverse: bool = False) -> list[str]:
    """
    Keep and rename paths given as flattened (local, remote) pairs.

    With `reverse`, the pairs are read as (remote, local) so history
    pulled from the remote is moved back under the local paths.
    """
    arg_vec = []
    for i in range(0, len(include_as) - 1, 2):
        src, dest = include_as[i], include_as[i + 1]
        if reverse:
            src, dest = dest, src
        # an empty source means the whole tree, which needs no path filter
        if src:
            arg_vec.extend(["--path", src])
        arg_vec.extend(["--path-rename", f"{src}:{dest}"])
    return arg_vec


def exclude_args(exclude: Sequence[str]) -> list[str]:
    """Drop the given paths."""
    return [*include_args(exclude), "--invert-paths"]
