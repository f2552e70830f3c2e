"""The split pipeline: an ordered, fail-fast sequence of stages.

Each stage takes the RunnerState and returns it, filled in a little more.
Stages run strictly in order because later ones rely on what earlier ones
captured (the repository handle, the original ref, the output branch).
In dry-run mode, stages that would change the repository print the
equivalent shell commands instead.
"""

import os
import shlex
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Callable

from monosplit import display
from monosplit import process
from monosplit.filters import (
    exclude_args,
    generate_filter_arg_vec,
    include_args,
    include_as_args,
)
from monosplit.git import GitError, GitOperations
from monosplit.models import RunnerState, SplitDirection
from monosplit.process import ProcessError
from monosplit.remote import RemoteNameError, infer_project_name
from monosplit.repo_file import RepoFileError, parse_repo_file


DIRTY_TREE_MESSAGE = (
    "You have modified changes. "
    "Please stash or commit your changes before running this command"
)


class RunnerError(Exception):
    """Pipeline stage failed."""

    pass


StageFunc = Callable[[RunnerState], RunnerState]


@dataclass
class Stage:
    """A named step of the pipeline."""

    name: str
    func: StageFunc


def verify_dependencies(state: RunnerState) -> RunnerState:
    """Fail unless git and git-filter-repo can be run."""
    if not process.executed_successfully(["git", "--version"]):
        raise RunnerError("Failed to run. Missing dependency 'git'")
    if not process.executed_successfully(["git", "filter-repo", "--version"]):
        raise RunnerError("Failed to run. Missing dependency 'git-filter-repo'")
    return state


def save_current_dir(state: RunnerState) -> RunnerState:
    try:
        state.current_dir = Path.cwd()
    except OSError:
        raise RunnerError("Failed to find your current directory. Cannot proceed")

    if state.verbose:
        display.print_verbose(
            state.mode,
            f"saving current dir to return to later: {state.current_dir}",
        )
    return state


def discover_repository(state: RunnerState) -> RunnerState:
    state.git = GitOperations(state.current_dir)
    state.repo_root_dir = state.git.root_dir
    if state.verbose:
        display.print_verbose(state.mode, f"found repo path: {state.repo_root_dir}")
    return state


def change_to_repo_root(state: RunnerState) -> RunnerState:
    if state.dry_run:
        display.print_command(f"cd {shlex.quote(str(state.repo_root_dir))}")
        return state

    try:
        os.chdir(state.repo_root_dir)
    except OSError as e:
        raise RunnerError(f"Failed to change to repository root {state.repo_root_dir}: {e}")

    if state.verbose:
        display.print_verbose(state.mode, f"changed to repository root {state.repo_root_dir}")
    return state


def safe_to_proceed(state: RunnerState) -> RunnerState:
    """Exit the process if tracked files have uncommitted modifications."""
    # TODO: also refuse to run with staged files or an unresolved merge
    result = process.execute(["git", "ls-files", "--modified"], cwd=state.repo_root_dir)
    if result.status != 0:
        raise RunnerError(f"Failed to run ls-files: {result.stderr.strip()}")

    if result.stdout.strip():
        display.print_message(DIRTY_TREE_MESSAGE)
        sys.exit(1)
    return state


def save_current_ref(state: RunnerState) -> RunnerState:
    state.repo_original_ref = state.git.get_current_ref()
    state.topbase_top_ref = state.repo_original_ref
    if state.verbose:
        display.print_verbose(state.mode, f"saving current ref: {state.repo_original_ref}")
    return state


def get_repo_file(state: RunnerState) -> RunnerState:
    # relative paths are relative to where the user ran the command
    path = state.current_dir / state.repo_file_path
    state.repo_file = parse_repo_file(path)
    if state.verbose:
        display.print_verbose(state.mode, f"got repo file: {path}")
    return state


def _repo_name(state: RunnerState) -> str | None:
    if state.repo_file.repo_name:
        return state.repo_file.repo_name
    if state.repo_file.remote_repo:
        return infer_project_name(state.repo_file.remote_repo)
    return None


def _check_output_branch_is_new(state: RunnerState) -> None:
    if state.git.branch_exists(state.output_branch):
        raise RunnerError(
            f"Output branch '{state.output_branch}' already exists. "
            "Delete it or choose another with --output-branch"
        )


def resolve_split_out_branch(state: RunnerState) -> RunnerState:
    """Pick the output branch and translate repo-file rules for split-out."""
    if state.output_branch is None:
        state.output_branch = _repo_name(state)
    if not state.output_branch:
        raise RunnerError(
            "Must provide either repo_name or remote_repo in your repo file, "
            "or pass --output-branch"
        )
    _check_output_branch_is_new(state)

    repo_file = state.repo_file
    if repo_file.include is not None:
        state.include_arg_str = include_args(repo_file.include)
    if repo_file.include_as is not None:
        state.include_as_arg_str = include_as_args(repo_file.include_as)
    if repo_file.exclude is not None:
        state.exclude_arg_str = exclude_args(repo_file.exclude)
    return state


def resolve_split_in_branch(state: RunnerState) -> RunnerState:
    """Pick the output branch and translate repo-file rules for split-in."""
    if state.input_branch is None and not state.repo_file.remote_repo:
        raise RunnerError(
            "Must provide remote_repo in your repo file, or pass --input-branch"
        )

    if state.output_branch is None:
        name = _repo_name(state) or state.input_branch
        state.output_branch = f"{name}-reverse"
    _check_output_branch_is_new(state)

    # history comes from the remote, so renames go from remote to local
    repo_file = state.repo_file
    if repo_file.include is not None:
        state.include_arg_str = include_args(repo_file.include)
    if repo_file.include_as is not None:
        state.include_as_arg_str = include_as_args(repo_file.include_as, reverse=True)
    if repo_file.exclude is not None:
        state.exclude_arg_str = exclude_args(repo_file.exclude)
    return state


def make_and_checkout_output_branch(state: RunnerState) -> RunnerState:
    if state.dry_run:
        display.print_command(shlex.join(["git", "checkout", "-b", state.output_branch]))
        return state

    state.git.create_and_checkout_branch(state.output_branch)
    if state.verbose:
        display.print_verbose(
            state.mode, f"created and checked out output branch {state.output_branch}"
        )
    return state


def make_and_checkout_orphan_branch(state: RunnerState) -> RunnerState:
    """Start the output branch with no history and an empty index."""
    if state.dry_run:
        display.print_command(shlex.join(["git", "checkout", "--orphan", state.output_branch]))
        display.print_command("git rm -rf . > /dev/null")
        return state

    state.git.make_orphan_branch_and_checkout(state.output_branch)
    # a new orphan branch still has the old files staged
    state.git.remove_index_and_files()
    if state.verbose:
        display.print_verbose(
            state.mode, f"created and checked out orphan branch {state.output_branch}"
        )
    return state


def populate_empty_branch_with_remote_commits(state: RunnerState) -> RunnerState:
    """Merge the input branch, or pull the remote repo, into the output branch."""
    remote_repo = state.repo_file.remote_repo
    remote_branch = state.repo_file.remote_branch

    if state.input_branch is not None:
        if state.dry_run:
            display.print_command(shlex.join(["git", "merge", state.input_branch]))
            return state
        display.print_verbose(state.mode, f"Merging {state.input_branch}")
        state.git.merge_branches(state.input_branch)
        return state

    pull_cmd = shlex.join(["git", "pull", remote_repo] + ([remote_branch] if remote_branch else []))
    if state.dry_run:
        display.print_command(pull_cmd)
        return state

    display.print_verbose(state.mode, f"Pulling from {remote_repo} {remote_branch or ''}".rstrip())
    state.git.pull(remote_repo, remote_branch)
    return state


def run_filter(state: RunnerState, arg_vec: list[str], verbose_log: str) -> RunnerState:
    if state.dry_run:
        display.print_command(shlex.join(arg_vec))
        return state

    if state.verbose:
        display.print_verbose(state.mode, verbose_log)

    try:
        result = process.execute(arg_vec, cwd=state.repo_root_dir)
        err = result.stderr if result.status != 0 else None
    except ProcessError as e:
        err = str(e)

    if err is not None:
        raise RunnerError(f"Failed to execute: {shlex.join(arg_vec)}\n{err}")
    return state


def filter_include(state: RunnerState) -> RunnerState:
    if state.include_arg_str is None:
        return state
    arg_vec = generate_filter_arg_vec(state.include_arg_str, state.output_branch)
    return run_filter(state, arg_vec, "Filtering include")


def filter_include_as(state: RunnerState) -> RunnerState:
    if state.include_as_arg_str is None:
        return state
    arg_vec = generate_filter_arg_vec(state.include_as_arg_str, state.output_branch)
    return run_filter(state, arg_vec, "Filtering include_as")


def filter_exclude(state: RunnerState) -> RunnerState:
    if state.exclude_arg_str is None:
        return state
    arg_vec = generate_filter_arg_vec(state.exclude_arg_str, state.output_branch)
    return run_filter(state, arg_vec, "Filtering exclude")


def _run_rebase(state: RunnerState, args: list[str], label: str) -> RunnerState:
    """Run a rebase; a failure is recorded in the status, not raised."""
    try:
        result = process.execute(args, cwd=state.repo_root_dir)
        err = None
        if result.status != 0:
            lines = (result.stderr or result.stdout).strip().splitlines()
            err = lines[0] if lines else f"exit status {result.status}"
    except ProcessError as e:
        err = str(e)

    if err is not None:
        state.status = 1
        details = f"\n{err}" if state.verbose else ""
        display.print_message(f"Failed to {label}{details}")
    return state


def rebase(state: RunnerState) -> RunnerState:
    """Rebase the output branch onto the ref we started from."""
    if not state.should_rebase:
        return state
    if state.repo_original_ref is None:
        display.print_message("Failed to get repo original ref. Not going to rebase")
        return state

    upstream_branch = state.repo_original_ref.replace("refs/heads/", "")
    if state.verbose:
        display.print_verbose(state.mode, f"rebasing onto {upstream_branch}")

    if state.dry_run:
        # we are already on the output branch, so it is implied
        display.print_command(shlex.join(["git", "rebase", upstream_branch]))
        return state

    return _run_rebase(state, ["git", "rebase", upstream_branch], "rebase")


def topbase(state: RunnerState) -> RunnerState:
    """Replay only the commits unique to the output branch onto the top ref."""
    if not state.should_topbase:
        return state
    if state.status != 0:
        display.print_message("Previous reconciliation failed. Not going to topbase")
        return state
    if state.topbase_top_ref is None:
        display.print_message("Failed to get topbase top ref. Not going to topbase")
        return state

    top = state.topbase_top_ref.replace("refs/heads/", "")
    branch = state.output_branch
    if state.verbose:
        display.print_verbose(state.mode, f"topbasing {branch} onto {top}")

    if state.dry_run:
        display.print_verbose(
            state.mode,
            f"set FORK to the newest commit of {branch} whose files all exist in {top}",
        )
        display.print_command(
            f"git rebase --onto {shlex.quote(top)} \"$FORK\" {shlex.quote(branch)}"
        )
        return state

    fork = state.git.find_topbase_fork(branch, top)
    if fork is None:
        args = ["git", "rebase", top]
    elif fork == state.git.rev_parse(branch):
        display.print_verbose(state.mode, f"{branch} has no commits missing from {top}")
        return state
    else:
        args = ["git", "rebase", "--onto", top, fork]

    if state.verbose:
        display.print_verbose(state.mode, shlex.join(args))
    return _run_rebase(state, args, "topbase")


def _common_head() -> list[Stage]:
    return [
        Stage("verify dependencies", verify_dependencies),
        Stage("save current dir", save_current_dir),
        Stage("discover repository", discover_repository),
        Stage("change to repo root", change_to_repo_root),
        Stage("safe to proceed", safe_to_proceed),
        Stage("save current ref", save_current_ref),
        Stage("get repo file", get_repo_file),
    ]


def _common_tail() -> list[Stage]:
    return [
        Stage("filter include", filter_include),
        Stage("filter include_as", filter_include_as),
        Stage("filter exclude", filter_exclude),
        Stage("rebase", rebase),
        Stage("topbase", topbase),
    ]


def split_out_stages() -> list[Stage]:
    return [
        *_common_head(),
        Stage("resolve output branch", resolve_split_out_branch),
        Stage("make output branch", make_and_checkout_output_branch),
        *_common_tail(),
    ]


def split_in_stages() -> list[Stage]:
    return [
        *_common_head(),
        Stage("resolve output branch", resolve_split_in_branch),
        Stage("make orphan branch", make_and_checkout_orphan_branch),
        Stage("populate branch", populate_empty_branch_with_remote_commits),
        *_common_tail(),
    ]


class Runner:
    """Runs the stages of a split in order, stopping at the first failure."""

    def __init__(self, state: RunnerState, stages: list[Stage] | None = None):
        self.state = state
        if stages is None:
            if state.direction == SplitDirection.SPLIT_IN:
                stages = split_in_stages()
            else:
                stages = split_out_stages()
        self.stages = stages

    def run(self) -> int:
        """
        Run every stage.

        Returns the terminal status: 0 on success, 1 if a rebase or
        topbase failed after filtering. Any other failure raises
        RunnerError.
        """
        if self.state.dry_run:
            display.print_dry_run_notice()

        for stage in self.stages:
            try:
                self.state = stage.func(self.state)
            except (GitError, ProcessError, RepoFileError, RemoteNameError) as e:
                raise RunnerError(f"{stage.name} failed: {e}")

        if not self.state.dry_run and self.state.status == 0:
            display.print_success(f"Done. Result is on branch '{self.state.output_branch}'")

        return self.state.status
