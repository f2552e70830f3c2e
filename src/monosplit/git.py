"""Git operations for monosplit."""

from pathlib import Path

from git import Repo
from git.exc import (
    BadName,
    BadObject,
    GitCommandError,
    InvalidGitRepositoryError,
    NoSuchPathError,
)


class GitError(Exception):
    """Git operation failed."""

    pass


class GitOperations:
    """Git operations wrapper."""

    def __init__(self, repo_path: str | Path | None = None):
        self.repo_path = Path(repo_path) if repo_path else Path.cwd()
        try:
            self.repo = Repo(self.repo_path, search_parent_directories=True)
        except (InvalidGitRepositoryError, NoSuchPathError):
            raise GitError(f"Not a git repository: {self.repo_path}")

        if self.repo.working_tree_dir is None:
            raise GitError(f"Repository has no working tree: {self.repo_path}")

    @property
    def root_dir(self) -> Path:
        """Top level directory of the working tree."""
        return Path(self.repo.working_tree_dir)

    def get_current_ref(self) -> str | None:
        """Get the full symbolic ref HEAD points to, e.g. refs/heads/main."""
        try:
            return self.repo.head.ref.path
        except TypeError:
            # detached HEAD
            return None

    def branch_exists(self, name: str) -> bool:
        """Check if a branch exists."""
        return name in [h.name for h in self.repo.heads]

    def create_and_checkout_branch(self, name: str) -> None:
        """Create a branch at HEAD and check it out."""
        try:
            self.repo.git.checkout("-b", name)
        except GitCommandError as e:
            raise GitError(f"Failed to create branch {name}: {e}")

    def make_orphan_branch_and_checkout(self, name: str) -> None:
        """Create a branch with no parent commit and check it out."""
        try:
            self.repo.git.checkout("--orphan", name)
        except GitCommandError as e:
            raise GitError(f"Failed to checkout orphan branch {name}: {e}")

    def remove_index_and_files(self) -> None:
        """Remove every entry from the index and the working tree."""
        try:
            self.repo.git.rm("-r", "-f", "-q", "--ignore-unmatch", ".")
        except GitCommandError as e:
            raise GitError(f"Failed to remove indexed files: {e}")

    def merge_branches(self, branch: str) -> None:
        """Merge a local branch into the current branch."""
        try:
            self.repo.git.merge(branch, "--allow-unrelated-histories", "--no-edit")
        except GitCommandError as e:
            raise GitError(f"Failed to merge {branch}: {e}")

    def pull(self, remote: str, branch: str | None = None) -> None:
        """Fetch from a remote location and merge into the current branch."""
        args = [remote]
        if branch:
            args.append(branch)

        try:
            self.repo.git.pull(*args)
        except GitCommandError as e:
            raise GitError(f"Failed to pull from {remote}: {e}")

    def _tree_entries(self, rev: str) -> set[tuple[str, str]]:
        """Get every (path, blob sha) of a commit's tree."""
        commit = self.repo.commit(rev)
        return {
            (item.path, item.hexsha)
            for item in commit.tree.traverse()
            if item.type == "blob"
        }

    def find_topbase_fork(self, branch: str, top_ref: str) -> str | None:
        """
        Find where a branch stops matching the content of top_ref.

        Returns the newest commit of `branch` whose whole tree is already
        present in the tree of `top_ref`. Commits after it are unique to
        `branch`. Returns None when no commit of `branch` matches.
        """
        try:
            top_entries = self._tree_entries(top_ref)
            for commit in self.repo.iter_commits(branch):
                if self._tree_entries(commit.hexsha) <= top_entries:
                    return commit.hexsha
        except (GitCommandError, BadName, BadObject, ValueError) as e:
            raise GitError(f"Failed to inspect {branch} against {top_ref}: {e}")

        return None

    def rev_parse(self, rev: str) -> str:
        """Resolve a revision to a commit sha."""
        try:
            return self.repo.commit(rev).hexsha
        except (GitCommandError, BadName, BadObject, ValueError) as e:
            raise GitError(f"Failed to resolve {rev}: {e}")
