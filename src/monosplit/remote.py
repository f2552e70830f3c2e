"""Infer a project name from a remote repository location."""

import os


REMOTE_PREFIXES = (
    "ssh://",
    "git://",
    "http://",
    "https://",
    "ftp://",
    "sftp://",
    "file://",
    ".",
    "/",
)


class RemoteNameError(Exception):
    """Could not infer a name from a remote location."""

    pass


def is_valid_remote_repo(remote_repo: str) -> bool:
    """Check if a string looks like a url or path git can fetch from."""
    # TODO: accept scp-like locations such as user@server.com:path/repo.git
    return remote_repo.startswith(REMOTE_PREFIXES)


def try_get_repo_name_with_slash_type(remote_repo: str, slash_type: str) -> str:
    """
    Get the last path component of a remote, without any extension.

    Returns an empty string if the remote is not valid or does not
    contain `slash_type` at all.
    """
    if not is_valid_remote_repo(remote_repo):
        return ""

    out_str = remote_repo.rstrip()
    if out_str.endswith(slash_type):
        out_str = out_str[:-1]
    if slash_type not in out_str:
        return ""

    out_str = out_str.rsplit(slash_type, 1)[-1]
    return out_str.split(".", 1)[0]


def infer_project_name(remote_repo: str, separator: str = os.sep) -> str:
    """
    Infer a short project name from a remote location.

    The platform separator is tried first, then the other common one,
    so `.\\Desktop\\reponame` still works on unix.
    """
    other_separator = "\\" if separator == "/" else "/"

    repo_name = try_get_repo_name_with_slash_type(remote_repo, separator)
    if not repo_name:
        repo_name = try_get_repo_name_with_slash_type(remote_repo, other_separator)

    if not repo_name:
        raise RemoteNameError(f"Failed to parse repo name from remote repo: {remote_repo}")

    return repo_name
