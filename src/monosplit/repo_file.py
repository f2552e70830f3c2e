"""Repo-file loading and validation for monosplit."""

import tomllib
from pathlib import Path
from typing import Any

from monosplit.models import RepoFile


class RepoFileError(Exception):
    """Repo-file could not be loaded or is invalid."""

    pass


def include_var_valid(var: list[str], can_be_single: bool) -> bool:
    """
    Check the length of an include, include_as or exclude rule list.

    A single item is valid only if `can_be_single`; otherwise the list
    must have an even, non-zero length.
    """
    vlen = len(var)
    if vlen == 1:
        return can_be_single
    return vlen >= 2 and vlen % 2 == 0


def validate_rules(repo_file: RepoFile) -> None:
    """Raise RepoFileError if any rule list has an invalid length."""
    rules = [
        ("include", repo_file.include, True),
        ("include_as", repo_file.include_as, False),
        ("exclude", repo_file.exclude, True),
    ]
    for varname, var, can_be_single in rules:
        if var is None:
            continue
        if not include_var_valid(var, can_be_single):
            if can_be_single:
                raise RepoFileError(
                    f"{varname} is invalid. Must be either a single string, "
                    "or an even length array of strings"
                )
            raise RepoFileError(
                f"{varname} is invalid. Must be an even length array of strings"
            )


def _get_string(data: dict[str, Any], key: str) -> str | None:
    value = data.get(key)
    if value is None or isinstance(value, str):
        return value
    raise RepoFileError(f"{key} must be a string")


def _get_string_list(data: dict[str, Any], key: str) -> list[str] | None:
    value = data.get(key)
    if value is None:
        return None
    if isinstance(value, str):
        return [value]
    if isinstance(value, list) and all(isinstance(v, str) for v in value):
        return list(value)
    raise RepoFileError(f"{key} must be a string or an array of strings")


def repo_file_from_dict(data: dict[str, Any]) -> RepoFile:
    """Build a validated RepoFile from parsed key/value data."""
    repo_file = RepoFile(
        repo_name=_get_string(data, "repo_name"),
        remote_repo=_get_string(data, "remote_repo"),
        remote_branch=_get_string(data, "remote_branch"),
        include=_get_string_list(data, "include"),
        include_as=_get_string_list(data, "include_as"),
        exclude=_get_string_list(data, "exclude"),
    )
    validate_rules(repo_file)
    return repo_file


def parse_repo_file(path: str | Path) -> RepoFile:
    """Load a repo-file from disk."""
    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except OSError as e:
        raise RepoFileError(f"Failed to read repo file {path}: {e}")
    except tomllib.TOMLDecodeError as e:
        raise RepoFileError(f"Failed to parse repo file {path}: {e}")
    except UnicodeDecodeError as e:
        raise RepoFileError(f"Repo file {path} is not valid UTF-8: {e}")

    return repo_file_from_dict(data)
