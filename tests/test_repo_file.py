import pytest

from monosplit.models import RepoFile
from monosplit.repo_file import (
    RepoFileError,
    include_var_valid,
    parse_repo_file,
    repo_file_from_dict,
    validate_rules,
)


@pytest.mark.parametrize("length", [2, 4, 6, 10])
def test_even_lengths_are_valid(length):
    rules = ["x"] * length
    assert include_var_valid(rules, True)
    assert include_var_valid(rules, False)


def test_single_rule_depends_on_can_be_single():
    assert include_var_valid(["x"], True)
    assert not include_var_valid(["x"], False)


@pytest.mark.parametrize("length", [0, 3, 5, 7])
def test_empty_and_odd_lengths_are_invalid(length):
    rules = ["x"] * length
    assert not include_var_valid(rules, True)
    assert not include_var_valid(rules, False)


def test_parse_repo_file(tmp_path):
    path = tmp_path / "lib.toml"
    path.write_text(
        'repo_name = "lib"\n'
        'remote_repo = "https://example.com/lib.git"\n'
        'remote_branch = "main"\n'
        'include = "lib/"\n'
        'include_as = ["lib/", "", "docs/lib.md", "README.md"]\n'
        'exclude = ["lib/tmp/", "lib/build/"]\n'
    )

    repo_file = parse_repo_file(path)

    assert repo_file == RepoFile(
        repo_name="lib",
        remote_repo="https://example.com/lib.git",
        remote_branch="main",
        include=["lib/"],
        include_as=["lib/", "", "docs/lib.md", "README.md"],
        exclude=["lib/tmp/", "lib/build/"],
    )


def test_missing_keys_stay_unset(tmp_path):
    path = tmp_path / "lib.toml"
    path.write_text('remote_repo = "../lib"\n')

    repo_file = parse_repo_file(path)

    assert repo_file.remote_repo == "../lib"
    assert repo_file.include is None
    assert repo_file.include_as is None
    assert repo_file.exclude is None


def test_single_include_as_is_rejected():
    with pytest.raises(RepoFileError, match="include_as is invalid"):
        repo_file_from_dict({"include_as": "lib/"})


def test_odd_exclude_is_rejected():
    with pytest.raises(RepoFileError, match="exclude is invalid"):
        repo_file_from_dict({"exclude": ["a", "b", "c"]})


def test_empty_include_is_rejected():
    with pytest.raises(RepoFileError, match="include is invalid"):
        validate_rules(RepoFile(include=[]))


def test_wrong_types_are_rejected():
    with pytest.raises(RepoFileError, match="remote_repo must be a string"):
        repo_file_from_dict({"remote_repo": 3})
    with pytest.raises(RepoFileError, match="include must be"):
        repo_file_from_dict({"include": ["a", 1]})


def test_missing_file(tmp_path):
    with pytest.raises(RepoFileError, match="Failed to read"):
        parse_repo_file(tmp_path / "nope.toml")


def test_malformed_file(tmp_path):
    path = tmp_path / "bad.toml"
    path.write_text("include = [\n")

    with pytest.raises(RepoFileError, match="Failed to parse"):
        parse_repo_file(path)


def test_non_utf8_file(tmp_path):
    path = tmp_path / "bad.toml"
    path.write_bytes(b'repo_name = "\xff\xfe"\n')

    with pytest.raises(RepoFileError, match="not valid UTF-8"):
        parse_repo_file(path)
