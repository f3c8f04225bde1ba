"""Tests for file scanning, binary sniffing and pattern config files."""

from pathlib import Path

import pytest

from consolidator.core import (
    ConfigFileError,
    InvalidRootError,
    collect_files,
    drop_binary_files,
    filter_binary_projects,
    filter_files,
    is_binary_file,
    iter_files,
    load_extra_patterns,
    scan_files,
    validate_root,
)
from consolidator.ignore import IgnoreRuleSet


def _touch(path: Path, data="content") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    if isinstance(data, bytes):
        path.write_bytes(data)
    else:
        path.write_text(data)
    return path


def test_text_file_is_not_binary(tmp_path):
    assert not is_binary_file(_touch(tmp_path / "a.txt", "hello\nworld\n"))


def test_null_byte_marks_binary(tmp_path):
    assert is_binary_file(_touch(tmp_path / "a.bin", b"PK\x03\x04\x00\x00"))


def test_null_byte_past_prefix_is_not_seen(tmp_path):
    f = _touch(tmp_path / "late.dat", b"a" * 2048 + b"\x00")
    assert not is_binary_file(f)
    assert is_binary_file(f, bytes_to_read=4096)


def test_empty_file_is_text(tmp_path):
    assert not is_binary_file(_touch(tmp_path / "empty.txt", ""))


def test_unreadable_file_counts_as_binary(tmp_path):
    assert is_binary_file(tmp_path / "missing.txt")


def test_drop_binary_files(tmp_path):
    text = _touch(tmp_path / "a.py", "print(1)")
    blob = _touch(tmp_path / "b.png", b"\x89PNG\r\n\x1a\n\x00\x00")
    assert drop_binary_files([text, blob]) == [text]


def test_filter_binary_projects(tmp_path):
    text = _touch(tmp_path / "a.py", "print(1)")
    blob = _touch(tmp_path / "b.dll", b"MZ\x00\x00")
    projects = {"app": [text, blob], "empty": []}
    assert filter_binary_projects(projects) == {"app": [text], "empty": []}
    assert projects["app"] == [text, blob]


def test_validate_root_rejects_missing_dir(tmp_path):
    with pytest.raises(InvalidRootError):
        validate_root(tmp_path / "nope")


def test_validate_root_rejects_file(tmp_path):
    with pytest.raises(InvalidRootError):
        validate_root(_touch(tmp_path / "file.txt"))


def test_scan_files_is_sorted_and_recursive(tmp_path):
    _touch(tmp_path / "b.txt")
    _touch(tmp_path / "a" / "z.txt")
    _touch(tmp_path / "a" / "y" / "x.txt")
    rels = [p.relative_to(tmp_path.resolve()).as_posix() for p in scan_files(tmp_path)]
    assert rels == sorted(rels)
    assert set(rels) == {"b.txt", "a/z.txt", "a/y/x.txt"}


def test_iter_files_skips_directories(tmp_path):
    (tmp_path / "empty").mkdir()
    f = _touch(tmp_path / "f.txt")
    assert list(iter_files(tmp_path)) == [f]


def test_filter_files_uses_rules(tmp_path):
    _touch(tmp_path / ".gitignore", "*.log")
    keep = _touch(tmp_path / "main.py")
    drop = _touch(tmp_path / "debug.log")
    rules = IgnoreRuleSet.from_root(tmp_path)
    assert filter_files([keep, drop], rules) == [keep]


def test_collect_files_applies_ignore_and_binary_filters(tmp_path):
    _touch(tmp_path / ".gitignore", "*.log")
    _touch(tmp_path / "main.py", "print(1)")
    _touch(tmp_path / "debug.log")
    _touch(tmp_path / "image.png", b"\x89PNG\x00")
    _touch(tmp_path / ".git" / "HEAD", "ref: refs/heads/main")
    rules = IgnoreRuleSet.from_root(tmp_path)

    names = {p.name for p in collect_files(tmp_path, rules)}
    assert names == {".gitignore", "main.py"}

    with_binary = {p.name for p in collect_files(tmp_path, rules, include_binary=True)}
    assert with_binary == {".gitignore", "main.py", "image.png"}


def test_load_extra_patterns(tmp_path):
    cfg = _touch(tmp_path / "patterns.txt", "# comment\n\n**/*.tmp\n  docs/**  \n")
    assert load_extra_patterns(cfg) == ["**/*.tmp", "docs/**"]


def test_load_extra_patterns_missing(tmp_path):
    with pytest.raises(ConfigFileError):
        load_extra_patterns(tmp_path / "missing.txt")


def test_load_extra_patterns_directory(tmp_path):
    with pytest.raises(ConfigFileError):
        load_extra_patterns(tmp_path)


def test_load_extra_patterns_bad_encoding(tmp_path):
    cfg = _touch(tmp_path / "patterns.txt", b"\xff\xfe\x00bad")
    with pytest.raises(ConfigFileError):
        load_extra_patterns(cfg)
