"""Tests for the command-line entrypoint."""

import json
from pathlib import Path

import pytest

from consolidator.cli import main


def _touch(path: Path, data="content") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    if isinstance(data, bytes):
        path.write_bytes(data)
    else:
        path.write_text(data)
    return path


def test_lists_selected_files(tmp_path, capsys):
    _touch(tmp_path / ".gitignore", "*.log")
    _touch(tmp_path / "src" / "app.py", "print(1)")
    _touch(tmp_path / "debug.log")
    _touch(tmp_path / "logo.png", b"\x89PNG\x00")

    main([str(tmp_path)])
    lines = capsys.readouterr().out.splitlines()
    assert "src/app.py" in lines
    assert "debug.log" not in lines
    assert "logo.png" not in lines


def test_exclude_include_and_binary_flags(tmp_path, capsys):
    _touch(tmp_path / "src" / "app.py", "print(1)")
    _touch(tmp_path / "src" / "gen.py", "x = 1")
    _touch(tmp_path / "bin" / "settings.json", "{}")
    _touch(tmp_path / "logo.png", b"\x89PNG\x00")

    main([
        str(tmp_path),
        "--exclude", "**/gen.py",
        "--include", "bin/settings.json",
        "--include-binary",
    ])
    lines = capsys.readouterr().out.splitlines()
    assert "src/app.py" in lines
    assert "src/gen.py" not in lines
    assert "bin/settings.json" in lines
    assert "logo.png" in lines


def test_config_file_patterns(tmp_path, capsys):
    cfg = _touch(tmp_path / "cfg" / "ignore.txt", "# extra\n**/*.md\n")
    _touch(tmp_path / "proj" / "README.md")
    _touch(tmp_path / "proj" / "main.py")

    main([str(tmp_path / "proj"), "--config", str(cfg)])
    lines = capsys.readouterr().out.splitlines()
    assert lines == ["main.py"]


def test_split_by_lists_projects(tmp_path, capsys):
    _touch(tmp_path / "frontend" / "package.json", json.dumps({"name": "my-app"}))
    _touch(tmp_path / "frontend" / "index.js")
    _touch(tmp_path / "backend" / "package.json", json.dumps({"name": "api"}))

    main([str(tmp_path), "--split-by", "package.json"])
    out = capsys.readouterr().out
    assert out.index("api") < out.index("my-app")
    assert "frontend/index.js" in out


def test_unknown_strategy_exits(tmp_path, capsys):
    with pytest.raises(SystemExit) as exc:
        main([str(tmp_path), "--split-by", "cargo"])
    assert exc.value.code == 1
    assert "Unknown split strategy" in capsys.readouterr().err


def test_missing_root_exits(tmp_path, capsys):
    with pytest.raises(SystemExit) as exc:
        main([str(tmp_path / "missing")])
    assert exc.value.code == 1
    assert "does not exist" in capsys.readouterr().err


def test_missing_config_exits(tmp_path, capsys):
    with pytest.raises(SystemExit) as exc:
        main([str(tmp_path), "--config", str(tmp_path / "nope.txt")])
    assert exc.value.code == 1
    assert "does not exist" in capsys.readouterr().err


def test_invalid_exclude_pattern_exits(tmp_path, capsys):
    _touch(tmp_path / "main.py")
    with pytest.raises(SystemExit) as exc:
        main([str(tmp_path), "-e", "foo\\"])
    assert exc.value.code == 1
    assert "Invalid glob pattern" in capsys.readouterr().err


def test_unexpected_errors_exit_cleanly(tmp_path, capsys, monkeypatch):
    import consolidator.cli as cli

    def _boom(*args, **kwargs):
        raise RuntimeError("boom")

    monkeypatch.setattr(cli, "collect_files", _boom)
    with pytest.raises(SystemExit) as exc:
        main([str(tmp_path)])
    assert exc.value.code == 1
    assert "Unexpected error: boom" in capsys.readouterr().err
