# Copyright 2026 emlib Contributors
# SPDX-License-Identifier: Apache-2.0

"""Tests for the emlib CLI entry point."""

import sys
from pathlib import Path

import pytest

from emlib.cli.main import main

# ###############
# Test Helpers
# ###############

_SCENARIO_SOURCE = "function x() {}\nexport function y() { return x(); }\n"

_SCENARIO_DESCRIPTOR = """\
Object.assign(LibraryManager.library, {
    _test_x: function () {},
    y: function () {
        return _test_x();
    },
    y__deps: ['_test_x']
});
"""


def _write_entry(tmp_path: Path, content: str = _SCENARIO_SOURCE, name: str = "main.js") -> Path:
    entry = tmp_path / name
    entry.write_text(content, encoding="utf-8")
    return entry


def _run(monkeypatch: pytest.MonkeyPatch, *args: str) -> int | str | None:
    """Invoke main() with *args* and return the exit code."""
    monkeypatch.setattr(sys, "argv", ["emlib", *args])
    with pytest.raises(SystemExit) as exc_info:
        main()
    return exc_info.value.code


# ###############
# Public Interface
# ###############


def test_main_no_args_prints_help_and_exits(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture) -> None:
    """main() with no subcommand prints help and exits with code 0."""
    assert _run(monkeypatch) == 0
    assert "usage: emlib" in capsys.readouterr().out


def test_unknown_option_is_an_argparse_error(monkeypatch: pytest.MonkeyPatch) -> None:
    assert _run(monkeypatch, "build", "--reference-style", "compact") == 2


# -------- build tests --------


def test_build_prints_descriptor(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture
) -> None:
    """build without an output file writes the descriptor to stdout."""
    entry = _write_entry(tmp_path)
    assert _run(monkeypatch, "build", str(entry), "--local-prefix", "test") == 0
    assert capsys.readouterr().out == _SCENARIO_DESCRIPTOR


def test_build_writes_output_file(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture
) -> None:
    """build -o writes the descriptor, creating parent directories."""
    entry = _write_entry(tmp_path)
    output = tmp_path / "dist" / "library.js"
    assert _run(monkeypatch, "build", str(entry), "--local-prefix", "test", "-o", str(output)) == 0
    assert output.read_text(encoding="utf-8") == _SCENARIO_DESCRIPTOR
    assert "Wrote 2 symbol(s)" in capsys.readouterr().out


def test_build_follows_imports(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture
) -> None:
    _write_entry(tmp_path, "export function helper() { return 1; }", name="lib.js")
    entry = _write_entry(tmp_path, "import { helper } from './lib';\nexport function api() { return helper(); }")
    assert _run(monkeypatch, "build", str(entry), "--local-prefix", "lib") == 0
    out = capsys.readouterr().out
    assert "    _lib_helper: function () {\n        return 1;\n    },\n" in out
    assert "    api__deps: ['_lib_helper']\n" in out


def test_build_emscripten_style(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture
) -> None:
    entry = _write_entry(tmp_path)
    assert _run(monkeypatch, "build", str(entry), "--local-prefix", "test", "--reference-style", "emscripten") == 0
    out = capsys.readouterr().out
    assert "    $test_x: function () {},\n" in out
    assert "        return test_x();\n" in out
    assert "    y__deps: ['$test_x']\n" in out


def test_build_postset_policy(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture
) -> None:
    entry = _write_entry(tmp_path, "export var now = Date.now();")
    assert _run(monkeypatch, "build", str(entry), "--impure-initializers", "postset") == 0
    out = capsys.readouterr().out
    assert "    now: void 0,\n" in out
    assert "    now__postset: 'now = Date.now()'\n" in out


def test_build_rejects_unsupported_statement(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture
) -> None:
    """A top-level statement that cannot become a descriptor entry fails the build."""
    entry = _write_entry(tmp_path, "export function f() {}\nconsole.log(f());")
    assert _run(monkeypatch, "build", str(entry)) == 1
    captured = capsys.readouterr()
    assert captured.out == ""
    assert "Error: Unsupported top-level statement" in captured.err


def test_build_rejects_impure_initializer(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture
) -> None:
    entry = _write_entry(tmp_path, "export var now = Date.now();")
    assert _run(monkeypatch, "build", str(entry)) == 1
    assert "Error:" in capsys.readouterr().err


def test_build_reports_syntax_errors(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture
) -> None:
    entry = _write_entry(tmp_path, "export function (")
    assert _run(monkeypatch, "build", str(entry)) == 1
    assert str(entry) in capsys.readouterr().err


def test_build_reports_missing_entry(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture
) -> None:
    assert _run(monkeypatch, "build", str(tmp_path / "missing.js")) == 1
    assert "Cannot read module" in capsys.readouterr().err


def test_build_without_entry(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture) -> None:
    """Neither ENTRY nor --config is an error."""
    assert _run(monkeypatch, "build") == 1
    assert "no entry module given" in capsys.readouterr().err


def test_build_invalid_local_prefix(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture
) -> None:
    entry = _write_entry(tmp_path)
    assert _run(monkeypatch, "build", str(entry), "--local-prefix", "my-lib") == 1
    assert "Invalid option" in capsys.readouterr().err


# -------- config file tests --------


def test_build_from_config_file(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture
) -> None:
    """Entry, output, and options come from the build file."""
    _write_entry(tmp_path)
    config = tmp_path / "emlib.yaml"
    config.write_text("entry: main.js\noutput: out/library.js\nlocal-prefix: test\n", encoding="utf-8")
    assert _run(monkeypatch, "build", "--config", str(config)) == 0
    assert (tmp_path / "out" / "library.js").read_text(encoding="utf-8") == _SCENARIO_DESCRIPTOR
    assert "Wrote 2 symbol(s)" in capsys.readouterr().out


def test_command_line_overrides_config_file(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture
) -> None:
    other = _write_entry(tmp_path, "export var answer = 42;", name="other.js")
    config = tmp_path / "emlib.yaml"
    config.write_text("entry: main.js\nlocal-prefix: test\n", encoding="utf-8")
    assert _run(monkeypatch, "build", str(other), "--config", str(config), "--local-prefix", "lib") == 0
    assert capsys.readouterr().out == "Object.assign(LibraryManager.library, {\n    answer: 42\n});\n"


def test_invalid_config_file(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture
) -> None:
    config = tmp_path / "emlib.yaml"
    config.write_text("output: out.js\n", encoding="utf-8")
    assert _run(monkeypatch, "build", "--config", str(config)) == 1
    assert "Invalid build config" in capsys.readouterr().err


# -------- check tests --------


def test_check_reports_symbols(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture
) -> None:
    entry = _write_entry(tmp_path)
    assert _run(monkeypatch, "check", str(entry), "--local-prefix", "test") == 0
    out = capsys.readouterr().out
    assert "Checking" in out
    assert "  _test_x (private function)\n" in out
    assert "  y (public function) -> _test_x\n" in out
    assert "2 symbol(s), 1 dependency edge(s).\n" in out
    assert "No issues found." in out


def test_check_does_not_write_files(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    _write_entry(tmp_path)
    config = tmp_path / "emlib.yaml"
    config.write_text("entry: main.js\noutput: library.js\n", encoding="utf-8")
    assert _run(monkeypatch, "check", "--config", str(config)) == 0
    assert not (tmp_path / "library.js").exists()


def test_check_reports_errors(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture
) -> None:
    entry = _write_entry(tmp_path, "var a = 1;\nexport { a as b, missing };")
    assert _run(monkeypatch, "check", str(entry)) == 1
    captured = capsys.readouterr()
    assert "No issues found." not in captured.out
    assert "Error:" in captured.err
