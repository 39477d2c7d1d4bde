# Copyright 2026 emlib Contributors
# SPDX-License-Identifier: Apache-2.0

"""Tests for end-to-end library generation."""

from pathlib import Path

import pytest

from emlib.bundler.bundle import BundleError, BundleOptions, Plugin
from emlib.compiler.errors import UnsupportedStatementError
from emlib.compiler.renamer import SymbolTable
from emlib.config.model import BuildConfig, ReferenceStyle, TransformConfig
from emlib.library import LibraryOutput, generate_library

# ###############
# Test Helpers
# ###############


class _FakeBundler:
    """Returns fixed text and records the options it was called with."""

    def __init__(self, code: str) -> None:
        self.code = code
        self.calls: list[BundleOptions] = []

    def bundle(self, options: BundleOptions) -> str:
        self.calls.append(options)
        return self.code


def _config(entry: Path, **options: object) -> BuildConfig:
    return BuildConfig(entry=entry, transform=TransformConfig(**options))


# ###############
# Generation
# ###############


class TestGenerateLibrary:
    def test_bundled_text_becomes_descriptor(self, tmp_path: Path) -> None:
        bundler = _FakeBundler("function x() {}\nexport function y() { return x(); }")
        library = generate_library(_config(tmp_path / "main.js", local_prefix="test"), bundler=bundler)
        assert library.code == (
            "Object.assign(LibraryManager.library, {\n"
            "    _test_x: function () {},\n"
            "    y: function () {\n"
            "        return _test_x();\n"
            "    },\n"
            "    y__deps: ['_test_x']\n"
            "});\n"
        )
        assert [s.external_name for s in library.symbols] == ["_test_x", "y"]
        assert library.dependencies == {"_test_x": (), "y": ("_test_x",)}

    def test_bundler_receives_entry_and_plugins(self, tmp_path: Path) -> None:
        plugin = Plugin(name="noop")
        config = BuildConfig(entry=tmp_path / "main.js", plugins=[plugin])
        bundler = _FakeBundler("")
        generate_library(config, bundler=bundler)
        (options,) = bundler.calls
        assert options.entry == str(tmp_path / "main.js")
        assert options.plugins == [plugin]
        assert options.plugins is not config.plugins

    def test_empty_module(self, tmp_path: Path) -> None:
        library = generate_library(_config(tmp_path / "main.js"), bundler=_FakeBundler(""))
        assert library.code == "Object.assign(LibraryManager.library, {});\n"
        assert len(library.symbols) == 0

    def test_transform_options_are_applied(self, tmp_path: Path) -> None:
        bundler = _FakeBundler("function x() {}\nexport function y() { return x(); }")
        config = _config(tmp_path / "main.js", local_prefix="p", reference_style=ReferenceStyle.EMSCRIPTEN)
        code = generate_library(config, bundler=bundler).code
        assert "    $p_x: function () {},\n" in code
        assert "        return p_x();\n" in code

    def test_default_bundler_reads_files(self, tmp_path: Path) -> None:
        (tmp_path / "lib.js").write_text("export function helper() {}", encoding="utf-8")
        entry = tmp_path / "main.js"
        source = "import { helper } from './lib';\nexport function api() { return helper(); }"
        entry.write_text(source, encoding="utf-8")
        library = generate_library(_config(entry, local_prefix="lib"))
        assert library.dependencies == {"_lib_helper": (), "api": ("_lib_helper",)}

    def test_config_output_is_not_written(self, tmp_path: Path) -> None:
        config = BuildConfig(entry=tmp_path / "main.js", output=tmp_path / "out.js")
        generate_library(config, bundler=_FakeBundler("export var a = 1;"))
        assert not (tmp_path / "out.js").exists()


# ###############
# Error Propagation
# ###############


class TestErrors:
    def test_bundle_errors_propagate(self, tmp_path: Path) -> None:
        with pytest.raises(BundleError):
            generate_library(_config(tmp_path / "missing.js"))

    def test_transform_errors_propagate(self, tmp_path: Path) -> None:
        with pytest.raises(UnsupportedStatementError):
            generate_library(_config(tmp_path / "main.js"), bundler=_FakeBundler("run();"))


# ###############
# Writing
# ###############


class TestWrite:
    def test_write_creates_parent_directories(self, tmp_path: Path) -> None:
        library = generate_library(_config(tmp_path / "main.js"), bundler=_FakeBundler("export var a = 1;"))
        target = tmp_path / "build" / "nested" / "library.js"
        library.write(target)
        assert target.read_text(encoding="utf-8") == library.code

    def test_write_overwrites(self, tmp_path: Path) -> None:
        target = tmp_path / "library.js"
        target.write_text("stale", encoding="utf-8")
        LibraryOutput(code="fresh\n", symbols=SymbolTable(()), dependencies={}).write(target)
        assert target.read_text(encoding="utf-8") == "fresh\n"
