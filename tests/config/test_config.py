# Copyright 2026 emlib Contributors
# SPDX-License-Identifier: Apache-2.0

"""Tests for pass options and build configuration files."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from emlib.config import (
    DEFAULT_LOCAL_PREFIX,
    BuildConfig,
    ConfigError,
    ImpureInitializerPolicy,
    ReferenceStyle,
    TransformConfig,
    load_build_config,
)

# ###############
# Helpers
# ###############


def _write_config(tmp_path: Path, content: str) -> Path:
    """Write a build file and return its path."""
    config_file = tmp_path / "emlib.yaml"
    config_file.write_text(content, encoding="utf-8")
    return config_file


# ###############
# Transform Options
# ###############


def test_transform_defaults() -> None:
    """Without arguments the pass uses the default prefix and the strict policies."""
    config = TransformConfig()
    assert config.local_prefix == DEFAULT_LOCAL_PREFIX == "unnamed"
    assert config.reference_style is ReferenceStyle.UNIFORM
    assert config.impure_initializers is ImpureInitializerPolicy.REJECT


def test_transform_options_from_strings() -> None:
    """Enum options accept their string values."""
    config = TransformConfig(reference_style="emscripten", impure_initializers="postset")
    assert config.reference_style is ReferenceStyle.EMSCRIPTEN
    assert config.impure_initializers is ImpureInitializerPolicy.POSTSET


def test_transform_config_is_frozen() -> None:
    """The pass never modifies its options."""
    config = TransformConfig()
    with pytest.raises(ValidationError):
        config.local_prefix = "other"


def test_transform_config_rejects_unknown_options() -> None:
    with pytest.raises(ValidationError):
        TransformConfig(prefix="lib")


@pytest.mark.parametrize("prefix", ["lib", "_lib", "$lib", "lib_2", "L"])
def test_valid_local_prefix(prefix: str) -> None:
    assert TransformConfig(local_prefix=prefix).local_prefix == prefix


@pytest.mark.parametrize("prefix", ["", "2lib", "my-lib", "my lib", "lib.x"])
def test_invalid_local_prefix(prefix: str) -> None:
    """A prefix must keep prefixed names valid identifiers."""
    with pytest.raises(ValidationError, match="local prefix must be an identifier"):
        TransformConfig(local_prefix=prefix)


def test_build_config_defaults(tmp_path: Path) -> None:
    config = BuildConfig(entry=tmp_path / "main.js")
    assert config.plugins == []
    assert config.output is None
    assert config.transform == TransformConfig()


# ###############
# Build Files
# ###############


def test_minimal_build_file(tmp_path: Path) -> None:
    """A build file with only an entry uses the default options."""
    config = load_build_config(_write_config(tmp_path, "entry: main.js\n"))

    assert isinstance(config, BuildConfig)
    assert config.entry == (tmp_path / "main.js").resolve()
    assert config.output is None
    assert config.plugins == []
    assert config.transform == TransformConfig()


def test_full_build_file(tmp_path: Path) -> None:
    content = """\
entry: src/library.js
output: build/library.js
local-prefix: mylib
reference-style: emscripten
impure-initializers: postset
"""
    config = load_build_config(_write_config(tmp_path, content))

    assert config.entry == (tmp_path / "src" / "library.js").resolve()
    assert config.output == (tmp_path / "build" / "library.js").resolve()
    assert config.transform == TransformConfig(
        local_prefix="mylib",
        reference_style=ReferenceStyle.EMSCRIPTEN,
        impure_initializers=ImpureInitializerPolicy.POSTSET,
    )


def test_paths_are_relative_to_the_build_file(tmp_path: Path) -> None:
    """Relative paths do not depend on the working directory."""
    config_dir = tmp_path / "project" / "conf"
    config_dir.mkdir(parents=True)
    config = load_build_config(_write_config(config_dir, "entry: ../src/main.js\noutput: out.js\n"))

    assert config.entry == (tmp_path / "project" / "src" / "main.js").resolve()
    assert config.output == (config_dir / "out.js").resolve()


def test_absolute_entry_is_kept(tmp_path: Path) -> None:
    entry = (tmp_path / "elsewhere" / "main.js").resolve()
    config = load_build_config(_write_config(tmp_path, f"entry: '{entry}'\n"))
    assert config.entry == entry


# ###############
# Error Cases
# ###############


def test_missing_file(tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match="Build config file not found"):
        load_build_config(tmp_path / "missing.yaml")


def test_invalid_yaml(tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match="Invalid YAML"):
        load_build_config(_write_config(tmp_path, "entry: [unclosed\n"))


@pytest.mark.parametrize("content", ["", "- main.js\n", "main.js\n"])
def test_not_a_mapping(tmp_path: Path, content: str) -> None:
    """Empty files, lists and scalars are all rejected."""
    with pytest.raises(ConfigError, match="build config must be a YAML mapping"):
        load_build_config(_write_config(tmp_path, content))


@pytest.mark.parametrize(
    "content",
    [
        "output: out.js\n",
        "entry: main.js\nunknown-key: 1\n",
        "entry: main.js\nreference-style: compact\n",
        "entry: main.js\nimpure-initializers: ignore\n",
        "entry: main.js\nlocal-prefix: my-lib\n",
    ],
)
def test_schema_violations(tmp_path: Path, content: str) -> None:
    with pytest.raises(ConfigError, match="Invalid build config") as exc_info:
        load_build_config(_write_config(tmp_path, content))
    assert isinstance(exc_info.value.__cause__, ValidationError)
