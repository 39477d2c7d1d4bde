# Copyright 2026 emlib Contributors
# SPDX-License-Identifier: Apache-2.0

"""YAML loader for build configuration files.

A build file looks like::

    entry: src/library.js
    output: build/library.js
    local-prefix: mylib
    reference-style: uniform
    impure-initializers: reject

Only ``entry`` is required.  Relative paths are resolved against the
directory that contains the build file.
"""

from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from emlib.config.model import (
    DEFAULT_LOCAL_PREFIX,
    BuildConfig,
    ImpureInitializerPolicy,
    ReferenceStyle,
    TransformConfig,
)

# ###############
# Public Interface
# ###############


class ConfigError(Exception):
    """Raised when a build configuration file is missing, unreadable, or invalid."""


def load_build_config(path: Path) -> BuildConfig:
    """Load and validate a build configuration file.

    Args:
        path: Path to the YAML build file.

    Returns:
        A BuildConfig with absolute entry and output paths.

    Raises:
        ConfigError: If the file cannot be read, contains invalid YAML, or
            does not conform to the expected schema.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise ConfigError(f"Build config file not found: {path}") from None
    except OSError as exc:
        raise ConfigError(f"Cannot read build config file '{path}': {exc}") from exc

    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in '{path}': {exc}") from exc

    if not isinstance(data, dict):
        raise ConfigError(f"{path}: build config must be a YAML mapping")

    try:
        raw = _BuildFile.model_validate(data)
        transform = TransformConfig(
            local_prefix=raw.local_prefix,
            reference_style=raw.reference_style,
            impure_initializers=raw.impure_initializers,
        )
    except ValidationError as exc:
        raise ConfigError(f"Invalid build config '{path}': {exc}") from exc

    base = path.parent
    return BuildConfig(
        entry=(base / raw.entry).resolve(),
        output=(base / raw.output).resolve() if raw.output is not None else None,
        transform=transform,
    )


# ################
# Implementation
# ################


class _BuildFile(BaseModel):
    """On-disk schema of a build file."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    entry: str
    output: str | None = None
    local_prefix: str = Field(alias="local-prefix", default=DEFAULT_LOCAL_PREFIX)
    reference_style: ReferenceStyle = Field(alias="reference-style", default=ReferenceStyle.UNIFORM)
    impure_initializers: ImpureInitializerPolicy = Field(
        alias="impure-initializers", default=ImpureInitializerPolicy.REJECT
    )
