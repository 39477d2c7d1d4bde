# Copyright 2026 emlib Contributors
# SPDX-License-Identifier: Apache-2.0

"""Configuration consumed by the library pass and the build driver."""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, field_validator

if TYPE_CHECKING:
    from emlib.bundler.bundle import Plugin

# ###############
# Public Interface
# ###############

DEFAULT_LOCAL_PREFIX = "unnamed"


class ReferenceStyle(enum.Enum):
    """How descriptor keys and in-code references to them are spelled.

    UNIFORM: a public symbol is keyed and referenced by its exported name;
        a private symbol is keyed and referenced as ``_<prefix>_<name>``.
    EMSCRIPTEN: the runtime library convention. A private symbol is keyed
        ``$<prefix>_<name>`` and referenced as ``<prefix>_<name>``; a public
        symbol is keyed ``<name>`` and referenced as ``_<name>``.
    """

    UNIFORM = "uniform"
    EMSCRIPTEN = "emscripten"


class ImpureInitializerPolicy(enum.Enum):
    """What to do with a top-level variable whose initializer may have side effects.

    REJECT: abort the pass with an ImpureInitializerError.
    POSTSET: emit a ``void 0`` placeholder and defer the assignment to a
        ``<key>__postset`` entry run after all entries are in place.
    """

    REJECT = "reject"
    POSTSET = "postset"


class TransformConfig(BaseModel):
    """Options for a single run of the library pass.

    Built once by the caller and never modified by the pass.

    Attributes:
        local_prefix: Namespace segment for private symbol names.  Must be a
            valid identifier so that prefixed names stay valid identifiers.
        reference_style: Naming convention for keys and references.
        impure_initializers: Handling of non-pure top-level initializers.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    local_prefix: str = DEFAULT_LOCAL_PREFIX
    reference_style: ReferenceStyle = ReferenceStyle.UNIFORM
    impure_initializers: ImpureInitializerPolicy = ImpureInitializerPolicy.REJECT

    @field_validator("local_prefix")
    @classmethod
    def _check_local_prefix(cls, value: str) -> str:
        if not _IDENTIFIER_RE.fullmatch(value):
            raise ValueError(f"local prefix must be an identifier, got {value!r}")
        return value


@dataclass
class BuildConfig:
    """Everything needed to turn an entry module into a library file.

    Attributes:
        entry: Path of the entry module handed to the bundler.
        plugins: Bundler plugins, consulted before the built-in resolution.
        output: Destination file, or None to keep the result in memory.
        transform: Options for the library pass.
    """

    entry: Path
    plugins: list[Plugin] = field(default_factory=list)
    output: Path | None = None
    transform: TransformConfig = field(default_factory=TransformConfig)


# ################
# Implementation
# ################

_IDENTIFIER_RE = re.compile(r"[A-Za-z_$][A-Za-z0-9_$]*")
