# Copyright 2026 emlib Contributors
# SPDX-License-Identifier: Apache-2.0

"""Pass options and build configuration files."""

from emlib.config.loader import ConfigError, load_build_config
from emlib.config.model import (
    DEFAULT_LOCAL_PREFIX,
    BuildConfig,
    ImpureInitializerPolicy,
    ReferenceStyle,
    TransformConfig,
)

__all__ = [
    "TransformConfig",
    "ReferenceStyle",
    "ImpureInitializerPolicy",
    "DEFAULT_LOCAL_PREFIX",
    "BuildConfig",
    "load_build_config",
    "ConfigError",
]
