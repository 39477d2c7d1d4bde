# Copyright 2026 emlib Contributors
# SPDX-License-Identifier: Apache-2.0

"""End-to-end generation of a library file from an entry module."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from emlib.bundler.bundle import BundleOptions, Bundler, ModuleBundler
from emlib.codegen.printer import print_program
from emlib.compiler.dependencies import DependencyGraph
from emlib.compiler.renamer import SymbolTable
from emlib.compiler.transform import transform
from emlib.config.model import BuildConfig
from emlib.parser.parser import parse

logger = logging.getLogger(__name__)

# ###############
# Public Interface
# ###############


@dataclass(frozen=True)
class LibraryOutput:
    """A generated library.

    Attributes:
        code: The descriptor source text.
        symbols: The resolved symbols of the library.
        dependencies: The dependency graph keyed by external name.
    """

    code: str
    symbols: SymbolTable
    dependencies: DependencyGraph

    def write(self, path: Path) -> None:
        """Write the code to *path*, creating missing parent directories."""
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.code, encoding="utf-8")
        logger.debug("Wrote %d characters to '%s'", len(self.code), path)


def generate_library(config: BuildConfig, *, bundler: Bundler | None = None) -> LibraryOutput:
    """Bundle the entry module, run the library pass, and print the result.

    Args:
        config: Entry module, plugins, and pass options.  ``config.output`` is
            not used here; call :meth:`LibraryOutput.write` to persist.
        bundler: Replaces the default :class:`ModuleBundler`.

    Returns:
        The generated library.

    Raises:
        BundleError: If the module graph cannot be bundled.
        LexerError, ParseError: If the bundled text cannot be parsed.
        TransformError: If the bundled module cannot become a descriptor.
    """
    bundler = bundler or ModuleBundler()
    source = bundler.bundle(BundleOptions(entry=str(config.entry), plugins=list(config.plugins)))
    logger.debug("Bundled '%s' into %d characters", config.entry, len(source))
    result = transform(parse(source), config.transform)
    return LibraryOutput(
        code=print_program(result.program),
        symbols=result.symbols,
        dependencies=result.dependencies,
    )
