# Copyright 2026 emlib Contributors
# SPDX-License-Identifier: Apache-2.0

"""The library pass: bundled module in, library descriptor out."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from emlib.compiler.dependencies import DependencyGraph, analyze_dependencies
from emlib.compiler.descriptor import build_descriptor
from emlib.compiler.exports import resolve_exports
from emlib.compiler.renamer import SymbolTable, rename_symbols
from emlib.compiler.scope import analyze_scopes
from emlib.compiler.validation import validate_program
from emlib.config.model import TransformConfig
from emlib.model.nodes import Program

logger = logging.getLogger(__name__)

# ###############
# Public Interface
# ###############


@dataclass(frozen=True)
class TransformResult:
    """Outcome of :func:`transform`.

    Attributes:
        program: The descriptor program.
        symbols: The resolved symbols in declaration order.
        dependencies: The dependency graph keyed by external name.
    """

    program: Program
    symbols: SymbolTable
    dependencies: DependencyGraph


def transform(program: Program, config: TransformConfig | None = None) -> TransformResult:
    """Convert a bundled module into a library descriptor.

    Runs validation, export resolution, scope analysis, renaming, dependency
    analysis, and serialization, in that order.  *program* is consumed: its
    body and identifiers are modified along the way.

    Args:
        program: The parsed, bundled module.
        config: Pass options; defaults to ``TransformConfig()``.

    Returns:
        The descriptor program with its symbol table and dependency graph.

    Raises:
        TransformError: If the module cannot be expressed as a descriptor.
            Nothing is returned in that case.
    """
    config = config or TransformConfig()
    logger.debug("Transforming %d top-level statements with prefix '%s'", len(program.body), config.local_prefix)

    validate_program(program, impure_initializers=config.impure_initializers)
    export_map = resolve_exports(program)
    analysis = analyze_scopes(program)
    table = rename_symbols(program, analysis, export_map, config)
    graph = analyze_dependencies(analysis, table)
    descriptor = build_descriptor(program, table, graph, config)
    return TransformResult(program=descriptor, symbols=table, dependencies=graph)
