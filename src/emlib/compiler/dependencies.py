# Copyright 2026 emlib Contributors
# SPDX-License-Identifier: Apache-2.0

"""Dependency graph between the symbols of a library descriptor."""

from __future__ import annotations

import logging

from emlib.compiler.errors import InternalConsistencyError
from emlib.compiler.renamer import SymbolTable
from emlib.compiler.scope import ScopeAnalysis

logger = logging.getLogger(__name__)

# ###############
# Public Interface
# ###############

# External name -> external names of the symbols its code refers to.
DependencyGraph = dict[str, tuple[str, ...]]


def analyze_dependencies(analysis: ScopeAnalysis, table: SymbolTable) -> DependencyGraph:
    """Compute which symbols each symbol's code refers to.

    Every reference inside a top-level declaration that resolves to another
    module symbol is an edge.  References of a symbol to itself (recursion)
    are not edges.  Each symbol appears in the result, in declaration order,
    with its edges deduplicated in first-seen order.

    Args:
        analysis: Scope analysis of the module.  Owners and targets are
            identified by internal name, so renaming does not affect it.
        table: The resolved symbols.

    Returns:
        The dependency graph keyed by external name.

    Raises:
        InternalConsistencyError: If a reference names a symbol missing from
            the table.
    """
    edges: dict[str, list[str]] = {symbol.external_name: [] for symbol in table}
    for ref in analysis.references:
        if ref.owner is None:
            continue
        owner = table.get(ref.owner)
        target = table.get(ref.symbol)
        if owner is None or target is None:
            missing = ref.owner if owner is None else ref.symbol
            raise InternalConsistencyError(f"Symbol '{missing}' is not in the symbol table")
        if owner is target:
            continue
        deps = edges[owner.external_name]
        if target.external_name not in deps:
            deps.append(target.external_name)

    graph = {name: tuple(deps) for name, deps in edges.items()}
    logger.debug("Dependency graph has %d edges", sum(len(deps) for deps in graph.values()))
    return graph
