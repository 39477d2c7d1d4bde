# Copyright 2026 emlib Contributors
# SPDX-License-Identifier: Apache-2.0

"""Symbol naming and renaming for library descriptors.

Each module symbol gets two spellings:

- the *external name*, used as its key in the descriptor and in the
  ``__deps`` lists of other symbols;
- the *reference name*, used wherever code refers to it.

Exported symbols are named after their export.  Private symbols are
namespaced with the configured prefix so that descriptors compiled from
different modules can share one table.
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Iterator
from dataclasses import dataclass

from emlib.compiler.errors import InternalConsistencyError, NameCollisionError, UnresolvedExportError
from emlib.compiler.exports import ExportMap
from emlib.compiler.scope import ScopeAnalysis, SymbolKind
from emlib.config.model import ReferenceStyle, TransformConfig
from emlib.model.nodes import Program

logger = logging.getLogger(__name__)

# ###############
# Public Interface
# ###############


class Visibility(enum.Enum):
    PUBLIC = "public"
    PRIVATE = "private"


@dataclass(frozen=True)
class ResolvedSymbol:
    """Final naming of one module symbol.

    Attributes:
        internal_name: The name declared in the source module.
        external_name: The descriptor key.
        reference_name: The spelling of references from inside code.
        visibility: PUBLIC if exported, PRIVATE otherwise.
        kind: FUNCTION or VALUE.
    """

    internal_name: str
    external_name: str
    reference_name: str
    visibility: Visibility
    kind: SymbolKind


@dataclass(frozen=True)
class SymbolTable:
    """Immutable table of resolved symbols in declaration order."""

    symbols: tuple[ResolvedSymbol, ...]

    def __iter__(self) -> Iterator[ResolvedSymbol]:
        return iter(self.symbols)

    def __len__(self) -> int:
        return len(self.symbols)

    def get(self, internal_name: str) -> ResolvedSymbol | None:
        """Return the symbol declared as *internal_name*, if any."""
        for symbol in self.symbols:
            if symbol.internal_name == internal_name:
                return symbol
        return None

    def by_external_name(self, external_name: str) -> ResolvedSymbol | None:
        for symbol in self.symbols:
            if symbol.external_name == external_name:
                return symbol
        return None


def external_names(
    internal_name: str,
    exported_name: str | None,
    config: TransformConfig,
) -> tuple[str, str]:
    """Return the (descriptor key, reference spelling) pair for a symbol.

    Args:
        internal_name: The declared name.
        exported_name: The export name, or None for a private symbol.
        config: Supplies the prefix and the reference style.
    """
    if config.reference_style is ReferenceStyle.EMSCRIPTEN:
        if exported_name is not None:
            return exported_name, f"_{exported_name}"
        prefixed = f"{config.local_prefix}_{internal_name}"
        return f"${prefixed}", prefixed
    if exported_name is not None:
        return exported_name, exported_name
    prefixed = f"_{config.local_prefix}_{internal_name}"
    return prefixed, prefixed


def rename_symbols(
    program: Program,
    analysis: ScopeAnalysis,
    export_map: ExportMap,
    config: TransformConfig,
) -> SymbolTable:
    """Name every module symbol and rewrite its occurrences in place.

    Definition-site identifiers take the external name; use-site identifiers
    take the reference name.  All checks run before the first identifier is
    modified, so a failed call leaves the tree untouched.

    Args:
        program: The module with its export wrappers removed.
        analysis: Scope analysis of *program*.
        export_map: Internal name to exported name.
        config: Prefix and reference style.

    Returns:
        The resolved symbols in declaration order.

    Raises:
        UnresolvedExportError: If an export names an undeclared symbol.
        NameCollisionError: If a name is declared twice at the top level, two
            symbols end up with the same key or reference spelling, a
            reference spelling clashes with a global, or an inner binding
            would capture a renamed reference.
        InternalConsistencyError: If the analysis does not describe *program*.
    """
    declared = {symbol.name for symbol in analysis.symbols}
    for local in export_map:
        if local not in declared:
            raise UnresolvedExportError(f"Exported name '{local}' is not declared at the top level")

    resolved: list[ResolvedSymbol] = []
    for symbol in analysis.symbols:
        if symbol.kind is SymbolKind.IMPORT:
            raise InternalConsistencyError(f"Import binding '{symbol.name}' reached the renamer")
        if len(symbol.declarations) > 1:
            raise NameCollisionError(
                f"'{symbol.name}' is declared {len(symbol.declarations)} times at the top level"
            )
        exported = export_map.get(symbol.name)
        key, reference = external_names(symbol.name, exported, config)
        visibility = Visibility.PUBLIC if exported is not None else Visibility.PRIVATE
        resolved.append(ResolvedSymbol(symbol.name, key, reference, visibility, symbol.kind))

    _check_unique(resolved, analysis)
    by_name = {symbol.internal_name: symbol for symbol in resolved}

    for ref in analysis.references:
        target = by_name.get(ref.symbol)
        if target is None:
            raise InternalConsistencyError(f"Reference to unknown module symbol '{ref.symbol}'")
        if target.reference_name in ref.shadowed:
            where = f"inside '{ref.owner}'" if ref.owner is not None else "at the top level"
            raise NameCollisionError(
                f"Reference to '{ref.symbol}' {where} would be captured by a local binding "
                f"named '{target.reference_name}'"
            )

    for symbol in analysis.symbols:
        for identifier in symbol.identifiers:
            identifier.name = by_name[symbol.name].external_name
    for ref in analysis.references:
        ref.identifier.name = by_name[ref.symbol].reference_name

    table = SymbolTable(tuple(resolved))
    logger.debug(
        "Renamed %d symbols (%d public) in %d top-level statements",
        len(table),
        sum(1 for s in table if s.visibility is Visibility.PUBLIC),
        len(program.body),
    )
    return table


# ################
# Implementation
# ################


def _check_unique(resolved: list[ResolvedSymbol], analysis: ScopeAnalysis) -> None:
    """Raise NameCollisionError if two symbols share a key or a reference spelling."""
    keys: dict[str, str] = {}
    references: dict[str, str] = {}
    free_names = set(analysis.globals)
    for symbol in resolved:
        other = keys.setdefault(symbol.external_name, symbol.internal_name)
        if other != symbol.internal_name:
            raise NameCollisionError(
                f"'{other}' and '{symbol.internal_name}' both map to the descriptor key '{symbol.external_name}'"
            )
        other = references.setdefault(symbol.reference_name, symbol.internal_name)
        if other != symbol.internal_name:
            raise NameCollisionError(
                f"'{other}' and '{symbol.internal_name}' are both referenced as '{symbol.reference_name}'"
            )
        if symbol.reference_name in free_names:
            raise NameCollisionError(
                f"'{symbol.internal_name}' would be referenced as '{symbol.reference_name}', "
                "which the module already uses as a global"
            )
