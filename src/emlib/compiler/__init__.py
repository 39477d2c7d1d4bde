# Copyright 2026 emlib Contributors
# SPDX-License-Identifier: Apache-2.0

"""The library pass: validation, export resolution, renaming, dependencies, and serialization."""

from emlib.compiler.dependencies import DependencyGraph, analyze_dependencies
from emlib.compiler.descriptor import DESCRIPTOR_TEMPLATE, build_descriptor
from emlib.compiler.errors import (
    ImpureInitializerError,
    InternalConsistencyError,
    NameCollisionError,
    TransformError,
    UnresolvedExportError,
    UnsupportedStatementError,
)
from emlib.compiler.exports import ExportMap, resolve_exports
from emlib.compiler.renamer import ResolvedSymbol, SymbolTable, Visibility, external_names, rename_symbols
from emlib.compiler.scope import ModuleSymbol, Reference, ScopeAnalysis, SymbolKind, analyze_scopes
from emlib.compiler.transform import TransformResult, transform
from emlib.compiler.validation import is_pure_value, validate_program

__all__ = [
    "transform",
    "TransformResult",
    "validate_program",
    "is_pure_value",
    "resolve_exports",
    "ExportMap",
    "analyze_scopes",
    "ScopeAnalysis",
    "ModuleSymbol",
    "Reference",
    "SymbolKind",
    "rename_symbols",
    "external_names",
    "SymbolTable",
    "ResolvedSymbol",
    "Visibility",
    "analyze_dependencies",
    "DependencyGraph",
    "build_descriptor",
    "DESCRIPTOR_TEMPLATE",
    "TransformError",
    "UnsupportedStatementError",
    "ImpureInitializerError",
    "NameCollisionError",
    "UnresolvedExportError",
    "InternalConsistencyError",
]
