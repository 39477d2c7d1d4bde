# Copyright 2026 emlib Contributors
# SPDX-License-Identifier: Apache-2.0

"""Flattening of an ES module graph into a single module.

Starting from the entry module, every relative import and ``export ... from``
dependency is loaded depth-first.  The modules are concatenated
dependencies-first into one program in which:

* top-level names are made unique across modules; names of the entry
  module are kept, other names get a ``$1``, ``$2``, ... suffix when they
  clash or when an inner binding around one of their references, in any
  module, would capture them;
* every imported binding refers directly to the exporting module's local;
* imports are removed, and exports of non-entry modules are unwrapped;
* the entry module keeps its exports, re-exports becoming local exports.

Module loading is pluggable in the style of rollup plugins: each
:class:`Plugin` may resolve import specifiers to module ids and load module
text by id.  The first plugin returning a value wins; otherwise relative
specifiers are resolved against the importing file and ids are read as
UTF-8 files.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol

from emlib.codegen.printer import print_program
from emlib.compiler.scope import ScopeAnalysis, SymbolKind, analyze_scopes
from emlib.model.nodes import (
    ExportNamedDeclaration,
    ExportSpecifier,
    FunctionDeclaration,
    Identifier,
    ImportDeclaration,
    Program,
    Statement,
    VariableDeclaration,
)
from emlib.parser.lexer import LexerError
from emlib.parser.parser import ParseError, parse

logger = logging.getLogger(__name__)

# ###############
# Public Interface
# ###############


class BundleError(Exception):
    """Raised when the module graph cannot be loaded or linked."""


# (specifier, importer id or None for the entry) -> module id, or None to defer.
ResolveHook = Callable[[str, str | None], str | None]
# module id -> module text, or None to defer.
LoadHook = Callable[[str], str | None]


@dataclass(frozen=True)
class Plugin:
    """Hooks that customize module resolution and loading.

    Attributes:
        name: Identifies the plugin in log records.
        resolve_id: Maps an import specifier to a module id.
        load: Returns the source text of a module id.
    """

    name: str
    resolve_id: ResolveHook | None = None
    load: LoadHook | None = None


@dataclass
class BundleOptions:
    """Input of a bundling run.

    Attributes:
        entry: Specifier of the entry module, usually a file path.
        plugins: Consulted in order before the built-in resolution and loading.
    """

    entry: str
    plugins: list[Plugin] = field(default_factory=list)


class Bundler(Protocol):
    """Anything that can turn bundle options into the text of one module."""

    def bundle(self, options: BundleOptions) -> str: ...


class ModuleBundler:
    """Bundler for ES modules using named imports and exports."""

    def bundle(self, options: BundleOptions) -> str:
        """Load the module graph of *options.entry* and print it as one module.

        Raises:
            BundleError: If a module cannot be resolved, read, or parsed; on
                circular imports; and when a module imports a name that its
                source module does not export.
        """
        return _BundleRun(options).run()


# ################
# Implementation
# ################


# (module id, declared name): the declaration an import or export finally names.
_Origin = tuple[str, str]


@dataclass
class _Module:
    id: str
    program: Program
    analysis: ScopeAnalysis
    # id(statement) -> id of the module named by its `from` clause
    sources: dict[int, str]
    # local import binding -> origin
    imports: dict[str, _Origin] = field(default_factory=dict)
    # exported name -> origin
    exports: dict[str, _Origin] = field(default_factory=dict)


class _BundleRun:
    """State of one bundling run."""

    def __init__(self, options: BundleOptions) -> None:
        self._options = options
        self._modules: dict[str, _Module] = {}
        self._order: list[_Module] = []
        self._in_progress: set[str] = set()
        # origin -> final name in the bundle
        self._names: dict[_Origin, str] = {}

    def run(self) -> str:
        entry_id = self._resolve(self._options.entry, None)
        self._load_module(entry_id)
        entry = self._modules[entry_id]

        for module in self._order:
            self._link(module)
        self._assign_names(entry)
        for module in self._order:
            self._rename(module)

        body: list[Statement] = []
        for module in self._order:
            body.extend(self._emit(module, is_entry=module is entry))
        logger.debug("Bundled %d modules from '%s' into %d statements", len(self._order), entry_id, len(body))
        return print_program(Program(body=body))

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def _resolve(self, specifier: str, importer: str | None) -> str:
        for plugin in self._options.plugins:
            if plugin.resolve_id is None:
                continue
            resolved = plugin.resolve_id(specifier, importer)
            if resolved is not None:
                logger.debug("Plugin '%s' resolved '%s' to '%s'", plugin.name, specifier, resolved)
                return resolved
        if importer is None:
            return os.path.abspath(specifier)
        if not specifier.startswith(("./", "../", "/")):
            raise BundleError(f"Cannot resolve bare module specifier '{specifier}' imported by '{importer}'")
        path = os.path.normpath(os.path.join(os.path.dirname(importer), specifier))
        if not os.path.splitext(path)[1]:
            path += ".js"
        return path

    def _load_text(self, module_id: str) -> str:
        for plugin in self._options.plugins:
            if plugin.load is None:
                continue
            text = plugin.load(module_id)
            if text is not None:
                logger.debug("Plugin '%s' loaded '%s'", plugin.name, module_id)
                return text
        try:
            return Path(module_id).read_text(encoding="utf-8")
        except OSError as exc:
            raise BundleError(f"Cannot read module '{module_id}': {exc}") from exc

    def _load_module(self, module_id: str) -> None:
        """Load *module_id* and, depth-first, its dependencies."""
        if module_id in self._modules:
            return
        if module_id in self._in_progress:
            raise BundleError(f"Circular import detected involving '{module_id}'")
        self._in_progress.add(module_id)

        try:
            program = parse(self._load_text(module_id))
        except (LexerError, ParseError) as exc:
            raise BundleError(f"{module_id}: {exc}") from exc

        sources: dict[int, str] = {}
        for stmt in program.body:
            if isinstance(stmt, ImportDeclaration | ExportNamedDeclaration) and stmt.source is not None:
                dependency = self._resolve(str(stmt.source.value), module_id)
                sources[id(stmt)] = dependency
                self._load_module(dependency)

        self._in_progress.discard(module_id)
        module = _Module(module_id, program, analyze_scopes(program), sources)
        self._modules[module_id] = module
        self._order.append(module)
        logger.debug("Loaded module '%s' (%d statements)", module_id, len(program.body))

    # ------------------------------------------------------------------
    # Linking
    # ------------------------------------------------------------------

    def _link(self, module: _Module) -> None:
        """Trace every import and export of *module* to the declaration it names.

        Modules are linked dependencies-first, so the exports of every source
        module are already known.
        """
        for stmt in module.program.body:
            if isinstance(stmt, ImportDeclaration):
                source = self._modules[module.sources[id(stmt)]]
                for spec in stmt.specifiers:
                    module.imports[spec.local.name] = self._exported(source, spec.imported.name, module)

        for stmt in module.program.body:
            if not isinstance(stmt, ExportNamedDeclaration):
                continue
            if stmt.declaration is not None:
                for name in _declared_names(stmt.declaration):
                    module.exports[name] = (module.id, name)
            elif stmt.source is not None:
                source = self._modules[module.sources[id(stmt)]]
                for spec in stmt.specifiers:
                    module.exports[spec.exported.name] = self._exported(source, spec.local.name, module)
            else:
                for spec in stmt.specifiers:
                    module.exports[spec.exported.name] = self._origin(module, spec.local.name)

    def _exported(self, source: _Module, name: str, importer: _Module) -> _Origin:
        if name not in source.exports:
            raise BundleError(f"'{name}' is not exported by '{source.id}' (imported by '{importer.id}')")
        return source.exports[name]

    def _origin(self, module: _Module, name: str) -> _Origin:
        """Return the declaration that the module-level *name* of *module* stands for."""
        if name in module.imports:
            return module.imports[name]
        symbol = module.analysis.symbol(name)
        if symbol is None or symbol.kind is SymbolKind.IMPORT:
            raise BundleError(f"'{module.id}' exports '{name}', which it does not declare")
        return (module.id, name)

    def _assign_names(self, entry: _Module) -> None:
        """Give every declaration a bundle-wide unique name.

        Names of the entry module are kept.  Any other declaration avoids the
        names already taken, every global referenced in the bundle, and every
        inner binding that encloses a reference to it in any module.
        """
        hidden: dict[_Origin, set[str]] = {}
        for module in self._order:
            for ref in module.analysis.references:
                hidden.setdefault(self._origin(module, ref.symbol), set()).update(ref.shadowed)

        taken: set[str] = set()
        for symbol in entry.analysis.symbols:
            if symbol.kind is not SymbolKind.IMPORT:
                self._names[(entry.id, symbol.name)] = symbol.name
                taken.add(symbol.name)
        # A declaration must not capture another module's global references.
        for module in self._order:
            taken.update(module.analysis.globals)

        for module in self._order:
            if module is entry:
                continue
            for symbol in module.analysis.symbols:
                if symbol.kind is SymbolKind.IMPORT:
                    continue
                origin = (module.id, symbol.name)
                avoid = hidden.get(origin, set())
                candidate = symbol.name
                suffix = 1
                while candidate in taken or candidate in avoid:
                    candidate = f"{symbol.name}${suffix}"
                    suffix += 1
                self._names[origin] = candidate
                taken.add(candidate)

    def _final_name(self, module: _Module, name: str) -> str:
        return self._names[self._origin(module, name)]

    def _rename(self, module: _Module) -> None:
        for symbol in module.analysis.symbols:
            if symbol.kind is SymbolKind.IMPORT:
                continue
            for identifier in symbol.identifiers:
                identifier.name = self._names[(module.id, symbol.name)]
        for ref in module.analysis.references:
            ref.identifier.name = self._final_name(module, ref.symbol)

    # ------------------------------------------------------------------
    # Emitting
    # ------------------------------------------------------------------

    def _emit(self, module: _Module, *, is_entry: bool) -> list[Statement]:
        body: list[Statement] = []
        for stmt in module.program.body:
            if isinstance(stmt, ImportDeclaration):
                continue
            if not isinstance(stmt, ExportNamedDeclaration):
                body.append(stmt)
            elif not is_entry:
                if stmt.declaration is not None:
                    body.append(stmt.declaration)
            elif stmt.source is not None:
                specifiers = [
                    ExportSpecifier(
                        local=Identifier(name=self._names[module.exports[spec.exported.name]]),
                        exported=Identifier(name=spec.exported.name),
                    )
                    for spec in stmt.specifiers
                ]
                body.append(ExportNamedDeclaration(specifiers=specifiers))
            else:
                body.append(stmt)
        return body


def _declared_names(declaration: FunctionDeclaration | VariableDeclaration) -> list[str]:
    if isinstance(declaration, FunctionDeclaration):
        return [declaration.id.name]
    return [d.id.name for d in declaration.declarations]
