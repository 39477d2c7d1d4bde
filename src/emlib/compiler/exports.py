# Copyright 2026 emlib Contributors
# SPDX-License-Identifier: Apache-2.0

"""Export resolution: strip export wrappers and record public names."""

from __future__ import annotations

import logging

from emlib.compiler.errors import NameCollisionError
from emlib.model.nodes import ExportNamedDeclaration, FunctionDeclaration, Program, Statement

logger = logging.getLogger(__name__)

# ###############
# Public Interface
# ###############

# Internal (declared) name -> external (exported) name.
ExportMap = dict[str, str]


def resolve_exports(program: Program) -> ExportMap:
    """Remove every export wrapper from *program* and return the export map.

    ``export function f() {}`` and ``export var a, b`` are replaced by the
    bare declaration and map each declared name to itself.  ``export { a as b }``
    maps ``a`` to ``b`` and is removed; the binding it names is declared
    elsewhere in the module.

    Args:
        program: The validated module.  Its body is modified in place.

    Returns:
        The mapping from internal names to exported names.

    Raises:
        NameCollisionError: If a local is exported twice, or two locals are
            exported under the same name.
    """
    export_map: ExportMap = {}
    exporters: dict[str, str] = {}

    def register(local: str, exported: str) -> None:
        if local in export_map:
            raise NameCollisionError(
                f"'{local}' is exported more than once (as '{export_map[local]}' and '{exported}')"
            )
        if exported in exporters:
            raise NameCollisionError(f"Export name '{exported}' is used by both '{exporters[exported]}' and '{local}'")
        export_map[local] = exported
        exporters[exported] = local

    body: list[Statement] = []
    for stmt in program.body:
        if not isinstance(stmt, ExportNamedDeclaration):
            body.append(stmt)
            continue
        if stmt.declaration is None:
            for spec in stmt.specifiers:
                register(spec.local.name, spec.exported.name)
            continue
        declaration = stmt.declaration
        if isinstance(declaration, FunctionDeclaration):
            register(declaration.id.name, declaration.id.name)
        else:
            for declarator in declaration.declarations:
                register(declarator.id.name, declarator.id.name)
        body.append(declaration)

    program.body = body
    logger.debug("Resolved %d exports", len(export_map))
    return export_map
