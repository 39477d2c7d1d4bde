# Copyright 2026 emlib Contributors
# SPDX-License-Identifier: Apache-2.0

"""Serialization of renamed declarations into a library descriptor.

The descriptor is a single statement::

    Object.assign(LibraryManager.library, {
        key: value,
        ...
        key__deps: ['dep', ...],
    });
"""

from __future__ import annotations

import logging

from emlib.codegen.printer import print_node
from emlib.compiler.dependencies import DependencyGraph
from emlib.compiler.errors import InternalConsistencyError
from emlib.compiler.renamer import SymbolTable
from emlib.compiler.validation import is_pure_value
from emlib.config.model import ImpureInitializerPolicy, TransformConfig
from emlib.model.nodes import (
    ArrayExpression,
    AssignmentExpression,
    CallExpression,
    Expression,
    ExpressionStatement,
    FunctionDeclaration,
    FunctionExpression,
    Identifier,
    LiteralExpression,
    ObjectExpression,
    Program,
    Property,
    UnaryExpression,
    VariableDeclaration,
    VariableDeclarator,
)
from emlib.parser.parser import parse

logger = logging.getLogger(__name__)

# ###############
# Public Interface
# ###############

DESCRIPTOR_TEMPLATE = "Object.assign(LibraryManager.library, {});"
DEPS_SUFFIX = "__deps"
POSTSET_SUFFIX = "__postset"


def build_descriptor(
    program: Program,
    table: SymbolTable,
    graph: DependencyGraph,
    config: TransformConfig,
) -> Program:
    """Build the descriptor program from renamed top-level declarations.

    Entries follow declaration order: a function becomes an anonymous
    function expression, a variable becomes its initializer (``void 0`` when
    it has none).  A ``<key>__deps`` entry is appended, in declaration order,
    for every symbol with dependencies.

    Args:
        program: The renamed module, containing only declarations.
        table: The resolved symbols.
        graph: The dependency graph keyed by external name.
        config: Selects the handling of non-pure initializers.

    Returns:
        A new program holding the single descriptor statement.

    Raises:
        InternalConsistencyError: If *program* still contains a statement
            other than a declaration, or a non-pure initializer that the
            policy does not allow.
    """
    output = parse(DESCRIPTOR_TEMPLATE)
    registry = _template_object(output)

    properties: list[Property] = []
    for stmt in program.body:
        if isinstance(stmt, FunctionDeclaration):
            value = FunctionExpression(params=stmt.params, body=stmt.body)
            properties.append(Property(key=Identifier(name=stmt.id.name), value=value))
        elif isinstance(stmt, VariableDeclaration):
            for declarator in stmt.declarations:
                properties.extend(_variable_entries(declarator, table, config))
        else:
            raise InternalConsistencyError(f"Unexpected top-level statement of kind '{stmt.kind}'")

    value_entries = len(properties)
    for symbol in table:
        deps = graph.get(symbol.external_name, ())
        if deps:
            elements: list[Expression | None] = [LiteralExpression(value=dep) for dep in deps]
            properties.append(
                Property(
                    key=Identifier(name=symbol.external_name + DEPS_SUFFIX),
                    value=ArrayExpression(elements=elements),
                )
            )

    registry.properties = properties
    logger.debug("Descriptor has %d entries and %d dependency lists", value_entries, len(properties) - value_entries)
    return output


# ################
# Implementation
# ################


def _template_object(output: Program) -> ObjectExpression:
    """Return the object literal argument of the parsed template."""
    stmt = output.body[0]
    assert isinstance(stmt, ExpressionStatement)
    call = stmt.expression
    assert isinstance(call, CallExpression)
    registry = call.arguments[1]
    assert isinstance(registry, ObjectExpression)
    return registry


def _void_zero() -> UnaryExpression:
    return UnaryExpression(operator="void", argument=LiteralExpression(value=0, raw="0"))


def _variable_entries(
    declarator: VariableDeclarator,
    table: SymbolTable,
    config: TransformConfig,
) -> list[Property]:
    key = declarator.id.name
    if is_pure_value(declarator.init):
        value = declarator.init if declarator.init is not None else _void_zero()
        return [Property(key=Identifier(name=key), value=value)]

    if config.impure_initializers is not ImpureInitializerPolicy.POSTSET:
        raise InternalConsistencyError(f"Non-pure initializer of '{key}' passed validation")
    symbol = table.by_external_name(key)
    if symbol is None:
        raise InternalConsistencyError(f"Symbol '{key}' is not in the symbol table")
    assert declarator.init is not None
    assignment = AssignmentExpression(
        operator="=",
        left=Identifier(name=symbol.reference_name),
        right=declarator.init,
    )
    return [
        Property(key=Identifier(name=key), value=_void_zero()),
        Property(key=Identifier(name=key + POSTSET_SUFFIX), value=LiteralExpression(value=print_node(assignment))),
    ]
