# Copyright 2026 emlib Contributors
# SPDX-License-Identifier: Apache-2.0

"""Error types raised by the library pass.

User-facing errors derive from :class:`TransformError`: the input program
must be changed before the pass can succeed.  :class:`InternalConsistencyError`
signals a broken invariant inside the pass itself and does not derive from
that base class.
"""

from __future__ import annotations

from emlib.codegen.printer import print_node
from emlib.model.nodes import Statement, VariableDeclarator

# ###############
# Public Interface
# ###############


class TransformError(Exception):
    """Base class for errors caused by the input program."""


class UnsupportedStatementError(TransformError):
    """A top-level statement is not a function, variable, or export declaration.

    Attributes:
        node: The offending statement.
        source: The statement rendered as source text.
        description: JSON dump of the statement's tree.
    """

    def __init__(self, node: Statement) -> None:
        self.node = node
        self.source = print_node(node)
        self.description = node.model_dump_json(indent=2)
        super().__init__(f"Unsupported top-level statement: {self.source}")


class ImpureInitializerError(TransformError):
    """A top-level variable is initialized with an expression that may have side effects.

    Attributes:
        node: The offending declarator.
        source: The declarator rendered as source text.
        description: JSON dump of the declarator's tree.
    """

    def __init__(self, node: VariableDeclarator) -> None:
        self.node = node
        self.source = print_node(node)
        self.description = node.model_dump_json(indent=2)
        super().__init__(f"Initializer of '{node.id.name}' is not a pure value: {self.source}")


class NameCollisionError(TransformError):
    """Two symbols would end up with the same name, or a renamed reference would be captured."""


class UnresolvedExportError(TransformError):
    """An export list names a symbol that is not declared at the top level."""


class InternalConsistencyError(RuntimeError):
    """An invariant of the pass does not hold; indicates a bug, not bad input."""
