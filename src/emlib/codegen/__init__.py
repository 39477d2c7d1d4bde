# Copyright 2026 emlib Contributors
# SPDX-License-Identifier: Apache-2.0

"""Source text generation for syntax trees."""

from emlib.codegen.printer import print_node, print_program, quote_string

__all__ = [
    "print_program",
    "print_node",
    "quote_string",
]
