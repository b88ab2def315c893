"""S-expression parsing and querying for KiCad board files."""

from .value import Value, turn_to_value, value_as_string, render_value
from .tree import Tree, Element
from .parser import (
    Delimiter,
    Token,
    tokenize,
    merge_into_exp,
    closing_index,
    is_balanced,
    parse,
)

__all__ = [
    # Values
    "Value",
    "turn_to_value",
    "value_as_string",
    "render_value",
    # Tree
    "Tree",
    "Element",
    # Parser
    "Delimiter",
    "Token",
    "tokenize",
    "merge_into_exp",
    "closing_index",
    "is_balanced",
    "parse",
]
