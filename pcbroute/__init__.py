"""
pcbroute - Grid-based autorouter for KiCad boards

Parses ``.kicad_pcb`` S-expressions into a typed board model and routes
unconnected nets with a Lee wavefront maze search.
"""

__version__ = "0.1.0"

from .sexpr import Tree, parse
from .board import BoardError, BoardModel, ErrorKind, load_board
from .routing import RouteResult, RouteSettings, load_settings, route

__all__ = [
    "Tree",
    "parse",
    "BoardError",
    "BoardModel",
    "ErrorKind",
    "load_board",
    "RouteResult",
    "RouteSettings",
    "load_settings",
    "route",
]
