"""Typed board model, builder and file I/O."""

from .errors import BoardError, ErrorKind
from .model import (
    Arc,
    BoardModel,
    Footprint,
    General,
    Layer,
    LayerKind,
    LoadDiagnostics,
    Net,
    Pad,
    Point,
    Via,
    Wire,
    layer_matches,
)
from .builder import build_board
from .loader import load_board, load_tree
from .writer import append_routes, render_board, save_routed_board

__all__ = [
    # Errors
    "BoardError",
    "ErrorKind",
    # Model
    "Arc",
    "BoardModel",
    "Footprint",
    "General",
    "Layer",
    "LayerKind",
    "LoadDiagnostics",
    "Net",
    "Pad",
    "Point",
    "Via",
    "Wire",
    "layer_matches",
    "build_board",
    # I/O
    "load_board",
    "load_tree",
    "append_routes",
    "render_board",
    "save_routed_board",
]
