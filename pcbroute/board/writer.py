"""
Routed Board Writer

Appends routed copper to a parsed board tree and renders it back to text.
This is not a full-fidelity serializer: everything except the appended
segments and vias is reproduced from the parsed tree as-is.
"""

import logging
from pathlib import Path
from typing import Sequence, Union

from ..sexpr import Tree
from .model import BoardModel, Via, Wire

logger = logging.getLogger(__name__)


def wire_node(wire: Wire) -> Tree:
    """``(segment (start x y) (end x y) (width w) (layer "L") (net n))``"""
    return Tree.node(
        "segment",
        Tree.node("start", float(wire.start[0]), float(wire.start[1])),
        Tree.node("end", float(wire.end[0]), float(wire.end[1])),
        Tree.node("width", float(wire.width)),
        Tree.node("layer", wire.layer_name),
        Tree.node("net", wire.net_id),
    )


def via_node(via: Via) -> Tree:
    """``(via (at x y) (size s) (drill d) (layers "A" "B") (net n))``"""
    return Tree.node(
        "via",
        Tree.node("at", float(via.at[0]), float(via.at[1])),
        Tree.node("size", float(via.size)),
        Tree.node("drill", float(via.drill)),
        Tree.node("layers", *via.layers),
        Tree.node("net", via.net_id),
    )


def append_routes(
    tree: Tree,
    wires: Sequence[Wire],
    vias: Sequence[Via],
    board: BoardModel,
) -> Tree:
    """
    Return a copy of ``tree`` with segment and via nodes appended.

    Args:
        tree: Trivial-stripped board tree (named ``kicad_pcb``)
        wires: New wires to append
        vias: New vias to append
        board: Board the routes belong to, used to check layer names

    Returns:
        A new tree; the input is not modified
    """
    known = {layer.name for layer in board.layers}
    for wire in wires:
        if wire.layer_name not in known:
            logger.warning(f"Wire on unknown layer {wire.layer_name!r}")

    result = tree.copy()
    for wire in wires:
        result.append_tree(wire_node(wire))
    for via in vias:
        result.append_tree(via_node(via))

    logger.debug(f"Appended {len(wires)} segment(s) and {len(vias)} via(s)")
    return result


def render_board(tree: Tree, pretty: bool = False) -> str:
    """Render a board tree as file text.

    The default form is the single-line ``print`` output wrapped in
    parentheses; ``pretty`` switches to indented multi-line output.
    """
    if pretty:
        return tree.format() + "\n"
    return "(" + tree.print() + ")\n"


def save_routed_board(tree: Tree, result, path: Union[str, Path],
                      pretty: bool = True) -> Path:
    """
    Write the routed board to ``path``.

    Args:
        tree: Trivial-stripped tree the routed board was loaded from
        result: ``RouteResult`` from ``pcbroute.routing.route``
        path: Output file
        pretty: Indent the output

    Returns:
        The path written
    """
    path = Path(path)
    routed = append_routes(tree, result.new_wires(), result.new_vias(), result.board)
    path.write_text(render_board(routed, pretty=pretty), encoding="utf-8")
    logger.info(f"Saved routed board to {path}")
    return path
