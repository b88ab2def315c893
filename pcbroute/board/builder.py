"""
Board Model Builder

Projects a parsed KiCad S-expression tree onto the typed ``BoardModel``.

Lookup happens in two phases: board-level collections are discovered with
``Tree.get`` (which finds a tag at any depth), then each fragment is bound
to an entity field by field from its direct children.

Failure policy:
- Required sections (general, layers, footprints, segments, arcs, vias) raise
  ``BoardError`` and abort the load.
- Repeatable items (individual net mentions, pads inside a footprint) that
  fail are dropped and counted in ``LoadDiagnostics``.
"""

import logging
from typing import List, Optional, Tuple

from ..sexpr import Tree, Value, value_as_string
from ..sexpr.value import as_number
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
)

logger = logging.getLogger(__name__)

# KiCad layer types that carry copper and can be routed on
_SIGNAL_KINDS = {"signal", "power", "mixed", "jumper"}


# --- Field helpers ---

def _field(tree: Tree, tag: str) -> Optional[Tree]:
    """First direct child tagged ``tag``, with the tag stripped."""
    for child in tree.sub_expressions():
        if child.name() == tag:
            return Tree(child.elements[1:])
    return None


def _field_value(tree: Tree, tag: str) -> Value:
    found = _field(tree, tag)
    if found is None or not found.values():
        return None
    return found.values()[0]


def _numbers(values: List[Value]) -> Optional[List[float]]:
    numbers = [as_number(v) for v in values]
    if any(n is None for n in numbers):
        return None
    return numbers


def _point(tree: Tree, tag: str, kind: ErrorKind,
           allow_angle: bool = False) -> Tuple[Point, float]:
    """Extract an ``(tag x y)`` point, optionally with a trailing angle.

    Returns:
        ((x, y), angle) where angle is 0.0 if absent

    Raises:
        BoardError: With ``kind`` if the field is missing or has the wrong
            number of numeric values
    """
    found = _field(tree, tag)
    if found is None:
        raise BoardError(kind, f"missing ({tag} ...)")

    numbers = _numbers(found.values())
    allowed = (2, 3) if allow_angle else (2,)
    if numbers is None or len(numbers) not in allowed:
        raise BoardError(kind, f"({tag} ...) needs {' or '.join(map(str, allowed))} numbers, "
                               f"got {found.values()!r}")

    angle = numbers[2] if len(numbers) == 3 else 0.0
    return (numbers[0], numbers[1]), angle


def _string_values(tree: Optional[Tree]) -> Tuple[str, ...]:
    if tree is None:
        return ()
    return tuple(value_as_string(v) for v in tree.values())


# --- Entity builders ---

def build_general(board: Tree) -> General:
    """Build the ``general`` section (thickness is required)."""
    kind = ErrorKind.MISSING_OR_MALFORMED_GENERAL_SECTION
    sections = board.get("general")
    if not sections:
        raise BoardError(kind, "no (general ...) section")

    thickness = as_number(sections[0].get_value("thickness"))
    if thickness is None:
        raise BoardError(kind, "missing or non-numeric thickness")
    return General(thickness=thickness)


def build_layer(entry: Tree) -> Layer:
    """Build one ``(id "name" kind ["attrib"])`` layer entry."""
    kind = ErrorKind.MISSING_OR_MALFORMED_LAYER
    values = entry.values()
    if len(values) < 3:
        raise BoardError(kind, f"layer entry too short: {entry.print().strip()}")

    layer_id, name, layer_type = values[0], values[1], values[2]
    if not isinstance(layer_id, int):
        raise BoardError(kind, f"layer id is not an integer: {layer_id!r}")
    if name is None:
        raise BoardError(kind, f"layer {layer_id} has no name")

    layer_type = value_as_string(layer_type)
    if layer_type in _SIGNAL_KINDS:
        layer_kind = LayerKind.SIGNAL
    elif layer_type == "user":
        layer_kind = LayerKind.USER
    else:
        raise BoardError(kind, f"layer {layer_id} has unknown type {layer_type!r}")

    attrib = value_as_string(values[3]) if len(values) > 3 else ""
    return Layer(id=layer_id, name=value_as_string(name), kind=layer_kind, attrib=attrib)


def build_layers(board: Tree) -> Tuple[Layer, ...]:
    """Build the board-level layer table.

    ``get("layers")`` also finds pad and via layer lists; the board table
    is the one whose children are subtrees.
    """
    tables = [t for t in board.get("layers") if t.sub_expressions()]
    if not tables:
        raise BoardError(ErrorKind.MISSING_OR_MALFORMED_LAYER, "no board layer table")

    layers = []
    seen_ids = set()
    for entry in tables[0].sub_expressions():
        layer = build_layer(entry)
        if layer.id in seen_ids:
            raise BoardError(ErrorKind.MISSING_OR_MALFORMED_LAYER,
                             f"duplicate layer id {layer.id}")
        seen_ids.add(layer.id)
        layers.append(layer)
    return tuple(layers)


def build_net(fragment: Tree) -> Net:
    """Build a net from a ``(net id "name")`` mention."""
    kind = ErrorKind.MISSING_OR_MALFORMED_NET
    values = fragment.values()
    if len(values) < 2:
        raise BoardError(kind, f"net mention without id and name: {values!r}")
    if not isinstance(values[0], int):
        raise BoardError(kind, f"net id is not an integer: {values[0]!r}")
    return Net(id=values[0], name=value_as_string(values[1]))


def build_nets(board: Tree) -> Tuple[Tuple[Net, ...], int]:
    """Collect every net mention, dropping malformed ones.

    Returns:
        (unique nets in first-seen order, number of dropped mentions)
    """
    nets: List[Net] = []
    dropped = 0
    for fragment in board.get("net"):
        try:
            net = build_net(fragment)
        except BoardError as e:
            dropped += 1
            logger.debug("Dropping net mention: %s", e)
            continue
        if net not in nets:
            nets.append(net)
    return tuple(nets), dropped


def build_pad(fragment: Tree, footprint_at: Point) -> Pad:
    """Build a pad; its absolute position is the footprint translation."""
    kind = ErrorKind.MISSING_OR_MALFORMED_PAD
    values = fragment.values()
    number = value_as_string(values[0]) if values else ""

    at, rotation = _point(fragment, "at", kind, allow_angle=True)

    layers = _string_values(_field(fragment, "layers"))
    if not layers:
        raise BoardError(kind, f"pad {number!r} has no layers")

    net_id = _field_value(fragment, "net")
    if net_id is not None and not isinstance(net_id, int):
        raise BoardError(kind, f"pad {number!r} has non-integer net {net_id!r}")

    abs_at = (footprint_at[0] + at[0], footprint_at[1] + at[1])
    return Pad(
        layers=layers,
        at=at,
        abs_at=abs_at,
        number=number,
        net_id=net_id,
        rotation=rotation,
    )


def _footprint_reference(fragment: Tree) -> str:
    """Reference designator from KiCad 6+ properties or legacy fp_text."""
    for child in fragment.sub_expressions():
        values = child.values()
        if child.name() == "property" and len(values) >= 3 and values[1] == "Reference":
            return value_as_string(values[2])
        if child.name() == "fp_text" and len(values) >= 3 and values[1] == "reference":
            return value_as_string(values[2])
    return ""


def build_footprint(fragment: Tree) -> Tuple[Footprint, int]:
    """Build a footprint and its pads.

    Returns:
        (footprint, number of dropped pads)
    """
    kind = ErrorKind.MISSING_OR_MALFORMED_FOOTPRINT
    values = fragment.values()
    if not values:
        raise BoardError(kind, "footprint without a name")
    # Quoted all-digit names such as "0603" parse as integers
    name = value_as_string(values[0])

    layer = _field_value(fragment, "layer")
    if layer is None:
        raise BoardError(kind, f"footprint {name!r} has no layer")

    try:
        at, rotation = _point(fragment, "at", kind, allow_angle=True)
    except BoardError as e:
        raise BoardError(kind, f"footprint {name!r}: {e.detail}") from e

    pads = []
    dropped = 0
    for child in fragment.sub_expressions():
        if child.name() != "pad":
            continue
        try:
            pads.append(build_pad(Tree(child.elements[1:]), at))
        except BoardError as e:
            dropped += 1
            logger.debug("Dropping pad in %s: %s", name, e)

    footprint = Footprint(
        name=name,
        layer=value_as_string(layer),
        at=at,
        pads=tuple(pads),
        rotation=rotation,
        reference=_footprint_reference(fragment),
    )
    return footprint, dropped


def build_wire(fragment: Tree) -> Wire:
    """Build a wire from a ``(segment ...)`` fragment."""
    kind = ErrorKind.MISSING_OR_MALFORMED_WIRE
    start, _ = _point(fragment, "start", kind)
    end, _ = _point(fragment, "end", kind)

    layer = _field_value(fragment, "layer")
    if layer is None:
        raise BoardError(kind, "segment without layer")

    net_id = _field_value(fragment, "net")
    if not isinstance(net_id, int):
        raise BoardError(kind, f"segment net is not an integer: {net_id!r}")

    width = as_number(_field_value(fragment, "width"))
    return Wire(
        net_id=net_id,
        layer_name=value_as_string(layer),
        start=start,
        end=end,
        width=width if width is not None else Wire.width,
    )


def build_arc(fragment: Tree) -> Arc:
    """Build an existing arc track from an ``(arc ...)`` fragment."""
    kind = ErrorKind.MISSING_OR_MALFORMED_WIRE
    start, _ = _point(fragment, "start", kind)
    mid, _ = _point(fragment, "mid", kind)
    end, _ = _point(fragment, "end", kind)

    layer = _field_value(fragment, "layer")
    if layer is None:
        raise BoardError(kind, "arc without layer")

    net_id = _field_value(fragment, "net")
    if not isinstance(net_id, int):
        raise BoardError(kind, f"arc net is not an integer: {net_id!r}")

    width = as_number(_field_value(fragment, "width"))
    return Arc(
        net_id=net_id,
        layer_name=value_as_string(layer),
        start=start,
        mid=mid,
        end=end,
        width=width if width is not None else Arc.width,
    )


def build_via(fragment: Tree) -> Via:
    """Build a via; it must name at least two layers."""
    kind = ErrorKind.MISSING_OR_MALFORMED_VIA
    at, _ = _point(fragment, "at", kind)

    layers = _string_values(_field(fragment, "layers"))
    if len(layers) < 2:
        raise BoardError(kind, f"via at {at} spans fewer than two layers")

    net_id = _field_value(fragment, "net")
    if not isinstance(net_id, int):
        raise BoardError(kind, f"via net is not an integer: {net_id!r}")

    size = as_number(_field_value(fragment, "size"))
    drill = as_number(_field_value(fragment, "drill"))
    return Via(
        net_id=net_id,
        at=at,
        layers=layers,
        size=size if size is not None else Via.size,
        drill=drill if drill is not None else Via.drill,
    )


def build_board(tree: Tree) -> BoardModel:
    """Build a complete ``BoardModel`` from a trivial-stripped tree.

    Args:
        tree: Parsed board, e.g. ``parse(text).remove_trivial()``

    Returns:
        The board model

    Raises:
        BoardError: If a required section is missing or malformed
    """
    general = build_general(tree)
    layers = build_layers(tree)
    nets, dropped_nets = build_nets(tree)

    footprints = []
    dropped_pads = 0
    for fragment in tree.get("footprint") or tree.get("module"):
        footprint, dropped = build_footprint(fragment)
        footprints.append(footprint)
        dropped_pads += dropped

    wires = tuple(build_wire(fragment) for fragment in tree.get("segment"))
    vias = tuple(build_via(fragment) for fragment in tree.get("via"))
    arcs = tuple(build_arc(fragment) for fragment in tree.get("arc"))
    if arcs:
        logger.warning(f"{len(arcs)} arc track(s) are blocked along their chords only")

    rotated = sum(1 for fp in footprints if fp.rotation)
    if rotated:
        logger.warning(
            f"{rotated} footprint(s) are rotated; pad positions use translation only"
        )

    if dropped_nets or dropped_pads:
        logger.info(f"Dropped {dropped_nets} net mention(s) and {dropped_pads} pad(s)")

    board = BoardModel(
        general=general,
        layers=layers,
        nets=nets,
        footprints=tuple(footprints),
        wires=wires,
        vias=vias,
        arcs=arcs,
        diagnostics=LoadDiagnostics(dropped_nets=dropped_nets, dropped_pads=dropped_pads),
    )
    logger.info(f"Loaded board: {board!r}")
    return board
