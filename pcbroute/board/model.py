"""
Board Model

Typed, immutable representation of a KiCad board as needed for routing:
layers, nets, footprints with their pads, and existing copper (wires,
arcs and vias). Instances are produced once by the builder and never mutated; the
router derives new boards with ``BoardModel.with_routes``.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Dict, List, Optional, Sequence, Set, Tuple

Point = Tuple[float, float]


class LayerKind(Enum):
    """Layer classes. Only signal layers take part in routing."""
    USER = "user"
    SIGNAL = "signal"


def layer_matches(pattern: str, name: str) -> bool:
    """Check a pad/via layer pattern against a concrete layer name.

    Supports exact names, ``*.Cu`` style wildcards and the legacy
    ``F&B.Cu`` shorthand for both outer copper layers.
    """
    if pattern == name:
        return True
    if pattern.startswith("*."):
        return name.endswith(pattern[1:])
    if pattern == "F&B.Cu":
        return name in ("F.Cu", "B.Cu")
    return False


@dataclass(frozen=True)
class General:
    """Board-wide properties from the ``general`` section."""
    thickness: float


@dataclass(frozen=True)
class Layer:
    """A declared board layer, e.g. ``(0 "F.Cu" signal)``."""
    id: int
    name: str
    kind: LayerKind
    attrib: str = ""

    @property
    def routable(self) -> bool:
        return self.kind == LayerKind.SIGNAL


@dataclass(frozen=True)
class Net:
    """An electrical net."""
    id: int
    name: str


@dataclass(frozen=True)
class Pad:
    """A footprint pad.

    ``at`` is relative to the footprint origin; ``abs_at`` is the board
    position (footprint translation only, rotation is not applied).
    """
    layers: Tuple[str, ...]
    at: Point
    abs_at: Point
    number: str = ""
    net_id: Optional[int] = None
    rotation: float = 0.0

    def on_layer(self, layer_name: str) -> bool:
        """True if any of the pad's layer patterns covers ``layer_name``."""
        return any(layer_matches(p, layer_name) for p in self.layers)


@dataclass(frozen=True)
class Footprint:
    """A placed component footprint."""
    name: str
    layer: str
    at: Point
    pads: Tuple[Pad, ...] = ()
    rotation: float = 0.0
    reference: str = ""


@dataclass(frozen=True)
class Wire:
    """A copper track segment."""
    net_id: int
    layer_name: str
    start: Point
    end: Point
    width: float = 0.25

    @property
    def length(self) -> float:
        dx = self.end[0] - self.start[0]
        dy = self.end[1] - self.start[1]
        return (dx * dx + dy * dy) ** 0.5


@dataclass(frozen=True)
class Arc:
    """A curved copper track through ``start``, ``mid`` and ``end``.

    Arcs are kept as obstacles only; the router never emits them.
    """
    net_id: int
    layer_name: str
    start: Point
    mid: Point
    end: Point
    width: float = 0.25

    def chords(self) -> Tuple[Tuple[Point, Point], Tuple[Point, Point]]:
        return (self.start, self.mid), (self.mid, self.end)


@dataclass(frozen=True)
class Via:
    """A via joining two or more copper layers."""
    net_id: int
    at: Point
    layers: Tuple[str, ...]
    size: float = 0.6
    drill: float = 0.3


@dataclass(frozen=True)
class LoadDiagnostics:
    """Counts of repeatable items dropped while loading.

    Malformed net mentions and pads are skipped rather than failing the
    load; these counters keep the skipped items visible.
    """
    dropped_nets: int = 0
    dropped_pads: int = 0

    @property
    def total_dropped(self) -> int:
        return self.dropped_nets + self.dropped_pads


@dataclass(frozen=True)
class BoardModel:
    """
    Routing view of a KiCad board.

    Example:
        >>> board = BoardModel.load(tree)
        >>> board.routable_layers()
        2
    """
    general: General
    layers: Tuple[Layer, ...]
    nets: Tuple[Net, ...] = ()
    footprints: Tuple[Footprint, ...] = ()
    wires: Tuple[Wire, ...] = ()
    vias: Tuple[Via, ...] = ()
    arcs: Tuple[Arc, ...] = ()
    diagnostics: LoadDiagnostics = field(default_factory=LoadDiagnostics)

    @classmethod
    def load(cls, tree) -> "BoardModel":
        """Build a board from a parsed (trivial-stripped) tree.

        Raises:
            BoardError: If a required section is missing or malformed
        """
        from .builder import build_board
        return build_board(tree)

    # --- Layers ---

    def routable_layers(self) -> int:
        """Number of signal layers available to the router."""
        return sum(1 for layer in self.layers if layer.routable)

    def routable_layer_names(self) -> List[str]:
        """Signal layer names in declaration order (= grid layer index)."""
        return [layer.name for layer in self.layers if layer.routable]

    def get_layer_id(self, name: str) -> Optional[int]:
        """KiCad id of the first layer called ``name``."""
        for layer in self.layers:
            if layer.name == name:
                return layer.id
        return None

    def get_layer(self, name: str) -> Optional[Layer]:
        for layer in self.layers:
            if layer.name == name:
                return layer
        return None

    # --- Nets and pads ---

    def get_net(self, net_id: int) -> Optional[Net]:
        """First declared net with this id."""
        for net in self.nets:
            if net.id == net_id:
                return net
        return None

    def net_name(self, net_id: Optional[int]) -> str:
        net = self.get_net(net_id) if net_id is not None else None
        return net.name if net else f"net-{net_id}"

    def pads(self) -> List[Pad]:
        """All pads of all footprints, in declaration order."""
        return [pad for fp in self.footprints for pad in fp.pads]

    def pads_by_net(self) -> Dict[int, List[Pad]]:
        """Pads grouped by net id; pads without a net are skipped."""
        grouped: Dict[int, List[Pad]] = {}
        for pad in self.pads():
            if pad.net_id is None:
                continue
            grouped.setdefault(pad.net_id, []).append(pad)
        return grouped

    def undeclared_net_ids(self) -> Set[int]:
        """Net ids used by pads or existing copper but never declared."""
        declared = {net.id for net in self.nets}
        used = {pad.net_id for pad in self.pads() if pad.net_id is not None}
        used.update(wire.net_id for wire in self.wires)
        used.update(via.net_id for via in self.vias)
        used.update(arc.net_id for arc in self.arcs)
        return used - declared

    # --- Derivation ---

    def with_routes(self, wires: Sequence[Wire], vias: Sequence[Via]) -> "BoardModel":
        """New board with extra wires and vias layered on top."""
        return replace(
            self,
            wires=self.wires + tuple(wires),
            vias=self.vias + tuple(vias),
        )

    def summary(self) -> Dict:
        """Board statistics for reporting."""
        return {
            "layer_count": len(self.layers),
            "routable_layers": self.routable_layers(),
            "net_count": len(self.nets),
            "footprint_count": len(self.footprints),
            "pad_count": len(self.pads()),
            "wire_count": len(self.wires),
            "via_count": len(self.vias),
            "arc_count": len(self.arcs),
            "dropped_nets": self.diagnostics.dropped_nets,
            "dropped_pads": self.diagnostics.dropped_pads,
        }

    def __repr__(self) -> str:
        return (f"BoardModel(layers={len(self.layers)}, "
                f"nets={len(self.nets)}, "
                f"footprints={len(self.footprints)}, "
                f"wires={len(self.wires)}, vias={len(self.vias)})")
