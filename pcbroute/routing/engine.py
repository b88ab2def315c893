"""
Routing Engine

Routes every multi-pad net of a board on a fresh ``RoutingGrid``:

1. Decompose nets into two-pad connections (minimum spanning tree).
2. For each connection, shortest first, run the Lee wavefront search and
   commit the path to the grid on success.
3. Connections that fail are deferred and retried in later passes, up to
   ``max_passes``. Nothing is ripped up.
4. Convert committed paths back into board wires and vias.

Unroutable connections never raise; they are reported in
``RouteResult.unrouted``.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Sequence, Tuple

from ..board.model import BoardModel, Pad, Point, Via, Wire
from .grid import CellState, DiscreteCell, RoutingGrid
from .lee_router import find_route
from .settings import RouteSettings
from .spanning import Connection, net_connections

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RoutedConnection:
    """A connection that was routed, with the copper it produced."""
    connection: Connection
    path: Tuple[DiscreteCell, ...]
    wires: Tuple[Wire, ...]
    vias: Tuple[Via, ...]
    pass_number: int = 1


@dataclass
class RouteResult:
    """Outcome of ``route``.

    ``board`` is the input board with the new wires and vias appended.
    """
    board: BoardModel
    routed: List[RoutedConnection] = field(default_factory=list)
    unrouted: List[Connection] = field(default_factory=list)
    passes: int = 0
    attempts: Dict[Connection, int] = field(default_factory=dict)

    @property
    def success(self) -> bool:
        return not self.unrouted

    @property
    def completion_rate(self) -> float:
        total = len(self.routed) + len(self.unrouted)
        return len(self.routed) / total if total else 1.0

    def new_wires(self) -> List[Wire]:
        return [w for rc in self.routed for w in rc.wires]

    def new_vias(self) -> List[Via]:
        return [v for rc in self.routed for v in rc.vias]

    def summary(self) -> Dict:
        return {
            "routed": len(self.routed),
            "unrouted": len(self.unrouted),
            "passes": self.passes,
            "wires": len(self.new_wires()),
            "vias": len(self.new_vias()),
            "completion_rate": self.completion_rate,
        }


def _direction(a: DiscreteCell, b: DiscreteCell) -> Tuple[int, int]:
    return ((b.x > a.x) - (b.x < a.x), (b.y > a.y) - (b.y < a.y))


def merge_segments(cells: Sequence[DiscreteCell],
                   points: Sequence[Point]) -> List[Tuple[Point, Point]]:
    """Merge a same-layer run of cells into straight segments.

    ``points`` are the world positions of ``cells``. A new segment starts
    wherever the step direction changes.
    """
    if len(cells) < 2:
        return []

    segments = []
    start = 0
    direction = _direction(cells[0], cells[1])
    for k in range(2, len(cells)):
        step = _direction(cells[k - 1], cells[k])
        if step != direction:
            segments.append((points[start], points[k - 1]))
            start = k - 1
            direction = step
    segments.append((points[start], points[-1]))
    return [(a, b) for a, b in segments if a != b]


def path_geometry(
    grid: RoutingGrid,
    path: Sequence[DiscreteCell],
    net_id: int,
    source: Pad,
    target: Pad,
) -> Tuple[List[Wire], List[Via]]:
    """
    Convert a committed path into board wires and vias.

    Every cell at a pad's (x, y), on any layer, is snapped to the exact pad
    position, so a via on a pad cell and the wires meeting it share one
    point. Other cells sit on their corner. A layer change becomes a via
    spanning the two layers, unless both cells are pads of the net (a
    through-hole pad already joins them).
    """
    settings = grid.settings
    snapped: Dict[Tuple[int, int], Point] = {}
    for pad in (target, source):
        cell = grid.to_discrete(pad.abs_at, path[0].layer)
        if cell is not None:
            snapped[(cell.x, cell.y)] = pad.abs_at
    points = [snapped.get((cell.x, cell.y), grid.to_world(cell)) for cell in path]

    wires: List[Wire] = []
    vias: List[Via] = []

    run_start = 0
    for k in range(1, len(path) + 1):
        at_end = k == len(path)
        if not at_end and path[k].layer == path[k - 1].layer:
            continue

        layer_name = grid.layer_names[path[run_start].layer]
        for start, end in merge_segments(path[run_start:k], points[run_start:k]):
            wires.append(Wire(net_id, layer_name, start, end, settings.trace_width))

        if not at_end:
            below, above = path[k - 1], path[k]
            both_pads = all(grid.get(c) == CellState.PAD and grid.owner(c) == net_id
                            for c in (below, above))
            if not both_pads:
                low, high = sorted((below.layer, above.layer))
                vias.append(Via(
                    net_id=net_id,
                    at=points[k - 1],
                    layers=(grid.layer_names[low], grid.layer_names[high]),
                    size=settings.via_size,
                    drill=settings.via_drill,
                ))
        run_start = k

    return wires, vias


def _pad_cells(grid: RoutingGrid, pad: Pad, net_id: int) -> List[DiscreteCell]:
    """Grid cells of a pad that the net may use."""
    layers = grid.layer_indices(pad.layers) or [grid.settings.default_layer]
    cells = []
    for layer in layers:
        cell = grid.to_discrete(pad.abs_at, layer)
        if cell is not None and grid.is_passable(cell, net_id):
            cells.append(cell)
    return cells


def route(board: BoardModel, settings: RouteSettings) -> RouteResult:
    """
    Route all unconnected nets of a board.

    Args:
        board: Loaded board
        settings: Grid extents and search parameters

    Returns:
        RouteResult with the routed board and any unrouted connections

    Raises:
        BoardError: INVALID_SETTINGS if the settings are unusable
    """
    settings.validate()
    grid = RoutingGrid(board, settings)

    connections = net_connections(board)
    logger.info(f"Routing {len(connections)} connection(s) on {grid.layers} layer(s)")

    result = RouteResult(board=board)
    endpoints: Dict[Connection, Tuple[List[DiscreteCell], List[DiscreteCell]]] = {}
    pending: List[Connection] = []
    off_grid: List[Connection] = []

    for connection in connections:
        sources = _pad_cells(grid, connection.source, connection.net_id)
        targets = _pad_cells(grid, connection.target, connection.net_id)
        if not sources or not targets:
            logger.debug(f"Net {board.net_name(connection.net_id)}: pad off grid, not routed")
            off_grid.append(connection)
            continue
        endpoints[connection] = (sources, targets)
        pending.append(connection)

    for pass_number in range(1, settings.max_passes + 1):
        if not pending:
            break
        result.passes = pass_number
        deferred = []

        for connection in pending:
            result.attempts[connection] = result.attempts.get(connection, 0) + 1
            sources, targets = endpoints[connection]
            path = find_route(grid, sources, targets, connection.net_id, settings.via_penalty)
            if path is None:
                deferred.append(connection)
                continue

            grid.commit(path, connection.net_id)
            wires, vias = path_geometry(grid, path, connection.net_id,
                                        connection.source, connection.target)
            result.routed.append(RoutedConnection(
                connection=connection,
                path=tuple(path),
                wires=tuple(wires),
                vias=tuple(vias),
                pass_number=pass_number,
            ))

        logger.info(f"Pass {pass_number}: routed {len(pending) - len(deferred)}, "
                    f"deferred {len(deferred)}")
        pending = deferred

    result.unrouted = sorted(off_grid + pending, key=lambda c: c.sort_key)
    result.board = board.with_routes(result.new_wires(), result.new_vias())

    logger.info(
        f"Routing complete: {len(result.routed)}/{len(connections)} connections, "
        f"{len(result.new_wires())} wires, {len(result.new_vias())} vias"
    )
    if result.unrouted:
        logger.warning(f"{len(result.unrouted)} connection(s) left unrouted")
    return result

