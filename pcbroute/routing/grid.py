"""
Routing Grid

Discretizes the board into a 3-D array of cells (x, y, routable layer) and
stamps existing copper into it:

- pads become PAD cells owned by the pad's net,
- existing wires, and arcs by their chords, are rasterized (Bresenham) as
  USER_WIRE,
- existing vias become USER_VIA on every layer they span.

Cells placed by the router itself are WIRE and VIA. USER cells are never
overwritten; PAD cells are never overwritten by routes.
"""

import logging
from enum import IntEnum
from typing import Iterator, List, NamedTuple, Optional, Sequence, Tuple

from ..board.errors import BoardError, ErrorKind
from ..board.model import BoardModel, Point, layer_matches
from .settings import RouteSettings

logger = logging.getLogger(__name__)


class CellState(IntEnum):
    """Occupancy of a grid cell."""
    FREE = 0
    PAD = 1
    WIRE = 2       # Placed by the router in this run
    VIA = 3
    USER_WIRE = 4  # Pre-existing copper from the board file
    USER_VIA = 5


class DiscreteCell(NamedTuple):
    """Integer grid coordinate. ``layer`` indexes the routable layers."""
    x: int
    y: int
    layer: int


def bresenham_line(x0: int, y0: int, x1: int, y1: int) -> Iterator[Tuple[int, int]]:
    """Integer cells on the line from (x0, y0) to (x1, y1), both inclusive."""
    dx = abs(x1 - x0)
    dy = -abs(y1 - y0)
    sx = 1 if x0 < x1 else -1
    sy = 1 if y0 < y1 else -1
    err = dx + dy

    while True:
        yield x0, y0
        if x0 == x1 and y0 == y1:
            return
        e2 = 2 * err
        if e2 >= dy:
            err += dy
            x0 += sx
        if e2 <= dx:
            err += dx
            y0 += sy


class RoutingGrid:
    """Flat-array occupancy grid for one routing run.

    Cells are stored layer-major: ``index = (layer * x_cells + x) * y_cells + y``.
    """

    def __init__(self, board: BoardModel, settings: RouteSettings):
        self.board = board
        self.settings = settings
        self.spacing = settings.grid_spacing
        self.origin_x = settings.origin_x
        self.origin_y = settings.origin_y

        self.layer_names: List[str] = board.routable_layer_names()
        self.layers = len(self.layer_names)
        self.x_cells, self.y_cells = settings.grid_dimensions()

        if self.layers and settings.default_layer >= self.layers:
            raise BoardError(
                ErrorKind.INVALID_SETTINGS,
                f"default_layer {settings.default_layer} but board has "
                f"{self.layers} routable layer(s)",
            )

        size = self.cell_count
        self._states = bytearray(size)
        self._owners: List[Optional[int]] = [None] * size

        self.off_grid_pads = 0
        self._stamp_pads()
        self._stamp_vias()
        self._stamp_wires()

        logger.info(
            f"Grid {self.x_cells}x{self.y_cells}x{self.layers} "
            f"(spacing {self.spacing}): {self.count(CellState.PAD)} pad, "
            f"{self.count(CellState.USER_WIRE)} wire, "
            f"{self.count(CellState.USER_VIA)} via cells"
        )
        if self.off_grid_pads:
            logger.warning(f"{self.off_grid_pads} pad placement(s) fall outside the grid")

    # --- Indexing ---

    @property
    def cell_count(self) -> int:
        return self.x_cells * self.y_cells * self.layers

    def in_bounds(self, cell: DiscreteCell) -> bool:
        return (0 <= cell.x < self.x_cells
                and 0 <= cell.y < self.y_cells
                and 0 <= cell.layer < self.layers)

    def index(self, cell: DiscreteCell) -> int:
        return (cell.layer * self.x_cells + cell.x) * self.y_cells + cell.y

    def cell_at(self, index: int) -> DiscreteCell:
        """Inverse of ``index``."""
        rest, y = divmod(index, self.y_cells)
        layer, x = divmod(rest, self.x_cells)
        return DiscreteCell(x, y, layer)

    # --- Coordinate conversion ---

    def _grid_xy(self, point: Point) -> Tuple[int, int]:
        """Unbounded integer grid coordinates of a world point."""
        fx = round((point[0] - self.origin_x) / self.spacing, 9)
        fy = round((point[1] - self.origin_y) / self.spacing, 9)
        # Floor keeps points just left of the origin out of column 0
        return int(fx // 1), int(fy // 1)

    def to_discrete(self, point: Point, layer: int) -> Optional[DiscreteCell]:
        """Cell containing a world point, or None if outside the grid."""
        x, y = self._grid_xy(point)
        cell = DiscreteCell(x, y, layer)
        return cell if self.in_bounds(cell) else None

    def to_world(self, cell: DiscreteCell) -> Point:
        """World position of a cell's corner."""
        return (self.origin_x + cell.x * self.spacing,
                self.origin_y + cell.y * self.spacing)

    def layer_index(self, layer_name: str) -> Optional[int]:
        try:
            return self.layer_names.index(layer_name)
        except ValueError:
            return None

    def layer_indices(self, patterns: Sequence[str]) -> List[int]:
        """Grid layers covered by any of the given layer patterns."""
        return [i for i, name in enumerate(self.layer_names)
                if any(layer_matches(p, name) for p in patterns)]

    # --- Cell access ---

    def get(self, cell: DiscreteCell) -> CellState:
        return CellState(self._states[self.index(cell)])

    def owner(self, cell: DiscreteCell) -> Optional[int]:
        return self._owners[self.index(cell)]

    def set(self, cell: DiscreteCell, state: CellState, net_id: Optional[int] = None):
        i = self.index(cell)
        self._states[i] = state
        self._owners[i] = None if state == CellState.FREE else net_id

    def is_free(self, cell: DiscreteCell) -> bool:
        return self._states[self.index(cell)] == CellState.FREE

    def is_passable(self, cell: DiscreteCell, net_id: int) -> bool:
        """Free cells, and pads of the routed net, can be entered."""
        i = self.index(cell)
        state = self._states[i]
        if state == CellState.FREE:
            return True
        return state == CellState.PAD and self._owners[i] == net_id

    def neighbours(self, cell: DiscreteCell) -> List[Tuple[DiscreteCell, bool]]:
        """In-bounds neighbours as (cell, changes_layer) pairs.

        Order: +x, -x, +y, -y, then the same (x, y) on every other layer in
        ascending order. A layer change is only usable if ``via_span`` is
        passable too.
        """
        x, y, layer = cell
        result = []
        for nx, ny in ((x + 1, y), (x - 1, y), (x, y + 1), (x, y - 1)):
            if 0 <= nx < self.x_cells and 0 <= ny < self.y_cells:
                result.append((DiscreteCell(nx, ny, layer), False))
        for other in range(self.layers):
            if other != layer:
                result.append((DiscreteCell(x, y, other), True))
        return result

    def via_span(self, a: DiscreteCell, b: DiscreteCell) -> List[DiscreteCell]:
        """Cells strictly between two layers at the same (x, y).

        A via from ``a`` to ``b`` drills through all of them.
        """
        low, high = sorted((a.layer, b.layer))
        return [DiscreteCell(a.x, a.y, layer) for layer in range(low + 1, high)]

    def can_change_layer(self, a: DiscreteCell, b: DiscreteCell, net_id: int) -> bool:
        return all(self.is_passable(cell, net_id) for cell in self.via_span(a, b))

    def count(self, state: CellState) -> int:
        return self._states.count(int(state))

    def cells_in_state(self, state: CellState) -> List[DiscreteCell]:
        return [self.cell_at(i) for i, s in enumerate(self._states) if s == state]

    # --- Commit ---

    def commit(self, path: Sequence[DiscreteCell], net_id: int) -> int:
        """Mark a found path as routed copper.

        Cells at a layer change, and the cells the via drills through on
        the layers in between, become VIA. Other cells become WIRE. Pad
        cells keep their state.

        Returns:
            Number of cells written
        """
        written = 0
        for i, cell in enumerate(path):
            if i > 0 and path[i - 1].layer != cell.layer:
                for between in self.via_span(path[i - 1], cell):
                    if self.get(between) != CellState.PAD:
                        self.set(between, CellState.VIA, net_id)
                        written += 1

            if self.get(cell) == CellState.PAD:
                continue
            via = ((i > 0 and path[i - 1].layer != cell.layer)
                   or (i + 1 < len(path) and path[i + 1].layer != cell.layer))
            self.set(cell, CellState.VIA if via else CellState.WIRE, net_id)
            written += 1
        return written

    # --- Stamping ---

    def _stamp_protected(self, cell: DiscreteCell, state: CellState, net_id: int):
        if self.get(cell) != CellState.PAD:
            self.set(cell, state, net_id)

    def _stamp_pads(self):
        for pad in self.board.pads():
            layers = self.layer_indices(pad.layers) or [self.settings.default_layer]
            for layer in layers:
                cell = self.to_discrete(pad.abs_at, layer)
                if cell is None:
                    self.off_grid_pads += 1
                    logger.debug(f"Pad {pad.number} at {pad.abs_at} is outside the grid")
                    continue
                self.set(cell, CellState.PAD, pad.net_id)

    def _stamp_vias(self):
        for via in self.board.vias:
            layers = self.layer_indices(via.layers)
            if not layers:
                continue
            for layer in range(min(layers), max(layers) + 1):
                cell = self.to_discrete(via.at, layer)
                if cell is not None:
                    self._stamp_protected(cell, CellState.USER_VIA, via.net_id)

    def _stamp_track(self, layer_name: str, start: Point, end: Point, net_id: int):
        layer = self.layer_index(layer_name)
        if layer is None:
            return
        x0, y0 = self._grid_xy(start)
        x1, y1 = self._grid_xy(end)
        for x, y in bresenham_line(x0, y0, x1, y1):
            cell = DiscreteCell(x, y, layer)
            if self.in_bounds(cell):
                self._stamp_protected(cell, CellState.USER_WIRE, net_id)

    def _stamp_wires(self):
        for wire in self.board.wires:
            self._stamp_track(wire.layer_name, wire.start, wire.end, wire.net_id)
        # Arcs are approximated by their two chords
        for arc in self.board.arcs:
            for start, end in arc.chords():
                self._stamp_track(arc.layer_name, start, end, arc.net_id)
