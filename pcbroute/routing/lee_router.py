"""
Lee Wavefront Search

Cost-ordered wavefront expansion over the routing grid. Planar steps cost
1, a layer change costs the via penalty. The frontier is a heap keyed on
(cost, insertion sequence), so among equal-cost cells the one queued first
expands first and the search is deterministic.
"""

import heapq
import logging
from typing import Dict, Iterable, List, Optional

from .grid import DiscreteCell, RoutingGrid

logger = logging.getLogger(__name__)


def find_route(
    grid: RoutingGrid,
    sources: Iterable[DiscreteCell],
    targets: Iterable[DiscreteCell],
    net_id: int,
    via_penalty: float,
) -> Optional[List[DiscreteCell]]:
    """
    Find a cheapest path from any source cell to any target cell.

    Only cells that are free, or pads owned by ``net_id``, are entered. A
    layer change also needs every cell on the layers it drills through to
    be enterable. The grid is not modified.

    Args:
        grid: Routing grid
        sources: Start cells (all at cost 0)
        targets: Goal cells; reaching any one ends the search
        net_id: Net being routed
        via_penalty: Cost of moving to another layer at the same (x, y)

    Returns:
        Cells from a source to a target, both included, or None if the
        frontier is exhausted first
    """
    target_set = {grid.index(c) for c in targets}
    if not target_set:
        return None

    cost: Dict[int, float] = {}
    previous: Dict[int, Optional[int]] = {}
    frontier = []
    sequence = 0

    for cell in sources:
        i = grid.index(cell)
        if i in cost:
            continue
        cost[i] = 0.0
        previous[i] = None
        heapq.heappush(frontier, (0.0, sequence, i))
        sequence += 1

    expanded = 0
    while frontier:
        current_cost, _, i = heapq.heappop(frontier)
        if current_cost > cost[i]:
            continue
        expanded += 1

        if i in target_set:
            path = _backtrace(grid, previous, i)
            logger.debug(f"Net {net_id}: path of {len(path)} cells, cost {current_cost}, "
                         f"{expanded} cells expanded")
            return path

        current = grid.cell_at(i)
        for neighbour, changes_layer in grid.neighbours(current):
            if not grid.is_passable(neighbour, net_id):
                continue
            if changes_layer and not grid.can_change_layer(current, neighbour, net_id):
                continue
            n = grid.index(neighbour)
            new_cost = current_cost + (via_penalty if changes_layer else 1)
            if n not in cost or new_cost < cost[n]:
                cost[n] = new_cost
                previous[n] = i
                heapq.heappush(frontier, (new_cost, sequence, n))
                sequence += 1

    logger.debug(f"Net {net_id}: no path, {expanded} cells expanded")
    return None


def _backtrace(grid: RoutingGrid, previous: Dict[int, Optional[int]],
               end: int) -> List[DiscreteCell]:
    path = []
    i: Optional[int] = end
    while i is not None:
        path.append(grid.cell_at(i))
        i = previous[i]
    path.reverse()
    return path
