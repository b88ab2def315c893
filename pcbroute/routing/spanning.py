"""
Net Decomposition

Splits each multi-pad net into two-pad connections using a Euclidean
minimum spanning tree (Kruskal). Ties are broken on pad indices so the
decomposition is deterministic.
"""

import logging
import math
from dataclasses import dataclass
from typing import List, Sequence, Tuple

from ..board.model import BoardModel, Pad, Point

logger = logging.getLogger(__name__)

# KiCad assigns net 0 to pads that are not connected to anything
NO_NET = 0


@dataclass(frozen=True)
class Connection:
    """A two-pad routing request within one net.

    ``source_index`` and ``target_index`` are the pads' positions in the
    net's pad list.
    """
    net_id: int
    source: Pad
    target: Pad
    source_index: int
    target_index: int

    @property
    def length(self) -> float:
        return distance(self.source.abs_at, self.target.abs_at)

    @property
    def sort_key(self) -> Tuple[float, int, int, int]:
        return (self.length, self.net_id, self.source_index, self.target_index)


def distance(a: Point, b: Point) -> float:
    return math.hypot(b[0] - a[0], b[1] - a[1])


class _DisjointSet:
    def __init__(self, size: int):
        self.parent = list(range(size))

    def find(self, i: int) -> int:
        while self.parent[i] != i:
            self.parent[i] = self.parent[self.parent[i]]
            i = self.parent[i]
        return i

    def union(self, a: int, b: int) -> bool:
        ra, rb = self.find(a), self.find(b)
        if ra == rb:
            return False
        self.parent[max(ra, rb)] = min(ra, rb)
        return True


def minimum_spanning_tree(points: Sequence[Point]) -> List[Tuple[int, int]]:
    """
    Minimum spanning tree over points in the plane.

    Args:
        points: At least one point

    Returns:
        ``len(points) - 1`` edges as (i, j) index pairs with i < j, in the
        order Kruskal accepts them

    Raises:
        ValueError: If ``points`` is empty
    """
    if not points:
        raise ValueError("minimum_spanning_tree needs at least one point")

    edges = sorted(
        (distance(points[i], points[j]), i, j)
        for i in range(len(points))
        for j in range(i + 1, len(points))
    )

    forest = _DisjointSet(len(points))
    tree = []
    for _, i, j in edges:
        if forest.union(i, j):
            tree.append((i, j))
            if len(tree) == len(points) - 1:
                break
    return tree


def net_connections(board: BoardModel) -> List[Connection]:
    """All connection requests of the board, shortest first.

    Net 0 (KiCad's "no net") and nets with fewer than two pads produce
    nothing. The result is sorted by (length, net id, source index, target
    index).
    """
    connections = []
    for net_id, pads in board.pads_by_net().items():
        if net_id == NO_NET:
            logger.debug(f"Skipping {len(pads)} unconnected pad(s) on net 0")
            continue
        if len(pads) < 2:
            continue
        edges = minimum_spanning_tree([pad.abs_at for pad in pads])
        for i, j in edges:
            connections.append(Connection(net_id, pads[i], pads[j], i, j))
        logger.debug(f"Net {board.net_name(net_id)}: {len(pads)} pads, {len(edges)} connections")

    connections.sort(key=lambda c: c.sort_key)
    return connections
