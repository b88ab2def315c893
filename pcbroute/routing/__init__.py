"""Grid-based autorouter.

- RouteSettings / load_settings: grid extents and search parameters
- RoutingGrid: discretized occupancy grid with stamped obstacles
- minimum_spanning_tree / net_connections: net decomposition
- find_route: Lee wavefront search
- route: multi-pass routing of a whole board
"""

from .settings import RouteSettings, load_settings
from .grid import CellState, DiscreteCell, RoutingGrid, bresenham_line
from .spanning import Connection, minimum_spanning_tree, net_connections
from .lee_router import find_route
from .engine import (
    RouteResult,
    RoutedConnection,
    merge_segments,
    path_geometry,
    route,
)

__all__ = [
    # Settings
    "RouteSettings",
    "load_settings",
    # Grid
    "CellState",
    "DiscreteCell",
    "RoutingGrid",
    "bresenham_line",
    # Decomposition
    "Connection",
    "minimum_spanning_tree",
    "net_connections",
    # Search
    "find_route",
    # Engine
    "RouteResult",
    "RoutedConnection",
    "merge_segments",
    "path_geometry",
    "route",
]
