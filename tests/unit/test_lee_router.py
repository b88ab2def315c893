"""
Tests for the Lee wavefront search.

Tests cover:
- Straight and detoured paths
- Blocking by foreign pads and user copper
- Layer changes and via penalty
- Determinism
"""

import pytest

from pcbroute.board import Wire
from pcbroute.routing.grid import CellState, DiscreteCell, RoutingGrid
from pcbroute.routing.lee_router import find_route
from pcbroute.routing.settings import RouteSettings


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def settings() -> RouteSettings:
    """A 10 x 10 grid at 1 mm spacing."""
    return RouteSettings(board_width=10.0, board_height=10.0, grid_spacing=1.0)


def cell(x, y, layer=0) -> DiscreteCell:
    return DiscreteCell(x, y, layer)


# =============================================================================
# Single layer
# =============================================================================

class TestSingleLayer:
    def test_straight_path(self, board_factory, settings):
        grid = RoutingGrid(board_factory([(0, 0, 1), (5, 0, 1)]), settings)
        path = find_route(grid, [cell(0, 0)], [cell(5, 0)], 1, settings.via_penalty)
        assert path == [cell(x, 0) for x in range(6)]

    def test_same_source_and_target(self, board_factory, settings):
        grid = RoutingGrid(board_factory([(3, 3, 1)]), settings)
        assert find_route(grid, [cell(3, 3)], [cell(3, 3)], 1, 10.0) == [cell(3, 3)]

    def test_no_targets(self, board_factory, settings):
        grid = RoutingGrid(board_factory([(0, 0, 1)]), settings)
        assert find_route(grid, [cell(0, 0)], [], 1, 10.0) is None

    def test_detours_around_user_wire(self, board_factory, settings):
        wall = Wire(net_id=9, layer_name="F.Cu", start=(3.0, 0.0), end=(3.0, 8.0))
        grid = RoutingGrid(board_factory([(0, 0, 1), (5, 0, 1)], wires=[wall]), settings)
        path = find_route(grid, [cell(0, 0)], [cell(5, 0)], 1, 10.0)
        assert path is not None
        assert path[0] == cell(0, 0)
        assert path[-1] == cell(5, 0)
        # Around the end of the wall at y=9
        assert cell(3, 9) in path
        assert all(grid.get(c) != CellState.USER_WIRE for c in path)
        # Shortest detour: 5 across plus 9 up and 9 down
        assert len(path) == 5 + 9 + 9 + 1

    def test_full_wall_blocks(self, board_factory, settings):
        wall = Wire(net_id=9, layer_name="F.Cu", start=(3.0, 0.0), end=(3.0, 9.0))
        grid = RoutingGrid(board_factory([(0, 0, 1), (5, 0, 1)], wires=[wall]), settings)
        assert find_route(grid, [cell(0, 0)], [cell(5, 0)], 1, 10.0) is None

    def test_foreign_pad_blocks(self, board_factory):
        settings = RouteSettings(board_width=3.0, board_height=1.0, grid_spacing=1.0)
        grid = RoutingGrid(board_factory([(0, 0, 1), (1, 0, 2), (2, 0, 1)]), settings)
        assert find_route(grid, [cell(0, 0)], [cell(2, 0)], 1, 10.0) is None

    def test_own_pad_is_passable(self, board_factory):
        settings = RouteSettings(board_width=3.0, board_height=1.0, grid_spacing=1.0)
        grid = RoutingGrid(board_factory([(0, 0, 1), (1, 0, 1), (2, 0, 1)]), settings)
        path = find_route(grid, [cell(0, 0)], [cell(2, 0)], 1, 10.0)
        assert path == [cell(0, 0), cell(1, 0), cell(2, 0)]

    def test_search_does_not_modify_grid(self, board_factory, settings):
        grid = RoutingGrid(board_factory([(0, 0, 1), (5, 0, 1)]), settings)
        find_route(grid, [cell(0, 0)], [cell(5, 0)], 1, 10.0)
        assert grid.count(CellState.FREE) == grid.cell_count - 2


# =============================================================================
# Multiple layers
# =============================================================================

class TestLayers:
    def test_changes_layer_around_wall(self, board_factory, settings):
        wall = Wire(net_id=9, layer_name="F.Cu", start=(3.0, 0.0), end=(3.0, 9.0))
        board = board_factory([(0, 0, 1), (5, 0, 1)], layer_names=("F.Cu", "B.Cu"),
                              wires=[wall])
        grid = RoutingGrid(board, settings)
        path = find_route(grid, [cell(0, 0)], [cell(5, 0)], 1, 2.0)
        assert path is not None
        layers = [c.layer for c in path]
        assert layers[0] == 0 and layers[-1] == 0
        assert 1 in layers

    def test_via_penalty_prefers_detour(self, board_factory, settings):
        wall = Wire(net_id=9, layer_name="F.Cu", start=(3.0, 0.0), end=(3.0, 1.0))
        board = board_factory([(0, 0, 1), (5, 0, 1)], layer_names=("F.Cu", "B.Cu"),
                              wires=[wall])
        grid = RoutingGrid(board, settings)

        expensive = find_route(grid, [cell(0, 0)], [cell(5, 0)], 1, 100.0)
        assert all(c.layer == 0 for c in expensive)

        cheap = find_route(grid, [cell(0, 0)], [cell(5, 0)], 1, 1.0)
        assert any(c.layer == 1 for c in cheap)

    def test_multiple_sources(self, board_factory, settings):
        board = board_factory([(0, 0, 1), (5, 0, 1)], layer_names=("F.Cu", "B.Cu"),
                              pad_layers=("*.Cu",))
        grid = RoutingGrid(board, settings)
        path = find_route(grid, [cell(0, 0, 0), cell(0, 0, 1)],
                          [cell(5, 0, 0), cell(5, 0, 1)], 1, 10.0)
        assert len(path) == 6
        assert len({c.layer for c in path}) == 1


class TestViaSpan:
    """A via between non-adjacent layers drills through the layers between."""

    LAYERS = ("F.Cu", "In1.Cu", "B.Cu")

    @pytest.fixture
    def single_cell(self) -> RouteSettings:
        return RouteSettings(board_width=1.0, board_height=1.0, grid_spacing=1.0)

    def test_skips_free_inner_layer(self, board_factory, single_cell):
        grid = RoutingGrid(board_factory([], layer_names=self.LAYERS), single_cell)
        path = find_route(grid, [cell(0, 0, 0)], [cell(0, 0, 2)], 1, 10.0)
        assert path == [cell(0, 0, 0), cell(0, 0, 2)]

    def test_blocked_inner_layer(self, board_factory, single_cell):
        inner = Wire(net_id=9, layer_name="In1.Cu", start=(0.0, 0.0), end=(0.0, 0.0))
        board = board_factory([], layer_names=self.LAYERS, wires=[inner])
        grid = RoutingGrid(board, single_cell)
        assert find_route(grid, [cell(0, 0, 0)], [cell(0, 0, 2)], 1, 10.0) is None


class TestDeterminism:
    def test_identical_runs(self, board_factory, settings):
        board = board_factory([(1, 1, 1), (7, 6, 1)], layer_names=("F.Cu", "B.Cu"))
        paths = []
        for _ in range(3):
            grid = RoutingGrid(board, settings)
            paths.append(find_route(grid, [cell(1, 1)], [cell(7, 6)], 1, 10.0))
        assert paths[0] == paths[1] == paths[2]
        assert len(paths[0]) == 6 + 5 + 1
