"""
Tests for net decomposition into two-pad connections.
"""

import pytest

from pcbroute.routing.spanning import minimum_spanning_tree, net_connections


class TestMinimumSpanningTree:
    def test_empty_input_is_rejected(self):
        with pytest.raises(ValueError):
            minimum_spanning_tree([])

    def test_single_point(self):
        assert minimum_spanning_tree([(0.0, 0.0)]) == []

    def test_two_points(self):
        assert minimum_spanning_tree([(0.0, 0.0), (3.0, 4.0)]) == [(0, 1)]

    def test_picks_short_edges(self):
        points = [(0.0, 0.0), (10.0, 0.0), (1.0, 0.0), (11.0, 0.0)]
        edges = minimum_spanning_tree(points)
        assert len(edges) == 3
        assert set(edges) == {(0, 2), (1, 3), (1, 2)}

    def test_ties_break_on_indices(self):
        # Square: all four sides have length 1
        points = [(0.0, 0.0), (1.0, 0.0), (0.0, 1.0), (1.0, 1.0)]
        assert minimum_spanning_tree(points) == [(0, 1), (0, 2), (1, 3)]

    def test_tree_size(self):
        points = [(float(i % 4), float(i // 4)) for i in range(12)]
        assert len(minimum_spanning_tree(points)) == 11


class TestNetConnections:
    def test_sample_board(self, sample_board):
        connections = net_connections(sample_board)
        assert [(c.net_id, c.length) for c in connections] == [(1, 6.0), (2, 6.0)]
        gnd = connections[0]
        assert gnd.source.abs_at == (2.0, 2.0)
        assert gnd.target.abs_at == (2.0, 8.0)

    def test_single_pad_nets_are_skipped(self, board_factory):
        board = board_factory([(0, 0, 1), (5, 5, 2), (6, 5, 2)])
        connections = net_connections(board)
        assert [c.net_id for c in connections] == [2]

    def test_sorted_by_length(self, board_factory):
        board = board_factory([(0, 0, 1), (9, 0, 1), (0, 5, 2), (2, 5, 2)])
        connections = net_connections(board)
        assert [c.net_id for c in connections] == [2, 1]
        assert connections[0].sort_key == (2.0, 2, 0, 1)

    def test_connection_count(self, board_factory):
        board = board_factory([(0, 0, 1), (2, 0, 1), (4, 0, 1), (6, 0, 1)])
        assert len(net_connections(board)) == 3

    def test_no_net_pads_are_not_connected(self, board_factory):
        board = board_factory([(0, 0, 0), (5, 0, 0), (0, 3, 1), (5, 3, 1)])
        assert [c.net_id for c in net_connections(board)] == [1]
