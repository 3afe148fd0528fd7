"""Tests for grid geometry helpers."""

from __future__ import annotations

from tactics_sim.sim.engine.board import (
    BOARD_HEIGHT,
    BOARD_WIDTH,
    STARTING_TILES,
    distance,
    in_bounds,
    neighbours,
    reachable,
)


class TestGeometry:
    def test_manhattan_distance(self):
        assert distance((0, 0), (3, 4)) == 7
        assert distance((2, 6), (2, 0)) == 6

    def test_in_bounds(self):
        assert in_bounds((0, 0))
        assert in_bounds((BOARD_WIDTH - 1, BOARD_HEIGHT - 1))
        assert not in_bounds((-1, 0))
        assert not in_bounds((0, BOARD_HEIGHT))

    def test_corner_has_two_neighbours(self):
        assert neighbours((0, 0)) == [(0, 1), (1, 0)]

    def test_starting_tiles_are_far_apart(self):
        for a in STARTING_TILES[1]:
            for b in STARTING_TILES[2]:
                assert distance(a, b) >= BOARD_HEIGHT - 1


class TestReachable:
    def test_single_step(self):
        assert reachable((0, 0), 1, []) == [(0, 1), (1, 0)]

    def test_zero_steps(self):
        assert reachable((3, 3), 0, []) == []

    def test_blocked_tiles_are_not_entered_or_crossed(self):
        assert reachable((0, 0), 2, [(0, 1)]) == [(1, 0), (1, 1), (2, 0)]

    def test_excludes_start_and_is_sorted(self):
        tiles = reachable((3, 3), 2, [])
        assert (3, 3) not in tiles
        assert tiles == sorted(tiles)
        assert len(tiles) == 12
