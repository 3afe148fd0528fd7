"""Grid geometry for the skirmish board.

Plain functions over :data:`Position` tuples: Manhattan distance,
neighbouring tiles and breadth-first reachability through empty tiles.
"""

from __future__ import annotations

from collections import deque
from typing import Iterable

from tactics_sim.sim.core.entities import Position

BOARD_WIDTH = 7
BOARD_HEIGHT = 7

# Neighbour order is part of the deterministic tie-breaking for forced
# movement, so it must stay fixed.
STEPS: tuple[Position, ...] = ((0, 1), (1, 0), (0, -1), (-1, 0))

# Player 1 deploys along row 0, player 2 along the far row.
STARTING_TILES: dict[int, tuple[Position, Position]] = {
    1: ((2, 0), (4, 0)),
    2: ((2, BOARD_HEIGHT - 1), (4, BOARD_HEIGHT - 1)),
}


def in_bounds(pos: Position) -> bool:
    x, y = pos
    return 0 <= x < BOARD_WIDTH and 0 <= y < BOARD_HEIGHT


def distance(a: Position, b: Position) -> int:
    """Manhattan distance between two tiles."""
    return abs(a[0] - b[0]) + abs(a[1] - b[1])


def neighbours(pos: Position) -> list[Position]:
    result: list[Position] = []
    for dx, dy in STEPS:
        nxt = (pos[0] + dx, pos[1] + dy)
        if in_bounds(nxt):
            result.append(nxt)
    return result


def reachable(
    start: Position,
    max_steps: int,
    blocked: Iterable[Position],
) -> list[Position]:
    """Return tiles reachable from *start* in at most *max_steps* steps.

    Movement passes only through tiles not in *blocked*; *start* itself is
    excluded from the result.  Tiles are returned sorted so callers see a
    stable order.
    """
    if max_steps <= 0:
        return []
    blocked_set = set(blocked)
    seen: dict[Position, int] = {start: 0}
    queue: deque[Position] = deque([start])
    while queue:
        current = queue.popleft()
        steps = seen[current]
        if steps == max_steps:
            continue
        for nxt in neighbours(current):
            if nxt in seen or nxt in blocked_set:
                continue
            seen[nxt] = steps + 1
            queue.append(nxt)
    return sorted(pos for pos in seen if pos != start)
