"""Scent propagation over a grid layout.

Every goal and pit cell emits a signal that decays with walking distance:

    signal(d) = strength / (1 + d)

where d is the shortest wall-avoiding path length from the emitter, found by
breadth-first search. Signals from all emitters superpose additively, so the
combined field is positive near goals and negative near pits. Cells an
emitter cannot reach get nothing from it.
"""

import logging
from collections import deque
from typing import List, Optional, Sequence, Tuple

import numpy as np

from .neighbors import check_coord, get_neighbors, in_bounds, is_wall, validate_layout
from .types import ACTION_DELTAS, CELL_GOAL, CELL_PIT, Emitter

logger = logging.getLogger(__name__)

GOAL_STRENGTH = 1.0
PIT_STRENGTH = -1.0


def emitters_from_layout(layout: Sequence[Sequence[int]]) -> List[Emitter]:
    """Goal cells emit +1.0, pit cells emit -1.0, scanned row by row."""
    emitters = []
    for r, row in enumerate(layout):
        for c, cell in enumerate(row):
            if cell == CELL_GOAL:
                emitters.append(Emitter(r, c, GOAL_STRENGTH))
            elif cell == CELL_PIT:
                emitters.append(Emitter(r, c, PIT_STRENGTH))
    return emitters


def bfs_distances(layout: Sequence[Sequence[int]], start_row: int, start_col: int) -> np.ndarray:
    """
    Path distances from a single cell over the 4-connected walkable graph.

    Returns:
        Integer array shaped like the layout, -1 where unreachable
    """
    check_coord(layout, start_row, start_col)
    rows, cols = len(layout), len(layout[0])
    dist = np.full((rows, cols), -1, dtype=np.int64)
    dist[start_row, start_col] = 0
    queue = deque([(start_row, start_col)])

    while queue:
        coord = queue.popleft()
        d = dist[coord]
        for n_row, n_col in get_neighbors(layout, coord):
            if dist[n_row, n_col] >= 0:
                continue
            dist[n_row, n_col] = d + 1
            queue.append((n_row, n_col))

    return dist


class SignalField:
    """
    Cached scent field for a static layout.

    Built eagerly on construction. Readers may share one instance freely;
    only ``compute`` and ``replace_layout`` write to it.
    """

    def __init__(self, layout: Sequence[Sequence[int]], emitters: Optional[Sequence[Emitter]] = None):
        validate_layout(layout)
        self.layout: Tuple[Tuple[int, ...], ...] = tuple(tuple(row) for row in layout)
        self.rows = len(self.layout)
        self.cols = len(self.layout[0])
        if emitters is None:
            emitters = emitters_from_layout(self.layout)
        self.emitters: Tuple[Emitter, ...] = tuple(emitters)
        for emitter in self.emitters:
            check_coord(self.layout, emitter.row, emitter.col)
        self.field = np.zeros((self.rows, self.cols), dtype=np.float64)
        self.compute()

    def compute(self) -> None:
        """Recompute the full field from all emitters."""
        self.field.fill(0.0)

        for emitter in self.emitters:
            dist = bfs_distances(self.layout, emitter.row, emitter.col)
            reachable = dist >= 0
            self.field[reachable] += emitter.strength / (1.0 + dist[reachable])

        logger.debug("Signal field computed for %d emitters on %dx%d grid",
                     len(self.emitters), self.rows, self.cols)

    def replace_layout(self, layout: Sequence[Sequence[int]]) -> None:
        """Swap in a new layout of any size and rebuild emitters and field."""
        validate_layout(layout)
        self.layout = tuple(tuple(row) for row in layout)
        self.rows = len(self.layout)
        self.cols = len(self.layout[0])
        self.emitters = tuple(emitters_from_layout(self.layout))
        self.field = np.zeros((self.rows, self.cols), dtype=np.float64)
        self.compute()

    def read(self, row: int, col: int) -> float:
        """Combined signal at a cell."""
        check_coord(self.layout, row, col)
        return float(self.field[row, col])

    def gradient(self, row: int, col: int) -> List[float]:
        """
        Signal in each of the 4 neighboring cells, ordered [up, right, down, left].

        A neighbor off the grid or behind a wall reads as the current cell's own
        value, so obstacles look flat rather than attractive or repulsive.
        """
        check_coord(self.layout, row, col)
        here = float(self.field[row, col])
        result = []
        for d_row, d_col in ACTION_DELTAS:
            n_row, n_col = row + d_row, col + d_col
            if not in_bounds(self.layout, n_row, n_col) or is_wall(self.layout, n_row, n_col):
                result.append(here)
            else:
                result.append(float(self.field[n_row, n_col]))
        return result

    def as_array(self) -> np.ndarray:
        """Read-only copy of the field for overlays."""
        snapshot = self.field.copy()
        snapshot.setflags(write=False)
        return snapshot
