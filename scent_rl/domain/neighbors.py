"""Neighbor generation and bounds checks shared by the field and the environment."""

from typing import List, Optional, Sequence
from .types import ACTION_DELTAS, CELL_KINDS, CELL_WALL, Coord


def validate_layout(layout: Sequence[Sequence[int]]) -> None:
    """
    Check that a layout is a non-empty rectangle of known cell codes.

    Raises:
        ValueError: If the layout is empty, ragged or holds unknown codes
    """
    if not layout or not layout[0]:
        raise ValueError("Layout must have at least one row and one column")

    cols = len(layout[0])
    for r, row in enumerate(layout):
        if len(row) != cols:
            raise ValueError(f"Row {r} has {len(row)} cells, expected {cols}")
        for c, cell in enumerate(row):
            if cell not in CELL_KINDS:
                raise ValueError(f"Unknown cell code {cell!r} at ({r}, {c})")


def in_bounds(layout: Sequence[Sequence[int]], row: int, col: int) -> bool:
    """Check if (row, col) lies inside the layout."""
    return 0 <= row < len(layout) and 0 <= col < len(layout[0])


def is_wall(layout: Sequence[Sequence[int]], row: int, col: int) -> bool:
    return layout[row][col] == CELL_WALL


def check_coord(layout: Sequence[Sequence[int]], row: int, col: int) -> None:
    """Fail fast on coordinates outside the grid."""
    if not in_bounds(layout, row, col):
        raise IndexError(
            f"Coordinate ({row}, {col}) is out of bounds for a "
            f"{len(layout)}x{len(layout[0])} grid"
        )


def step_target(layout: Sequence[Sequence[int]], coord: Coord, action: int) -> Optional[Coord]:
    """
    Cell reached by moving one step from coord in the given direction.
    Returns None when the move leaves the grid or runs into a wall.
    """
    d_row, d_col = ACTION_DELTAS[action]
    row, col = coord[0] + d_row, coord[1] + d_col

    if not in_bounds(layout, row, col):
        return None
    if is_wall(layout, row, col):
        return None
    return (row, col)


def get_neighbors(layout: Sequence[Sequence[int]], coord: Coord) -> List[Coord]:
    """Walkable 4-connected neighbors of coord, in action order."""
    neighbors = []
    for action in range(len(ACTION_DELTAS)):
        target = step_target(layout, coord, action)
        if target is not None:
            neighbors.append(target)
    return neighbors
