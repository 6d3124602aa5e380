"""Grid factory for preset, parsed and randomized layouts."""

from typing import List, Optional, Sequence, Tuple

from ..domain.neighbors import validate_layout
from ..domain.signal_field import bfs_distances
from ..domain.types import CELL_EMPTY, CELL_GOAL, CELL_PIT, CELL_WALL, Coord, Layout
from .rng import SeededRNG, default_rng

CELL_CHARS = {
    ".": CELL_EMPTY,
    "W": CELL_WALL,
    "#": CELL_WALL,
    "G": CELL_GOAL,
    "P": CELL_PIT,
}
START_CHAR = "A"
CELL_SYMBOLS = {CELL_EMPTY: ".", CELL_WALL: "W", CELL_GOAL: "G", CELL_PIT: "P"}

# . . . . . G
# . W W . . .
# . . . . W .
# . . P . . .
# . W . . W .
# A . . . . .
DEFAULT_LAYOUT: Tuple[Tuple[int, ...], ...] = (
    (0, 0, 0, 0, 0, 2),
    (0, 1, 1, 0, 0, 0),
    (0, 0, 0, 0, 1, 0),
    (0, 0, 3, 0, 0, 0),
    (0, 1, 0, 0, 1, 0),
    (0, 0, 0, 0, 0, 0),
)
DEFAULT_START: Coord = (5, 0)

# Different shape, same idea, for checking that perceptual policies transfer
# . . . . . .
# . . . W . .
# G . . W . .
# . . . . . P
# . W W . . .
# . . . . . A
TRANSFER_LAYOUT: Tuple[Tuple[int, ...], ...] = (
    (0, 0, 0, 0, 0, 0),
    (0, 0, 0, 1, 0, 0),
    (2, 0, 0, 1, 0, 0),
    (0, 0, 0, 0, 0, 3),
    (0, 1, 1, 0, 0, 0),
    (0, 0, 0, 0, 0, 0),
)
TRANSFER_START: Coord = (5, 5)


def default_layout() -> Tuple[Layout, Coord]:
    """Fresh copy of the default training layout and its start."""
    return [list(row) for row in DEFAULT_LAYOUT], DEFAULT_START


def transfer_layout() -> Tuple[Layout, Coord]:
    """Fresh copy of the transfer layout and its start."""
    return [list(row) for row in TRANSFER_LAYOUT], TRANSFER_START


def create_empty_layout(rows: int, cols: int) -> Layout:
    """
    Create a new layout with every cell empty.

    Raises:
        ValueError: If rows or cols <= 0
    """
    if rows <= 0 or cols <= 0:
        raise ValueError(f"Grid dimensions must be positive, got {rows}x{cols}")
    return [[CELL_EMPTY] * cols for _ in range(rows)]


def parse_layout(text: str) -> Tuple[Layout, Optional[Coord]]:
    """
    Parse a text picture of a grid.

    One row per line, cells separated by whitespace or written back to back:
    ``.`` empty, ``W`` or ``#`` wall, ``G`` goal, ``P`` pit, ``A`` start
    (an empty cell). Blank lines are ignored.

    Returns:
        Tuple of (layout, start_coord or None)
    """
    layout: Layout = []
    start: Optional[Coord] = None

    for line in text.strip().splitlines():
        symbols = "".join(line.split())
        if not symbols:
            continue
        row = []
        for col, symbol in enumerate(symbols):
            if symbol == START_CHAR:
                if start is not None:
                    raise ValueError("Layout has more than one start cell")
                start = (len(layout), col)
                row.append(CELL_EMPTY)
            elif symbol in CELL_CHARS:
                row.append(CELL_CHARS[symbol])
            else:
                raise ValueError(f"Unknown layout symbol {symbol!r}")
        layout.append(row)

    validate_layout(layout)
    return layout, start


def format_layout(layout: Sequence[Sequence[int]], agent: Optional[Coord] = None) -> str:
    """Inverse of ``parse_layout``, marking the agent with ``A``."""
    lines = []
    for r, row in enumerate(layout):
        cells = [START_CHAR if agent == (r, c) else CELL_SYMBOLS[cell] for c, cell in enumerate(row)]
        lines.append(" ".join(cells))
    return "\n".join(lines)


def add_random_walls(layout: Layout, density: float, rng: Optional[SeededRNG] = None,
                     keep_clear: Sequence[Coord] = ()) -> None:
    """
    Turn a fraction of the empty cells into walls.

    Args:
        layout: Layout to modify in place
        density: Wall density (0.0 to 1.0, fraction of all cells)
        rng: Random number generator to use (uses default if None)
        keep_clear: Cells that must stay open
    """
    if not (0.0 <= density <= 1.0):
        raise ValueError(f"Density must be between 0.0 and 1.0, got {density}")

    if rng is None:
        rng = default_rng

    total_cells = len(layout) * len(layout[0])
    empty_coords = [
        (r, c)
        for r, row in enumerate(layout)
        for c, cell in enumerate(row)
        if cell == CELL_EMPTY and (r, c) not in keep_clear
    ]
    num_walls = min(int(total_cells * density), len(empty_coords))

    for r, c in rng.sample(empty_coords, num_walls):
        layout[r][c] = CELL_WALL


def generate_random_layout(rows: int, cols: int, wall_density: float = 0.2,
                           seed: Optional[int] = None,
                           max_attempts: int = 100) -> Tuple[Layout, Coord]:
    """
    Generate a layout with one goal, one pit and random walls where the goal
    is reachable from the start.

    Returns:
        Tuple of (layout, start_coord)

    Raises:
        ValueError: If no solvable layout is found within max_attempts
    """
    if rows * cols < 3:
        raise ValueError(f"Grid {rows}x{cols} is too small for start, goal and pit")

    rng = SeededRNG(seed)

    for _ in range(max_attempts):
        layout = create_empty_layout(rows, cols)
        cells = [(r, c) for r in range(rows) for c in range(cols)]
        start, goal, pit = rng.sample(cells, 3)
        layout[goal[0]][goal[1]] = CELL_GOAL
        layout[pit[0]][pit[1]] = CELL_PIT
        add_random_walls(layout, wall_density, rng, keep_clear=(start,))

        if bfs_distances(layout, *goal)[start] >= 0:
            return layout, start

    raise ValueError(f"Could not generate a solvable {rows}x{cols} layout")


def find_cells(layout: Sequence[Sequence[int]], kind: int) -> List[Coord]:
    """All coordinates holding the given cell kind, row by row."""
    return [(r, c) for r, row in enumerate(layout) for c, cell in enumerate(row) if cell == kind]
