"""
Minefield module for Minesweeper game.

The shared, immutable-once-placed mine layout of one game. Players never
mutate it; each player keeps a separate view (see view.py) on top of it.
"""
import logging
import threading
from typing import FrozenSet, Iterable, List, Optional, Set

import numpy as np

from .cell import EXPLODED_VALUE, Point
from .config import BoardConfig
from .errors import InvalidConfiguration

logger = logging.getLogger(__name__)


# ============================================================================
# Constants
# ============================================================================

NEIGHBOR_OFFSETS = tuple(
    (delta_row, delta_col)
    for delta_row in (-1, 0, 1)
    for delta_col in (-1, 0, 1)
    if (delta_row, delta_col) != (0, 0)
)


def _fresh_seed() -> int:
    """Draw an entropy value that can be stored and reused as a seed."""
    return int(np.random.SeedSequence().entropy)


def _sample(
    rows: int, cols: int, num_mines: int, seed: int, excluded: Set[Point]
) -> FrozenSet[Point]:
    """Uniformly pick mine positions from the cells outside excluded."""
    eligible = [
        (row, col)
        for row in range(rows)
        for col in range(cols)
        if (row, col) not in excluded
    ]
    if num_mines == 0:
        return frozenset()
    rng = np.random.default_rng(seed)
    picks = rng.choice(len(eligible), size=num_mines, replace=False)
    return frozenset(eligible[int(index)] for index in picks)


# ============================================================================
# Minefield Class
# ============================================================================

class Minefield:
    """
    Grid geometry plus mine placement.

    Mines are placed lazily: the layout is fixed by the first reveal so
    that the first click (and, with the safe-opening policy, its whole
    3x3 neighborhood) never holds a mine. Once fixed, the mine set and
    the adjacency counts are read-only and safe to share across threads.
    """

    def __init__(
        self,
        config: BoardConfig,
        seed: Optional[int] = None,
        mines: Optional[Iterable[Point]] = None,
    ) -> None:
        """
        Initialize a minefield.

        Args:
            config: Board dimensions, mine count and opening policy.
            seed: Seed for placement; a fresh one is drawn when omitted.
            mines: Layout to fix immediately; left unplaced when omitted.

        Raises:
            InvalidConfiguration: An unplaced board whose mines would not
                fit beside the first reveal's opening.
        """
        if mines is None:
            config.check_placeable()
        self.config = config
        self.seed = seed if seed is not None else _fresh_seed()
        self._mines: Optional[FrozenSet[Point]] = None
        self._adjacency: Optional[np.ndarray] = None
        self._lock = threading.Lock()
        if mines is not None:
            self._fix(frozenset(mines))

    # ========================================================================
    # Construction
    # ========================================================================

    @classmethod
    def generate(
        cls,
        rows: int,
        cols: int,
        num_mines: int,
        excluded_region: Iterable[Point] = (),
        seed: Optional[int] = None,
    ) -> "Minefield":
        """
        Create a minefield with mines placed immediately.

        Args:
            rows: Number of rows.
            cols: Number of columns.
            num_mines: Mines to place.
            excluded_region: Cells that must stay mine-free.
            seed: Seed for placement.

        Raises:
            InvalidConfiguration: Non-positive dimensions, or more mines
                than eligible cells.
        """
        if rows < 1 or cols < 1:
            raise InvalidConfiguration("Board dimensions must be positive")
        excluded = {
            (row, col) for row, col in excluded_region
            if 0 <= row < rows and 0 <= col < cols
        }
        eligible = rows * cols - len(excluded)
        if num_mines < 0 or num_mines > eligible:
            raise InvalidConfiguration(
                f"Cannot place {num_mines} mines in {eligible} eligible cells"
            )
        seed = seed if seed is not None else _fresh_seed()
        mines = _sample(rows, cols, num_mines, seed, excluded)
        return cls(BoardConfig(rows, cols, num_mines, safe_opening=False), seed, mines)

    @classmethod
    def from_layout(
        cls,
        config: BoardConfig,
        mines: Iterable[Point],
        seed: Optional[int] = None,
    ) -> "Minefield":
        """
        Rebuild a minefield from an already realized layout.

        Raises:
            InvalidConfiguration: Mine outside the board, or a mine count
                that does not match the configuration.
        """
        layout = frozenset((int(row), int(col)) for row, col in mines)
        for row, col in layout:
            if not (0 <= row < config.rows and 0 <= col < config.cols):
                raise InvalidConfiguration(f"Mine ({row}, {col}) is off the board")
        if len(layout) != config.num_mines:
            raise InvalidConfiguration(
                f"Layout has {len(layout)} mines, expected {config.num_mines}"
            )
        return cls(config, seed, layout)

    def copy_unplayed(self) -> "Minefield":
        """Fresh minefield with the same layout (or the same seed if unplaced)."""
        if self._mines is None:
            return Minefield(self.config, self.seed)
        return Minefield.from_layout(self.config, self._mines, self.seed)

    # ========================================================================
    # Mine Placement (Low-level)
    # ========================================================================

    def place_mines(self, first_click: Point) -> bool:
        """
        Fix the layout around the first revealed cell.

        Args:
            first_click: (row, col) of the first reveal.

        Returns:
            True if mines were placed now, False if already placed.
        """
        with self._lock:
            if self._mines is not None:
                return False
            if self.config.safe_opening:
                excluded = self.opening_region(first_click)
            else:
                excluded = {first_click}
            self._fix(_sample(self.rows, self.cols, self.num_mines, self.seed, excluded))
        logger.debug(
            "Placed %d mines on %dx%d board (first click %s)",
            self.num_mines, self.rows, self.cols, first_click,
        )
        return True

    def _fix(self, mines: FrozenSet[Point]) -> None:
        """Store the layout and precompute adjacency counts."""
        mask = np.zeros((self.rows, self.cols), dtype=np.int8)
        for row, col in mines:
            mask[row, col] = 1
        padded = np.pad(mask, 1)
        counts = np.zeros_like(mask)
        for delta_row, delta_col in NEIGHBOR_OFFSETS:
            counts += padded[
                1 + delta_row:1 + delta_row + self.rows,
                1 + delta_col:1 + delta_col + self.cols,
            ]
        counts.setflags(write=False)
        self._adjacency = counts
        self._mines = mines

    # ========================================================================
    # Neighbor Utilities
    # ========================================================================

    def in_bounds(self, point: Point) -> bool:
        """Check if position is within board bounds."""
        row, col = point
        return 0 <= row < self.rows and 0 <= col < self.cols

    def neighbors(self, point: Point) -> List[Point]:
        """Valid neighboring positions, in a fixed order."""
        row, col = point
        return [
            (row + delta_row, col + delta_col)
            for delta_row, delta_col in NEIGHBOR_OFFSETS
            if self.in_bounds((row + delta_row, col + delta_col))
        ]

    def opening_region(self, point: Point) -> Set[Point]:
        """The cell plus its in-bounds neighbors."""
        return {point, *self.neighbors(point)}

    # ========================================================================
    # Accessors
    # ========================================================================

    @property
    def rows(self) -> int:
        return self.config.rows

    @property
    def cols(self) -> int:
        return self.config.cols

    @property
    def num_mines(self) -> int:
        return self.config.num_mines

    @property
    def safe_cells(self) -> int:
        return self.config.safe_cells

    @property
    def is_placed(self) -> bool:
        return self._mines is not None

    @property
    def mines(self) -> FrozenSet[Point]:
        """Realized mine positions."""
        self._require_placed()
        return self._mines

    def is_mine(self, point: Point) -> bool:
        self._require_placed()
        return point in self._mines

    def adjacency_count(self, point: Point) -> int:
        """Number of mines around a cell (0-8)."""
        self._require_placed()
        return int(self._adjacency[point])

    def to_array(self) -> np.ndarray:
        """
        Full board for display after the game.

        Returns:
            int8 array with 9 for mines and adjacency counts elsewhere.
        """
        self._require_placed()
        board = self._adjacency.copy()
        for point in self._mines:
            board[point] = EXPLODED_VALUE
        return board

    def _require_placed(self) -> None:
        if self._mines is None:
            raise ValueError("Mines have not been placed yet")

    def __repr__(self) -> str:
        state = "placed" if self.is_placed else "unplaced"
        return (
            f"Minefield({self.rows}x{self.cols}, mines={self.num_mines}, "
            f"seed={self.seed}, {state})"
        )
