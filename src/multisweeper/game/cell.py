"""
Cell module for Minesweeper game.

Represents one cell of a single player's view: its visual state
(hidden/flagged/revealed/exploded) and, once revealed, the adjacent
mine count. Mine placement itself lives in the shared Minefield.
"""
from enum import Enum, auto
from dataclasses import dataclass
from typing import Optional, Tuple


Point = Tuple[int, int]


# ============================================================================
# Constants
# ============================================================================

# Observation values shared by views, replays, the analyzer and agents.
HIDDEN_VALUE = -1
FLAGGED_VALUE = -2
EXPLODED_VALUE = 9


class CellState(Enum):
    """Possible visual states of a cell in one player's view."""

    HIDDEN = auto()
    FLAGGED = auto()
    REVEALED = auto()
    EXPLODED = auto()


# ============================================================================
# Cell Data Class
# ============================================================================

@dataclass
class Cell:
    """
    Represents a single cell in a player's view of the grid.

    Attributes:
        state: Current visual state.
        adjacent_mines: Count of mines in neighboring cells (0-8), known
            only once the cell is revealed.
    """

    state: CellState = CellState.HIDDEN
    adjacent_mines: Optional[int] = None

    def reveal(self, adjacent_mines: int) -> bool:
        """
        Reveal this cell as a safe cell.

        Args:
            adjacent_mines: Number of mines around the cell.

        Returns:
            True if cell was revealed, False if it was not hidden.
        """
        if self.state != CellState.HIDDEN:
            return False
        self.state = CellState.REVEALED
        self.adjacent_mines = adjacent_mines
        return True

    def explode(self) -> bool:
        """
        Reveal this cell as a mine.

        Returns:
            True if cell exploded, False if it was not hidden.
        """
        if self.state != CellState.HIDDEN:
            return False
        self.state = CellState.EXPLODED
        return True

    def toggle_flag(self) -> bool:
        """
        Toggle flag on this cell.

        Returns:
            True if flag was toggled, False if cell is revealed or exploded.
        """
        if self.state == CellState.HIDDEN:
            self.state = CellState.FLAGGED
        elif self.state == CellState.FLAGGED:
            self.state = CellState.HIDDEN
        else:
            return False
        return True

    @property
    def is_hidden(self) -> bool:
        """Check if cell is hidden."""
        return self.state == CellState.HIDDEN

    @property
    def is_flagged(self) -> bool:
        """Check if cell is flagged."""
        return self.state == CellState.FLAGGED

    @property
    def is_revealed(self) -> bool:
        """Check if cell is revealed."""
        return self.state == CellState.REVEALED

    @property
    def is_exploded(self) -> bool:
        """Check if cell is an exploded mine."""
        return self.state == CellState.EXPLODED

    def to_observation(self) -> int:
        """
        Convert cell to its observation value.

        Returns:
            -1: Hidden cell
            -2: Flagged cell
            0-8: Revealed cell with adjacent mine count
            9: Exploded mine
        """
        if self.state == CellState.HIDDEN:
            return HIDDEN_VALUE
        if self.state == CellState.FLAGGED:
            return FLAGGED_VALUE
        if self.state == CellState.EXPLODED:
            return EXPLODED_VALUE
        return self.adjacent_mines
