"""
Base agent interface for Minesweeper players.

An agent fills one seat of a GameSession: it reads that seat's board and
picks the next move.
"""
from abc import ABC, abstractmethod
from typing import List, Tuple

import numpy as np

from ..game.cell import HIDDEN_VALUE, Point
from ..game.view import Action

Move = Tuple[Action, Point]


# ============================================================================
# Base Agent Interface
# ============================================================================

class BaseAgent(ABC):
    """
    Abstract base class for Minesweeper agents.

    All agents must implement the select_move method to choose the next
    (action, cell) pair for their seat.
    """

    def __init__(self, rows: int, cols: int) -> None:
        """
        Initialize the agent.

        Args:
            rows: Number of rows in the board.
            cols: Number of columns in the board.
        """
        self.rows = rows
        self.cols = cols

    @abstractmethod
    def select_move(self, observation: np.ndarray) -> Move:
        """
        Select a move based on the seat's board.

        Args:
            observation: 2D array of cell states (see PlayerView).

        Returns:
            (action, (row, col)) to submit.
        """
        pass

    @staticmethod
    def hidden_cells(observation: np.ndarray) -> List[Point]:
        """Cells that can still be revealed."""
        return [(int(row), int(col)) for row, col in np.argwhere(observation == HIDDEN_VALUE)]

    def reset(self) -> None:
        """Reset agent state for a new game."""
        pass
