"""
Logic-based agent for Minesweeper.

Plays the moves the deduction analyzer proves and falls back to the
cell with the lowest estimated mine probability when nothing is proven.
"""
from collections import defaultdict
from typing import Dict, List, Optional, Set

import numpy as np

from ..game.cell import EXPLODED_VALUE, FLAGGED_VALUE, HIDDEN_VALUE, Point
from ..game.deduction import analyze
from ..game.minefield import NEIGHBOR_OFFSETS
from ..game.view import Action
from .base_agent import BaseAgent, Move

# Estimate for hidden cells no number touches.
UNKNOWN_PROBABILITY = 0.5


# ============================================================================
# Logic Agent
# ============================================================================

class LogicAgent(BaseAgent):
    """
    Agent that plays proven moves first.

    Strategy:
        1. Prefer a corner for the first move (better cascades)
        2. Reveal a cell the analyzer proves safe
        3. Flag a cell the analyzer proves to be a mine (if flag_mines)
        4. Otherwise reveal the hidden cell with the lowest estimated
           mine probability
    """

    def __init__(
        self,
        rows: int = 9,
        cols: int = 9,
        flag_mines: bool = True,
        seed: Optional[int] = None,
    ) -> None:
        """
        Initialize the logic agent.

        Args:
            rows: Number of rows in the board.
            cols: Number of columns in the board.
            flag_mines: Flag proven mines before guessing.
            seed: Random seed for first-move and tie selection.
        """
        super().__init__(rows, cols)
        self.flag_mines = flag_mines
        self.rng = np.random.default_rng(seed)
        self._first_move = True

    def select_move(self, observation: np.ndarray) -> Move:
        """
        Select the best move for the observation.

        Args:
            observation: 2D array of cell states.

        Returns:
            (action, (row, col)) based on analysis.

        Raises:
            ValueError: No hidden cell is left to play.
        """
        hidden = self.hidden_cells(observation)
        if not hidden:
            raise ValueError("No hidden cells left")

        if self._first_move:
            self._first_move = False
            return Action.REVEAL, self._select_first_move(hidden)

        deduction = analyze(observation)

        for point in sorted(deduction.definitely_safe):
            if observation[point] == HIDDEN_VALUE:
                return Action.REVEAL, point

        if self.flag_mines:
            for point in sorted(deduction.definitely_mine):
                if observation[point] == HIDDEN_VALUE:
                    return Action.TOGGLE_FLAG, point

        return Action.REVEAL, self._select_by_probability(
            observation, hidden, set(deduction.definitely_mine)
        )

    def _select_first_move(self, hidden: List[Point]) -> Point:
        """Select a random corner for the first move."""
        corners = [
            (0, 0),
            (0, self.cols - 1),
            (self.rows - 1, 0),
            (self.rows - 1, self.cols - 1),
        ]
        self.rng.shuffle(corners)
        for corner in corners:
            if corner in hidden:
                return corner
        return hidden[int(self.rng.integers(len(hidden)))]

    def _select_by_probability(
        self,
        observation: np.ndarray,
        hidden: List[Point],
        known_mines: Set[Point],
    ) -> Point:
        """Select the hidden cell with the lowest estimated mine probability."""
        probabilities = self.estimate_mine_probabilities(observation, known_mines)

        best_point = hidden[0]
        best_prob = 1.0

        for point in hidden:
            if point in known_mines:
                continue
            prob = probabilities.get(point, UNKNOWN_PROBABILITY)
            if prob < best_prob:
                best_prob = prob
                best_point = point

        return best_point

    def estimate_mine_probabilities(
        self,
        observation: np.ndarray,
        known_mines: Set[Point],
    ) -> Dict[Point, float]:
        """
        Estimate mine probability for each frontier cell.

        Each numbered cell spreads its remaining mines evenly over its
        unknown neighbors; a cell seen by several numbers keeps the
        highest (most conservative) estimate.

        Returns:
            Dict mapping (row, col) to probability of being a mine.
        """
        estimates: Dict[Point, List[float]] = defaultdict(list)

        for row in range(self.rows):
            for col in range(self.cols):
                value = int(observation[row, col])
                if not 1 <= value <= 8:
                    continue

                unknown = []
                remaining = value
                for delta_row, delta_col in NEIGHBOR_OFFSETS:
                    point = (row + delta_row, col + delta_col)
                    if not (0 <= point[0] < self.rows and 0 <= point[1] < self.cols):
                        continue
                    neighbor = int(observation[point])
                    if point in known_mines or neighbor == EXPLODED_VALUE:
                        remaining -= 1
                    elif neighbor in (HIDDEN_VALUE, FLAGGED_VALUE):
                        unknown.append(point)

                if not unknown or remaining < 0:
                    continue
                prob = remaining / len(unknown)
                for point in unknown:
                    estimates[point].append(prob)

        return {point: max(probs) for point, probs in estimates.items()}

    def reset(self) -> None:
        """Reset for new game."""
        self._first_move = True
