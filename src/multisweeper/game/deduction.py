"""
Deduction analyzer for Minesweeper boards.

Finds hidden cells that are provably safe or provably mines from the
revealed numbers alone. Only two rules are used:

    1. Singleton rule: a constraint needing 0 mines makes all its cells
       safe; one needing as many mines as cells makes them all mines.
    2. Subset rule: if A's cells are a subset of B's, the difference
       holds (B.mines - A.mines) mines; 0 makes the difference safe,
       the difference size makes it all mines.

This is deliberately incomplete: there is no search, so cells that need
case analysis stay unclassified. The output annotates replays; it is
never used to block a move.
"""
import logging
from collections import defaultdict, deque
from dataclasses import dataclass, field
from typing import Deque, Dict, FrozenSet, Iterable, List, Optional, Set, Union

import numpy as np

from .cell import EXPLODED_VALUE, FLAGGED_VALUE, HIDDEN_VALUE, Point
from .minefield import NEIGHBOR_OFFSETS
from .view import PlayerView

logger = logging.getLogger(__name__)


# ============================================================================
# Result Type
# ============================================================================

@dataclass(frozen=True)
class Deduction:
    """Cells the analyzer could classify."""

    definitely_safe: FrozenSet[Point] = field(default_factory=frozenset)
    definitely_mine: FrozenSet[Point] = field(default_factory=frozenset)

    @property
    def is_empty(self) -> bool:
        return not self.definitely_safe and not self.definitely_mine

    def classify(self, point: Point) -> Optional[bool]:
        """True for a known mine, False for a known safe cell, else None."""
        if point in self.definitely_mine:
            return True
        if point in self.definitely_safe:
            return False
        return None


# ============================================================================
# Constraint Worklist
# ============================================================================

class _ConstraintSet:
    """
    Constraints "exactly `count` of `cells` are mines", keyed by cell set.

    Classifying a cell removes it from every constraint that mentions it;
    the shrunk constraints are re-enqueued, so only constraints touched
    by a new deduction are looked at again.
    """

    def __init__(self) -> None:
        self.counts: Dict[FrozenSet[Point], int] = {}
        self.by_cell: Dict[Point, Set[FrozenSet[Point]]] = defaultdict(set)
        self.queue: Deque[FrozenSet[Point]] = deque()
        self.safe: Set[Point] = set()
        self.mines: Set[Point] = set()

    def add(self, cells: Iterable[Point], count: int) -> None:
        key = frozenset(cells)
        if not key or key in self.counts:
            return
        if count < 0 or count > len(key):
            logger.debug("Dropping inconsistent constraint %s = %d", sorted(key), count)
            return
        self.counts[key] = count
        for cell in key:
            self.by_cell[cell].add(key)
        self.queue.append(key)

    def _remove(self, key: FrozenSet[Point]) -> int:
        count = self.counts.pop(key)
        for cell in key:
            self.by_cell[cell].discard(key)
        return count

    def _overlapping(self, key: FrozenSet[Point]) -> List[FrozenSet[Point]]:
        found: Set[FrozenSet[Point]] = set()
        for cell in key:
            found.update(self.by_cell[cell])
        found.discard(key)
        return list(found)

    def solve(self) -> None:
        """Run both rules until no constraint changes."""
        while self.queue:
            key = self.queue.popleft()
            if key not in self.counts:
                continue
            count = self.counts[key]
            if count == 0 or count == len(key):
                self._remove(key)
                self._mark(key, mine=count > 0)
                continue
            for other in self._overlapping(key):
                if key not in self.counts:
                    break
                if other not in self.counts:
                    continue
                if key < other:
                    self._apply_subset(key, other)
                elif other < key:
                    self._apply_subset(other, key)

    def _apply_subset(self, small: FrozenSet[Point], big: FrozenSet[Point]) -> None:
        difference = big - small
        needed = self.counts[big] - self.counts[small]
        if needed == 0:
            self._mark(difference, mine=False)
        elif needed == len(difference):
            self._mark(difference, mine=True)

    def _mark(self, cells: Iterable[Point], mine: bool) -> None:
        """Classify cells and shrink every constraint that mentions them."""
        for cell in cells:
            if cell in self.safe or cell in self.mines:
                continue
            (self.mines if mine else self.safe).add(cell)
            for key in list(self.by_cell[cell]):
                count = self._remove(key)
                self.add(key - {cell}, count - 1 if mine else count)


# ============================================================================
# Analyzer
# ============================================================================

def analyze(board: Union[PlayerView, np.ndarray]) -> Deduction:
    """
    Classify hidden cells of one player's board.

    Flagged cells count as unknown: a flag is the player's opinion, not
    information from the board. Exploded mines are known mines.

    Args:
        board: A PlayerView, or its observation array.

    Returns:
        Deduction with the definitely safe and definitely mine cells.
    """
    observation = board.get_observation() if isinstance(board, PlayerView) else board
    constraints = _ConstraintSet()
    for row, col, cells, count in _frontier(np.asarray(observation)):
        constraints.add(cells, count)
    constraints.solve()
    return Deduction(frozenset(constraints.safe), frozenset(constraints.mines))


def _frontier(observation: np.ndarray):
    """Yield (row, col, unknown neighbors, remaining mines) per frontier cell."""
    rows, cols = observation.shape
    for row in range(rows):
        for col in range(cols):
            value = int(observation[row, col])
            if not 0 <= value <= 8:
                continue
            unknown = []
            known_mines = 0
            for delta_row, delta_col in NEIGHBOR_OFFSETS:
                n_row, n_col = row + delta_row, col + delta_col
                if not (0 <= n_row < rows and 0 <= n_col < cols):
                    continue
                neighbor = int(observation[n_row, n_col])
                if neighbor in (HIDDEN_VALUE, FLAGGED_VALUE):
                    unknown.append((n_row, n_col))
                elif neighbor == EXPLODED_VALUE:
                    known_mines += 1
            if unknown:
                yield row, col, unknown, value - known_mines
