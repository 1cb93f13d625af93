"""
Player view module for Minesweeper game.

Each player keeps an independent overlay of hidden/flagged/revealed/
exploded cells on top of the shared Minefield. Reveal, chord and flag
actions only ever touch the acting player's own view, so players can
act simultaneously without sharing any mutable cell state.
"""
import logging
from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Set, Tuple

import numpy as np

from .cell import EXPLODED_VALUE, FLAGGED_VALUE, HIDDEN_VALUE, Cell, CellState, Point
from .errors import InvalidTarget
from .minefield import Minefield

logger = logging.getLogger(__name__)


# ============================================================================
# Actions and Effects
# ============================================================================

class Action(Enum):
    """Actions a player can take on a cell."""

    REVEAL = "reveal"
    CHORD = "chord"
    TOGGLE_FLAG = "flag"


@dataclass(frozen=True)
class RevealEffect:
    """
    Result of one applied action.

    Attributes:
        action: Action that produced this effect.
        point: Target cell of the action.
        revealed: Cells moved to revealed, in reveal order, with counts.
        exploded: Mine the player revealed, if any.
        flag: Resulting state of a toggled cell.
        cleared: Whether the view is cleared after this action.
    """

    action: Action
    point: Point
    revealed: Tuple[Tuple[Point, int], ...] = ()
    exploded: Optional[Point] = None
    flag: Optional[CellState] = None
    cleared: bool = False

    @property
    def affected_cells(self) -> Tuple[Point, ...]:
        """Every cell whose state changed."""
        cells = tuple(point for point, _ in self.revealed)
        if self.exploded is not None:
            cells += (self.exploded,)
        if self.flag is not None:
            cells += (self.point,)
        return cells

    @property
    def is_noop(self) -> bool:
        return not self.affected_cells

    def to_dict(self) -> Dict[str, Any]:
        return {
            "action": self.action.value,
            "point": list(self.point),
            "revealed": [[row, col, count] for (row, col), count in self.revealed],
            "exploded": list(self.exploded) if self.exploded is not None else None,
            "flag": self.flag.name if self.flag is not None else None,
            "cleared": self.cleared,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RevealEffect":
        exploded = data.get("exploded")
        flag = data.get("flag")
        return cls(
            action=Action(data["action"]),
            point=tuple(data["point"]),
            revealed=tuple(
                ((row, col), count) for row, col, count in data.get("revealed", [])
            ),
            exploded=tuple(exploded) if exploded is not None else None,
            flag=CellState[flag] if flag is not None else None,
            cleared=bool(data.get("cleared", False)),
        )


# ============================================================================
# Player View Class
# ============================================================================

class PlayerView:
    """
    One player's view of a shared minefield.

    Manages the grid of cells for that player, cascade revealing,
    chording, flagging, and death/cleared detection.
    """

    def __init__(self, minefield: Minefield, player_index: int = 0) -> None:
        """
        Initialize an all-hidden view.

        Args:
            minefield: Shared mine layout.
            player_index: Roster index of the owning player.
        """
        self.minefield = minefield
        self.player_index = player_index
        self._grid: List[List[Cell]] = [
            [Cell() for _ in range(minefield.cols)]
            for _ in range(minefield.rows)
        ]
        self._revealed_count = 0
        self._exploded: Optional[Point] = None

    # ========================================================================
    # Game Actions
    # ========================================================================

    def apply(self, action: Action, point: Point) -> RevealEffect:
        """
        Apply an action to this view.

        Raises:
            InvalidTarget: The cell or the view cannot take the action.
                Nothing has been mutated when this is raised.
        """
        if action is Action.REVEAL:
            return self.reveal(*point)
        if action is Action.CHORD:
            return self.chord(*point)
        if action is Action.TOGGLE_FLAG:
            return self.toggle_flag(*point)
        raise InvalidTarget(f"Unknown action {action!r}")

    def reveal(self, row: int, col: int) -> RevealEffect:
        """
        Reveal a cell at the given position.

        On the first reveal of the game, fixes the mine layout around this
        cell. A zero cell cascades through its connected zero region.
        Revealing an already revealed cell is a no-op.

        Args:
            row: Row index to reveal.
            col: Column index to reveal.

        Returns:
            Effect describing the revealed or exploded cells.
        """
        point = (row, col)
        cell = self._target(point)
        if cell.is_flagged:
            raise InvalidTarget(f"Cannot reveal flagged cell {point}")
        if not cell.is_hidden:
            return RevealEffect(Action.REVEAL, point)

        self.minefield.place_mines(point)
        if self.minefield.is_mine(point):
            self._explode(point)
            return RevealEffect(Action.REVEAL, point, exploded=point)

        revealed = self._cascade(point)
        return RevealEffect(
            Action.REVEAL, point, revealed=tuple(revealed), cleared=self.is_cleared
        )

    def chord(self, row: int, col: int) -> RevealEffect:
        """
        Chord action: reveal all unflagged neighbors if flag count matches.

        If the number of flagged neighbors differs from the cell's count,
        nothing happens. If an unflagged neighbor holds a mine, that mine
        explodes and no other neighbor is revealed.

        Args:
            row: Row index of a revealed cell.
            col: Column index of a revealed cell.
        """
        point = (row, col)
        cell = self._target(point)
        if not cell.is_revealed:
            raise InvalidTarget(f"Cannot chord unrevealed cell {point}")

        neighbors = self.minefield.neighbors(point)
        flag_count = sum(1 for n in neighbors if self._cell(n).is_flagged)
        if flag_count != cell.adjacent_mines:
            return RevealEffect(Action.CHORD, point)

        targets = [n for n in neighbors if self._cell(n).is_hidden]
        for target in targets:
            if self.minefield.is_mine(target):
                self._explode(target)
                return RevealEffect(Action.CHORD, point, exploded=target)

        revealed: List[Tuple[Point, int]] = []
        for target in targets:
            revealed.extend(self._cascade(target))
        return RevealEffect(
            Action.CHORD, point, revealed=tuple(revealed), cleared=self.is_cleared
        )

    def toggle_flag(self, row: int, col: int) -> RevealEffect:
        """
        Toggle flag on a hidden or flagged cell.

        Raises:
            InvalidTarget: Cell is revealed or exploded.
        """
        point = (row, col)
        cell = self._target(point)
        if not cell.toggle_flag():
            raise InvalidTarget(f"Cannot flag revealed cell {point}")
        return RevealEffect(Action.TOGGLE_FLAG, point, flag=cell.state)

    # ========================================================================
    # Reveal Internals
    # ========================================================================

    def _target(self, point: Point) -> Cell:
        """Validate an action target and return its cell."""
        if self._exploded is not None:
            raise InvalidTarget(f"Player {self.player_index} is dead")
        if not self.minefield.in_bounds(point):
            raise InvalidTarget(f"Cell {point} is outside the board")
        return self._cell(point)

    def _cell(self, point: Point) -> Cell:
        row, col = point
        return self._grid[row][col]

    def _explode(self, point: Point) -> None:
        self._cell(point).explode()
        self._exploded = point
        logger.debug("Player %d hit a mine at %s", self.player_index, point)

    def _cascade(self, start: Point) -> List[Tuple[Point, int]]:
        """
        Breadth-first reveal from a safe cell.

        Zero cells enqueue their hidden neighbors; numbered cells stop the
        cascade. Flagged cells are left alone. Each cell is revealed at
        most once because only hidden cells are revealed.
        """
        revealed: List[Tuple[Point, int]] = []
        queue = deque([start])
        while queue:
            point = queue.popleft()
            count = self.minefield.adjacency_count(point)
            if not self._cell(point).reveal(count):
                continue
            self._revealed_count += 1
            revealed.append((point, count))
            if count == 0:
                queue.extend(
                    n for n in self.minefield.neighbors(point)
                    if self._cell(n).is_hidden
                )
        return revealed

    # ========================================================================
    # State Accessors
    # ========================================================================

    @property
    def rows(self) -> int:
        return self.minefield.rows

    @property
    def cols(self) -> int:
        return self.minefield.cols

    @property
    def revealed_count(self) -> int:
        return self._revealed_count

    @property
    def is_dead(self) -> bool:
        """Check if the player revealed a mine."""
        return self._exploded is not None

    @property
    def exploded(self) -> Optional[Point]:
        return self._exploded

    @property
    def is_cleared(self) -> bool:
        """Check if every non-mine cell is revealed."""
        return self._revealed_count == self.minefield.safe_cells

    def get_cell(self, row: int, col: int) -> Optional[Cell]:
        """Get cell at position, or None if invalid."""
        if not self.minefield.in_bounds((row, col)):
            return None
        return self._grid[row][col]

    def flags(self) -> Set[Point]:
        """Positions currently flagged in this view."""
        return {
            (row, col)
            for row in range(self.rows)
            for col in range(self.cols)
            if self._grid[row][col].is_flagged
        }

    def hidden_cells(self) -> List[Point]:
        """Positions that can still be revealed."""
        return [
            (row, col)
            for row in range(self.rows)
            for col in range(self.cols)
            if self._grid[row][col].is_hidden
        ]

    def get_observation(self) -> np.ndarray:
        """
        Get view state as a numpy array.

        Returns:
            2D int8 array where:
                -1 = hidden
                -2 = flagged
                0-8 = revealed with adjacent count
                9 = exploded mine
        """
        obs = np.empty((self.rows, self.cols), dtype=np.int8)
        for row in range(self.rows):
            for col in range(self.cols):
                obs[row, col] = self._grid[row][col].to_observation()
        return obs


def apply(view: PlayerView, point: Point, action: Action) -> RevealEffect:
    """Apply an action to one player's view."""
    return view.apply(action, point)


def render_board(observation: np.ndarray) -> str:
    """Render an observation as an ASCII grid."""
    symbols = {HIDDEN_VALUE: ".", FLAGGED_VALUE: "F", EXPLODED_VALUE: "*", 0: " "}
    lines = []
    for row in observation:
        lines.append(" ".join(symbols.get(int(val), str(int(val))) for val in row))
    return "\n".join(lines)
