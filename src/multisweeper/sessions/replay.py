"""
Replay of a session's event log.

A replay re-applies the logged actions, in sequence order, to fresh
player views over a copy of the session's minefield. Each re-applied
action must reproduce the logged effect exactly; frames are cached as the
fold advances so `replay_to(k)` followed by one more entry is the same
work as `replay_to(k + 1)`.
"""
from dataclasses import dataclass
from typing import Dict, FrozenSet, Iterable, List, Optional, Sequence, Tuple

import numpy as np

from ..game.cell import FLAGGED_VALUE, HIDDEN_VALUE
from ..game.deduction import Deduction, analyze
from ..game.errors import ActionError, ReplayError
from ..game.minefield import Minefield
from ..game.view import Action, PlayerView
from .event_log import LogEntry


# ============================================================================
# Frames
# ============================================================================

@dataclass(frozen=True)
class PlayerSnapshot:
    """Player standing at one replay position."""

    index: int
    score: int = 0
    dead: bool = False
    cleared: bool = False


@dataclass(frozen=True, eq=False)
class ReplayFrame:
    """
    Board state at one replay position.

    Attributes:
        position: Replay position (0 is the empty board).
        entry: Last visible entry applied, None at position 0.
        boards: One read-only observation array per player.
        players: Per-player score and status.
    """

    position: int
    entry: Optional[LogEntry]
    boards: Tuple[np.ndarray, ...]
    players: Tuple[PlayerSnapshot, ...]

    def board(self, player_index: int) -> np.ndarray:
        return self.boards[player_index]


# ============================================================================
# Replay
# ============================================================================

class Replay:
    """
    Step through a game's history.

    Positions run from 0 (nothing applied) to len(replay) - 1 (every
    visible entry applied). Entries the viewer may not see (other
    players' flag toggles) are still folded in, but are not positions of
    their own, and hidden players' flags show as hidden cells.
    """

    def __init__(
        self,
        minefield: Minefield,
        entries: Sequence[LogEntry],
        num_players: int,
        visible_flags: Optional[Iterable[int]] = None,
    ) -> None:
        """
        Initialize a replay at position 0.

        Args:
            minefield: The session's minefield (it is copied, not played on).
            entries: Full event log in sequence order.
            num_players: Roster size.
            visible_flags: Players whose flags the viewer may see; None
                shows everyone's.
        """
        self._minefield = minefield.copy_unplayed()
        self._entries = tuple(entries)
        self._num_players = num_players
        self._visible_flags: Optional[FrozenSet[int]] = (
            None if visible_flags is None else frozenset(visible_flags)
        )

        self._views = [PlayerView(self._minefield, i) for i in range(num_players)]
        self._scores = [0] * num_players
        self._dead = [False] * num_players
        self._cleared = [False] * num_players
        self._applied = 0

        self._positions: List[int] = [0] + [
            count + 1
            for count, entry in enumerate(self._entries)
            if self._is_visible(entry)
        ]
        self._position_of: Dict[int, int] = {
            applied: position for position, applied in enumerate(self._positions)
        }
        self._frames: Dict[int, ReplayFrame] = {0: self._snapshot(0)}
        self._position = 0

    # ========================================================================
    # Folding (Low-level)
    # ========================================================================

    def _is_visible(self, entry: LogEntry) -> bool:
        if self._visible_flags is None or entry.action is not Action.TOGGLE_FLAG:
            return True
        return entry.player_index in self._visible_flags

    def _fold_to(self, applied: int) -> None:
        """Apply entries until `applied` of them are folded in."""
        while self._applied < applied:
            self._apply(self._entries[self._applied])
            self._applied += 1
            position = self._position_of.get(self._applied)
            if position is not None:
                self._frames[position] = self._snapshot(position)

    def _apply(self, entry: LogEntry) -> None:
        player = entry.player_index
        if not 0 <= player < self._num_players:
            raise ReplayError(f"Entry {entry.sequence} references player {player}")
        try:
            effect = self._views[player].apply(entry.action, entry.point)
        except ActionError as exc:
            raise ReplayError(f"Entry {entry.sequence} was rejected: {exc}") from exc
        if effect != entry.effect:
            raise ReplayError(f"Entry {entry.sequence} did not reproduce its effect")
        self._scores[player] += len(effect.revealed)
        if effect.exploded is not None:
            self._dead[player] = True
        if effect.cleared:
            self._cleared[player] = True

    def _snapshot(self, position: int) -> ReplayFrame:
        boards = []
        for index, view in enumerate(self._views):
            board = view.get_observation()
            if self._visible_flags is not None and index not in self._visible_flags:
                board[board == FLAGGED_VALUE] = HIDDEN_VALUE
            board.setflags(write=False)
            boards.append(board)
        players = tuple(
            PlayerSnapshot(i, self._scores[i], self._dead[i], self._cleared[i])
            for i in range(self._num_players)
        )
        entry = self._entries[self._applied - 1] if position > 0 else None
        return ReplayFrame(position, entry, tuple(boards), players)

    # ========================================================================
    # Random Access
    # ========================================================================

    def replay_to(self, position: int) -> ReplayFrame:
        """
        Board state after the first `position` visible entries.

        Raises:
            ReplayError: Position out of range, or the log does not
                reproduce against the minefield.
        """
        if not 0 <= position < len(self):
            raise ReplayError(
                f"Replay position {position} out of bounds (max {len(self) - 1})"
            )
        if position not in self._frames:
            self._fold_to(self._positions[position])
        return self._frames[position]

    def annotate(self, player_index: int, position: Optional[int] = None) -> Deduction:
        """Guaranteed plays for one player's board at a position."""
        if position is None:
            position = self._position
        return analyze(self.replay_to(position).board(player_index))

    def annotations(self, player_index: int) -> List[Deduction]:
        """One deduction per replay position."""
        return [self.annotate(player_index, position) for position in range(len(self))]

    # ========================================================================
    # Cursor
    # ========================================================================

    @property
    def position(self) -> int:
        return self._position

    def current(self) -> ReplayFrame:
        return self.replay_to(self._position)

    def advance(self) -> ReplayFrame:
        """Step forward one visible entry."""
        if self._position == len(self) - 1:
            raise ReplayError("Called advance at the end of the replay")
        frame = self.replay_to(self._position + 1)
        self._position += 1
        return frame

    def rewind(self) -> ReplayFrame:
        """Step back one visible entry."""
        if self._position == 0:
            raise ReplayError("Called rewind at the start of the replay")
        self._position -= 1
        return self.current()

    def to_position(self, position: int) -> ReplayFrame:
        frame = self.replay_to(position)
        self._position = position
        return frame

    # ========================================================================
    # Accessors
    # ========================================================================

    @property
    def entries(self) -> Tuple[LogEntry, ...]:
        """Entries visible to this replay's viewer."""
        return tuple(e for e in self._entries if self._is_visible(e))

    @property
    def num_players(self) -> int:
        return self._num_players

    def __len__(self) -> int:
        return len(self._positions)
