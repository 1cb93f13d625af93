"""
Game session module.

Coordinates one game: the roster, the lifecycle (lobby, active,
completed), action intake, scoring and completion. The session is the
only owner of its minefield, player views and event log.

Concurrency: each player has a lock that serializes that player's
actions (validation, cascade and bookkeeping). A session-wide lock only
covers the log append, score bookkeeping and lifecycle transitions, never
a cascade, so players do not wait on each other's reveals. Updates are
queued under that lock and delivered to listeners after it is released,
still in log order.
"""
import logging
import threading
import uuid
from collections import deque
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, ClassVar, Deque, Hashable, List, Optional, Tuple, Union

import numpy as np

from ..game.cell import FLAGGED_VALUE, HIDDEN_VALUE, Point
from ..game.config import GameConfig
from ..game.errors import (
    InvalidConfiguration,
    InvalidTarget,
    NotSessionOwner,
    PlayerInactive,
    ReplayError,
    SessionAlreadyActive,
    SessionFull,
    SessionNotActive,
    UnknownPlayer,
)
from ..game.minefield import Minefield
from ..game.view import Action, PlayerView, RevealEffect
from .event_log import EventLog, LogEntry
from .persistence import SessionRecord
from .players import Player, check_identity
from .replay import Replay

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(timezone.utc)


# ============================================================================
# Lifecycle States
# ============================================================================

class SessionState(Enum):
    """Lifecycle of a game session."""

    LOBBY = "lobby"
    ACTIVE = "active"
    COMPLETED = "completed"


@dataclass(frozen=True)
class Lobby:
    """Roster open, no game running."""

    kind: ClassVar[SessionState] = SessionState.LOBBY


@dataclass(frozen=True)
class Active:
    """Roster frozen, actions accepted."""

    started_at: datetime
    kind: ClassVar[SessionState] = SessionState.ACTIVE


@dataclass(frozen=True, eq=False)
class Completed:
    """
    Terminal state.

    Attributes:
        started_at: When the session became active.
        ended_at: When the last player died or cleared.
        final_board: Full mine layout (9 = mine, else adjacency count).
        final_scores: Score per roster index.
    """

    started_at: datetime
    ended_at: datetime
    final_board: np.ndarray
    final_scores: Tuple[int, ...]
    kind: ClassVar[SessionState] = SessionState.COMPLETED


Lifecycle = Union[Lobby, Active, Completed]


@dataclass(frozen=True)
class BoardUpdate:
    """Broadcast after every applied action, in log order."""

    session_id: str
    player_index: int
    sequence: int
    affected_cells: Tuple[Point, ...]
    session_state: SessionState


# ============================================================================
# Game Session
# ============================================================================

class GameSession:
    """
    One game instance shared by up to max_players players.

    Every player plays the same mine layout in an independent view. The
    game completes once each player has either died or cleared their view.
    """

    def __init__(
        self,
        config: GameConfig,
        owner: Hashable,
        session_id: Optional[str] = None,
        minefield: Optional[Minefield] = None,
    ) -> None:
        """
        Create a session in the lobby; the owner joins as player 0.

        Args:
            config: Board and roster configuration.
            owner: Identity of the creating player.
            session_id: Identifier (a random one is generated if omitted).
            minefield: Pre-built minefield, e.g. a restored layout.

        Raises:
            InvalidConfiguration: Minefield built for another board.
            InvalidIdentity: Owner is not a str or int.
        """
        check_identity(owner)
        if minefield is not None and minefield.config != config.board:
            raise InvalidConfiguration("Minefield does not match the board configuration")
        self.session_id = session_id or uuid.uuid4().hex
        self.config = config
        self.owner = owner
        self.minefield = minefield or Minefield(config.board, seed=config.seed)

        self._players: List[Player] = []
        self._views: List[PlayerView] = []
        self._player_locks: List[threading.Lock] = []
        self._log = EventLog()
        self._state: Lifecycle = Lobby()
        self._lock = threading.RLock()
        self._listeners: List[Callable[[BoardUpdate], None]] = []
        self._pending: Deque[BoardUpdate] = deque()
        self._dispatch_lock = threading.Lock()

        self._add_player(owner)
        logger.info(
            "Created session %s (%dx%d, %d mines, max %d players)",
            self.session_id, config.board.rows, config.board.cols,
            config.board.num_mines, config.max_players,
        )

    # ========================================================================
    # Roster
    # ========================================================================

    def _add_player(self, identity: Hashable) -> Player:
        player = Player(identity=identity, index=len(self._players))
        self._players.append(player)
        self._views.append(PlayerView(self.minefield, player.index))
        self._player_locks.append(threading.Lock())
        return player

    def join(self, identity: Hashable) -> Player:
        """
        Add a player to the roster.

        A player already on the roster gets their existing seat back.

        Raises:
            SessionAlreadyActive: Session has left the lobby.
            SessionFull: Roster is at max_players.
            InvalidIdentity: Identity is not a str or int.
        """
        check_identity(identity)
        with self._lock:
            index = self.index_of(identity)
            if index is not None:
                return replace(self._players[index])
            if not isinstance(self._state, Lobby):
                raise SessionAlreadyActive(f"Session {self.session_id} already started")
            if len(self._players) >= self.config.max_players:
                raise SessionFull(f"Session {self.session_id} is full")
            player = self._add_player(identity)
            logger.info("Player %d joined session %s", player.index, self.session_id)
            return replace(player)

    def index_of(self, identity: Hashable) -> Optional[int]:
        """Roster index of an identity, None for spectators."""
        with self._lock:
            for player in self._players:
                if player.identity == identity:
                    return player.index
        return None

    # ========================================================================
    # Lifecycle
    # ========================================================================

    def start(self, requested_by: Hashable, opening: Optional[Point] = None) -> None:
        """
        Leave the lobby and freeze the roster.

        Args:
            requested_by: Identity asking to start; must be the owner.
            opening: Optional first-click cell; places the mines now
                instead of on the first reveal.
        """
        with self._lock:
            if requested_by != self.owner:
                raise NotSessionOwner("Only the session owner can start the game")
            if not isinstance(self._state, Lobby):
                raise SessionAlreadyActive(f"Session {self.session_id} already started")
            if opening is not None:
                if not self.minefield.in_bounds(opening):
                    raise InvalidTarget(f"Cell {opening} is outside the board")
                self.minefield.place_mines(opening)
            self._activate()

    def _activate(self) -> None:
        self._state = Active(started_at=_now())
        logger.info(
            "Session %s started with %d players", self.session_id, len(self._players)
        )

    def _complete(self) -> None:
        started_at = self._state.started_at
        final_board = self.minefield.to_array()
        final_board.setflags(write=False)
        self._state = Completed(
            started_at=started_at,
            ended_at=_now(),
            final_board=final_board,
            final_scores=tuple(p.score for p in self._players),
        )
        logger.info(
            "Session %s completed, scores %s",
            self.session_id, list(self._state.final_scores),
        )

    def _check_accepting(self, action: Action) -> None:
        if isinstance(self._state, Completed):
            raise SessionNotActive("Game is over")
        if isinstance(self._state, Lobby):
            implicit_start = self.config.is_singleplayer and action is Action.REVEAL
            if not implicit_start:
                raise SessionNotActive("Game has not started")

    # ========================================================================
    # Action Intake
    # ========================================================================

    def submit_action(
        self, player_index: int, action: Action, point: Point
    ) -> RevealEffect:
        """
        Apply one player's action and log it.

        Actions from the same player are applied one at a time in arrival
        order; actions from different players proceed independently.

        Raises:
            UnknownPlayer: Index not on the roster.
            SessionNotActive: Lobby (outside a singleplayer first reveal)
                or completed.
            PlayerInactive: Player is dead or has already cleared.
            InvalidTarget: Cell cannot take the action.
        """
        player, view, player_lock = self._seat(player_index)
        with player_lock:
            with self._lock:
                self._check_accepting(action)
            if not player.is_active:
                raise PlayerInactive(f"Player {player_index} can no longer play")
            effect = view.apply(action, point)

            with self._lock:
                if isinstance(self._state, Lobby):
                    self._activate()
                entry = self._log.record(player_index, action, effect)
                self._settle(player, effect)
                if not any(p.is_active for p in self._players):
                    self._complete()
                self._pending.append(self._update_for(entry))
        self._dispatch()
        return effect

    def _seat(self, player_index: int) -> Tuple[Player, PlayerView, threading.Lock]:
        with self._lock:
            if not 0 <= player_index < len(self._players):
                raise UnknownPlayer(player_index)
            return (
                self._players[player_index],
                self._views[player_index],
                self._player_locks[player_index],
            )

    @staticmethod
    def _settle(player: Player, effect: RevealEffect) -> None:
        """Score and status bookkeeping for an applied effect."""
        player.score += len(effect.revealed)
        if effect.exploded is not None:
            player.dead = True
        if effect.cleared:
            player.cleared = True

    # ========================================================================
    # Broadcast
    # ========================================================================

    def subscribe(self, callback: Callable[[BoardUpdate], None]) -> None:
        """
        Register a listener for BoardUpdate events.

        Listeners run on the submitting thread after the session lock is
        released and see updates in log order. A listener that raises is
        logged and skipped. Listeners must not submit actions to this
        session themselves.
        """
        with self._lock:
            self._listeners.append(callback)

    def unsubscribe(self, callback: Callable[[BoardUpdate], None]) -> None:
        with self._lock:
            self._listeners.remove(callback)

    def _update_for(self, entry: LogEntry) -> BoardUpdate:
        return BoardUpdate(
            session_id=self.session_id,
            player_index=entry.player_index,
            sequence=entry.sequence,
            affected_cells=entry.effect.affected_cells,
            session_state=self.state,
        )

    def _dispatch(self) -> None:
        """Deliver queued updates in log order; the dispatch lock holder drains the queue."""
        with self._dispatch_lock:
            while True:
                with self._lock:
                    if not self._pending:
                        return
                    update = self._pending.popleft()
                    listeners = list(self._listeners)
                for listener in listeners:
                    try:
                        listener(update)
                    except Exception:
                        logger.exception(
                            "Listener failed on update %d of session %s",
                            update.sequence, self.session_id,
                        )

    # ========================================================================
    # Reads
    # ========================================================================

    @property
    def state(self) -> SessionState:
        return self._state.kind

    @property
    def lifecycle(self) -> Lifecycle:
        """The current state object, with the fields valid in that state."""
        return self._state

    @property
    def is_singleplayer(self) -> bool:
        return self.config.is_singleplayer

    @property
    def players(self) -> Tuple[Player, ...]:
        """Copies of the roster entries."""
        with self._lock:
            return tuple(replace(p) for p in self._players)

    def player(self, player_index: int) -> Player:
        player, _, _ = self._seat(player_index)
        with self._lock:
            return replace(player)

    def view(self, player_index: int) -> PlayerView:
        """
        A player's live view.

        Mutating it directly bypasses logging and scoring; submit actions
        through submit_action instead.
        """
        _, player_view, _ = self._seat(player_index)
        return player_view

    @property
    def log(self) -> Tuple[LogEntry, ...]:
        return self._log.entries()

    @property
    def final_board(self) -> Optional[np.ndarray]:
        if isinstance(self._state, Completed):
            return self._state.final_board
        return None

    def top_score(self) -> Optional[int]:
        """Best score in a multiplayer game; None for singleplayer or no score."""
        if self.is_singleplayer:
            return None
        with self._lock:
            best = max(p.score for p in self._players)
        return best or None

    def elapsed_seconds(self) -> Optional[float]:
        """Seconds since the start, frozen at completion; None in the lobby."""
        state = self._state
        if isinstance(state, Lobby):
            return None
        end = state.ended_at if isinstance(state, Completed) else _now()
        return (end - state.started_at).total_seconds()

    def can_see_flags(
        self,
        player_index: int,
        viewer: Optional[Hashable] = None,
        privileged: bool = False,
    ) -> bool:
        """Whether a viewer may see one player's flags."""
        if self.is_singleplayer or privileged or viewer == self.owner:
            return True
        return viewer is not None and self.index_of(viewer) == player_index

    def board_for(
        self,
        player_index: int,
        viewer: Optional[Hashable] = None,
        privileged: bool = False,
    ) -> np.ndarray:
        """
        Observation of one player's view as seen by a viewer.

        Other players' flags are hidden from non-privileged viewers in
        multiplayer games.
        """
        _, view, player_lock = self._seat(player_index)
        with player_lock:
            board = view.get_observation()
        if not self.can_see_flags(player_index, viewer, privileged):
            board[board == FLAGGED_VALUE] = HIDDEN_VALUE
        return board

    # ========================================================================
    # Replay
    # ========================================================================

    def replay(
        self, viewer: Optional[Hashable] = None, privileged: bool = False
    ) -> Replay:
        """
        Replay of the game so far for a viewer.

        Singleplayer replays, the owner and privileged viewers see every
        flag; roster members see only their own; spectators see none.
        """
        with self._lock:
            entries = self._log.entries()
            num_players = len(self._players)
        if self.can_see_flags(-1, viewer, privileged):
            visible = None
        else:
            index = self.index_of(viewer) if viewer is not None else None
            visible = {index} if index is not None else set()
        return Replay(self.minefield, entries, num_players, visible)

    # ========================================================================
    # Persistence
    # ========================================================================

    def to_record(self) -> SessionRecord:
        """Everything needed to resume or replay this session."""
        with self._lock:
            state = self._state
            return SessionRecord(
                session_id=self.session_id,
                config=self.config,
                owner=self.owner,
                seed=self.minefield.seed,
                mines=sorted(self.minefield.mines) if self.minefield.is_placed else None,
                players=[replace(p) for p in self._players],
                state=state.kind.value,
                started_at=getattr(state, "started_at", None),
                ended_at=getattr(state, "ended_at", None),
                final_board=state.final_board.tolist() if isinstance(state, Completed) else None,
                entries=list(self._log.entries()),
            )

    @classmethod
    def from_record(cls, record: SessionRecord) -> "GameSession":
        """
        Resume a session by re-applying its stored log.

        Raises:
            ReplayError: The stored log does not reproduce on the stored
                layout.
        """
        board = record.config.board
        if record.mines is not None:
            minefield = Minefield.from_layout(board, record.mines, record.seed)
        else:
            minefield = Minefield(board, record.seed)
        session = cls(record.config, record.owner, record.session_id, minefield)
        for stored in record.players[1:]:
            session._add_player(stored.identity)

        for entry in record.entries:
            if not 0 <= entry.player_index < len(session._players):
                raise ReplayError(f"Entry {entry.sequence} references an unknown player")
            effect = session._views[entry.player_index].apply(entry.action, entry.point)
            if effect != entry.effect:
                raise ReplayError(f"Entry {entry.sequence} did not reproduce its effect")
            session._settle(session._players[entry.player_index], effect)
        session._log = EventLog.from_entries(record.entries)

        state = SessionState(record.state)
        if state is SessionState.ACTIVE:
            session._state = Active(started_at=record.started_at)
        elif state is SessionState.COMPLETED:
            final_board = np.array(record.final_board, dtype=np.int8)
            final_board.setflags(write=False)
            session._state = Completed(
                started_at=record.started_at,
                ended_at=record.ended_at,
                final_board=final_board,
                final_scores=tuple(p.score for p in session._players),
            )
        logger.info(
            "Restored session %s (%s, %d log entries)",
            session.session_id, state.value, len(record.entries),
        )
        return session
