"""
Session manager.

Registry of live sessions keyed by id, backed by a SessionStore. A
transport layer talks to this class only; sessions that are not in memory
are resumed from the store on first access, and completed sessions are
saved automatically.
"""
import logging
import threading
from typing import Callable, Dict, Hashable, Optional

from ..game.cell import Point
from ..game.config import GameConfig
from ..game.errors import InvalidConfiguration, UnknownSession
from ..game.minefield import Minefield
from ..game.view import Action, RevealEffect
from .persistence import InMemorySessionStore, SessionRecord, SessionStore
from .players import Player
from .replay import Replay
from .session import BoardUpdate, GameSession, SessionState

logger = logging.getLogger(__name__)


class SessionManager:
    """Creates, looks up, and persists game sessions."""

    def __init__(self, store: Optional[SessionStore] = None) -> None:
        self.store = store if store is not None else InMemorySessionStore()
        self._sessions: Dict[str, GameSession] = {}
        self._lock = threading.Lock()

    # ========================================================================
    # Registry
    # ========================================================================

    def create_session(
        self,
        config: GameConfig,
        owner: Hashable,
        session_id: Optional[str] = None,
        minefield: Optional[Minefield] = None,
    ) -> GameSession:
        """
        Create a session in the lobby with the owner seated at index 0.

        Args:
            config: Board and roster configuration.
            owner: Identity of the creating player.
            session_id: Identifier (a random one is generated if omitted).
            minefield: Fixed layout to play instead of a generated one.

        Raises:
            InvalidConfiguration: session_id is already taken.
        """
        session = GameSession(config, owner, session_id, minefield)
        with self._lock:
            if session.session_id in self._sessions or self.store.exists(session.session_id):
                raise InvalidConfiguration(f"Session {session.session_id!r} already exists")
            self._register(session)
        return session

    def get(self, session_id: str) -> GameSession:
        """
        Look up a session, resuming it from the store if needed.

        Raises:
            UnknownSession: Neither live nor stored.
        """
        with self._lock:
            session = self._sessions.get(session_id)
            if session is not None:
                return session
            if not self.store.exists(session_id):
                raise UnknownSession(session_id)
            session = GameSession.from_record(self.store.load(session_id))
            self._register(session)
            return session

    def _register(self, session: GameSession) -> None:
        session.subscribe(self._on_update)
        self._sessions[session.session_id] = session

    def sessions(self) -> Dict[str, SessionState]:
        """Live session ids and their states."""
        with self._lock:
            return {sid: s.state for sid, s in self._sessions.items()}

    def close(self, session_id: str) -> SessionRecord:
        """Save a session and drop it from memory."""
        record = self.save(session_id)
        with self._lock:
            session = self._sessions.pop(session_id)
        session.unsubscribe(self._on_update)
        return record

    # ========================================================================
    # Session Operations
    # ========================================================================

    def join(self, session_id: str, identity: Hashable) -> Player:
        return self.get(session_id).join(identity)

    def start(
        self, session_id: str, requested_by: Hashable, opening: Optional[Point] = None
    ) -> None:
        self.get(session_id).start(requested_by, opening)

    def submit_action(
        self, session_id: str, player_index: int, action: Action, point: Point
    ) -> RevealEffect:
        return self.get(session_id).submit_action(player_index, action, point)

    def subscribe(
        self, session_id: str, callback: Callable[[BoardUpdate], None]
    ) -> None:
        self.get(session_id).subscribe(callback)

    def replay(
        self,
        session_id: str,
        viewer: Optional[Hashable] = None,
        privileged: bool = False,
    ) -> Replay:
        return self.get(session_id).replay(viewer, privileged)

    # ========================================================================
    # Persistence
    # ========================================================================

    def save(self, session_id: str) -> SessionRecord:
        """Write a session's current record to the store."""
        record = self.get(session_id).to_record()
        self.store.save(record)
        logger.debug("Saved session %s (%s)", session_id, record.state)
        return record

    def _on_update(self, update: BoardUpdate) -> None:
        """Save completed sessions; a failed save is logged, never raised into play."""
        if update.session_state is not SessionState.COMPLETED:
            return
        try:
            self.save(update.session_id)
        except (OSError, TypeError, ValueError):
            logger.exception("Could not save completed session %s", update.session_id)
