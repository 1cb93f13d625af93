"""
Exception hierarchy for the Minesweeper engine.

Every failure in the engine is a caller input problem: bad board
parameters, an action against an ineligible cell, or a request that does
not fit the session lifecycle. None of them are retryable.
"""


class MinesweeperError(Exception):
    """Base class for all engine errors."""


class InvalidConfiguration(MinesweeperError, ValueError):
    """Malformed board or session parameters."""


# ============================================================================
# Action Errors
# ============================================================================

class ActionError(MinesweeperError):
    """An action was rejected before touching any state."""


class InvalidTarget(ActionError):
    """Action against a cell (or view) that cannot take it."""


class UnknownPlayer(ActionError):
    """Action references a player index that is not on the roster."""

    def __init__(self, player_index: int) -> None:
        super().__init__(f"Player {player_index} doesn't exist")
        self.player_index = player_index


class PlayerInactive(ActionError):
    """Acting player is already dead or has already cleared the board."""


class SessionNotActive(ActionError):
    """Session is not accepting actions in its current state."""


# ============================================================================
# Session Errors
# ============================================================================

class JoinError(MinesweeperError):
    """A join request was rejected."""


class SessionFull(JoinError):
    """Roster already holds max_players players."""


class SessionAlreadyActive(JoinError):
    """Session has left the lobby."""


class InvalidIdentity(JoinError, ValueError):
    """Identity is not a str or int, so it would not survive a save."""


class NotSessionOwner(MinesweeperError):
    """Only the session owner may start the game."""


class UnknownSession(MinesweeperError):
    """No session with the requested id."""

    def __init__(self, session_id: str) -> None:
        super().__init__(f"Session {session_id!r} not found")
        self.session_id = session_id


class ReplayError(MinesweeperError):
    """Replay position out of range, or a log that does not reproduce."""
