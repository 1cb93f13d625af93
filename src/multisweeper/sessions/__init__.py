"""
Game session module.

Provides the multiplayer layer on top of the engine: the session state
machine, the event log, replays, persistence and the session manager.
"""
from .players import Player
from .event_log import EventLog, LogEntry
from .replay import PlayerSnapshot, Replay, ReplayFrame
from .persistence import InMemorySessionStore, JsonSessionStore, SessionRecord, SessionStore
from .session import Active, BoardUpdate, Completed, GameSession, Lobby, SessionState
from .manager import SessionManager

__all__ = [
    "Player",
    "EventLog",
    "LogEntry",
    "PlayerSnapshot",
    "Replay",
    "ReplayFrame",
    "SessionRecord",
    "SessionStore",
    "InMemorySessionStore",
    "JsonSessionStore",
    "SessionState",
    "Lobby",
    "Active",
    "Completed",
    "BoardUpdate",
    "GameSession",
    "SessionManager",
]
