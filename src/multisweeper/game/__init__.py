"""
Minesweeper game module.

Provides the core engine: board configuration, the shared minefield,
per-player views with reveal/chord/flag actions, and the deduction
analyzer.
"""
from .cell import Cell, CellState, Point
from .config import BoardConfig, GameConfig, BEGINNER, INTERMEDIATE, EXPERT, MAX_PLAYERS
from .errors import (
    MinesweeperError,
    InvalidConfiguration,
    ActionError,
    InvalidTarget,
    UnknownPlayer,
    PlayerInactive,
    SessionNotActive,
    JoinError,
    SessionFull,
    SessionAlreadyActive,
    InvalidIdentity,
    NotSessionOwner,
    UnknownSession,
    ReplayError,
)
from .minefield import Minefield
from .view import Action, PlayerView, RevealEffect, apply, render_board
from .deduction import Deduction, analyze

__all__ = [
    "Cell",
    "CellState",
    "Point",
    "BoardConfig",
    "GameConfig",
    "BEGINNER",
    "INTERMEDIATE",
    "EXPERT",
    "MAX_PLAYERS",
    "MinesweeperError",
    "InvalidConfiguration",
    "ActionError",
    "InvalidTarget",
    "UnknownPlayer",
    "PlayerInactive",
    "SessionNotActive",
    "JoinError",
    "SessionFull",
    "SessionAlreadyActive",
    "InvalidIdentity",
    "NotSessionOwner",
    "UnknownSession",
    "ReplayError",
    "Minefield",
    "Action",
    "PlayerView",
    "RevealEffect",
    "apply",
    "render_board",
    "Deduction",
    "analyze",
]
