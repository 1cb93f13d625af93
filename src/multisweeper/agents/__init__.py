"""
Minesweeper agents module.

Agents that fill session seats and the match driver that runs them:
- LogicAgent: Deduction analyzer plus probability guessing
- play_match: One multiplayer session, one agent per seat
"""
from .base_agent import BaseAgent, Move
from .logic_agent import LogicAgent
from .match import MatchResult, play_match

__all__ = [
    "BaseAgent",
    "Move",
    "LogicAgent",
    "MatchResult",
    "play_match",
]
