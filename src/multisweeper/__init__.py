"""
Multiplayer Minesweeper engine.

Subpackages:
- game: minefield, per-player views, reveal engine and deduction analyzer
- sessions: game sessions, event log, replay and persistence
- agents: logic agents that fill session seats, and the match driver
"""
__version__ = "0.1.0"
