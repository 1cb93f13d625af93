"""
Multiplayer matches between agents.

Drives a GameSession with one agent per seat, each agent reading only its
own seat's board, until the session completes.
"""
import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from ..game.config import BoardConfig, GameConfig
from ..game.errors import ActionError
from ..game.minefield import Minefield
from ..sessions.session import GameSession, SessionState
from .base_agent import BaseAgent

logger = logging.getLogger(__name__)


# ============================================================================
# Multiplayer Matches
# ============================================================================

@dataclass
class MatchResult:
    """Outcome of a multiplayer match."""

    session: GameSession
    scores: List[int] = field(default_factory=list)
    cleared: List[bool] = field(default_factory=list)
    dead: List[bool] = field(default_factory=list)
    rounds: int = 0

    @property
    def winner(self) -> Optional[int]:
        """Seat with the best score, None on a tie or when nobody scored."""
        best = max(self.scores)
        if best == 0 or self.scores.count(best) > 1:
            return None
        return self.scores.index(best)


def play_match(
    agents: Sequence[BaseAgent],
    board_config: Optional[BoardConfig] = None,
    seed: Optional[int] = None,
    max_rounds: int = 1000,
    minefield: Optional[Minefield] = None,
) -> MatchResult:
    """
    Play one multiplayer session, one agent per seat.

    Agents act in round-robin seat order; each round, every active seat
    submits one action. The match ends when the session completes or
    after max_rounds rounds.

    Args:
        agents: One agent per seat; seat 0 owns the session.
        board_config: Board configuration.
        seed: Seed for mine placement.
        max_rounds: Round limit.
        minefield: Fixed layout to play instead of a generated one.

    Returns:
        MatchResult with the session and per-seat outcome.
    """
    board_config = board_config or BoardConfig()
    config = GameConfig(board=board_config, max_players=len(agents), seed=seed)
    session = GameSession(config, owner="seat-0", minefield=minefield)
    for seat in range(1, len(agents)):
        session.join(f"seat-{seat}")
    session.start("seat-0")
    for agent in agents:
        agent.reset()

    rounds = 0
    while session.state is SessionState.ACTIVE and rounds < max_rounds:
        rounds += 1
        for seat, agent in enumerate(agents):
            if not session.player(seat).is_active:
                continue
            observation = session.board_for(seat, viewer=f"seat-{seat}")
            kind, point = agent.select_move(observation)
            try:
                session.submit_action(seat, kind, point)
            except ActionError as exc:
                logger.debug("Seat %d action rejected: %s", seat, exc)
            if session.state is not SessionState.ACTIVE:
                break

    players = session.players
    logger.info(
        "Match %s finished after %d rounds, scores %s",
        session.session_id, rounds, [p.score for p in players],
    )
    return MatchResult(
        session=session,
        scores=[p.score for p in players],
        cleared=[p.cleared for p in players],
        dead=[p.dead for p in players],
        rounds=rounds,
    )
