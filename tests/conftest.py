"""
Pytest configuration and shared fixtures.
"""
import pytest
import sys
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from multisweeper.game import BoardConfig, Cell, GameConfig, Minefield, PlayerView
from multisweeper.sessions import GameSession, InMemorySessionStore, SessionManager


# ============================================================================
# Layouts
# ============================================================================

# 5x5, mines in opposite corners. Revealing (2, 2) clears the board.
#   * 1 0 0 0
#   1 1 0 0 0
#   0 0 0 0 0
#   0 0 0 1 1
#   0 0 0 1 *
CORNERS_CONFIG = BoardConfig(5, 5, 2)
CORNERS_MINES = [(0, 0), (4, 4)]

# 3x5, a wall of mines down the middle column splitting two safe regions.
#   0 2 * 2 0
#   0 3 * 3 0
#   0 2 * 2 0
WALL_CONFIG = BoardConfig(3, 5, 3)
WALL_MINES = [(0, 2), (1, 2), (2, 2)]


# ============================================================================
# Minefield Fixtures
# ============================================================================

@pytest.fixture
def corners_minefield() -> Minefield:
    """5x5 minefield with mines at (0, 0) and (4, 4)."""
    return Minefield.from_layout(CORNERS_CONFIG, CORNERS_MINES, seed=1)


@pytest.fixture
def wall_minefield() -> Minefield:
    """3x5 minefield with a mine wall in column 2."""
    return Minefield.from_layout(WALL_CONFIG, WALL_MINES, seed=2)


@pytest.fixture
def beginner_minefield() -> Minefield:
    """Unplaced beginner minefield with a fixed seed."""
    return Minefield(BoardConfig(9, 9, 10), seed=42)


# ============================================================================
# View Fixtures
# ============================================================================

@pytest.fixture
def corners_view(corners_minefield: Minefield) -> PlayerView:
    return PlayerView(corners_minefield)


@pytest.fixture
def wall_view(wall_minefield: Minefield) -> PlayerView:
    return PlayerView(wall_minefield)


# ============================================================================
# Cell Fixtures
# ============================================================================

@pytest.fixture
def hidden_cell() -> Cell:
    """Create a hidden cell."""
    return Cell()


@pytest.fixture
def numbered_cell() -> Cell:
    """Create a revealed cell with adjacent mines."""
    cell = Cell()
    cell.reveal(3)
    return cell


# ============================================================================
# Session Fixtures
# ============================================================================

@pytest.fixture
def solo_session(corners_minefield: Minefield) -> GameSession:
    """Singleplayer session on the corners layout."""
    return GameSession(GameConfig(board=CORNERS_CONFIG), "solo", minefield=corners_minefield)


@pytest.fixture
def duo_session(corners_minefield: Minefield) -> GameSession:
    """Two-player lobby on the corners layout: alice (owner) and bob."""
    session = GameSession(
        GameConfig(board=CORNERS_CONFIG, max_players=2), "alice",
        minefield=corners_minefield,
    )
    session.join("bob")
    return session


@pytest.fixture
def store() -> InMemorySessionStore:
    return InMemorySessionStore()


@pytest.fixture
def manager(store: InMemorySessionStore) -> SessionManager:
    return SessionManager(store)
