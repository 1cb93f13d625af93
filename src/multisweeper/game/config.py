"""
Board and session configuration.

Validated dataclasses plus the classic difficulty presets.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from .errors import InvalidConfiguration


# ============================================================================
# Constants
# ============================================================================

# Size of the safe opening region (the first click and its 8 neighbors).
OPENING_SIZE = 9

MAX_PLAYERS = 16


# ============================================================================
# Board Configuration
# ============================================================================

@dataclass(frozen=True)
class BoardConfig:
    """
    Configuration for a Minesweeper board.

    Attributes:
        rows: Number of rows.
        cols: Number of columns.
        num_mines: Total mines to place.
        safe_opening: Keep the whole 3x3 region around the first reveal
            mine-free (otherwise only the revealed cell itself).
    """

    rows: int = 9
    cols: int = 9
    num_mines: int = 10
    safe_opening: bool = True

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        self._validate()

    def _validate(self) -> None:
        """Ensure configuration values are valid."""
        if self.rows < 1 or self.cols < 1:
            raise InvalidConfiguration("Board dimensions must be positive")
        if self.num_mines < 0:
            raise InvalidConfiguration("Number of mines cannot be negative")
        if self.num_mines > self.total_cells:
            raise InvalidConfiguration(f"Too many mines (max {self.total_cells})")

    def check_placeable(self) -> None:
        """
        Ensure the mines fit beside the cells the first reveal keeps clear.

        Only boards whose layout is fixed by a first reveal need this;
        a layout placed up front may fill every cell.

        Raises:
            InvalidConfiguration: More mines than max_mines.
        """
        if self.num_mines > self.max_mines:
            raise InvalidConfiguration(f"Too many mines (max {self.max_mines})")

    @property
    def total_cells(self) -> int:
        """Number of cells on the board."""
        return self.rows * self.cols

    @property
    def safe_cells(self) -> int:
        """Number of cells without a mine."""
        return self.total_cells - self.num_mines

    @property
    def opening_size(self) -> int:
        """Cells guaranteed mine-free by the first reveal."""
        if self.safe_opening:
            return min(OPENING_SIZE, self.total_cells)
        return 1

    @property
    def max_mines(self) -> int:
        """Largest mine count a first reveal can still be placed around."""
        return self.total_cells - self.opening_size

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "rows": self.rows,
            "cols": self.cols,
            "num_mines": self.num_mines,
            "safe_opening": self.safe_opening,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BoardConfig":
        return cls(
            rows=int(data["rows"]),
            cols=int(data["cols"]),
            num_mines=int(data["num_mines"]),
            safe_opening=bool(data.get("safe_opening", True)),
        )


# Preset difficulty levels
BEGINNER = BoardConfig(9, 9, 10)
INTERMEDIATE = BoardConfig(16, 16, 40)
EXPERT = BoardConfig(16, 30, 99)


# ============================================================================
# Game Configuration
# ============================================================================

@dataclass(frozen=True)
class GameConfig:
    """
    Configuration for one game session.

    Attributes:
        board: Board dimensions and mine count.
        max_players: Roster capacity; 1 means a singleplayer game.
        seed: Seed for mine placement (drawn fresh when omitted).
    """

    board: BoardConfig = field(default_factory=BoardConfig)
    max_players: int = 1
    seed: Optional[int] = None

    def __post_init__(self) -> None:
        self.board.check_placeable()
        if not 1 <= self.max_players <= MAX_PLAYERS:
            raise InvalidConfiguration(
                f"max_players must be between 1 and {MAX_PLAYERS}"
            )

    @property
    def is_singleplayer(self) -> bool:
        return self.max_players == 1

    def to_dict(self) -> Dict[str, Any]:
        return {
            "board": self.board.to_dict(),
            "max_players": self.max_players,
            "seed": self.seed,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GameConfig":
        return cls(
            board=BoardConfig.from_dict(data["board"]),
            max_players=int(data.get("max_players", 1)),
            seed=data.get("seed"),
        )
