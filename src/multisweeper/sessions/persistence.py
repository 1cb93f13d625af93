"""
Session persistence.

A SessionRecord holds everything needed to resume or replay a session:
the configuration, the realized mine layout (or the seed before the first
reveal), the roster, the lifecycle timestamps and the event log. Stores
keep records as plain dictionaries so they serialize cleanly to JSON.
"""
import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Hashable, List, Optional, Union

from ..game.cell import Point
from ..game.config import GameConfig
from ..game.errors import UnknownSession
from .event_log import LogEntry
from .players import Player

logger = logging.getLogger(__name__)


def _format_time(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def _parse_time(value: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(value) if value is not None else None


@dataclass
class SessionRecord:
    """Serializable snapshot of a game session."""

    session_id: str
    config: GameConfig
    owner: Hashable
    seed: int
    mines: Optional[List[Point]]
    players: List[Player]
    state: str
    started_at: Optional[datetime] = None
    ended_at: Optional[datetime] = None
    final_board: Optional[List[List[int]]] = None
    entries: List[LogEntry] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "session_id": self.session_id,
            "config": self.config.to_dict(),
            "owner": self.owner,
            "seed": self.seed,
            "mines": None if self.mines is None else [list(p) for p in self.mines],
            "players": [p.to_dict() for p in self.players],
            "state": self.state,
            "started_at": _format_time(self.started_at),
            "ended_at": _format_time(self.ended_at),
            "final_board": self.final_board,
            "entries": [e.to_dict() for e in self.entries],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SessionRecord":
        mines = data.get("mines")
        return cls(
            session_id=data["session_id"],
            config=GameConfig.from_dict(data["config"]),
            owner=data["owner"],
            seed=int(data["seed"]),
            mines=None if mines is None else [tuple(p) for p in mines],
            players=[Player.from_dict(p) for p in data["players"]],
            state=data["state"],
            started_at=_parse_time(data.get("started_at")),
            ended_at=_parse_time(data.get("ended_at")),
            final_board=data.get("final_board"),
            entries=[LogEntry.from_dict(e) for e in data.get("entries", [])],
        )


# ============================================================================
# Stores
# ============================================================================

class SessionStore(ABC):
    """Abstract storage backend for session records."""

    @abstractmethod
    def save(self, record: SessionRecord) -> None:
        """Create or overwrite the record for record.session_id."""

    @abstractmethod
    def load(self, session_id: str) -> SessionRecord:
        """
        Load a stored record.

        Raises:
            UnknownSession: No record under that id.
        """

    @abstractmethod
    def exists(self, session_id: str) -> bool:
        pass

    @abstractmethod
    def delete(self, session_id: str) -> None:
        pass


class InMemorySessionStore(SessionStore):
    """Process-local store, for tests and local play."""

    def __init__(self) -> None:
        self._records: Dict[str, Dict[str, Any]] = {}

    def save(self, record: SessionRecord) -> None:
        self._records[record.session_id] = record.to_dict()

    def load(self, session_id: str) -> SessionRecord:
        if session_id not in self._records:
            raise UnknownSession(session_id)
        return SessionRecord.from_dict(self._records[session_id])

    def exists(self, session_id: str) -> bool:
        return session_id in self._records

    def delete(self, session_id: str) -> None:
        self._records.pop(session_id, None)


class JsonSessionStore(SessionStore):
    """One `<session_id>.json` file per session in a directory."""

    def __init__(self, directory: Union[str, Path]) -> None:
        self.directory = Path(directory)
        self.directory.mkdir(parents=True, exist_ok=True)

    def _path(self, session_id: str) -> Path:
        if not session_id or Path(session_id).name != session_id or session_id.startswith("."):
            raise ValueError(f"Invalid session id {session_id!r}")
        return self.directory / f"{session_id}.json"

    def save(self, record: SessionRecord) -> None:
        """Write atomically; a save that fails keeps the previous record."""
        path = self._path(record.session_id)
        payload = json.dumps(record.to_dict(), indent=2)
        temp_path = path.with_name(f".{path.name}.tmp")
        with open(temp_path, "w") as f:
            f.write(payload)
        temp_path.replace(path)
        logger.debug("Saved session %s to %s", record.session_id, path)

    def load(self, session_id: str) -> SessionRecord:
        path = self._path(session_id)
        if not path.exists():
            raise UnknownSession(session_id)
        with open(path) as f:
            return SessionRecord.from_dict(json.load(f))

    def exists(self, session_id: str) -> bool:
        return self._path(session_id).exists()

    def delete(self, session_id: str) -> None:
        path = self._path(session_id)
        if path.exists():
            path.unlink()
