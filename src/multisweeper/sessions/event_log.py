"""
Append-only event log of applied actions.

Entries are ordered by a single per-session counter. The counter is the
only ordering between players; within one player it is also the order in
which that player's actions were applied, which is what makes replay
deterministic.
"""
import threading
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple

from ..game.cell import Point
from ..game.view import Action, RevealEffect


@dataclass(frozen=True)
class LogEntry:
    """One applied action and its effect."""

    sequence: int
    player_index: int
    action: Action
    point: Point
    effect: RevealEffect

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sequence": self.sequence,
            "player_index": self.player_index,
            "action": self.action.value,
            "point": list(self.point),
            "effect": self.effect.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LogEntry":
        return cls(
            sequence=int(data["sequence"]),
            player_index=int(data["player_index"]),
            action=Action(data["action"]),
            point=tuple(data["point"]),
            effect=RevealEffect.from_dict(data["effect"]),
        )


class EventLog:
    """
    Append-only, linearizable record of a session's actions.

    `record` is the only mutator; appends from different threads are
    serialized by an internal lock so sequence numbers are unique and
    contiguous.
    """

    def __init__(self) -> None:
        self._entries: List[LogEntry] = []
        self._lock = threading.Lock()

    @classmethod
    def from_entries(cls, entries: Iterable[LogEntry]) -> "EventLog":
        """
        Restore a log from stored entries.

        Raises:
            ValueError: Sequence numbers are not contiguous from 0.
        """
        log = cls()
        for expected, entry in enumerate(entries):
            if entry.sequence != expected:
                raise ValueError(
                    f"Log entry {entry.sequence} found where {expected} was expected"
                )
            log._entries.append(entry)
        return log

    def record(
        self, player_index: int, action: Action, effect: RevealEffect
    ) -> LogEntry:
        """Append an applied action; returns the written entry."""
        with self._lock:
            entry = LogEntry(
                sequence=len(self._entries),
                player_index=player_index,
                action=action,
                point=effect.point,
                effect=effect,
            )
            self._entries.append(entry)
        return entry

    def entries(self, upto: Optional[int] = None) -> Tuple[LogEntry, ...]:
        """Entries with sequence < upto (all entries when omitted)."""
        with self._lock:
            if upto is None:
                return tuple(self._entries)
            return tuple(self._entries[:upto])

    @property
    def next_sequence(self) -> int:
        with self._lock:
            return len(self._entries)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __iter__(self) -> Iterator[LogEntry]:
        return iter(self.entries())

    def __getitem__(self, sequence: int) -> LogEntry:
        with self._lock:
            return self._entries[sequence]
