"""
Player roster entries.
"""
from dataclasses import dataclass
from typing import Any, Dict, Hashable

from ..game.errors import InvalidIdentity

# Identity types that come back unchanged from a JSON record.
IDENTITY_TYPES = (str, int)


def check_identity(identity: Hashable) -> None:
    """
    Reject identities that a saved session could not restore as equal.

    Raises:
        InvalidIdentity: identity is not a str or int.
    """
    if not isinstance(identity, IDENTITY_TYPES):
        raise InvalidIdentity(
            f"Identity must be a str or int, got {type(identity).__name__}"
        )


@dataclass
class Player:
    """
    A roster member of one game session.

    Attributes:
        identity: Opaque str or int token from the identity collaborator
            (guest id, user id, ...). Only compared for equality.
        index: Position in the roster, unique within the session.
        dead: Player revealed a mine.
        cleared: Player revealed every safe cell.
        score: Cells revealed by this player's own actions.
    """

    identity: Hashable
    index: int
    dead: bool = False
    cleared: bool = False
    score: int = 0

    @property
    def is_active(self) -> bool:
        """Player can still act."""
        return not (self.dead or self.cleared)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "identity": self.identity,
            "index": self.index,
            "dead": self.dead,
            "cleared": self.cleared,
            "score": self.score,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Player":
        return cls(
            identity=data["identity"],
            index=int(data["index"]),
            dead=bool(data.get("dead", False)),
            cleared=bool(data.get("cleared", False)),
            score=int(data.get("score", 0)),
        )
