from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class Phase(str, Enum):
    LOBBY = 'lobby'
    BIDDING = 'bidding'
    FINISHED = 'finished'


@dataclass
class Player:
    id: str
    name: str
    hand_size: int
    hand: List[int] = field(default_factory=list)
    alive: bool = True
    connected: bool = True

    def to_dict(self):
        # Public view: the hand itself is never part of it
        return {
            'id': self.id,
            'name': self.name,
            'handSize': self.hand_size,
            'alive': self.alive,
            'connected': self.connected,
        }


@dataclass(frozen=True)
class Bid:
    count: int
    face: int
    bidder_id: Optional[str] = None

    @property
    def key(self):
        """The ``(count, face)`` pair used for duplicate detection."""
        return (self.count, self.face)

    def to_dict(self):
        return {'count': self.count, 'face': self.face, 'bidderId': self.bidder_id}

    def __str__(self) -> str:
        return f"{self.count} x {self.face}"


@dataclass
class Notification:
    """An outbound event composed by the game core.

    ``to`` is ``None`` for a room-wide broadcast, otherwise the id of the one
    player whose connection must receive it (private hands).
    """
    event: str
    payload: Dict[str, Any]
    to: Optional[str] = None

    @property
    def is_private(self) -> bool:
        return self.to is not None
