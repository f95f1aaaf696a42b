import logging
import threading
import uuid
from typing import Dict, List, Optional

from fluff.errors import RoomExists, RoomNotFound
from .dice import DiceRoller
from .state import DEFAULT_HAND_SIZE, MIN_PLAYERS, GameState

logger = logging.getLogger(__name__)


def generate_room_id(taken, length=8):
    """Generate a unique, short room id."""
    while True:
        room_id = uuid.uuid4().hex[:length]
        if room_id not in taken:
            return room_id


class RoomRegistry:
    """Owns every live room of this process, keyed by room id."""

    def __init__(self, default_hand_size: int = DEFAULT_HAND_SIZE, min_players: int = MIN_PLAYERS,
                 room_id_length: int = 8, roller_factory=DiceRoller):
        self.default_hand_size = default_hand_size
        self.min_players = min_players
        self.room_id_length = room_id_length
        self.roller_factory = roller_factory
        self._rooms: Dict[str, GameState] = {}
        self._lock = threading.Lock()

    def __len__(self):
        return len(self._rooms)

    def __contains__(self, room_id):
        return room_id in self._rooms

    def room_ids(self) -> List[str]:
        with self._lock:
            return list(self._rooms)

    def _new_room(self, room_id: str, hand_size: Optional[int]) -> GameState:
        game = GameState(
            room_id,
            default_hand_size=hand_size or self.default_hand_size,
            min_players=self.min_players,
            roller=self.roller_factory(),
        )
        self._rooms[room_id] = game
        logger.info(f"[room-create] room={room_id} hand_size={game.default_hand_size}")
        return game

    def create(self, room_id: Optional[str] = None, hand_size: Optional[int] = None) -> GameState:
        with self._lock:
            if room_id is None:
                room_id = generate_room_id(self._rooms, self.room_id_length)
            elif room_id in self._rooms:
                raise RoomExists()
            return self._new_room(room_id, hand_size)

    def get(self, room_id: str) -> GameState:
        with self._lock:
            game = self._rooms.get(room_id)
        if game is None:
            raise RoomNotFound()
        return game

    def get_or_create(self, room_id: str) -> GameState:
        with self._lock:
            game = self._rooms.get(room_id)
            if game is None:
                game = self._new_room(room_id, None)
            return game

    def holds(self, room_id: str, game: GameState) -> bool:
        """True while ``game`` is still the live room registered under ``room_id``."""
        with self._lock:
            return self._rooms.get(room_id) is game

    def destroy(self, room_id: str) -> None:
        with self._lock:
            if self._rooms.pop(room_id, None) is not None:
                logger.info(f"[room-destroy] room={room_id}")
