"""Per-room game state machine.

Every public operation checks everything it needs before touching state, so a
rejected request leaves the room exactly as it was. Operations return the
notifications the transport should deliver; private hands are addressed to a
single player and must never be broadcast.
"""

import logging
import threading
from typing import List, Optional, Set, Tuple

from fluff.errors import (
    AlreadyStarted,
    GameNotRunning,
    NoActiveBid,
    NotEnoughPlayers,
    NotHost,
    NotYourTurn,
)
from fluff.models import Bid, Notification, Phase, Player
from . import bids
from .dice import DiceRoller
from .resolution import resolve_call
from .turns import next_alive

logger = logging.getLogger(__name__)

DEFAULT_HAND_SIZE = 5
MIN_PLAYERS = 2


class GameState:
    def __init__(self, room_id: str, default_hand_size: int = DEFAULT_HAND_SIZE,
                 min_players: int = MIN_PLAYERS, roller: Optional[DiceRoller] = None):
        self.room_id = room_id
        self.default_hand_size = default_hand_size
        # One seated player would be the winner before any bid
        self.min_players = max(MIN_PLAYERS, min_players)
        self.roller = roller or DiceRoller()
        self.phase = Phase.LOBBY
        self.players: List[Player] = []
        self.turn_index = 0
        self.host_id: Optional[str] = None
        self.current_bid: Optional[Bid] = None
        self.round_bids: Set[Tuple[int, int]] = set()
        self.winner_id: Optional[str] = None
        self.round_number = 0
        # Held by the transport for the whole operation + delivery
        self.lock = threading.RLock()

    # ---- lookups ----

    def get_player(self, player_id: str) -> Optional[Player]:
        for p in self.players:
            if p.id == player_id:
                return p
        return None

    def index_of(self, player_id: str) -> int:
        for idx, p in enumerate(self.players):
            if p.id == player_id:
                return idx
        return -1

    @property
    def alive_players(self) -> List[Player]:
        return [p for p in self.players if p.alive]

    @property
    def current_player(self) -> Optional[Player]:
        if self.phase != Phase.BIDDING or not self.players:
            return None
        return self.players[self.turn_index]

    @property
    def is_abandoned(self) -> bool:
        return not any(p.connected for p in self.players)

    def players_payload(self):
        return [p.to_dict() for p in self.players]

    def snapshot(self):
        """Public view of the room. Hands are not included."""
        current = self.current_player
        return {
            'room_id': self.room_id,
            'phase': self.phase.value,
            'host_id': self.host_id,
            'players': self.players_payload(),
            'current_turn_player_id': current.id if current else None,
            'current_bid': self.current_bid.to_dict() if self.current_bid else None,
            'default_hand_size': self.default_hand_size,
            'round': self.round_number,
            'winner_id': self.winner_id,
        }

    # ---- notifications ----

    def _lobby_update(self) -> Notification:
        return Notification('lobbyUpdate', {'players': self.players_payload(), 'hostId': self.host_id})

    def _private_hands(self) -> List[Notification]:
        return [Notification('privateHand', {'dice': list(p.hand)}, to=p.id)
                for p in self.players if p.alive]

    def _game_over(self) -> Notification:
        winner = self.get_player(self.winner_id) if self.winner_id else None
        return Notification('gameOver', {
            'winnerId': self.winner_id,
            'winnerName': winner.name if winner else None,
            'players': self.players_payload(),
        })

    # ---- operations ----

    def join(self, player_id: str, name: str) -> List[Notification]:
        if self.phase != Phase.LOBBY:
            raise AlreadyStarted('Game already started; joining is closed')
        if self.get_player(player_id) is None:
            self.players.append(Player(
                id=player_id,
                name=(name or '').strip() or 'Player',
                hand_size=self.default_hand_size,
            ))
            if self.host_id is None:
                self.host_id = player_id
            logger.info(f"[join] room={self.room_id} player={player_id} count={len(self.players)}")
        return [self._lobby_update()]

    def start(self, requester_id: str) -> List[Notification]:
        if self.phase != Phase.LOBBY:
            raise AlreadyStarted()
        if requester_id != self.host_id:
            raise NotHost()
        if len(self.players) < self.min_players:
            raise NotEnoughPlayers(f'At least {self.min_players} players are needed to start')

        for p in self.players:
            p.hand = self.roller.roll(p.hand_size)
        self.phase = Phase.BIDDING
        self.turn_index = 0
        self.current_bid = None
        self.round_bids.clear()
        self.round_number = 1
        logger.info(f"[start] room={self.room_id} players={len(self.players)}")

        notes = self._private_hands()
        notes.append(Notification('gameStarted', {
            'turnOrder': [{'id': p.id, 'name': p.name} for p in self.players],
            'currentTurnPlayerId': self.players[self.turn_index].id,
        }))
        return notes

    def _require_running(self):
        if self.phase != Phase.BIDDING:
            raise GameNotRunning()

    def _require_turn(self, player_id: str):
        if self.players[self.turn_index].id != player_id:
            raise NotYourTurn()

    def place_bid(self, player_id: str, count, face) -> List[Notification]:
        self._require_running()
        bid = bids.parse_bid(count, face, player_id)
        bids.check_not_duplicate(bid, self.round_bids)
        self._require_turn(player_id)
        bids.check_raises(bid, self.current_bid)

        self.current_bid = bid
        self.round_bids.add(bid.key)
        self.turn_index = next_alive(self.players, self.turn_index)
        nxt = self.players[self.turn_index]
        logger.info(f"[bid] room={self.room_id} player={player_id} bid={bid} next={nxt.id}")
        return [Notification('newBid', {
            'count': bid.count,
            'face': bid.face,
            'bidderId': player_id,
            'nextTurnPlayerId': nxt.id,
        })]

    def call_bid(self, player_id: str) -> List[Notification]:
        self._require_running()
        self._require_turn(player_id)
        if self.current_bid is None:
            raise NoActiveBid()

        result = resolve_call(self.players, self.current_bid, player_id, self.roller)
        self.current_bid = None
        self.round_bids.clear()

        next_turn_id = None
        if not self._check_winner():
            self.turn_index = next_alive(self.players, self.index_of(result.loser_id))
            self.round_number += 1
            next_turn_id = self.players[self.turn_index].id

        notes = [Notification('roundResult', {
            'revealedHands': result.revealed,
            'actualCount': result.actual_count,
            'bid': result.bid.to_dict(),
            'resultText': result.result_text,
            'loserId': result.loser_id,
            'players': self.players_payload(),
            'nextTurnPlayerId': next_turn_id,
            'winnerId': self.winner_id,
        })]
        notes.extend(self._private_hands())
        if self.phase == Phase.FINISHED:
            notes.append(self._game_over())
        return notes

    def disconnect(self, player_id: str) -> List[Notification]:
        player = self.get_player(player_id)
        if player is None:
            return []

        if self.phase == Phase.LOBBY:
            self.players.remove(player)
        elif self.phase == Phase.FINISHED:
            # Standings are final; only presence changes
            player.connected = False
        else:
            was_turn = self.players[self.turn_index].id == player_id
            player.connected = False
            player.alive = False
            player.hand = []
            if was_turn:
                self.turn_index = next_alive(self.players, self.turn_index)
        logger.info(f"[disconnect] room={self.room_id} player={player_id} phase={self.phase.value}")

        if self.host_id == player_id:
            self._reassign_host(player_id)

        notes = [self._lobby_update()]
        if self.phase != Phase.BIDDING:
            return notes

        if self._check_winner():
            notes.append(self._game_over())
            return notes

        bidder = self.get_player(self.current_bid.bidder_id) if self.current_bid else None
        if bidder is not None and not bidder.alive:
            # Nobody is left to answer for the standing bid
            self.current_bid = None
            self.round_bids.clear()
        notes.append(Notification('turnUpdate', {
            'currentTurnPlayerId': self.players[self.turn_index].id,
            'currentBid': self.current_bid.to_dict() if self.current_bid else None,
        }))
        return notes

    # ---- transitions ----

    def _reassign_host(self, leaving_id: str) -> None:
        start = self.index_of(leaving_id)
        if start < 0:
            candidates = self.players
        else:
            candidates = self.players[start + 1:] + self.players[:start]
        successor = next((p for p in candidates if p.connected), None)
        self.host_id = successor.id if successor else None
        logger.info(f"[host] room={self.room_id} host={self.host_id}")

    def _check_winner(self) -> bool:
        """Finish the game when at most one player is alive."""
        alive = self.alive_players
        if self.phase != Phase.BIDDING or len(alive) > 1:
            return False
        self.phase = Phase.FINISHED
        self.winner_id = alive[0].id if alive else None
        self.current_bid = None
        self.round_bids.clear()
        logger.info(f"[finish] room={self.room_id} winner={self.winner_id}")
        return True
