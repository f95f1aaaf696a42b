"""Challenge resolution: reveal, count with wild ones, pick the loser, reroll."""

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Sequence

from fluff.models import Bid, Player
from .dice import DiceRoller

logger = logging.getLogger(__name__)


@dataclass
class Resolution:
    actual_count: int
    bid: Bid
    caller_id: str
    loser_id: str
    result_text: str
    revealed: Dict[str, List[int]]
    loser_eliminated: bool


def count_matches(hands: Iterable[Sequence[int]], face: int) -> int:
    """Dice showing ``face`` plus, unless bidding on ones, every 1 (wild)."""
    total = 0
    for hand in hands:
        for die in hand:
            if die == face or (face != 1 and die == 1):
                total += 1
    return total


def resolve_call(players: Sequence[Player], bid: Bid, caller_id: str, roller: DiceRoller) -> Resolution:
    """Apply a call to ``players`` in place and describe what happened.

    The caller loses a die when the bid stands (``actual >= count``), the
    bidder otherwise. Every alive player is rerolled at their new size.
    """
    by_id = {p.id: p for p in players}
    caller = by_id[caller_id]
    bidder = by_id[bid.bidder_id]

    actual = count_matches((p.hand for p in players if p.alive), bid.face)
    if actual >= bid.count:
        loser = caller
        text = (f"{bidder.name}'s bid was correct ({actual} >= {bid.count}). "
                f"{caller.name} loses a die.")
    else:
        loser = bidder
        text = (f"{bidder.name}'s bid failed ({actual} < {bid.count}). "
                f"{bidder.name} loses a die.")

    loser.hand_size = max(0, loser.hand_size - 1)
    if loser.hand_size == 0:
        loser.alive = False

    revealed = {p.id: list(p.hand) for p in players}

    for p in players:
        p.hand = roller.roll(p.hand_size) if p.alive else []

    logger.info(f"[resolve] bid={bid} actual={actual} loser={loser.id} hand_size={loser.hand_size}")
    return Resolution(
        actual_count=actual,
        bid=bid,
        caller_id=caller.id,
        loser_id=loser.id,
        result_text=text,
        revealed=revealed,
        loser_eliminated=not loser.alive,
    )
