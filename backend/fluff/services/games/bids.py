"""Bid rules: well-formedness, the count-then-face ordering and duplicates."""

from typing import AbstractSet, Optional, Tuple

from fluff.errors import DuplicateBid, InvalidBid
from fluff.models import Bid
from .dice import FACES


def as_int(value) -> Optional[int]:
    """Whole number from an int, integral float or numeric string; None otherwise."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


def parse_bid(count, face, bidder_id: str) -> Bid:
    """Build a Bid from raw client values, raising InvalidBid when malformed."""
    qty = as_int(count)
    fc = as_int(face)
    if qty is None or fc is None:
        raise InvalidBid('Bid count and face must be whole numbers')
    if qty < 1:
        raise InvalidBid('Bid count must be at least 1')
    if fc not in FACES:
        raise InvalidBid('Bid face must be between 1 and 6')
    return Bid(count=qty, face=fc, bidder_id=bidder_id)


def is_higher(new: Bid, previous: Optional[Bid]) -> bool:
    if previous is None:
        return True
    if new.count != previous.count:
        return new.count > previous.count
    return new.face > previous.face


def check_not_duplicate(bid: Bid, round_bids: AbstractSet[Tuple[int, int]]) -> None:
    if bid.key in round_bids:
        raise DuplicateBid()


def check_raises(bid: Bid, previous: Optional[Bid]) -> None:
    if not is_higher(bid, previous):
        raise InvalidBid(
            f'Bid must be higher than previous bid ({previous.count} x {previous.face}): '
            'raise the count, or keep it and raise the face'
        )
