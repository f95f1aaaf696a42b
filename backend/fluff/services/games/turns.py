from typing import Sequence

from fluff.models import Player


def next_alive(players: Sequence[Player], from_index: int) -> int:
    """Index of the first alive player after ``from_index``, wrapping around.

    Eliminated entries stay in ``players`` and are skipped, so indices never
    shift. Returns ``from_index`` when nobody else is alive.
    """
    total = len(players)
    if total == 0:
        return from_index
    for step in range(1, total):
        idx = (from_index + step) % total
        if players[idx].alive:
            return idx
    return from_index
