"""Game domain services: dice, bids, turns, resolution and room state.

This package contains the pure game logic that is driven by the HTTP routes
and socket handlers, keeping transport concerns separated from core game
mechanics.
"""

from .registry import RoomRegistry
from .state import GameState

__all__ = ['GameState', 'RoomRegistry']
