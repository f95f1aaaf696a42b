import random
from typing import List, Optional

FACES = (1, 2, 3, 4, 5, 6)


class DiceRoller:
    """Rolls private hands. Fair, not unpredictable: a plain ``random.Random``."""

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    def roll(self, n: int) -> List[int]:
        return [self.rng.randint(1, 6) for _ in range(max(0, n))]
