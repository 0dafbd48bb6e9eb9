import random

from dice_duel.models import DIE_FACES


class DiceRoller:
    """Uniform d20 roller. Pass a seeded ``random.Random`` for repeatable rolls."""

    def __init__(self, rng=None, faces: int = DIE_FACES):
        self._rng = rng or random.SystemRandom()
        self.faces = faces

    def roll(self) -> int:
        return self._rng.randint(1, self.faces)

    __call__ = roll
