"""
Room Code Generation

Short, human-typable room codes. Visually confusable characters
(0/O and 1/I) are excluded from the alphabet.
"""

import random
import secrets
from typing import Optional

ROOM_CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
ROOM_CODE_LENGTH = 6


class RoomCodeGenerator:
    """
    Draws independent characters from ``ROOM_CODE_ALPHABET``.

    The generator does not check for collisions; the registry
    regenerates until it finds a free code.
    """

    def __init__(
        self,
        rng: Optional[random.Random] = None,
        length: int = ROOM_CODE_LENGTH,
        alphabet: str = ROOM_CODE_ALPHABET,
    ):
        self._rng = rng or secrets.SystemRandom()
        self.length = length
        self.alphabet = alphabet

    def generate(self) -> str:
        """Return a new random room code."""
        return "".join(self._rng.choice(self.alphabet) for _ in range(self.length))

    def is_valid(self, code: str) -> bool:
        """Check that a code has the right length and alphabet."""
        return (
            isinstance(code, str)
            and len(code) == self.length
            and all(ch in self.alphabet for ch in code)
        )
