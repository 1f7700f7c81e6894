"""
Secret generation.
Shuffle the ten digits with Fisher-Yates and keep the first four, so the secret
never repeats a digit and every one of the 5040 possible secrets is equally likely.

The random source is passed in; a seeded random.Random gives repeatable secrets in tests.
"""

import random
from typing import Optional

from .types import DigitSequence, SEQUENCE_LENGTH

DIGITS = "0123456789"


def generate_secret(rng: Optional[random.Random] = None) -> DigitSequence:
    if rng is None:
        rng = random.SystemRandom()

    digits = list(DIGITS)
    for i in range(len(digits) - 1, 0, -1):
        j = rng.randrange(i + 1)  # 0 <= j <= i
        digits[i], digits[j] = digits[j], digits[i]

    return "".join(digits[:SEQUENCE_LENGTH])
