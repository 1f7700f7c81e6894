"""
Labels for clarity.
"""

from typing import Literal

Digit = str  # '0' -> '9'
DigitSequence = str  # 4 distinct digits, leading zeros kept ("0123")
StoreBackend = Literal["db", "memory"]

SEQUENCE_LENGTH = 4
