"""
Rule violations raised by the stores.
All are ValueErrors, so the routes map them to 400 in one place.
"""

from .evaluator import InvalidSequenceError


class DuplicatePlayerError(ValueError):
    pass


class ActiveGameError(ValueError):
    pass


class GameFinishedError(ValueError):
    pass


__all__ = [
    "InvalidSequenceError",
    "DuplicatePlayerError",
    "ActiveGameError",
    "GameFinishedError",
]
