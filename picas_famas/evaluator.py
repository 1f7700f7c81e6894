"""
Pure game logic (no HTTP, no storage).
Each guess is compared with the secret and gets two feedback numbers:
- exact_matches (famas): right digit, right place
- partial_matches (picas): digit is in the secret, but somewhere else

Both the secret and the guess are 4 distinct digits, so a digit can never be
counted twice. We reject anything else instead of guessing what the caller meant.
"""

from dataclasses import dataclass

from .types import DigitSequence, SEQUENCE_LENGTH

WIN_MESSAGE = "Congratulations! You guessed the number."
FEEDBACK_TEMPLATE = "Your number has {exact} exact and {partial} partial matches."


class InvalidSequenceError(ValueError):
    """The value is not 4 distinct digits."""


@dataclass(frozen=True)
class EvaluationResult:
    exact_matches: int
    partial_matches: int

    @property
    def won(self) -> bool:
        return self.exact_matches == SEQUENCE_LENGTH

    @property
    def message(self) -> str:
        if self.won:
            return WIN_MESSAGE
        return FEEDBACK_TEMPLATE.format(exact=self.exact_matches, partial=self.partial_matches)


def validate_sequence(value: object) -> DigitSequence:
    """
    Check that value is a string of exactly 4 digits with no digit repeated.
    Returns the value unchanged so it can be used inline.
    """
    if not isinstance(value, str):
        raise InvalidSequenceError("The number must be given as a string of digits.")
    if len(value) != SEQUENCE_LENGTH:
        raise InvalidSequenceError(f"The number must have exactly {SEQUENCE_LENGTH} digits.")
    # str.isdigit() also accepts things like '²', so compare against ASCII digits
    if any(ch not in "0123456789" for ch in value):
        raise InvalidSequenceError("The number may only contain the digits 0-9.")
    if len(set(value)) != SEQUENCE_LENGTH:
        raise InvalidSequenceError("The number cannot have repeated digits.")
    return value


def evaluate(secret: DigitSequence, guess: DigitSequence) -> EvaluationResult:
    """
    Example:
      secret = "5604"
      guess  = "5624"
      exact_matches   = 3  (5, 6 and 4 are in place)
      partial_matches = 0  (2 is not in the secret)
    """
    validate_sequence(secret)
    validate_sequence(guess)

    exact = 0
    partial = 0
    for position, digit in enumerate(guess):
        if secret[position] == digit:
            exact += 1
        elif digit in secret:
            partial += 1

    return EvaluationResult(exact_matches=exact, partial_matches=partial)
