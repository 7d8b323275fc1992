"""
Validation for user-entered collection and deck names.

Names are shown back to the user and on shared deck lists, so they are
trimmed, length-limited and checked against a profanity word list before
anything is written.
"""

from better_profanity import profanity

from professordex.config import MAX_NAME_LENGTH
from professordex.models.failure import FailureKind, KnownError


class InvalidNameError(KnownError):
    """Raised when a collection or deck name is rejected."""

    def __init__(self, message: str, detail: str | None = None):
        super().__init__(
            kind=FailureKind.INVALID_INPUT,
            message=message,
            detail=detail,
            suggestion="Choose a different name.",
        )


def validate_name(name: str, kind: str = "Name") -> str:
    """
    Check a user-entered name and return it trimmed.

    Args:
        name: Raw name as typed
        kind: What is being named, for the error message ("Collection", "Deck")

    Raises:
        InvalidNameError: If the name is empty, too long or contains profanity
    """
    cleaned = name.strip()

    if not cleaned:
        raise InvalidNameError(f"{kind} name cannot be empty")

    if len(cleaned) > MAX_NAME_LENGTH:
        raise InvalidNameError(
            f"{kind} name must be at most {MAX_NAME_LENGTH} characters",
            detail=f"Got {len(cleaned)} characters",
        )

    if profanity.contains_profanity(cleaned):
        raise InvalidNameError("Please avoid using inappropriate language.")

    return cleaned
