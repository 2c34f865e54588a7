"""
Exceptions raised by matchcore.

Every failure is local and deterministic: either the caller referenced a
player the engine does not know, or passed input that cannot be scored.
"""


class MatchcoreError(Exception):
    """Base class for all matchcore errors."""


class PlayerNotFoundError(MatchcoreError, KeyError):
    """Raised when an operation references an unregistered player id."""

    def __init__(self, player_id: str):
        super().__init__(player_id)
        self.player_id = player_id

    def __str__(self) -> str:
        return f"Player '{self.player_id}' is not registered"


class InvalidInputError(MatchcoreError, ValueError):
    """Raised for malformed vectors, scores, events or profile records."""
