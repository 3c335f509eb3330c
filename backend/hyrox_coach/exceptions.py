"""Exception hierarchy for the training-program engine."""

from typing import List, Optional


class ProgramError(Exception):
    """Base exception for all program engine errors."""


class ValidationError(ProgramError):
    """Malformed or out-of-range input. Nothing was written."""

    def __init__(self, errors: List[str], message: Optional[str] = None) -> None:
        self.errors = list(errors)
        super().__init__(message or ", ".join(self.errors))


class NotFoundError(ProgramError):
    """The operation needs an active program or template that does not exist."""


class ConflictError(ProgramError):
    """A uniqueness constraint was violated."""


class PersistenceError(ProgramError):
    """The storage backend failed."""
