"""Exceptions raised by the priority services."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from uuid import UUID


class PriorityError(Exception):
    """Base class for priority scoring failures."""


class InvalidLimitError(PriorityError, ValueError):
    """Raised when a top-items limit falls outside the accepted range."""

    def __init__(self, limit: int, *, minimum: int, maximum: int) -> None:
        self.limit = limit
        self.minimum = minimum
        self.maximum = maximum
        super().__init__(f"limit must be between {minimum} and {maximum}, got {limit}")


class UnknownUserError(PriorityError, LookupError):
    """Raised when a recalculation or read targets a user that does not exist."""

    def __init__(self, user_id: UUID) -> None:
        self.user_id = user_id
        super().__init__(f"User {user_id} not found")


class EntityNotFoundError(PriorityError, LookupError):
    """Raised when a score write targets a task or project that no longer exists."""

    def __init__(self, kind: str, entity_id: UUID) -> None:
        self.kind = kind
        self.entity_id = entity_id
        super().__init__(f"{kind.capitalize()} {entity_id} not found")
