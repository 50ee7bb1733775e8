"""Exception taxonomy shared by the content resolver and the menu engine.

A missing entity is not an error: lookups return ``None`` and the resolver
renders a *not found* fragment. The classes below cover the cases that do
fail, each caught at the smallest unit that can contain it.
"""

from __future__ import annotations


class BackendError(RuntimeError):
    """Raised when the hosted backend cannot be reached or rejects a request."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class LookupFailure(RuntimeError):
    """Raised when an entity referenced by a shortcode cannot be fetched."""


class PersistenceFailure(RuntimeError):
    """Raised when saving menu order, icons, or overrides fails."""


class ValidationFailure(ValueError):
    """Raised for input rejected before any network call is made."""


__all__ = [
    "BackendError",
    "LookupFailure",
    "PersistenceFailure",
    "ValidationFailure",
]
