from __future__ import annotations

from typing import Sequence


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class NotFoundError(DomainError):
    """Raised when a row does not exist within the caller's company."""


class ConflictError(DomainError):
    """Raised when a write would double-book an employee or violate a store constraint."""


class ImportFileError(DomainError):
    """Raised for file-level import failures (unreadable, empty, too large)."""


class ConfirmationRequired(DomainError):
    """Raised when an interactive write has advisory warnings the operator has not confirmed."""

    def __init__(self, warnings: Sequence[object]):
        self.warnings = list(warnings)
        super().__init__("; ".join(str(w) for w in self.warnings) or "Confirmation required")
