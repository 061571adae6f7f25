"""Exception types for CapJournal."""

from __future__ import annotations

from enum import Enum
from typing import Optional


class ErrorCategory(str, Enum):
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    STATE = "state"


class JournalError(Exception):
    def __init__(
        self,
        message: str,
        category: ErrorCategory = ErrorCategory.STATE,
        detail: Optional[str] = None,
    ) -> None:
        self.message = message
        self.category = category
        self.detail = detail
        super().__init__(self.message)

    def __str__(self) -> str:
        text = f"[{self.category.value}] {self.message}"
        if self.detail:
            text += f" | {self.detail}"
        return text


class ValidationError(JournalError):
    def __init__(self, message: str, detail: Optional[str] = None) -> None:
        super().__init__(message, ErrorCategory.VALIDATION, detail)


class EntryNotFoundError(JournalError):
    def __init__(self, entry_id: str) -> None:
        self.entry_id = entry_id
        super().__init__(f"No entry with id '{entry_id}'", ErrorCategory.NOT_FOUND)


class NoPendingChangeError(JournalError):
    def __init__(self, action: str) -> None:
        super().__init__(f"Nothing staged to {action}", ErrorCategory.STATE)
