"""Result objects returned by one-shot operations."""

from typing import Optional

from pydantic import BaseModel, Field

from .entry import JournalEntry


class OperationResult(BaseModel):
    """Outcome of a write. ``error`` is the raw provider message on failure."""

    success: bool
    error: Optional[str] = None

    @classmethod
    def ok(cls, **kwargs) -> "OperationResult":
        return cls(success=True, **kwargs)

    @classmethod
    def failed(cls, error: str, **kwargs) -> "OperationResult":
        return cls(success=False, error=error, **kwargs)


class SaveResult(OperationResult):
    """Outcome of creating an entry."""

    id: Optional[str] = None


class FetchResult(OperationResult):
    """Outcome of reading all entries once."""

    entries: list[JournalEntry] = Field(default_factory=list)
