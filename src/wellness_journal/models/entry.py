"""Journal entry models."""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class JournalEntryDraft(BaseModel):
    """
    The part of a journal entry a user fills in.
    
    Field names are snake_case in Python and camelCase in stored documents.
    Values are kept as given: energies are meant to be 1-10 but are not
    clamped, and the date is an opaque string.
    """
    
    model_config = ConfigDict(populate_by_name=True)
    
    date: str = ""
    
    # Energy check-ins (1-10 scale)
    morning_energy: Optional[int] = Field(default=None, alias="morningEnergy")
    afternoon_energy: Optional[int] = Field(default=None, alias="afternoonEnergy")
    evening_energy: Optional[int] = Field(default=None, alias="eveningEnergy")
    
    # Morning
    morning_focus: str = Field(default="", alias="morningFocus")
    
    # Afternoon
    afternoon_moment: str = Field(default="", alias="afternoonMoment")
    
    # Evening reflection
    evening_emotion: str = Field(default="", alias="eveningEmotion")
    evening_authentic: str = Field(default="", alias="eveningAuthentic")
    evening_acting: str = Field(default="", alias="eveningActing")
    evening_admiration: str = Field(default="", alias="eveningAdmiration")
    
    def to_document(self) -> dict[str, Any]:
        """Fields as stored by a collection provider."""
        return self.model_dump(mode="json", by_alias=True, exclude={"id", "timestamp"})


class JournalEntry(JournalEntryDraft):
    """A journal entry read back from storage."""
    
    model_config = ConfigDict(populate_by_name=True, frozen=True)
    
    id: Optional[str] = None
    timestamp: Optional[datetime] = None
    
    @classmethod
    def from_document(cls, document: dict[str, Any]) -> "JournalEntry":
        """Build an entry from a provider document (which carries its id)."""
        return cls.model_validate(document)
    
    @property
    def average_energy(self) -> Optional[float]:
        """Mean of the recorded energy levels, if any were recorded."""
        levels = [
            level
            for level in (self.morning_energy, self.afternoon_energy, self.evening_energy)
            if level is not None
        ]
        if not levels:
            return None
        return sum(levels) / len(levels)
    
    def summary(self) -> str:
        """Generate a one-line summary of the entry."""
        parts = [f"Entry for {self.date or 'undated'}"]
        
        energies = [
            f"{label} {level}/10"
            for label, level in (
                ("morning", self.morning_energy),
                ("afternoon", self.afternoon_energy),
                ("evening", self.evening_energy),
            )
            if level is not None
        ]
        if energies:
            parts.append("Energy: " + ", ".join(energies))
        
        if self.evening_emotion:
            parts.append(f"Emotion: {self.evening_emotion}")
        
        return " | ".join(parts)


def normalize_update_fields(fields: dict[str, Any]) -> dict[str, Any]:
    """
    Map partial update fields to their stored (camelCase) names.
    
    Accepts either attribute names or aliases. Unknown keys, ``id`` and
    ``timestamp`` are dropped: the timestamp is set once on creation.
    """
    aliases = {
        name: (info.alias or name)
        for name, info in JournalEntryDraft.model_fields.items()
    }
    by_alias = {alias: alias for alias in aliases.values()}
    
    normalized = {}
    for key, value in fields.items():
        if key in aliases:
            normalized[aliases[key]] = value
        elif key in by_alias:
            normalized[key] = value
    return normalized


def validate_update_fields(fields: dict[str, Any]) -> dict[str, Any]:
    """
    Normalize partial update fields and check their values.

    Raises ``pydantic.ValidationError`` when a value doesn't fit its field,
    so a bad update never reaches storage.
    """
    normalized = normalize_update_fields(fields)
    draft = JournalEntryDraft.model_validate(normalized)
    names = {
        name
        for name, info in JournalEntryDraft.model_fields.items()
        if (info.alias or name) in normalized
    }
    return draft.model_dump(mode="json", by_alias=True, include=names)
