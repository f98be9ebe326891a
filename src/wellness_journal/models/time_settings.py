"""Unlock time settings and journal periods."""

from datetime import datetime, time
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_MORNING_UNLOCK = "09:00"
DEFAULT_AFTERNOON_UNLOCK = "18:00"
DEFAULT_EVENING_UNLOCK = "21:00"


def parse_clock(value: str) -> time:
    """Parse a 24h ``HH:MM`` string."""
    return datetime.strptime(value, "%H:%M").time()


class TimeSettings(BaseModel):
    """
    When each journal period opens, as 24h ``HH:MM`` strings.

    Stored under ``users/{uid}/settings/time-settings`` with camelCase keys.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    morning_unlock: str = Field(default=DEFAULT_MORNING_UNLOCK, alias="morningUnlock")
    afternoon_unlock: str = Field(default=DEFAULT_AFTERNOON_UNLOCK, alias="afternoonUnlock")
    evening_unlock: str = Field(default=DEFAULT_EVENING_UNLOCK, alias="eveningUnlock")

    @field_validator("morning_unlock", "afternoon_unlock", "evening_unlock")
    @classmethod
    def _check_clock(cls, value: str) -> str:
        try:
            parsed = parse_clock(value)
        except ValueError as e:
            raise ValueError(f"expected HH:MM (24h), got {value!r}") from e
        return parsed.strftime("%H:%M")

    @classmethod
    def from_document(
        cls,
        document: Optional[dict[str, Any]],
        defaults: Optional["TimeSettings"] = None,
    ) -> "TimeSettings":
        """Build settings from a stored document, falling back per field."""
        defaults = defaults or cls()
        document = document or {}
        return cls(
            morning_unlock=document.get("morningUnlock") or defaults.morning_unlock,
            afternoon_unlock=document.get("afternoonUnlock") or defaults.afternoon_unlock,
            evening_unlock=document.get("eveningUnlock") or defaults.evening_unlock,
        )

    def to_document(self) -> dict[str, str]:
        return self.model_dump(by_alias=True)


class JournalPeriod(str, Enum):
    """The three daily check-ins."""
    MORNING = "morning"
    AFTERNOON = "afternoon"
    EVENING = "evening"

    def unlock_time(self, settings: TimeSettings) -> time:
        """Time of day this period opens."""
        return parse_clock(getattr(settings, f"{self.value}_unlock"))

    @property
    def fields(self) -> tuple[str, ...]:
        """Entry fields filled in during this period."""
        return PERIOD_FIELDS[self]


PERIOD_FIELDS = {
    JournalPeriod.MORNING: ("morning_energy", "morning_focus"),
    JournalPeriod.AFTERNOON: ("afternoon_energy", "afternoon_moment"),
    JournalPeriod.EVENING: (
        "evening_energy",
        "evening_emotion",
        "evening_authentic",
        "evening_acting",
        "evening_admiration",
    ),
}


def is_unlocked(period: JournalPeriod, settings: TimeSettings, now: datetime) -> bool:
    """Whether a period is open at ``now`` (periods stay open until midnight)."""
    return now.time() >= period.unlock_time(settings)


def unlocked_periods(settings: TimeSettings, now: datetime) -> list[JournalPeriod]:
    """All periods open at ``now``, in day order."""
    return [period for period in JournalPeriod if is_unlocked(period, settings, now)]


def current_period(settings: TimeSettings, now: datetime) -> Optional[JournalPeriod]:
    """The most recently opened period, or None before the first unlock."""
    opened = sorted(
        unlocked_periods(settings, now),
        key=lambda period: period.unlock_time(settings),
    )
    return opened[-1] if opened else None
