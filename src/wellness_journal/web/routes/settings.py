"""Routes for unlock time settings."""

from datetime import datetime

from fastapi import APIRouter, Depends

from ...models.state import TimeSettingsState
from ...models.time_settings import TimeSettings, current_period, unlocked_periods
from ...services.context import AppContext
from .deps import get_context, raise_for_result

router = APIRouter()


@router.get("/time", response_model=TimeSettingsState)
async def get_time_settings(context: AppContext = Depends(get_context)):
    """Unlock times for the signed-in user (defaults when signed out)."""
    return context.time_settings.snapshot


@router.put("/time", response_model=TimeSettingsState)
async def save_time_settings(settings: TimeSettings, context: AppContext = Depends(get_context)):
    """Save unlock times."""
    raise_for_result(context.time_settings.save(settings))
    return context.time_settings.snapshot


@router.get("/periods")
async def get_periods(context: AppContext = Depends(get_context)):
    """Which journal periods are open right now."""
    settings = context.time_settings.settings
    now = datetime.now()
    current = current_period(settings, now)
    return {
        "now": now.strftime("%H:%M"),
        "unlocked": [p.value for p in unlocked_periods(settings, now)],
        "current": current.value if current else None,
    }
