"""Routes for journal entries."""

from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException

from ...errors import NOT_AUTHENTICATED
from ...models.entry import JournalEntry, JournalEntryDraft
from ...models.results import OperationResult, SaveResult
from ...models.state import SyncState
from ...services.context import AppContext
from .deps import get_context, raise_for_result

router = APIRouter()


def find_entry(context: AppContext, entry_id: str) -> JournalEntry:
    """Look an entry up in the live snapshot."""
    if context.auth.user is None:
        raise HTTPException(status_code=401, detail=NOT_AUTHENTICATED)
    for entry in context.journal.snapshot.entries:
        if entry.id == entry_id:
            return entry
    raise HTTPException(status_code=404, detail=f"Entry not found: {entry_id}")


@router.get("/", response_model=SyncState)
async def list_entries(context: AppContext = Depends(get_context)):
    """The live journal snapshot for the signed-in user, newest first."""
    return context.journal.snapshot


@router.get("/{entry_id}", response_model=JournalEntry)
async def get_entry(entry_id: str, context: AppContext = Depends(get_context)):
    """One entry from the snapshot."""
    return find_entry(context, entry_id)


@router.post("/", response_model=SaveResult, status_code=201)
async def create_entry(draft: JournalEntryDraft, context: AppContext = Depends(get_context)):
    """Save a new entry."""
    result = context.queries.save(draft)
    raise_for_result(result)
    return result


@router.patch("/{entry_id}", response_model=OperationResult)
async def update_entry(
    entry_id: str,
    fields: dict[str, Any] = Body(...),
    context: AppContext = Depends(get_context),
):
    """Change some fields of an entry."""
    find_entry(context, entry_id)
    result = context.queries.update(entry_id, fields)
    raise_for_result(result)
    return result


@router.delete("/{entry_id}", response_model=OperationResult)
async def delete_entry(entry_id: str, context: AppContext = Depends(get_context)):
    """Delete an entry."""
    find_entry(context, entry_id)
    result = context.queries.delete(entry_id)
    raise_for_result(result)
    return result
