"""Shared route dependencies."""

from fastapi import HTTPException, Request

from ...errors import INVALID_ENTRY, NOT_AUTHENTICATED
from ...models.results import OperationResult
from ...services.context import AppContext


def get_context(request: Request) -> AppContext:
    """The session context owned by the app's lifespan."""
    return request.app.state.context


def raise_for_result(result: OperationResult) -> None:
    """Turn a failed operation result into an HTTP error."""
    if result.success:
        return
    if result.error == NOT_AUTHENTICATED:
        raise HTTPException(status_code=401, detail=result.error)
    if result.error and result.error.startswith(INVALID_ENTRY):
        raise HTTPException(status_code=422, detail=result.error)
    raise HTTPException(status_code=500, detail=result.error)
