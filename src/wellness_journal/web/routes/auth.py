"""Routes for signing up, in and out."""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from ...models.identity import AuthState
from ...services.context import AppContext
from .deps import get_context

router = APIRouter()


class Credentials(BaseModel):
    email: str
    password: str
    confirm: Optional[str] = None


@router.post("/signup", response_model=AuthState)
async def sign_up(credentials: Credentials, context: AppContext = Depends(get_context)):
    """Create an account and sign in."""
    if not context.auth.sign_up(credentials.email, credentials.password, credentials.confirm):
        raise HTTPException(status_code=400, detail=context.auth.state.error)
    return context.auth.state


@router.post("/signin", response_model=AuthState)
async def sign_in(credentials: Credentials, context: AppContext = Depends(get_context)):
    """Sign in with email and password."""
    if not context.auth.sign_in(credentials.email, credentials.password):
        raise HTTPException(status_code=401, detail=context.auth.state.error)
    return context.auth.state


@router.post("/signout", response_model=AuthState)
async def sign_out(context: AppContext = Depends(get_context)):
    """Sign out."""
    context.auth.sign_out()
    return context.auth.state


@router.get("/me", response_model=AuthState)
async def current_user(context: AppContext = Depends(get_context)):
    """Who is signed in."""
    return context.auth.state
