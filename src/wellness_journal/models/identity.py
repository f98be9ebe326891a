"""Authenticated identity models."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict


class Identity(BaseModel):
    """An authenticated user. Only ``uid`` scopes data ownership."""

    model_config = ConfigDict(frozen=True)

    uid: str
    email: Optional[str] = None


class AuthMode(str, Enum):
    """Which form the sign-in screen shows."""
    SIGN_IN = "signin"
    SIGN_UP = "signup"


class AuthState(BaseModel):
    """Observable state of the auth store."""

    model_config = ConfigDict(frozen=True)

    user: Optional[Identity] = None
    loading: bool = True
    error: Optional[str] = None
    mode: AuthMode = AuthMode.SIGN_IN
