"""Local email/password accounts and the signed-in identity."""

import logging
import re
import threading
from datetime import datetime, timezone
from typing import Optional
from uuid import uuid4

import bcrypt
from tinydb import TinyDB, where

from ..errors import AuthError
from ..models.identity import AuthMode, AuthState, Identity
from ..providers.base import IdentityCallback, Unsubscribe

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

AUTH_ERROR_MESSAGES = {
    "auth/email-already-in-use": "An account with this email already exists.",
    "auth/invalid-email": "That email address doesn't look right.",
    "auth/weak-password": "Password is too short.",
    "auth/invalid-credential": "Incorrect email or password.",
    "password-mismatch": "Passwords do not match.",
    "generic": "Something went wrong. Please try again.",
}


def describe_auth_error(code: Optional[str]) -> str:
    """Human-readable message for an auth error code."""
    if code and code in AUTH_ERROR_MESSAGES:
        return AUTH_ERROR_MESSAGES[code]
    return AUTH_ERROR_MESSAGES["generic"]


def hash_password(password: str, rounds: int = 12) -> str:
    """bcrypt hash; the salt and cost are part of the returned string."""
    return bcrypt.hashpw(password.encode(), bcrypt.gensalt(rounds=rounds)).decode()


def check_password(password: str, password_hash: str) -> bool:
    return bcrypt.checkpw(password.encode(), password_hash.encode())


class AuthStore:
    """
    Signed-in identity backed by accounts in TinyDB.

    Acts as the identity signal for the stores: ``subscribe`` reports
    ``(identity, still_loading)`` on every change. Until ``restore()``
    runs, the store is loading. The signed-in user is persisted in a
    ``sessions`` table so another process picks it up on ``restore()``.
    """

    hash_rounds = 12

    def __init__(self, db: TinyDB, min_password_length: int = 6):
        self.min_password_length = min_password_length
        self._accounts = db.table("accounts")
        self._sessions = db.table("sessions")
        self._lock = threading.RLock()
        self._state = AuthState()
        self._listeners: list[IdentityCallback] = []

    @property
    def state(self) -> AuthState:
        return self._state

    @property
    def user(self) -> Optional[Identity]:
        return self._state.user

    def subscribe(self, callback: IdentityCallback) -> Unsubscribe:
        """Watch identity changes; called at once with the current value."""
        with self._lock:
            self._listeners.append(callback)
            state = self._state
        callback(state.user, state.loading)

        def unsubscribe() -> None:
            with self._lock:
                if callback in self._listeners:
                    self._listeners.remove(callback)

        return unsubscribe

    def _update(self, **changes) -> None:
        with self._lock:
            self._state = self._state.model_copy(update=changes)
            state = self._state
            listeners = list(self._listeners)
        for listener in listeners:
            listener(state.user, state.loading)

    def _fail(self, code: str) -> bool:
        logger.debug("Auth error: %s", code)
        self._update(loading=False, error=describe_auth_error(code))
        return False

    # ----- Session -----

    def restore(self) -> Optional[Identity]:
        """Resolve the persisted session and finish loading."""
        user = None
        session = self._sessions.get(where("uid").exists())
        if session is not None:
            account = self._accounts.get(where("uid") == session["uid"])
            if account is not None:
                user = Identity(uid=account["uid"], email=account["email"])
        logger.debug("Restored session: %s", user.uid if user else None)
        self._update(user=user, loading=False)
        return user

    def _start_session(self, user: Identity) -> None:
        self._sessions.truncate()
        self._sessions.insert({
            "uid": user.uid,
            "signed_in_at": datetime.now(timezone.utc).isoformat(),
        })
        self._update(user=user, loading=False, error=None)

    def toggle_mode(self) -> AuthMode:
        """Switch between the sign-in and sign-up forms."""
        mode = AuthMode.SIGN_UP if self._state.mode == AuthMode.SIGN_IN else AuthMode.SIGN_IN
        self._update(mode=mode, error=None)
        return mode

    # ----- Accounts -----

    def _register(self, email: str, password: str) -> Identity:
        if not EMAIL_PATTERN.match(email):
            raise AuthError("auth/invalid-email")
        if len(password) < self.min_password_length:
            raise AuthError("auth/weak-password")
        if self._accounts.contains(where("email") == email):
            raise AuthError("auth/email-already-in-use")

        user = Identity(uid=uuid4().hex[:28], email=email)
        self._accounts.insert({
            "uid": user.uid,
            "email": email,
            "password_hash": hash_password(password, self.hash_rounds),
            "created_at": datetime.now(timezone.utc).isoformat(),
        })
        return user

    def _authenticate(self, email: str, password: str) -> Identity:
        account = self._accounts.get(where("email") == email)
        if account is None:
            raise AuthError("auth/invalid-credential")
        if not check_password(password, account["password_hash"]):
            raise AuthError("auth/invalid-credential")
        return Identity(uid=account["uid"], email=account["email"])

    def sign_up(self, email: str, password: str, confirm: Optional[str] = None) -> bool:
        """Create an account and sign it in. Returns False and sets ``error`` on failure."""
        if confirm is not None and password != confirm:
            return self._fail("password-mismatch")

        self._update(loading=True, error=None)
        try:
            user = self._register(email.strip().lower(), password)
        except AuthError as e:
            return self._fail(e.code)
        except (OSError, ValueError) as e:
            logger.error("Sign-up failed: %s", e)
            return self._fail("generic")

        logger.info("Created account %s", user.uid)
        self._start_session(user)
        return True

    def sign_in(self, email: str, password: str) -> bool:
        """Sign in with email and password. Returns False and sets ``error`` on failure."""
        self._update(loading=True, error=None)
        try:
            user = self._authenticate(email.strip().lower(), password)
        except AuthError as e:
            return self._fail(e.code)
        except (OSError, ValueError) as e:
            logger.error("Sign-in failed: %s", e)
            return self._fail("generic")

        self._start_session(user)
        return True

    def sign_out(self) -> None:
        """Forget the signed-in user."""
        self._update(loading=True)
        try:
            self._sessions.truncate()
        except OSError as e:
            logger.error("Sign-out failed: %s", e)
            self._update(error=describe_auth_error("generic"))
        finally:
            self._update(user=None, loading=False)
