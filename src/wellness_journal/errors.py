"""Exception types."""

NOT_AUTHENTICATED = "Not authenticated"
INVALID_ENTRY = "Invalid journal entry"


class JournalError(Exception):
    """Base class for journal errors."""


class NotAuthenticatedError(JournalError):
    """An operation that needs a signed-in user was called without one."""

    def __init__(self, message: str = NOT_AUTHENTICATED):
        super().__init__(message)


class ProviderError(JournalError):
    """A storage provider failed to read or write."""


class DocumentNotFoundError(ProviderError):
    """The addressed document does not exist."""


class AuthError(JournalError):
    """An identity provider operation failed with a stable error code."""

    def __init__(self, code: str, message: str = ""):
        self.code = code
        super().__init__(message or code)
