"""Identity and storage provider interfaces and implementations."""

from .base import (
    CollectionProvider,
    Direction,
    IdentitySignal,
    SubscriptionHandle,
    call_now,
    scoped_path,
)
from .tinydb_provider import TinyDBCollectionProvider, TinyDBSubscription

__all__ = [
    "CollectionProvider",
    "Direction",
    "IdentitySignal",
    "SubscriptionHandle",
    "TinyDBCollectionProvider",
    "TinyDBSubscription",
    "call_now",
    "scoped_path",
]
