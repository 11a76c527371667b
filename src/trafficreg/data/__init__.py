"""
trafficreg Data Package (Imperative Shell)

Owns the backing text file and the in-memory record collection.

Modules:
- store: SignalStore CRUD operations with full-rewrite persistence
"""

from .store import (
    SignalStore,
    DuplicateIdError,
    NotFoundError,
    DEFAULT_DATA_FILE,
    open_store,
)

__all__ = [
    'SignalStore',
    'DuplicateIdError',
    'NotFoundError',
    'DEFAULT_DATA_FILE',
    'open_store',
]
