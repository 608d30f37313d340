"""
Client-side state containers.

Stores are plain objects owned by the composition root (notely.app) and
handed to whoever needs them; there are no module-level instances.
"""

from notely.stores.notes import NoteStore
from notely.stores.persistence import LocalStorage, TokenStorage
from notely.stores.session import SessionStore

__all__ = ["LocalStorage", "NoteStore", "SessionStore", "TokenStorage"]
