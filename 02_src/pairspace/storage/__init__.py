"""Storage module."""

from .state_store import IStateStore, StateStore, load_state, state_key
from .storage import IStorage, Storage

__all__ = ["IStorage", "Storage", "IStateStore", "StateStore", "load_state", "state_key"]
