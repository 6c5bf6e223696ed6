"""Entity storage -- the store contract and the default in-memory store."""

from gp_kernel.store.base import EntityStore, StoreSnapshot, entity_name
from gp_kernel.store.memory import InMemoryEntityStore

__all__ = [
    "EntityStore",
    "StoreSnapshot",
    "InMemoryEntityStore",
    "entity_name",
]
