__all__ = [
    "StoreError", "LookupFailure", "DeleteFailure", "InventoryStore", "DirectoryStore",
    "GraphSession", "GraphError", "AuthenticationError",
    "IntuneInventoryStore", "EntraDirectoryStore",
]

from .base import StoreError, LookupFailure, DeleteFailure, InventoryStore, DirectoryStore
from .graph import GraphSession, GraphError, AuthenticationError
from .intune import IntuneInventoryStore
from .entra import EntraDirectoryStore
