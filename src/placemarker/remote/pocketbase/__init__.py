"""PocketBase remote backend."""

from placemarker.remote.pocketbase.client import PocketBaseClient
from placemarker.remote.pocketbase.store import PocketBaseRemoteStore

__all__ = ["PocketBaseClient", "PocketBaseRemoteStore"]
