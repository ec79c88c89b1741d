"""Remote store exports."""

from placemarker.remote.factory import create_pocketbase_client, create_remote_store
from placemarker.remote.memory import MemoryRemoteStore, RemoteOperation
from placemarker.remote.pocketbase import PocketBaseClient, PocketBaseRemoteStore

__all__ = [
    "MemoryRemoteStore",
    "PocketBaseClient",
    "PocketBaseRemoteStore",
    "RemoteOperation",
    "create_pocketbase_client",
    "create_remote_store",
]
