"""Public API surface for placemarker."""

__version__ = "0.1.0"

from placemarker.auth import AuthChange, AuthService, AuthStore, AuthUser
from placemarker.catalog import CountryCatalog, default_catalog
from placemarker.config import load_config
from placemarker.contracts import (
    AuthRequiredError,
    ClearAllPartialFailureError,
    ConfigError,
    Country,
    CountryCode,
    HomelandAction,
    MutationAction,
    MutationOutcome,
    PlacemarkerConfig,
    PlacemarkerError,
    Preferences,
    Profile,
    ProfileConflictError,
    ReconcileResult,
    RemoteError,
    RemoteStore,
    SelectionRecord,
    SelectionStore,
    SettingsStore,
    SharedProfile,
    StorageError,
    SyncStatus,
    ValidationError,
)
from placemarker.engine import (
    EngineState,
    ReconcilePhase,
    ReconcileProgress,
    ReconciliationEngine,
    merge,
    plan_homeland,
)
from placemarker.handlers import MutationHandlers
from placemarker.local import JsonSelectionStore, JsonSettingsStore
from placemarker.remote import MemoryRemoteStore, PocketBaseClient, PocketBaseRemoteStore, create_remote_store
from placemarker.sdk import Placemarker
from placemarker.state import SelectionState

__all__ = [
    "AuthChange",
    "AuthRequiredError",
    "AuthService",
    "AuthStore",
    "AuthUser",
    "ClearAllPartialFailureError",
    "ConfigError",
    "Country",
    "CountryCatalog",
    "CountryCode",
    "EngineState",
    "HomelandAction",
    "JsonSelectionStore",
    "JsonSettingsStore",
    "MemoryRemoteStore",
    "MutationAction",
    "MutationHandlers",
    "MutationOutcome",
    "Placemarker",
    "PlacemarkerConfig",
    "PlacemarkerError",
    "PocketBaseClient",
    "PocketBaseRemoteStore",
    "Preferences",
    "Profile",
    "ProfileConflictError",
    "ReconcilePhase",
    "ReconcileProgress",
    "ReconcileResult",
    "ReconciliationEngine",
    "RemoteError",
    "RemoteStore",
    "SelectionRecord",
    "SelectionState",
    "SelectionStore",
    "SettingsStore",
    "SharedProfile",
    "StorageError",
    "SyncStatus",
    "ValidationError",
    "__version__",
    "create_remote_store",
    "default_catalog",
    "load_config",
    "merge",
    "plan_homeland",
]
