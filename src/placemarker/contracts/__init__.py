"""Public contracts for placemarker."""

from placemarker.contracts.config import PlacemarkerConfig
from placemarker.contracts.country import Country, CountryCode, normalize_code
from placemarker.contracts.exceptions import (
    AuthRequiredError,
    ClearAllPartialFailureError,
    ConfigError,
    PlacemarkerError,
    ProfileConflictError,
    RemoteError,
    StorageError,
    ValidationError,
)
from placemarker.contracts.selection import Profile, SelectionRecord, SharedProfile
from placemarker.contracts.settings import SETTINGS_RECORD_ID, Preferences, UserSettings
from placemarker.contracts.stores import RemoteStore, SelectionStore, SettingsStore
from placemarker.contracts.sync import HomelandAction, MutationAction, MutationOutcome, ReconcileResult, SyncStatus

__all__ = [
    "SETTINGS_RECORD_ID",
    "AuthRequiredError",
    "ClearAllPartialFailureError",
    "ConfigError",
    "Country",
    "CountryCode",
    "HomelandAction",
    "MutationAction",
    "MutationOutcome",
    "PlacemarkerConfig",
    "PlacemarkerError",
    "Preferences",
    "Profile",
    "ProfileConflictError",
    "ReconcileResult",
    "RemoteError",
    "RemoteStore",
    "SelectionRecord",
    "SelectionStore",
    "SettingsStore",
    "SharedProfile",
    "StorageError",
    "SyncStatus",
    "UserSettings",
    "ValidationError",
    "normalize_code",
]
