"""Local persistence exports."""

from placemarker.local.document import VersionedDocument
from placemarker.local.selection_store import JsonSelectionStore
from placemarker.local.settings_store import JsonSettingsStore

__all__ = ["JsonSelectionStore", "JsonSettingsStore", "VersionedDocument"]
