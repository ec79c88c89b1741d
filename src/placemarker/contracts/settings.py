"""Local settings contracts."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from placemarker.contracts.country import CountryCode
from placemarker.contracts.selection import utcnow

SETTINGS_RECORD_ID = "user-settings"


class Preferences(BaseModel):
    """Display toggles persisted alongside the homeland."""

    show_homeland: bool = True
    show_labels: bool = True
    collapse_selector: bool = False


class UserSettings(BaseModel):
    """Single settings record, keyed by a constant id."""

    id: str = SETTINGS_RECORD_ID
    homeland_code: CountryCode | None = None
    homeland_name: str | None = None
    homeland_set_at: datetime | None = None
    has_seen_welcome: bool = False
    preferences: Preferences = Field(default_factory=Preferences)
    updated_at: datetime = Field(default_factory=utcnow)
