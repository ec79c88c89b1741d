"""Selection and profile contracts."""

from __future__ import annotations

from datetime import UTC, datetime

from pydantic import BaseModel, Field, field_validator

from placemarker.contracts.country import CountryCode, normalize_code


def utcnow() -> datetime:
    return datetime.now(UTC)


class SelectionRecord(BaseModel):
    """A country marked visited. Present or absent, never updated in place."""

    code: CountryCode
    display_name: str
    selected_at: datetime = Field(default_factory=utcnow)

    model_config = {"frozen": True}

    @field_validator("code")
    @classmethod
    def _normalize(cls, value: str) -> str:
        return normalize_code(value)


class Profile(BaseModel):
    """Remote, account-scoped profile. One per authenticated user."""

    profile_id: str
    user_id: str
    shared: bool = False
    homeland_code: CountryCode | None = None
    display_name: str | None = None


class SharedProfile(BaseModel):
    """Public read-only view returned for a share link."""

    profile: Profile
    selections: list[SelectionRecord] = Field(default_factory=list)
