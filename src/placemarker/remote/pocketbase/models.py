"""PocketBase record payload models."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


def parse_timestamp(value: str | None) -> datetime | None:
    """Parse PocketBase's ``2024-05-01 10:20:30.123Z`` timestamps."""
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.strip().replace(" ", "T", 1))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


class RecordModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: str
    created: str | None = None
    updated: str | None = None


class UserRecord(RecordModel):
    email: str | None = None
    name: str | None = None


class ProfileRecord(RecordModel):
    user: str
    shared: bool = False
    homeland_alpha3: str | None = None
    expand: dict[str, Any] = Field(default_factory=dict)

    @field_validator("homeland_alpha3", mode="before")
    @classmethod
    def _normalize_homeland(cls, value: Any) -> Any:
        value = _blank_to_none(value)
        return value.upper() if isinstance(value, str) else value

    @field_validator("expand", mode="before")
    @classmethod
    def _normalize_expand(cls, value: Any) -> Any:
        return value or {}

    def expanded_user(self) -> UserRecord | None:
        """The ``expand.user`` relation, or ``None`` when absent or malformed."""
        raw = self.expand.get("user")
        if not isinstance(raw, dict):
            return None
        try:
            return UserRecord.model_validate(raw)
        except ValidationError:
            return None


class CountrySelectionRecord(RecordModel):
    profile: str
    country_alpha3: str

    @field_validator("country_alpha3", mode="before")
    @classmethod
    def _normalize_code(cls, value: Any) -> Any:
        return value.strip().upper() if isinstance(value, str) else value


class ListResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    page: int = 1
    per_page: int = Field(default=30, alias="perPage")
    total_items: int = Field(default=-1, alias="totalItems")
    total_pages: int = Field(default=-1, alias="totalPages")
    items: list[dict[str, Any]] = Field(default_factory=list)


class AuthResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    token: str
    record: dict[str, Any]
