"""Configuration contracts."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field, field_validator


class PlacemarkerConfig(BaseModel):
    pocketbase_url: str
    remote_backend: str = "pocketbase"
    data_dir: Path = Path(".placemarker")
    selections_db: str = "placemarker-db"
    settings_db: str = "placemarker-user-settings-db"
    db_version: int = Field(default=1, ge=1)
    users_collection: str = "users"
    profiles_collection: str = "user_profiles"
    selections_collection: str = "country_selections"
    share_base_url: str | None = None
    request_timeout: float = Field(default=10.0, gt=0, le=120)

    model_config = {"frozen": True}

    @field_validator("remote_backend")
    @classmethod
    def validate_remote_backend(cls, value: str) -> str:
        if value not in {"pocketbase", "memory"}:
            raise ValueError("remote_backend must be one of: pocketbase, memory")
        return value

    @field_validator("pocketbase_url", "share_base_url")
    @classmethod
    def validate_http_url(cls, value: str | None) -> str | None:
        if value is None:
            return None
        url = value.strip().rstrip("/")
        if not url.startswith(("http://", "https://")):
            raise ValueError("URL must start with http:// or https://")
        return url
