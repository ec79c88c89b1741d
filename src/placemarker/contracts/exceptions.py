"""Exception hierarchy for placemarker."""

from __future__ import annotations

from typing import Any


class PlacemarkerError(Exception):
    """Base exception for all placemarker errors."""


class ConfigError(PlacemarkerError):
    """Configuration loading or validation failure."""


class StorageError(PlacemarkerError):
    """Local persistence is unavailable, corrupt or not initialised."""


class ValidationError(PlacemarkerError):
    """Unknown country code or a homeland/selection conflict."""


class AuthRequiredError(PlacemarkerError):
    """A remote operation was attempted without a valid session."""


class RemoteError(PlacemarkerError):
    """Network failure, server error or missing record on the remote side."""

    def __init__(self, message: str, *, status: int | None = None, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.status = status
        self.details = details or {}


class ProfileConflictError(RemoteError):
    """Profile creation hit the one-profile-per-user uniqueness constraint."""


class ClearAllPartialFailureError(RemoteError):
    """clear_all visited every record but some deletes failed."""

    def __init__(
        self,
        message: str,
        *,
        deleted_codes: tuple[str, ...] = (),
        failed_codes: tuple[str, ...] = (),
    ) -> None:
        super().__init__(message)
        self.deleted_codes = deleted_codes
        self.failed_codes = failed_codes
