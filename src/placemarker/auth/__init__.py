"""Authentication session exports."""

from placemarker.auth.service import AuthService
from placemarker.auth.store import AuthChange, AuthStore, AuthSubscription, AuthUser

__all__ = ["AuthChange", "AuthService", "AuthStore", "AuthSubscription", "AuthUser"]
