from .models import IssuedToken, User
from .settings import AuthSettings, get_auth_settings
from .store import IdentityStore, normalize_email
from .tokens import TokenService

__all__ = [
    "AuthSettings",
    "IdentityStore",
    "IssuedToken",
    "TokenService",
    "User",
    "get_auth_settings",
    "normalize_email",
]
