# Core modules - Database, Config, Exceptions
from .database import get_supabase_client
from .config import settings
from .exceptions import (
    NotifierException,
    AuthError,
    RecipientLookupError,
    SendError,
    ConfigurationError,
)

__all__ = [
    "get_supabase_client",
    "settings",
    "NotifierException",
    "AuthError",
    "RecipientLookupError",
    "SendError",
    "ConfigurationError",
]
