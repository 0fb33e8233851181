# NAVER WORKS platform clients - Auth, Directory
from .auth import (
    NaverWorksCredentials,
    TokenCache,
    TokenProvider,
    load_private_key,
)
from .directory import RecipientResolver

__all__ = [
    "NaverWorksCredentials",
    "TokenCache",
    "TokenProvider",
    "load_private_key",
    "RecipientResolver",
]
