"""
NAVER WORKS service-account authentication.

Obtains bot access tokens with the OAuth2 JWT-bearer grant:

1. Sign an RS256 assertion {iss: client id, sub: service account, iat, exp}
   with the service account's private key.
2. POST it to the token endpoint together with the client id/secret.
3. Cache the returned token until ``expires_in - buffer`` seconds from now.

Key Features:
- Explicit, caller-owned token cache (no module-level state)
- Single-flight refresh: concurrent callers share one token request
- Injectable clock and HTTP transport for tests
- Malformed key material fails as AuthError, never as a crash
"""
import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional

import httpx
import jwt
from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from ops_notifier.core.config import Settings
from ops_notifier.core.exceptions import AuthError


logger = logging.getLogger(__name__)


JWT_ALGORITHM = "RS256"
JWT_BEARER_GRANT_TYPE = "urn:ietf:params:oauth:grant-type:jwt-bearer"


@dataclass(frozen=True)
class NaverWorksCredentials:
    """Service-account credential bundle, immutable for the process lifetime."""
    client_id: Optional[str]
    client_secret: Optional[str]
    service_account: Optional[str]
    private_key: Optional[str]
    bot_id: Optional[str]

    @classmethod
    def from_settings(cls, settings: Settings) -> "NaverWorksCredentials":
        private_key = settings.naver_works_private_key
        if private_key:
            # .env files usually carry the PEM on one line with escaped newlines
            private_key = private_key.replace("\\n", "\n")

        return cls(
            client_id=settings.naver_works_client_id,
            client_secret=settings.naver_works_client_secret,
            service_account=settings.naver_works_service_account,
            private_key=private_key,
            bot_id=settings.naver_works_bot_id,
        )

    def missing_fields(self) -> list[str]:
        """Names of the credentials required for token issuance that are unset."""
        required = {
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "service_account": self.service_account,
            "private_key": self.private_key,
        }
        return [name for name, value in required.items() if not value]


@dataclass
class TokenCache:
    """Bearer token plus the absolute instant (epoch seconds) it stops being usable."""
    access_token: Optional[str] = None
    expires_at: float = 0.0

    def is_valid(self, now: float) -> bool:
        return bool(self.access_token) and now < self.expires_at

    def store(self, access_token: str, expires_at: float) -> None:
        self.access_token = access_token
        self.expires_at = expires_at


def load_private_key(pem: str) -> rsa.RSAPrivateKey:
    """
    Parse a PKCS#8/PKCS#1 PEM RSA private key.

    Raises:
        AuthError: If the key material is malformed or not an RSA key
    """
    try:
        key = serialization.load_pem_private_key(pem.encode("utf-8"), password=None)
    except (ValueError, TypeError, UnsupportedAlgorithm) as e:
        raise AuthError(
            "NAVER WORKS private key is not a valid unencrypted PEM key",
            original_error=type(e).__name__
        ) from e

    if not isinstance(key, rsa.RSAPrivateKey):
        raise AuthError("NAVER WORKS private key must be an RSA key")

    return key


class TokenProvider:
    """
    Issues and caches NAVER WORKS bot access tokens.

    Usage:
        provider = TokenProvider(credentials, http_client, auth_url=..., scope=...)
        token = await provider.get_access_token()
    """

    def __init__(
        self,
        credentials: NaverWorksCredentials,
        http_client: httpx.AsyncClient,
        auth_url: str,
        scope: str,
        cache: Optional[TokenCache] = None,
        buffer_seconds: int = 300,
        assertion_lifetime_seconds: int = 3600,
        clock: Optional[Callable[[], float]] = None,
    ):
        self.credentials = credentials
        self.http_client = http_client
        self.auth_url = auth_url
        self.scope = scope
        self.cache = cache if cache is not None else TokenCache()
        self.buffer_seconds = buffer_seconds
        self.assertion_lifetime_seconds = assertion_lifetime_seconds
        self.clock = clock
        self._refresh_lock = asyncio.Lock()
        self._signing_key: Optional[rsa.RSAPrivateKey] = None

    async def get_access_token(self) -> str:
        """
        Return a usable bearer token, refreshing it if needed.

        Raises:
            AuthError: If signing or the token exchange fails
        """
        if self.cache.is_valid(self._now()):
            return self.cache.access_token

        async with self._refresh_lock:
            # Another caller may have refreshed while we waited
            if self.cache.is_valid(self._now()):
                return self.cache.access_token

            return await self._refresh()

    def _now(self) -> float:
        return self.clock() if self.clock else time.time()

    def create_assertion(self) -> str:
        """Build the signed RS256 assertion for the JWT-bearer grant."""
        missing = self.credentials.missing_fields()
        if missing:
            raise AuthError(
                f"NAVER WORKS credentials not configured: {', '.join(missing)}"
            )

        if self._signing_key is None:
            self._signing_key = load_private_key(self.credentials.private_key)

        issued_at = int(self._now())
        claims = {
            "iss": self.credentials.client_id,
            "sub": self.credentials.service_account,
            "iat": issued_at,
            "exp": issued_at + self.assertion_lifetime_seconds,
        }

        try:
            return jwt.encode(
                claims,
                self._signing_key,
                algorithm=JWT_ALGORITHM,
                headers={"typ": "JWT"},
            )
        except jwt.PyJWTError as e:
            raise AuthError("Failed to sign NAVER WORKS assertion", original_error=str(e)) from e

    async def _refresh(self) -> str:
        assertion = self.create_assertion()

        form = {
            "assertion": assertion,
            "grant_type": JWT_BEARER_GRANT_TYPE,
            "client_id": self.credentials.client_id,
            "client_secret": self.credentials.client_secret,
            "scope": self.scope,
        }

        try:
            response = await self.http_client.post(self.auth_url, data=form)
            response.raise_for_status()
            body = response.json()
        except httpx.HTTPStatusError as e:
            logger.error(
                f"❌ Access token request rejected ({e.response.status_code}): {e.response.text}"
            )
            raise AuthError(
                "NAVER WORKS authentication failed",
                status_code=e.response.status_code
            ) from e
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"❌ Access token request failed: {e!r}")
            raise AuthError(
                "NAVER WORKS authentication failed",
                original_error=type(e).__name__
            ) from e

        access_token = body.get("access_token")
        if not access_token:
            raise AuthError("Token endpoint response did not include an access token")

        try:
            expires_in = int(body.get("expires_in", self.assertion_lifetime_seconds))
        except (TypeError, ValueError) as e:
            raise AuthError("Token endpoint returned an invalid expires_in") from e

        buffer_seconds = self.buffer_seconds
        if expires_in <= buffer_seconds:
            # Cached expiry must stay ahead of now, inside the token's real lifetime
            buffer_seconds = expires_in // 2
            logger.warning(
                f"⚠️ Token lifetime {expires_in}s is within the {self.buffer_seconds}s "
                f"refresh buffer; caching it for {expires_in - buffer_seconds}s"
            )

        self.cache.store(
            access_token,
            self._now() + (expires_in - buffer_seconds),
        )

        logger.info(f"✅ Access token issued (valid for {expires_in}s)")
        return access_token
