"""
NAVER WORKS user directory lookups.
"""
import logging
from urllib.parse import quote

import httpx

from ops_notifier.core.exceptions import RecipientLookupError


logger = logging.getLogger(__name__)


class RecipientResolver:
    """Maps an email address to a NAVER WORKS user id. Every call hits the API."""

    def __init__(self, http_client: httpx.AsyncClient, api_url: str):
        self.http_client = http_client
        self.api_url = api_url.rstrip("/")

    async def resolve_user_id(self, access_token: str, email: str) -> str:
        """
        Look up the user id for ``email``.

        Raises:
            RecipientLookupError: If the address is unknown or the call fails
        """
        url = f"{self.api_url}/users/{quote(email, safe='')}"

        try:
            response = await self.http_client.get(
                url,
                headers={"Authorization": f"Bearer {access_token}"},
            )
            response.raise_for_status()
            user_id = response.json().get("userId")
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            message = "Unknown NAVER WORKS user" if status == 404 else "User lookup failed"
            raise RecipientLookupError(message, email=email, status_code=status) from e
        except (httpx.HTTPError, ValueError) as e:
            raise RecipientLookupError(f"User lookup failed: {type(e).__name__}", email=email) from e

        if not user_id:
            raise RecipientLookupError("User lookup response had no userId", email=email)

        logger.debug(f"Resolved {email} to NAVER WORKS user {user_id}")
        return user_id
