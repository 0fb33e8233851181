"""
Message Dispatcher for NAVER WORKS bot messages.

Delivery is best effort: each target gets exactly one attempt, targets
are sent concurrently, and a failed target never aborts the batch.
Only token acquisition failures (AuthError) reach the caller.
"""
import asyncio
import logging
from dataclasses import dataclass, field
from typing import Iterable

import httpx

from ops_notifier.core.exceptions import NotifierException, SendError
from ops_notifier.models.schemas import MessageContent
from .naver_works.auth import TokenProvider
from .naver_works.directory import RecipientResolver


logger = logging.getLogger(__name__)


@dataclass
class DispatchReport:
    """Outcome of one dispatch call."""
    delivered: list[str] = field(default_factory=list)
    failed: dict[str, str] = field(default_factory=dict)  # target -> error code

    @property
    def attempted(self) -> int:
        return len(self.delivered) + len(self.failed)

    def merge(self, other: "DispatchReport") -> "DispatchReport":
        return DispatchReport(
            delivered=self.delivered + other.delivered,
            failed={**self.failed, **other.failed},
        )


class Dispatcher:
    """
    Sends composed messages to NAVER WORKS users or channels.

    Usage:
        report = await dispatcher.send_to_users(["a@example.com"], content)
        report = await dispatcher.send_to_channel(channel_id, content)
    """

    def __init__(
        self,
        token_provider: TokenProvider,
        resolver: RecipientResolver,
        http_client: httpx.AsyncClient,
        api_url: str,
        bot_id: str,
    ):
        self.token_provider = token_provider
        self.resolver = resolver
        self.http_client = http_client
        self.api_url = api_url.rstrip("/")
        self.bot_id = bot_id

    async def send_to_users(self, emails: Iterable[str], content: MessageContent) -> DispatchReport:
        """
        Send ``content`` to every email, settling all sends.

        Raises:
            AuthError: If no access token can be obtained
        """
        emails = list(emails)
        report = DispatchReport()
        if not emails:
            return report

        access_token = await self.token_provider.get_access_token()

        results = await asyncio.gather(
            *(self._send_to_user(access_token, email, content) for email in emails),
            return_exceptions=True,
        )

        for email, result in zip(emails, results):
            self._record(report, email, result)

        logger.info(
            f"📨 User dispatch finished: {len(report.delivered)}/{report.attempted} delivered"
        )
        return report

    async def send_to_channel(self, channel_id: str, content: MessageContent) -> DispatchReport:
        """
        Send ``content`` to a bot channel.

        Raises:
            AuthError: If no access token can be obtained
        """
        access_token = await self.token_provider.get_access_token()
        url = f"{self.api_url}/bots/{self.bot_id}/channels/{channel_id}/messages"
        target = f"channel:{channel_id}"

        report = DispatchReport()
        try:
            await self._post_message(access_token, url, content, target)
        except NotifierException as e:
            self._record(report, target, e)
        else:
            self._record(report, target, None)
        return report

    async def _send_to_user(self, access_token: str, email: str, content: MessageContent) -> None:
        user_id = await self.resolver.resolve_user_id(access_token, email)
        url = f"{self.api_url}/bots/{self.bot_id}/users/{user_id}/messages"
        await self._post_message(access_token, url, content, email)

    async def _post_message(
        self,
        access_token: str,
        url: str,
        content: MessageContent,
        target: str,
    ) -> None:
        if not self.bot_id:
            raise SendError("NAVER WORKS bot id not configured", target=target)

        try:
            response = await self.http_client.post(
                url,
                json={"content": content.to_payload()},
                headers={"Authorization": f"Bearer {access_token}"},
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise SendError(
                "Message delivery rejected",
                target=target,
                status_code=e.response.status_code,
            ) from e
        except httpx.HTTPError as e:
            raise SendError(
                "Message delivery failed",
                target=target,
                original_error=type(e).__name__,
            ) from e

    @staticmethod
    def _record(report: DispatchReport, target: str, outcome) -> None:
        if outcome is None:
            report.delivered.append(target)
            logger.info(f"✅ Message sent: {target}")
        elif isinstance(outcome, NotifierException):
            report.failed[target] = outcome.error_code
            logger.warning(f"❌ Message not sent ({target}): {outcome.message} {outcome.details}")
        else:
            report.failed[target] = "INTERNAL_ERROR"
            logger.error(f"❌ Message not sent ({target}): {outcome!r}")
