"""
Notification Service for the Ops Notifier.

Runs the notification pipeline for one event:

    classify -> enrich -> token -> compose -> dispatch

Provides:
- One consolidated pipeline for webhook events and direct notify requests
- Best-effort enrichment of user ids to display names (Supabase)
- Channel and per-user delivery with partial-failure tolerance
"""
import asyncio
import logging
from typing import Optional

import httpx

from ops_notifier.core.config import Settings
from ops_notifier.core.database import get_supabase_client
from ops_notifier.core.exceptions import ConfigurationError, SendError
from ops_notifier.models.enums import NotificationType
from ops_notifier.models.schemas import MessageContent, NotificationEvent, WebhookPayload
from .classifier import classify
from .dispatcher import Dispatcher, DispatchReport
from .messages import compose
from .naver_works.auth import NaverWorksCredentials, TokenCache, TokenProvider
from .naver_works.directory import RecipientResolver


logger = logging.getLogger(__name__)


TEST_MESSAGE_TEXT = "🎉 네이버 웍스 알림 테스트 메시지입니다!"

# Templates that print a 담당자 line
_MANAGER_NAMED_TYPES = {
    NotificationType.PROJECT_CREATED.value,
    NotificationType.PROJECT_COMPLETED.value,
}


class NotificationService:
    """
    Notification pipeline bound to one HTTP client and one token cache.

    Targets:
    - ``channel_id``: every notification is posted to this bot channel
    - ``recipients``: every notification is sent to these users individually
    Either, both, or neither may be configured.
    """

    def __init__(
        self,
        dispatcher: Dispatcher,
        base_url: str,
        channel_id: Optional[str] = None,
        recipients: Optional[list[str]] = None,
        enrich_users: bool = False,
    ):
        self.dispatcher = dispatcher
        self.base_url = base_url
        self.channel_id = channel_id
        self.recipients = recipients or []
        self.enrich_users = enrich_users

    async def handle_change_event(self, payload: WebhookPayload) -> Optional[DispatchReport]:
        """
        Classify a database change and deliver the resulting notification.

        Returns:
            DispatchReport, or None if the change is not notifiable

        Raises:
            AuthError: If no access token can be obtained
        """
        event = classify(payload)
        if event is None:
            logger.debug(
                f"Change not notifiable: {payload.type} on {payload.source_table}"
            )
            return None

        logger.info(f"🔔 Classified {payload.type} on {payload.source_table} as {event.type}")
        return await self.notify(event)

    async def notify(
        self,
        event: NotificationEvent,
        recipients: Optional[list[str]] = None,
    ) -> DispatchReport:
        """
        Compose and deliver one notification.

        Args:
            event: The notification to send
            recipients: Override for the configured user recipients. When given,
                only these users receive the message (no channel post).
        """
        if self.enrich_users:
            event = await self._enrich(event)

        content = compose(event.type, event.data, self.base_url)

        if recipients is not None:
            return await self.dispatcher.send_to_users(recipients, content)

        return await self._deliver(content)

    async def send_test_message(self) -> DispatchReport:
        """
        Post a fixed text message to the configured channel.

        A failed channel post raises, unlike regular notifications.

        Raises:
            ConfigurationError: If no channel is configured
            SendError: If the channel post fails
        """
        if not self.channel_id:
            raise ConfigurationError(
                "Notification channel is not configured",
                config_key="NOTIFICATION_CHANNEL_ID"
            )

        content = MessageContent.plain(TEST_MESSAGE_TEXT)
        report = await self.dispatcher.send_to_channel(self.channel_id, content)

        if report.failed:
            target, code = next(iter(report.failed.items()))
            raise SendError(f"Test message not delivered ({code})", target=target)

        return report

    async def _deliver(self, content: MessageContent) -> DispatchReport:
        if not self.channel_id and not self.recipients:
            logger.warning("⚠️ No notification targets configured. Message dropped.")
            return DispatchReport()

        report = DispatchReport()
        if self.channel_id:
            report = report.merge(await self.dispatcher.send_to_channel(self.channel_id, content))
        if self.recipients:
            report = report.merge(await self.dispatcher.send_to_users(self.recipients, content))

        return report

    async def _enrich(self, event: NotificationEvent) -> NotificationEvent:
        """Fill the manager name of project notifications from ``assigned_to``."""
        if event.type not in _MANAGER_NAMED_TYPES:
            return event

        data = event.data
        user_id = data.get("assigned_to")
        if data.get("manager") or not user_id:
            return event

        name = await self._lookup_user_name(str(user_id))
        if not name:
            return event

        return NotificationEvent(type=event.type, data={**data, "manager": name})

    async def _lookup_user_name(self, user_id: str) -> Optional[str]:
        try:
            db = get_supabase_client()
            user = await asyncio.to_thread(db.get_user, user_id)
        except Exception as e:
            logger.warning(f"⚠️ User lookup failed for {user_id}: {e}")
            return None

        if not user:
            return None
        return user.get("name") or user.get("email")


def build_notification_service(
    settings: Settings,
    http_client: httpx.AsyncClient,
    token_cache: Optional[TokenCache] = None,
) -> NotificationService:
    """Wire the pipeline from settings around a shared HTTP client."""
    credentials = NaverWorksCredentials.from_settings(settings)

    token_provider = TokenProvider(
        credentials=credentials,
        http_client=http_client,
        auth_url=settings.naver_works_auth_url,
        scope=settings.naver_works_scope,
        cache=token_cache,
        buffer_seconds=settings.token_expiry_buffer_seconds,
        assertion_lifetime_seconds=settings.assertion_lifetime_seconds,
    )
    dispatcher = Dispatcher(
        token_provider=token_provider,
        resolver=RecipientResolver(http_client, settings.naver_works_api_url),
        http_client=http_client,
        api_url=settings.naver_works_api_url,
        bot_id=credentials.bot_id,
    )

    return NotificationService(
        dispatcher=dispatcher,
        base_url=settings.app_base_url,
        channel_id=settings.notification_channel_id,
        recipients=settings.notification_user_list,
        enrich_users=settings.database_enabled,
    )
