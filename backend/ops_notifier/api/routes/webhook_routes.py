"""
Webhook API Routes for the Ops Notifier.

Provides endpoints for:
- Supabase database webhooks (project/sample changes)
- Manual test message to the notification channel
"""
import logging

from fastapi import APIRouter, Depends, Request

from ops_notifier.api.dependencies import get_notification_service
from ops_notifier.api.rate_limits import get_limiter
from ops_notifier.core.config import settings
from ops_notifier.core.exceptions import NotifierException
from ops_notifier.models.schemas import WebhookPayload, WebhookResponse
from ops_notifier.services.notifications import NotificationService


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/webhook", tags=["Webhooks"])
limiter = get_limiter()


NOT_APPLICABLE_MESSAGE = "알림 대상 아님"
SENT_MESSAGE = "알림 전송 완료"
TEST_SENT_MESSAGE = "테스트 메시지 전송 완료"


@router.post(
    "/naver-works",
    response_model=WebhookResponse,
    response_model_exclude_none=True,
    summary="Handle Database Change",
    description="Classifies a database change event and sends the matching NAVER WORKS notification"
)
@limiter.limit(settings.webhook_rate_limit)
async def handle_database_change(
    request: Request,
    payload: WebhookPayload,
    service: NotificationService = Depends(get_notification_service),
) -> WebhookResponse:
    """
    Entry point for Supabase database webhooks.

    Responds success without any outbound call when the change is not
    notifiable. Individual recipient failures are logged, not reported.
    """
    record_id = (payload.record or {}).get("id")
    logger.info(f"📨 Webhook received: {payload.type} {payload.source_table} id={record_id}")

    try:
        report = await service.handle_change_event(payload)
    except NotifierException:
        raise
    except Exception as e:
        logger.exception("❌ Webhook processing failed")
        raise NotifierException("Webhook processing failed") from e

    if report is None:
        return WebhookResponse(success=True, message=NOT_APPLICABLE_MESSAGE)

    return WebhookResponse(success=True, message=SENT_MESSAGE)


@router.post(
    "/test",
    response_model=WebhookResponse,
    response_model_exclude_none=True,
    summary="Send Test Message",
    description="Posts a fixed text message to the configured notification channel"
)
@limiter.limit(settings.webhook_rate_limit)
async def send_test_message(
    request: Request,
    service: NotificationService = Depends(get_notification_service),
) -> WebhookResponse:
    """Manual end-to-end check of credentials and channel configuration."""
    try:
        await service.send_test_message()
    except NotifierException:
        raise
    except Exception as e:
        logger.exception("❌ Test message failed")
        raise NotifierException("Test message failed") from e

    return WebhookResponse(success=True, message=TEST_SENT_MESSAGE)
