"""
Notification API Routes for the Ops Notifier.

Lets the portal send a typed notification straight to users,
e.g. urgent project alerts that no database change produces.
"""
import logging

from fastapi import APIRouter, Depends, Request

from ops_notifier.api.dependencies import get_notification_service
from ops_notifier.api.rate_limits import get_limiter
from ops_notifier.core.config import settings
from ops_notifier.core.exceptions import ConfigurationError, NotifierException
from ops_notifier.models.schemas import NotificationEvent, NotifyRequest, WebhookResponse
from ops_notifier.services.notifications import NotificationService


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/notifications", tags=["Notifications"])
limiter = get_limiter()


@router.post(
    "",
    response_model=WebhookResponse,
    response_model_exclude_none=True,
    summary="Send Notification",
    description="Composes a notification of the given type and sends it to each recipient"
)
@limiter.limit(settings.webhook_rate_limit)
async def send_notification(
    request: Request,
    body: NotifyRequest,
    service: NotificationService = Depends(get_notification_service),
) -> WebhookResponse:
    """
    Send a notification to users.

    Recipients default to NOTIFICATION_USERS. Unknown types are sent as
    a generic text message.
    """
    if body.recipients is not None:
        recipients = [str(email) for email in body.recipients]
    else:
        recipients = service.recipients

    if not recipients:
        raise ConfigurationError(
            "No notification recipients given or configured",
            config_key="NOTIFICATION_USERS"
        )

    logger.info(f"📨 Notify request: {body.type} -> {len(recipients)} recipient(s)")

    try:
        await service.notify(NotificationEvent(type=body.type, data=body.data), recipients=recipients)
    except NotifierException:
        raise
    except Exception as e:
        logger.exception("❌ Notify request failed")
        raise NotifierException("Notify request failed") from e

    return WebhookResponse(success=True, message="알림 전송 완료")
