# Data models - Enums and Pydantic Schemas
from .enums import (
    ChangeType,
    SourceTable,
    ProjectStatus,
    NotificationType,
    ContentType,
)
from .schemas import (
    WebhookPayload,
    NotificationEvent,
    NotifyRequest,
    WebhookResponse,
    MessageAction,
    MessageContent,
)

__all__ = [
    # Enums
    "ChangeType",
    "SourceTable",
    "ProjectStatus",
    "NotificationType",
    "ContentType",
    # Inbound Schemas
    "WebhookPayload",
    "NotificationEvent",
    "NotifyRequest",
    # Response Schemas
    "WebhookResponse",
    # Outbound Schemas
    "MessageAction",
    "MessageContent",
]
