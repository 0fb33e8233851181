# Services - Business Logic Layer
"""
Ops Notifier Services Module.

This module provides the notification pipeline:
- Change-event classification
- Message composition
- Token issuance and recipient lookup (NAVER WORKS)
- Best-effort message dispatch
"""

from .classifier import classify
from .messages import compose, MessageTemplates
from .dispatcher import Dispatcher, DispatchReport
from .notifications import (
    NotificationService,
    build_notification_service,
    TEST_MESSAGE_TEXT,
)

__all__ = [
    "classify",
    "compose",
    "MessageTemplates",
    "Dispatcher",
    "DispatchReport",
    "NotificationService",
    "build_notification_service",
    "TEST_MESSAGE_TEXT",
]
