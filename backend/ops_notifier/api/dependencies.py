"""
FastAPI dependencies shared by the routers.
"""
from fastapi import Request

from ops_notifier.services.notifications import NotificationService


def get_notification_service(request: Request) -> NotificationService:
    """The pipeline built for this app in the lifespan handler."""
    return request.app.state.notification_service
