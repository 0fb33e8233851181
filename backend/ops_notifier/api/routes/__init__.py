# API Routes
from .webhook_routes import router as webhook_router
from .notification_routes import router as notification_router

__all__ = [
    "webhook_router",
    "notification_router",
]
