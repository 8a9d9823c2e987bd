"""Alert notifications — concurrent multi-channel delivery of fired alerts."""

from psytrack.notifications.handlers import (
    CallbackHandler,
    DeliveryReport,
    LogHandler,
    NotificationDispatcher,
    NotificationHandler,
    WebhookHandler,
    create_dispatcher,
)

__all__ = [
    "CallbackHandler",
    "DeliveryReport",
    "LogHandler",
    "NotificationDispatcher",
    "NotificationHandler",
    "WebhookHandler",
    "create_dispatcher",
]
