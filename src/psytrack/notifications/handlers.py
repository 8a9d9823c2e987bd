"""Alert delivery — route fired alerts to log, webhook and in-process channels.

The alert engine only *returns* alerts.  A :class:`NotificationDispatcher`
hands each one to every registered channel whose severity floor it meets.
Channels are awaited concurrently; one that fails or raises is recorded in
the :class:`DeliveryReport` and never affects the others.

Anything leaving the process (the webhook) passes through the
:class:`~psytrack.privacy.PrivacyManager` filter first.
"""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Awaitable, Callable

import httpx
import structlog

from psytrack.models import Alert, AlertSeverity

if TYPE_CHECKING:
    from psytrack.config import Settings
    from psytrack.privacy import PrivacyManager

logger = structlog.get_logger(__name__)

_SEVERITY_ORDER = (AlertSeverity.LOW, AlertSeverity.MEDIUM, AlertSeverity.HIGH)


def severity_at_least(severity: AlertSeverity, floor: AlertSeverity) -> bool:
    return _SEVERITY_ORDER.index(severity) >= _SEVERITY_ORDER.index(floor)


@dataclass(frozen=True, slots=True)
class DeliveryReport:
    """Which channels took an alert and which did not."""

    alert_key: str
    delivered: tuple[str, ...] = ()
    failed: tuple[str, ...] = ()

    @property
    def ok(self) -> bool:
        return not self.failed


# ── Channels ──────────────────────────────────────────────────


class NotificationHandler(ABC):
    """One delivery channel.  ``send`` returns ``False`` on a handled failure."""

    name: str = "channel"

    def __init__(self, *, min_severity: AlertSeverity = AlertSeverity.LOW) -> None:
        self.min_severity = min_severity

    def accepts(self, alert: Alert) -> bool:
        return severity_at_least(alert.severity, self.min_severity)

    @abstractmethod
    async def send(self, alert: Alert) -> bool: ...


class LogHandler(NotificationHandler):
    name = "log"

    async def send(self, alert: Alert) -> bool:
        logger.info(
            "notification.alert",
            key=alert.dismissal_key,
            severity=alert.severity.value,
            context=alert.context,
            suggestion=alert.suggestion,
        )
        return True


class WebhookHandler(NotificationHandler):
    """POST the alert as JSON, anonymized when a privacy manager is attached.

    Delivery is skipped (and reported as failed) when the privacy settings
    forbid sharing with the therapist.
    """

    name = "webhook"

    def __init__(
        self,
        url: str,
        *,
        timeout: float = 10.0,
        privacy: PrivacyManager | None = None,
        min_severity: AlertSeverity = AlertSeverity.LOW,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        super().__init__(min_severity=min_severity)
        self.url = url
        self.timeout = timeout
        self.privacy = privacy
        self._transport = transport

    def payload(self, alert: Alert) -> dict[str, Any]:
        body = alert.model_dump(mode="json")
        body["dismissal_key"] = alert.dismissal_key
        if self.privacy is not None:
            body = self.privacy.apply_privacy_filters(body)
        return body

    async def send(self, alert: Alert) -> bool:
        if self.privacy is not None and not self.privacy.is_allowed("share_therapist"):
            logger.info("notification.webhook_blocked", key=alert.dismissal_key)
            return False
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            try:
                response = await client.post(self.url, json=self.payload(alert))
                response.raise_for_status()
            except httpx.HTTPError as exc:
                logger.error("notification.webhook_failed", url=self.url, error=str(exc))
                return False
        logger.debug("notification.webhook_sent", url=self.url, status=response.status_code)
        return True


class CallbackHandler(NotificationHandler):
    """Await an in-process coroutine, e.g. the alert presentation surface."""

    def __init__(
        self,
        callback: Callable[[Alert], Awaitable[None]],
        *,
        name: str = "callback",
        min_severity: AlertSeverity = AlertSeverity.LOW,
    ) -> None:
        super().__init__(min_severity=min_severity)
        self.name = name
        self._callback = callback

    async def send(self, alert: Alert) -> bool:
        await self._callback(alert)
        return True


# ── Dispatcher ────────────────────────────────────────────────


class NotificationDispatcher:
    """Deliver alerts to every accepting channel concurrently."""

    def __init__(self, handlers: list[NotificationHandler] | None = None) -> None:
        self._handlers = list(handlers) if handlers is not None else [LogHandler()]

    @property
    def channels(self) -> list[str]:
        return [h.name for h in self._handlers]

    def register(self, handler: NotificationHandler) -> None:
        self._handlers.append(handler)

    def unregister(self, name: str) -> bool:
        """Drop the first channel called *name*; ``False`` if there was none."""
        for handler in self._handlers:
            if handler.name == name:
                self._handlers.remove(handler)
                return True
        return False

    async def dispatch(self, alert: Alert) -> DeliveryReport:
        targets = [h for h in self._handlers if h.accepts(alert)]
        outcomes = await asyncio.gather(
            *(h.send(alert) for h in targets),
            return_exceptions=True,
        )

        delivered: list[str] = []
        failed: list[str] = []
        for handler, outcome in zip(targets, outcomes):
            if isinstance(outcome, BaseException):
                logger.error(
                    "notification.channel_error",
                    channel=handler.name,
                    key=alert.dismissal_key,
                    exc_info=outcome,
                )
                failed.append(handler.name)
            elif outcome:
                delivered.append(handler.name)
            else:
                failed.append(handler.name)

        if failed:
            logger.warning("notification.undelivered", key=alert.dismissal_key, channels=failed)
        return DeliveryReport(alert.dismissal_key, tuple(delivered), tuple(failed))

    async def dispatch_many(self, alerts: list[Alert]) -> list[DeliveryReport]:
        """Deliver a batch in order; reports line up with *alerts*."""
        return list(await asyncio.gather(*(self.dispatch(a) for a in alerts)))


def create_dispatcher(
    settings: Settings,
    privacy: PrivacyManager | None = None,
) -> NotificationDispatcher:
    """Log channel always; webhook channel when ``WEBHOOK_URL`` is set."""
    dispatcher = NotificationDispatcher()
    if settings.webhook_url:
        dispatcher.register(
            WebhookHandler(settings.webhook_url, timeout=settings.webhook_timeout, privacy=privacy)
        )
    return dispatcher
