"""Dispatch handler: delivers notifications once they are stored.

Email goes through the configured email adapter. In-app notifications are
delivered by being stored, so they are marked sent straight away. A failed
delivery marks the notification FAILED and is logged; it never propagates.
"""

import structlog
from protean import handle
from protean.utils.globals import current_domain

from storefront.channel import get_email_adapter
from storefront.domain import storefront
from storefront.exceptions import DependencyFailure
from storefront.notification.events import NotificationCreated
from storefront.notification.notification import Notification, NotificationChannel, NotificationStatus

logger = structlog.get_logger(__name__)


def _failure_reason(exc: Exception) -> str:
    messages = getattr(exc, "messages", None)
    if isinstance(messages, dict):
        return "; ".join(str(msg) for msgs in messages.values() for msg in msgs)
    return str(exc)


def _deliver(notification: Notification) -> None:
    if notification.channel == NotificationChannel.IN_APP.value:
        return

    if notification.channel == NotificationChannel.EMAIL.value:
        result = get_email_adapter().send(
            to=str(notification.recipient_id),
            subject=notification.subject or "",
            body=notification.body,
        )
        if result.get("status") != "sent":
            raise DependencyFailure({"email": [result.get("error") or "Unknown dispatch error"]})
        return

    raise DependencyFailure({"channel": [f"Unknown channel: {notification.channel}"]})


@storefront.event_handler(part_of=Notification)
class NotificationDispatcher:
    @handle(NotificationCreated)
    def on_notification_created(self, event: NotificationCreated) -> None:
        repo = current_domain.repository_for(Notification)
        notification = repo.get(event.notification_id)

        if notification.status != NotificationStatus.PENDING.value:
            logger.info(
                "notification_dispatch_skipped",
                notification_id=str(notification.id),
                status=notification.status,
            )
            return

        try:
            _deliver(notification)
        except DependencyFailure as exc:
            notification.mark_failed(_failure_reason(exc))
            logger.warning(
                "notification_dispatch_failed",
                notification_id=str(notification.id),
                channel=notification.channel,
                error=_failure_reason(exc),
            )
        except Exception as exc:
            notification.mark_failed(str(exc))
            logger.error(
                "notification_dispatch_failed",
                notification_id=str(notification.id),
                channel=notification.channel,
                error=str(exc),
            )
        else:
            notification.mark_sent()

        repo.add(notification)
