"""Shared helpers for notification event handlers.

Render the template, then create one Notification per channel. Each
notification is created independently: a failure is logged and does not stop
the others, and never reaches the transition that triggered it.
"""

import structlog
from protean.utils.globals import current_domain

from storefront.notification.notification import Notification, RecipientType
from storefront.templates import get_template

logger = structlog.get_logger(__name__)

REVIEW_QUEUE_RECIPIENT = "refund-review"
OPERATIONS_RECIPIENT = "operations"


def _create(recipient_id, recipient_type, notification_type, channel, rendered, source_event_type, source_event_id):
    notification = Notification.create(
        recipient_id=recipient_id,
        recipient_type=recipient_type,
        notification_type=notification_type,
        channel=channel,
        subject=rendered.get("subject"),
        body=rendered["body"],
        link=rendered.get("link"),
        source_event_type=source_event_type,
        source_event_id=source_event_id,
    )
    current_domain.repository_for(Notification).add(notification)
    return str(notification.id)


def create_notifications(
    recipient_id: str,
    notification_type: str,
    context: dict,
    recipient_type: str = RecipientType.CUSTOMER.value,
    channels: list[str] | None = None,
    source_event_type: str | None = None,
    source_event_id: str | None = None,
) -> list[str]:
    """Create notifications on the template's default channels.

    Returns:
        IDs of the notifications that were created.
    """
    try:
        template_cls = get_template(notification_type)
        rendered = template_cls.render(context)
    except Exception as exc:
        logger.error(
            "notification_render_failed",
            recipient_id=str(recipient_id),
            notification_type=notification_type,
            error=str(exc),
        )
        return []

    notification_ids = []
    for channel in channels or template_cls.default_channels:
        try:
            notification_ids.append(
                _create(
                    recipient_id,
                    recipient_type,
                    notification_type,
                    channel,
                    rendered,
                    source_event_type,
                    source_event_id,
                )
            )
        except Exception as exc:
            logger.error(
                "notification_create_failed",
                recipient_id=str(recipient_id),
                notification_type=notification_type,
                channel=channel,
                error=str(exc),
            )

    logger.info(
        "notifications_created",
        recipient_id=str(recipient_id),
        notification_type=notification_type,
        count=len(notification_ids),
    )
    return notification_ids


def create_notifications_for_customer(customer_id, notification_type, context, source_event_type=None, source_event_id=None):
    return create_notifications(
        recipient_id=str(customer_id),
        notification_type=notification_type,
        context=context,
        source_event_type=source_event_type,
        source_event_id=source_event_id,
    )


def create_internal_notification(
    notification_type,
    context,
    recipient_id=OPERATIONS_RECIPIENT,
    source_event_type=None,
    source_event_id=None,
):
    """Internal alerts go to a team inbox rather than a customer."""
    return create_notifications(
        recipient_id=recipient_id,
        notification_type=notification_type,
        context=context,
        recipient_type=RecipientType.INTERNAL.value,
        source_event_type=source_event_type,
        source_event_id=source_event_id,
    )
