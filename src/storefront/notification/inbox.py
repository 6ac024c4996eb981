"""In-app inbox: mark notifications read."""

from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Identifier
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.exceptions import NotFoundError
from storefront.notification.notification import Notification


@storefront.command(part_of="Notification")
class MarkNotificationRead:
    notification_id = Identifier(required=True)
    recipient_id = Identifier(required=True)


@storefront.command(part_of="Notification")
class MarkAllNotificationsRead:
    recipient_id = Identifier(required=True)


@storefront.command_handler(part_of=Notification)
class InboxHandler:
    @handle(MarkNotificationRead)
    def mark_read(self, command):
        repo = current_domain.repository_for(Notification)
        try:
            notification = repo.get(command.notification_id)
        except ObjectNotFoundError as exc:
            raise NotFoundError({"notification_id": ["Notification not found"]}) from exc
        if str(notification.recipient_id) != str(command.recipient_id):
            raise NotFoundError({"notification_id": ["Notification not found"]})

        notification.mark_read()
        repo.add(notification)

    @handle(MarkAllNotificationsRead)
    def mark_all_read(self, command):
        repo = current_domain.repository_for(Notification)
        unread = repo.inbox(command.recipient_id, unread_only=True)
        for notification in unread:
            notification.mark_read()
            repo.add(notification)
        return len(unread)
