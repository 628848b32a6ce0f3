"""Notification Outbox operations: append, mark read, mark all read."""

import structlog
from protean import handle
from protean.fields import Identifier, Text
from protean.utils.globals import current_domain

from tanimart.domain import tanimart
from tanimart.notification.notification import Notification

logger = structlog.get_logger(__name__)


@tanimart.command(part_of="Notification")
class AppendNotification:
    user_id: Identifier(required=True)
    message: Text(required=True)


@tanimart.command(part_of="Notification")
class MarkNotificationRead:
    notification_id: Identifier(required=True)
    user_id: Identifier(required=True)


@tanimart.command(part_of="Notification")
class MarkAllNotificationsRead:
    user_id: Identifier(required=True)


@tanimart.command_handler(part_of=Notification)
class NotificationOutboxHandler:
    @handle(AppendNotification)
    def append(self, command: AppendNotification):
        notification = Notification.create(command.user_id, command.message)
        current_domain.repository_for(Notification).add(notification)
        return str(notification.id)

    @handle(MarkNotificationRead)
    def mark_read(self, command: MarkNotificationRead):
        repo = current_domain.repository_for(Notification)
        notification = repo.get(command.notification_id)
        if notification.mark_read(command.user_id):
            repo.add(notification)
        return notification

    @handle(MarkAllNotificationsRead)
    def mark_all_read(self, command: MarkAllNotificationsRead):
        repo = current_domain.repository_for(Notification)
        count = 0
        for notification in repo.unread_for(command.user_id):
            notification.mark_read(command.user_id)
            repo.add(notification)
            count += 1

        if count:
            logger.info("Notifications marked read", user_id=str(command.user_id), count=count)
        return count
