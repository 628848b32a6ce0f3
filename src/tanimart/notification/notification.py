"""Notification aggregate (CQRS): one entry in a user's in-app notification log.

Entries are append-only. The only state change is unread -> read, and only
the owning user may make it.
"""

from datetime import UTC, datetime

from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Identifier, Text

from tanimart.domain import tanimart
from tanimart.notification.events import NotificationAppended, NotificationRead
from tanimart.shared.errors import AuthorizationError

ORDER_PLACED_MESSAGE = "Pesanan #{reference} telah dibuat dan sedang menunggu pembayaran"


@tanimart.aggregate
class Notification:
    user_id: Identifier(required=True)
    message: Text(required=True)
    is_read: Boolean(default=False)
    created_at: DateTime()
    read_at: DateTime()

    @classmethod
    def create(cls, user_id, message):
        if not message or not str(message).strip():
            raise ValidationError({"message": ["Message cannot be blank"]})

        now = datetime.now(UTC)
        notification = cls(
            user_id=user_id,
            message=message,
            is_read=False,
            created_at=now,
        )
        notification.raise_(
            NotificationAppended(
                notification_id=str(notification.id),
                user_id=str(user_id),
                message=message,
                created_at=now,
            )
        )
        return notification

    @classmethod
    def for_order_placed(cls, user_id, order_reference):
        return cls.create(user_id, ORDER_PLACED_MESSAGE.format(reference=order_reference))

    def mark_read(self, user_id) -> bool:
        """Mark as read on behalf of ``user_id``.

        Returns False when the notification was already read, in which case
        nothing changes.
        """
        if str(self.user_id) != str(user_id):
            raise AuthorizationError("Notification belongs to another user")

        if self.is_read:
            return False

        now = datetime.now(UTC)
        self.is_read = True
        self.read_at = now
        self.raise_(
            NotificationRead(
                notification_id=str(self.id),
                user_id=str(self.user_id),
                read_at=now,
            )
        )
        return True
