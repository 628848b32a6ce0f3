"""Domain events for the Notification aggregate."""

from protean.fields import DateTime, Identifier, Text

from tanimart.domain import tanimart


@tanimart.event(part_of="Notification")
class NotificationAppended:
    """A message was added to a user's notification log."""

    __version__ = 1

    notification_id: Identifier(required=True)
    user_id: Identifier(required=True)
    message: Text(required=True)
    created_at: DateTime(required=True)


@tanimart.event(part_of="Notification")
class NotificationRead:
    """The owner opened or dismissed a notification."""

    __version__ = 1

    notification_id: Identifier(required=True)
    user_id: Identifier(required=True)
    read_at: DateTime(required=True)
