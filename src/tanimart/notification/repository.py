"""Notification Outbox queries."""

from tanimart.domain import tanimart
from tanimart.notification.notification import Notification

# Notifications shown on the customer dashboard.
RECENT_LIMIT = 5


@tanimart.repository(part_of=Notification)
class NotificationRepository:
    def list_recent(self, user_id, limit=RECENT_LIMIT) -> list[Notification]:
        return (
            self._dao.query.filter(user_id=user_id)
            .order_by("-created_at")
            .limit(limit)
            .all()
            .items
        )

    def unread_for(self, user_id) -> list[Notification]:
        query = self._dao.query.filter(user_id=user_id, is_read=False).order_by("created_at")
        result = query.all()
        if result.total > len(result.items):
            # Queries are capped at the provider's default page; fetch the rest
            result = query.limit(result.total).all()
        return result.items

    def unread_count(self, user_id) -> int:
        return self._dao.query.filter(user_id=user_id, is_read=False).all().total
