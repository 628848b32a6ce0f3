"""FastAPI routes for the caller's notification log."""

from fastapi import APIRouter, Query
from protean.utils.globals import current_domain

from tanimart.api.identity import CurrentActor
from tanimart.api.schemas import MarkAllReadResponse, NotificationListResponse, NotificationResponse
from tanimart.notification.notification import Notification
from tanimart.notification.outbox import MarkAllNotificationsRead, MarkNotificationRead
from tanimart.notification.repository import RECENT_LIMIT

router = APIRouter(prefix="/notifications", tags=["notifications"])


def _notification_response(notification: Notification) -> NotificationResponse:
    return NotificationResponse(
        id=str(notification.id),
        message=notification.message,
        is_read=notification.is_read,
        created_at=notification.created_at,
        read_at=notification.read_at,
    )


@router.get("", response_model=NotificationListResponse)
async def list_notifications(
    actor: CurrentActor,
    limit: int = Query(default=RECENT_LIMIT, ge=1, le=100),
) -> NotificationListResponse:
    repo = current_domain.repository_for(Notification)
    return NotificationListResponse(
        notifications=[_notification_response(n) for n in repo.list_recent(actor.id, limit=limit)],
        unread_count=repo.unread_count(actor.id),
    )


@router.put("/read-all", response_model=MarkAllReadResponse)
async def mark_all_read(actor: CurrentActor) -> MarkAllReadResponse:
    count = current_domain.process(MarkAllNotificationsRead(user_id=actor.id), asynchronous=False)
    return MarkAllReadResponse(count=count)


@router.put("/{notification_id}/read", response_model=NotificationResponse)
async def mark_read(notification_id: str, actor: CurrentActor) -> NotificationResponse:
    command = MarkNotificationRead(notification_id=notification_id, user_id=actor.id)
    notification = current_domain.process(command, asynchronous=False)
    return _notification_response(notification)
