"""Admin broadcast notifications, acknowledgements, and push subscriptions."""

import json
import logging
from dataclasses import dataclass
from typing import Callable, Protocol
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from appendlist_api.core.errors import (
    ForbiddenError,
    NotificationNotFoundError,
    ValidationFailedError,
)
from appendlist_api.db.models import Notification, NotificationAck, PushSubscription, utcnow
from appendlist_api.schemas.auth import Principal
from appendlist_api.services import access_service
from appendlist_api.services.access_service import AccessConfig
from appendlist_api.utils.normalization import normalize_email


logger = logging.getLogger(__name__)

# Push services answer these for subscriptions that no longer exist
GONE_STATUS_CODES = {404, 410}


class PushDeliveryError(Exception):
    """Raised by a PushSender when the push service rejects a message."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class PushSender(Protocol):
    """Delivery transport supplied by the host application."""

    def send(self, subscription_info: dict, payload: str) -> None: ...


@dataclass
class NotificationState:
    is_admin: bool
    notifications: list[Notification]


@dataclass
class PushResult:
    sent: int = 0
    failed: int = 0


def get_notification_state(
    db: Session,
    viewer: Principal,
    config: AccessConfig,
) -> NotificationState:
    """Notifications the viewer has not dismissed, newest first."""
    acked_ids = select(NotificationAck.notification_id).where(
        NotificationAck.viewer_id == viewer.id
    )
    active = (
        db.query(Notification)
        .filter(Notification.id.not_in(acked_ids))
        .order_by(Notification.created_at.desc())
        .all()
    )
    return NotificationState(
        is_admin=access_service.is_admin(viewer, config),
        notifications=active,
    )


def create_notification(
    db: Session,
    viewer: Principal,
    title: str,
    message: str,
    config: AccessConfig,
) -> Notification:
    """
    Broadcast a notification. The creator is acknowledged immediately so it
    does not pop up for them.

    Raises:
        ForbiddenError: viewer is not an admin
        ValidationFailedError: blank title or message
    """
    if not access_service.is_admin(viewer, config):
        raise ForbiddenError("Not allowed to post notifications")

    clean_title = (title or "").strip()
    clean_message = (message or "").strip()
    if not clean_title:
        raise ValidationFailedError("Notification title is required")
    if not clean_message:
        raise ValidationFailedError("Notification message is required")

    now = utcnow()
    notification = Notification(
        title=clean_title,
        message=clean_message,
        created_by_email=normalize_email(viewer.email),
        created_at=now,
    )
    db.add(notification)
    db.flush()
    db.add(
        NotificationAck(
            notification_id=notification.id,
            viewer_id=viewer.id,
            acknowledged_at=now,
        )
    )
    db.commit()
    db.refresh(notification)
    logger.info("Created notification %s", notification.id)
    return notification


def acknowledge_notification(db: Session, notification_id: UUID, viewer_id: str) -> None:
    """
    Dismiss a notification for one viewer (idempotent).

    Raises:
        NotificationNotFoundError: unknown notification
    """
    notification = db.query(Notification).filter(Notification.id == notification_id).first()
    if not notification:
        raise NotificationNotFoundError()

    existing = (
        db.query(NotificationAck)
        .filter(
            NotificationAck.viewer_id == viewer_id,
            NotificationAck.notification_id == notification_id,
        )
        .first()
    )
    if existing:
        return

    db.add(NotificationAck(notification_id=notification_id, viewer_id=viewer_id))
    db.commit()


def register_push_subscription(
    db: Session,
    viewer_id: str,
    endpoint: str,
    p256dh: str,
    auth: str,
    expiration_time: int | None = None,
    user_agent: str | None = None,
) -> PushSubscription:
    """Create or refresh the subscription for a delivery endpoint."""
    now = utcnow()
    subscription = (
        db.query(PushSubscription).filter(PushSubscription.endpoint == endpoint).first()
    )
    if subscription:
        subscription.viewer_id = viewer_id
        subscription.p256dh = p256dh
        subscription.auth = auth
        subscription.expiration_time = expiration_time
        subscription.user_agent = user_agent
        subscription.updated_at = now
    else:
        subscription = PushSubscription(
            viewer_id=viewer_id,
            endpoint=endpoint,
            p256dh=p256dh,
            auth=auth,
            expiration_time=expiration_time,
            user_agent=user_agent,
            created_at=now,
            updated_at=now,
        )
        db.add(subscription)
    db.commit()
    db.refresh(subscription)
    return subscription


def remove_push_subscription(db: Session, endpoint: str) -> bool:
    """Remove a subscription by endpoint. Missing endpoints are not an error."""
    deleted = (
        db.query(PushSubscription)
        .filter(PushSubscription.endpoint == endpoint)
        .delete(synchronize_session="fetch")
    )
    db.commit()
    return deleted > 0


def build_push_payload(notification: Notification) -> str:
    return json.dumps(
        {
            "title": notification.title,
            "message": notification.message,
            "url": "/",
            "notificationId": str(notification.id),
        }
    )


def _subscription_info(subscription: PushSubscription) -> dict:
    return {
        "endpoint": subscription.endpoint,
        "keys": {"p256dh": subscription.p256dh, "auth": subscription.auth},
        "expirationTime": subscription.expiration_time,
    }


def send_push_notification(
    db: Session,
    notification_id: UUID,
    sender: PushSender | None,
) -> PushResult:
    """
    Deliver a notification to every registered subscription.

    With no sender configured every subscription counts as failed. Endpoints
    the push service reports as gone (404/410) are removed.
    """
    notification = db.query(Notification).filter(Notification.id == notification_id).first()
    if not notification:
        return PushResult()

    subscriptions = db.query(PushSubscription).all()
    if sender is None:
        logger.warning("Push notifications are not configured")
        return PushResult(failed=len(subscriptions))

    payload = build_push_payload(notification)
    result = PushResult()
    gone: list[str] = []
    for subscription in subscriptions:
        try:
            sender.send(_subscription_info(subscription), payload)
        except PushDeliveryError as exc:
            result.failed += 1
            if exc.status_code in GONE_STATUS_CODES:
                gone.append(subscription.endpoint)
            else:
                logger.warning(
                    "Push delivery failed for subscription %s (status %s)",
                    subscription.id,
                    exc.status_code,
                )
            continue
        result.sent += 1

    for endpoint in gone:
        remove_push_subscription(db, endpoint)

    logger.info(
        "Push notification %s: sent=%s failed=%s removed=%s",
        notification_id,
        result.sent,
        result.failed,
        len(gone),
    )
    return result


def deliver_push_notification(
    notification_id: UUID,
    sender: PushSender | None,
    session_factory: Callable[[], Session],
) -> PushResult:
    """Background task entry point: runs delivery on its own session."""
    db = session_factory()
    try:
        return send_push_notification(db, notification_id, sender)
    finally:
        db.close()
