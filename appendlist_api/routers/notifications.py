"""Notifications router - admin broadcasts and web-push subscriptions."""

from typing import Callable
from uuid import UUID

from fastapi import APIRouter, BackgroundTasks, Depends, Query, status
from sqlalchemy.orm import Session

from appendlist_api.core.deps import (
    get_access_config,
    get_current_principal,
    get_db,
    get_push_sender,
    get_session_factory,
    require_csrf_header,
)
from appendlist_api.schemas.auth import Principal
from appendlist_api.schemas.notification import (
    NotificationCreate,
    NotificationRead,
    NotificationStateRead,
    PushSubscriptionCreate,
    PushSubscriptionRead,
)
from appendlist_api.services import notification_service
from appendlist_api.services.access_service import AccessConfig
from appendlist_api.services.notification_service import PushSender

router = APIRouter()


@router.get("", response_model=NotificationStateRead)
def get_notification_state(
    principal: Principal = Depends(get_current_principal),
    config: AccessConfig = Depends(get_access_config),
    db: Session = Depends(get_db),
):
    """Un-dismissed notifications for the caller, newest first."""
    state = notification_service.get_notification_state(db, principal, config)
    return NotificationStateRead(
        is_admin=state.is_admin,
        notifications=[NotificationRead.model_validate(n) for n in state.notifications],
    )


@router.post(
    "",
    response_model=NotificationRead,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_csrf_header)],
)
def create_notification(
    data: NotificationCreate,
    background_tasks: BackgroundTasks,
    principal: Principal = Depends(get_current_principal),
    config: AccessConfig = Depends(get_access_config),
    sender: PushSender | None = Depends(get_push_sender),
    session_factory: Callable[[], Session] = Depends(get_session_factory),
    db: Session = Depends(get_db),
):
    """Broadcast a notification (admins only) and queue push delivery."""
    notification = notification_service.create_notification(
        db, principal, data.title, data.message, config
    )
    background_tasks.add_task(
        notification_service.deliver_push_notification,
        notification.id,
        sender,
        session_factory,
    )
    return NotificationRead.model_validate(notification)


@router.post(
    "/{notification_id}/ack",
    dependencies=[Depends(require_csrf_header)],
)
def acknowledge_notification(
    notification_id: UUID,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    notification_service.acknowledge_notification(db, notification_id, principal.id)
    return {"success": True}


@router.post(
    "/push-subscriptions",
    response_model=PushSubscriptionRead,
    dependencies=[Depends(require_csrf_header)],
)
def register_push_subscription(
    data: PushSubscriptionCreate,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    subscription = notification_service.register_push_subscription(
        db,
        viewer_id=principal.id,
        endpoint=data.endpoint,
        p256dh=data.keys.p256dh,
        auth=data.keys.auth,
        expiration_time=data.expiration_time,
        user_agent=data.user_agent,
    )
    return PushSubscriptionRead.model_validate(subscription)


@router.delete(
    "/push-subscriptions",
    dependencies=[Depends(require_csrf_header)],
)
def remove_push_subscription(
    endpoint: str = Query(..., min_length=1),
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    notification_service.remove_push_subscription(db, endpoint)
    return {"success": True}
