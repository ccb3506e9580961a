"""Pydantic schemas for broadcast notifications and push subscriptions."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field


class NotificationCreate(BaseModel):
    title: str = Field(..., max_length=255)
    message: str = Field(..., max_length=4000)


class NotificationRead(BaseModel):
    id: UUID
    title: str
    message: str
    created_at: datetime
    created_by_email: str | None = None

    model_config = {"from_attributes": True}


class NotificationStateRead(BaseModel):
    is_admin: bool
    notifications: list[NotificationRead]


class PushKeys(BaseModel):
    p256dh: str
    auth: str


class PushSubscriptionCreate(BaseModel):
    """Browser PushSubscription.toJSON() plus the user agent."""

    endpoint: str = Field(..., min_length=1)
    keys: PushKeys
    expiration_time: int | None = Field(None, alias="expirationTime")
    user_agent: str | None = Field(None, alias="userAgent")

    model_config = {"populate_by_name": True}


class PushSubscriptionRead(BaseModel):
    id: UUID
    endpoint: str

    model_config = {"from_attributes": True}
