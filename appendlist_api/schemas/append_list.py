"""Pydantic schemas for append lists, members, and exports."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from appendlist_api.db.enums import ListType


class AppendListCreate(BaseModel):
    """Request to create a list. Blank values are rejected by the service."""

    title: str = Field(..., max_length=255)
    description: str = Field(..., max_length=4000)
    list_type: str | None = None


class AppendListRead(BaseModel):
    id: UUID
    title: str
    description: str
    list_type: ListType
    owner_id: str
    created_at: datetime
    updated_at: datetime


class ListPermissionsRead(BaseModel):
    is_owner: bool
    has_joined: bool
    can_download: bool


class ListSummary(BaseModel):
    id: UUID
    title: str
    description: str
    list_type: ListType


class PersonRead(BaseModel):
    id: UUID
    name: str
    register_no: str | None = None
    github_username: str | None = None
    inputs: list[str] = []
    joined_at: datetime
    can_edit: bool = False


class ListDetailRead(BaseModel):
    list: ListSummary
    people: list[PersonRead]
    permissions: ListPermissionsRead
    is_admin: bool = False


class JoinRequest(BaseModel):
    """Extra payload required by github / others lists."""

    github_username: str | None = Field(None, max_length=100)
    inputs: list[str] | None = None


class PersonEdit(BaseModel):
    updated_name: str | None = Field(None, max_length=255)
    github_username: str | None = Field(None, max_length=100)
    inputs: list[str] | None = None


class MemberRead(BaseModel):
    """A member record as returned by join / edit."""

    id: UUID
    name: str
    email_id: str | None = None
    register_no: str | None = None
    github_username: str | None = None
    inputs: list[str] | None = None
    joined_at: datetime


class JoinResponse(BaseModel):
    person: MemberRead
    created: bool


class LeaveResponse(BaseModel):
    success: bool = True
    removed: bool


class ExportRowRead(BaseModel):
    name: str
    email_id: str | None = None
    register_no: str | None = None
    joining_time: str
    github_username: str | None = None
    inputs: list[str] | None = None


class ExportRead(BaseModel):
    list_title: str
    list_type: ListType
    rows: list[ExportRowRead]
