"""Append list lifecycle - create, look up, delete (with member cascade)."""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID

from sqlalchemy.orm import Session

from appendlist_api.core.errors import ListNotFoundError, ValidationFailedError
from appendlist_api.core.list_types import normalize_list_type, partition_for
from appendlist_api.core.structured_logging import build_log_context
from appendlist_api.db.enums import LEGACY_PLAIN_LIST_TYPES, ListType
from appendlist_api.db.models import AppendList, AppendListPerson, utcnow
from appendlist_api.schemas.auth import Principal
from appendlist_api.services import access_service, membership_service
from appendlist_api.services.access_service import AccessConfig, ListPermissions


logger = logging.getLogger(__name__)

NOT_FOUND_OR_NOT_OWNED = "Append list not found or not owned by you"


@dataclass
class PersonView:
    id: UUID
    name: str
    register_no: str | None
    github_username: str | None
    inputs: list[str]
    joined_at: datetime
    can_edit: bool


@dataclass
class ListDetail:
    append_list: AppendList
    list_type: ListType
    people: list[PersonView] = field(default_factory=list)
    permissions: ListPermissions = field(default_factory=ListPermissions)
    is_admin: bool = False


def create_list(
    db: Session,
    owner_id: str,
    title: str,
    description: str,
    list_type: str | ListType | None = None,
) -> AppendList:
    """
    Create a list owned by ``owner_id``.

    Raises:
        ValidationFailedError: blank title/description or unknown list type
    """
    clean_title = (title or "").strip()
    clean_description = (description or "").strip()
    if not clean_title:
        raise ValidationFailedError("Title is required")
    if not clean_description:
        raise ValidationFailedError("Description is required")

    resolved_type = normalize_list_type(list_type)
    now = utcnow()
    append_list = AppendList(
        title=clean_title,
        description=clean_description,
        list_type=resolved_type.value,
        owner_id=owner_id,
        created_at=now,
        updated_at=now,
    )
    db.add(append_list)
    db.commit()
    db.refresh(append_list)

    logger.info(
        "Created append list (%s)",
        resolved_type.value,
        extra=build_log_context(user_id=owner_id, list_id=append_list.id),
    )
    return append_list


def get_list(db: Session, list_id: UUID) -> AppendList | None:
    return db.query(AppendList).filter(AppendList.id == list_id).first()


def require_list(db: Session, list_id: UUID) -> AppendList:
    """Get a list or raise ListNotFoundError."""
    append_list = get_list(db, list_id)
    if not append_list:
        raise ListNotFoundError()
    return append_list


def list_owned_by(db: Session, owner_id: str) -> list[AppendList]:
    """Lists created by ``owner_id``, newest first."""
    return (
        db.query(AppendList)
        .filter(AppendList.owner_id == owner_id)
        .order_by(AppendList.created_at.desc())
        .all()
    )


def delete_list(db: Session, list_id: UUID, requester_id: str) -> None:
    """
    Delete a list and every member record on it.

    A missing list and a list owned by someone else fail identically so the
    response never reveals whether the id exists. Members are swept from all
    partitions and the list removed in one transaction.

    Raises:
        ListNotFoundError: list missing or not owned by requester
    """
    append_list = get_list(db, list_id)
    if not append_list or append_list.owner_id != requester_id:
        raise ListNotFoundError(NOT_FOUND_OR_NOT_OWNED)

    try:
        removed = membership_service.delete_all_for_list(db, append_list.id)
        db.delete(append_list)
        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info(
        "Deleted append list with %s member(s)",
        removed,
        extra=build_log_context(user_id=requester_id, list_id=list_id),
    )


def get_list_detail(
    db: Session,
    list_id: UUID,
    viewer: Principal | None,
    config: AccessConfig,
) -> ListDetail | None:
    """List, its members (earliest first) and the viewer's permissions."""
    append_list = get_list(db, list_id)
    if not append_list:
        return None

    list_type = normalize_list_type(append_list.list_type)
    admin = access_service.is_admin(viewer, config)
    people = membership_service.list_all(db, append_list.id, partition_for(list_type))

    return ListDetail(
        append_list=append_list,
        list_type=list_type,
        people=[_to_person_view(person, viewer, admin) for person in people],
        permissions=access_service.resolve_permissions(db, append_list, viewer, config),
        is_admin=admin,
    )


def _to_person_view(
    person: AppendListPerson,
    viewer: Principal | None,
    admin: bool,
) -> PersonView:
    return PersonView(
        id=person.id,
        name=person.display_name,
        register_no=person.register_number,
        github_username=person.github_username,
        inputs=list(person.inputs or []),
        joined_at=person.joined_at,
        can_edit=admin or access_service.is_own_record(person, viewer),
    )


def normalize_list_types(db: Session) -> tuple[int, int]:
    """
    Rewrite legacy stored list types to their canonical value.

    Reads never depend on this having run; it only tidies stored data.

    Returns:
        (updated, total)
    """
    lists = db.query(AppendList).all()
    updated = 0
    now = utcnow()
    for append_list in lists:
        stored = append_list.list_type
        if stored is None or stored.strip().lower() in LEGACY_PLAIN_LIST_TYPES:
            append_list.list_type = ListType.PLAIN.value
            append_list.updated_at = now
            updated += 1
    db.commit()
    return updated, len(lists)
