"""Access resolution for append lists.

Computes, for a (list, viewer) pair, whether the viewer owns the list, has
joined it, and may download its roster. Operator allowlists arrive through an
explicit ``AccessConfig`` so callers (and tests) decide which lists apply.
"""

from dataclasses import dataclass

from sqlalchemy.orm import Session

from appendlist_api.core.errors import ForbiddenError
from appendlist_api.core.list_types import partition_for
from appendlist_api.db.models import AppendList, AppendListPerson
from appendlist_api.schemas.auth import Principal
from appendlist_api.services import membership_service
from appendlist_api.utils.normalization import (
    join_identity_candidates,
    normalize_email,
    normalize_name,
)


@dataclass(frozen=True)
class AccessConfig:
    """Operator-configured allowlists (lowercased emails)."""

    admin_emails: frozenset[str] = frozenset()
    owner_export_whitelist: frozenset[str] = frozenset()

    @classmethod
    def from_settings(cls, settings) -> "AccessConfig":
        return cls(
            admin_emails=settings.admin_emails,
            owner_export_whitelist=settings.owner_export_whitelist,
        )


@dataclass(frozen=True)
class ListPermissions:
    is_owner: bool = False
    has_joined: bool = False
    can_download: bool = False


def is_admin(viewer: Principal | None, config: AccessConfig) -> bool:
    """Check if the viewer's email is on the admin allowlist."""
    if viewer is None:
        return False
    email = normalize_email(viewer.email)
    return bool(email) and email in config.admin_emails


def is_owner(append_list: AppendList, viewer: Principal | None) -> bool:
    return viewer is not None and viewer.id == append_list.owner_id


def find_viewer_record(
    db: Session,
    append_list: AppendList,
    viewer: Principal | None,
) -> AppendListPerson | None:
    """Record the viewer joined under (email first, then trimmed name)."""
    if viewer is None:
        return None
    return membership_service.find_joined_record(
        db,
        append_list.id,
        partition_for(append_list.list_type),
        email_key=normalize_email(viewer.email),
        name=normalize_name(viewer.name),
    )


def has_joined_under_any_identity(
    db: Session,
    append_list: AppendList,
    viewer: Principal,
) -> bool:
    """
    Joined-check used by the owner-whitelist override.

    Tries the email key, then the viewer's literal name and literal email as
    display-name matches (covers people who joined before emails were
    captured and whose display name fell back to their email).
    """
    partition = partition_for(append_list.list_type)
    email_key = normalize_email(viewer.email)
    if email_key and membership_service.find_by_email(
        db, append_list.id, partition, email_key
    ):
        return True
    for candidate in join_identity_candidates(viewer.name, viewer.email):
        if membership_service.find_by_name(db, append_list.id, partition, candidate):
            return True
    return False


def has_owner_override(
    db: Session,
    append_list: AppendList,
    viewer: Principal | None,
    config: AccessConfig,
) -> bool:
    """Whitelisted non-owner who has also joined the list."""
    if viewer is None:
        return False
    email = normalize_email(viewer.email)
    if not email or email not in config.owner_export_whitelist:
        return False
    return has_joined_under_any_identity(db, append_list, viewer)


def resolve_permissions(
    db: Session,
    append_list: AppendList,
    viewer: Principal | None,
    config: AccessConfig,
    *,
    allow_owner_override: bool = True,
) -> ListPermissions:
    """Compute owner / joined / download flags for a viewer."""
    if viewer is None:
        return ListPermissions()

    owner = is_owner(append_list, viewer)
    joined = find_viewer_record(db, append_list, viewer) is not None

    can_download = owner or joined
    if not can_download and allow_owner_override:
        can_download = has_owner_override(db, append_list, viewer, config)

    return ListPermissions(is_owner=owner, has_joined=joined, can_download=can_download)


def ensure_can_download(
    db: Session,
    append_list: AppendList,
    viewer: Principal,
    config: AccessConfig,
    *,
    allow_owner_override: bool = False,
) -> ListPermissions:
    """
    Raises:
        ForbiddenError: viewer is neither owner, member, nor whitelisted member
    """
    permissions = resolve_permissions(
        db,
        append_list,
        viewer,
        config,
        allow_owner_override=allow_owner_override,
    )
    if not permissions.can_download:
        raise ForbiddenError("Not allowed to export this list")
    return permissions


def is_own_record(person: AppendListPerson, viewer: Principal | None) -> bool:
    """
    Check whether a member record belongs to the viewer.

    Matches on email key when the record has one, otherwise on the display
    name the viewer would have joined under.
    """
    if viewer is None:
        return False
    email_key = normalize_email(viewer.email)
    if person.email_key:
        return email_key is not None and person.email_key == email_key
    return person.display_name in join_identity_candidates(viewer.name, viewer.email)


def can_edit_person(
    person: AppendListPerson,
    viewer: Principal | None,
    config: AccessConfig,
) -> bool:
    """Admins may edit anyone; everyone else only their own record."""
    return is_admin(viewer, config) or is_own_record(person, viewer)
