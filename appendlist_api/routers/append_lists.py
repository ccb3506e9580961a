"""Append lists router - create, view, join, leave, edit, export."""

from uuid import UUID

from fastapi import APIRouter, Depends, Response, status
from fastapi.responses import PlainTextResponse
from sqlalchemy.orm import Session

from appendlist_api.core.deps import (
    get_access_config,
    get_current_principal,
    get_db,
    get_optional_principal,
    require_csrf_header,
)
from appendlist_api.core.errors import ListNotFoundError
from appendlist_api.core.list_types import normalize_list_type
from appendlist_api.db.models import AppendList, AppendListPerson
from appendlist_api.schemas.append_list import (
    AppendListCreate,
    AppendListRead,
    ExportRead,
    JoinRequest,
    JoinResponse,
    LeaveResponse,
    ListDetailRead,
    ListPermissionsRead,
    ListSummary,
    MemberRead,
    PersonEdit,
    PersonRead,
)
from appendlist_api.schemas.auth import Principal
from appendlist_api.services import append_list_service, export_service, join_service
from appendlist_api.services.access_service import AccessConfig

router = APIRouter()


def _to_list_read(append_list: AppendList) -> AppendListRead:
    return AppendListRead(
        id=append_list.id,
        title=append_list.title,
        description=append_list.description,
        list_type=normalize_list_type(append_list.list_type),
        owner_id=append_list.owner_id,
        created_at=append_list.created_at,
        updated_at=append_list.updated_at,
    )


def _to_member_read(person: AppendListPerson) -> MemberRead:
    return MemberRead(
        id=person.id,
        name=person.display_name,
        email_id=person.email_key,
        register_no=person.register_number,
        github_username=person.github_username,
        inputs=person.inputs,
        joined_at=person.joined_at,
    )


@router.get("", response_model=list[AppendListRead])
def list_owned(
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    """Lists owned by the caller, newest first."""
    lists = append_list_service.list_owned_by(db, principal.id)
    return [_to_list_read(item) for item in lists]


@router.post(
    "",
    response_model=AppendListRead,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_csrf_header)],
)
def create_list(
    data: AppendListCreate,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    append_list = append_list_service.create_list(
        db,
        owner_id=principal.id,
        title=data.title,
        description=data.description,
        list_type=data.list_type,
    )
    return _to_list_read(append_list)


@router.get("/{list_id}", response_model=ListDetailRead)
def get_list_detail(
    list_id: UUID,
    viewer: Principal | None = Depends(get_optional_principal),
    config: AccessConfig = Depends(get_access_config),
    db: Session = Depends(get_db),
):
    """List detail; anonymous visitors see members but no permissions."""
    detail = append_list_service.get_list_detail(db, list_id, viewer, config)
    if detail is None:
        raise ListNotFoundError()

    return ListDetailRead(
        list=ListSummary(
            id=detail.append_list.id,
            title=detail.append_list.title,
            description=detail.append_list.description,
            list_type=detail.list_type,
        ),
        people=[
            PersonRead(
                id=person.id,
                name=person.name,
                register_no=person.register_no,
                github_username=person.github_username,
                inputs=person.inputs,
                joined_at=person.joined_at,
                can_edit=person.can_edit,
            )
            for person in detail.people
        ],
        permissions=ListPermissionsRead(
            is_owner=detail.permissions.is_owner,
            has_joined=detail.permissions.has_joined,
            can_download=detail.permissions.can_download,
        ),
        is_admin=detail.is_admin,
    )


@router.delete(
    "/{list_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_csrf_header)],
)
def delete_list(
    list_id: UUID,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    """Delete a list and all its members (owner only)."""
    append_list_service.delete_list(db, list_id, principal.id)
    return None


# =============================================================================
# Membership
# =============================================================================

@router.post(
    "/{list_id}/join",
    response_model=JoinResponse,
    dependencies=[Depends(require_csrf_header)],
)
def join_list(
    list_id: UUID,
    response: Response,
    data: JoinRequest | None = None,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    """Join a list. 201 when a record is created, 200 when already joined."""
    data = data or JoinRequest()
    result = join_service.join(
        db,
        list_id,
        principal,
        github_username=data.github_username,
        inputs=data.inputs,
    )
    response.status_code = status.HTTP_201_CREATED if result.created else status.HTTP_200_OK
    return JoinResponse(person=_to_member_read(result.person), created=result.created)


@router.post(
    "/{list_id}/leave",
    response_model=LeaveResponse,
    dependencies=[Depends(require_csrf_header)],
)
def leave_list(
    list_id: UUID,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    removed = join_service.leave(db, list_id, principal)
    return LeaveResponse(removed=removed)


@router.patch(
    "/{list_id}/people/{person_id}",
    response_model=MemberRead,
    dependencies=[Depends(require_csrf_header)],
)
def edit_person(
    list_id: UUID,
    person_id: UUID,
    data: PersonEdit,
    principal: Principal = Depends(get_current_principal),
    config: AccessConfig = Depends(get_access_config),
    db: Session = Depends(get_db),
):
    """
    Edit a member record.

    Requires: the record's own principal, or an admin
    """
    person = join_service.edit(
        db,
        list_id,
        person_id,
        principal,
        config,
        updated_name=data.updated_name,
        github_username=data.github_username,
        inputs=data.inputs,
    )
    return _to_member_read(person)


# =============================================================================
# Export
# =============================================================================

@router.get("/{list_id}/export", response_model=ExportRead)
def export_list(
    list_id: UUID,
    principal: Principal = Depends(get_current_principal),
    config: AccessConfig = Depends(get_access_config),
    db: Session = Depends(get_db),
):
    result = export_service.export_rows(
        db, list_id, principal, config, allow_owner_override=True
    )
    return ExportRead(
        list_title=result.list_title,
        list_type=result.list_type,
        rows=[
            {
                "name": row.name,
                "email_id": row.email_id,
                "register_no": row.register_no,
                "joining_time": row.joining_time,
                "github_username": row.github_username,
                "inputs": row.inputs,
            }
            for row in result.rows
        ],
    )


@router.get("/{list_id}/export.csv")
def export_list_csv(
    list_id: UUID,
    principal: Principal = Depends(get_current_principal),
    config: AccessConfig = Depends(get_access_config),
    db: Session = Depends(get_db),
):
    result = export_service.export_rows(
        db, list_id, principal, config, allow_owner_override=True
    )
    filename = export_service.export_filename(result.list_title)
    return Response(
        content=export_service.render_csv(result),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/{list_id}/export.txt", response_class=PlainTextResponse)
def export_list_text(
    list_id: UUID,
    principal: Principal = Depends(get_current_principal),
    config: AccessConfig = Depends(get_access_config),
    db: Session = Depends(get_db),
):
    """Numbered roster for the "copy list" button."""
    result = export_service.export_rows(
        db, list_id, principal, config, allow_owner_override=True
    )
    return export_service.render_copy_text(result)
