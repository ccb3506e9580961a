"""Join / leave / edit - the membership state transitions.

Join and leave are idempotent: joining twice returns the first record
unchanged, and leaving a list you are not on succeeds without doing anything.
"""

import logging
from dataclasses import dataclass
from typing import Sequence
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from appendlist_api.core.errors import (
    ForbiddenError,
    PersonNotFoundError,
    UnauthenticatedError,
    ValidationFailedError,
)
from appendlist_api.core.list_types import (
    normalize_list_type,
    partition_for,
    validate_join_payload,
)
from appendlist_api.core.structured_logging import build_log_context
from appendlist_api.db.models import (
    DISPLAY_NAME_MAX_LENGTH,
    EMAIL_MAX_LENGTH,
    AppendListPerson,
    utcnow,
)
from appendlist_api.schemas.auth import Principal
from appendlist_api.services import access_service, membership_service
from appendlist_api.services.access_service import AccessConfig
from appendlist_api.services.append_list_service import require_list
from appendlist_api.utils.normalization import (
    extract_register_number,
    normalize_email,
    normalize_name,
    resolve_display_name,
)


logger = logging.getLogger(__name__)


@dataclass
class JoinResult:
    person: AppendListPerson
    created: bool


def _require_principal(principal: Principal | None) -> Principal:
    if principal is None:
        raise UnauthenticatedError()
    return principal


def _check_identity_lengths(display_name: str, email_key: str | None = None) -> None:
    if len(display_name) > DISPLAY_NAME_MAX_LENGTH:
        raise ValidationFailedError(
            f"Name must be at most {DISPLAY_NAME_MAX_LENGTH} characters"
        )
    if email_key and len(email_key) > EMAIL_MAX_LENGTH:
        raise ValidationFailedError(f"Email must be at most {EMAIL_MAX_LENGTH} characters")


def join(
    db: Session,
    list_id: UUID,
    principal: Principal | None,
    github_username: str | None = None,
    inputs: Sequence[str] | None = None,
) -> JoinResult:
    """
    Add the principal to a list, or return the record they already have.

    A repeat join never overwrites the stored payload. The type-specific
    payload is only validated when a new record is about to be created.

    Raises:
        UnauthenticatedError: no principal
        ListNotFoundError: list missing
        ValidationFailedError: github username / inputs missing for the list type
            or the session name/email is longer than the stored column
    """
    principal = _require_principal(principal)
    append_list = require_list(db, list_id)
    list_type = normalize_list_type(append_list.list_type)
    partition = partition_for(list_type)

    display_name = resolve_display_name(principal.name, principal.email)
    email_key = normalize_email(principal.email)

    existing = membership_service.find_joined_record(
        db, append_list.id, partition, email_key=email_key, name=display_name
    )
    if existing:
        return JoinResult(person=existing, created=False)

    _check_identity_lengths(display_name, email_key)
    payload = validate_join_payload(list_type, github_username, inputs)

    person = AppendListPerson(
        list_id=append_list.id,
        partition=partition.value,
        display_name=display_name,
        email_key=email_key,
        # Raw name on purpose: the register code is the last token as typed
        register_number=extract_register_number(principal.name),
        github_username=payload.github_username,
        inputs=payload.inputs,
        joined_at=utcnow(),
    )
    person, created = membership_service.insert(db, person)
    db.commit()

    if created:
        logger.info(
            "Joined append list",
            extra=build_log_context(user_id=principal.id, list_id=list_id),
        )
    return JoinResult(person=person, created=created)


def leave(db: Session, list_id: UUID, principal: Principal | None) -> bool:
    """
    Remove the principal's record from a list.

    Returns True if a record was removed, False when there was nothing to
    remove (not an error).

    Raises:
        UnauthenticatedError: no principal
        ListNotFoundError: list missing
    """
    principal = _require_principal(principal)
    append_list = require_list(db, list_id)

    person = membership_service.find_joined_record(
        db,
        append_list.id,
        partition_for(append_list.list_type),
        email_key=normalize_email(principal.email),
        name=normalize_name(principal.name),
    )
    if not person:
        return False

    membership_service.delete_by_id(db, person.id)
    db.commit()
    logger.info(
        "Left append list",
        extra=build_log_context(user_id=principal.id, list_id=list_id),
    )
    return True


def edit(
    db: Session,
    list_id: UUID,
    person_id: UUID,
    requester: Principal | None,
    config: AccessConfig,
    updated_name: str | None = None,
    github_username: str | None = None,
    inputs: Sequence[str] | None = None,
) -> AppendListPerson:
    """
    Update a member record.

    Admins may edit any record; everyone else only their own. A blank
    ``updated_name`` keeps the current name. The register number is always
    recomputed from the resulting name, and the list-type payload must pass
    the same checks as a join.

    Raises:
        UnauthenticatedError: no requester
        ListNotFoundError: list missing
        PersonNotFoundError: person missing or on another list
        ForbiddenError: not admin and not the record's owner
        ValidationFailedError: payload invalid, name too long or name taken by another member
    """
    requester = _require_principal(requester)
    append_list = require_list(db, list_id)

    person = membership_service.get_person(db, person_id)
    if not person or person.list_id != append_list.id:
        raise PersonNotFoundError()

    if not access_service.can_edit_person(person, requester, config):
        raise ForbiddenError("Not allowed to edit this person")

    list_type = normalize_list_type(append_list.list_type)
    payload = validate_join_payload(list_type, github_username, inputs)

    new_raw_name = updated_name if updated_name and updated_name.strip() else person.display_name
    _check_identity_lengths(new_raw_name.strip())
    fields = {
        "display_name": new_raw_name.strip(),
        "register_number": extract_register_number(new_raw_name),
    }
    if payload.github_username is not None:
        fields["github_username"] = payload.github_username
    if payload.inputs is not None:
        fields["inputs"] = payload.inputs

    try:
        membership_service.patch(db, person, **fields)
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ValidationFailedError("Another member on this list already uses that name")

    db.refresh(person)
    logger.info(
        "Edited append list person",
        extra=build_log_context(user_id=requester.id, list_id=list_id, person_id=person.id),
    )
    return person
