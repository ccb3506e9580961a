"""Membership service - person records on append lists.

Every lookup is an exact match on an indexed (list, key) pair, scoped to the
partition (list type) the list stores its people in.
"""

import logging
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from appendlist_api.db.enums import ListType
from appendlist_api.db.models import AppendListPerson


logger = logging.getLogger(__name__)


def find_by_email(
    db: Session,
    list_id: UUID,
    partition: ListType,
    email_key: str,
) -> AppendListPerson | None:
    """Find a member by lowercased email key."""
    return (
        db.query(AppendListPerson)
        .filter(
            AppendListPerson.list_id == list_id,
            AppendListPerson.partition == partition.value,
            AppendListPerson.email_key == email_key,
        )
        .first()
    )


def find_by_name(
    db: Session,
    list_id: UUID,
    partition: ListType,
    display_name: str,
) -> AppendListPerson | None:
    """Find a member by exact display name."""
    return (
        db.query(AppendListPerson)
        .filter(
            AppendListPerson.list_id == list_id,
            AppendListPerson.partition == partition.value,
            AppendListPerson.display_name == display_name,
        )
        .first()
    )


def find_joined_record(
    db: Session,
    list_id: UUID,
    partition: ListType,
    email_key: str | None = None,
    name: str | None = None,
) -> AppendListPerson | None:
    """
    Find the record a principal joined under.

    Email is the stronger identity signal, so it is tried first; the name
    lookup only runs when there is no email match.
    """
    if email_key:
        person = find_by_email(db, list_id, partition, email_key)
        if person:
            return person
    if name:
        return find_by_name(db, list_id, partition, name)
    return None


def list_all(db: Session, list_id: UUID, partition: ListType) -> list[AppendListPerson]:
    """List members of a list, earliest join first."""
    return (
        db.query(AppendListPerson)
        .filter(
            AppendListPerson.list_id == list_id,
            AppendListPerson.partition == partition.value,
        )
        .order_by(AppendListPerson.joined_at.asc())
        .all()
    )


def get_person(db: Session, person_id: UUID) -> AppendListPerson | None:
    return db.query(AppendListPerson).filter(AppendListPerson.id == person_id).first()


def insert(db: Session, person: AppendListPerson) -> tuple[AppendListPerson, bool]:
    """
    Insert a member record unless the same identity got there first.

    The insert runs in a SAVEPOINT. A uniqueness conflict on (list, email_key)
    or (list, display_name) rolls back to it and the winning record is read
    back, so concurrent double-joins collapse into one record.

    Returns:
        (person, created)
    """
    savepoint = db.begin_nested()
    try:
        db.add(person)
        db.flush()
    except IntegrityError:
        savepoint.rollback()
        partition = ListType(person.partition)
        existing = find_joined_record(
            db,
            person.list_id,
            partition,
            email_key=person.email_key,
            name=person.display_name,
        )
        if existing is None:
            raise
        logger.info(
            "Join conflict on list %s resolved to existing person %s",
            person.list_id,
            existing.id,
        )
        return existing, False
    savepoint.commit()
    return person, True


def patch(db: Session, person: AppendListPerson, **fields) -> AppendListPerson:
    """Apply field updates to a member record and flush."""
    for key, value in fields.items():
        setattr(person, key, value)
    db.flush()
    return person


def delete_by_id(db: Session, person_id: UUID) -> bool:
    deleted = (
        db.query(AppendListPerson)
        .filter(AppendListPerson.id == person_id)
        .delete(synchronize_session="fetch")
    )
    return deleted > 0


def delete_all_for_list(db: Session, list_id: UUID) -> int:
    """Delete every member of a list across all partitions."""
    deleted = 0
    for partition in ListType:
        deleted += (
            db.query(AppendListPerson)
            .filter(
                AppendListPerson.list_id == list_id,
                AppendListPerson.partition == partition.value,
            )
            .delete(synchronize_session="fetch")
        )
    return deleted
