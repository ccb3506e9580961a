"""Tests for the membership store."""

from datetime import datetime, timedelta, timezone

from appendlist_api.db.enums import ListType
from appendlist_api.db.models import AppendListPerson
from appendlist_api.services import membership_service


def _person(append_list, name, email=None, joined_at=None, partition=ListType.PLAIN):
    return AppendListPerson(
        list_id=append_list.id,
        partition=partition.value,
        display_name=name,
        email_key=email,
        joined_at=joined_at or datetime.now(timezone.utc),
    )


def test_insert_creates_record(db, plain_list):
    person, created = membership_service.insert(db, _person(plain_list, "Jane", "jane@x.com"))
    db.commit()

    assert created is True
    assert membership_service.get_person(db, person.id) is not None


def test_insert_conflict_on_email_returns_existing(db, plain_list):
    first, _ = membership_service.insert(db, _person(plain_list, "Jane", "jane@x.com"))
    db.commit()

    second, created = membership_service.insert(
        db, _person(plain_list, "Jane Again", "jane@x.com")
    )
    db.commit()

    assert created is False
    assert second.id == first.id
    assert len(membership_service.list_all(db, plain_list.id, ListType.PLAIN)) == 1


def test_insert_conflict_on_name_returns_existing(db, plain_list):
    first, _ = membership_service.insert(db, _person(plain_list, "Jane"))
    db.commit()

    second, created = membership_service.insert(db, _person(plain_list, "Jane"))

    assert created is False
    assert second.id == first.id


def test_records_without_email_do_not_collide_on_email(db, plain_list):
    membership_service.insert(db, _person(plain_list, "Jane"))
    _, created = membership_service.insert(db, _person(plain_list, "John"))
    db.commit()

    assert created is True
    assert len(membership_service.list_all(db, plain_list.id, ListType.PLAIN)) == 2


def test_find_joined_record_prefers_email(db, plain_list):
    by_email, _ = membership_service.insert(db, _person(plain_list, "Someone Else", "jane@x.com"))
    membership_service.insert(db, _person(plain_list, "Jane"))
    db.commit()

    found = membership_service.find_joined_record(
        db, plain_list.id, ListType.PLAIN, email_key="jane@x.com", name="Jane"
    )
    assert found.id == by_email.id


def test_find_joined_record_falls_back_to_name(db, plain_list):
    by_name, _ = membership_service.insert(db, _person(plain_list, "Jane"))
    db.commit()

    found = membership_service.find_joined_record(
        db, plain_list.id, ListType.PLAIN, email_key="nobody@x.com", name="Jane"
    )
    assert found.id == by_name.id
    assert membership_service.find_joined_record(db, plain_list.id, ListType.PLAIN) is None


def test_lookups_scoped_to_partition(db, github_list):
    membership_service.insert(
        db, _person(github_list, "Jane", "jane@x.com", partition=ListType.GITHUB)
    )
    db.commit()

    assert membership_service.find_by_email(db, github_list.id, ListType.GITHUB, "jane@x.com")
    assert membership_service.find_by_email(db, github_list.id, ListType.PLAIN, "jane@x.com") is None


def test_list_all_orders_by_join_time(db, plain_list):
    base = datetime(2024, 1, 1, tzinfo=timezone.utc)
    membership_service.insert(db, _person(plain_list, "Late", joined_at=base + timedelta(minutes=5)))
    membership_service.insert(db, _person(plain_list, "Early", joined_at=base))
    membership_service.insert(db, _person(plain_list, "Middle", joined_at=base + timedelta(minutes=1)))
    db.commit()

    names = [p.display_name for p in membership_service.list_all(db, plain_list.id, ListType.PLAIN)]
    assert names == ["Early", "Middle", "Late"]


def test_patch_and_delete(db, plain_list):
    person, _ = membership_service.insert(db, _person(plain_list, "Jane"))
    membership_service.patch(db, person, display_name="Janet")
    db.commit()

    assert membership_service.find_by_name(db, plain_list.id, ListType.PLAIN, "Janet")
    assert membership_service.delete_by_id(db, person.id) is True
    assert membership_service.delete_by_id(db, person.id) is False


def test_delete_all_for_list(db, plain_list, github_list):
    membership_service.insert(db, _person(plain_list, "Jane"))
    membership_service.insert(db, _person(plain_list, "John"))
    membership_service.insert(db, _person(github_list, "Jane", partition=ListType.GITHUB))
    db.commit()

    assert membership_service.delete_all_for_list(db, plain_list.id) == 2
    db.commit()
    assert membership_service.list_all(db, plain_list.id, ListType.PLAIN) == []
    assert len(membership_service.list_all(db, github_list.id, ListType.GITHUB)) == 1
