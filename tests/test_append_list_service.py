"""Tests for append list lifecycle."""

import uuid
from datetime import datetime, timedelta, timezone

import pytest

from appendlist_api.core.errors import ListNotFoundError, ValidationFailedError
from appendlist_api.db.enums import ListType
from appendlist_api.db.models import AppendList, AppendListPerson
from appendlist_api.services import append_list_service, join_service


class TestCreateList:
    def test_trims_and_defaults_to_plain(self, db, owner):
        append_list = append_list_service.create_list(db, owner.id, "  Title ", " Desc ")

        assert append_list.title == "Title"
        assert append_list.description == "Desc"
        assert append_list.list_type == ListType.PLAIN.value
        assert append_list.owner_id == owner.id
        assert append_list.created_at == append_list.updated_at

    def test_legacy_type_stored_as_plain(self, db, owner):
        append_list = append_list_service.create_list(db, owner.id, "T", "D", "nightslip")
        assert append_list.list_type == "plain"

    @pytest.mark.parametrize(
        "title,description,message",
        [
            ("  ", "Desc", "Title is required"),
            ("Title", "", "Description is required"),
        ],
    )
    def test_blank_fields_rejected(self, db, owner, title, description, message):
        with pytest.raises(ValidationFailedError, match=message):
            append_list_service.create_list(db, owner.id, title, description)
        assert db.query(AppendList).count() == 0

    def test_unknown_type_rejected(self, db, owner):
        with pytest.raises(ValidationFailedError):
            append_list_service.create_list(db, owner.id, "T", "D", "spreadsheet")


def test_list_owned_by_newest_first(db, owner, outsider):
    older = append_list_service.create_list(db, owner.id, "Older", "D")
    newer = append_list_service.create_list(db, owner.id, "Newer", "D")
    append_list_service.create_list(db, outsider.id, "Not mine", "D")
    older.created_at = datetime.now(timezone.utc) - timedelta(days=1)
    db.commit()

    lists = append_list_service.list_owned_by(db, owner.id)
    assert [item.id for item in lists] == [newer.id, older.id]


def test_require_list_missing(db):
    with pytest.raises(ListNotFoundError):
        append_list_service.require_list(db, uuid.uuid4())


class TestDeleteList:
    def test_owner_deletes_list_and_members(self, db, plain_list, owner, member, outsider):
        join_service.join(db, plain_list.id, member)
        join_service.join(db, plain_list.id, outsider)
        list_id = plain_list.id

        append_list_service.delete_list(db, list_id, owner.id)

        assert append_list_service.get_list(db, list_id) is None
        assert db.query(AppendListPerson).filter(AppendListPerson.list_id == list_id).count() == 0

    def test_non_owner_and_missing_fail_the_same_way(self, db, plain_list, member):
        with pytest.raises(ListNotFoundError) as not_owned:
            append_list_service.delete_list(db, plain_list.id, member.id)
        with pytest.raises(ListNotFoundError) as missing:
            append_list_service.delete_list(db, uuid.uuid4(), member.id)

        assert not_owned.value.detail == missing.value.detail
        assert append_list_service.get_list(db, plain_list.id) is not None

    def test_failure_after_member_sweep_keeps_list_and_members(
        self, db, plain_list, owner, member, outsider, monkeypatch
    ):
        join_service.join(db, plain_list.id, member)
        join_service.join(db, plain_list.id, outsider)
        list_id = plain_list.id
        members_at_failure = []

        def fail_delete(instance):
            members_at_failure.append(
                db.query(AppendListPerson).filter(AppendListPerson.list_id == list_id).count()
            )
            raise RuntimeError("storage unavailable")

        monkeypatch.setattr(db, "delete", fail_delete)
        with pytest.raises(RuntimeError):
            append_list_service.delete_list(db, list_id, owner.id)
        monkeypatch.undo()

        assert members_at_failure == [0]
        assert append_list_service.get_list(db, list_id) is not None
        assert db.query(AppendListPerson).filter(AppendListPerson.list_id == list_id).count() == 2


class TestListDetail:
    def test_missing_list(self, db, access_config):
        assert append_list_service.get_list_detail(db, uuid.uuid4(), None, access_config) is None

    def test_people_and_permissions(self, db, plain_list, owner, member, access_config):
        join_service.join(db, plain_list.id, member)

        detail = append_list_service.get_list_detail(db, plain_list.id, member, access_config)

        assert detail.list_type == ListType.PLAIN
        assert [p.name for p in detail.people] == ["Mia Member 21BCE1234"]
        assert detail.people[0].register_no == "21BCE1234"
        assert detail.people[0].can_edit is True
        assert detail.permissions.has_joined is True
        assert detail.is_admin is False

    def test_anonymous_viewer_sees_people_without_edit(self, db, plain_list, member, access_config):
        join_service.join(db, plain_list.id, member)

        detail = append_list_service.get_list_detail(db, plain_list.id, None, access_config)

        assert len(detail.people) == 1
        assert detail.people[0].can_edit is False
        assert detail.permissions.can_download is False

    def test_admin_can_edit_everyone(self, db, plain_list, member, admin, access_config):
        join_service.join(db, plain_list.id, member)

        detail = append_list_service.get_list_detail(db, plain_list.id, admin, access_config)

        assert detail.is_admin is True
        assert detail.people[0].can_edit is True

    def test_legacy_type_read_as_plain(self, db, owner, access_config):
        append_list = AppendList(title="Old", description="D", list_type="nightslip", owner_id=owner.id)
        db.add(append_list)
        db.commit()

        detail = append_list_service.get_list_detail(db, append_list.id, owner, access_config)
        assert detail.list_type == ListType.PLAIN


def test_normalize_list_types(db, owner):
    db.add_all(
        [
            AppendList(title="A", description="D", list_type="nightslip", owner_id=owner.id),
            AppendList(title="B", description="D", list_type="names", owner_id=owner.id),
            AppendList(title="C", description="D", list_type=None, owner_id=owner.id),
            AppendList(title="E", description="D", list_type="github", owner_id=owner.id),
        ]
    )
    db.commit()

    updated, total = append_list_service.normalize_list_types(db)

    assert (updated, total) == (3, 4)
    stored = sorted(row.list_type for row in db.query(AppendList).all())
    assert stored == ["github", "plain", "plain", "plain"]
