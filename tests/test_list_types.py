"""Tests for the list type registry."""

import pytest

from appendlist_api.core.errors import ValidationFailedError
from appendlist_api.core.list_types import (
    clean_inputs,
    normalize_list_type,
    partition_for,
    required_join_payload,
    validate_join_payload,
)
from appendlist_api.db.enums import ListType


@pytest.mark.parametrize(
    "stored,expected",
    [
        (None, ListType.PLAIN),
        ("", ListType.PLAIN),
        ("nightslip", ListType.PLAIN),
        ("Names", ListType.PLAIN),
        ("plain", ListType.PLAIN),
        (" GitHub ", ListType.GITHUB),
        ("others", ListType.OTHERS),
        (ListType.OTHERS, ListType.OTHERS),
    ],
)
def test_normalize_list_type(stored, expected):
    assert normalize_list_type(stored) == expected


def test_unknown_list_type_rejected():
    with pytest.raises(ValidationFailedError):
        normalize_list_type("spreadsheet")


def test_partition_matches_type():
    assert partition_for("nightslip") == ListType.PLAIN
    assert partition_for("github") == ListType.GITHUB


def test_required_payload_per_type():
    assert required_join_payload("plain").github_username is False
    assert required_join_payload("plain").inputs is False
    assert required_join_payload("github").github_username is True
    assert required_join_payload("others").inputs is True


def test_clean_inputs_trims_and_keeps_order():
    assert clean_inputs([" b ", "", "a", "   "]) == ["b", "a"]
    assert clean_inputs(None) == []


class TestValidateJoinPayload:
    def test_plain_ignores_extra_fields(self):
        payload = validate_join_payload("plain", "octocat", ["x"])
        assert payload.github_username is None
        assert payload.inputs is None

    def test_github_requires_username(self):
        with pytest.raises(ValidationFailedError, match="GitHub username is required"):
            validate_join_payload("github", "   ")

    def test_github_username_trimmed(self):
        assert validate_join_payload("github", " octocat ").github_username == "octocat"

    def test_others_requires_a_non_blank_input(self):
        with pytest.raises(ValidationFailedError, match="At least one input is required"):
            validate_join_payload("others", inputs=["  ", ""])

    def test_others_inputs_cleaned(self):
        payload = validate_join_payload("others", inputs=[" idea one ", "", "idea two"])
        assert payload.inputs == ["idea one", "idea two"]
        assert payload.github_username is None
