"""List type registry.

Maps a list's declared type to the membership partition it stores people in
and to the extra payload a join (or edit) must carry for that type.
"""

from dataclasses import dataclass
from typing import Iterable

from appendlist_api.core.errors import ValidationFailedError
from appendlist_api.db.enums import DEFAULT_LIST_TYPE, LEGACY_PLAIN_LIST_TYPES, ListType


@dataclass(frozen=True)
class JoinPayloadRequirement:
    """What a join must supply beyond the principal's name/email."""

    github_username: bool = False
    inputs: bool = False


@dataclass(frozen=True)
class JoinPayload:
    """Cleaned, type-checked extra payload for a person record."""

    github_username: str | None = None
    inputs: list[str] | None = None


REQUIREMENTS: dict[ListType, JoinPayloadRequirement] = {
    ListType.PLAIN: JoinPayloadRequirement(),
    ListType.GITHUB: JoinPayloadRequirement(github_username=True),
    ListType.OTHERS: JoinPayloadRequirement(inputs=True),
}


def normalize_list_type(value: str | ListType | None) -> ListType:
    """
    Resolve a stored or requested list type to its canonical value.

    Missing values and legacy aliases read as PLAIN so lists created before
    typed lists existed keep working without a data migration.
    """
    if isinstance(value, ListType):
        return value
    if value is None:
        return DEFAULT_LIST_TYPE

    cleaned = value.strip().lower()
    if not cleaned or cleaned in LEGACY_PLAIN_LIST_TYPES:
        return DEFAULT_LIST_TYPE
    if not ListType.has_value(cleaned):
        raise ValidationFailedError(f"Unknown list type '{value}'")
    return ListType(cleaned)


def partition_for(list_type: str | ListType | None) -> ListType:
    """Membership partition for a list type (one partition per type)."""
    return normalize_list_type(list_type)


def required_join_payload(list_type: str | ListType | None) -> JoinPayloadRequirement:
    return REQUIREMENTS[normalize_list_type(list_type)]


def clean_inputs(inputs: Iterable[str] | None) -> list[str]:
    """Trim every entry and drop blanks, keeping the original order."""
    if not inputs:
        return []
    return [item.strip() for item in inputs if item and item.strip()]


def validate_join_payload(
    list_type: str | ListType | None,
    github_username: str | None = None,
    inputs: Iterable[str] | None = None,
) -> JoinPayload:
    """
    Check the type-specific payload and return the cleaned values.

    Fields that do not apply to the list type are dropped rather than stored.

    Raises:
        ValidationFailedError: required field missing or blank
    """
    requirement = required_join_payload(list_type)

    username: str | None = None
    if requirement.github_username:
        username = github_username.strip() if github_username else ""
        if not username:
            raise ValidationFailedError("GitHub username is required to join this list")

    cleaned_inputs: list[str] | None = None
    if requirement.inputs:
        cleaned_inputs = clean_inputs(inputs)
        if not cleaned_inputs:
            raise ValidationFailedError("At least one input is required to join this list")

    return JoinPayload(github_username=username, inputs=cleaned_inputs)
