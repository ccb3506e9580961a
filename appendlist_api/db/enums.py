"""Enum definitions for application constants."""

from enum import Enum


class ListType(str, Enum):
    """
    Person shape a list collects.

    - PLAIN: name (and email) only
    - GITHUB: name plus a required GitHub username
    - OTHERS: name plus one or more free-form inputs
    """
    PLAIN = "plain"
    GITHUB = "github"
    OTHERS = "others"

    @classmethod
    def has_value(cls, value: str) -> bool:
        """Check if value is a canonical list type."""
        return value in cls._value2member_map_


# Values written by earlier releases that now mean PLAIN
LEGACY_PLAIN_LIST_TYPES = frozenset({"nightslip", "names"})

DEFAULT_LIST_TYPE = ListType.PLAIN
