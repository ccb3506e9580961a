"""Identity normalization for join keys and operator allowlists."""

import json
import re
from typing import Optional


ANONYMOUS_DISPLAY_NAME = "Anonymous"

# Institution register code, e.g. 21BCE1234
REGISTER_NUMBER_PATTERN = re.compile(r"^[0-9]{2}[A-Z]{3}[0-9]{4}$")


def normalize_email(email: Optional[str]) -> Optional[str]:
    """
    Normalize email to a lowercase join key.

    Args:
        email: Raw email input

    Returns:
        Lowercased, trimmed email or None if blank
    """
    if not email:
        return None
    cleaned = email.strip().lower()
    return cleaned or None


def normalize_name(name: Optional[str]) -> Optional[str]:
    """
    Normalize a display name by trimming surrounding whitespace.

    Internal whitespace is preserved so stored names compare exactly
    against what the identity provider reports.

    Args:
        name: Raw name input

    Returns:
        Trimmed name or None if blank
    """
    if not name:
        return None
    cleaned = name.strip()
    return cleaned or None


def resolve_display_name(name: Optional[str], email: Optional[str]) -> str:
    """Pick the display name used as the dedup key when no email exists."""
    trimmed_name = normalize_name(name)
    if trimmed_name:
        return trimmed_name
    trimmed_email = email.strip() if email else ""
    if trimmed_email:
        return trimmed_email
    return ANONYMOUS_DISPLAY_NAME


def extract_register_number(raw_name: Optional[str]) -> Optional[str]:
    """
    Extract a register number from the last token of a free-text name.

    "Jane Doe 21bce1234" -> "21BCE1234". Returns None when the last token
    does not match; this is best-effort metadata, never an error.
    """
    if not raw_name:
        return None
    tokens = raw_name.split()
    if not tokens:
        return None
    candidate = tokens[-1].upper()
    if not REGISTER_NUMBER_PATTERN.fullmatch(candidate):
        return None
    return candidate


def join_identity_candidates(name: Optional[str], email: Optional[str]) -> list[str]:
    """Literal name and email (trimmed) usable as alternative name matches."""
    candidates: list[str] = []
    for value in (name, email):
        trimmed = value.strip() if value else ""
        if trimmed and trimmed not in candidates:
            candidates.append(trimmed)
    return candidates


def _clean_allowlist_entry(entry: str) -> str:
    cleaned = entry.strip()
    cleaned = re.sub(r"^\[", "", cleaned)
    cleaned = re.sub(r"\]$", "", cleaned)
    cleaned = re.sub(r"^['\"]|['\"]$", "", cleaned)
    return cleaned.lower()


def parse_email_allowlist(raw: Optional[str]) -> frozenset[str]:
    """
    Parse an operator-supplied email allowlist.

    Accepts a JSON array (``["a@x.com", "b@x.com"]``) or a comma-separated
    string (``a@x.com, b@x.com``). Entries are lowercased; blanks dropped.
    """
    if not raw:
        return frozenset()

    try:
        parsed = json.loads(raw)
    except ValueError:
        parsed = None

    if isinstance(parsed, list):
        return frozenset(
            entry
            for entry in (str(item).strip().lower() for item in parsed)
            if entry
        )

    return frozenset(
        entry
        for entry in (_clean_allowlist_entry(part) for part in raw.split(","))
        if entry
    )
