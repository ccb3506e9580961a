"""Utility modules."""

from appendlist_api.utils.normalization import (
    extract_register_number,
    join_identity_candidates,
    normalize_email,
    normalize_name,
    parse_email_allowlist,
    resolve_display_name,
)

__all__ = [
    # Normalization
    "extract_register_number",
    "join_identity_candidates",
    "normalize_email",
    "normalize_name",
    "parse_email_allowlist",
    "resolve_display_name",
]
