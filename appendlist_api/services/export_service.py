"""Roster export - authorized, flattened rows plus CSV / copy-text rendering."""

from __future__ import annotations

import csv
import io
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Iterable, Sequence
from uuid import UUID
from zoneinfo import ZoneInfo

from sqlalchemy.orm import Session

from appendlist_api.core.config import settings
from appendlist_api.core.errors import UnauthenticatedError
from appendlist_api.core.list_types import normalize_list_type, partition_for
from appendlist_api.db.enums import ListType
from appendlist_api.db.models import AppendListPerson
from appendlist_api.schemas.auth import Principal
from appendlist_api.services import access_service, membership_service
from appendlist_api.services.access_service import AccessConfig
from appendlist_api.services.append_list_service import require_list


CSV_DANGEROUS_PREFIXES = ("=", "+", "-", "@")
INPUT_SEPARATOR = " | "


@dataclass
class ExportRow:
    name: str
    email_id: str | None
    register_no: str | None
    joining_time: str
    github_username: str | None = None
    inputs: list[str] | None = None


@dataclass
class ExportResult:
    list_title: str
    list_type: ListType
    rows: list[ExportRow] = field(default_factory=list)


def format_joining_time(
    value: datetime,
    tz_name: str | None = None,
    label: str | None = None,
) -> str:
    """
    Render a join time as ``YYYY-MM-DD HH:MM:SS <LABEL>`` in one fixed zone.

    The zone never follows the viewer, so two people downloading the same
    list get byte-identical timestamps. Naive datetimes are treated as UTC.
    """
    tz_name = tz_name or settings.EXPORT_TIMEZONE
    label = label or settings.EXPORT_TIMEZONE_LABEL
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    local = value.astimezone(ZoneInfo(tz_name))
    return f"{local.strftime('%Y-%m-%d %H:%M:%S')} {label}"


def _to_row(person: AppendListPerson, list_type: ListType) -> ExportRow:
    row = ExportRow(
        name=person.display_name,
        email_id=person.email_key,
        register_no=person.register_number,
        joining_time=format_joining_time(person.joined_at),
    )
    if list_type == ListType.GITHUB:
        row.github_username = person.github_username
    elif list_type == ListType.OTHERS:
        row.inputs = list(person.inputs or [])
    return row


def export_rows(
    db: Session,
    list_id: UUID,
    viewer: Principal | None,
    config: AccessConfig,
    *,
    allow_owner_override: bool = False,
) -> ExportResult:
    """
    Flatten a list's members into export rows, earliest join first.

    Raises:
        UnauthenticatedError: no viewer
        ListNotFoundError: list missing
        ForbiddenError: viewer may not download this list
    """
    if viewer is None:
        raise UnauthenticatedError()
    append_list = require_list(db, list_id)
    access_service.ensure_can_download(
        db,
        append_list,
        viewer,
        config,
        allow_owner_override=allow_owner_override,
    )

    list_type = normalize_list_type(append_list.list_type)
    people = membership_service.list_all(db, append_list.id, partition_for(list_type))
    return ExportResult(
        list_title=append_list.title,
        list_type=list_type,
        rows=[_to_row(person, list_type) for person in people],
    )


# =============================================================================
# Rendering
# =============================================================================

def _csv_safe(value: str) -> str:
    if value and value.startswith(CSV_DANGEROUS_PREFIXES):
        return f"'{value}"
    return value


def _serialize_csv_value(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (list, tuple)):
        return INPUT_SEPARATOR.join(str(item) for item in value)
    return str(value)


def _write_csv(headers: Sequence[str], rows: Iterable[Sequence[Any]]) -> str:
    output = io.StringIO()
    writer = csv.writer(output, lineterminator="\n")
    writer.writerow(headers)
    for row in rows:
        writer.writerow([_csv_safe(_serialize_csv_value(value)) for value in row])
    return output.getvalue()


def csv_headers(list_type: ListType) -> list[str]:
    if list_type == ListType.GITHUB:
        return ["name", "emailid", "register_no", "github_username", "joining_time"]
    if list_type == ListType.OTHERS:
        return ["name", "emailid", "register_no", "input_1", "joining_time"]
    return ["name", "emailid", "register_no", "joining_time"]


def render_csv(result: ExportResult) -> str:
    """Render export rows as CSV with a header matching the list type."""

    def values(row: ExportRow) -> list[Any]:
        if result.list_type == ListType.GITHUB:
            return [row.name, row.email_id, row.register_no, row.github_username, row.joining_time]
        if result.list_type == ListType.OTHERS:
            return [row.name, row.email_id, row.register_no, row.inputs or [], row.joining_time]
        return [row.name, row.email_id, row.register_no, row.joining_time]

    return _write_csv(csv_headers(result.list_type), (values(row) for row in result.rows))


def render_copy_text(result: ExportResult) -> str:
    """
    Numbered plain-text roster for pasting into chat.

    github lists copy usernames only; others lists append the register number
    and ``[ a | b ]`` inputs; plain lists copy names. Empty string when there
    is nothing to copy.
    """
    lines: list[str] = []
    if result.list_type == ListType.GITHUB:
        usernames = [
            row.github_username.strip()
            for row in result.rows
            if row.github_username and row.github_username.strip()
        ]
        lines = [f"{index}. {username}" for index, username in enumerate(usernames, start=1)]
    elif result.list_type == ListType.OTHERS:
        for index, row in enumerate(result.rows, start=1):
            items = [item.strip() for item in (row.inputs or []) if item.strip()]
            register_no = (row.register_no or "").strip()
            line = f"{index}. {row.name}"
            if register_no:
                line += f" {register_no}"
            if items:
                line += f" [ {INPUT_SEPARATOR.join(items)} ]"
            lines.append(line)
    else:
        lines = [f"{index}. {row.name}" for index, row in enumerate(result.rows, start=1)]
    return "\n".join(lines)


def export_filename(title: str) -> str:
    """Download filename: title with whitespace runs as dashes, lowercased."""
    slug = re.sub(r"\s+", "-", title).lower()
    return f"{slug}-names.csv"
