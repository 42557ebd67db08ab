"""Rendering of the unified view as JSON or CSV downloads."""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import UTC, date, datetime
from typing import TYPE_CHECKING, Final

from shelfwise.domain.model import ExportFormat, ExportType

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from shelfwise.domain.model import UnifiedEntry

type ExportValue = str | int | float | bool | list[str] | None

MINIMAL_FIELDS: Final[tuple[str, ...]] = (
    "isbn",
    "title",
    "author",
    "series_name",
    "series_position",
    "date_finished",
    "owned",
)
COMPREHENSIVE_FIELDS: Final[tuple[str, ...]] = (
    "isbn",
    "title",
    "author",
    "page_count",
    "genre",
    "synopsis",
    "tags",
    "series_name",
    "series_position",
    "date_finished",
    "owned",
    "created_at",
    "updated_at",
)
FIELDS_BY_TYPE: Final[dict[ExportType, tuple[str, ...]]] = {
    ExportType.MINIMAL: MINIMAL_FIELDS,
    ExportType.COMPREHENSIVE: COMPREHENSIVE_FIELDS,
}
CONTENT_TYPES: Final[dict[ExportFormat, str]] = {
    ExportFormat.JSON: "application/json",
    ExportFormat.CSV: "text/csv",
}
LIST_SEPARATOR: Final[str] = "; "
_NEEDS_QUOTING: Final[tuple[str, ...]] = (",", '"', "\n")


@dataclass(frozen=True, slots=True)
class ExportDocument:
    filename: str
    content_type: str
    body: str
    count: int


def export_entries(
    entries: Sequence[UnifiedEntry],
    *,
    export_type: ExportType,
    export_format: ExportFormat,
    now: datetime | None = None,
) -> ExportDocument:
    """Serialize ``entries`` in their given order."""

    moment = now or datetime.now(UTC)
    fields = FIELDS_BY_TYPE[export_type]
    records = [export_record(entry, fields) for entry in entries]

    if export_format is ExportFormat.JSON:
        body = json.dumps(
            {
                "exportedAt": moment.isoformat(),
                "exportType": str(export_type),
                "totalBooks": len(records),
                "books": records,
            },
            indent=2,
            ensure_ascii=False,
        )
    else:
        body = render_csv(fields, records)

    return ExportDocument(
        filename=export_filename(export_type, export_format, moment.date()),
        content_type=CONTENT_TYPES[export_format],
        body=body,
        count=len(records),
    )


def export_filename(export_type: ExportType, export_format: ExportFormat, day: date) -> str:
    return f"shelfwise-completed-books-{export_type}-{day.isoformat()}.{export_format}"


def export_record(entry: UnifiedEntry, fields: Iterable[str]) -> dict[str, ExportValue]:
    record: dict[str, ExportValue] = {}
    for name in fields:
        value = getattr(entry, name)
        if name == "owned":
            record[name] = "yes" if value else "no"
        elif isinstance(value, datetime | date):
            record[name] = value.isoformat()
        elif isinstance(value, tuple):
            record[name] = [str(item) for item in value]
        else:
            record[name] = value
    return record


def render_csv(fields: Sequence[str], records: Iterable[dict[str, ExportValue]]) -> str:
    lines = [",".join(escape_csv(name) for name in fields)]
    lines.extend(",".join(escape_csv(record.get(name)) for name in fields) for record in records)
    return "\n".join(lines)


def escape_csv(value: ExportValue) -> str:
    if value is None:
        return ""
    if isinstance(value, list):
        text = LIST_SEPARATOR.join(value)
    elif isinstance(value, float) and value.is_integer():
        text = str(int(value))
    else:
        text = str(value)
    if any(marker in text for marker in _NEEDS_QUOTING):
        return '"' + text.replace('"', '""') + '"'
    return text
