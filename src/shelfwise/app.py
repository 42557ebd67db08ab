"""Application orchestration entry points."""

from __future__ import annotations

from collections.abc import Callable
from logging import getLogger
from typing import TYPE_CHECKING

from shelfwise.adapters.lookup import build_lookup_provider
from shelfwise.adapters.review import to_book_row, to_commit_request
from shelfwise.adapters.sqlalchemy.unit_of_work import SqlAlchemyUnitOfWork, is_started, startup
from shelfwise.config.lookup import get_lookup_config
from shelfwise.config.storage import get_storage_config
from shelfwise.domain import entries
from shelfwise.domain.errors import ImportValidationError
from shelfwise.domain.export import export_entries
from shelfwise.domain.importing import commit_import, normalize_import, resolve_import
from shelfwise.domain.model import ExportFormat, ExportType, parse_unified_id
from shelfwise.domain.ports.unit_of_work import BookUnitOfWork
from shelfwise.domain.promotion import promote_entry

if TYPE_CHECKING:
    from collections.abc import Mapping
    from enum import StrEnum
    from pathlib import Path

    from shelfwise.config.lookup import LookupConfig
    from shelfwise.domain.export import ExportDocument
    from shelfwise.domain.importing import CommitResult, ResolutionReport
    from shelfwise.domain.model import ImportFormat, Rating, UnifiedEntry
    from shelfwise.domain.ports import LookupProvider
    from shelfwise.domain.promotion import PromotionResult

UnitOfWorkFactory = Callable[[], BookUnitOfWork]

log = getLogger(__name__)


def _unit_of_work(factory: UnitOfWorkFactory | None) -> UnitOfWorkFactory:
    if factory is not None:
        return factory
    if not is_started():
        startup()
    return SqlAlchemyUnitOfWork


def _option[TEnum: StrEnum](enum: type[TEnum], value: TEnum | str, label: str) -> TEnum:
    try:
        return enum(value)
    except ValueError as exc:
        choices = ", ".join(member.value for member in enum)
        raise ImportValidationError(f"Invalid export {label}: {value} (use {choices})") from exc


def list_completed_books(
    *,
    user_id: int,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> list[UnifiedEntry]:
    """Every completed read, library copies first in case of overlap."""

    return entries.list_unified(
        user_id=user_id, unit_of_work_factory=_unit_of_work(unit_of_work_factory)
    )


def parse_import(
    data: object,
    import_format: ImportFormat | str,
    *,
    user_id: int,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    provider: LookupProvider | None = None,
    config: LookupConfig | None = None,
) -> ResolutionReport:
    """Normalize and classify an import file without writing anything."""

    batch = normalize_import(data, import_format)
    lookup_config = config or get_lookup_config()
    log.info(
        "Resolving %s %s rows for user %s (%s skipped by shelf)",
        batch.total,
        batch.dialect,
        user_id,
        batch.skipped_shelves,
    )
    report = resolve_import(
        batch,
        user_id=user_id,
        unit_of_work_factory=_unit_of_work(unit_of_work_factory),
        provider=provider or build_lookup_provider(lookup_config),
        max_workers=lookup_config.max_workers,
        timeout=lookup_config.timeout_seconds,
    )
    log.info("Import preview for user %s: %s", user_id, report.counts())
    return report


def commit_import_payload(
    payload: object,
    *,
    user_id: int,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> CommitResult:
    request = to_commit_request(payload)
    result = commit_import(
        request,
        user_id=user_id,
        unit_of_work_factory=_unit_of_work(unit_of_work_factory),
    )
    log.info(result.message)
    return result


def promote(
    entry_id: str,
    *,
    user_id: int,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> PromotionResult:
    result = promote_entry(
        parse_unified_id(entry_id),
        user_id=user_id,
        unit_of_work_factory=_unit_of_work(unit_of_work_factory),
    )
    log.info("%s (library book %s)", result.message, result.library_book_id)
    return result


def render_export(
    *,
    user_id: int,
    export_type: ExportType | str = ExportType.COMPREHENSIVE,
    export_format: ExportFormat | str = ExportFormat.JSON,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> ExportDocument:
    return export_entries(
        list_completed_books(user_id=user_id, unit_of_work_factory=unit_of_work_factory),
        export_type=_option(ExportType, export_type, "type"),
        export_format=_option(ExportFormat, export_format, "format"),
    )


def export_completed_books(
    *,
    user_id: int,
    export_type: ExportType | str = ExportType.COMPREHENSIVE,
    export_format: ExportFormat | str = ExportFormat.JSON,
    output_dir: Path | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> Path:
    """Write the export file and return its path."""

    document = render_export(
        user_id=user_id,
        export_type=export_type,
        export_format=export_format,
        unit_of_work_factory=unit_of_work_factory,
    )
    if output_dir is not None:
        output_dir.mkdir(parents=True, exist_ok=True)
        target = output_dir / document.filename
    else:
        target = get_storage_config().exports_path(document.filename)
    target.write_text(document.body, encoding="utf-8")
    log.info("Exported %s books to %s", document.count, target)
    return target


def get_entry(
    entry_id: str,
    *,
    user_id: int,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> UnifiedEntry:
    return entries.get_entry(
        parse_unified_id(entry_id),
        user_id=user_id,
        unit_of_work_factory=_unit_of_work(unit_of_work_factory),
    )


def update_entry(
    entry_id: str,
    changes: Mapping[str, object],
    *,
    user_id: int,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> UnifiedEntry:
    return entries.update_entry(
        parse_unified_id(entry_id),
        changes,
        user_id=user_id,
        unit_of_work_factory=_unit_of_work(unit_of_work_factory),
    )


def remove_entry(
    entry_id: str,
    *,
    user_id: int,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> None:
    entries.remove_entry(
        parse_unified_id(entry_id),
        user_id=user_id,
        unit_of_work_factory=_unit_of_work(unit_of_work_factory),
    )


def add_completed_book(
    payload: Mapping[str, object],
    *,
    user_id: int,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> UnifiedEntry:
    return entries.add_completed_book(
        to_book_row(payload),
        user_id=user_id,
        unit_of_work_factory=_unit_of_work(unit_of_work_factory),
    )


def get_rating(
    entry_id: str,
    *,
    user_id: int,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> Rating | None:
    return entries.get_rating(
        parse_unified_id(entry_id),
        user_id=user_id,
        unit_of_work_factory=_unit_of_work(unit_of_work_factory),
    )


def save_rating(
    entry_id: str,
    rating: int,
    comment: str | None = None,
    *,
    user_id: int,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> tuple[Rating, bool]:
    return entries.save_rating(
        parse_unified_id(entry_id),
        rating,
        comment,
        user_id=user_id,
        unit_of_work_factory=_unit_of_work(unit_of_work_factory),
    )


def delete_rating(
    entry_id: str,
    *,
    user_id: int,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> bool:
    return entries.delete_rating(
        parse_unified_id(entry_id),
        user_id=user_id,
        unit_of_work_factory=_unit_of_work(unit_of_work_factory),
    )


def list_series(
    *,
    user_id: int,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> list[str]:
    return entries.list_series(
        user_id=user_id, unit_of_work_factory=_unit_of_work(unit_of_work_factory)
    )
