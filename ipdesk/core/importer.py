"""
Bulk Import Orchestrator - spreadsheet rows to device create-requests.

Per row:
| Any reference cell blank? | Any reference unmatched? | Result             |
|---------------------------|--------------------------|--------------------|
| yes                       | -                        | SKIPPED_BLANK      |
| no                        | yes                      | SKIPPED_UNRESOLVED |
| no                        | no                       | one create-request |

Skipped rows send nothing and raise nothing. A refused create-request is
logged and counted as FAILED; the next row is still processed.
"""

import logging
from typing import Callable, Iterable, Mapping, Optional

from .cache import ReferenceCache
from .errors import InventoryError, UnresolvedReference
from .models import (
    IMPORT_REFERENCE_KINDS,
    DeviceCreateRequest,
    ImportRow,
    ImportSummary,
    ReferenceKind,
    RowOutcome,
    RowResult,
)
from .resolver import UNRESOLVED, resolve

logger = logging.getLogger(__name__)


def _resolve_remote_id(cache: ReferenceCache, needle: str) -> Optional[int]:
    """Remote id of the first match; None if unmatched or the match has no id."""
    index = resolve(cache, needle)
    if index == UNRESOLVED:
        return None
    return cache.get(index).remote_id


def build_device_request(
    row: ImportRow,
    caches: Mapping[ReferenceKind, ReferenceCache],
) -> DeviceCreateRequest:
    """
    Resolve a row's five references into a create-request.

    Args:
        row: Spreadsheet row
        caches: Snapshot of the reference caches

    Returns:
        DeviceCreateRequest carrying remote ids

    Raises:
        UnresolvedReference: for the first reference that resolves to 0
    """
    remote_ids = {}
    for kind in IMPORT_REFERENCE_KINDS:
        needle = row.reference_text(kind)
        remote_id = _resolve_remote_id(caches[kind], needle)
        if remote_id is None:
            raise UnresolvedReference(kind, needle)
        remote_ids[kind] = remote_id

    return DeviceCreateRequest(
        name=row.name,
        serial=row.serial,
        tenant=remote_ids[ReferenceKind.TENANT],
        manufacturer=remote_ids[ReferenceKind.MANUFACTURER],
        role=remote_ids[ReferenceKind.DEVICE_ROLE],
        site=remote_ids[ReferenceKind.SITE],
        device_type=remote_ids[ReferenceKind.DEVICE_TYPE],
    )


def _classify(row: ImportRow, caches: Mapping[ReferenceKind, ReferenceCache]) -> Optional[RowResult]:
    """RowResult for a row that must be skipped, or None if it fully resolves."""
    blank = [k.value for k in IMPORT_REFERENCE_KINDS if not row.reference_text(k)]
    if blank:
        return RowResult(
            row=row,
            outcome=RowOutcome.SKIPPED_BLANK,
            reason=f"Empty reference cell(s): {', '.join(blank)}",
            missing=blank,
        )

    unmatched = [
        k.value for k in IMPORT_REFERENCE_KINDS
        if _resolve_remote_id(caches[k], row.reference_text(k)) is None
    ]
    if unmatched:
        return RowResult(
            row=row,
            outcome=RowOutcome.SKIPPED_UNRESOLVED,
            reason=f"No match for: {', '.join(unmatched)}",
            missing=unmatched,
        )
    return None


def import_all(
    rows: Iterable[ImportRow],
    caches: Mapping[ReferenceKind, ReferenceCache],
    submit: Optional[Callable[[DeviceCreateRequest], object]],
    refresh: Optional[Callable[[], None]] = None,
    dry_run: bool = False,
) -> ImportSummary:
    """
    Import every row, one create-request per fully resolved row.

    Args:
        rows: Import rows in sheet order
        caches: Snapshot of the reference caches (read only)
        submit: Sends one create-request (InventoryClient.create_device); unused on dry runs
        refresh: Called once after the pass so the device list shows new rows
        dry_run: Resolve and count without submitting

    Returns:
        ImportSummary; summary.submitted is the number of devices created
    """
    summary = ImportSummary()

    for row in rows:
        skipped = _classify(row, caches)
        if skipped is not None:
            logger.debug(f"Row {row.row_number} skipped: {skipped.reason}")
            summary.results.append(skipped)
            continue

        try:
            request = build_device_request(row, caches)
        except UnresolvedReference as e:
            summary.results.append(RowResult(row, RowOutcome.SKIPPED_UNRESOLVED, reason=str(e)))
            continue

        if dry_run:
            summary.results.append(RowResult(row, RowOutcome.SUBMITTED, reason="dry run"))
            continue

        try:
            submit(request)
        except InventoryError as e:
            body = getattr(e, "body", "")
            logger.error(f"Row {row.row_number} ('{row.name}') not created: {e} {body}".rstrip())
            summary.results.append(RowResult(row, RowOutcome.FAILED, reason=str(e)))
            continue

        summary.results.append(RowResult(row, RowOutcome.SUBMITTED))

    logger.info(
        f"Import complete: {summary.submitted} submitted, "
        f"{summary.skipped} skipped, {summary.failed} failed"
    )

    if refresh is not None and not dry_run:
        refresh()

    return summary
