"""
import_engine.importer - Top-level orchestrator.

Coordinates csv_parser → row_processor → record_builder and, for
run_import(), the DB commit.  Produces a structured ImportReport.
"""

from __future__ import annotations

import logging
import time
from typing import Optional

import config
from db.engine import get_session
from db.models import PATRecord
from import_engine.csv_parser import iter_lines, split_line
from import_engine.errors import RowError
from import_engine.record_builder import build_record
from import_engine.report import ImportReport
from import_engine.row_processor import RowParser, has_usable_asset_id

logger = logging.getLogger(__name__)

# Row number + SITE,<site> + USER,<user> at the very least
MIN_TOKENS = 5


def new_batch_id() -> int:
    """Millisecond timestamp identifying one import invocation."""
    return int(time.time() * 1000)


def parse_records(
    file_content: str | bytes,
    *,
    batch_id: Optional[int] = None,
    keep_non_visual_token: Optional[bool] = None,
) -> tuple[list[PATRecord], ImportReport]:
    """
    Parse a PAT export into transient PATRecords.

    Every record shares one batch id.  Lines that break the grammar or
    carry no usable asset ID are left out and only noted in the report.
    Raises UnreadableFileError when the content is not valid UTF-8.
    """
    if batch_id is None:
        batch_id = new_batch_id()
    if keep_non_visual_token is None:
        keep_non_visual_token = config.KEEP_DIAG_TOKEN

    report = ImportReport(batch_id=batch_id)
    parser = RowParser(keep_non_visual_token=keep_non_visual_token)
    records: list[PATRecord] = []

    for line_no, line in iter_lines(file_content):
        report.total_lines += 1
        tokens = split_line(line)
        if len(tokens) < MIN_TOKENS:
            report.add_rejection(line_no, f"Only {len(tokens)} fields")
            continue
        try:
            data = parser.parse(tokens)
        except RowError as exc:
            report.add_rejection(line_no, str(exc))
            continue
        if not has_usable_asset_id(data.asset_id):
            report.add_rejection(line_no, "No usable asset ID")
            continue

        record = build_record(data, batch_id)
        if record.date_inferred:
            report.dates_inferred += 1
        records.append(record)

    for err in report.errors:
        logger.debug(f"Line {err['line']} rejected: {err['reason']}")
    logger.info(f"Parsed {len(records)} records from {report.total_lines} lines "
                f"(batch {batch_id}, {report.rejected} rejected)")
    return records, report


def import_records(
    file_content: str | bytes,
    *,
    batch_id: Optional[int] = None,
) -> list[PATRecord]:
    """Parse a PAT export and return its records, nothing persisted."""
    records, _report = parse_records(file_content, batch_id=batch_id)
    return records


def run_import(
    file_content: str | bytes,
    *,
    batch_id: Optional[int] = None,
) -> ImportReport:
    """
    Import a PAT export into the record store.

    Parameters
    ----------
    file_content : raw export (bytes or str)
    batch_id : override the batch id (defaults to the current time in ms)

    Returns
    -------
    ImportReport with per-line rejection details
    """
    records, report = parse_records(file_content, batch_id=batch_id)

    session = get_session()
    try:
        session.add_all(records)
        session.commit()
        report.imported = len(records)
    except Exception as exc:
        session.rollback()
        logger.error(f"Import commit failed: {exc}")
        report.add_rejection(0, f"Fatal import error: {exc}")
    finally:
        session.close()

    return report
