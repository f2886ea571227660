"""
import_engine.record_builder - FieldMap → PATRecord.

The record is returned transient (not added to any session).
"""

from __future__ import annotations

from typing import Optional

from db.models import PATRecord
from import_engine.classifier import infer_pat_class, parse_test_date
from import_engine.field_map import FieldMap, MEASUREMENT_FIELDS


def build_record(data: FieldMap, batch_id: int) -> PATRecord:
    test_date, date_inferred = parse_test_date(data.test_date)

    record = PATRecord(
        asset_id=data.asset_id or "",
        site=data.site or "",
        user=data.user or "",
        test_date=test_date,
        test_type=data.test_type or "",
        pat_class=infer_pat_class(data),
        import_batch_id=batch_id,
        date_inferred=date_inferred,
    )
    for name in MEASUREMENT_FIELDS:
        setattr(record, name, empty_to_none(getattr(data, name)))
    return record


def empty_to_none(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None
