"""
services.records_service - Listing, filtering and manual entry of PAT records.

All session management is the caller's responsibility (open before,
close/commit after).
"""

from __future__ import annotations

import re
from datetime import date, datetime, timedelta
from typing import Iterable, Optional

from sqlalchemy import func
from sqlalchemy.orm import Query, Session

from db.models import PATRecord, PAT_CLASSES
from import_engine.classifier import parse_test_date
from import_engine.field_map import MEASUREMENT_FIELDS
from import_engine.record_builder import empty_to_none
from import_engine.row_processor import has_usable_asset_id
from import_engine.units import normalise_pass_fail

MANUAL_SITE = "Manual Entry"
MANUAL_USER = "User"
MANUAL_CLASS = "I"


def natural_sortkey(value: str) -> list:
    """'A10' sorts after 'A9': digit runs compare as numbers."""
    return [
        (0, int(part), "") if part.isdigit() else (1, 0, part.lower())
        for part in re.split(r"(\d+)", value or "")
        if part
    ]


class RecordsService:

    SORTABLE_COLUMNS = {
        "test_date": PATRecord.test_date,
        "asset_id": PATRecord.asset_id,
        "site": PATRecord.site,
        "user": PATRecord.user,
        "pat_class": PATRecord.pat_class,
    }

    # ── Read ───────────────────────────────────────────────────────────

    @staticmethod
    def get(session: Session, record_id: int) -> PATRecord | None:
        return session.get(PATRecord, record_id)

    @staticmethod
    def get_many(session: Session, record_ids: Iterable[int]) -> list[PATRecord]:
        """Records for the given ids, in the order the ids were given."""
        ids = list(record_ids)
        if not ids:
            return []
        found = {r.id: r for r in session.query(PATRecord).filter(PATRecord.id.in_(ids))}
        return [found[i] for i in ids if i in found]

    @staticmethod
    def latest_batch_id(session: Session) -> Optional[int]:
        return session.query(func.max(PATRecord.import_batch_id)).scalar()

    @staticmethod
    def facets(session: Session) -> dict:
        """Distinct non-empty sites and users, sorted."""
        sites = session.query(PATRecord.site).distinct().all()
        users = session.query(PATRecord.user).distinct().all()
        return {
            "sites": sorted(s for (s,) in sites if s),
            "users": sorted(u for (u,) in users if u),
        }

    @staticmethod
    def search(
        session: Session,
        *,
        sites: Iterable[str] = (),
        users: Iterable[str] = (),
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        last_import_only: bool = False,
        hide_no_asset: bool = False,
        sort_by: str = "test_date",
        sort_order: str = "desc",
        limit: int = 100,
        offset: int = 0,
    ) -> tuple[list[PATRecord], int]:
        """
        Filtered listing.  Returns (records, total_count).
        """
        query = session.query(PATRecord)
        query = RecordsService._apply_filters(
            query, sites=list(sites), users=list(users),
            date_from=date_from, date_to=date_to,
            last_import_only=last_import_only,
        )
        reverse = sort_order == "desc"

        # Asset ids sort naturally and the asset-id check is not SQL,
        # so both cases are handled in Python.
        if hide_no_asset or sort_by == "asset_id":
            records = query.all()
            if hide_no_asset:
                records = [r for r in records if has_usable_asset_id(r.asset_id)]
            if sort_by == "asset_id":
                records.sort(key=lambda r: natural_sortkey(r.asset_id), reverse=reverse)
            else:
                col = RecordsService.SORTABLE_COLUMNS.get(sort_by, PATRecord.test_date)
                records.sort(key=lambda r: getattr(r, col.key) or "", reverse=reverse)
            return records[offset:offset + limit], len(records)

        total = query.count()
        sort_col = RecordsService.SORTABLE_COLUMNS.get(sort_by, PATRecord.test_date)
        query = query.order_by(sort_col.desc() if reverse else sort_col.asc(),
                               PATRecord.id.asc())
        return query.offset(offset).limit(limit).all(), total

    # ── Create ─────────────────────────────────────────────────────────

    @staticmethod
    def create_manual(session: Session, data: dict) -> PATRecord:
        """
        Record a test typed in by hand.  asset_id is required and stored
        trimmed and upper-cased.
        """
        asset_id = str(data.get("asset_id", "")).strip().upper()
        if not asset_id:
            raise ValueError("asset_id is required")

        pat_class = str(data.get("pat_class") or MANUAL_CLASS).strip()
        if pat_class not in PAT_CLASSES:
            raise ValueError(f"Unknown PAT class {pat_class!r}")

        raw_date = str(data.get("test_date", "")).strip()
        test_date, inferred = parse_test_date(raw_date)
        if raw_date and inferred:
            raise ValueError(f"Unrecognised test date {raw_date!r}")

        record = PATRecord(
            asset_id=asset_id,
            site=str(data.get("site") or MANUAL_SITE).strip(),
            user=str(data.get("user") or MANUAL_USER).strip(),
            test_date=test_date,
            test_type=str(data.get("test_type", "")).strip(),
            pat_class=pat_class,
            import_batch_id=0,
            date_inferred=False,
        )
        for name in MEASUREMENT_FIELDS:
            value = data.get(name)
            setattr(record, name, empty_to_none(str(value)) if value is not None else None)
        for name in ("visual_result", "iec_fuse"):
            value = getattr(record, name)
            if value is not None:
                setattr(record, name, normalise_pass_fail(value).upper())

        session.add(record)
        session.flush()
        return record

    # ── Delete ─────────────────────────────────────────────────────────

    @staticmethod
    def delete_many(session: Session, record_ids: Iterable[int]) -> int:
        records = RecordsService.get_many(session, record_ids)
        for r in records:
            session.delete(r)
        session.flush()
        return len(records)

    @staticmethod
    def delete_without_asset(session: Session) -> int:
        """Remove records whose asset id has no letter or digit."""
        doomed = [r for r in session.query(PATRecord).all()
                  if not has_usable_asset_id(r.asset_id)]
        for r in doomed:
            session.delete(r)
        session.flush()
        return len(doomed)

    # ── Internal ───────────────────────────────────────────────────────

    @staticmethod
    def _apply_filters(
        query: Query,
        *,
        sites: list[str],
        users: list[str],
        date_from: Optional[date],
        date_to: Optional[date],
        last_import_only: bool,
    ) -> Query:
        if sites:
            query = query.filter(PATRecord.site.in_(sites))
        if users:
            query = query.filter(PATRecord.user.in_(users))
        if date_from:
            query = query.filter(PATRecord.test_date >= _start_of(date_from))
        if date_to:
            # Inclusive: everything before the start of the next day
            query = query.filter(PATRecord.test_date < _start_of(date_to) + timedelta(days=1))
        if last_import_only:
            latest = RecordsService.latest_batch_id(query.session)
            if latest is not None:
                query = query.filter(PATRecord.import_batch_id == latest)
        return query


def _start_of(day: date) -> datetime:
    return datetime(day.year, day.month, day.day)
