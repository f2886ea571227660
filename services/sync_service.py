"""
services.sync_service - Reconcile PAT records with the Inventory registry.

Flow (driven by the caller, usually the /sync endpoints):

    preview()      records + assets → MatchCandidate list (suggestions,
                   duplicate flags) for the user to confirm
    sync_mapped()  confirmed (record, asset) pairs → PATTest rows in the
                   Inventory, one commit for the whole batch

Field mapping PATRecord → PATTest
    test_date                   → date
    overall_result              → result            PASS / FAIL
    user                        → inspector
    validated_pat_class         → pat_class         N/A when unknown
    validated_visual            → visual            N/A when unknown
    iec_bond or bond_result     → earth_continuity  Ω
    iec_insu or insulation      → insulation_resistance  MΩ
    touch_current               → touch_current     mA
    load_va / 1000              → load              kVA (tester prints VA)
    note                        → notes
    substitute_leakage          → substitute_leakage mA
    iec_fuse                    → fuse_rating
    iec_bond                    → iec_bond          Ω
    iec_insu                    → iec_insulation    MΩ
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, Optional, Sequence

from sqlalchemy.orm import Session

from db.models import Asset, PATRecord, PATTest
from import_engine.units import number_from_reading
from services.matching_service import suggest_asset

logger = logging.getLogger(__name__)


@dataclass
class SyncOutcome:
    synced: int = 0
    skipped: int = 0                 # duplicate: same asset, same day
    errors: list[str] = field(default_factory=list)

    @property
    def summary(self) -> str:
        parts = [f"{self.synced} synced"]
        if self.skipped:
            parts.append(f"{self.skipped} duplicate(s) skipped")
        if self.errors:
            parts.append(f"{len(self.errors)} error(s)")
        return ", ".join(parts)

    def to_dict(self) -> dict:
        return {
            "synced": self.synced,
            "skipped": self.skipped,
            "errors": self.errors,
            "summary": self.summary,
        }


@dataclass
class MatchCandidate:
    record: PATRecord
    asset: Optional[Asset] = None
    included: bool = True
    duplicate: bool = False

    @property
    def ready(self) -> bool:
        return self.included and self.asset is not None and not self.duplicate

    def to_dict(self) -> dict:
        return {
            "record": self.record.to_dict(),
            "asset": self.asset.to_dict() if self.asset else None,
            "included": self.included,
            "duplicate": self.duplicate,
            "ready": self.ready,
        }


# ── Duplicate guard ────────────────────────────────────────────────────

def is_duplicate(asset: Asset, test_date: datetime) -> bool:
    """True if the asset already has a PAT test on the same calendar day."""
    day = test_date.date()
    return any(t.date.date() == day for t in (asset.pat_tests or []))


# ── Matching ───────────────────────────────────────────────────────────

def fetch_assets(session: Session) -> list[Asset]:
    return session.query(Asset).order_by(Asset.asset_id).all()


def preview(records: Iterable[PATRecord], assets: Sequence[Asset]) -> list[MatchCandidate]:
    """Pair each record with its suggested asset and flag duplicates."""
    candidates = []
    for record in records:
        asset = suggest_asset(record.asset_id, assets)
        candidates.append(MatchCandidate(
            record=record,
            asset=asset,
            duplicate=asset is not None and is_duplicate(asset, record.test_date),
        ))
    return candidates


# ── Commit ─────────────────────────────────────────────────────────────

def build_pat_test(record: PATRecord) -> PATTest:
    """Convert one PAT record into an Inventory PATTest (not yet attached)."""
    load_va = number_from_reading(record.load_va)

    return PATTest(
        date=record.test_date,
        result=record.overall_result,
        inspector=record.user or "",
        pat_class=record.validated_pat_class,
        visual=record.validated_visual,
        earth_continuity=number_from_reading(_prefer(record.iec_bond, record.bond_result)),
        insulation_resistance=number_from_reading(
            _prefer(record.iec_insu, record.insulation_result)),
        touch_current=number_from_reading(record.touch_current),
        load=load_va / 1000.0 if load_va is not None else None,
        notes=record.note,
        substitute_leakage=number_from_reading(record.substitute_leakage),
        fuse_rating=number_from_reading(record.iec_fuse),
        iec_bond=number_from_reading(record.iec_bond),
        iec_insulation=number_from_reading(record.iec_insu),
    )


def sync_mapped(
    pairs: Iterable[tuple[PATRecord, Asset]],
    session: Session,
) -> SyncOutcome:
    """
    Write confirmed (record, asset) pairs to the Inventory.

    Duplicates are counted in `skipped`, never raised.  All PATTests go
    in one commit; if it fails a single error is reported and `synced`
    keeps the number of tests that were staged.
    """
    outcome = SyncOutcome()

    for record, asset in pairs:
        if is_duplicate(asset, record.test_date):
            logger.info(f"Skipping duplicate: asset {asset.asset_id} "
                        f"already tested on {record.test_date.date()}")
            outcome.skipped += 1
            continue

        test = build_pat_test(record)
        test.asset = asset

        if asset.last_pat_test_date is None or record.test_date > asset.last_pat_test_date:
            asset.last_pat_test_date = record.test_date
            asset.test_status = "Good" if record.overall_result == "PASS" else "Failed"

        session.add(test)
        outcome.synced += 1

    try:
        session.commit()
    except Exception as exc:
        session.rollback()
        logger.error(f"Inventory commit failed: {exc}")
        outcome.errors.append(f"Save failed: {exc}")

    return outcome


def _prefer(primary: Optional[str], fallback: Optional[str]) -> Optional[str]:
    return primary if primary is not None else fallback
