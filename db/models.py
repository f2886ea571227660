"""
db.models - SQLAlchemy ORM declarations.

Two independent declarative bases, one per store:

PAT store (Base)
----------------
pat_records  - one row per imported (or manually entered) PAT test.
               Measurements keep the tester's textual form (">299",
               "0.09") so nothing is lost before reconciliation.

Inventory registry (InventoryBase)
----------------------------------
assets       - physical equipment owned by the Inventory application.
pat_tests    - PAT results attached to an asset.  We only ever append
               here (and touch assets.last_pat_test_date / test_status).
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from sqlalchemy import (
    Column, String, Integer, BigInteger, Boolean, DateTime, Float, Text,
    ForeignKey, Index,
)
from sqlalchemy.orm import DeclarativeBase, relationship

import config


PAT_CLASSES = ("I", "I(IT)", "II", "II(IT)", "IEC Lead")
VISUAL_VALUES = ("PASS", "FAIL")
NOT_APPLICABLE = "N/A"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


class Base(DeclarativeBase):
    pass


class InventoryBase(DeclarativeBase):
    pass


# ══════════════════════════════════════════════════════════════════════
#  PAT store
# ══════════════════════════════════════════════════════════════════════

class PATRecord(Base):
    __tablename__ = "pat_records"

    id = Column(Integer, primary_key=True, autoincrement=True)

    # ── Identity ───────────────────────────────────────────────────────
    asset_id  = Column(String(50), nullable=False, index=True, default="")
    site      = Column(String(200), index=True, default="")
    user      = Column(String(200), index=True, default="")    # inspector
    test_date = Column(DateTime, nullable=False, index=True, default=datetime.now)
    test_type = Column(String(50), default="")                 # AUTO / DIAG

    # ── Classification (one of PAT_CLASSES, or NULL) ──────────────────
    pat_class = Column(String(20), nullable=True)

    # ── Measurements, as printed by the tester ────────────────────────
    visual_result      = Column(String(50), nullable=True)     # PASS / FAIL
    bond_result        = Column(String(50), nullable=True)     # Ω
    insulation_result  = Column(String(50), nullable=True)     # MΩ
    substitute_leakage = Column(String(50), nullable=True)     # mA
    touch_current      = Column(String(50), nullable=True)     # mA
    earth_leakage      = Column(String(50), nullable=True)     # mA
    load_va            = Column(String(50), nullable=True)     # VA
    load_current       = Column(String(50), nullable=True)     # A
    iec_fuse           = Column(String(50), nullable=True)     # PASS / FAIL
    iec_bond           = Column(String(50), nullable=True)     # Ω
    iec_insu           = Column(String(50), nullable=True)     # MΩ
    rcd_trip           = Column(String(50), nullable=True)     # ms
    note               = Column(Text, nullable=True)

    # ── Import metadata ────────────────────────────────────────────────
    import_batch_id = Column(BigInteger, nullable=False, index=True, default=0)
    date_inferred   = Column(Boolean, nullable=False, default=False)
    created_at      = Column(DateTime, default=_utcnow)

    __table_args__ = (
        Index("ix_asset_date", "asset_id", "test_date"),
    )

    # ── Derived values ─────────────────────────────────────────────────
    @property
    def overall_result(self) -> str:
        if self.visual_result == "FAIL" or self.iec_fuse == "FAIL":
            return "FAIL"
        return "PASS"

    @property
    def validated_pat_class(self) -> str:
        return self.pat_class if self.pat_class in PAT_CLASSES else NOT_APPLICABLE

    @property
    def validated_visual(self) -> str:
        return self.visual_result if self.visual_result in VISUAL_VALUES else NOT_APPLICABLE

    @property
    def display_bond(self) -> str:
        return self.iec_bond or self.bond_result or "—"

    @property
    def display_insulation(self) -> str:
        return self.iec_insu or self.insulation_result or "—"

    @property
    def display_leakage(self) -> str:
        return self.earth_leakage or self.substitute_leakage or "—"

    # ── Serialisation ──────────────────────────────────────────────────
    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "asset_id": self.asset_id,
            "site": self.site or "",
            "user": self.user or "",
            "test_date": _iso(self.test_date),
            "test_type": self.test_type or "",
            "pat_class": self.pat_class,
            "visual_result": self.visual_result,
            "bond_result": self.bond_result,
            "insulation_result": self.insulation_result,
            "substitute_leakage": self.substitute_leakage,
            "touch_current": self.touch_current,
            "earth_leakage": self.earth_leakage,
            "load_va": self.load_va,
            "load_current": self.load_current,
            "iec_fuse": self.iec_fuse,
            "iec_bond": self.iec_bond,
            "iec_insu": self.iec_insu,
            "rcd_trip": self.rcd_trip,
            "note": self.note,
            "overall_result": self.overall_result,
            "display_bond": self.display_bond,
            "display_insulation": self.display_insulation,
            "display_leakage": self.display_leakage,
            "import_batch_id": self.import_batch_id,
            "date_inferred": bool(self.date_inferred),
        }


# ══════════════════════════════════════════════════════════════════════
#  Inventory registry
# ══════════════════════════════════════════════════════════════════════

class Asset(InventoryBase):
    __tablename__ = "assets"

    id       = Column(Integer, primary_key=True, autoincrement=True)
    asset_id = Column(String(50), nullable=False, index=True)
    brand    = Column(String(200), default="")
    model    = Column(String(200), default="")
    category = Column(String(200), default="")
    description = Column(Text, default="")

    serial       = Column(String(200), nullable=True)
    pat_class    = Column(String(20), nullable=True)
    fuse_rating  = Column(Float, nullable=True)
    power_rating = Column(Float, nullable=True)

    # Cached PAT state, refreshed when a newer test is synced
    last_pat_test_date = Column(DateTime, nullable=True)
    test_status        = Column(String(20), nullable=True)     # Good / Failed

    pat_tests = relationship(
        "PATTest", back_populates="asset",
        cascade="all, delete-orphan", lazy="selectin",
    )

    @property
    def computed_status(self) -> str:
        if self.pat_class and NOT_APPLICABLE.lower() in self.pat_class.lower():
            return NOT_APPLICABLE
        if self.last_pat_test_date is None:
            return "Unknown"
        if self.test_status == "Failed":
            return "Failed"
        cutoff = datetime.now() - timedelta(days=config.OVERDUE_AFTER_DAYS)
        last = self.last_pat_test_date.replace(tzinfo=None)
        return "Overdue" if last < cutoff else "Good"

    @property
    def display_label(self) -> str:
        return f"{self.asset_id} – {self.brand} {self.model}".strip()

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "asset_id": self.asset_id,
            "brand": self.brand or "",
            "model": self.model or "",
            "category": self.category or "",
            "description": self.description or "",
            "pat_class": self.pat_class,
            "last_pat_test_date": _iso(self.last_pat_test_date),
            "test_status": self.test_status,
            "status": self.computed_status,
            "label": self.display_label,
        }


class PATTest(InventoryBase):
    __tablename__ = "pat_tests"

    id        = Column(Integer, primary_key=True, autoincrement=True)
    asset_pk  = Column(Integer,
                       ForeignKey("assets.id", ondelete="CASCADE"),
                       nullable=True, index=True)
    date      = Column(DateTime, nullable=False, default=datetime.now)
    result    = Column(String(10), nullable=False, default="FAIL")   # PASS / FAIL
    inspector = Column(String(200), default="")
    pat_class = Column(String(20), default="")
    notes     = Column(Text, nullable=True)

    visual                = Column(String(10), nullable=False, default=NOT_APPLICABLE)
    earth_continuity      = Column(Float, nullable=True)   # Ω
    insulation_resistance = Column(Float, nullable=True)   # MΩ
    touch_current         = Column(Float, nullable=True)   # mA
    substitute_leakage    = Column(Float, nullable=True)   # mA
    load                  = Column(Float, nullable=True)   # kVA
    polarity              = Column(String(20), nullable=True)
    fuse_rating           = Column(Float, nullable=True)   # A (IEC leads)
    iec_bond              = Column(Float, nullable=True)   # Ω
    iec_insulation        = Column(Float, nullable=True)   # MΩ

    asset = relationship("Asset", back_populates="pat_tests")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "asset_id": self.asset.asset_id if self.asset else None,
            "date": _iso(self.date),
            "result": self.result,
            "inspector": self.inspector or "",
            "pat_class": self.pat_class or "",
            "visual": self.visual,
            "earth_continuity": self.earth_continuity,
            "insulation_resistance": self.insulation_resistance,
            "touch_current": self.touch_current,
            "substitute_leakage": self.substitute_leakage,
            "load": self.load,
            "fuse_rating": self.fuse_rating,
            "iec_bond": self.iec_bond,
            "iec_insulation": self.iec_insulation,
            "notes": self.notes,
        }
