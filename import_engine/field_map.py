"""
import_engine.field_map - Parsed fields of one tester row.

FieldMap is a fixed-shape record: every key the row grammar can produce
is a named optional attribute.  Repeated keys within one line keep the
first value written (see FieldMap.set_once).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass
class FieldMap:
    site: Optional[str] = None
    user: Optional[str] = None
    test_date: Optional[str] = None
    asset_id: Optional[str] = None
    test_type: Optional[str] = None
    visual_result: Optional[str] = None
    bond_result: Optional[str] = None
    insulation_result: Optional[str] = None
    substitute_leakage: Optional[str] = None
    touch_current: Optional[str] = None
    earth_leakage: Optional[str] = None
    load_va: Optional[str] = None
    load_current: Optional[str] = None
    iec_fuse: Optional[str] = None
    iec_bond: Optional[str] = None
    iec_insu: Optional[str] = None
    rcd_trip: Optional[str] = None
    note: Optional[str] = None
    # Insulation class printed with INSU / SUBST ("I" or "II").  Only
    # feeds the classifier, never stored on the record.
    insu_class: Optional[str] = None

    def set_once(self, name: str, value: Optional[str]) -> bool:
        """Store value unless the field already holds one.  Returns True if stored."""
        if getattr(self, name) is not None:
            return False
        setattr(self, name, value)
        return True

    def has(self, name: str) -> bool:
        """True when the field holds a non-empty string."""
        return bool(getattr(self, name))


# FieldMap attribute → PATRecord column, for everything copied verbatim
MEASUREMENT_FIELDS: tuple[str, ...] = (
    "visual_result",
    "bond_result",
    "insulation_result",
    "substitute_leakage",
    "touch_current",
    "load_va",
    "load_current",
    "earth_leakage",
    "iec_fuse",
    "iec_bond",
    "iec_insu",
    "rcd_trip",
    "note",
)
