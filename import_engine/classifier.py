"""
import_engine.classifier - PAT class inference and test-date parsing.

Class labels match the Inventory's accepted values:
    I, I(IT), II, II(IT), IEC Lead        (None when nothing fits)

"IT" marks an appliance tested through an isolating transformer: no
load reading for class I, no leakage reading for class II.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

import config
from import_engine.field_map import FieldMap

logger = logging.getLogger(__name__)

IEC_FIELDS = ("iec_bond", "iec_insu", "iec_fuse")
LOAD_FIELDS = ("load_va", "load_current")
LEAKAGE_FIELDS = ("substitute_leakage", "earth_leakage", "touch_current")


def infer_pat_class(data: FieldMap) -> Optional[str]:
    if any(getattr(data, name) is not None for name in IEC_FIELDS):
        return "IEC Lead"

    insu_class = (data.insu_class or "").strip()

    if insu_class == "I":
        if not any(data.has(name) for name in LOAD_FIELDS):
            return "I(IT)"
        return "I"

    if insu_class == "II":
        if not any(data.has(name) for name in LEAKAGE_FIELDS):
            return "II(IT)"
        return "II"

    return None


def parse_test_date(raw: str | None) -> tuple[datetime, bool]:
    """
    Parse a tester date (day first, e.g. "5/3/2024", or ISO "2024-03-05").

    Returns (date, inferred).  When no format fits, the current time is
    used and inferred is True so the caller can flag the record.
    """
    text = (raw or "").strip()
    for fmt in config.DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt), False
        except ValueError:
            continue
    logger.debug(f"Unparseable test date {text!r}, using current time")
    return datetime.now(), True
