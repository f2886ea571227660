"""
import_engine.units - Measurement clean-up helpers.

The tester prints readings with a trailing unit ("0.09R", "299MEG",
"3.2mA") and pass/fail as single letters.  These helpers bring them to
a canonical textual form; number_from_reading() goes one step further
for the Inventory's numeric columns.
"""

from __future__ import annotations

import re
from typing import Optional

_UNIT_SUFFIX = re.compile(r"\s*(R|Ω|MEG|MΩ|mA|VA|A|ms|DEG)\s*$", re.IGNORECASE)
_NON_NUMERIC = re.compile(r"[^0-9.\-]")

PASS_FAIL_CODES = {"P": "PASS", "F": "FAIL"}


def strip_units(value: str | None) -> str:
    """Remove one trailing unit token: R, Ω, MEG, MΩ, mA, VA, A, ms, DEG."""
    v = (value or "").strip()
    v = _UNIT_SUFFIX.sub("", v, count=1)
    return v.strip()


def normalise_pass_fail(value: str | None) -> str:
    """'P' → 'PASS', 'F' → 'FAIL'; anything else is returned trimmed."""
    v = (value or "").strip()
    return PASS_FAIL_CODES.get(v.upper(), v)


def number_from_reading(value: str | None) -> Optional[float]:
    """
    Parse a tester reading into a float.

    ">299" and "<0.1" yield the bound itself; the bound must be a plain
    number (">299 MEG" is None).  Other readings have their non-numeric
    characters dropped before parsing.  Returns None when nothing
    numeric is left.
    """
    if not value:
        return None
    clean = value.strip()
    if clean[:1] in (">", "<"):
        numeric = clean[1:].strip()
    else:
        numeric = _NON_NUMERIC.sub("", clean)
    try:
        return float(numeric)
    except ValueError:
        return None
