"""
PATDB - Centralised configuration.

All tunables live here.  Every other module imports from config
instead of reading os.environ directly.
"""

from __future__ import annotations
import os
from pathlib import Path


# ── Paths ──────────────────────────────────────────────────────────────
BASE_DIR = Path(__file__).resolve().parent

# ── Databases ──────────────────────────────────────────────────────────
# PAT records imported from tester exports
DB_URL = os.environ.get("PATDB_DB", f"sqlite:///{BASE_DIR / 'patdb.sqlite'}")
# Asset registry (Inventory) - owned by another application, we only
# read assets and append PAT tests to it.
INVENTORY_DB_URL = os.environ.get(
    "PATDB_INVENTORY_DB", f"sqlite:///{BASE_DIR / 'inventory.sqlite'}"
)

# ── Server ─────────────────────────────────────────────────────────────
HOST   = os.environ.get("PATDB_HOST", "0.0.0.0")
PORT   = int(os.environ.get("PATDB_PORT", "5000"))
DEBUG  = os.environ.get("PATDB_DEBUG", "0") == "1"
SECRET = os.environ.get("PATDB_SECRET", "patdb-dev-key-change-in-prod")

# ── Logging ────────────────────────────────────────────────────────────
LOG_LEVEL  = os.environ.get("PATDB_LOG_LEVEL", "INFO").upper()
LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"

# ── Import ─────────────────────────────────────────────────────────────
# When on, a diagnostic-mode row keeps the token that stands where
# VISUAL would be instead of dropping it.
KEEP_DIAG_TOKEN = os.environ.get("PATDB_KEEP_DIAG_TOKEN", "0") == "1"

# Tried in order, day first.  %d and %m accept one or two digits, which
# covers d/M/yyyy, dd/MM/yyyy, d/MM/yyyy and dd/M/yyyy.
DATE_FORMATS = ("%d/%m/%Y", "%Y-%m-%d")

# ── Inventory ──────────────────────────────────────────────────────────
OVERDUE_AFTER_DAYS = 365

# ── Pagination ─────────────────────────────────────────────────────────
API_MAX_LIMIT     = 1000
API_DEFAULT_LIMIT = 100
