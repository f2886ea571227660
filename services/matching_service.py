"""
services.matching_service - Suggest an Inventory asset for a PAT record.

Suggestions are hints only: the user confirms or overrides every
mapping before anything is written to the Inventory.
"""

from __future__ import annotations

from typing import Iterable, Optional

from db.models import Asset


def strip_leading_zeros(asset_id: str) -> str:
    """'0007' → '7'; an all-zero or empty id becomes '0'."""
    return asset_id.lstrip("0") or "0"


def suggest_asset(asset_id: str, assets: Iterable[Asset]) -> Optional[Asset]:
    """
    Return the first asset (in the given order) whose id matches the
    record's id, tolerating leading-zero differences ("0007" ↔ "7" ↔ "07").
    No ranking: with several candidates the earliest one wins.

    Only the record's id falls back to "0" when all zeros; an all-zero
    candidate strips to "" and matches on its raw id alone.
    """
    clean = strip_leading_zeros(asset_id)
    for asset in assets:
        if (asset.asset_id == asset_id
                or asset.asset_id == clean
                or asset.asset_id.lstrip("0") == clean):
            return asset
    return None
