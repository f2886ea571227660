"""
api.routes_sync - Reconcile PAT records with the Inventory registry.

    GET  /api/v1/inventory/assets   registry assets (choices for mapping)
    POST /api/v1/sync/preview       suggested asset + duplicate flag per record
    POST /api/v1/sync               commit confirmed mappings
"""

from flask import jsonify

from api import api_bp
from api.errors import json_object_body
from db import get_session, get_inventory_session
from db.models import Asset
from services import sync_service
from services.records_service import RecordsService


@api_bp.route("/inventory/assets")
def list_assets():
    """GET /api/v1/inventory/assets - all assets, sorted by asset id."""
    session = get_inventory_session()
    try:
        return jsonify([a.to_dict() for a in sync_service.fetch_assets(session)])
    finally:
        session.close()


@api_bp.route("/sync/preview", methods=["POST"])
def sync_preview():
    """
    POST /api/v1/sync/preview

    JSON body: {"record_ids": [...]}.  Suggestions are hints; nothing
    is written.
    """
    data = json_object_body()
    record_ids = data.get("record_ids") or []

    session = get_session()
    inventory = get_inventory_session()
    try:
        records = RecordsService.get_many(session, record_ids)
        candidates = sync_service.preview(records, sync_service.fetch_assets(inventory))
        return jsonify({
            "included": sum(1 for c in candidates if c.included),
            "ready": sum(1 for c in candidates if c.ready),
            "duplicates": sum(1 for c in candidates if c.duplicate),
            "candidates": [c.to_dict() for c in candidates],
        })
    finally:
        inventory.close()
        session.close()


@api_bp.route("/sync", methods=["POST"])
def sync_commit():
    """
    POST /api/v1/sync

    JSON body: {"pairs": [{"record_id": 1, "asset": 7, "include": true}, …]}
    where "asset" is the Inventory asset's primary key.  Excluded or
    unmapped pairs are ignored; duplicates are counted as skipped.
    """
    data = json_object_body()
    wanted = [
        p for p in (data.get("pairs") or [])
        if p.get("include", True) and p.get("asset") is not None
    ]

    session = get_session()
    inventory = get_inventory_session()
    try:
        records = {r.id: r for r in
                   RecordsService.get_many(session, [p.get("record_id") for p in wanted])}
        pairs = []
        for p in wanted:
            record = records.get(p.get("record_id"))
            asset = inventory.get(Asset, p["asset"])
            if record is None or asset is None:
                return jsonify({"error": f"unknown record or asset in {p}"}), 404
            pairs.append((record, asset))

        outcome = sync_service.sync_mapped(pairs, inventory)
        return jsonify(outcome.to_dict())
    finally:
        inventory.close()
        session.close()
