"""
api.routes_records - /api/v1/records listing, detail, manual entry, delete.
"""

from datetime import date

from flask import request, jsonify

from api import api_bp
from api.errors import json_object_body
from db import get_session
from services.records_service import RecordsService
import config


def _parse_day(raw: str):
    raw = raw.strip()
    if not raw:
        return None
    return date.fromisoformat(raw)


@api_bp.route("/records")
def list_records():
    """
    GET /api/v1/records?site=&user=&date_from=&date_to=&last_import=0|1
                       &hide_no_asset=0|1&sort=test_date&order=desc
                       &limit=100&offset=0

    site and user may repeat.  Dates are YYYY-MM-DD, date_to inclusive.
    """
    sites = [s for s in request.args.getlist("site") if s.strip()]
    users = [u for u in request.args.getlist("user") if u.strip()]
    sort_by = request.args.get("sort", "test_date").strip()
    sort_order = request.args.get("order", "desc").strip()
    last_import = request.args.get("last_import", "0") == "1"
    hide_no_asset = request.args.get("hide_no_asset", "0") == "1"
    try:
        date_from = _parse_day(request.args.get("date_from", ""))
        date_to = _parse_day(request.args.get("date_to", ""))
        limit = min(int(request.args.get("limit", config.API_DEFAULT_LIMIT)),
                    config.API_MAX_LIMIT)
        offset = int(request.args.get("offset", 0))
    except ValueError as exc:
        return jsonify({"error": str(exc)}), 400

    # Validate sort params
    if sort_by not in RecordsService.SORTABLE_COLUMNS:
        sort_by = "test_date"
    if sort_order not in ("asc", "desc"):
        sort_order = "desc"

    session = get_session()
    try:
        records, total = RecordsService.search(
            session, sites=sites, users=users,
            date_from=date_from, date_to=date_to,
            last_import_only=last_import, hide_no_asset=hide_no_asset,
            sort_by=sort_by, sort_order=sort_order,
            limit=limit, offset=offset,
        )
        return jsonify({
            "total": total,
            "offset": offset,
            "limit": limit,
            "records": [r.to_dict() for r in records],
        })
    finally:
        session.close()


@api_bp.route("/records/facets")
def record_facets():
    """GET /api/v1/records/facets → distinct sites and users."""
    session = get_session()
    try:
        return jsonify(RecordsService.facets(session))
    finally:
        session.close()


@api_bp.route("/records/<int:record_id>")
def get_record(record_id: int):
    """GET /api/v1/records/{id}"""
    session = get_session()
    try:
        record = RecordsService.get(session, record_id)
        if not record:
            return jsonify({"error": "not found"}), 404
        return jsonify(record.to_dict())
    finally:
        session.close()


@api_bp.route("/records", methods=["POST"])
def create_record():
    """
    POST /api/v1/records

    JSON body: {asset_id, test_date, site, user, pat_class, visual_result,
    bond_result, insulation_result, …}.  asset_id is required.
    """
    data = json_object_body()
    session = get_session()
    try:
        record = RecordsService.create_manual(session, data)
        session.commit()
        return jsonify(record.to_dict()), 201
    except ValueError as exc:
        session.rollback()
        return jsonify({"error": str(exc)}), 400
    finally:
        session.close()


@api_bp.route("/records", methods=["DELETE"])
def delete_records():
    """DELETE /api/v1/records  (JSON body: {"ids": [...]})"""
    data = json_object_body()
    ids = data.get("ids") or []
    session = get_session()
    try:
        deleted = RecordsService.delete_many(session, ids)
        session.commit()
        return jsonify({"deleted": deleted})
    except Exception as exc:
        session.rollback()
        return jsonify({"error": str(exc)}), 400
    finally:
        session.close()


@api_bp.route("/records/no-asset", methods=["DELETE"])
def delete_records_without_asset():
    """DELETE /api/v1/records/no-asset - drop records with no usable asset id."""
    session = get_session()
    try:
        deleted = RecordsService.delete_without_asset(session)
        session.commit()
        return jsonify({"deleted": deleted})
    except Exception as exc:
        session.rollback()
        return jsonify({"error": str(exc)}), 400
    finally:
        session.close()
