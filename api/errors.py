"""
api.errors - JSON error handlers for the API blueprint.
"""

from flask import abort, jsonify, request
from api import api_bp
from import_engine import UnreadableFileError


def json_object_body() -> dict:
    """Request body as a JSON object; anything else is a 400."""
    data = request.get_json(force=True)
    if not isinstance(data, dict):
        abort(400)
    return data


@api_bp.errorhandler(UnreadableFileError)
def api_unreadable_file(e):
    return jsonify({"error": str(e)}), 400


@api_bp.errorhandler(404)
def api_not_found(_e):
    return jsonify({"error": "not found"}), 404


@api_bp.errorhandler(400)
def api_bad_request(_e):
    return jsonify({"error": "bad request"}), 400


@api_bp.errorhandler(500)
def api_server_error(_e):
    return jsonify({"error": "internal server error"}), 500
