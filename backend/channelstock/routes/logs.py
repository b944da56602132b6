# Overview: Flask API route for reading the activity log.

from flask import Blueprint, request, jsonify

from ..services.activity_log_service import list_log_entries
from ..time_utils import parse_iso_datetime
from ..validation import ValidationError, coerce_int
from ..decorators import require_role


logs_bp = Blueprint("logs", __name__, url_prefix="/api/logs")


@logs_bp.get("")
@require_role()
def list_logs_route():
    """
    Activity log, newest first.

    Query params:
    - limit: int >= 1 (optional, capped at 500)
    - since: ISO-8601 datetime (inclusive)
    """
    try:
        since = parse_iso_datetime(request.args.get("since"))
    except ValueError:
        return jsonify({"error": "since must be an ISO-8601 datetime"}), 400

    try:
        raw_limit = request.args.get("limit")
        limit = coerce_int("limit", raw_limit) if raw_limit is not None else None
        entries = list_log_entries(limit=limit, since=since)
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400

    return jsonify({"items": [e.to_dict() for e in entries], "count": len(entries)}), 200
