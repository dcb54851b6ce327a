from flask import jsonify, request

from app.services import feedback as svc
from app.services.kv_store import get_store
from . import bp


@bp.get("/progress")
def progress():
    # Matched exactly; stored categories are verbatim
    category = request.args.get("category") or None
    return jsonify(svc.progress_by_status(get_store(), category=category)), 200
