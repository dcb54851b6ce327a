from flask import current_app, jsonify

from app.services import feedback as svc
from app.services.kv_store import get_store
from . import bp
from app.utils.helpers import json_body

# Bearer tokens on these routes are accepted but not checked here;
# access control belongs to whatever fronts this service.


@bp.get("/admin/dashboard")
def admin_dashboard():
    data = svc.admin_dashboard(
        get_store(),
        recent_limit=current_app.config["RECENT_FEEDBACK_LIMIT"],
    )
    return jsonify(data), 200


@bp.put("/admin/feedback/<session_id>/status")
def update_feedback_status(session_id: str):
    data = json_body()
    svc.update_status(get_store(), session_id, data.get("status"), note=data.get("note"))
    return jsonify({"success": True}), 200
