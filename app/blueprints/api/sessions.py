from flask import current_app, jsonify

from app.extensions import limiter
from app.services import feedback as svc
from app.services.kv_store import get_store
from . import bp
from app.utils.helpers import flag, json_body


@bp.post("/feedback")
@limiter.limit(lambda: current_app.config["FEEDBACK_RATE_LIMIT"])
def submit_feedback():
    """Classify and store new anonymous feedback; returns its session id."""
    data = json_body()
    result = svc.submit_feedback(
        get_store(),
        data.get("text"),
        category=data.get("category"),
        is_anonymous=flag(data, "isAnonymous", True),
    )
    return jsonify(result), 201


@bp.get("/session/<session_id>")
def get_session(session_id: str):
    return jsonify(svc.get_session(get_store(), session_id)), 200


@bp.post("/session/<session_id>/message")
@limiter.limit(lambda: current_app.config["MESSAGE_RATE_LIMIT"])
def post_message(session_id: str):
    data = json_body()
    message = svc.post_message(
        get_store(),
        session_id,
        data.get("message"),
        is_admin=flag(data, "isAdmin", False),
    )
    return jsonify({"message": message}), 201
