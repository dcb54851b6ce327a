from flask import current_app, jsonify, request

from app.services import feedback as svc
from app.services.kv_store import get_store
from . import bp


@bp.get("/community")
def community_feed():
    """Visible posts, most upvoted first, newest breaking ties."""
    limit = svc.parse_limit(
        request.args.get("limit"),
        default=current_app.config["COMMUNITY_DEFAULT_LIMIT"],
        maximum=current_app.config["COMMUNITY_MAX_LIMIT"],
    )
    # Matched exactly; stored categories are verbatim
    category = request.args.get("category") or None
    return jsonify(svc.list_community(get_store(), category=category, limit=limit)), 200


@bp.post("/community/<post_id>/upvote")
def upvote_post(post_id: str):
    return jsonify({"upvotes": svc.upvote(get_store(), post_id)}), 200
