from flask import current_app, json, jsonify, request
from werkzeug.exceptions import HTTPException

from app.services.errors import ServiceError
from . import bp

# Generic client-facing text for 5xx, per endpoint; details only go to the log
_FAILURE_MESSAGES = {
    "api.submit_feedback": "Failed to submit feedback",
    "api.get_session": "Failed to get session",
    "api.post_message": "Failed to send message",
    "api.community_feed": "Failed to get community feed",
    "api.upvote_post": "Failed to upvote post",
    "api.admin_dashboard": "Failed to get admin dashboard data",
    "api.update_feedback_status": "Failed to update feedback status",
    "api.progress": "Failed to get progress data",
}


def _failure_message() -> str:
    return _FAILURE_MESSAGES.get(request.endpoint, "Internal server error")


@bp.errorhandler(ServiceError)
def handle_service_error(e: ServiceError):
    if e.status_code >= 500:
        current_app.logger.error("%s %s failed: %s", request.method, request.path, e)
        return jsonify({"error": _failure_message()}), e.status_code
    return jsonify({"error": str(e)}), e.status_code


@bp.errorhandler(Exception)
def handle_unexpected(e: Exception):
    if isinstance(e, HTTPException):
        # Keep the exception's own headers (Allow, Retry-After), swap the body for JSON
        response = e.get_response()
        response.data = json.dumps({"error": e.description or e.name})
        response.content_type = "application/json"
        return response
    current_app.logger.exception("%s %s failed", request.method, request.path)
    return jsonify({"error": _failure_message()}), 500
