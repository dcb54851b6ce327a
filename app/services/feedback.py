"""
Feedback lifecycle over the key-value store.

Key layout:
    feedback:<sessionId>         feedback record
    messages:<sessionId>         list of messages (append-only)
    community:<sessionId>        community post; owns the upvote counter
    trends:<topic>:<YYYY-MM-DD>  {count, sentiment: {Positive, Neutral, Negative}}

Submission writes four keys one after another. Nothing is rolled back if a
later write fails.
"""
from __future__ import annotations

import logging
import secrets
import string
import time
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from app.services.classifier import Classifier, SENTIMENTS, default_classifier
from app.services.errors import NotFoundError, ValidationError
from app.services.kv_store import KeyValueStore

logger = logging.getLogger(__name__)

FEEDBACK_PREFIX = "feedback:"
MESSAGES_PREFIX = "messages:"
COMMUNITY_PREFIX = "community:"
TRENDS_PREFIX = "trends:"

STATUS_RECEIVED = "Received"
STATUS_INVESTIGATING = "Investigating"
STATUS_IN_PROGRESS = "In Progress"
STATUS_RESOLVED = "Resolved"
STATUSES = (STATUS_RECEIVED, STATUS_INVESTIGATING, STATUS_IN_PROGRESS, STATUS_RESOLVED)

PREVIEW_CHARS = 100

_ID_ALPHABET = string.digits + string.ascii_lowercase
_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _iso(dt: datetime) -> str:
    return dt.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _parse_ts(value: Any) -> datetime:
    """ISO-8601 -> aware datetime; unparseable values sort oldest."""
    if not isinstance(value, str) or not value:
        return _EPOCH
    try:
        dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return _EPOCH
    return dt if dt.tzinfo else dt.replace(tzinfo=timezone.utc)


def _new_id(kind: str) -> str:
    suffix = "".join(secrets.choice(_ID_ALPHABET) for _ in range(9))
    return f"{kind}_{int(time.time() * 1000)}_{suffix}"


def generate_session_id() -> str:
    return _new_id("session")


def generate_message_id() -> str:
    return _new_id("msg")


def _require_text(value: Any, message: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(message)
    return value.strip()


def _upvotes(post: Optional[dict]) -> int:
    try:
        return int((post or {}).get("upvotes") or 0)
    except (TypeError, ValueError):
        return 0


def _empty_sentiment() -> Dict[str, int]:
    return {s: 0 for s in SENTIMENTS}


# ---------------------------------------------------------------------------
# Writes
# ---------------------------------------------------------------------------

def submit_feedback(
    store: KeyValueStore,
    text: Any,
    category: Optional[str] = None,
    is_anonymous: bool = True,
    classifier: Optional[Classifier] = None,
) -> dict:
    """
    Classify and persist a new piece of feedback.
    Returns {"sessionId", "analysis": {"topic", "sentiment"}}.
    """
    clean = _require_text(text, "Feedback text is required")
    if not isinstance(category, str) or not category.strip():
        category = None

    analysis = (classifier or default_classifier).classify(text, category)
    session_id = generate_session_id()
    now = _utcnow()
    timestamp = _iso(now)

    store.set(FEEDBACK_PREFIX + session_id, {
        "sessionId": session_id,
        "text": clean,
        "category": analysis.topic,
        "sentiment": analysis.sentiment,
        "timestamp": timestamp,
        "status": STATUS_RECEIVED,
        "isAnonymous": bool(is_anonymous),
    })
    store.set(MESSAGES_PREFIX + session_id, [])
    store.set(COMMUNITY_PREFIX + session_id, {
        "id": session_id,
        "text": clean,
        "category": analysis.topic,
        "sentiment": analysis.sentiment,
        "timestamp": timestamp,
        "upvotes": 0,
        "isVisible": True,
    })
    _bump_trend(store, analysis.topic, analysis.sentiment, now)

    logger.info("feedback submitted session=%s topic=%s sentiment=%s",
                session_id, analysis.topic, analysis.sentiment)
    return {"sessionId": session_id, "analysis": analysis.to_dict()}


def _bump_trend(store: KeyValueStore, topic: str, sentiment: str, now: datetime) -> None:
    key = f"{TRENDS_PREFIX}{topic}:{now.date().isoformat()}"
    bucket = store.get(key) or {"count": 0, "sentiment": _empty_sentiment()}
    bucket["count"] = int(bucket.get("count") or 0) + 1
    counts = bucket.setdefault("sentiment", _empty_sentiment())
    counts[sentiment] = int(counts.get(sentiment) or 0) + 1
    store.set(key, bucket)


def post_message(store: KeyValueStore, session_id: str, text: Any, is_admin: bool = False) -> dict:
    clean = _require_text(text, "Message is required")
    if store.get(FEEDBACK_PREFIX + session_id) is None:
        raise NotFoundError("Session not found")

    messages = store.get(MESSAGES_PREFIX + session_id) or []
    message = {
        "id": generate_message_id(),
        "message": clean,
        "isAdmin": bool(is_admin),
        "timestamp": _iso(_utcnow()),
    }
    messages.append(message)
    store.set(MESSAGES_PREFIX + session_id, messages)
    logger.info("message posted session=%s admin=%s", session_id, message["isAdmin"])
    return message


def upvote(store: KeyValueStore, post_id: str) -> int:
    post = store.get(COMMUNITY_PREFIX + post_id)
    if post is None:
        raise NotFoundError("Post not found")
    post["upvotes"] = _upvotes(post) + 1
    store.set(COMMUNITY_PREFIX + post_id, post)
    return post["upvotes"]


def update_status(store: KeyValueStore, session_id: str, status: Any, note: Any = None) -> dict:
    """Any status may follow any other; Resolved can be reopened."""
    if not isinstance(status, str) or not status.strip():
        raise ValidationError("Status is required")
    if status not in STATUSES:
        raise ValidationError(f"Unknown status {status!r}; expected one of {', '.join(STATUSES)}")

    feedback = store.get(FEEDBACK_PREFIX + session_id)
    if feedback is None:
        raise NotFoundError("Feedback not found")

    previous = feedback.get("status")
    feedback["status"] = status
    if isinstance(note, str) and note.strip():
        feedback["adminNote"] = note.strip()
    feedback["lastUpdated"] = _iso(_utcnow())
    store.set(FEEDBACK_PREFIX + session_id, feedback)

    logger.info("status changed session=%s %s -> %s", session_id, previous, status)
    return feedback


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------

def _community_index(store: KeyValueStore) -> Dict[str, dict]:
    return {k[len(COMMUNITY_PREFIX):]: v for k, v in store.scan_by_prefix(COMMUNITY_PREFIX)}


def _all_feedback(store: KeyValueStore) -> List[dict]:
    posts = _community_index(store)
    rows = []
    for _, fb in store.scan_by_prefix(FEEDBACK_PREFIX):
        fb["upvotes"] = _upvotes(posts.get(fb.get("sessionId")))
        rows.append(fb)
    return rows


def get_session(store: KeyValueStore, session_id: str) -> dict:
    feedback = store.get(FEEDBACK_PREFIX + session_id)
    if feedback is None:
        raise NotFoundError("Session not found")
    # Upvotes live on the community post; expose them read-only here
    feedback["upvotes"] = _upvotes(store.get(COMMUNITY_PREFIX + session_id))
    messages = store.get(MESSAGES_PREFIX + session_id) or []
    return {"feedback": feedback, "messages": messages}


def parse_limit(raw: Any, default: int, maximum: Optional[int] = None) -> int:
    if raw is None or raw == "":
        limit = default
    else:
        try:
            limit = int(raw)
        except (TypeError, ValueError):
            raise ValidationError("limit must be an integer")
    if limit < 0:
        raise ValidationError("limit must be zero or positive")
    if maximum is not None:
        limit = min(limit, maximum)
    return limit


def list_community(store: KeyValueStore, category: Optional[str] = None, limit: int = 20) -> dict:
    if not isinstance(limit, int) or limit < 0:
        raise ValidationError("limit must be zero or positive")

    posts = [
        post for _, post in store.scan_by_prefix(COMMUNITY_PREFIX)
        if post.get("isVisible") and (not category or post.get("category") == category)
    ]
    posts.sort(key=lambda p: (_upvotes(p), _parse_ts(p.get("timestamp"))), reverse=True)
    return {"posts": posts[:limit], "total": len(posts)}


def _trends_by_category(store: KeyValueStore) -> Dict[str, List[dict]]:
    series: Dict[str, List[dict]] = {}
    for key, bucket in store.scan_by_prefix(TRENDS_PREFIX):
        # Topics are free text (explicit categories), so split on the last colon
        topic, sep, day = key[len(TRENDS_PREFIX):].rpartition(":")
        if not sep or not topic or not day or not isinstance(bucket, dict):
            logger.warning("skipping malformed trend bucket key=%s", key)
            continue
        series.setdefault(topic, []).append({
            "date": day,
            "count": int(bucket.get("count") or 0),
            "sentiment": bucket.get("sentiment") or _empty_sentiment(),
        })
    for points in series.values():
        points.sort(key=lambda p: p["date"])
    return series


def admin_dashboard(store: KeyValueStore, recent_limit: int = 10) -> dict:
    feedback = _all_feedback(store)

    sentiment_counts = _empty_sentiment()
    category_counts: Dict[str, int] = {}
    status_counts = {s: 0 for s in STATUSES}
    for fb in feedback:
        sentiment = fb.get("sentiment")
        sentiment_counts[sentiment] = sentiment_counts.get(sentiment, 0) + 1
        category = fb.get("category")
        category_counts[category] = category_counts.get(category, 0) + 1
        status = fb.get("status")
        status_counts[status] = status_counts.get(status, 0) + 1

    recent = sorted(feedback, key=lambda f: _parse_ts(f.get("timestamp")), reverse=True)[:recent_limit]

    return {
        "statistics": {
            "totalFeedback": len(feedback),
            "sentimentCounts": sentiment_counts,
            "categoryCounts": category_counts,
            "statusCounts": status_counts,
        },
        "recentFeedback": recent,
        "trends": _trends_by_category(store),
    }


def _preview(text: str) -> str:
    text = text or ""
    if len(text) > PREVIEW_CHARS:
        return text[:PREVIEW_CHARS] + "..."
    return text


def progress_by_status(store: KeyValueStore, category: Optional[str] = None) -> dict:
    feedback = [fb for _, fb in store.scan_by_prefix(FEEDBACK_PREFIX)]
    selected = [fb for fb in feedback if not category or fb.get("category") == category]

    issues: Dict[str, List[dict]] = {s: [] for s in STATUSES}
    for fb in selected:
        bucket = issues.get(fb.get("status"))
        if bucket is None:
            logger.warning("feedback %s has unknown status %r", fb.get("sessionId"), fb.get("status"))
            continue
        bucket.append({
            "id": fb.get("sessionId"),
            "text": _preview(fb.get("text")),
            "category": fb.get("category"),
            "timestamp": fb.get("timestamp"),
            "adminNote": fb.get("adminNote"),
            "lastUpdated": fb.get("lastUpdated"),
        })

    for bucket in issues.values():
        bucket.sort(key=lambda i: _parse_ts(i.get("timestamp")), reverse=True)

    categories = sorted({fb.get("category") for fb in feedback if fb.get("category")})
    return {"issuesByStatus": issues, "categories": categories}
