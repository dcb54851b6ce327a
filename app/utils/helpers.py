from typing import Any

from flask import request

def json_body() -> dict:
    """Request body as a dict; missing or malformed JSON reads as {}."""
    payload = request.get_json(silent=True)
    return payload if isinstance(payload, dict) else {}

def flag(payload: dict, key: str, default: bool) -> bool:
    value: Any = payload.get(key, default)
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    if value is None:
        return default
    return bool(value)
