import pytest
from flask import Flask

from app.utils.helpers import flag, json_body

@pytest.mark.parametrize("value,expected", [
    (True, True), (False, False), ("yes", True), (" ON ", True), ("0", False),
    ("nope", False), (None, True), (1, True), (0, False),
])
def test_flag_coercion(value, expected):
    assert flag({"x": value}, "x", True) is expected

def test_flag_missing_key_uses_default():
    assert flag({}, "isAdmin", False) is False

def test_json_body_ignores_non_object_payloads():
    flask_app = Flask(__name__)
    with flask_app.test_request_context(json={"text": "hi"}):
        assert json_body() == {"text": "hi"}
    with flask_app.test_request_context(json=["text"]):
        assert json_body() == {}
    with flask_app.test_request_context(data="not json", content_type="application/json"):
        assert json_body() == {}
