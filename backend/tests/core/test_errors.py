"""Error Hierarchy tests — codes, statuses, and public envelopes."""

from tunechat.core.errors import (
    AuthenticationError, ChatGatewayError, ErrorCategory, PersistenceError,
    PolicyError, SearchError, ValidationError,
)


def test_all_errors_share_the_base_class():
    for err in (
        AuthenticationError("x"), PolicyError("http://b.com"),
        ValidationError("bad", field="text"), PersistenceError("down", "insert"),
        SearchError("down", "q"),
    ):
        assert isinstance(err, ChatGatewayError)


def test_authentication_error_hides_reason_from_clients():
    err = AuthenticationError("credential expired")
    assert err.http_status == 401
    assert err.reason == "credential expired"
    assert err.to_event() == {
        "event": "connect_error",
        "data": {"message": "Authentication error", "code": "AUTHENTICATION_ERROR"},
    }
    assert err.to_response()["error"]["message"] == "Authentication error"


def test_policy_error_category_and_status():
    err = PolicyError("http://b.com")
    assert err.category is ErrorCategory.POLICY
    assert err.http_status == 403


def test_validation_error_to_ack():
    err = ValidationError("Message is required", field="text")
    assert err.to_ack() == {"success": False, "message": "Message is required"}


def test_persistence_error_message_includes_operation():
    err = PersistenceError("timeout", "insert")
    assert err.message == "Database insert failed: timeout"
    assert err.http_status == 503


def test_search_error_keeps_query():
    assert SearchError("offline", "queen").query == "queen"
