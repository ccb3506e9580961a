"""Tests for structured logging helpers."""

import uuid

from starlette.requests import Request

from appendlist_api.core.structured_logging import build_log_context, request_log_context


def test_build_log_context_includes_only_provided_fields():
    list_id = uuid.uuid4()
    context = build_log_context(
        user_id="user-1",
        list_id=list_id,
        request_id="req-1",
        route="/append-lists",
        method="GET",
    )

    assert context == {
        "user_id": "user-1",
        "list_id": str(list_id),
        "request_id": "req-1",
        "route": "/append-lists",
        "method": "GET",
    }


def test_build_log_context_ignores_empty_fields():
    context = build_log_context(
        user_id="",
        list_id=None,
        request_id="req-1",
    )

    assert context == {"request_id": "req-1"}


def test_request_log_context_reads_route_and_request_id():
    request = Request(
        {
            "type": "http",
            "method": "DELETE",
            "path": "/append-lists/abc",
            "headers": [(b"x-request-id", b"req-9")],
            "query_string": b"",
        }
    )

    assert request_log_context(request, user_id="user-1") == {
        "user_id": "user-1",
        "request_id": "req-9",
        "route": "/append-lists/abc",
        "method": "DELETE",
    }
