"""Structured logging helpers (PII-safe).

Log records carry opaque ids and request routing only. Member names, emails
and register numbers stay out of ``extra``.
"""

from typing import Any

from fastapi import Request


REQUEST_ID_HEADER = "X-Request-ID"


def build_log_context(
    *,
    user_id: Any = None,
    list_id: Any = None,
    person_id: Any = None,
    request_id: str | None = None,
    route: str | None = None,
    method: str | None = None,
) -> dict[str, Any]:
    """Return an ``extra`` dict holding only the fields that were given."""
    fields = {
        "user_id": user_id,
        "list_id": list_id,
        "person_id": person_id,
        "request_id": request_id,
        "route": route,
        "method": method,
    }
    return {key: str(value) for key, value in fields.items() if value}


def request_log_context(request: Request, user_id: Any = None) -> dict[str, Any]:
    """Log context for an in-flight request (path, method, caller's request id)."""
    return build_log_context(
        user_id=user_id,
        request_id=request.headers.get(REQUEST_ID_HEADER),
        route=request.url.path,
        method=request.method,
    )
