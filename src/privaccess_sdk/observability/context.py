"""
privaccess_sdk.observability.context

Request-scoped logging context for outbound platform calls.

Responsibilities:
- Bind caller metadata into structlog contextvars for the duration of a block.
- Stamp every outbound request with an `x-request-id` and log it at debug level.
"""

from __future__ import annotations

import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import httpx
import structlog

from privaccess_sdk.observability.logging import get_logger

log = get_logger(__name__)

REQUEST_ID_HEADER = "x-request-id"


@contextmanager
def request_context(**fields: Any) -> Iterator[None]:
    """
    Bind `fields` (plus a generated request id when none is given) for every log line
    emitted inside the block, restoring the previous bindings on exit.
    """
    fields.setdefault("request_id", str(uuid.uuid4()))
    tokens = structlog.contextvars.bind_contextvars(**fields)
    try:
        yield
    finally:
        # Avoid leaking context into sibling tasks that share the parent context.
        structlog.contextvars.reset_contextvars(**tokens)


async def stamp_request(request: httpx.Request) -> None:
    # httpx event hook; prefer the id bound by `request_context` for trace continuity.
    bound = structlog.contextvars.get_contextvars()
    request_id = request.headers.get(REQUEST_ID_HEADER) or bound.get("request_id")
    request.headers[REQUEST_ID_HEADER] = request_id or str(uuid.uuid4())
    log.debug(
        "outbound_request",
        method=request.method,
        url=str(request.url.copy_with(query=None)),
        request_id=request.headers[REQUEST_ID_HEADER],
    )


def event_hooks() -> dict[str, list[Any]]:
    return {"request": [stamp_request]}


# --- Module Notes -----------------------------------------------------------
# `PrivAccessClient` installs `event_hooks()` on the shared httpx.AsyncClient it builds;
# callers injecting their own client may install them too.
