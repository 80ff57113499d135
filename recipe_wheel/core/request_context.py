# recipe_wheel/core/request_context.py
from __future__ import annotations

import contextlib
import contextvars
from typing import Dict, Iterator, Optional

REQUEST_ID_HEADER = "X-Request-ID"

# id of the inbound request being served; outbound API calls carry it too
request_id_ctx: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar(
    "recipe_wheel_request_id", default=None
)


def get_request_id() -> Optional[str]:
    return request_id_ctx.get()


@contextlib.contextmanager
def request_scope(request_id: str) -> Iterator[str]:
    token = request_id_ctx.set(request_id)
    try:
        yield request_id
    finally:
        request_id_ctx.reset(token)


def forwarded_headers() -> Dict[str, str]:
    """Headers to pass on to the recipes API for the request being served."""
    request_id = request_id_ctx.get()
    return {REQUEST_ID_HEADER: request_id} if request_id else {}
