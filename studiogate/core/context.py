"""
studiogate — Correlation Context
==================================
Holds the correlation ID of the request currently being authorized.

The engine has no HTTP layer of its own; the route handler that calls it
binds the ID it received (or generated) so enforcement logs can be tied back
to the request.
"""

from __future__ import annotations

import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar

# ── Context Variable ────────────────────────────────────────────────────
correlation_id_ctx: ContextVar[str | None] = ContextVar(
    "correlation_id", default=None
)


@contextmanager
def bind_correlation_id(correlation_id: str | None = None) -> Iterator[str]:
    """
    Bind a correlation ID for the duration of the ``with`` block.

    A fresh UUID v4 is generated when none is supplied.
    """
    cid = correlation_id if correlation_id else str(uuid.uuid4())
    token = correlation_id_ctx.set(cid)
    try:
        yield cid
    finally:
        correlation_id_ctx.reset(token)
