from __future__ import annotations

from contextvars import ContextVar

# Set per incoming page request; forwarded to the backend by ssr_fetch.
request_id_ctx: ContextVar[str] = ContextVar("request_id", default="")
