from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class SsrRequest:
    path: str
    revalidate: int | None = None
    timeout_ms: int | None = None
