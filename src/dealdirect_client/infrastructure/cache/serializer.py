from __future__ import annotations

import json
from datetime import date, datetime
from typing import Any


class _Encoder(json.JSONEncoder):
    def default(self, o: object) -> Any:
        if isinstance(o, (datetime, date)):
            return o.isoformat()
        return super().default(o)


def serialize_value(value: Any) -> str:
    return json.dumps({"v": value}, cls=_Encoder)


def deserialize_value(raw: str | bytes | None) -> Any | None:
    if raw is None:
        return None
    return json.loads(raw)["v"]
