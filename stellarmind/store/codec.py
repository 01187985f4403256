"""JSON codec that keeps datetimes intact.

Datetimes are written as ``{"__type": "Date", "value": "<iso8601>"}`` and
turned back into aware datetimes on load, so persisted blobs survive a JSON
round trip without losing their types.
"""

import json
from datetime import datetime, timezone
from typing import Any

DATE_TAG = "Date"


def _isoformat(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


def _encode(value: Any) -> Any:
    if isinstance(value, datetime):
        return {"__type": DATE_TAG, "value": _isoformat(value)}
    if isinstance(value, dict):
        return {key: _encode(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_encode(item) for item in value]
    return value


def _decode_hook(obj: dict) -> Any:
    if obj.get("__type") == DATE_TAG and isinstance(obj.get("value"), str):
        return datetime.fromisoformat(obj["value"])
    return obj


def dumps(data: Any, indent: int | None = None) -> str:
    """Serialize plain data (dicts, lists, datetimes, scalars) to tagged JSON."""
    return json.dumps(_encode(data), ensure_ascii=False, indent=indent)


def loads(text: str | bytes) -> Any:
    """Parse tagged JSON, restoring datetimes."""
    return json.loads(text, object_hook=_decode_hook)
