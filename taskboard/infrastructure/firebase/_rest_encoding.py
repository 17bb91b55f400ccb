"""Conversion between Python values and Firestore REST typed values.

Only the types task and user documents use are supported: null, bool,
int, float, str, UTC datetime, lists and nested maps.
"""

from collections.abc import Callable
from datetime import datetime
from typing import Any

from taskboard.shared.utils.datetime import ensure_utc

_TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%S.%fZ"


def _encode_value(v: Any) -> dict:
    """Wrap v in its Firestore typed-value object (bool is checked before int)."""
    if v is None:
        return {"nullValue": None}
    if isinstance(v, bool):
        return {"booleanValue": v}
    if isinstance(v, int):
        return {"integerValue": str(v)}
    if isinstance(v, float):
        return {"doubleValue": v}
    if isinstance(v, datetime):
        return {"timestampValue": ensure_utc(v).strftime(_TIMESTAMP_FORMAT)}
    if isinstance(v, str):
        return {"stringValue": v}
    if isinstance(v, (list, tuple)):
        return {"arrayValue": {"values": [_encode_value(x) for x in v]}}
    if isinstance(v, dict):
        return {"mapValue": {"fields": {k: _encode_value(x) for k, x in v.items()}}}
    raise TypeError(f"Unsupported Firestore value type: {type(v)}")


def encode_document(data: dict[str, Any]) -> dict:
    """Convert a Python dict to a Firestore REST Document body ({"fields": ...})."""
    return {"fields": {k: _encode_value(v) for k, v in data.items()}}


def _parse_timestamp(raw: str) -> datetime:
    # Firestore sends up to nanoseconds; fromisoformat accepts at most microseconds.
    raw = raw.replace("Z", "+00:00")
    if "." in raw:
        head, _, rest = raw.partition(".")
        frac, sign, tz = rest.partition("+")
        raw = f"{head}.{frac[:6].ljust(6, '0')}{sign}{tz}"
    return datetime.fromisoformat(raw)


_SCALAR_DECODERS: dict[str, Callable[[Any], Any]] = {
    "nullValue": lambda _: None,
    "booleanValue": bool,
    "integerValue": int,
    "doubleValue": float,
    "stringValue": str,
    "timestampValue": _parse_timestamp,
    # Document references (e.g. __name__) decode to the bare document id.
    "referenceValue": lambda ref: ref.rsplit("/", 1)[-1],
}


def _decode_value(obj: dict) -> Any:
    for kind, decode in _SCALAR_DECODERS.items():
        if kind in obj:
            return decode(obj[kind])
    if "arrayValue" in obj:
        return [_decode_value(x) for x in obj["arrayValue"].get("values") or []]
    if "mapValue" in obj:
        return decode_document(obj["mapValue"].get("fields"))
    return None


def decode_document(fields: dict | None) -> dict:
    """Convert a Firestore Document "fields" map to a Python dict."""
    if not fields:
        return {}
    return {k: _decode_value(v) for k, v in fields.items()}
