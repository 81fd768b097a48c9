"""JSON payload codec for persisted rows.

JSON has no set type; id sets are the bread and butter of index rows, so sets
and frozensets are tagged on the way out and rebuilt on the way in.
"""

import json
from typing import Any

from kvindex.core.errors import InternalError

_SET_TAG = "__set__"


def _default(value: Any) -> Any:
    if isinstance(value, set | frozenset):
        return {_SET_TAG: sorted(value, key=str)}
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def _object_hook(obj: dict[str, Any]) -> Any:
    if len(obj) == 1 and _SET_TAG in obj:
        return set(obj[_SET_TAG])
    return obj


def encode(row: dict[str, Any]) -> str:
    return json.dumps(row, default=_default, sort_keys=True)


def decode(payload: str) -> dict[str, Any]:
    try:
        row = json.loads(payload, object_hook=_object_hook)
    except json.JSONDecodeError as e:
        raise InternalError.unexpected("corrupt row payload", reason=str(e)) from e
    if not isinstance(row, dict):
        raise InternalError.unexpected("row payload is not an object", payload=payload[:80])
    return row
