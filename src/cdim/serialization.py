"""
Serialization helpers between canonical trees and plain Python data.

Provides the JSON codec and the dict/list bridge the YAML provider uses.
This module intentionally keeps the Python representation plain:
dict for Mapping, list for Sequence, primitives for Scalar.
"""
from __future__ import annotations

import datetime
import json
from typing import Any, List, Tuple

from cdim.errors import DecodeError
from cdim.model import Mapping, Scalar, Sequence, Value, merge_entry, scalar_text


def value_to_python(value: Value) -> Any:
    if isinstance(value, Scalar):
        return value.value
    if isinstance(value, Mapping):
        return {k: value_to_python(v) for k, v in value.entries}
    if isinstance(value, Sequence):
        return [value_to_python(v) for v in value.items]
    raise TypeError(f"Unsupported Value type: {type(value)}")


def value_from_python(data: Any) -> Value:
    if isinstance(data, Value):
        return data
    if isinstance(data, dict):
        mapping = Mapping()
        for k, v in data.items():
            key = k if isinstance(k, str) else scalar_text(k)
            merge_entry(mapping, key, value_from_python(v))
        return mapping
    if isinstance(data, (list, tuple)):
        return Sequence([value_from_python(v) for v in data])
    if data is None or isinstance(data, (str, bool, int, float)):
        return Scalar(data)
    if isinstance(data, (datetime.date, datetime.datetime)):
        return Scalar(data.isoformat())
    return Scalar(str(data))


def _mapping_from_pairs(pairs: List[Tuple[str, Any]]) -> Mapping:
    # json.loads would silently keep the last duplicate; fold them instead
    mapping = Mapping()
    for k, v in pairs:
        merge_entry(mapping, k, value_from_python(v))
    return mapping


def value_to_json(value: Value, align: bool = True) -> str:
    data = value_to_python(value)
    if align:
        return json.dumps(data, indent=2, ensure_ascii=False)
    return json.dumps(data, separators=(",", ":"), ensure_ascii=False)


def value_from_json(text: str) -> Value:
    try:
        data = json.loads(text, object_pairs_hook=_mapping_from_pairs)
    except json.JSONDecodeError as e:
        raise DecodeError("json", str(e)) from e
    return value_from_python(data)


__all__ = ["value_to_python", "value_from_python", "value_to_json", "value_from_json"]
