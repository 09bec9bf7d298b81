"""
CSV codec (Flatten/unflatten: canonical tree <-> rows and columns).

CSV Format:
    person.name,person.age
    John,30

Syntax Notes:
    - Nested mappings flatten to dot-joined column names (a.b.c)
    - Sequence values stay whole in one cell (elements comma-joined)
    - The column set is the first-seen union of every row's keys
    - Decoding splits column names on '.' and coerces numeric cells
    - Quoted cells are un-escaped on decode, so encode output reads back
"""

import csv
import warnings
from io import StringIO
from typing import Dict, List

from cdim.errors import DecodeError, EncodeError
from cdim.model import Mapping, Scalar, Sequence, Value, coerce_number, scalar_text
from cdim.serialization import value_to_json


def flatten_record(record: Mapping, prefix: str = "") -> Dict[str, Value]:
    """
    Flatten nested mappings into dot-path keys.

    Example:
        {user: {name: "Alice"}}  ->  {"user.name": "Alice"}

    Sequence values are kept as-is under their key.
    """
    flat: Dict[str, Value] = {}
    for key, value in record.entries:
        path = f"{prefix}.{key}" if prefix else key
        if isinstance(value, Mapping):
            flat.update(flatten_record(value, path))
        else:
            flat[path] = value
    return flat


def unflatten_record(flat: Dict[str, str]) -> Mapping:
    """
    Rebuild nested mappings from dot-path keys.

    Example:
        {"user.name": "Alice", "user.age": "30"}  ->  {user: {name: "Alice", age: 30}}

    Raises:
        DecodeError: If one column is both a leaf and a parent (a and a.b)
    """
    root = Mapping()
    for key, text in flat.items():
        parts = key.split(".")
        node = root
        for part in parts[:-1]:
            child = node.get(part)
            if child is None:
                child = Mapping()
                node.set(part, child)
            elif not isinstance(child, Mapping):
                raise DecodeError("csv", f"column {key!r} conflicts with a value column above it")
            node = child
        leaf = parts[-1]
        if leaf in node:
            raise DecodeError("csv", f"column {key!r} conflicts with a nested column below it")
        node.set(leaf, Scalar(coerce_number(text, strict=False)))
    return root


def _element_text(value: Value) -> str:
    if isinstance(value, Scalar):
        return "" if value.value is None else scalar_text(value.value)
    if isinstance(value, Sequence):
        return ",".join(_element_text(v) for v in value.items)
    if isinstance(value, Mapping):
        return value_to_json(value, align=False)
    raise TypeError(f"Unsupported Value type: {type(value)}")


def _cell_text(value: Value) -> str:
    if isinstance(value, Scalar) and value.value is None:
        return ""
    return _element_text(value)


def encode_csv(value: Value) -> str:
    """
    Render a canonical tree as CSV text.

    Args:
        value: A Mapping (one row) or a Sequence of Mappings (many rows)

    Returns:
        Header line plus one line per row, joined by newlines

    Raises:
        EncodeError: If no row contributes a column
    """
    rows = value.items if isinstance(value, Sequence) else [value]

    flat_rows: List[Dict[str, Value]] = []
    for row_num, row in enumerate(rows, start=1):
        if isinstance(row, Mapping):
            flat_rows.append(flatten_record(row))
        else:
            warnings.warn(f"Row {row_num} is not a mapping and has no columns", UserWarning)
            flat_rows.append({})

    columns: List[str] = []
    seen = set()
    for flat in flat_rows:
        for key in flat:
            if key not in seen:
                seen.add(key)
                columns.append(key)
    if not columns:
        raise EncodeError("csv", "no columns")

    buffer = StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(columns)
    for flat in flat_rows:
        writer.writerow([_cell_text(flat[c]) if c in flat else "" for c in columns])

    text = buffer.getvalue()
    return text[:-1] if text.endswith("\n") else text


def decode_csv(text: str) -> Value:
    """
    Parse CSV text into a canonical tree.

    Args:
        text: CSV with a header row

    Returns:
        Mapping if there is exactly one data row, otherwise a Sequence

    Raises:
        DecodeError: If the header is missing, blank or duplicated,
            or the text is not valid CSV
    """
    source = text.strip()
    if not source:
        raise DecodeError("csv", "header row is missing")

    try:
        rows = list(csv.reader(StringIO(source)))
    except csv.Error as e:
        raise DecodeError("csv", str(e)) from e

    columns = [c.strip() for c in rows[0]]
    if any(not c for c in columns):
        raise DecodeError("csv", "header contains a blank column name")
    duplicates = sorted({c for c in columns if columns.count(c) > 1})
    if duplicates:
        raise DecodeError("csv", f"duplicate columns in header: {duplicates}")

    records = []
    for row_num, cells in enumerate(rows[1:], start=2):
        if not cells:
            continue
        if len(cells) > len(columns):
            warnings.warn(
                f"Row {row_num} has {len(cells)} cells but the header has "
                f"{len(columns)} columns; extra cells ignored",
                UserWarning,
            )
        flat = {c: cells[i] if i < len(cells) else "" for i, c in enumerate(columns)}
        records.append(unflatten_record(flat))

    if len(records) == 1:
        return records[0]
    return Sequence(records)


__all__ = [
    "flatten_record",
    "unflatten_record",
    "encode_csv",
    "decode_csv",
]
