"""
Canonical Value Model

Defines the single intermediate representation every codec converts to and from.

A canonical tree is a closed sum type of three variants:
    - Scalar   (string, number, boolean or null)
    - Mapping  (ordered key/value entries, keys unique)
    - Sequence (ordered list of values, heterogeneous allowed)

ARCHITECTURAL RULE:
    These objects:
        - Know nothing about JSON/YAML/XML/CSV/Emmet syntax
        - Are built fresh for every conversion and then discarded
        - Represent structure, not formatting

Codecs match on the three variants explicitly and raise TypeError for
anything else. There is no fourth variant.
"""

import copy
import re
from abc import ABC
from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Tuple, Union

ScalarType = Union[str, int, float, bool, None]

_STRICT_NUMBER_RE = re.compile(r"-?(0|[1-9]\d*)(\.\d*[1-9])?")
_LOOSE_NUMBER_RE = re.compile(r"[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?")
_INTEGER_RE = re.compile(r"[+-]?\d+")


class Value(ABC):
    """
    Base class for all canonical tree nodes.

    This is intentionally minimal.
    It exists to give the three variants a common type.

    DO NOT:
        - Add format-specific rendering here (belongs in codecs)
        - Add key rewriting here (belongs in transforms)

    This class is structure only.
    """
    pass


def _kind(value: ScalarType) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    return "string"


@dataclass(frozen=True, eq=False)
class Scalar(Value):
    """
    Represents a leaf value.

    Examples:
        - "John"
        - 30
        - 59.99
        - True
        - None

    Properties:
        value: The primitive value (str, int, float, bool or None)

    IMPORTANT:
        Equality is kind-aware: Scalar(True) != Scalar(1), while
        Scalar(1) == Scalar(1.0) because both are numbers.
        This object is immutable (frozen=True).
    """

    value: ScalarType = None

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Scalar):
            return NotImplemented
        return _kind(self.value) == _kind(other.value) and self.value == other.value

    def __hash__(self) -> int:
        return hash((_kind(self.value), self.value))

    @property
    def text(self) -> str:
        """Canonical string form (see scalar_text)."""
        return scalar_text(self.value)


@dataclass(eq=False)
class Mapping(Value):
    """
    Represents an ordered set of keyed entries.

    Example:
        {"name": "John", "address": {"city": "Sofia"}}

    Becomes:
        Mapping([
            ("name", Scalar("John")),
            ("address", Mapping([("city", Scalar("Sofia"))])),
        ])

    Properties:
        entries: List of (key, Value) pairs

    INVARIANTS:
        - Keys are unique within a mapping
        - Anything that would introduce a duplicate key must go through
          merge(), which folds the values into a Sequence
        - Insertion order is kept for output but ignored by equality
    """

    entries: List[Tuple[str, Value]] = field(default_factory=list)

    def __post_init__(self) -> None:
        seen = set()
        for key, _ in self.entries:
            if key in seen:
                raise ValueError(f"Duplicate key in mapping: {key!r}")
            seen.add(key)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Mapping):
            return NotImplemented
        return len(self.entries) == len(other.entries) and dict(self.entries) == dict(other.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def __contains__(self, key: object) -> bool:
        return any(k == key for k, _ in self.entries)

    def __iter__(self) -> Iterator[str]:
        return iter(self.keys())

    def keys(self) -> List[str]:
        return [k for k, _ in self.entries]

    def values(self) -> List[Value]:
        return [v for _, v in self.entries]

    def items(self) -> List[Tuple[str, Value]]:
        return list(self.entries)

    def get(self, key: str, default: Optional[Value] = None) -> Optional[Value]:
        """
        Retrieve the value stored under a key.

        Args:
            key: Entry key

        Returns:
            Value or default if the key is absent
        """
        for k, v in self.entries:
            if k == key:
                return v
        return default

    def set(self, key: str, value: Value) -> None:
        """Replace the value under key in place, or append a new entry."""
        for i, (k, _) in enumerate(self.entries):
            if k == key:
                self.entries[i] = (key, value)
                return
        self.entries.append((key, value))

    def merge(self, key: str, value: Value) -> None:
        """Add an entry, folding a key collision into a Sequence."""
        merge_entry(self, key, value)


@dataclass(eq=False)
class Sequence(Value):
    """
    Represents an ordered list of values.

    Elements may mix Scalars, Mappings and nested Sequences.
    When emitted as rows, only Mapping elements carry columns.

    Properties:
        items: List of Value
    """

    items: List[Value] = field(default_factory=list)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Sequence):
            return NotImplemented
        return self.items == other.items

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self) -> Iterator[Value]:
        return iter(self.items)

    def __getitem__(self, index: int) -> Value:
        return self.items[index]


def merge_entry(mapping: Mapping, key: str, value: Value) -> None:
    """
    Insert key into mapping without breaking key uniqueness.

    - key absent: appended as a new entry
    - existing value is a Sequence: value is appended to it
    - otherwise: the entry becomes Sequence([existing, value])
    """
    if key not in mapping:
        mapping.entries.append((key, value))
        return
    existing = mapping.get(key)
    if isinstance(existing, Sequence):
        existing.items.append(value)
    else:
        mapping.set(key, Sequence([existing, value]))


def scalar_text(value: ScalarType) -> str:
    """
    Render a scalar the way every text format sees it.

    Booleans become true/false, None becomes null, integral floats
    drop their fractional part (30.0 -> "30").
    """
    if value is None:
        return "null"
    if value is True:
        return "true"
    if value is False:
        return "false"
    if isinstance(value, float) and value.is_integer() and abs(value) < 1e16:
        return str(int(value))
    return str(value)


def coerce_number(text: str, strict: bool = True) -> ScalarType:
    """
    Turn numeric-looking text into a number.

    Args:
        text: Raw leaf text
        strict: When True only canonical decimals convert ("42", "-1.5");
            "01", "1.50" and "1e3" stay text. When False the trimmed text
            may be any decimal or exponent literal ("+5", " 1e3 ").

    Returns:
        int, float, or the original text unchanged
    """
    candidate = text if strict else text.strip()
    pattern = _STRICT_NUMBER_RE if strict else _LOOSE_NUMBER_RE
    if not candidate or not pattern.fullmatch(candidate):
        return text
    if _INTEGER_RE.fullmatch(candidate):
        return int(candidate)
    return float(candidate)


def clone(value: Value) -> Value:
    """Deep copy a tree so no two parents share a node."""
    return copy.deepcopy(value)


def is_empty_mapping(value: Value) -> bool:
    return isinstance(value, Mapping) and len(value) == 0


__all__ = [
    "ScalarType",
    "Value",
    "Scalar",
    "Mapping",
    "Sequence",
    "merge_entry",
    "scalar_text",
    "coerce_number",
    "clone",
    "is_empty_mapping",
]
