"""
Post-decode passes over a canonical tree.

Two passes run between decoding and encoding, in this order:
    1. transform_keys      - rename every mapping key by case convention
    2. apply_replacements  - rename exact keys, substitute exact scalar text

Both passes build a new tree. When a rename makes two keys equal, the
values are folded into a Sequence rather than one overwriting the other.
"""

import re
from typing import Callable, Dict

from cdim.model import Mapping, Scalar, Sequence, Value, merge_entry
from cdim.settings import CaseMode

_CAMEL_RE = re.compile(r"[-_]+([^\W_])")
_UPPER_RE = re.compile(r"[A-Z]")


def to_camel(key: str) -> str:
    """first_name / first-name -> firstName"""
    return _CAMEL_RE.sub(lambda m: m.group(1).upper(), key)


def to_snake(key: str) -> str:
    """firstName -> first_name"""
    return _UPPER_RE.sub(lambda m: "_" + m.group(0).lower(), key)


def to_upper(key: str) -> str:
    return key.upper()


CASE_FUNCTIONS: Dict[CaseMode, Callable[[str], str]] = {
    CaseMode.NONE: lambda key: key,
    CaseMode.UPPER: to_upper,
    CaseMode.CAMEL: to_camel,
    CaseMode.SNAKE: to_snake,
}


def _rename_keys(value: Value, rename: Callable[[str], str]) -> Value:
    if isinstance(value, Mapping):
        renamed = Mapping()
        for key, child in value.entries:
            merge_entry(renamed, rename(key), _rename_keys(child, rename))
        return renamed
    if isinstance(value, Sequence):
        return Sequence([_rename_keys(item, rename) for item in value.items])
    if isinstance(value, Scalar):
        return value
    raise TypeError(f"Unsupported Value type: {type(value)}")


def transform_keys(value: Value, case_mode: CaseMode) -> Value:
    """
    Rewrite every mapping key with the case function for case_mode.

    Scalars and sequence elements are untouched except that nested
    mappings inside them are rewritten too.
    """
    return _rename_keys(value, CASE_FUNCTIONS[case_mode])


def apply_replacements(
    value: Value,
    tag_replacements: Dict[str, str],
    value_replacements: Dict[str, str],
) -> Value:
    """
    Substitute exact-match keys and scalar values.

    Args:
        value: Tree to rewrite
        tag_replacements: Key -> new key (an empty replacement keeps the key)
        value_replacements: Scalar text -> new text. Matching uses the
            scalar's text form, so the number 10 matches "10"; the
            replacement is always a string.

    Returns:
        Rewritten tree (the input itself when both maps are empty)
    """
    if not tag_replacements and not value_replacements:
        return value

    def walk(node: Value) -> Value:
        if isinstance(node, Mapping):
            out = Mapping()
            for key, child in node.entries:
                merge_entry(out, tag_replacements.get(key) or key, walk(child))
            return out
        if isinstance(node, Sequence):
            return Sequence([walk(item) for item in node.items])
        if isinstance(node, Scalar):
            replacement = value_replacements.get(node.text)
            return node if replacement is None else Scalar(replacement)
        raise TypeError(f"Unsupported Value type: {type(node)}")

    return walk(value)


__all__ = [
    "CASE_FUNCTIONS",
    "to_camel",
    "to_snake",
    "to_upper",
    "transform_keys",
    "apply_replacements",
]
