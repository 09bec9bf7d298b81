"""
XML codec (canonical tree <-> element markup).

Encoding rules:
    - Mapping  -> <tag> with one child element per entry, indented two spaces
    - Scalar   -> <tag>text</tag>
    - Sequence -> the same tag repeated once per element
    - A "#text" entry (any case) -> character data inside its parent
    - A root Sequence is wrapped as <root><record>...</record>...</root>
    - A root Mapping with a single non-sequence entry uses that key as the
      document element; any other root is wrapped in a synthetic <root>

Decoding rules:
    - A leaf element with text becomes a Scalar (numeric text -> number)
    - A leaf element without text becomes an empty Mapping
    - Repeated child tags collapse into a Sequence
    - Mixed-content text is kept under "#text"
    - Attributes and comments are ignored
    - The result is always {document_tag: value}
"""

import re
import xml.etree.ElementTree as ET
from typing import List
from xml.sax.saxutils import escape

from cdim.errors import DecodeError, EncodeError
from cdim.model import Mapping, Scalar, Sequence, Value, coerce_number, merge_entry

ROOT_TAG = "root"
RECORD_TAG = "record"
TEXT_KEY = "#text"

_TAG_RE = re.compile(r"[A-Za-z_][\w.-]*")


def _check_tag(tag: str) -> str:
    if not _TAG_RE.fullmatch(tag):
        raise EncodeError("xml", f"key {tag!r} is not a valid element name")
    return tag


def _render_text(value: Value, depth: int, lines: List[str], align: bool) -> None:
    # "#text" entries are written as character data, not as an element
    pad = "  " * depth if align else ""
    items = value.items if isinstance(value, Sequence) else [value]
    for item in items:
        if not isinstance(item, Scalar):
            raise EncodeError("xml", f"{TEXT_KEY} content must be text, got {type(item).__name__}")
        lines.append(f"{pad}{escape(item.text)}")


def _render(value: Value, tag: str, depth: int, lines: List[str], align: bool) -> None:
    pad = "  " * depth if align else ""

    if isinstance(value, Scalar):
        lines.append(f"{pad}<{tag}>{escape(value.text)}</{tag}>")

    elif isinstance(value, Sequence):
        for item in value.items:
            _render(item, tag, depth, lines, align)

    elif isinstance(value, Mapping):
        if len(value) == 0:
            lines.append(f"{pad}<{tag}></{tag}>")
            return
        lines.append(f"{pad}<{tag}>")
        for key, child in value.entries:
            if key.lower() == TEXT_KEY:
                _render_text(child, depth + 1, lines, align)
            else:
                _render(child, _check_tag(key), depth + 1, lines, align)
        lines.append(f"{pad}</{tag}>")

    else:
        raise TypeError(f"Unsupported Value type: {type(value)}")


def encode_xml(value: Value, align: bool = True) -> str:
    """
    Render a canonical tree as XML.

    Args:
        value: Tree to render
        align: Indent two spaces per level and break lines; when False the
            same document is emitted on one line

    Returns:
        XML document text (no declaration, no trailing newline)

    Raises:
        EncodeError: If a key is not a valid element name
    """
    lines: List[str] = []

    if isinstance(value, Sequence):
        lines.append(f"<{ROOT_TAG}>")
        for item in value.items:
            _render(item, RECORD_TAG, 1, lines, align)
        lines.append(f"</{ROOT_TAG}>")
    elif isinstance(value, Mapping) and len(value) == 1 and not isinstance(value.values()[0], Sequence):
        key, child = value.entries[0]
        _render(child, _check_tag(key), 0, lines, align)
    else:
        _render(value, ROOT_TAG, 0, lines, align)

    return ("\n" if align else "").join(lines)


def _local_name(tag: str) -> str:
    # "{namespace}name" -> "name"
    return tag.rsplit("}", 1)[-1]


def _element_value(element: ET.Element) -> Value:
    children = list(element)
    text = (element.text or "").strip()

    if not children:
        if text:
            return Scalar(coerce_number(text))
        return Mapping()

    mapping = Mapping()
    if text:
        merge_entry(mapping, TEXT_KEY, Scalar(coerce_number(text)))
    for child in children:
        merge_entry(mapping, _local_name(child.tag), _element_value(child))
        tail = (child.tail or "").strip()
        if tail:
            merge_entry(mapping, TEXT_KEY, Scalar(coerce_number(tail)))
    return mapping


def decode_xml(text: str) -> Mapping:
    """
    Parse XML into a canonical tree keyed by the document element's tag.

    Raises:
        DecodeError: If the markup is malformed
    """
    try:
        root = ET.fromstring(text.strip())
    except ET.ParseError as e:
        raise DecodeError("xml", str(e)) from e
    return Mapping([(_local_name(root.tag), _element_value(root))])


__all__ = ["encode_xml", "decode_xml"]
