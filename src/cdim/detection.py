"""
Heuristic input format detection.

Used only when the input format is declared as "auto". The checks run in a
fixed order and the first match wins, so a comma-containing document that is
also valid JSON is classified as JSON, never CSV.

Emmet is never detected; it must be declared.
"""

import json
import logging
import re

from cdim.settings import Format

logger = logging.getLogger(__name__)

# "key: value" on its own line, optionally as a list item
_YAML_LINE_RE = re.compile(r"^[ \t]*(?:-[ \t]+)?[A-Za-z_][\w.-]*[ \t]*:[ \t]+\S", re.MULTILINE)
# "key:" closing its line, followed by an indented line or a "- " item
_YAML_BLOCK_RE = re.compile(
    r"^[ \t]*(?:-[ \t]+)?[A-Za-z_][\w.-]*[ \t]*:[ \t]*\r?\n(?:[ \t]+\S|[ \t]*-[ \t]+\S)",
    re.MULTILINE,
)


def _is_json(text: str) -> bool:
    try:
        json.loads(text)
    except ValueError:
        return False
    return True


def detect_format(text: str) -> Format:
    """
    Sniff the format of input text.

    Order:
        1. empty after trimming      -> UNKNOWN
        2. parses as JSON             -> JSON
        3. starts with '---', has an 'identifier: value' line, or an
           'identifier:' line opening an indented or '- ' block -> YAML
        4. starts with '<' and ends with '>' -> XML
        5. contains a comma           -> CSV
        6. otherwise                  -> UNKNOWN
    """
    trimmed = text.strip()
    if not trimmed:
        detected = Format.UNKNOWN
    elif _is_json(trimmed):
        detected = Format.JSON
    elif trimmed.startswith("---") or _YAML_LINE_RE.search(trimmed) or _YAML_BLOCK_RE.search(trimmed):
        detected = Format.YAML
    elif trimmed.startswith("<") and trimmed.endswith(">"):
        detected = Format.XML
    elif "," in trimmed:
        detected = Format.CSV
    else:
        detected = Format.UNKNOWN
    logger.debug(f"Detected input format: {detected.value}")
    return detected


__all__ = ["detect_format"]
