"""
Settings parser: directive text -> validated Settings record.

Directive format (one per line):
    inputformat   = json | yaml | xml | csv | emmet | auto
    outputformat  = json | yaml | xml | csv | emmet
    align         = true | false | 1 | 0 | yes | no
    case          = upper | camel | snake | none
    savetohistory = true | false | 1 | 0 | yes | no
    replace.tag.X = Y      (rename key X to Y)
    replace.val.X = Y      (replace literal value X with Y)

Syntax Notes:
    - Lines starting with # are comments, blank lines are ignored
    - Keys are case-insensitive, except the X in replace.tag.X / replace.val.X
    - A later directive overrides an earlier one
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional

from cdim.errors import SettingsError


class Format(Enum):
    """Interchange formats, plus the two pseudo-formats used before resolution."""
    JSON = "json"
    YAML = "yaml"
    XML = "xml"
    CSV = "csv"
    EMMET = "emmet"
    AUTO = "auto"        # input only: detect from content
    UNKNOWN = "unknown"  # detection result when nothing matched


INPUT_FORMATS = frozenset({Format.JSON, Format.YAML, Format.XML, Format.CSV, Format.EMMET, Format.AUTO})
OUTPUT_FORMATS = frozenset({Format.JSON, Format.YAML, Format.XML, Format.CSV, Format.EMMET})


class CaseMode(Enum):
    """Key renaming modes."""
    NONE = "none"
    UPPER = "upper"
    CAMEL = "camel"
    SNAKE = "snake"


_TRUE_VALUES = ("true", "1", "yes")
_FALSE_VALUES = ("false", "0", "no")

_REPLACE_RE = re.compile(r"^replace\.(tag|val)\.(.+)$", re.IGNORECASE)


@dataclass
class Settings:
    """
    Validated conversion settings.

    Properties:
        input_format: Declared input format, or Format.AUTO
        output_format: Target format
        align: Pretty-print where the output format supports it
        case_mode: Key renaming mode
        tag_replacements: Original key -> replacement key
        value_replacements: Literal scalar text -> replacement text
        save_to_history: Carried for the persistence collaborator only
    """

    input_format: Format = Format.AUTO
    output_format: Format = Format.JSON
    align: bool = True
    case_mode: CaseMode = CaseMode.NONE
    tag_replacements: Dict[str, str] = field(default_factory=dict)
    value_replacements: Dict[str, str] = field(default_factory=dict)
    save_to_history: bool = False

    @property
    def needs_changes(self) -> bool:
        """True when the case or replacement passes would touch the tree."""
        return (
            self.case_mode is not CaseMode.NONE
            or bool(self.tag_replacements)
            or bool(self.value_replacements)
        )

    def to_dict(self) -> Dict[str, object]:
        return {
            "inputformat": self.input_format.value,
            "outputformat": self.output_format.value,
            "align": self.align,
            "case": self.case_mode.value,
            "savetohistory": self.save_to_history,
            "replace": {
                "tag": dict(self.tag_replacements),
                "val": dict(self.value_replacements),
            },
        }


def _parse_format(value: str, allowed: frozenset) -> Optional[Format]:
    try:
        fmt = Format(value.lower())
    except ValueError:
        return None
    return fmt if fmt in allowed else None


def _parse_bool(value: str) -> Optional[bool]:
    lowered = value.lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    return None


def parse_settings(text: Optional[str]) -> Settings:
    """
    Parse directive text into a Settings record.

    Args:
        text: Newline-delimited directives (None or empty gives defaults)

    Returns:
        Settings with defaults for every absent directive

    Raises:
        SettingsError: On a line without '=', an unknown key,
            an empty replacement key or an out-of-enumeration value
    """
    settings = Settings()
    if not text:
        return settings

    for line_number, raw_line in enumerate(text.splitlines(), start=1):
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if "=" not in line:
            raise SettingsError(line_number, line, "expected key=value")

        raw_key, _, raw_value = line.partition("=")
        raw_key = raw_key.strip()
        value = raw_value.strip()
        key = raw_key.lower()

        if key == "inputformat":
            fmt = _parse_format(value, INPUT_FORMATS)
            if fmt is None:
                raise SettingsError(line_number, line, f"unsupported input format {value!r}")
            settings.input_format = fmt
        elif key == "outputformat":
            fmt = _parse_format(value, OUTPUT_FORMATS)
            if fmt is None:
                raise SettingsError(line_number, line, f"unsupported output format {value!r}")
            settings.output_format = fmt
        elif key in ("align", "savetohistory"):
            flag = _parse_bool(value)
            if flag is None:
                raise SettingsError(line_number, line, f"expected a boolean, got {value!r}")
            if key == "align":
                settings.align = flag
            else:
                settings.save_to_history = flag
        elif key == "case":
            try:
                settings.case_mode = CaseMode(value.lower())
            except ValueError:
                raise SettingsError(line_number, line, f"unsupported case mode {value!r}")
        else:
            match = _REPLACE_RE.match(raw_key)
            if not match:
                raise SettingsError(line_number, line, f"unknown setting {raw_key!r}")
            family, find = match.group(1).lower(), match.group(2)
            if family == "tag":
                settings.tag_replacements[find] = value
            else:
                settings.value_replacements[find] = value

    return settings


__all__ = [
    "CaseMode",
    "Format",
    "INPUT_FORMATS",
    "OUTPUT_FORMATS",
    "Settings",
    "parse_settings",
]
