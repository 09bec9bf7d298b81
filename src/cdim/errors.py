"""Exception taxonomy for the conversion engine.

Every error is scoped to a single conversion call and carries enough
structure (line number, cursor position, format name) for a caller to
point at the offending input.
"""

from typing import Optional


class ConversionError(Exception):
    """Base exception for all conversion errors."""

    pass


class SettingsError(ConversionError):
    """Raised when a settings directive is malformed or out of enumeration."""

    def __init__(self, line_number: int, line: str, reason: str):
        self.line_number = line_number
        self.line = line
        self.reason = reason
        super().__init__(f"Invalid setting on line {line_number} ({line!r}): {reason}")


class DetectionError(ConversionError):
    """Raised when the input format cannot be detected and was not declared."""

    def __init__(self, message: str = "Cannot detect the input format and none was declared"):
        super().__init__(message)


class DecodeError(ConversionError):
    """Raised when input text does not parse under its declared/detected format."""

    def __init__(self, format_name: str, reason: str):
        self.format_name = format_name
        self.reason = reason
        super().__init__(f"Cannot decode {format_name} input: {reason}")


class GrammarError(DecodeError):
    """Raised when Emmet input violates the chain/sibling grammar."""

    def __init__(self, reason: str, position: Optional[int] = None):
        self.position = position
        if position is not None:
            reason = f"{reason} at position {position}"
        super().__init__("emmet", reason)


class EncodeError(ConversionError):
    """Raised when a canonical tree cannot be rendered in the requested format."""

    def __init__(self, format_name: str, reason: str):
        self.format_name = format_name
        self.reason = reason
        super().__init__(f"Cannot encode {format_name} output: {reason}")


__all__ = [
    "ConversionError",
    "SettingsError",
    "DetectionError",
    "DecodeError",
    "GrammarError",
    "EncodeError",
]
