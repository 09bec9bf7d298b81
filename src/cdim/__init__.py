"""
Canonical Data Interchange Model (CDIM) Package

Converts structured data between JSON, YAML, XML, CSV and Emmet notation.

ARCHITECTURAL GUARANTEE:
------------------------
Every conversion goes through ONE canonical tree (cdim.model):

    input text --decode--> Value --case/replace--> Value --encode--> output text

No codec knows about any other codec.
No canonical tree outlives a single conversion.
"""

__version__ = "0.1.0"

from cdim.errors import (
    ConversionError,
    DecodeError,
    DetectionError,
    EncodeError,
    GrammarError,
    SettingsError,
)
from cdim.pipeline import ConversionPipeline, ConversionResult, convert, convert_async

__all__ = [
    "ConversionError",
    "ConversionPipeline",
    "ConversionResult",
    "DecodeError",
    "DetectionError",
    "EncodeError",
    "GrammarError",
    "SettingsError",
    "convert",
    "convert_async",
]
