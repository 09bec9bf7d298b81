"""Codecs between text formats and the canonical tree (Emmet, CSV, XML, YAML)."""

from .emmet import EmmetTerm, decode_emmet, encode_emmet
from .markup import decode_xml, encode_xml
from .structured import (
    ProviderLoader,
    PyYamlProvider,
    StructuredTextProvider,
    YamlOptions,
    decode_yaml,
    default_loader,
    encode_yaml,
)
from .tabular import decode_csv, encode_csv, flatten_record, unflatten_record

__all__ = [
    "EmmetTerm",
    "decode_emmet",
    "encode_emmet",
    "decode_xml",
    "encode_xml",
    "ProviderLoader",
    "PyYamlProvider",
    "StructuredTextProvider",
    "YamlOptions",
    "decode_yaml",
    "default_loader",
    "encode_yaml",
    "decode_csv",
    "encode_csv",
    "flatten_record",
    "unflatten_record",
]
