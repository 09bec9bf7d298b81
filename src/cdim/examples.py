"""
Sample record and directive text for demos, the CLI and tests.

Builds a small nested person record (name, age, address) and renders it
into every output format through the conversion pipeline.
"""
from typing import Dict, Optional

from cdim.model import Mapping, Scalar
from cdim.pipeline import ConversionPipeline
from cdim.serialization import value_to_json
from cdim.settings import OUTPUT_FORMATS, Format

DEFAULT_SETTINGS_TEXT = """inputformat=json
outputformat=yaml
savetohistory=false
align=true
case=none"""


def build_sample_record(name: str = "John Doe", age: int = 30) -> Mapping:
    return Mapping([
        ("name", Scalar(name)),
        ("age", Scalar(age)),
        ("address", Mapping([
            ("street", Scalar("123 Main St")),
            ("city", Scalar("Anytown")),
        ])),
    ])


SAMPLE_JSON = value_to_json(build_sample_record(), align=True)


def sample_inputs(pipeline: Optional[ConversionPipeline] = None) -> Dict[Format, str]:
    """Render the sample record in every output format, keyed by format."""
    pipeline = pipeline or ConversionPipeline()
    rendered = {}
    for fmt in sorted(OUTPUT_FORMATS, key=lambda f: f.value):
        settings = f"inputformat=json\noutputformat={fmt.value}\nalign=true"
        rendered[fmt] = pipeline.convert(SAMPLE_JSON, settings).result
    return rendered


__all__ = ["DEFAULT_SETTINGS_TEXT", "SAMPLE_JSON", "build_sample_record", "sample_inputs"]
