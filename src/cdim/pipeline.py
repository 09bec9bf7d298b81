"""
Conversion pipeline: input text + directive text -> output text.

Steps:
    1. Parse settings
    2. Resolve the input format (detect it when declared "auto")
    3. Same format in and out with nothing to change: return the input
       (JSON with align=true is re-indented)
    4. Decode -> key case pass -> replacement pass -> encode
    5. Return the text with the resolved formats and effective settings

Every call builds and discards its own canonical tree. The only shared
state is the YAML provider loader, which is single-flight.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Dict

from cdim.codecs.emmet import decode_emmet, encode_emmet
from cdim.codecs.markup import decode_xml, encode_xml
from cdim.codecs.structured import ProviderLoader, decode_yaml, default_loader, encode_yaml
from cdim.codecs.tabular import decode_csv, encode_csv
from cdim.detection import detect_format
from cdim.errors import DecodeError, DetectionError, EncodeError
from cdim.model import Value
from cdim.serialization import value_from_json, value_to_json
from cdim.settings import CaseMode, Format, Settings, parse_settings
from cdim.transforms import apply_replacements, transform_keys

logger = logging.getLogger(__name__)


@dataclass
class ConversionResult:
    """
    Outcome of one conversion.

    Properties:
        result: Output text
        input_format: Resolved input format (never AUTO or UNKNOWN)
        output_format: Output format
        settings: Effective settings
    """

    result: str
    input_format: Format
    output_format: Format
    settings: Settings

    @property
    def meta(self) -> Dict[str, Any]:
        return {
            "inputFormat": self.input_format.value,
            "outputFormat": self.output_format.value,
            "settings": self.settings.to_dict(),
        }


class ConversionPipeline:
    """
    Composes settings parsing, detection, codecs and transforms.

    Args:
        provider_loader: Source of the YAML provider. Defaults to the
            process-wide loader so the provider is loaded at most once.
    """

    def __init__(self, provider_loader: ProviderLoader = default_loader) -> None:
        self.provider_loader = provider_loader

    async def decode(self, text: str, fmt: Format) -> Value:
        if fmt is Format.JSON:
            return value_from_json(text)
        if fmt is Format.YAML:
            provider = await self.provider_loader.acquire()
            return decode_yaml(text, provider)
        if fmt is Format.XML:
            return decode_xml(text)
        if fmt is Format.CSV:
            return decode_csv(text)
        if fmt is Format.EMMET:
            return decode_emmet(text)
        raise DecodeError(fmt.value, "unsupported input format")

    async def encode(self, value: Value, fmt: Format, align: bool = True) -> str:
        if fmt is Format.JSON:
            return value_to_json(value, align=align)
        if fmt is Format.YAML:
            provider = await self.provider_loader.acquire()
            return encode_yaml(value, provider)
        if fmt is Format.XML:
            return encode_xml(value, align=align)
        if fmt is Format.CSV:
            return encode_csv(value)
        if fmt is Format.EMMET:
            return encode_emmet(value)
        raise EncodeError(fmt.value, "unsupported output format")

    def _identity(self, text: str, fmt: Format, settings: Settings) -> str:
        if fmt is Format.JSON and settings.align:
            try:
                return value_to_json(value_from_json(text), align=True)
            except DecodeError as e:
                logger.warning(f"Returning JSON input unchanged, re-indent failed: {e}")
        return text

    async def convert_async(self, input_text: str, settings_text: str = "") -> ConversionResult:
        """
        Convert input_text according to settings_text.

        Raises:
            SettingsError: Malformed directive
            DetectionError: Input format is "auto" and cannot be detected
            DecodeError: Input does not parse (GrammarError for Emmet)
            EncodeError: Tree cannot be rendered in the output format
        """
        settings = parse_settings(settings_text)

        input_format = settings.input_format
        if input_format is Format.AUTO:
            input_format = detect_format(input_text)
        if input_format is Format.UNKNOWN:
            raise DetectionError()
        output_format = settings.output_format

        if input_format is output_format and not settings.needs_changes:
            logger.debug(f"Identity conversion for {input_format.value}")
            result = self._identity(input_text, input_format, settings)
            return ConversionResult(result, input_format, output_format, settings)

        logger.debug(f"Converting {input_format.value} -> {output_format.value}")
        value = await self.decode(input_text, input_format)
        if settings.case_mode is not CaseMode.NONE:
            value = transform_keys(value, settings.case_mode)
        value = apply_replacements(value, settings.tag_replacements, settings.value_replacements)
        result = await self.encode(value, output_format, align=settings.align)

        return ConversionResult(result, input_format, output_format, settings)

    def convert(self, input_text: str, settings_text: str = "") -> ConversionResult:
        """Blocking form of convert_async; not for use inside a running event loop."""
        return asyncio.run(self.convert_async(input_text, settings_text))


_default_pipeline = ConversionPipeline()


def convert(input_text: str, settings_text: str = "") -> ConversionResult:
    return _default_pipeline.convert(input_text, settings_text)


async def convert_async(input_text: str, settings_text: str = "") -> ConversionResult:
    return await _default_pipeline.convert_async(input_text, settings_text)


__all__ = ["ConversionPipeline", "ConversionResult", "convert", "convert_async"]
