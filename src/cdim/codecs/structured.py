"""
YAML codec, delegated to an injected structured-text provider.

The engine does not parse YAML itself. It forwards to a provider that
implements StructuredTextProvider, acquired lazily through a ProviderLoader:

    loader = ProviderLoader(PyYamlProvider)
    provider = await loader.acquire()      # first call loads, later calls reuse
    text = encode_yaml(tree, provider)

ProviderLoader is single-flight: concurrent callers that find the provider
not yet loaded all await the same in-flight load instead of starting their
own. A successful load is cached for the life of the loader; a failed load
is not, so the next acquire() tries again.
"""

import asyncio
import inspect
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, Protocol, Union

import yaml

from cdim.errors import DecodeError, EncodeError
from cdim.model import Value
from cdim.serialization import value_from_python, value_to_python

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class YamlOptions:
    """
    Rendering options passed to the provider.

    Properties:
        indent: Spaces per nesting level
        force_block_style: Never emit inline flow collections
        preserve_key_order: When False the provider may reorder keys
        line_width: Long-line folding threshold
    """

    indent: int = 2
    force_block_style: bool = True
    preserve_key_order: bool = False
    line_width: int = 160


class StructuredTextProvider(Protocol):
    """Contract for a YAML-like encoder/decoder."""

    def encode(self, value: Value, options: YamlOptions) -> str:
        ...

    def decode(self, text: str) -> Value:
        ...


class PyYamlProvider:
    """StructuredTextProvider backed by PyYAML's safe dumper and loader."""

    def encode(self, value: Value, options: YamlOptions) -> str:
        try:
            return yaml.safe_dump(
                value_to_python(value),
                indent=options.indent,
                default_flow_style=False if options.force_block_style else None,
                sort_keys=not options.preserve_key_order,
                width=options.line_width,
                allow_unicode=True,
            )
        except yaml.YAMLError as e:
            raise EncodeError("yaml", str(e)) from e

    def decode(self, text: str) -> Value:
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise DecodeError("yaml", str(e)) from e
        return value_from_python(data)


ProviderFactory = Callable[[], Union[StructuredTextProvider, Awaitable[StructuredTextProvider]]]


class ProviderLoader:
    """
    Lazy, memoized, single-flight provider acquisition.

    Args:
        factory: Zero-argument callable returning a provider, or an
            awaitable resolving to one (e.g. a coroutine function that
            fetches it remotely)
    """

    def __init__(self, factory: ProviderFactory) -> None:
        self._factory = factory
        self._provider: Optional[StructuredTextProvider] = None
        self._pending: Optional["asyncio.Task[StructuredTextProvider]"] = None
        self.load_attempts = 0

    @property
    def loaded(self) -> bool:
        return self._provider is not None

    async def _load(self) -> StructuredTextProvider:
        self.load_attempts += 1
        logger.debug(f"Loading structured-text provider (attempt {self.load_attempts})")
        provider = self._factory()
        if inspect.isawaitable(provider):
            provider = await provider
        self._provider = provider
        logger.debug(f"Structured-text provider ready: {type(provider).__name__}")
        return provider

    async def acquire(self) -> StructuredTextProvider:
        """Return the provider, loading it once if needed."""
        if self._provider is not None:
            return self._provider

        loop = asyncio.get_running_loop()
        if self._pending is None or self._pending.get_loop() is not loop:
            self._pending = loop.create_task(self._load())
        pending = self._pending

        try:
            return await asyncio.shield(pending)
        except Exception:
            if self._pending is pending and pending.done():
                self._pending = None
            raise


default_loader = ProviderLoader(PyYamlProvider)


def encode_yaml(value: Value, provider: StructuredTextProvider) -> str:
    """Encode with block style and no key-order guarantee."""
    return provider.encode(value, YamlOptions())


def decode_yaml(text: str, provider: StructuredTextProvider) -> Value:
    return provider.decode(text)


__all__ = [
    "StructuredTextProvider",
    "YamlOptions",
    "PyYamlProvider",
    "ProviderLoader",
    "default_loader",
    "encode_yaml",
    "decode_yaml",
]
