"""Top-level encoding helpers.

This module provides codec_for(), encode() and encode_json(), which look up
(or derive) the codec for a type in a registry and apply it to a value.
"""

from __future__ import annotations

from typing import Any

from ..registry import CodecRegistry, default_registry
from .base import Codec


def codec_for(tp: Any, registry: CodecRegistry | None = None) -> Codec:
    """Return the shared codec for a type.

    Args:
        tp: Type or typing annotation
        registry: Registry to use (default: the process-wide registry)

    Raises:
        SchemaError: If no codec can be derived for ``tp``
    """
    if registry is None:
        registry = default_registry()
    return registry.get(tp)


def encode(value: Any, tp: Any = None, registry: CodecRegistry | None = None) -> bytes:
    """Encode a value to Avro binary.

    Args:
        value: Value to encode
        tp: Type to encode ``value`` as. Defaults to ``type(value)``, which
            suits records; pass the annotation for unions and collections
            (``encode([1, 2], list[int])``).
        registry: Registry to use (default: the process-wide registry)

    Returns:
        Avro binary encoding

    Raises:
        SchemaError: If no codec can be derived for the type
        EncodeError: If the value is not a legal value of the type

    Examples:
        ```python
        from typedavro import AvroRecord, Int, encode

        class Point(AvroRecord):
            x: Int
            y: Int

        encode(Point(x=1, y=-1))          # b'\\x02\\x01'
        encode(None, int | None)          # b'\\x00'
        ```
    """
    if tp is None:
        tp = type(value)
    return codec_for(tp, registry).encode(value)


def encode_json(value: Any, tp: Any = None, registry: CodecRegistry | None = None) -> Any:
    """Return the Avro-JSON value tree of a value.

    The result holds only dicts, lists, strings, numbers, booleans and None,
    ready for ``json.dumps``.

    Raises:
        SchemaError: If no codec can be derived for the type
        EncodeError: If the value is not a legal value of the type
    """
    if tp is None:
        tp = type(value)
    return codec_for(tp, registry).to_json(value)
