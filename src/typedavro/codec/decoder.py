"""Top-level decoding helpers.

This module provides decode() and decode_json(), the inverses of encode()
and encode_json().
"""

from __future__ import annotations

from typing import Any

from ..exceptions import MalformedInput
from ..registry import CodecRegistry
from .binary import BinaryDecoder
from .encoder import codec_for


def decode(
    tp: Any, data: bytes | bytearray | memoryview, registry: CodecRegistry | None = None
) -> Any:
    """Decode one value of type ``tp`` from Avro binary.

    The whole input must be consumed.

    Args:
        tp: Type to decode
        data: Avro binary data
        registry: Registry to use (default: the process-wide registry)

    Returns:
        The decoded host value

    Raises:
        SchemaError: If no codec can be derived for ``tp``
        DecodeError: If the data is truncated, corrupted or has trailing bytes

    Example:
        >>> decode(list[int], b"\\x06\\x02\\x04\\x06\\x00")
        [1, 2, 3]
    """
    codec = codec_for(tp, registry)
    decoder = BinaryDecoder(data)
    value = codec.read(decoder)
    if decoder.remaining():
        raise MalformedInput(
            f"Trailing data: {decoder.remaining()} bytes after a complete value "
            f"(consumed {decoder.position})"
        )
    return value


def decode_json(tp: Any, node: Any, registry: CodecRegistry | None = None) -> Any:
    """Decode an Avro-JSON value tree (as produced by encode_json).

    Raises:
        SchemaError: If no codec can be derived for ``tp``
        DecodeError: If the tree does not describe a value of ``tp``
    """
    return codec_for(tp, registry).from_json(node)
