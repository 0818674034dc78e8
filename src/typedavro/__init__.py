"""typedavro: Avro binary and JSON serialization derived from Python types

Encode typed Python values (pydantic models, dataclasses, NamedTuples,
enumerations, unions, collections and primitives) to the Avro binary format
and to Avro-JSON value trees, without writing codecs by hand. Codecs are
derived from type annotations on first use and shared through a registry.

Key Features:
- Bit-compatible Avro binary encoding (zig-zag varints, blocked arrays/maps)
- Avro-JSON value trees with range-checked decoding
- Records, enums, fixed, Optional, tagged Either and class-hierarchy unions
- Recursive types
- Thread-safe, lock-free encoding once a codec is derived
- Avro schema export

Quick Start:
    >>> from typedavro import AvroRecord, Int, encode, decode
    >>>
    >>> class Reading(AvroRecord):
    ...     sensor: str
    ...     value: Int
    ...     tags: list[str] = []
    >>>
    >>> data = encode(Reading(sensor="t1", value=21))
    >>> decode(Reading, data)
    Reading(sensor='t1', value=21, tags=[])
"""

from __future__ import annotations

from .avro_schema import to_avro_schema
from .codec import (
    BinaryDecoder,
    BinaryEncoder,
    Codec,
    codec_for,
    decode,
    decode_json,
    encode,
    encode_json,
)
from .codec.schema import PrimitiveKind, TypeDescriptor
from .config import CodecSettings
from .derive import TypeDerivationEngine
from .exceptions import (
    DecodeError,
    DerivationConflict,
    EncodeError,
    InvalidValue,
    MalformedInput,
    MissingField,
    NoMatchingUnionBranch,
    SchemaError,
    TypedAvroError,
    UnexpectedField,
    UnsupportedType,
)
from .models import (
    AvroRecord,
    Byte,
    Double,
    Either,
    Fixed,
    FixedBytes,
    FixedData,
    Float,
    Int,
    Left,
    Long,
    Right,
)
from .registry import CodecRegistry, default_registry

__version__ = "0.1.0"

__all__ = [
    # Core API
    "codec_for",
    "encode",
    "decode",
    "encode_json",
    "decode_json",
    "to_avro_schema",
    "CodecRegistry",
    "default_registry",
    "CodecSettings",
    "TypeDerivationEngine",
    "Codec",
    "BinaryEncoder",
    "BinaryDecoder",
    "TypeDescriptor",
    "PrimitiveKind",
    # Models
    "AvroRecord",
    "Int",
    "Long",
    "Byte",
    "Float",
    "Double",
    "Fixed",
    "FixedBytes",
    "FixedData",
    "Either",
    "Left",
    "Right",
    # Exceptions
    "TypedAvroError",
    "SchemaError",
    "UnsupportedType",
    "DerivationConflict",
    "EncodeError",
    "NoMatchingUnionBranch",
    "DecodeError",
    "MalformedInput",
    "InvalidValue",
    "MissingField",
    "UnexpectedField",
]
