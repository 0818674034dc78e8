"""Avro binary and JSON codecs for typedavro.

This module provides the codec classes for every kind of Avro type, the type
descriptors they implement, and the top-level encode/decode helpers.
"""

from __future__ import annotations

from .base import Codec
from .binary import BinaryDecoder, BinaryEncoder
from .composite import ArrayCodec, EnumCodec, FixedCodec, MapCodec
from .primitive import (
    BooleanCodec,
    ByteCodec,
    BytesCodec,
    DoubleCodec,
    FloatCodec,
    IntCodec,
    LongCodec,
    NullCodec,
    StringCodec,
)
from .record import RecordCodec, RecordField
from .schema import (
    ArrayType,
    EitherType,
    EnumType,
    FieldDescriptor,
    FixedType,
    MapType,
    OptionType,
    PrimitiveKind,
    PrimitiveType,
    RecordType,
    TypeDescriptor,
    UnionType,
)
from .union import EitherCodec, OptionCodec, UnionCodec
from .decoder import decode, decode_json
from .encoder import codec_for, encode, encode_json

__all__ = [
    "codec_for",
    "encode",
    "encode_json",
    "decode",
    "decode_json",
    "Codec",
    "BinaryEncoder",
    "BinaryDecoder",
    "NullCodec",
    "BooleanCodec",
    "IntCodec",
    "LongCodec",
    "ByteCodec",
    "FloatCodec",
    "DoubleCodec",
    "StringCodec",
    "BytesCodec",
    "ArrayCodec",
    "MapCodec",
    "FixedCodec",
    "EnumCodec",
    "UnionCodec",
    "OptionCodec",
    "EitherCodec",
    "RecordCodec",
    "RecordField",
    "TypeDescriptor",
    "PrimitiveKind",
    "PrimitiveType",
    "ArrayType",
    "MapType",
    "FixedType",
    "EnumType",
    "FieldDescriptor",
    "RecordType",
    "UnionType",
    "OptionType",
    "EitherType",
]
