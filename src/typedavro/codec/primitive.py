"""Codecs for atomic scalar types."""

from __future__ import annotations

import math
from typing import Any

from ..exceptions import EncodeError, InvalidValue
from .base import Codec
from .binary import INT_MAX, INT_MIN, LONG_MAX, LONG_MIN, BinaryDecoder, BinaryEncoder
from .schema import (
    BOOLEAN,
    BYTE,
    BYTES,
    DOUBLE,
    FLOAT,
    INT,
    LONG,
    NULL,
    STRING,
    PrimitiveKind,
    PrimitiveType,
)

BYTE_MIN = -128
BYTE_MAX = 127


def _is_integral(value: Any) -> bool:
    # bool is an int subclass but never a legal integer value here
    return isinstance(value, int) and not isinstance(value, bool)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def json_integral(node: Any, low: int, high: int, type_name: str) -> int:
    """Validate a JSON number as an integer in [low, high].

    Raises:
        InvalidValue: If node is not a number, has a fractional part, or is out of range
    """
    if not _is_number(node):
        raise InvalidValue(f"Expected JSON number for {type_name}, got {type(node).__name__}")
    if isinstance(node, float):
        if not node.is_integer():
            raise InvalidValue(f"JSON value {node} for {type_name} has a fractional part")
        node = int(node)
    if node < low or node > high:
        raise InvalidValue(f"JSON value {node} out of {type_name} range [{low}, {high}]")
    return node


def bytes_to_json(value: bytes) -> str:
    """Avro JSON form of bytes: one ISO-8859-1 code point per byte."""
    return bytes(value).decode("latin-1")


def bytes_from_json(node: Any, type_name: str) -> bytes:
    if not isinstance(node, str):
        raise InvalidValue(f"Expected JSON string for {type_name}, got {type(node).__name__}")
    try:
        return node.encode("latin-1")
    except UnicodeEncodeError as e:
        raise InvalidValue(f"JSON string for {type_name} has code points above U+00FF: {e}") from e


class PrimitiveCodec(Codec):
    """Common base for the scalar codecs."""

    descriptor: PrimitiveType

    def __init__(self, host_type: Any = None) -> None:
        self.host_type = host_type

    def _expect(self, value: Any, ok: bool, expected: str) -> None:
        if not ok:
            raise EncodeError(
                f"Expected {expected} for {self.descriptor.type_name}, "
                f"got {type(value).__name__}"
            )


class NullCodec(PrimitiveCodec):
    descriptor = NULL

    def __init__(self, host_type: Any = type(None)) -> None:
        super().__init__(host_type)

    def write(self, value: Any, encoder: BinaryEncoder) -> None:
        self._expect(value, value is None, "None")
        encoder.write_null()

    def read(self, decoder: BinaryDecoder) -> None:
        return decoder.read_null()

    def to_json(self, value: Any) -> None:
        self._expect(value, value is None, "None")
        return None

    def from_json(self, node: Any) -> None:
        if node is not None:
            raise InvalidValue(f"Expected JSON null, got {node!r}")
        return None

    def matches(self, value: Any) -> bool:
        return value is None


class BooleanCodec(PrimitiveCodec):
    descriptor = BOOLEAN

    def __init__(self, host_type: Any = bool) -> None:
        super().__init__(host_type)

    def write(self, value: Any, encoder: BinaryEncoder) -> None:
        self._expect(value, isinstance(value, bool), "bool")
        encoder.write_boolean(value)

    def read(self, decoder: BinaryDecoder) -> bool:
        return decoder.read_boolean()

    def to_json(self, value: Any) -> bool:
        self._expect(value, isinstance(value, bool), "bool")
        return value

    def from_json(self, node: Any) -> bool:
        if not isinstance(node, bool):
            raise InvalidValue(f"Expected JSON boolean, got {node!r}")
        return node

    def matches(self, value: Any) -> bool:
        return isinstance(value, bool)


class _IntegralCodec(PrimitiveCodec):
    low: int
    high: int

    def __init__(self, host_type: Any = int) -> None:
        super().__init__(host_type)

    def _check(self, value: Any) -> int:
        self._expect(value, _is_integral(value), "int")
        if value < self.low or value > self.high:
            raise EncodeError(
                f"Value {value} out of {self.descriptor.kind.value} range "
                f"[{self.low}, {self.high}]"
            )
        return value

    def to_json(self, value: Any) -> int:
        return self._check(value)

    def from_json(self, node: Any) -> int:
        return json_integral(node, self.low, self.high, self.descriptor.kind.value)

    def matches(self, value: Any) -> bool:
        return _is_integral(value)


class IntCodec(_IntegralCodec):
    """32-bit signed integer."""

    descriptor = INT
    low = INT_MIN
    high = INT_MAX

    def write(self, value: Any, encoder: BinaryEncoder) -> None:
        encoder.write_int(self._check(value))

    def read(self, decoder: BinaryDecoder) -> int:
        return decoder.read_int()


class LongCodec(_IntegralCodec):
    """64-bit signed integer (the default for Python ``int``)."""

    descriptor = LONG
    low = LONG_MIN
    high = LONG_MAX

    def write(self, value: Any, encoder: BinaryEncoder) -> None:
        encoder.write_long(self._check(value))

    def read(self, decoder: BinaryDecoder) -> int:
        return decoder.read_long()


class ByteCodec(_IntegralCodec):
    """Signed byte, widened to a 32-bit int on the wire."""

    descriptor = BYTE
    low = BYTE_MIN
    high = BYTE_MAX

    def write(self, value: Any, encoder: BinaryEncoder) -> None:
        encoder.write_int(self._check(value))

    def read(self, decoder: BinaryDecoder) -> int:
        value = decoder.read_int()
        if value < BYTE_MIN or value > BYTE_MAX:
            raise InvalidValue(f"Decoded value {value} out of byte range [{BYTE_MIN}, {BYTE_MAX}]")
        return value


class _FloatingCodec(PrimitiveCodec):
    def __init__(self, host_type: Any = float) -> None:
        super().__init__(host_type)

    def _check(self, value: Any) -> float:
        self._expect(value, _is_number(value), "float")
        return float(value)

    def to_json(self, value: Any) -> float:
        return self._check(value)

    def from_json(self, node: Any) -> float:
        if not _is_number(node):
            raise InvalidValue(
                f"Expected JSON number for {self.descriptor.kind.value}, got {node!r}"
            )
        return float(node)

    def matches(self, value: Any) -> bool:
        # ints are floats too; an integral member listed first still wins
        return _is_number(value)


class FloatCodec(_FloatingCodec):
    """32-bit IEEE-754 float."""

    descriptor = FLOAT

    def write(self, value: Any, encoder: BinaryEncoder) -> None:
        encoder.write_float(self._check(value))

    def read(self, decoder: BinaryDecoder) -> float:
        return decoder.read_float()

    def from_json(self, node: Any) -> float:
        value = super().from_json(node)
        if math.isfinite(value) and abs(value) > 3.4028234663852886e38:
            raise InvalidValue(f"JSON value {node} out of float range")
        return value


class DoubleCodec(_FloatingCodec):
    """64-bit IEEE-754 float (the default for Python ``float``)."""

    descriptor = DOUBLE

    def write(self, value: Any, encoder: BinaryEncoder) -> None:
        encoder.write_double(self._check(value))

    def read(self, decoder: BinaryDecoder) -> float:
        return decoder.read_double()


class StringCodec(PrimitiveCodec):
    descriptor = STRING

    def __init__(self, host_type: Any = str) -> None:
        super().__init__(host_type)

    def write(self, value: Any, encoder: BinaryEncoder) -> None:
        self._expect(value, isinstance(value, str), "str")
        encoder.write_string(value)

    def read(self, decoder: BinaryDecoder) -> str:
        return decoder.read_string()

    def to_json(self, value: Any) -> str:
        self._expect(value, isinstance(value, str), "str")
        return value

    def from_json(self, node: Any) -> str:
        if not isinstance(node, str):
            raise InvalidValue(f"Expected JSON string, got {type(node).__name__}")
        return node

    def matches(self, value: Any) -> bool:
        return isinstance(value, str)


class BytesCodec(PrimitiveCodec):
    descriptor = BYTES

    def __init__(self, host_type: Any = bytes) -> None:
        super().__init__(host_type)

    def write(self, value: Any, encoder: BinaryEncoder) -> None:
        self._expect(value, isinstance(value, (bytes, bytearray)), "bytes")
        encoder.write_bytes(bytes(value))

    def read(self, decoder: BinaryDecoder) -> bytes:
        return decoder.read_bytes()

    def to_json(self, value: Any) -> str:
        self._expect(value, isinstance(value, (bytes, bytearray)), "bytes")
        return bytes_to_json(value)

    def from_json(self, node: Any) -> bytes:
        return bytes_from_json(node, "bytes")

    def matches(self, value: Any) -> bool:
        return isinstance(value, (bytes, bytearray))


PRIMITIVE_CODECS: dict[PrimitiveKind, type[PrimitiveCodec]] = {
    PrimitiveKind.NULL: NullCodec,
    PrimitiveKind.BOOLEAN: BooleanCodec,
    PrimitiveKind.INT: IntCodec,
    PrimitiveKind.LONG: LongCodec,
    PrimitiveKind.BYTE: ByteCodec,
    PrimitiveKind.FLOAT: FloatCodec,
    PrimitiveKind.DOUBLE: DoubleCodec,
    PrimitiveKind.STRING: StringCodec,
    PrimitiveKind.BYTES: BytesCodec,
}
