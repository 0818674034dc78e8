"""Byte-level encoding and decoding primitives.

This module provides the append-only byte sink and forward-only byte cursor
used by every codec. Integers use Avro's zig-zag varint encoding, floats are
little-endian IEEE-754, and strings/bytes are length-prefixed.
"""

from __future__ import annotations

import struct
from typing import Protocol

from ..exceptions import EncodeError, InvalidValue, MalformedInput

INT_MIN = -(1 << 31)
INT_MAX = (1 << 31) - 1
LONG_MIN = -(1 << 63)
LONG_MAX = (1 << 63) - 1

# Longest varint for each width (ceil(bits / 7))
_MAX_INT_VARINT_BYTES = 5
_MAX_LONG_VARINT_BYTES = 10

_FLOAT = struct.Struct("<f")
_DOUBLE = struct.Struct("<d")


class ByteSink(Protocol):
    """Anything bytes can be appended to (a file, a socket wrapper, BytesIO)."""

    def write(self, data: bytes, /) -> object: ...


def zigzag_encode(value: int, bits: int) -> int:
    """Map a signed integer to an unsigned one: 0, -1, 1, -2 -> 0, 1, 2, 3."""
    return (value << 1) ^ (value >> (bits - 1))


def zigzag_decode(value: int) -> int:
    """Inverse of zigzag_encode."""
    return (value >> 1) ^ -(value & 1)


class BinaryEncoder:
    """Appends Avro binary encodings to an in-memory buffer.

    Example:
        >>> encoder = BinaryEncoder()
        >>> encoder.write_long(-1)
        >>> encoder.write_string("hi")
        >>> encoder.getvalue()
        b'\\x01\\x04hi'
    """

    def __init__(self) -> None:
        """Initialize an empty encoder."""
        self._buffer = bytearray()

    def write_null(self) -> None:
        """Write a null (zero bytes)."""

    def write_boolean(self, value: bool) -> None:
        """Write a boolean as a single 0/1 byte."""
        self._buffer.append(1 if value else 0)

    def write_int(self, value: int) -> None:
        """Write a 32-bit signed integer as a zig-zag varint.

        Raises:
            EncodeError: If value doesn't fit in 32 bits
        """
        if value < INT_MIN or value > INT_MAX:
            raise EncodeError(f"Value {value} out of int range [{INT_MIN}, {INT_MAX}]")
        self._write_varint(zigzag_encode(value, 32))

    def write_long(self, value: int) -> None:
        """Write a 64-bit signed integer as a zig-zag varint.

        Raises:
            EncodeError: If value doesn't fit in 64 bits
        """
        if value < LONG_MIN or value > LONG_MAX:
            raise EncodeError(f"Value {value} out of long range [{LONG_MIN}, {LONG_MAX}]")
        self._write_varint(zigzag_encode(value, 64))

    def write_float(self, value: float) -> None:
        """Write a 32-bit IEEE-754 float, little-endian.

        Raises:
            EncodeError: If value is finite but too large for single precision
        """
        try:
            self._buffer += _FLOAT.pack(value)
        except (OverflowError, struct.error) as e:
            raise EncodeError(f"Value {value} does not fit in a 32-bit float: {e}") from e

    def write_double(self, value: float) -> None:
        """Write a 64-bit IEEE-754 float, little-endian."""
        self._buffer += _DOUBLE.pack(value)

    def write_bytes(self, data: bytes) -> None:
        """Write a long length prefix followed by the raw bytes."""
        self.write_long(len(data))
        self._buffer += data

    def write_string(self, value: str) -> None:
        """Write a UTF-8 string with a long length prefix."""
        self.write_bytes(value.encode("utf-8"))

    def write_fixed(self, data: bytes) -> None:
        """Write raw bytes with no length prefix."""
        self._buffer += data

    def _write_varint(self, value: int) -> None:
        # Least significant 7-bit group first, high bit marks continuation
        while value & ~0x7F:
            self._buffer.append((value & 0x7F) | 0x80)
            value >>= 7
        self._buffer.append(value)

    def __len__(self) -> int:
        return len(self._buffer)

    def getvalue(self) -> bytes:
        """Return everything written so far."""
        return bytes(self._buffer)

    def encode_to(self, sink: ByteSink) -> None:
        """Copy everything written so far to ``sink``."""
        sink.write(bytes(self._buffer))


class BinaryDecoder:
    """Reads Avro binary encodings from a byte buffer, front to back.

    Example:
        >>> decoder = BinaryDecoder(b"\\x01\\x04hi")
        >>> decoder.read_long()
        -1
        >>> decoder.read_string()
        'hi'
        >>> decoder.remaining()
        0
    """

    def __init__(self, data: bytes | bytearray | memoryview) -> None:
        """Initialize a decoder over ``data``.

        Args:
            data: Byte buffer to decode
        """
        self._data = bytes(data)
        self._position = 0

    @property
    def position(self) -> int:
        """Current read offset in bytes."""
        return self._position

    def remaining(self) -> int:
        """Return the number of unread bytes."""
        return len(self._data) - self._position

    def read_null(self) -> None:
        """Read a null (consumes nothing)."""
        return None

    def read_boolean(self) -> bool:
        """Read a single 0/1 byte.

        Raises:
            MalformedInput: If no bytes remain
            InvalidValue: If the byte is neither 0 nor 1
        """
        byte = self._take(1)[0]
        if byte > 1:
            raise InvalidValue(f"Invalid boolean byte 0x{byte:02x} at offset {self._position - 1}")
        return byte == 1

    def read_int(self) -> int:
        """Read a 32-bit zig-zag varint.

        Raises:
            MalformedInput: If the varint is truncated or longer than 5 bytes
            InvalidValue: If the decoded value doesn't fit in 32 bits
        """
        value = zigzag_decode(self._read_varint(_MAX_INT_VARINT_BYTES))
        if value < INT_MIN or value > INT_MAX:
            raise InvalidValue(f"Decoded value {value} out of int range")
        return value

    def read_long(self) -> int:
        """Read a 64-bit zig-zag varint.

        Raises:
            MalformedInput: If the varint is truncated or longer than 10 bytes
            InvalidValue: If the decoded value doesn't fit in 64 bits
        """
        value = zigzag_decode(self._read_varint(_MAX_LONG_VARINT_BYTES))
        if value < LONG_MIN or value > LONG_MAX:
            raise InvalidValue(f"Decoded value {value} out of long range")
        return value

    def read_float(self) -> float:
        """Read a 32-bit little-endian float."""
        return float(_FLOAT.unpack(self._take(4))[0])

    def read_double(self) -> float:
        """Read a 64-bit little-endian float."""
        return float(_DOUBLE.unpack(self._take(8))[0])

    def read_bytes(self) -> bytes:
        """Read a long length prefix followed by that many bytes.

        Raises:
            MalformedInput: If the length is negative or exceeds the remaining data
        """
        length = self.read_long()
        if length < 0:
            raise MalformedInput(f"Negative length prefix {length} at offset {self._position}")
        return self._take(length)

    def read_string(self) -> str:
        """Read a length-prefixed UTF-8 string.

        Raises:
            InvalidValue: If the bytes are not valid UTF-8
        """
        raw = self.read_bytes()
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise InvalidValue(f"Invalid UTF-8 encoding: {e}") from e

    def read_fixed(self, size: int) -> bytes:
        """Read exactly ``size`` raw bytes."""
        return self._take(size)

    def skip(self, size: int) -> None:
        """Advance past ``size`` bytes."""
        self._take(size)

    def _read_varint(self, max_bytes: int) -> int:
        result = 0
        shift = 0
        for _ in range(max_bytes):
            byte = self._take(1)[0]
            result |= (byte & 0x7F) << shift
            if not byte & 0x80:
                return result
            shift += 7
        raise MalformedInput(
            f"Varint longer than {max_bytes} bytes at offset {self._position - max_bytes}"
        )

    def _take(self, size: int) -> bytes:
        end = self._position + size
        if end > len(self._data):
            raise MalformedInput(
                f"Truncated data: need {size} bytes at offset {self._position}, "
                f"have {len(self._data) - self._position}"
            )
        chunk = self._data[self._position : end]
        self._position = end
        return chunk
