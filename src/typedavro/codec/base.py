"""The read/write contract every codec satisfies."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from .binary import BinaryDecoder, BinaryEncoder
from .schema import TypeDescriptor


class Codec(ABC):
    """Binary and JSON encoder/decoder bound to one type descriptor.

    A codec is immutable once its registry has committed it, so ``write``,
    ``read``, ``to_json`` and ``from_json`` may be called from any number of
    threads without locking.

    Attributes:
        descriptor: The TypeDescriptor this codec implements
        host_type: The Python type (or typing annotation) it was derived for
    """

    descriptor: TypeDescriptor
    host_type: Any

    @abstractmethod
    def write(self, value: Any, encoder: BinaryEncoder) -> None:
        """Append the binary encoding of ``value``.

        Raises:
            EncodeError: If value is not a legal value of this type
        """

    @abstractmethod
    def read(self, decoder: BinaryDecoder) -> Any:
        """Consume one encoded value and return it.

        Raises:
            DecodeError: If the data is truncated or out of the type's domain
        """

    @abstractmethod
    def to_json(self, value: Any) -> Any:
        """Return the Avro-JSON value tree for ``value``."""

    @abstractmethod
    def from_json(self, node: Any) -> Any:
        """Decode a JSON value tree produced by ``to_json``."""

    @abstractmethod
    def matches(self, value: Any) -> bool:
        """Return True if ``value`` belongs to this type (union resolution)."""

    def encode(self, value: Any) -> bytes:
        """Encode ``value`` to bytes."""
        encoder = BinaryEncoder()
        self.write(value, encoder)
        return encoder.getvalue()

    def decode(self, data: bytes | bytearray | memoryview) -> Any:
        """Decode one value from the start of ``data``."""
        return self.read(BinaryDecoder(data))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.descriptor!r})"
