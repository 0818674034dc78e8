"""Codecs for arrays, string-keyed maps, fixed-size bytes and enumerations."""

from __future__ import annotations

import enum
from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING, Any

from ..config import CodecSettings
from ..exceptions import EncodeError, InvalidValue, MalformedInput
from .base import Codec
from .binary import BinaryDecoder, BinaryEncoder
from .primitive import bytes_from_json, bytes_to_json
from .schema import NULL, ArrayType, EnumType, FixedType, MapType, RecordType, TypeDescriptor

if TYPE_CHECKING:
    from ..derive.construction import ConstructionStrategy

_NOT_ARRAYS = (str, bytes, bytearray, Mapping)


def build_with(strategy: ConstructionStrategy, values: list[Any], host_type: Any) -> Any:
    """Run a construction strategy, reporting constructor failures as InvalidValue."""
    try:
        return strategy.build(values)
    except (TypeError, ValueError) as e:
        raise InvalidValue(f"Failed to construct {_type_label(host_type)}: {e}") from e


def _type_label(host_type: Any) -> str:
    return getattr(host_type, "__name__", None) or repr(host_type)


def _blocks(items: list[Any], block_size: int | None) -> Iterable[list[Any]]:
    if not items:
        return []
    if block_size is None:
        return [items]
    return [items[i : i + block_size] for i in range(0, len(items), block_size)]


# Block counts of items that encode to zero bytes are bounded by this limit
# rather than by the bytes left in the input
ZERO_WIDTH_ITEM_LIMIT = 1 << 20


def occupies_no_bytes(
    descriptor: TypeDescriptor, _seen: frozenset[TypeDescriptor] = frozenset()
) -> bool:
    """Return True if every value of ``descriptor`` encodes to zero bytes."""
    if descriptor == NULL:
        return True
    if isinstance(descriptor, FixedType):
        return descriptor.size == 0
    if isinstance(descriptor, RecordType):
        if descriptor in _seen:
            return False
        seen = _seen | {descriptor}
        return all(occupies_no_bytes(f.type, seen) for f in descriptor.fields)
    return False


def _read_block_count(decoder: BinaryDecoder, total: int, zero_width: bool) -> int:
    count = decoder.read_long()
    if count < 0:
        # Negative count: abs(count) items preceded by the block's byte size
        decoder.read_long()
        count = -count
    if zero_width:
        if total + count > ZERO_WIDTH_ITEM_LIMIT:
            raise MalformedInput(
                f"Block of {count} items exceeds the limit of "
                f"{ZERO_WIDTH_ITEM_LIMIT} zero-width items"
            )
    elif count > decoder.remaining():
        raise MalformedInput(
            f"Block count {count} exceeds the {decoder.remaining()} bytes remaining "
            f"at offset {decoder.position}"
        )
    return count


class ArrayCodec(Codec):
    """Blocked sequence of items, terminated by a zero-count block.

    Example:
        ``[1, 2, 3]`` as ints encodes to ``06 02 04 06 00``.
    """

    def __init__(
        self,
        host_type: Any,
        items: Codec,
        strategy: ConstructionStrategy,
        instance_type: type | tuple[type, ...],
        settings: CodecSettings,
    ) -> None:
        self.host_type = host_type
        self.items = items
        self.strategy = strategy
        self.instance_type = instance_type
        self.settings = settings
        self._descriptor: ArrayType | None = None

    @property
    def descriptor(self) -> ArrayType:
        if self._descriptor is None:
            self._descriptor = ArrayType(self.items.descriptor)
        return self._descriptor

    def _elements(self, value: Any) -> list[Any]:
        if not isinstance(value, Iterable) or isinstance(value, _NOT_ARRAYS):
            raise EncodeError(f"Expected a collection for array, got {type(value).__name__}")
        return list(value)

    def write(self, value: Any, encoder: BinaryEncoder) -> None:
        elements = self._elements(value)
        for block in _blocks(elements, self.settings.array_block_size):
            encoder.write_long(len(block))
            for element in block:
                self.items.write(element, encoder)
        encoder.write_long(0)

    def read(self, decoder: BinaryDecoder) -> Any:
        elements: list[Any] = []
        zero_width = occupies_no_bytes(self.items.descriptor)
        while True:
            count = _read_block_count(decoder, len(elements), zero_width)
            if count == 0:
                break
            for _ in range(count):
                elements.append(self.items.read(decoder))
        return build_with(self.strategy, elements, self.host_type)

    def to_json(self, value: Any) -> list[Any]:
        return [self.items.to_json(element) for element in self._elements(value)]

    def from_json(self, node: Any) -> Any:
        if not isinstance(node, list):
            raise InvalidValue(f"Expected JSON array, got {type(node).__name__}")
        elements = [self.items.from_json(item) for item in node]
        return build_with(self.strategy, elements, self.host_type)

    def matches(self, value: Any) -> bool:
        if not isinstance(value, self.instance_type) or isinstance(value, _NOT_ARRAYS):
            return False
        return all(self.items.matches(element) for element in value)


class MapCodec(Codec):
    """Blocked sequence of (string key, value) entries."""

    def __init__(
        self,
        host_type: Any,
        values: Codec,
        strategy: ConstructionStrategy,
        instance_type: type | tuple[type, ...],
        settings: CodecSettings,
    ) -> None:
        self.host_type = host_type
        self.values = values
        self.strategy = strategy
        self.instance_type = instance_type
        self.settings = settings
        self._descriptor: MapType | None = None

    @property
    def descriptor(self) -> MapType:
        if self._descriptor is None:
            self._descriptor = MapType(self.values.descriptor)
        return self._descriptor

    def _entries(self, value: Any) -> list[tuple[str, Any]]:
        if not isinstance(value, Mapping):
            raise EncodeError(f"Expected a mapping for map, got {type(value).__name__}")
        entries = list(value.items())
        for key, _ in entries:
            if not isinstance(key, str):
                raise EncodeError(f"Map keys must be str, got {type(key).__name__}")
        return entries

    def write(self, value: Any, encoder: BinaryEncoder) -> None:
        entries = self._entries(value)
        for block in _blocks(entries, self.settings.array_block_size):
            encoder.write_long(len(block))
            for key, item in block:
                encoder.write_string(key)
                self.values.write(item, encoder)
        encoder.write_long(0)

    def read(self, decoder: BinaryDecoder) -> Any:
        entries: list[tuple[str, Any]] = []
        while True:
            # Every entry carries at least its key length
            count = _read_block_count(decoder, len(entries), zero_width=False)
            if count == 0:
                break
            for _ in range(count):
                key = decoder.read_string()
                entries.append((key, self.values.read(decoder)))
        return build_with(self.strategy, entries, self.host_type)

    def to_json(self, value: Any) -> dict[str, Any]:
        return {key: self.values.to_json(item) for key, item in self._entries(value)}

    def from_json(self, node: Any) -> Any:
        if not isinstance(node, dict):
            raise InvalidValue(f"Expected JSON object for map, got {type(node).__name__}")
        entries = [(key, self.values.from_json(item)) for key, item in node.items()]
        return build_with(self.strategy, entries, self.host_type)

    def matches(self, value: Any) -> bool:
        if not isinstance(value, self.instance_type) or not isinstance(value, Mapping):
            return False
        return all(
            isinstance(key, str) and self.values.matches(item) for key, item in value.items()
        )


class FixedCodec(Codec):
    """Exactly ``size`` raw bytes, no length prefix."""

    descriptor: FixedType

    def __init__(self, host_type: Any, descriptor: FixedType, factory: Any = bytes) -> None:
        self.host_type = host_type
        self.descriptor = descriptor
        self.factory = factory

    def _check(self, value: Any) -> bytes:
        if not isinstance(value, (bytes, bytearray)):
            raise EncodeError(
                f"Expected bytes for {self.descriptor.type_name}, got {type(value).__name__}"
            )
        if len(value) != self.descriptor.size:
            raise EncodeError(
                f"{self.descriptor.type_name}: expected {self.descriptor.size} bytes, "
                f"got {len(value)} bytes"
            )
        return bytes(value)

    def write(self, value: Any, encoder: BinaryEncoder) -> None:
        encoder.write_fixed(self._check(value))

    def read(self, decoder: BinaryDecoder) -> Any:
        return self.factory(decoder.read_fixed(self.descriptor.size))

    def to_json(self, value: Any) -> str:
        return bytes_to_json(self._check(value))

    def from_json(self, node: Any) -> Any:
        raw = bytes_from_json(node, self.descriptor.type_name)
        if len(raw) != self.descriptor.size:
            raise InvalidValue(
                f"{self.descriptor.type_name}: expected {self.descriptor.size} bytes, "
                f"got {len(raw)} bytes"
            )
        return self.factory(raw)

    def matches(self, value: Any) -> bool:
        if self.factory is not bytes:
            return isinstance(value, self.factory)
        return isinstance(value, (bytes, bytearray)) and len(value) == self.descriptor.size


class EnumCodec(Codec):
    """Zero-based index into the enumeration's declared symbols."""

    descriptor: EnumType

    def __init__(self, enum_type: type[enum.Enum], descriptor: EnumType) -> None:
        self.host_type = enum_type
        self.descriptor = descriptor
        self._members = list(enum_type)

    def _index(self, value: Any) -> int:
        if not isinstance(value, self.host_type):
            raise EncodeError(
                f"Expected {self.host_type.__name__}, got {type(value).__name__}"
            )
        return self._members.index(value)

    def write(self, value: Any, encoder: BinaryEncoder) -> None:
        encoder.write_long(self._index(value))

    def read(self, decoder: BinaryDecoder) -> enum.Enum:
        index = decoder.read_long()
        if index < 0 or index >= len(self._members):
            raise InvalidValue(
                f"{self.descriptor.type_name}: invalid enum index {index} "
                f"(only {len(self._members)} symbols)"
            )
        return self._members[index]

    def to_json(self, value: Any) -> str:
        return self.descriptor.symbols[self._index(value)]

    def from_json(self, node: Any) -> enum.Enum:
        if not isinstance(node, str) or node not in self.descriptor.symbols:
            raise InvalidValue(f"{self.descriptor.type_name}: unknown enum symbol {node!r}")
        return self._members[self.descriptor.symbols.index(node)]

    def matches(self, value: Any) -> bool:
        return isinstance(value, self.host_type)
