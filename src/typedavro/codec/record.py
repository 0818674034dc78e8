"""Record codec: named, ordered fields with no tags on the wire."""

from __future__ import annotations

import copy
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from ..config import CodecSettings
from ..exceptions import EncodeError, InvalidValue, MissingField, UnexpectedField
from .base import Codec
from .binary import BinaryDecoder, BinaryEncoder
from .composite import build_with
from .schema import FieldDescriptor, RecordType

if TYPE_CHECKING:
    from ..derive.construction import ConstructionStrategy


@dataclass(frozen=True)
class RecordField:
    """A record field bound to its codec.

    Attributes:
        name: Field name on the wire and in JSON
        codec: Codec for the field's type (shared, owned by the registry)
        attribute: Attribute holding the field's value on a host instance
        has_default: Whether a default was recorded at derivation time
        default: Default host value (meaningful only if has_default)
    """

    name: str
    codec: Codec
    attribute: str
    has_default: bool = False
    default: Any = None

    @property
    def descriptor(self) -> FieldDescriptor:
        return FieldDescriptor(self.name, self.codec.descriptor, self.has_default, self.default)


class RecordCodec(Codec):
    """Encodes each field in declared order and rebuilds the host value on read.

    The codec is created before its fields are known so that a record which
    refers to itself (directly or through a union or collection) resolves to
    this same instance; ``bind`` completes it. The field list of the record
    descriptor is filled in on first access after binding.
    """

    def __init__(self, host_type: type, record_type: RecordType, settings: CodecSettings) -> None:
        self.host_type = host_type
        self.settings = settings
        self.fields: tuple[RecordField, ...] = ()
        self.strategy: ConstructionStrategy | None = None
        self._record_type = record_type
        self._names: frozenset[str] = frozenset()
        self._fields_described = False

    @property
    def is_bound(self) -> bool:
        return self.strategy is not None

    @property
    def descriptor(self) -> RecordType:
        if self.is_bound and not self._fields_described:
            # Set first: a field that refers back to this record sees the named
            # descriptor without recursing into its fields again
            self._fields_described = True
            self._record_type.bind_fields(tuple(f.descriptor for f in self.fields))
        return self._record_type

    def bind(self, fields: list[RecordField], strategy: ConstructionStrategy) -> None:
        """Attach the derived fields and construction strategy."""
        if self.is_bound:
            raise RuntimeError(f"Record codec for {self._record_type.type_name} is already bound")
        self.fields = tuple(fields)
        self._names = frozenset(f.name for f in self.fields)
        self.strategy = strategy

    def _field_value(self, value: Any, record_field: RecordField) -> Any:
        try:
            return getattr(value, record_field.attribute)
        except AttributeError as e:
            raise EncodeError(
                f"{self._record_type.type_name}: value has no field {record_field.name!r}"
            ) from e

    def _check_instance(self, value: Any) -> None:
        if not isinstance(value, self.host_type):
            raise EncodeError(
                f"Expected {self.host_type.__name__} for record {self._record_type.type_name}, "
                f"got {type(value).__name__}"
            )

    def write(self, value: Any, encoder: BinaryEncoder) -> None:
        self._check_instance(value)
        for record_field in self.fields:
            record_field.codec.write(self._field_value(value, record_field), encoder)

    def read(self, decoder: BinaryDecoder) -> Any:
        values = [record_field.codec.read(decoder) for record_field in self.fields]
        return build_with(self.strategy, values, self.host_type)

    def to_json(self, value: Any) -> dict[str, Any]:
        self._check_instance(value)
        return {
            record_field.name: record_field.codec.to_json(self._field_value(value, record_field))
            for record_field in self.fields
        }

    def from_json(self, node: Any) -> Any:
        if not isinstance(node, dict):
            raise InvalidValue(
                f"Expected JSON object for record {self._record_type.type_name}, "
                f"got {type(node).__name__}"
            )

        if self.settings.reject_unknown_fields:
            for key in node:
                if key not in self._names:
                    raise UnexpectedField(key, self._record_type.type_name)

        values = []
        for record_field in self.fields:
            if record_field.name in node:
                values.append(record_field.codec.from_json(node[record_field.name]))
            elif record_field.has_default:
                values.append(copy.deepcopy(record_field.default))
            else:
                raise MissingField(record_field.name, self._record_type.type_name)
        return build_with(self.strategy, values, self.host_type)

    def matches(self, value: Any) -> bool:
        return isinstance(value, self.host_type)
