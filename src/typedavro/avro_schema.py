"""Avro schema export.

This module renders a derived type as the JSON value tree of its Avro schema
(the structure ``json.dumps`` turns into an ``.avsc`` document). Parsing
schemas is not supported.
"""

from __future__ import annotations

import enum
from typing import Any

from .codec.primitive import bytes_to_json
from .codec.schema import (
    ArrayType,
    EitherType,
    EnumType,
    FixedType,
    MapType,
    OptionType,
    PrimitiveKind,
    PrimitiveType,
    RecordType,
    TypeDescriptor,
    UnionType,
)
from .exceptions import SchemaError
from .models.either import Left
from .registry import CodecRegistry, default_registry

_UNION_TYPES = (UnionType, OptionType, EitherType)


def to_avro_schema(tp: Any, registry: CodecRegistry | None = None) -> Any:
    """Return the Avro schema of a type as a JSON value tree.

    Named types (records, enums, fixed) are written in full on first use and
    by full name afterwards, so recursive records produce a finite schema.

    Args:
        tp: A type or typing annotation, or a TypeDescriptor
        registry: Registry used to derive ``tp`` (default: the process-wide
            registry). Ignored for descriptors.

    Returns:
        A string (primitives and named references), dict or list

    Raises:
        SchemaError: If ``tp`` cannot be derived, a union directly contains
            another union, or a field default is not a legal value of its type

    Example:
        >>> class Point(AvroRecord):
        ...     avro_namespace: ClassVar[str] = "geo"
        ...     x: Int
        ...     y: Int = 0
        >>> to_avro_schema(Point)
        {'type': 'record', 'name': 'Point', 'namespace': 'geo',
         'fields': [{'name': 'x', 'type': 'int'},
                    {'name': 'y', 'type': 'int', 'default': 0}]}
    """
    if isinstance(tp, TypeDescriptor):
        descriptor = tp
    else:
        if registry is None:
            registry = default_registry()
        descriptor = registry.get(tp).descriptor
    return _SchemaWriter().write(descriptor)


class _SchemaWriter:
    def __init__(self) -> None:
        self.defined: set[str] = set()

    def write(self, descriptor: TypeDescriptor) -> Any:
        if isinstance(descriptor, PrimitiveType):
            return descriptor.kind.avro_name

        if isinstance(descriptor, ArrayType):
            return {"type": "array", "items": self.write(descriptor.items)}

        if isinstance(descriptor, MapType):
            return {"type": "map", "values": self.write(descriptor.values)}

        if isinstance(descriptor, _UNION_TYPES):
            members = []
            for member in descriptor.members:
                if isinstance(member, _UNION_TYPES):
                    raise SchemaError(
                        "Avro does not allow a union directly inside another union "
                        "(e.g. Optional over an abstract class)"
                    )
                members.append(self.write(member))
            return members

        if isinstance(descriptor, (RecordType, EnumType, FixedType)):
            name = descriptor.type_name
            if name in self.defined:
                return name
            self.defined.add(name)
            return self._named(descriptor)

        raise SchemaError(f"Unknown descriptor {descriptor!r}")

    def _named(self, descriptor: RecordType | EnumType | FixedType) -> dict[str, Any]:
        schema: dict[str, Any]
        if isinstance(descriptor, FixedType):
            name = descriptor.name or descriptor.type_name
            schema = {"type": "fixed", "name": name}
            if descriptor.namespace:
                schema["namespace"] = descriptor.namespace
            schema["size"] = descriptor.size
            return schema

        if isinstance(descriptor, EnumType):
            schema = {"type": "enum", "name": descriptor.name}
            if descriptor.namespace:
                schema["namespace"] = descriptor.namespace
            schema["symbols"] = list(descriptor.symbols)
            return schema

        schema = {"type": "record", "name": descriptor.name}
        if descriptor.namespace:
            schema["namespace"] = descriptor.namespace
        fields = []
        for f in descriptor.fields:
            field_schema = {"name": f.name, "type": self.write(f.type)}
            if f.has_default:
                try:
                    field_schema["default"] = default_to_json(f.type, f.default)
                except (SchemaError, AttributeError, TypeError) as e:
                    raise SchemaError(
                        f"Field {descriptor.type_name}.{f.name}: illegal default {f.default!r}: {e}"
                    ) from e
            fields.append(field_schema)
        schema["fields"] = fields
        return schema


def default_to_json(descriptor: TypeDescriptor, value: Any) -> Any:
    """Render a field default the way Avro schemas spell it.

    Union defaults use the first member's type, unwrapped.

    Raises:
        SchemaError: If ``value`` is not a legal value of ``descriptor``
    """
    if isinstance(descriptor, _UNION_TYPES):
        if isinstance(descriptor, EitherType):
            if not isinstance(value, Left):
                raise SchemaError("an Either default must be a Left value")
            value = value.value
        return default_to_json(descriptor.members[0], value)

    if isinstance(descriptor, PrimitiveType):
        return _primitive_default(descriptor.kind, value)

    if isinstance(descriptor, FixedType):
        if not isinstance(value, (bytes, bytearray)) or len(value) != descriptor.size:
            raise SchemaError(f"expected {descriptor.size} bytes")
        return bytes_to_json(value)

    if isinstance(descriptor, EnumType):
        if not isinstance(value, enum.Enum) or value.name not in descriptor.symbols:
            raise SchemaError(f"expected a symbol of {descriptor.type_name}")
        return value.name

    if isinstance(descriptor, ArrayType):
        if isinstance(value, (str, bytes, dict)):
            raise SchemaError("expected a collection")
        return [default_to_json(descriptor.items, item) for item in value]

    if isinstance(descriptor, MapType):
        if not isinstance(value, dict):
            raise SchemaError("expected a mapping")
        return {key: default_to_json(descriptor.values, item) for key, item in value.items()}

    if isinstance(descriptor, RecordType):
        return {f.name: default_to_json(f.type, getattr(value, f.name)) for f in descriptor.fields}

    raise SchemaError(f"unsupported default for {descriptor!r}")


def _primitive_default(kind: PrimitiveKind, value: Any) -> Any:
    if kind is PrimitiveKind.NULL:
        ok = value is None
    elif kind is PrimitiveKind.BOOLEAN:
        ok = isinstance(value, bool)
    elif kind in (PrimitiveKind.INT, PrimitiveKind.LONG, PrimitiveKind.BYTE):
        ok = isinstance(value, int) and not isinstance(value, bool)
    elif kind in (PrimitiveKind.FLOAT, PrimitiveKind.DOUBLE):
        ok = isinstance(value, (int, float)) and not isinstance(value, bool)
    elif kind is PrimitiveKind.STRING:
        ok = isinstance(value, str)
    else:
        ok = isinstance(value, (bytes, bytearray))

    if not ok:
        raise SchemaError(f"expected a {kind.avro_name} value, got {type(value).__name__}")
    if kind is PrimitiveKind.BYTES:
        return bytes_to_json(value)
    return value
