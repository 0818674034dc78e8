"""Type descriptors: the structural description of a serializable shape.

Descriptors are frozen dataclasses compared structurally. Named types
(records, enums, fixed) follow Avro: a record is identified by its full name,
which keeps self-referential records finite and comparable.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any


class PrimitiveKind(enum.Enum):
    """Atomic kinds. BYTE is carried on the wire as an int."""

    NULL = "null"
    BOOLEAN = "boolean"
    INT = "int"
    LONG = "long"
    FLOAT = "float"
    DOUBLE = "double"
    BYTES = "bytes"
    STRING = "string"
    BYTE = "byte"

    @property
    def avro_name(self) -> str:
        """Avro primitive type name."""
        if self is PrimitiveKind.BYTE:
            return "int"
        return self.value


def full_name(name: str, namespace: str | None) -> str:
    """Join an Avro name with its namespace."""
    return f"{namespace}.{name}" if namespace else name


class TypeDescriptor:
    """Base class for all descriptors."""

    @property
    def type_name(self) -> str:
        """Name used to key this type's branch in a JSON union value."""
        raise NotImplementedError

    @property
    def is_union(self) -> bool:
        return False


@dataclass(frozen=True)
class PrimitiveType(TypeDescriptor):
    kind: PrimitiveKind

    @property
    def type_name(self) -> str:
        return self.kind.avro_name


@dataclass(frozen=True)
class ArrayType(TypeDescriptor):
    items: TypeDescriptor

    @property
    def type_name(self) -> str:
        return "array"


@dataclass(frozen=True)
class MapType(TypeDescriptor):
    values: TypeDescriptor

    @property
    def type_name(self) -> str:
        return "map"


@dataclass(frozen=True)
class FixedType(TypeDescriptor):
    size: int
    name: str | None = None
    namespace: str | None = None

    @property
    def type_name(self) -> str:
        if self.name is None:
            return f"fixed_{self.size}"
        return full_name(self.name, self.namespace)


@dataclass(frozen=True)
class EnumType(TypeDescriptor):
    name: str
    symbols: tuple[str, ...]
    namespace: str | None = None

    @property
    def type_name(self) -> str:
        return full_name(self.name, self.namespace)


@dataclass(frozen=True)
class FieldDescriptor:
    """Schema information for a single record field.

    Attributes:
        name: Field name
        type: Field type descriptor
        has_default: Whether a default value was recorded at derivation time
        default: Default host value (meaningful only if has_default)
    """

    name: str
    type: TypeDescriptor
    has_default: bool = False
    default: Any = None


@dataclass(frozen=True)
class RecordType(TypeDescriptor):
    """A named product of ordered fields.

    Equality and hashing use the full name only; ``fields`` is bound once, after
    the member types have been derived.
    """

    name: str
    namespace: str | None = None
    fields: tuple[FieldDescriptor, ...] = field(default=(), compare=False, repr=False)

    @property
    def type_name(self) -> str:
        return full_name(self.name, self.namespace)

    def bind_fields(self, fields: tuple[FieldDescriptor, ...]) -> None:
        """Attach the field list. Only the first call has an effect."""
        if not self.fields:
            object.__setattr__(self, "fields", tuple(fields))

    def field_names(self) -> list[str]:
        return [f.name for f in self.fields]


@dataclass(frozen=True)
class UnionType(TypeDescriptor):
    members: tuple[TypeDescriptor, ...]

    @property
    def type_name(self) -> str:
        return "union"

    @property
    def is_union(self) -> bool:
        return True


@dataclass(frozen=True)
class OptionType(TypeDescriptor):
    """Two-member union whose first member is null."""

    inner: TypeDescriptor

    @property
    def members(self) -> tuple[TypeDescriptor, ...]:
        return (NULL, self.inner)

    @property
    def type_name(self) -> str:
        return "union"

    @property
    def is_union(self) -> bool:
        return True


@dataclass(frozen=True)
class EitherType(TypeDescriptor):
    """Two-member union with no privileged branch."""

    left: TypeDescriptor
    right: TypeDescriptor

    @property
    def members(self) -> tuple[TypeDescriptor, ...]:
        return (self.left, self.right)

    @property
    def type_name(self) -> str:
        return "union"

    @property
    def is_union(self) -> bool:
        return True


NULL = PrimitiveType(PrimitiveKind.NULL)
BOOLEAN = PrimitiveType(PrimitiveKind.BOOLEAN)
INT = PrimitiveType(PrimitiveKind.INT)
LONG = PrimitiveType(PrimitiveKind.LONG)
FLOAT = PrimitiveType(PrimitiveKind.FLOAT)
DOUBLE = PrimitiveType(PrimitiveKind.DOUBLE)
BYTES = PrimitiveType(PrimitiveKind.BYTES)
STRING = PrimitiveType(PrimitiveKind.STRING)
BYTE = PrimitiveType(PrimitiveKind.BYTE)
