"""Exception hierarchy for typedavro.

This module defines all custom exceptions used throughout the package.
All exceptions inherit from TypedAvroError for easy catching of any typedavro-specific error.
"""

from __future__ import annotations

from typing import Any


class TypedAvroError(Exception):
    """Base exception for all typedavro errors."""

    pass


class SchemaError(TypedAvroError):
    """Raised when a codec cannot be derived for a type.

    Derivation errors surface once, at first use, and are remembered by the
    registry for the lifetime of the process.
    """

    pass


class UnsupportedType(SchemaError):
    """Raised when no derivation rule matches a requested type.

    Examples:
        - A class with no usable constructor
        - A bare ``list`` without an element type
        - A map whose keys are not ``str``
        - A union with two structurally equal members
        - A union with two members of one unnamed kind, such as two arrays
    """

    pass


class DerivationConflict(SchemaError):
    """Raised when two codecs are stored for the same type request."""

    pass


class EncodeError(TypedAvroError):
    """Raised when encoding a value fails.

    Examples:
        - Integer outside the 32/64-bit range of its field
        - Fixed-size bytes of the wrong length
        - Field type mismatch
    """

    pass


class NoMatchingUnionBranch(EncodeError):
    """Raised when a value matches none of a union's members."""

    def __init__(self, value: Any, type_names: tuple[str, ...] = ()) -> None:
        self.value = value
        self.type_names = type_names
        expected = ", ".join(type_names) if type_names else "<no members>"
        super().__init__(
            f"No union branch matches {type(value).__name__} value {value!r} "
            f"(members: {expected})"
        )


class DecodeError(TypedAvroError):
    """Raised when decoding binary data or a JSON value tree fails."""

    pass


class MalformedInput(DecodeError):
    """Raised when a binary stream is truncated or structurally corrupt.

    Examples:
        - Truncated data (insufficient bytes)
        - Varint longer than the maximum for its width
        - Negative length prefix
        - Block count larger than the input that follows it
    """

    pass


class InvalidValue(DecodeError):
    """Raised when a decoded value lies outside its type's legal domain.

    Examples:
        - Enum or union index out of range
        - JSON number out of range for the target width, or fractional
        - Invalid UTF-8 in a string
    """

    pass


class MissingField(DecodeError):
    """Raised when a JSON record lacks a field that has no default."""

    def __init__(self, field_name: str, record_name: str | None = None) -> None:
        self.field_name = field_name
        self.record_name = record_name
        where = f" in record {record_name}" if record_name else ""
        super().__init__(f"Missing field {field_name!r}{where}")


class UnexpectedField(DecodeError):
    """Raised when a JSON record carries a key that is not a declared field."""

    def __init__(self, field_name: str, record_name: str | None = None) -> None:
        self.field_name = field_name
        self.record_name = record_name
        where = f" in record {record_name}" if record_name else ""
        super().__init__(f"Unexpected field {field_name!r}{where}")
