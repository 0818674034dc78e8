"""Base record class and typedavro-specific Pydantic configuration.

Any pydantic model, dataclass or NamedTuple can be encoded; AvroRecord adds
naming options and convenience methods bound to the default registry.
"""

from __future__ import annotations

from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict


class AvroRecord(BaseModel):
    """Base class for pydantic records.

    Options are class attributes and apply only to the class that declares
    them (they are not inherited by subclasses):

    Example:
        >>> from abc import ABC
        >>> class Shape(AvroRecord, ABC):
        ...     avro_sealed: ClassVar[bool] = True
        >>> class Circle(Shape):
        ...     radius: float
        ...     avro_name: ClassVar[str | None] = "Circle"
        ...     avro_namespace: ClassVar[str | None] = "geometry"

    Attributes:
        avro_name: Record name (defaults to the class's qualified name)
        avro_namespace: Record namespace (defaults to the class's module)
        avro_sealed: On an abstract class, restrict its union to the direct
            subclasses in definition order instead of scanning for subtypes
    """

    model_config = ConfigDict(
        strict=False,
        # FixedData subclasses and other non-pydantic field types
        arbitrary_types_allowed=True,
        validate_assignment=True,
        extra="forbid",
    )

    avro_name: ClassVar[str | None] = None
    avro_namespace: ClassVar[str | None] = None
    avro_sealed: ClassVar[bool] = False

    def to_avro(self) -> bytes:
        """Encode this record with the default registry."""
        # Import here to avoid circular dependency
        from ..registry import default_registry

        return default_registry().get(type(self)).encode(self)

    def to_avro_json(self) -> dict[str, Any]:
        """Return this record's Avro-JSON value tree."""
        from ..registry import default_registry

        return default_registry().get(type(self)).to_json(self)

    @classmethod
    def from_avro(cls, data: bytes) -> Any:
        """Decode an instance of this record from Avro binary."""
        from ..registry import default_registry

        return default_registry().get(cls).decode(data)

    @classmethod
    def from_avro_json(cls, node: Any) -> Any:
        """Decode an instance of this record from an Avro-JSON value tree."""
        from ..registry import default_registry

        return default_registry().get(cls).from_json(node)
