"""Field type helpers and utilities.

Python has a single ``int`` and a single ``float``; these annotations select
the narrower Avro widths, and the fixed helpers declare fixed-size byte strings.

Example:
    >>> class Reading(AvroRecord):
    ...     sensor: Byte
    ...     count: Int
    ...     value: Float
    ...     total: Long
    ...     digest: bytes = FixedBytes(length=16)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Annotated, Any, ClassVar, cast

from pydantic import Field
from pydantic.fields import FieldInfo

from ..codec.schema import PrimitiveKind

#: 32-bit signed integer
Int = Annotated[int, PrimitiveKind.INT]
#: 64-bit signed integer (same as plain ``int``)
Long = int
#: Signed byte, carried on the wire as an int
Byte = Annotated[int, PrimitiveKind.BYTE]
#: 32-bit float
Float = Annotated[float, PrimitiveKind.FLOAT]
#: 64-bit float (same as plain ``float``)
Double = float


@dataclass(frozen=True)
class Fixed:
    """Annotation metadata declaring a fixed-size byte string.

    Example:
        >>> Digest = Annotated[bytes, Fixed(16, name="Digest")]
    """

    size: int
    name: str | None = None
    namespace: str | None = None

    def __post_init__(self) -> None:
        if self.size < 0:
            raise ValueError(f"fixed size must be >= 0, got {self.size}")


def FixedBytes(*, length: int, **kwargs: Any) -> FieldInfo:
    """Create a fixed-length bytes field for a pydantic model.

    Args:
        length: Exact length in bytes
        **kwargs: Additional Field() arguments

    Returns:
        Pydantic FieldInfo suitable for use as a field default/metadata.

    Example:
        >>> class Message(AvroRecord):
        ...     payload: bytes = FixedBytes(length=16)
    """
    return cast(FieldInfo, Field(min_length=length, max_length=length, **kwargs))


class FixedData(bytes):
    """Base class for named fixed-size byte strings.

    Subclasses declare their length with ``size``:

        >>> class MD5(FixedData):
        ...     size = 16
        >>> MD5(b"\\x00" * 16)
    """

    size: ClassVar[int] = 0

    def __new__(cls, data: bytes = b"") -> FixedData:
        if len(data) != cls.size:
            raise ValueError(f"{cls.__name__} requires exactly {cls.size} bytes, got {len(data)}")
        return super().__new__(cls, data)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({bytes(self)!r})"
