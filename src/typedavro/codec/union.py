"""Union codecs: a branch index followed by the selected member's encoding."""

from __future__ import annotations

from typing import Any

from ..exceptions import InvalidValue, NoMatchingUnionBranch, UnsupportedType
from ..models.either import Left, Right
from .base import Codec
from .binary import BinaryDecoder, BinaryEncoder
from .schema import NULL, EitherType, OptionType, TypeDescriptor, UnionType


class UnionCodec(Codec):
    """Resolves a value to the first matching member, in declared order.

    The declared order is part of the wire contract: if a value matches more
    than one member (for example through a shared base class), the earliest
    member wins, on every call.

    A union over a class hierarchy is created before its members are derived
    (its subtypes may refer back to it) and completed by ``bind``.
    """

    def __init__(self, host_type: Any, members: list[Codec] | None = None) -> None:
        self.host_type = host_type
        self.members: tuple[Codec, ...] = tuple(members) if members is not None else ()
        self._descriptor: TypeDescriptor | None = None

    def bind(self, members: list[Codec]) -> None:
        """Attach the member codecs of a union created empty."""
        if self.members:
            raise RuntimeError(f"Union codec for {self.host_type!r} is already bound")
        self.members = tuple(members)

    @property
    def descriptor(self) -> TypeDescriptor:
        if self._descriptor is None:
            descriptors = tuple(member.descriptor for member in self.members)
            if len(set(descriptors)) != len(descriptors):
                raise UnsupportedType(
                    f"Union {self.host_type!r} has structurally equal members: "
                    f"{', '.join(d.type_name for d in descriptors)}"
                )
            # Avro-JSON keys a branch by its type name, so names must not repeat
            seen: set[str] = set()
            for descriptor in descriptors:
                if descriptor.type_name in seen:
                    raise UnsupportedType(
                        f"Union {self.host_type!r} members share the branch name "
                        f"{descriptor.type_name!r}"
                    )
                seen.add(descriptor.type_name)
            self._descriptor = self._make_descriptor(descriptors)
        return self._descriptor

    def _make_descriptor(self, members: tuple[TypeDescriptor, ...]) -> TypeDescriptor:
        return UnionType(members)

    def _type_names(self) -> tuple[str, ...]:
        return tuple(member.descriptor.type_name for member in self.members)

    def resolve(self, value: Any) -> int:
        """Return the branch index ``value`` is written under.

        Raises:
            NoMatchingUnionBranch: If no member matches
        """
        for index, member in enumerate(self.members):
            if member.matches(value):
                return index
        raise NoMatchingUnionBranch(value, self._type_names())

    def _branch(self, index: int) -> Codec:
        if index < 0 or index >= len(self.members):
            raise InvalidValue(
                f"Invalid union branch index {index} (only {len(self.members)} members)"
            )
        return self.members[index]

    def _payload(self, value: Any) -> Any:
        return value

    def _tag(self, index: int, value: Any) -> Any:
        return value

    def write(self, value: Any, encoder: BinaryEncoder) -> None:
        index = self.resolve(value)
        encoder.write_long(index)
        self.members[index].write(self._payload(value), encoder)

    def read(self, decoder: BinaryDecoder) -> Any:
        index = decoder.read_long()
        return self._tag(index, self._branch(index).read(decoder))

    def to_json(self, value: Any) -> Any:
        index = self.resolve(value)
        member = self.members[index]
        if member.descriptor == NULL:
            return None
        return {member.descriptor.type_name: member.to_json(self._payload(value))}

    def from_json(self, node: Any) -> Any:
        if node is None:
            for index, member in enumerate(self.members):
                if member.descriptor == NULL:
                    return self._tag(index, None)
            raise InvalidValue("JSON null for a union without a null member")

        if not isinstance(node, dict) or len(node) != 1:
            raise InvalidValue(
                f"Expected JSON null or a single-key object for union, got {node!r}"
            )
        ((name, payload),) = node.items()
        for index, member in enumerate(self.members):
            if member.descriptor.type_name == name:
                return self._tag(index, member.from_json(payload))
        raise InvalidValue(
            f"Unknown union branch {name!r} (members: {', '.join(self._type_names())})"
        )

    def matches(self, value: Any) -> bool:
        return any(member.matches(value) for member in self.members)


class OptionCodec(UnionCodec):
    """``Optional[X]``: null is branch 0, a present value is branch 1."""

    def _make_descriptor(self, members: tuple[TypeDescriptor, ...]) -> TypeDescriptor:
        return OptionType(members[1])


class EitherCodec(UnionCodec):
    """Two-branch union over tagged ``Left``/``Right`` values.

    The tag decides the branch directly; no type matching is involved.
    """

    _tags = (Left, Right)

    def _make_descriptor(self, members: tuple[TypeDescriptor, ...]) -> TypeDescriptor:
        return EitherType(members[0], members[1])

    def resolve(self, value: Any) -> int:
        for index, tag in enumerate(self._tags):
            if isinstance(value, tag) and self.members[index].matches(value.value):
                return index
        raise NoMatchingUnionBranch(value, self._type_names())

    def _payload(self, value: Any) -> Any:
        return value.value

    def _tag(self, index: int, value: Any) -> Any:
        return self._tags[index](value)

    def matches(self, value: Any) -> bool:
        return any(
            isinstance(value, tag) and self.members[index].matches(value.value)
            for index, tag in enumerate(self._tags)
        )
