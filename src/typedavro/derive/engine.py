"""Type derivation: turn a Python type into a codec.

The engine inspects a type request and builds the codec for it, resolving
every member type through the registry so that member codecs are shared and
self-referential types terminate.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Annotated, Any, Union, get_args, get_origin

from ..codec.base import Codec
from ..codec.composite import ArrayCodec, EnumCodec, FixedCodec, MapCodec
from ..codec.primitive import PRIMITIVE_CODECS
from ..codec.record import RecordCodec, RecordField
from ..codec.schema import EnumType, FixedType, PrimitiveKind, RecordType
from ..codec.union import EitherCodec, OptionCodec, UnionCodec
from ..exceptions import UnsupportedType
from ..logging_config import get_logger
from ..models.either import Left, Right
from ..models.fields import Fixed
from .construction import collection_strategy, direct_constructor
from .introspect import (
    CollectionShape,
    FixedLength,
    NoneType,
    annotation_markers,
    avro_name,
    collection_shape,
    is_abstract,
    is_enum,
    is_fixed_data,
    is_record,
    is_sealed,
    is_union_origin,
    open_subtypes,
    record_fields,
    sealed_subtypes,
    type_label,
)

if TYPE_CHECKING:
    from ..registry import CodecRegistry

logger = get_logger("derive")
discovery_logger = get_logger("discovery")

# Host types that map directly onto a primitive
_PRIMITIVE_TYPES: dict[type, PrimitiveKind] = {
    NoneType: PrimitiveKind.NULL,
    bool: PrimitiveKind.BOOLEAN,
    int: PrimitiveKind.LONG,
    float: PrimitiveKind.DOUBLE,
    str: PrimitiveKind.STRING,
    bytes: PrimitiveKind.BYTES,
}

# Host type each primitive marker may annotate
_MARKER_HOSTS: dict[PrimitiveKind, type] = {
    PrimitiveKind.NULL: NoneType,
    PrimitiveKind.BOOLEAN: bool,
    PrimitiveKind.INT: int,
    PrimitiveKind.LONG: int,
    PrimitiveKind.BYTE: int,
    PrimitiveKind.FLOAT: float,
    PrimitiveKind.DOUBLE: float,
    PrimitiveKind.STRING: str,
    PrimitiveKind.BYTES: bytes,
}


class TypeDerivationEngine:
    """Builds codecs for type requests on behalf of a CodecRegistry.

    Rules are tried in order: annotated primitives and fixed bytes, unions
    (including Optional and Either), plain primitives, enumerations, named
    fixed types, arrays and maps, abstract classes (unions over their
    subtypes), and finally records. Anything left is an UnsupportedType.

    Records and unions are placed in the registry (``reserve``) before their
    members are derived, so a member that refers back to them receives the
    same codec instance.

    Example:
        >>> registry = CodecRegistry()
        >>> engine = TypeDerivationEngine(registry)
        >>> engine.derive(list[int]).descriptor
        ArrayType(items=PrimitiveType(kind=<PrimitiveKind.LONG: 'long'>))
    """

    def __init__(self, registry: CodecRegistry) -> None:
        self.registry = registry
        self.settings = registry.settings

    def derive(self, request: Any) -> Codec:
        """Build the codec for ``request``.

        Member types are resolved with ``registry.get``; the returned codec is
        not yet committed to the registry.

        Raises:
            UnsupportedType: If no rule matches the request or one of its members
        """
        origin = get_origin(request)

        if origin is Annotated:
            return self._annotated(request)
        if is_union_origin(origin):
            return self._union(request)

        if origin is None and request in _PRIMITIVE_TYPES:
            return PRIMITIVE_CODECS[_PRIMITIVE_TYPES[request]](request)
        if is_enum(request):
            return self._enum(request)
        if is_fixed_data(request):
            return self._fixed_data(request)

        shape = collection_shape(request)
        if shape is not None:
            return self._collection(request, shape)

        if origin is not None:
            raise UnsupportedType(
                f"Cannot derive a codec for generic type {type_label(request)}"
            )
        if is_abstract(request):
            return self._abstract(request)
        if is_record(request):
            return self._record(request)

        raise UnsupportedType(f"No codec can be derived for {type_label(request)}")

    # -- annotations -------------------------------------------------------

    def _annotated(self, request: Any) -> Codec:
        base = get_args(request)[0]
        for marker in annotation_markers(request.__metadata__):
            if isinstance(marker, PrimitiveKind):
                if base is not _MARKER_HOSTS[marker]:
                    raise UnsupportedType(
                        f"{marker.value} cannot annotate {type_label(base)}; "
                        f"expected {_MARKER_HOSTS[marker].__name__}"
                    )
                return PRIMITIVE_CODECS[marker](base)

            if isinstance(marker, Fixed):
                if base is not bytes:
                    raise UnsupportedType(f"Fixed can only annotate bytes, not {type_label(base)}")
                return FixedCodec(request, FixedType(marker.size, marker.name, marker.namespace))

            if isinstance(marker, FixedLength) and base is bytes:
                return FixedCodec(request, FixedType(marker.size))

        return self.registry.get(base)

    # -- unions ------------------------------------------------------------

    def _union(self, request: Any) -> Codec:
        args = get_args(request)
        others = [arg for arg in args if arg is not NoneType]
        has_null = len(others) != len(args)

        tagged = [arg for arg in others if _either_tag(arg) is not None]
        if tagged:
            left, right = _either_pair(request, others)
            if has_null:
                codec: UnionCodec = OptionCodec(request)
                self.registry.reserve(request, codec)
                codec.bind([self.registry.get(NoneType), self.registry.get(Union[left, right])])
                return codec
            codec = EitherCodec(request)
            self.registry.reserve(request, codec)
            left_codec = self.registry.get(get_args(left)[0])
            codec.bind([left_codec, self.registry.get(get_args(right)[0])])
            return codec

        if has_null and len(others) == 1:
            codec = OptionCodec(request)
            self.registry.reserve(request, codec)
            codec.bind([self.registry.get(NoneType), self.registry.get(others[0])])
            return codec

        codec = UnionCodec(request)
        self.registry.reserve(request, codec)
        codec.bind([self.registry.get(arg) for arg in args])
        return codec

    def _abstract(self, cls: type) -> Codec:
        codec = UnionCodec(cls)
        self.registry.reserve(cls, codec)

        if is_sealed(cls):
            subtypes = sealed_subtypes(cls)
            discovery_logger.debug(
                "Sealed %s: %s", cls.__qualname__, [sub.__qualname__ for sub in subtypes]
            )
        else:
            subtypes, excluded = open_subtypes(
                cls, self.registry.registered_subtypes(cls), self.settings
            )
            discovery_logger.debug(
                "Discovered %d subtypes of %s: %s",
                len(subtypes),
                cls.__qualname__,
                [f"{sub.__module__}.{sub.__qualname__}" for sub in subtypes],
            )
            if excluded:
                discovery_logger.debug(
                    "Skipped %d subclasses of %s in excluded modules %s",
                    len(excluded),
                    cls.__qualname__,
                    sorted({sub.__module__ for sub in excluded}),
                )

        if not subtypes:
            raise UnsupportedType(f"Abstract type {cls.__qualname__} has no concrete subtypes")
        codec.bind([self.registry.get(sub) for sub in subtypes])
        return codec

    # -- named types -------------------------------------------------------

    def _enum(self, cls: Any) -> Codec:
        name, namespace = avro_name(cls)
        symbols = tuple(member.name for member in cls)
        return EnumCodec(cls, EnumType(name, symbols, namespace))

    def _fixed_data(self, cls: Any) -> Codec:
        name, namespace = avro_name(cls)
        return FixedCodec(cls, FixedType(cls.size, name, namespace), factory=cls)

    def _record(self, cls: type) -> Codec:
        name, namespace = avro_name(cls)
        record_type = RecordType(name, namespace)
        codec = RecordCodec(cls, record_type, self.settings)
        self.registry.reserve(cls, codec)

        specs = record_fields(cls)
        fields = []
        for spec in specs:
            try:
                field_codec = self.registry.get(spec.annotation)
            except UnsupportedType as e:
                raise UnsupportedType(f"Field {cls.__qualname__}.{spec.name}: {e}") from e
            fields.append(
                RecordField(spec.name, field_codec, spec.attribute, spec.has_default, spec.default)
            )

        codec.bind(fields, direct_constructor(cls, [spec.param for spec in specs]))
        logger.debug("Derived record %s with %d fields", record_type.type_name, len(fields))
        return codec

    # -- collections -------------------------------------------------------

    def _collection(self, request: Any, shape: CollectionShape) -> Codec:
        if shape.is_map and shape.key is not str:
            raise UnsupportedType(
                f"Map keys must be str, got {type_label(shape.key)} in {type_label(request)}"
            )
        strategy = collection_strategy(shape.host_class, is_map=shape.is_map)
        element = self.registry.get(shape.element)
        if shape.is_map:
            return MapCodec(request, element, strategy, shape.instance_type, self.settings)
        return ArrayCodec(request, element, strategy, shape.instance_type, self.settings)


def _either_tag(arg: Any) -> type | None:
    origin = get_origin(arg) or arg
    if origin is Left or origin is Right:
        return origin
    return None


def _either_pair(request: Any, members: list[Any]) -> tuple[Any, Any]:
    tags = [_either_tag(member) for member in members]
    if len(members) != 2 or set(tags) != {Left, Right}:
        raise UnsupportedType(
            f"Left/Right may only appear as the two members of Either[L, R] "
            f"(optionally with None), got {type_label(request)}"
        )
    for member in members:
        if not get_args(member):
            raise UnsupportedType(f"{type_label(member)} needs a type parameter, e.g. Left[int]")
    if tags[0] is Left:
        return members[0], members[1]
    return members[1], members[0]
