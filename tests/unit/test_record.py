"""Unit tests for record derivation and the record codec."""

from __future__ import annotations

import dataclasses
import enum
from typing import ClassVar, Generic, NamedTuple, Optional, TypeVar

import pytest
from pydantic import BaseModel, ConfigDict, Field

from typedavro import (
    AvroRecord,
    Byte,
    CodecRegistry,
    FixedBytes,
    Float,
    Int,
    codec_for,
    decode,
    decode_json,
    encode,
    encode_json,
)
from typedavro.codec.schema import INT, LONG, STRING, FieldDescriptor, FixedType, RecordType
from typedavro.exceptions import (
    EncodeError,
    InvalidValue,
    MissingField,
    UnexpectedField,
    UnsupportedType,
)

T = TypeVar("T")


class Priority(enum.Enum):
    """Test enum."""

    LOW = 1
    HIGH = 2


class Point(AvroRecord):
    """Simple pydantic record."""

    x: Int
    y: Int


class Reading(AvroRecord):
    """Record with narrowed widths, defaults and a fixed field."""

    sensor: Byte
    value: Float
    total: int = 0
    tags: list[str] = Field(default_factory=list)
    digest: bytes = FixedBytes(length=4)
    priority: Priority = Priority.LOW


class Renamed(AvroRecord):
    """Record with explicit Avro naming."""

    avro_name: ClassVar[str] = "Position"
    avro_namespace: ClassVar[str] = "nav"

    lat: float
    lon: float


class Aliased(BaseModel):
    """Plain pydantic model whose constructor takes an alias."""

    user_id: int = Field(alias="userId")


class ByName(BaseModel):
    """Aliased model that also accepts field names."""

    model_config = ConfigDict(populate_by_name=True)

    user_id: int = Field(alias="userId")


@dataclasses.dataclass(frozen=True)
class Segment:
    """Dataclass record."""

    start: Point
    end: Point
    label: str = "segment"
    weights: list[float] = dataclasses.field(default_factory=lambda: [1.0])
    computed: int = dataclasses.field(default=0, init=False)


class Pair(NamedTuple):
    """NamedTuple record."""

    left: int
    right: str = "r"


class Plain:
    """Plain class with an annotated constructor."""

    def __init__(self, name: str, count: int = 1) -> None:
        self.name = name
        self.count = count

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Plain) and (self.name, self.count) == (other.name, other.count)


class Unannotated:
    """Plain class whose constructor is not annotated."""

    def __init__(self, name):  # type: ignore[no-untyped-def]
        self.name = name


class Level(AvroRecord):
    """Record whose constructor validates its field."""

    level: int = Field(ge=0)


class Box(AvroRecord, Generic[T]):
    """Generic pydantic record."""

    item: T


class Node(AvroRecord):
    """Self-referential linked list."""

    value: int
    next: Optional[Node] = None


class Tree(AvroRecord):
    """Self-referential through a collection."""

    label: str
    children: list[Tree] = []


class TestRecordEncoding:
    """Test the binary layout of records."""

    def test_fields_in_declared_order(self, registry: CodecRegistry) -> None:
        """Test fields are concatenated without tags."""
        assert encode(Point(x=1, y=-1), registry=registry) == b"\x02\x01"

    def test_roundtrip(self, registry: CodecRegistry) -> None:
        """Test a record with several field kinds."""
        reading = Reading(sensor=-3, value=0.5, tags=["a"], digest=b"abcd", priority=Priority.HIGH)
        restored = decode(Reading, encode(reading, registry=registry), registry)
        assert restored == reading

    def test_descriptor(self, registry: CodecRegistry) -> None:
        """Test record descriptors carry name, namespace and fields."""
        descriptor = codec_for(Point, registry).descriptor
        assert descriptor == RecordType("Point", __name__)
        assert descriptor.fields == (FieldDescriptor("x", INT), FieldDescriptor("y", INT))

    def test_fixed_length_field(self, registry: CodecRegistry) -> None:
        """Test FixedBytes fields become unnamed fixed types."""
        fields = {f.name: f for f in codec_for(Reading, registry).descriptor.fields}
        assert fields["digest"].type == FixedType(4)
        assert fields["total"] == FieldDescriptor("total", LONG, True, 0)

    def test_avro_name_options(self, registry: CodecRegistry) -> None:
        """Test avro_name and avro_namespace class attributes."""
        assert codec_for(Renamed, registry).descriptor.type_name == "nav.Position"

    def test_wrong_instance(self, registry: CodecRegistry) -> None:
        """Test encoding a value of another class."""
        with pytest.raises(EncodeError, match="Expected Point"):
            codec_for(Point, registry).encode(Renamed(lat=0, lon=0))

    def test_field_error_propagates(self, registry: CodecRegistry) -> None:
        """Test a field value out of range aborts the encoding."""
        point = Point.model_construct(x=2**40, y=0)
        with pytest.raises(EncodeError, match="out of int range"):
            encode(point, registry=registry)

    def test_constructor_failure_is_invalid_value(self, registry: CodecRegistry) -> None:
        """Test data the constructor rejects decodes to InvalidValue."""
        data = encode(Level.model_construct(level=-1), registry=registry)
        with pytest.raises(InvalidValue, match="Failed to construct Level"):
            decode(Level, data, registry)


class TestRecordKinds:
    """Test the supported record shapes."""

    def test_dataclass(self, registry: CodecRegistry) -> None:
        """Test dataclasses use their init fields."""
        descriptor = codec_for(Segment, registry).descriptor
        assert descriptor.field_names() == ["start", "end", "label", "weights"]
        segment = Segment(Point(x=0, y=0), Point(x=3, y=4))
        assert decode(Segment, encode(segment, registry=registry), registry) == segment

    def test_dataclass_default_factory(self, registry: CodecRegistry) -> None:
        """Test default factories are evaluated once at derivation."""
        fields = {f.name: f for f in codec_for(Segment, registry).descriptor.fields}
        assert fields["weights"].has_default
        assert fields["weights"].default == [1.0]

    def test_namedtuple(self, registry: CodecRegistry) -> None:
        """Test NamedTuples are records, not arrays."""
        codec = codec_for(Pair, registry)
        assert isinstance(codec.descriptor, RecordType)
        assert codec.encode(Pair(1)) == b"\x02\x02r"
        assert codec.decode(b"\x02\x02r") == Pair(1, "r")

    def test_plain_class(self, registry: CodecRegistry) -> None:
        """Test plain classes with annotated constructors."""
        codec = codec_for(Plain, registry)
        assert codec.descriptor.field_names() == ["name", "count"]
        assert codec.decode(codec.encode(Plain("a", 3))) == Plain("a", 3)

    def test_unannotated_class_unsupported(self, registry: CodecRegistry) -> None:
        """Test classes without an annotated constructor."""
        with pytest.raises(UnsupportedType):
            codec_for(Unannotated, registry)

    def test_pydantic_alias(self, registry: CodecRegistry) -> None:
        """Test aliased fields are passed to the constructor by alias."""
        codec = codec_for(Aliased, registry)
        assert codec.descriptor.field_names() == ["user_id"]
        assert codec.decode(codec.encode(Aliased(userId=7))).user_id == 7

    def test_pydantic_populate_by_name(self, registry: CodecRegistry) -> None:
        """Test models accepting field names are built by name."""
        codec = codec_for(ByName, registry)
        assert codec.decode(codec.encode(ByName(user_id=9))).user_id == 9

    def test_parametrized_generic(self, registry: CodecRegistry) -> None:
        """Test a parametrized generic model is an ordinary record."""
        codec = codec_for(Box[str], registry)
        assert codec.descriptor.fields[0].type == STRING
        assert codec.decode(codec.encode(Box[str](item="x"))).item == "x"

    def test_unparametrized_generic_unsupported(self, registry: CodecRegistry) -> None:
        """Test a generic model without type arguments."""
        with pytest.raises(UnsupportedType, match="parametrized"):
            codec_for(Box, registry)


class TestRecursiveRecords:
    """Test self-referential record types."""

    def test_linked_list_three_levels(self, registry: CodecRegistry) -> None:
        """Test a list three nodes deep."""
        chain = Node(value=1, next=Node(value=2, next=Node(value=3)))
        data = encode(chain, registry=registry)
        assert data == b"\x02\x02\x04\x02\x06\x00"
        assert decode(Node, data, registry) == chain

    def test_self_reference_shares_codec(self, registry: CodecRegistry) -> None:
        """Test the nested field resolves to the record's own codec."""
        codec = codec_for(Node, registry)
        option = codec.fields[1].codec
        assert option.members[1] is codec

    def test_recursive_descriptor_is_finite(self, registry: CodecRegistry) -> None:
        """Test the descriptor refers to itself by name."""
        descriptor = codec_for(Tree, registry).descriptor
        children = descriptor.fields[1].type
        assert children.items == descriptor
        assert children.items is descriptor

    def test_tree_roundtrip(self, registry: CodecRegistry) -> None:
        """Test recursion through an array."""
        tree = Tree(label="root", children=[Tree(label="a", children=[Tree(label="b")])])
        assert decode(Tree, encode(tree, registry=registry), registry) == tree
        assert decode_json(Tree, encode_json(tree, registry=registry), registry) == tree


class TestRecordJson:
    """Test JSON objects for records."""

    def test_to_json(self, registry: CodecRegistry) -> None:
        """Test records render as objects keyed by field name."""
        assert encode_json(Point(x=1, y=2), registry=registry) == {"x": 1, "y": 2}

    def test_nested_union_json(self, registry: CodecRegistry) -> None:
        """Test named types key their union branch by full name."""
        node = Node(value=1, next=Node(value=2))
        tree = encode_json(node, registry=registry)
        assert tree == {"value": 1, "next": {f"{__name__}.Node": {"value": 2, "next": None}}}
        assert decode_json(Node, tree, registry) == node

    def test_missing_field_with_default(self, registry: CodecRegistry) -> None:
        """Test absent keys fall back to the recorded default."""
        reading = decode_json(
            Reading, {"sensor": 1, "value": 2.0, "digest": "abcd"}, registry
        )
        assert reading.total == 0
        assert reading.tags == []
        assert reading.priority is Priority.LOW

    def test_default_is_copied(self, registry: CodecRegistry) -> None:
        """Test mutable defaults are not shared between decoded values."""
        first = decode_json(Reading, {"sensor": 1, "value": 2.0, "digest": "abcd"}, registry)
        first.tags.append("x")
        second = decode_json(Reading, {"sensor": 1, "value": 2.0, "digest": "abcd"}, registry)
        assert second.tags == []

    def test_missing_field_without_default(self, registry: CodecRegistry) -> None:
        """Test absent keys with no default."""
        with pytest.raises(MissingField) as exc_info:
            decode_json(Point, {"x": 1}, registry)
        assert exc_info.value.field_name == "y"

    def test_unexpected_field(self, registry: CodecRegistry) -> None:
        """Test undeclared keys are rejected by default."""
        with pytest.raises(UnexpectedField) as exc_info:
            decode_json(Point, {"x": 1, "y": 2, "z": 3}, registry)
        assert exc_info.value.field_name == "z"

    def test_unexpected_field_tolerated(self, lenient_registry: CodecRegistry) -> None:
        """Test the setting that ignores undeclared keys."""
        point = decode_json(Point, {"x": 1, "y": 2, "z": 3}, lenient_registry)
        assert point == Point(x=1, y=2)

    def test_not_an_object(self, registry: CodecRegistry) -> None:
        """Test non-object JSON for a record."""
        with pytest.raises(InvalidValue, match="Expected JSON object"):
            decode_json(Point, [1, 2], registry)
