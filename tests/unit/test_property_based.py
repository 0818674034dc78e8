"""Property-based tests using hypothesis."""

from __future__ import annotations

from typing import Optional

from hypothesis import given
from hypothesis import strategies as st

from typedavro import AvroRecord, CodecRegistry, CodecSettings, Int, decode, encode
from typedavro.codec.binary import (
    INT_MAX,
    INT_MIN,
    LONG_MAX,
    LONG_MIN,
    BinaryDecoder,
    BinaryEncoder,
    zigzag_decode,
    zigzag_encode,
)

REGISTRY = CodecRegistry()

longs = st.integers(min_value=LONG_MIN, max_value=LONG_MAX)
ints = st.integers(min_value=INT_MIN, max_value=INT_MAX)


class Sample(AvroRecord):
    """Record for property testing."""

    id: Int
    name: str
    scores: list[float]
    tags: dict[str, int]
    parent: Optional[int] = None


samples = st.builds(
    Sample,
    id=ints,
    name=st.text(max_size=20),
    scores=st.lists(st.floats(allow_nan=False), max_size=10),
    tags=st.dictionaries(st.text(max_size=5), longs, max_size=5),
    parent=st.none() | longs,
)


class TestVarintProperties:
    """Property-based tests for the varint layer."""

    @given(value=longs)
    def test_zigzag_invertible(self, value: int) -> None:
        """Test zig-zag mapping is invertible."""
        assert zigzag_decode(zigzag_encode(value, 64)) == value

    @given(value=longs)
    def test_long_roundtrip(self, value: int) -> None:
        """Test write_long/read_long are inverse and consume every byte."""
        encoder = BinaryEncoder()
        encoder.write_long(value)
        decoder = BinaryDecoder(encoder.getvalue())
        assert decoder.read_long() == value
        assert decoder.remaining() == 0

    @given(value=ints)
    def test_int_and_long_agree(self, value: int) -> None:
        """Test int and long share one encoding inside the int range."""
        as_int = BinaryEncoder()
        as_int.write_int(value)
        as_long = BinaryEncoder()
        as_long.write_long(value)
        assert as_int.getvalue() == as_long.getvalue()
        assert len(as_int) <= 5

    @given(value=longs)
    def test_small_magnitudes_are_short(self, value: int) -> None:
        """Test varint length grows with magnitude."""
        encoder = BinaryEncoder()
        encoder.write_long(value)
        assert len(encoder) <= 10
        if -64 <= value < 64:
            assert len(encoder) == 1


class TestCodecProperties:
    """Property-based tests for derived codecs."""

    @given(value=st.text())
    def test_string_roundtrip(self, value: str) -> None:
        """Test any str survives encoding."""
        assert decode(str, encode(value, str, REGISTRY), REGISTRY) == value

    @given(value=st.binary(max_size=1000))
    def test_bytes_roundtrip(self, value: bytes) -> None:
        """Test any bytes survive encoding."""
        assert decode(bytes, encode(value, bytes, REGISTRY), REGISTRY) == value

    @given(values=st.lists(longs, max_size=50))
    def test_list_roundtrip(self, values: list[int]) -> None:
        """Test lists of longs survive encoding."""
        assert decode(list[int], encode(values, list[int], REGISTRY), REGISTRY) == values

    @given(values=st.lists(ints, max_size=50), block=st.integers(min_value=1, max_value=8))
    def test_blocking_is_transparent(self, values: list[int], block: int) -> None:
        """Test block size never changes the decoded value."""
        blocked = CodecRegistry(CodecSettings(array_block_size=block))
        data = encode(values, list[int], blocked)
        assert decode(list[int], data, REGISTRY) == values

    @given(sample=samples)
    def test_record_roundtrip(self, sample: Sample) -> None:
        """Test record encode/decode is invertible."""
        assert decode(Sample, encode(sample, registry=REGISTRY), REGISTRY) == sample

    @given(sample=samples)
    def test_record_json_roundtrip(self, sample: Sample) -> None:
        """Test record JSON encoding is invertible."""
        codec = REGISTRY.get(Sample)
        assert codec.from_json(codec.to_json(sample)) == sample

    @given(sample=samples)
    def test_encode_deterministic(self, sample: Sample) -> None:
        """Test encoding is deterministic."""
        copy = Sample.model_validate(sample.model_dump())
        assert encode(sample, registry=REGISTRY) == encode(copy, registry=REGISTRY)
