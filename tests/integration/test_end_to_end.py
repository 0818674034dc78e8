"""End-to-end integration tests."""

from __future__ import annotations

import enum
import json
from abc import ABC
from typing import ClassVar, Optional

import pytest
from pydantic import Field

from typedavro import (
    AvroRecord,
    Byte,
    CodecRegistry,
    CodecSettings,
    Either,
    Float,
    Int,
    Left,
    Right,
    decode,
    decode_json,
    encode,
    encode_json,
    to_avro_schema,
)
from typedavro.exceptions import MalformedInput, UnexpectedField


class MissionPhase(enum.Enum):
    """Mission phase enum."""

    STARTUP = 1
    TRANSIT = 2
    SURVEY = 3
    RETURN = 4
    SHUTDOWN = 5


class Waypoint(AvroRecord):
    """A position in local coordinates."""

    avro_namespace: ClassVar[str] = "fleet"

    x_m: Float
    y_m: Float
    depth_m: Float = 0.0


class StatusReport(AvroRecord):
    """Vehicle status report."""

    avro_namespace: ClassVar[str] = "fleet"

    vehicle_id: Byte = Field(description="Vehicle ID")
    mission_phase: MissionPhase
    depth_cm: Int = Field(ge=0, le=10000)
    battery_pct: Int = Field(ge=0, le=100)
    emergency: bool
    route: list[Waypoint] = Field(default_factory=list)
    counters: dict[str, int] = Field(default_factory=dict)
    last_fix: Optional[Waypoint] = None


class Command(AvroRecord, ABC):
    """Commands a vehicle accepts."""

    avro_namespace: ClassVar[str] = "fleet"
    avro_sealed: ClassVar[bool] = True


class Dive(Command):
    target_depth_cm: Int


class Surface(Command):
    reason: str = "scheduled"


class Goto(Command):
    waypoint: Waypoint
    speed_dmps: Int = 10


class CommandBatch(AvroRecord):
    """Commands sent in one transmission, with the result of the last one."""

    avro_namespace: ClassVar[str] = "fleet"

    commands: list[Command]
    last_result: Either[Int, str] = Left(0)


@pytest.fixture
def status() -> StatusReport:
    return StatusReport(
        vehicle_id=42,
        mission_phase=MissionPhase.SURVEY,
        depth_cm=2500,
        battery_pct=87,
        emergency=False,
        route=[Waypoint(x_m=10.0, y_m=-4.5), Waypoint(x_m=12.5, y_m=0.0, depth_m=30.0)],
        counters={"pings": 12},
        last_fix=Waypoint(x_m=9.5, y_m=-4.0),
    )


class TestEndToEndWorkflow:
    """Test complete end-to-end workflows."""

    def test_status_report_workflow(self, status: StatusReport) -> None:
        """Test complete status report workflow."""
        # 1. Encode through the record helpers (default registry)
        data = status.to_avro()
        assert data[:2] == b"\x54\x04"  # vehicle_id 42, phase index 2

        # 2. Decode and compare
        decoded = StatusReport.from_avro(data)
        assert decoded == status
        assert decoded.route[1].depth_m == 30.0

        # 3. Functional API agrees with the helpers
        assert encode(status) == data
        assert decode(StatusReport, data) == status

    def test_json_workflow(self, status: StatusReport) -> None:
        """Test the Avro-JSON form survives a trip through the json module."""
        node = status.to_avro_json()
        assert node["mission_phase"] == "SURVEY"
        assert node["last_fix"] == {"fleet.Waypoint": {"x_m": 9.5, "y_m": -4.0, "depth_m": 0.0}}

        text = json.dumps(node)
        assert StatusReport.from_avro_json(json.loads(text)) == status

    def test_command_batch(self) -> None:
        """Test a list of sealed commands with an Either result."""
        batch = CommandBatch(
            commands=[
                Dive(target_depth_cm=1500),
                Goto(waypoint=Waypoint(x_m=1.0, y_m=2.0)),
                Surface(),
            ],
            last_result=Right("depth sensor fault"),
        )
        registry = CodecRegistry()
        data = encode(batch, registry=registry)
        decoded = decode(CommandBatch, data, registry)

        assert [type(c) for c in decoded.commands] == [Dive, Goto, Surface]
        assert decoded == batch
        assert decode_json(CommandBatch, encode_json(batch, registry=registry), registry) == batch

    def test_schema_export(self) -> None:
        """Test the exported schema names every record once."""
        schema = to_avro_schema(CommandBatch, CodecRegistry())
        text = json.dumps(schema)

        assert schema["name"] == "CommandBatch"
        commands = schema["fields"][0]["type"]["items"]
        assert [branch["name"] for branch in commands] == ["Dive", "Surface", "Goto"]
        assert text.count('"name": "Waypoint"') == 1
        assert schema["fields"][1] == {
            "name": "last_result",
            "type": ["int", "string"],
            "default": 0,
        }


class TestEndToEndErrors:
    """Test error handling end to end."""

    def test_truncated_message(self, status: StatusReport) -> None:
        """Test decoding a truncated message."""
        data = status.to_avro()
        with pytest.raises(MalformedInput):
            StatusReport.from_avro(data[:-3])

    def test_trailing_bytes(self, status: StatusReport) -> None:
        """Test top-level decode rejects trailing bytes."""
        with pytest.raises(MalformedInput, match="Trailing data"):
            decode(StatusReport, status.to_avro() + b"\x00")

    def test_unknown_json_field(self, status: StatusReport) -> None:
        """Test JSON with an undeclared key."""
        node = status.to_avro_json()
        node["firmware"] = "1.2.0"
        with pytest.raises(UnexpectedField):
            StatusReport.from_avro_json(node)

        lenient = CodecRegistry(CodecSettings(reject_unknown_fields=False))
        assert decode_json(StatusReport, node, lenient) == status
