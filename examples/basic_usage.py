#!/usr/bin/env python3
"""Basic usage example for typedavro.

This example demonstrates:
1. Defining records with Pydantic
2. Encoding to Avro binary
3. Decoding back to a Pydantic model
4. The Avro-JSON form and the exported Avro schema
"""

from __future__ import annotations

import enum
import json
from typing import ClassVar, Optional

from pydantic import Field

from typedavro import AvroRecord, Byte, Float, Int, decode, encode, to_avro_schema


class Phase(enum.Enum):
    STARTUP = 1
    TRANSIT = 2
    SURVEY = 3


class Position(AvroRecord):
    """A position in local coordinates."""

    avro_namespace: ClassVar[str] = "fleet"

    x_m: Float
    y_m: Float


# Define a record class
class StatusReport(AvroRecord):
    """Vehicle status report.

    Width annotations (Byte, Int, Float) select the Avro type of each field.
    """

    avro_namespace: ClassVar[str] = "fleet"

    vehicle_id: Byte = Field(description="Vehicle ID")
    phase: Phase
    depth_cm: Int = Field(ge=0, description="Depth in centimeters")
    battery_pct: Int = Field(ge=0, le=100)
    active: bool
    position: Optional[Position] = None
    log: list[str] = Field(default_factory=list)


def main() -> None:
    """Run the basic usage example."""
    print("=" * 60)
    print("typedavro Basic Usage Example")
    print("=" * 60)
    print()

    # Create a record instance
    print("1. Creating a status report...")
    msg = StatusReport(
        vehicle_id=42,
        phase=Phase.SURVEY,
        depth_cm=2500,
        battery_pct=87,
        active=True,
        position=Position(x_m=12.5, y_m=-3.0),
        log=["dive", "hold"],
    )
    print(f"   {msg!r}")
    print()

    # Encode the record
    print("2. Encoding to Avro binary...")
    encoded_data = encode(msg)
    print(f"   Encoded size: {len(encoded_data)} bytes")
    print(f"   Hex: {encoded_data.hex()}")
    print()

    # Decode the record
    print("3. Decoding from binary...")
    decoded_msg = decode(StatusReport, encoded_data)
    print(f"   {decoded_msg!r}")
    if decoded_msg == msg:
        print("   Round-trip successful! Records match.")
    else:
        print("   Round-trip failed! Records don't match.")
    print()

    # Avro-JSON
    print("4. Avro-JSON value tree...")
    print(f"   {json.dumps(msg.to_avro_json())}")
    print()

    # Schema
    print("5. Avro schema...")
    print(json.dumps(to_avro_schema(StatusReport), indent=2))
    print()

    # Compare to pydantic's JSON
    json_bytes = msg.model_dump_json().encode("utf-8")
    print(f"   Avro size: {len(encoded_data)} bytes")
    print(f"   JSON size: {len(json_bytes)} bytes")
    print()

    print("=" * 60)
    print("Example complete!")
    print("=" * 60)


if __name__ == "__main__":
    main()
