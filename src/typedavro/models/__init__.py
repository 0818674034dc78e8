"""Host-side modeling for typedavro.

This module provides the AvroRecord base class, width annotations, fixed-size
byte helpers and the tagged Either values.
"""

from __future__ import annotations

from .base import AvroRecord
from .either import Either, Left, Right
from .fields import Byte, Double, Fixed, FixedBytes, FixedData, Float, Int, Long

__all__ = [
    "AvroRecord",
    "Either",
    "Left",
    "Right",
    "Byte",
    "Double",
    "Fixed",
    "FixedBytes",
    "FixedData",
    "Float",
    "Int",
    "Long",
]
