"""Derivation of codecs from Python types."""

from __future__ import annotations

from .construction import (
    ConstructionStrategy,
    DirectConstructor,
    IncrementalBuilder,
    VariadicFactory,
    collection_strategy,
)
from .engine import TypeDerivationEngine

__all__ = [
    "TypeDerivationEngine",
    "ConstructionStrategy",
    "DirectConstructor",
    "VariadicFactory",
    "IncrementalBuilder",
    "collection_strategy",
]
