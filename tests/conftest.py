"""Pytest configuration and shared fixtures."""

from __future__ import annotations

import pytest

from typedavro import CodecRegistry, CodecSettings


@pytest.fixture
def registry() -> CodecRegistry:
    """A fresh registry, so derivations and cached failures don't leak between tests."""
    return CodecRegistry()


@pytest.fixture
def lenient_registry() -> CodecRegistry:
    """Registry that tolerates unknown keys in JSON records."""
    return CodecRegistry(CodecSettings(reject_unknown_fields=False))


@pytest.fixture
def sample_payload() -> bytes:
    """Sample binary payload for testing."""
    return b"Hello, typed world!"
