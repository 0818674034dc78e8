"""Unit tests for settings and logging configuration."""

from __future__ import annotations

import logging
from collections.abc import Iterator

import pytest

from typedavro import CodecRegistry, CodecSettings, encode
from typedavro.config import DEFAULT_EXCLUDED_MODULES
from typedavro.logging_config import (
    TYPEDAVRO_LOGGER_NAME,
    configure_logging,
    disable_logging,
    enable_logging,
    get_logger,
    set_level,
)


@pytest.fixture
def clean_logger() -> Iterator[logging.Logger]:
    """Restore the typedavro logger after a test changes it."""
    logger = get_logger()
    handlers = list(logger.handlers)
    level = logger.level
    yield logger
    for handler in list(logger.handlers):
        if handler not in handlers:
            logger.removeHandler(handler)
    logger.setLevel(level)
    get_logger("registry").setLevel(logging.NOTSET)
    enable_logging()


class TestSettings:
    """Test CodecSettings validation."""

    def test_defaults(self) -> None:
        """Test default settings."""
        settings = CodecSettings()
        assert settings.array_block_size is None
        assert settings.reject_unknown_fields
        assert settings.scan_loaded_subclasses
        assert settings.discovery_excluded_modules == DEFAULT_EXCLUDED_MODULES

    @pytest.mark.parametrize("size", [0, -5])
    def test_invalid_block_size(self, size: int) -> None:
        """Test block sizes must be positive."""
        with pytest.raises(ValueError, match="array_block_size must be > 0"):
            CodecSettings(array_block_size=size)

    def test_excluded_modules_string(self) -> None:
        """Test a bare string is rejected."""
        with pytest.raises(ValueError, match="not a string"):
            CodecSettings(discovery_excluded_modules="tests")

    def test_excluded_modules_list(self) -> None:
        """Test a list is stored as a tuple."""
        settings = CodecSettings(discovery_excluded_modules=["app.internal"])
        assert settings.discovery_excluded_modules == ("app.internal",)
        hash(settings)

    def test_is_excluded_module(self) -> None:
        """Test prefix matching on module boundaries."""
        settings = CodecSettings(discovery_excluded_modules=("app.internal",))
        assert settings.is_excluded_module("app.internal")
        assert settings.is_excluded_module("app.internal.models")
        assert not settings.is_excluded_module("app.internals")
        assert not settings.is_excluded_module("app")

    def test_block_size_applied(self) -> None:
        """Test arrays are split into blocks of the configured size."""
        registry = CodecRegistry(CodecSettings(array_block_size=2))
        data = encode([1, 2, 3], list[int], registry)
        assert data == b"\x04\x02\x04\x02\x06\x00"


class TestLogging:
    """Test the logging helpers."""

    def test_logger_names(self) -> None:
        """Test component loggers live under the package logger."""
        assert get_logger().name == TYPEDAVRO_LOGGER_NAME
        assert get_logger("registry").name == "typedavro.registry"

    def test_configure_logging(self, clean_logger: logging.Logger) -> None:
        """Test a handler is added once."""
        before = len(clean_logger.handlers)
        configure_logging(level=logging.DEBUG)
        configure_logging(level=logging.DEBUG)
        assert clean_logger.level == logging.DEBUG
        assert len(clean_logger.handlers) == max(before, 1)

    def test_set_level_component(self, clean_logger: logging.Logger) -> None:
        """Test setting the level of one component."""
        set_level(logging.WARNING, "registry")
        assert get_logger("registry").level == logging.WARNING

    def test_derivation_logged(
        self, clean_logger: logging.Logger, caplog: pytest.LogCaptureFixture
    ) -> None:
        """Test derivation is logged at DEBUG."""
        caplog.set_level(logging.DEBUG, logger=TYPEDAVRO_LOGGER_NAME)
        CodecRegistry().get(dict[str, int])
        assert "Committed 2 codec(s)" in caplog.text

    def test_disable_logging(
        self, clean_logger: logging.Logger, caplog: pytest.LogCaptureFixture
    ) -> None:
        """Test nothing is logged while disabled."""
        caplog.set_level(logging.DEBUG, logger=TYPEDAVRO_LOGGER_NAME)
        disable_logging()
        CodecRegistry().get(list[str])
        assert not [r for r in caplog.records if r.name.startswith(TYPEDAVRO_LOGGER_NAME)]
