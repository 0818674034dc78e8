"""Logging configuration for typedavro.

All typedavro logging goes through the standard library under the
"typedavro" logger hierarchy; components log to children such as
"typedavro.registry". By default no handlers are configured, so output
follows whatever logging setup the host application already has.

Example:
    Basic logging configuration::

        import logging
        from typedavro.logging_config import configure_logging

        configure_logging(level=logging.DEBUG)

    Disable logging::

        from typedavro.logging_config import disable_logging

        disable_logging()

Attributes:
    TYPEDAVRO_LOGGER_NAME: The name of the root typedavro logger ("typedavro").
"""

from __future__ import annotations

import logging

TYPEDAVRO_LOGGER_NAME = "typedavro"


def get_logger(component: str = "") -> logging.Logger:
    """Get a typedavro logger.

    Args:
        component: Component name (e.g. "registry", "discovery").
            If empty, returns the root typedavro logger.

    Returns:
        A logger instance for the specified component.

    Example:
        >>> logger = get_logger("registry")
        >>> logger.name
        'typedavro.registry'
    """
    if component:
        return logging.getLogger(f"{TYPEDAVRO_LOGGER_NAME}.{component}")
    return logging.getLogger(TYPEDAVRO_LOGGER_NAME)


def configure_logging(
    level: int = logging.INFO,
    format_string: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handler: logging.Handler | None = None,
) -> logging.Logger:
    """Configure the typedavro logger.

    A handler is only added if the logger has none yet, so calling this twice
    does not duplicate output.

    Args:
        level: Logging level (e.g. ``logging.DEBUG``). Defaults to ``logging.INFO``.
        format_string: Format string for log records.
        handler: Optional custom handler. If None, a StreamHandler is used.

    Returns:
        The configured root typedavro logger.
    """
    logger = get_logger()
    logger.setLevel(level)

    if not logger.handlers:
        if handler is None:
            handler = logging.StreamHandler()
        handler.setLevel(level)
        handler.setFormatter(logging.Formatter(format_string))
        logger.addHandler(handler)

    return logger


def set_level(level: int, component: str = "") -> None:
    """Set the level of the root typedavro logger or one component logger."""
    logger = get_logger(component)
    logger.setLevel(level)
    if not component:
        for handler in logger.handlers:
            handler.setLevel(level)


def _package_loggers() -> list[logging.Logger]:
    # Child loggers handle their own records, so each one is toggled
    prefix = TYPEDAVRO_LOGGER_NAME + "."
    children = [
        logger
        for name, logger in logging.Logger.manager.loggerDict.items()
        if name.startswith(prefix) and isinstance(logger, logging.Logger)
    ]
    return [get_logger(), *children]


def disable_logging() -> None:
    """Disable all typedavro logging."""
    for logger in _package_loggers():
        logger.disabled = True


def enable_logging() -> None:
    """Re-enable typedavro logging after disable_logging()."""
    for logger in _package_loggers():
        logger.disabled = False
