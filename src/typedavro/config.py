"""Configuration for codec derivation and encoding.

This module provides the settings dataclass read by a CodecRegistry and the
codecs it derives. Loading settings from files or the environment is left to
the host application.
"""

from __future__ import annotations

from dataclasses import dataclass

DEFAULT_EXCLUDED_MODULES: tuple[str, ...] = (
    "builtins",
    "typing",
    "abc",
    "enum",
    "collections",
    "pydantic",
    "typedavro",
)


@dataclass(frozen=True)
class CodecSettings:
    """Settings shared by a registry and every codec it derives.

    Attributes:
        array_block_size: Maximum number of items per block when writing arrays
            and maps (default None = one block holding every item).
            Readers accept any blocking regardless of this value.

        reject_unknown_fields: Whether decoding a JSON record object that carries
            undeclared keys fails with UnexpectedField (default True).

        scan_loaded_subclasses: Whether open-world union discovery walks the
            currently loaded subclasses of an abstract type in addition to the
            subtypes registered with ``CodecRegistry.register_subtype``
            (default True).

        discovery_excluded_modules: Module prefixes ignored by the subclass walk.
            A class is skipped when its ``__module__`` equals a prefix or starts
            with ``prefix + "."``.

    Examples:
        ```python
        from typedavro import CodecRegistry, CodecSettings

        # Stream-friendly arrays: at most 100 items per block
        registry = CodecRegistry(CodecSettings(array_block_size=100))

        # Tolerate extra keys in JSON records
        lenient = CodecRegistry(CodecSettings(reject_unknown_fields=False))

        # Only explicitly registered subtypes take part in open unions
        closed = CodecRegistry(CodecSettings(scan_loaded_subclasses=False))
        ```
    """

    array_block_size: int | None = None
    reject_unknown_fields: bool = True
    scan_loaded_subclasses: bool = True
    discovery_excluded_modules: tuple[str, ...] = DEFAULT_EXCLUDED_MODULES

    def __post_init__(self) -> None:
        """Validate configuration parameters."""
        if self.array_block_size is not None and self.array_block_size <= 0:
            raise ValueError(f"array_block_size must be > 0, got {self.array_block_size}")

        if isinstance(self.discovery_excluded_modules, str):
            raise ValueError(
                "discovery_excluded_modules must be a sequence of module names, not a string"
            )

        # Lists are accepted for convenience; the stored value stays hashable
        object.__setattr__(
            self, "discovery_excluded_modules", tuple(self.discovery_excluded_modules)
        )

    def is_excluded_module(self, module_name: str) -> bool:
        """Return True if classes from ``module_name`` are skipped by discovery."""
        return any(
            module_name == prefix or module_name.startswith(prefix + ".")
            for prefix in self.discovery_excluded_modules
        )
