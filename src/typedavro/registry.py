"""Codec registry: one shared codec per type request.

The registry owns every codec it hands out. A request is derived once, on
first use, and the resulting codec (with all member codecs derived along the
way) is committed atomically; later lookups are plain dictionary reads.
"""

from __future__ import annotations

import threading
from typing import Any

from .codec.base import Codec
from .config import CodecSettings
from .derive.engine import TypeDerivationEngine
from .derive.introspect import normalize_request, request_key, type_label
from .exceptions import DerivationConflict, SchemaError
from .logging_config import get_logger

logger = get_logger("registry")


class CodecRegistry:
    """Derives, caches and shares codecs.

    Derivation is serialized by a single re-entrant lock. The thread that
    derives a request owns a transaction: every codec created while deriving
    it is kept pending and committed together when the top-level request
    succeeds. On failure the pending codecs are discarded and the error is
    remembered, so the same request fails the same way without re-deriving.

    Committed lookups and all encode/decode calls take no lock.

    Args:
        settings: Settings for this registry and the codecs it derives

    Example:
        >>> registry = CodecRegistry()
        >>> codec = registry.get(list[int])
        >>> codec.encode([1, 2, 3])
        b'\\x06\\x02\\x04\\x06\\x00'
        >>> registry.get(list[int]) is codec
        True
    """

    def __init__(self, settings: CodecSettings | None = None) -> None:
        self.settings = settings if settings is not None else CodecSettings()
        self._engine = TypeDerivationEngine(self)
        self._lock = threading.RLock()
        self._codecs: dict[Any, Codec] = {}
        self._failures: dict[Any, SchemaError] = {}
        self._pending: dict[Any, Codec] | None = None
        self._subtypes: dict[type, list[type]] = {}

    def __contains__(self, request: Any) -> bool:
        return request_key(request) in self._codecs

    def __len__(self) -> int:
        return len(self._codecs)

    def get(self, request: Any) -> Codec:
        """Return the codec for ``request``, deriving it on first use.

        Args:
            request: A type or typing annotation (``int``, ``list[str]``,
                ``Optional[Node]``, a record class, ...)

        Returns:
            The shared codec instance for the request

        Raises:
            SchemaError: If no codec can be derived (cached; raised again on
                every later request for the same type)
        """
        key = request_key(request)
        codec = self._codecs.get(key)
        if codec is not None:
            return codec

        with self._lock:
            codec = self._codecs.get(key)
            if codec is not None:
                return codec
            failure = self._failures.get(key)
            if failure is not None:
                raise failure

            if self._pending is not None:
                # Member of a derivation this thread is already running
                pending = self._pending.get(key)
                if pending is not None:
                    return pending
                return self._derive(key, request)

            self._pending = {}
            try:
                codec = self._derive(key, request)
                self._commit()
            except SchemaError as e:
                self._failures.setdefault(key, e)
                logger.debug("Derivation of %s failed: %s", type_label(request), e)
                raise
            finally:
                self._pending = None
            return codec

    def reserve(self, request: Any, codec: Codec) -> None:
        """Make an incomplete codec visible to the derivation in progress.

        Records and unions call this before deriving their members so that a
        member referring back to them resolves to ``codec``.
        """
        if self._pending is None:
            raise RuntimeError("reserve() is only valid while a derivation is in progress")
        self._pending[request_key(request)] = codec

    def _derive(self, key: Any, request: Any) -> Codec:
        try:
            codec = self._engine.derive(normalize_request(request))
        except SchemaError as e:
            self._failures.setdefault(key, e)
            raise
        self._pending[key] = codec
        return codec

    def _commit(self) -> None:
        pending = self._pending
        # Completing descriptors may still reject the batch (duplicate union members)
        names = [codec.descriptor.type_name for codec in pending.values()]

        for key, codec in pending.items():
            existing = self._codecs.get(key)
            if existing is not None and existing is not codec:
                raise DerivationConflict(
                    f"A different codec is already registered for {type_label(codec.host_type)}"
                )

        self._codecs.update(pending)
        logger.debug("Committed %d codec(s): %s", len(pending), ", ".join(names))

    def register(self, request: Any, codec: Codec) -> None:
        """Install a hand-written codec for ``request``.

        Registering the same codec twice is a no-op.

        Raises:
            DerivationConflict: If a different codec is already registered
        """
        key = request_key(request)
        with self._lock:
            existing = self._codecs.get(key)
            if existing is not None:
                if existing is not codec:
                    raise DerivationConflict(
                        f"{type_label(request)} already has codec {existing!r}. "
                        f"Cannot register {codec!r} for the same type."
                    )
                return
            self._failures.pop(key, None)
            self._codecs[key] = codec
            logger.debug("Registered codec %r for %s", codec, type_label(request))

    def register_subtype(self, base: type, *subtypes: type) -> None:
        """Declare concrete subtypes of an open abstract class.

        Must be called before ``base`` is first encoded or decoded; its union
        membership is fixed at that point.

        Raises:
            TypeError: If a subtype is not a subclass of ``base``
        """
        for subtype in subtypes:
            if not isinstance(subtype, type) or not issubclass(subtype, base):
                raise TypeError(f"{subtype!r} is not a subclass of {base.__qualname__}")

        with self._lock:
            if base in self:
                logger.warning(
                    "Subtypes registered for %s after its codec was derived are ignored",
                    base.__qualname__,
                )
            registered = self._subtypes.setdefault(base, [])
            for subtype in subtypes:
                if subtype not in registered:
                    registered.append(subtype)

    def registered_subtypes(self, base: type) -> list[type]:
        return list(self._subtypes.get(base, ()))


_default_registry: CodecRegistry | None = None
_default_lock = threading.Lock()


def default_registry() -> CodecRegistry:
    """Return the process-wide registry used when none is passed explicitly."""
    global _default_registry
    if _default_registry is None:
        with _default_lock:
            if _default_registry is None:
                _default_registry = CodecRegistry()
    return _default_registry
