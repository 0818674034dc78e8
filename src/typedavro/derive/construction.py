"""Construction strategies: how a host value is rebuilt from decoded parts.

A strategy is chosen once per record or collection type during derivation and
reused for every decode.
"""

from __future__ import annotations

import collections
import inspect
from abc import ABC, abstractmethod
from collections.abc import Callable, Sequence
from typing import Any

from ..exceptions import UnsupportedType

# Builtin collections whose constructor accepts every element at once
VARIADIC_BUILTINS: tuple[type, ...] = (list, tuple, set, frozenset, collections.deque, dict)

_APPEND_METHODS = ("append", "add")
_BUILDER_FACTORIES = ("builder", "new_builder")
_BUILDER_RESULTS = ("build", "result")


class ConstructionStrategy(ABC):
    """Builds a host value from an ordered list of decoded values."""

    @abstractmethod
    def build(self, values: Sequence[Any]) -> Any:
        """Return a new host value built from ``values``."""


class DirectConstructor(ConstructionStrategy):
    """Calls a constructor with one keyword argument per field, in order.

    Attributes:
        factory: The constructor (usually the record class itself)
        param_names: Constructor keyword for each field, in field order
    """

    def __init__(self, factory: Callable[..., Any], param_names: Sequence[str]) -> None:
        self.factory = factory
        self.param_names = tuple(param_names)

    def build(self, values: Sequence[Any]) -> Any:
        return self.factory(**dict(zip(self.param_names, values)))

    def __repr__(self) -> str:
        return f"DirectConstructor({_name(self.factory)}, {self.param_names})"


class VariadicFactory(ConstructionStrategy):
    """Hands every element to a factory in one call.

    With ``spread`` the elements are passed as positional arguments
    (``factory(*values)``), otherwise as one sequence (``factory(values)``).
    """

    def __init__(self, factory: Callable[..., Any], spread: bool = False) -> None:
        self.factory = factory
        self.spread = spread

    def build(self, values: Sequence[Any]) -> Any:
        if self.spread:
            return self.factory(*values)
        return self.factory(values)

    def __repr__(self) -> str:
        return f"VariadicFactory({_name(self.factory)}, spread={self.spread})"


class IncrementalBuilder(ConstructionStrategy):
    """Starts an empty builder, appends each element, then finalizes it.

    Attributes:
        start: Returns a new, empty builder
        add: Appends one element to a builder
        finish: Turns the filled builder into the host value
    """

    def __init__(
        self,
        start: Callable[[], Any],
        add: Callable[[Any, Any], Any],
        finish: Callable[[Any], Any] | None = None,
    ) -> None:
        self.start = start
        self.add = add
        self.finish = finish

    def build(self, values: Sequence[Any]) -> Any:
        builder = self.start()
        for value in values:
            self.add(builder, value)
        if self.finish is None:
            return builder
        return self.finish(builder)

    def __repr__(self) -> str:
        return f"IncrementalBuilder({_name(self.start)})"


def _name(factory: Any) -> str:
    return getattr(factory, "__qualname__", None) or repr(factory)


def _signature(factory: Any) -> inspect.Signature | None:
    try:
        return inspect.signature(factory)
    except (TypeError, ValueError):
        return None


def _accepts_varargs(cls: type) -> bool:
    signature = _signature(cls)
    if signature is None:
        return False
    return any(p.kind is inspect.Parameter.VAR_POSITIONAL for p in signature.parameters.values())


def _nullary(factory: Any) -> bool:
    signature = _signature(factory)
    if signature is None:
        return False
    return all(
        p.default is not inspect.Parameter.empty
        or p.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD)
        for p in signature.parameters.values()
    )


def _first_attr(obj: Any, names: Sequence[str]) -> str | None:
    for name in names:
        if callable(getattr(obj, name, None)):
            return name
    return None


def _append(method: str) -> Callable[[Any, Any], Any]:
    def add(builder: Any, value: Any) -> None:
        getattr(builder, method)(value)

    return add


def _setitem(builder: Any, entry: tuple[str, Any]) -> None:
    key, value = entry
    builder[key] = value


def direct_constructor(cls: type, param_names: Sequence[str]) -> DirectConstructor:
    """Strategy for a fixed product of named fields."""
    return DirectConstructor(cls, param_names)


def collection_strategy(cls: type, *, is_map: bool = False) -> ConstructionStrategy:
    """Choose how to rebuild a collection-shaped host type.

    Resolution order:
        1. Variadic factory: a builtin collection (or subclass) constructor
           taking all elements as one iterable, or a constructor taking ``*items``.
        2. Incremental builder: a ``builder()``/``new_builder()`` class method
           whose result supports ``append``/``add`` and ``build``/``result``;
           otherwise a no-argument constructor plus ``append``/``add``
           (``__setitem__`` for maps).

    Raises:
        UnsupportedType: If no strategy can be located
    """
    if issubclass(cls, VARIADIC_BUILTINS):
        return VariadicFactory(cls)

    if _accepts_varargs(cls):
        return VariadicFactory(cls, spread=True)

    factory_name = _first_attr(cls, _BUILDER_FACTORIES)
    if factory_name is not None:
        factory = getattr(cls, factory_name)
        if _nullary(factory):
            sample = factory()
            add_name = "__setitem__" if is_map else _first_attr(sample, _APPEND_METHODS)
            result_name = _first_attr(sample, _BUILDER_RESULTS)
            if add_name is not None and result_name is not None:
                return IncrementalBuilder(
                    factory,
                    _setitem if is_map else _append(add_name),
                    lambda builder: getattr(builder, result_name)(),
                )

    if _nullary(cls):
        if is_map and hasattr(cls, "__setitem__"):
            return IncrementalBuilder(cls, _setitem)
        add_name = _first_attr(cls, _APPEND_METHODS)
        if not is_map and add_name is not None:
            return IncrementalBuilder(cls, _append(add_name))

    raise UnsupportedType(
        f"No construction strategy for collection type {cls.__qualname__}: "
        f"expected a builtin collection base, a *items constructor, a "
        f"builder()/new_builder() factory, or a no-argument constructor with "
        f"{'__setitem__' if is_map else 'append()/add()'}"
    )
