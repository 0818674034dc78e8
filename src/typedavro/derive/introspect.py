"""Introspection of host types.

This module answers the structural questions the derivation engine asks about
a Python type: which fields a record has and how it is constructed, which
annotation markers narrow a type, whether a class is abstract, and which
concrete subclasses an abstract class currently has.
"""

from __future__ import annotations

import collections
import collections.abc
import dataclasses
import enum
import inspect
import re
import types
from abc import ABC
from dataclasses import dataclass
from typing import Annotated, Any, Union, get_args, get_origin, get_type_hints

from pydantic import BaseModel
from pydantic.fields import FieldInfo

from ..codec.schema import PrimitiveKind
from ..config import CodecSettings
from ..exceptions import UnsupportedType
from ..models.fields import Fixed, FixedData

NoneType = type(None)

_INVALID_NAME_CHARS = re.compile(r"[^A-Za-z0-9_]")


@dataclass(frozen=True)
class FieldSpec:
    """One record field as found on the host type.

    Attributes:
        name: Field name on the wire and in JSON
        annotation: Declared type of the field
        attribute: Attribute that holds the value on an instance
        param: Constructor keyword that receives the value
        has_default: Whether a default value is available
        default: The default host value (the result of a default factory,
            called once)
    """

    name: str
    annotation: Any
    attribute: str
    param: str
    has_default: bool = False
    default: Any = None


@dataclass(frozen=True)
class FixedLength:
    """Annotation marker for bytes constrained to one exact length."""

    size: int


# ---------------------------------------------------------------------------
# Annotations and requests
# ---------------------------------------------------------------------------


def is_union_origin(origin: Any) -> bool:
    return origin is Union or origin is types.UnionType


def annotation_markers(metadata: tuple[Any, ...]) -> tuple[Any, ...]:
    """Reduce ``Annotated`` metadata to the markers that change the encoding.

    Recognized markers are a PrimitiveKind, a Fixed declaration, and length
    constraints (pydantic ``Field``/annotated-types) whose minimum equals
    their maximum, reported as FixedLength. Anything else is ignored.
    """
    markers: list[Any] = []
    min_length = None
    max_length = None

    for item in metadata:
        if isinstance(item, (PrimitiveKind, Fixed)):
            markers.append(item)
            continue
        # A FieldInfo inside Annotated carries its constraints in .metadata
        constraints = item.metadata if isinstance(item, FieldInfo) else [item]
        for constraint in constraints:
            if getattr(constraint, "min_length", None) is not None:
                min_length = constraint.min_length
            if getattr(constraint, "max_length", None) is not None:
                max_length = constraint.max_length

    if min_length is not None and min_length == max_length:
        markers.append(FixedLength(min_length))
    return tuple(markers)


def normalize_request(request: Any) -> Any:
    """Map the ``None`` shorthand to ``NoneType``; other requests are unchanged."""
    if request is None:
        return NoneType
    return request


def request_key(request: Any) -> Any:
    """Return the hashable registry key for a type request.

    Generic aliases become ``(origin, args)`` tuples and unions keep their
    member order (``int | str`` and ``str | int`` are different unions on the
    wire even though Python treats them as equal). Annotated types keep only
    the markers reported by annotation_markers.

    Raises:
        UnsupportedType: If the request is not hashable
    """
    request = normalize_request(request)
    origin = get_origin(request)

    if origin is Annotated:
        base = get_args(request)[0]
        return ("annotated", request_key(base), annotation_markers(request.__metadata__))

    if origin is None:
        try:
            hash(request)
        except TypeError as e:
            raise UnsupportedType(f"Type request {request!r} is not hashable") from e
        return request

    if is_union_origin(origin):
        origin = Union
    return (origin, tuple(request_key(arg) for arg in get_args(request)))


def type_label(tp: Any) -> str:
    """Readable name of a type request for messages."""
    if isinstance(tp, type) and get_origin(tp) is None:
        return tp.__qualname__
    return repr(tp)


# ---------------------------------------------------------------------------
# Names
# ---------------------------------------------------------------------------


def _avro_identifier(text: str) -> str:
    name = _INVALID_NAME_CHARS.sub("_", text)
    if name[:1].isdigit():
        name = "_" + name
    return name


def avro_name(cls: type) -> tuple[str, str | None]:
    """Return the (name, namespace) a named type is written under.

    ``avro_name``/``avro_namespace`` are honoured only when the class itself
    declares them. Otherwise the qualified name (with any character outside
    ``[A-Za-z0-9_]`` replaced by ``_``) and the defining module are used.
    """
    # Enum class attributes are members, not options
    own = {} if issubclass(cls, enum.Enum) else cls.__dict__
    name = own.get("avro_name")
    if not isinstance(name, str):
        name = _avro_identifier(cls.__qualname__)
    namespace = own.get("avro_namespace")
    if not isinstance(namespace, str):
        namespace = cls.__module__
    return name, namespace or None


# ---------------------------------------------------------------------------
# Classification
# ---------------------------------------------------------------------------


def is_fixed_data(tp: Any) -> bool:
    return isinstance(tp, type) and issubclass(tp, FixedData) and tp is not FixedData


def is_enum(tp: Any) -> bool:
    return isinstance(tp, type) and issubclass(tp, enum.Enum)


def is_sealed(cls: type) -> bool:
    return bool(cls.__dict__.get("avro_sealed", False))


def is_abstract(cls: Any) -> bool:
    """Return True if ``cls`` stands for a union over its subclasses.

    A class is abstract when it lists ``ABC`` as a direct base, still has
    abstract methods, or declares ``avro_sealed = True`` itself.
    """
    if not isinstance(cls, type) or is_enum(cls):
        return False
    return ABC in cls.__bases__ or inspect.isabstract(cls) or is_sealed(cls)


def is_pydantic_model(cls: Any) -> bool:
    return isinstance(cls, type) and issubclass(cls, BaseModel)


def _has_open_parameters(cls: type) -> bool:
    if is_pydantic_model(cls):
        metadata = getattr(cls, "__pydantic_generic_metadata__", None) or {}
        return bool(metadata.get("parameters"))
    return bool(getattr(cls, "__parameters__", ()))


def _is_namedtuple(cls: type) -> bool:
    return issubclass(cls, tuple) and hasattr(cls, "_fields") and hasattr(cls, "_field_defaults")


def _own_init(cls: type) -> Any:
    for klass in cls.__mro__:
        if "__init__" in klass.__dict__:
            if klass is object:
                return None
            return klass.__dict__["__init__"]
    return None


def is_record(cls: Any) -> bool:
    """Return True if ``cls`` has a shape record derivation can read.

    Pydantic models, dataclasses and NamedTuples qualify, as does any other
    class whose ``__init__`` (own or inherited, but not ``object``'s) takes
    only annotated named parameters.
    """
    if not isinstance(cls, type) or is_enum(cls) or is_fixed_data(cls):
        return False
    if is_pydantic_model(cls) or dataclasses.is_dataclass(cls) or _is_namedtuple(cls):
        return True
    return _init_parameters(cls) is not None


def is_typeable(cls: type) -> bool:
    """Return True if a subclass can be a union member on its own.

    Concrete records, ``FixedData`` classes and classes that subclass a
    parametrized collection qualify, as long as no type parameter is left
    unbound.
    """
    if is_abstract(cls) or _has_open_parameters(cls):
        return False
    if is_record(cls) or is_fixed_data(cls):
        return True
    try:
        return collection_shape(cls) is not None
    except UnsupportedType:
        return False


# ---------------------------------------------------------------------------
# Record fields
# ---------------------------------------------------------------------------


def _type_hints(obj: Any) -> dict[str, Any]:
    try:
        return get_type_hints(obj, include_extras=True)
    except (NameError, TypeError) as e:
        raise UnsupportedType(f"Cannot resolve annotations of {obj!r}: {e}") from e


def _init_parameters(cls: type) -> list[inspect.Parameter] | None:
    init = _own_init(cls)
    if init is None:
        return None
    try:
        parameters = list(inspect.signature(init).parameters.values())[1:]
    except (TypeError, ValueError):
        return None
    for parameter in parameters:
        if parameter.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD):
            return None
        if parameter.kind is inspect.Parameter.POSITIONAL_ONLY:
            return None
        if parameter.annotation is inspect.Parameter.empty:
            return None
    return parameters


def _pydantic_param(cls: type[BaseModel], name: str, field_info: FieldInfo) -> str:
    config = cls.model_config
    if config.get("populate_by_name") or config.get("validate_by_name"):
        return name
    if isinstance(field_info.validation_alias, str):
        return field_info.validation_alias
    if field_info.alias:
        return field_info.alias
    return name


def _pydantic_fields(cls: type[BaseModel]) -> list[FieldSpec]:
    if _has_open_parameters(cls):
        raise UnsupportedType(
            f"Generic model {cls.__qualname__} must be parametrized before it can be encoded"
        )
    if not cls.__pydantic_complete__:
        try:
            cls.model_rebuild()
        except Exception as e:
            raise UnsupportedType(f"Model {cls.__qualname__} is not fully defined: {e}") from e

    specs = []
    for name, field_info in cls.model_fields.items():
        annotation = field_info.annotation
        if field_info.metadata:
            annotation = Annotated[(annotation, *field_info.metadata)]

        has_default = True
        default = None
        if field_info.is_required():
            has_default = False
        elif field_info.default_factory is None:
            default = field_info.default
        elif getattr(field_info, "default_factory_takes_data", False):
            # Depends on the other fields; there is no standalone default
            has_default = False
        else:
            default = field_info.default_factory()

        specs.append(
            FieldSpec(
                name=name,
                annotation=annotation,
                attribute=name,
                param=_pydantic_param(cls, name, field_info),
                has_default=has_default,
                default=default,
            )
        )
    return specs


def _dataclass_fields(cls: type) -> list[FieldSpec]:
    hints = _type_hints(cls)
    specs = []
    for f in dataclasses.fields(cls):
        if not f.init:
            continue
        has_default = True
        default = None
        if f.default is not dataclasses.MISSING:
            default = f.default
        elif f.default_factory is not dataclasses.MISSING:
            default = f.default_factory()
        else:
            has_default = False
        annotation = hints.get(f.name, f.type)
        specs.append(FieldSpec(f.name, annotation, f.name, f.name, has_default, default))
    return specs


def _namedtuple_fields(cls: type) -> list[FieldSpec]:
    hints = _type_hints(cls)
    specs = []
    for name in cls._fields:
        if name not in hints:
            raise UnsupportedType(f"Field {name} of {cls.__qualname__} has no type annotation")
        has_default = name in cls._field_defaults
        specs.append(
            FieldSpec(name, hints[name], name, name, has_default, cls._field_defaults.get(name))
        )
    return specs


def _init_fields(cls: type) -> list[FieldSpec]:
    parameters = _init_parameters(cls)
    if parameters is None:
        raise UnsupportedType(
            f"Cannot derive a record for {cls.__qualname__}: its __init__ must take only "
            f"annotated named parameters stored as same-named attributes"
        )
    hints = _type_hints(_own_init(cls))
    specs = []
    for parameter in parameters:
        has_default = parameter.default is not inspect.Parameter.empty
        specs.append(
            FieldSpec(
                parameter.name,
                hints.get(parameter.name, parameter.annotation),
                parameter.name,
                parameter.name,
                has_default,
                parameter.default if has_default else None,
            )
        )
    return specs


def record_fields(cls: type) -> list[FieldSpec]:
    """Return the fields of a record class in constructor order.

    Args:
        cls: A pydantic model, dataclass, NamedTuple or annotated plain class

    Returns:
        One FieldSpec per constructor parameter. Default factories are called
        once, here.

    Raises:
        UnsupportedType: If the class has no readable record shape
    """
    if is_pydantic_model(cls):
        return _pydantic_fields(cls)
    if dataclasses.is_dataclass(cls):
        return _dataclass_fields(cls)
    if _is_namedtuple(cls):
        return _namedtuple_fields(cls)
    return _init_fields(cls)


# ---------------------------------------------------------------------------
# Collections
# ---------------------------------------------------------------------------

# Abstract collection origins and the concrete class decoded values are built as
ARRAY_ABCS: dict[Any, type] = {
    collections.abc.Sequence: list,
    collections.abc.MutableSequence: list,
    collections.abc.Collection: list,
    collections.abc.Iterable: list,
    collections.abc.Set: frozenset,
    collections.abc.MutableSet: set,
}
MAP_ABCS: dict[Any, type] = {
    collections.abc.Mapping: dict,
    collections.abc.MutableMapping: dict,
}
ARRAY_CLASSES: tuple[type, ...] = (list, tuple, set, frozenset, collections.deque)


@dataclass(frozen=True)
class CollectionShape:
    """How a collection request is laid out.

    Attributes:
        is_map: True for string-keyed maps, False for arrays
        element: Item type (arrays) or value type (maps)
        key: Key type (maps only)
        host_class: Class decoded values are built as
        instance_type: Class a value must be an instance of to match
    """

    is_map: bool
    element: Any
    host_class: type
    instance_type: type
    key: Any = str


def _shape_from(
    origin: Any, args: tuple[Any, ...], host_class: type | None
) -> CollectionShape | None:
    if origin in ARRAY_ABCS:
        element = _single_arg(origin, args)
        host = host_class or ARRAY_ABCS[origin]
        return CollectionShape(False, element, host, host_class or origin)
    if origin in MAP_ABCS:
        key, value = _map_args(origin, args)
        host = host_class or MAP_ABCS[origin]
        return CollectionShape(True, value, host, host_class or origin, key)
    if not isinstance(origin, type):
        return None

    if origin is tuple:
        if len(args) != 2 or args[1] is not Ellipsis:
            raise UnsupportedType(
                f"Only homogeneous tuples (tuple[T, ...]) can be encoded, got {tuple[args]!r}"
            )
        return CollectionShape(False, args[0], host_class or tuple, host_class or tuple)
    if issubclass(origin, collections.abc.Mapping):
        key, value = _map_args(origin, args)
        return CollectionShape(True, value, host_class or origin, host_class or origin, key)
    if is_pydantic_model(origin) or issubclass(origin, (str, bytes, bytearray)):
        return None
    if issubclass(origin, collections.abc.Iterable):
        element = _single_arg(origin, args)
        return CollectionShape(False, element, host_class or origin, host_class or origin)
    return None


def _single_arg(origin: Any, args: tuple[Any, ...]) -> Any:
    if len(args) != 1:
        raise UnsupportedType(f"{type_label(origin)} needs exactly one element type, got {args!r}")
    return args[0]


def _map_args(origin: Any, args: tuple[Any, ...]) -> tuple[Any, Any]:
    if len(args) == 1:
        return str, args[0]
    if len(args) != 2:
        raise UnsupportedType(f"{type_label(origin)} needs key and value types, got {args!r}")
    return args[0], args[1]


def collection_shape(request: Any) -> CollectionShape | None:
    """Classify ``request`` as an array or map, or return None.

    Parametrized builtins and ``collections.abc`` aliases are read from
    their arguments. A class that subclasses a parametrized collection (for
    example ``class Names(list[str])``) is decoded as that class.

    Raises:
        UnsupportedType: For an unparametrized collection, a heterogeneous
            tuple, or a collection class missing its element type
    """
    origin = get_origin(request)
    if origin is not None:
        return _shape_from(origin, get_args(request), None)

    if not isinstance(request, type):
        return None
    if request in ARRAY_CLASSES or request in (dict, collections.OrderedDict):
        raise UnsupportedType(
            f"Bare {request.__qualname__} has no element type; use e.g. {request.__qualname__}[int]"
        )
    if _is_namedtuple(request) or is_pydantic_model(request):
        return None

    for base in request.__dict__.get("__orig_bases__", ()):
        base_origin = get_origin(base)
        if base_origin is None:
            continue
        shape = _shape_from(base_origin, get_args(base), request)
        if shape is not None:
            return shape
    return None


# ---------------------------------------------------------------------------
# Subtype discovery
# ---------------------------------------------------------------------------


def sealed_subtypes(base: type) -> list[type]:
    """Direct subclasses of a sealed class, in definition order."""
    return [sub for sub in base.__subclasses__() if is_typeable(sub)]


def _loaded_subclasses(base: type) -> list[type]:
    seen: dict[type, None] = {}
    stack = list(base.__subclasses__())
    while stack:
        sub = stack.pop()
        if sub in seen:
            continue
        seen[sub] = None
        stack.extend(sub.__subclasses__())
    return list(seen)


def open_subtypes(
    base: type, registered: list[type], settings: CodecSettings
) -> tuple[list[type], list[type]]:
    """Concrete subtypes of an open abstract class.

    Candidates are the explicitly registered subtypes plus, when enabled, all
    currently loaded subclasses outside the excluded modules.

    Returns:
        (subtypes ordered by ``module.qualname``, classes skipped because of
        their module)
    """
    candidates: dict[type, None] = dict.fromkeys(registered)
    excluded: list[type] = []
    if settings.scan_loaded_subclasses:
        for sub in _loaded_subclasses(base):
            if settings.is_excluded_module(sub.__module__):
                excluded.append(sub)
            else:
                candidates.setdefault(sub, None)

    subtypes = [sub for sub in candidates if is_typeable(sub)]
    subtypes.sort(key=lambda sub: f"{sub.__module__}.{sub.__qualname__}")
    return subtypes, excluded
