"""Tagged two-branch values.

``Either[L, R]`` is an annotation that expands to ``Union[Left[L], Right[R]]``.
Values carry their branch: ``Left(x)`` is written under branch 0 and
``Right(x)`` under branch 1, so no type matching is needed to pick a branch.

Example:
    >>> from typedavro import Either, Left, Right, codec_for
    >>> codec = codec_for(Either[int, str])
    >>> codec.encode(Right("ok"))
    b'\\x02\\x04ok'
    >>> codec.decode(b"\\x00\\x54")
    Left(value=42)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, TypeVar, Union

L = TypeVar("L")
R = TypeVar("R")


@dataclass(frozen=True)
class Left(Generic[L]):
    """The first branch of an Either."""

    value: L


@dataclass(frozen=True)
class Right(Generic[R]):
    """The second branch of an Either."""

    value: R


class Either:
    """Annotation helper; ``Either[L, R]`` is ``Union[Left[L], Right[R]]``."""

    def __new__(cls, *args: Any, **kwargs: Any) -> Any:
        raise TypeError("Either is an annotation; construct Left(...) or Right(...) instead")

    def __class_getitem__(cls, params: Any) -> Any:
        if not isinstance(params, tuple) or len(params) != 2:
            raise TypeError("Either takes exactly two type parameters: Either[L, R]")
        left, right = params
        return Union[Left[left], Right[right]]
