from __future__ import annotations

import collections.abc
import inspect
import typing
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Generator, Generic, Literal, Optional, TypeVar

T = TypeVar("T")

ShapeKind = Literal["unit", "value", "reference", "deferred_unit", "deferred_value"]

VALUE_DEFAULTS: dict[type, Any] = {
    bool: False,
    int: 0,
    float: 0.0,
    complex: 0j,
    Decimal: Decimal(0),
}

_DEFERRED_ORIGINS = (
    collections.abc.Awaitable,
    collections.abc.Coroutine,
)


class Completed(Generic[T]):
    """An awaitable that is already resolved.

    Awaiting it never suspends, so it can be consumed from any event loop
    (or driven by hand with ``send(None)``).
    """

    __slots__ = ("result",)

    def __init__(self, result: Optional[T] = None) -> None:
        self.result = result

    def done(self) -> bool:
        return True

    def __await__(self) -> Generator[Any, None, Optional[T]]:
        return self.result
        yield  # pragma: no cover

    def __repr__(self) -> str:
        return f"Completed({self.result!r})"


def _is_none(annotation: Any) -> bool:
    return annotation is None or annotation is type(None)


def _is_empty(annotation: Any) -> bool:
    return annotation is inspect.Parameter.empty or annotation is inspect.Signature.empty


def is_value_type(annotation: Any) -> bool:
    return isinstance(annotation, type) and annotation in VALUE_DEFAULTS


def type_default(annotation: Any) -> Any:
    if is_value_type(annotation):
        return VALUE_DEFAULTS[annotation]
    return None


def type_name(annotation: Any) -> str:
    if annotation is inspect.Parameter.empty:
        return "object"
    if _is_none(annotation):
        return "None"
    if isinstance(annotation, str):
        return annotation
    if isinstance(annotation, type) and typing.get_origin(annotation) is None:
        if annotation.__module__ == "builtins":
            return annotation.__qualname__
        return f"{annotation.__module__}.{annotation.__qualname__}"
    if isinstance(annotation, typing.TypeVar):
        return f"~{annotation.__name__}"
    return repr(annotation).replace("typing.", "")


def _deferred_payload(annotation: Any) -> tuple[bool, Any]:
    origin = typing.get_origin(annotation)
    if origin is None:
        return False, None
    if isinstance(origin, type) and issubclass(origin, _DEFERRED_ORIGINS):
        args = typing.get_args(annotation)
        return True, args[-1] if args else None
    return False, None


@dataclass(frozen=True)
class ReturnShape:
    kind: ShapeKind
    payload: Any = None

    @classmethod
    def of(cls, annotation: Any, *, is_async: bool = False) -> "ReturnShape":
        deferred, payload = _deferred_payload(annotation)
        if is_async:
            deferred, payload = True, annotation
        if deferred:
            if _is_none(payload) or _is_empty(payload):
                return cls("deferred_unit")
            return cls("deferred_value", payload)
        if _is_none(annotation):
            return cls("unit")
        if is_value_type(annotation):
            return cls("value", annotation)
        return cls("reference", None if _is_empty(annotation) else annotation)

    @property
    def is_deferred(self) -> bool:
        return self.kind in ("deferred_unit", "deferred_value")

    def synthesize(self) -> Any:
        if self.kind == "unit":
            return None
        if self.kind == "deferred_unit":
            return Completed(None)
        if self.kind == "deferred_value":
            return Completed(type_default(self.payload))
        if self.kind == "value":
            return type_default(self.payload)
        return None

    def coerce(self, result: Any) -> Any:
        if self.is_deferred and not inspect.isawaitable(result):
            return Completed(result)
        return result


UNIT = ReturnShape("unit")
REFERENCE = ReturnShape("reference")
