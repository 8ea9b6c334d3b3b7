from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional, Sequence, Tuple

from mocklite.common.canonical_json import canonical_dumps_str, render_arguments
from mocklite.matchers import ArgumentSpec, as_spec
from mocklite.shapes import UNIT, ReturnShape, type_default, type_name


@dataclass(frozen=True)
class CallSignature:
    name: str
    parameter_types: Tuple[str, ...] = ()
    type_arguments: Tuple[str, ...] = ()
    returns: ReturnShape = field(default=UNIT, compare=False, repr=False)
    parameter_annotations: Tuple[Any, ...] = field(default=(), compare=False, repr=False)

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("signature name must be non-empty")
        if self.parameter_annotations and len(self.parameter_annotations) != len(self.parameter_types):
            raise ValueError("parameter_annotations must align with parameter_types")

    @property
    def arity(self) -> int:
        return len(self.parameter_types)

    @property
    def key(self) -> str:
        params = ",".join(self.parameter_types)
        if self.type_arguments:
            return f"{self.name}[{','.join(self.type_arguments)}]({params})"
        return f"{self.name}({params})"

    def parameter_defaults(self) -> Tuple[Any, ...]:
        if not self.parameter_annotations:
            return (None,) * self.arity
        return tuple(type_default(a) for a in self.parameter_annotations)

    def __str__(self) -> str:
        return self.key


def exact_key(signature: CallSignature, args: Sequence[Any]) -> str:
    return signature.key + "|" + render_arguments(canonical_dumps_str(a) for a in args)


@dataclass(frozen=True)
class CallDescriptor:
    signature: CallSignature
    arguments: Optional[Tuple[ArgumentSpec, ...]] = None

    @classmethod
    def of(cls, signature: CallSignature, args: Optional[Sequence[Any]] = None) -> "CallDescriptor":
        if args is None:
            return cls(signature, None)
        return cls(signature, tuple(as_spec(a) for a in args))

    @property
    def is_signature_only(self) -> bool:
        return self.arguments is None

    @property
    def wildcard_mask(self) -> Tuple[bool, ...]:
        return tuple(spec.is_wildcard for spec in self.arguments or ())

    @property
    def has_wildcards(self) -> bool:
        return any(self.wildcard_mask)

    def render_key(self) -> str:
        if self.arguments is None:
            raise ValueError("signature_only_descriptor_has_no_argument_key")
        return self.signature.key + "|" + render_arguments(spec.render() for spec in self.arguments)

    def matches(self, args: Sequence[Any]) -> bool:
        if self.arguments is None:
            return True
        if len(args) != len(self.arguments):
            return False
        return all(spec.matches(value) for spec, value in zip(self.arguments, args))


__all__ = [
    "CallDescriptor",
    "CallSignature",
    "exact_key",
    "type_name",
]
