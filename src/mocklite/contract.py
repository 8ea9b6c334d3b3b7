from __future__ import annotations

import abc
import functools
import inspect
import logging
import typing
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterator, Literal, Mapping, Optional, Tuple

from mocklite.shapes import ReturnShape
from mocklite.signature import CallDescriptor, CallSignature, type_name

logger = logging.getLogger(__name__)

MemberKind = Literal["method", "getter", "setter"]

_SKIPPED_BASES = frozenset({object, abc.ABC, typing.Generic, typing.Protocol})
_POSITIONAL = (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)


class ConfigurationError(ValueError):
    pass


@dataclass(frozen=True)
class MemberSpec:
    name: str
    kind: MemberKind
    signature: CallSignature
    binder: inspect.Signature = field(compare=False, repr=False)

    def bind(self, args: Tuple[Any, ...], kwargs: Optional[Mapping[str, Any]] = None) -> Tuple[Any, ...]:
        bound = self.binder.bind(*args, **(kwargs or {}))
        bound.apply_defaults()
        return tuple(bound.arguments.values())


@dataclass(frozen=True)
class PropertySpec:
    name: str
    getter: MemberSpec
    setter: Optional[MemberSpec] = None

    @property
    def settable(self) -> bool:
        return self.setter is not None


@dataclass(frozen=True)
class ContractSpec:
    contract: Any
    origin: type
    type_arguments: Tuple[Any, ...]
    methods: Mapping[str, MemberSpec]
    properties: Mapping[str, PropertySpec]

    @property
    def name(self) -> str:
        return self.origin.__name__

    def method(self, name: str) -> MemberSpec:
        try:
            return self.methods[name]
        except KeyError:
            raise ConfigurationError(f"unknown_method:{self.name}.{name}") from None

    def prop(self, name: str) -> PropertySpec:
        try:
            return self.properties[name]
        except KeyError:
            raise ConfigurationError(f"unknown_property:{self.name}.{name}") from None

    def signature(self, name: str) -> CallSignature:
        if name in self.properties:
            return self.properties[name].getter.signature
        return self.method(name).signature


def _hints(obj: Any) -> Dict[str, Any]:
    try:
        return typing.get_type_hints(obj)
    except (NameError, TypeError, AttributeError, SyntaxError):
        # unresolvable forward references keep their raw (string) annotations
        logger.debug("Falling back to raw annotations for %r", obj)
        return dict(inspect.get_annotations(obj))


def _substitute(annotation: Any, typevars: Mapping[Any, Any]) -> Any:
    if not typevars:
        return annotation
    if isinstance(annotation, typing.TypeVar):
        return typevars.get(annotation, annotation)
    params = getattr(annotation, "__parameters__", ())
    if params and typing.get_origin(annotation) is not None and all(p in typevars for p in params):
        try:
            return annotation[tuple(typevars[p] for p in params)]
        except TypeError:
            return annotation
    return annotation


def _is_classvar(annotation: Any) -> bool:
    if isinstance(annotation, str):
        return annotation.startswith(("ClassVar", "typing.ClassVar"))
    return annotation is typing.ClassVar or typing.get_origin(annotation) is typing.ClassVar


class _Builder:
    def __init__(self, origin: type, type_arguments: Tuple[Any, ...]) -> None:
        self.origin = origin
        self.type_arguments = type_arguments
        self.rendered_type_arguments = tuple(type_name(a) for a in type_arguments)
        params = getattr(origin, "__parameters__", ())
        self.typevars = dict(zip(params, type_arguments))
        self.class_hints = _hints(origin)

    def _signature(
        self,
        name: str,
        annotations: Tuple[Any, ...],
        rendered: Tuple[str, ...],
        returns: ReturnShape,
    ) -> CallSignature:
        return CallSignature(
            name=name,
            parameter_types=rendered,
            type_arguments=self.rendered_type_arguments,
            returns=returns,
            parameter_annotations=annotations,
        )

    def method(self, name: str, func: Callable[..., Any], *, bound: bool = True) -> MemberSpec:
        sig = inspect.signature(func)
        params = list(sig.parameters.values())
        if bound and params and params[0].kind in _POSITIONAL:
            params = params[1:]
        hints = _hints(func)

        annotations = []
        rendered = []
        for p in params:
            ann = _substitute(hints.get(p.name, p.annotation), self.typevars)
            annotations.append(ann)
            prefix = {
                inspect.Parameter.VAR_POSITIONAL: "*",
                inspect.Parameter.VAR_KEYWORD: "**",
            }.get(p.kind, "")
            rendered.append(prefix + type_name(ann))

        ret = _substitute(hints.get("return", sig.return_annotation), self.typevars)
        returns = ReturnShape.of(ret, is_async=inspect.iscoroutinefunction(func))
        return MemberSpec(
            name=name,
            kind="method",
            signature=self._signature(name, tuple(annotations), tuple(rendered), returns),
            binder=sig.replace(parameters=params),
        )

    def prop(self, name: str, annotation: Any, settable: bool, setter_annotation: Any = None) -> PropertySpec:
        annotation = _substitute(annotation, self.typevars)
        getter = MemberSpec(
            name=name,
            kind="getter",
            signature=self._signature(f"get_{name}", (), (), ReturnShape.of(annotation)),
            binder=inspect.Signature([]),
        )
        if not settable:
            return PropertySpec(name=name, getter=getter)
        value_ann = annotation if setter_annotation is None else _substitute(setter_annotation, self.typevars)
        setter = MemberSpec(
            name=name,
            kind="setter",
            signature=self._signature(
                f"set_{name}", (value_ann,), (type_name(value_ann),), ReturnShape.of(None)
            ),
            binder=inspect.Signature(
                [inspect.Parameter("value", inspect.Parameter.POSITIONAL_OR_KEYWORD, annotation=value_ann)]
            ),
        )
        return PropertySpec(name=name, getter=getter, setter=setter)

    def from_property(self, name: str, descriptor: property) -> PropertySpec:
        annotation: Any = inspect.Parameter.empty
        if descriptor.fget is not None:
            annotation = _hints(descriptor.fget).get("return", annotation)
        setter_annotation = None
        if descriptor.fset is not None:
            fset_params = list(inspect.signature(descriptor.fset).parameters.values())
            if len(fset_params) >= 2:
                raw = fset_params[1]
                setter_annotation = _hints(descriptor.fset).get(raw.name, raw.annotation)
                if setter_annotation is inspect.Parameter.empty:
                    setter_annotation = None
        return self.prop(name, annotation, descriptor.fset is not None, setter_annotation)


def _public_members(origin: type) -> Iterator[Tuple[str, Any, bool]]:
    """Yield ``(name, attribute, is_bare_annotation)`` most-derived first."""
    seen: set[str] = set()
    for klass in origin.__mro__:
        if klass in _SKIPPED_BASES:
            continue
        namespace = vars(klass)
        annotations = inspect.get_annotations(klass)
        for name in list(namespace) + [n for n in annotations if n not in namespace]:
            if name.startswith("_") or name in seen:
                continue
            seen.add(name)
            if name in namespace:
                yield name, namespace[name], False
            else:
                yield name, annotations[name], True


@functools.lru_cache(maxsize=None)
def describe(contract: Any) -> ContractSpec:
    origin = typing.get_origin(contract) or contract
    if not isinstance(origin, type):
        raise ConfigurationError(f"contract_must_be_a_class:{contract!r}")
    type_arguments = typing.get_args(contract) if origin is not contract else ()
    builder = _Builder(origin, type_arguments)

    methods: Dict[str, MemberSpec] = {}
    properties: Dict[str, PropertySpec] = {}
    for name, attr, bare in _public_members(origin):
        if bare:
            annotation = builder.class_hints.get(name, attr)
            if not _is_classvar(annotation):
                properties[name] = builder.prop(name, annotation, settable=True)
        elif isinstance(attr, property):
            properties[name] = builder.from_property(name, attr)
        elif inspect.isfunction(attr):
            methods[name] = builder.method(name, attr)
        elif isinstance(attr, (staticmethod, classmethod)) and inspect.isfunction(attr.__func__):
            # intercepted on instances; the substitute class itself is not patched
            methods[name] = builder.method(name, attr.__func__, bound=isinstance(attr, classmethod))

    logger.debug(
        "Described %s: %d method(s), %d property(ies)", origin.__name__, len(methods), len(properties)
    )
    return ContractSpec(
        contract=contract,
        origin=origin,
        type_arguments=type_arguments,
        methods=methods,
        properties=properties,
    )


@dataclass(frozen=True)
class Captured:
    member: MemberSpec
    descriptor: CallDescriptor
    prop: Optional[PropertySpec] = None


class _CallExpression:
    __slots__ = ("member", "args")

    def __init__(self, member: MemberSpec, args: Tuple[Any, ...]) -> None:
        self.member = member
        self.args = args


class _MethodReference:
    __slots__ = ("member",)

    def __init__(self, member: MemberSpec) -> None:
        self.member = member

    def __call__(self, *args: Any, **kwargs: Any) -> _CallExpression:
        try:
            bound = self.member.bind(args, kwargs)
        except TypeError as exc:
            raise ConfigurationError(f"arguments_do_not_bind:{self.member.name}:{exc}") from exc
        return _CallExpression(self.member, bound)


class _PropertyRead:
    __slots__ = ("prop",)

    def __init__(self, prop: PropertySpec) -> None:
        self.prop = prop


class _Recorder:
    __slots__ = ("_spec",)

    def __init__(self, spec: ContractSpec) -> None:
        self._spec = spec

    def __getattr__(self, name: str) -> Any:
        spec = self._spec
        if name in spec.methods:
            return _MethodReference(spec.methods[name])
        if name in spec.properties:
            return _PropertyRead(spec.properties[name])
        raise ConfigurationError(f"unknown_member:{spec.name}.{name}")


def capture(spec: ContractSpec, expression: Callable[[Any], Any]) -> Captured:
    """Turn a configuration expression into the member and descriptor it names.

    ``lambda m: m.get(1, It.is_any())`` describes a call with argument
    specifiers, ``lambda m: m.get`` the method regardless of arguments, and
    ``lambda m: m.name`` a property read.
    """
    if not callable(expression):
        raise ConfigurationError("expression_must_be_callable")
    try:
        result = expression(_Recorder(spec))
    except AttributeError as exc:
        raise ConfigurationError(f"expression_must_describe_a_member:{exc}") from exc

    if isinstance(result, _CallExpression):
        return Captured(result.member, CallDescriptor.of(result.member.signature, result.args))
    if isinstance(result, _MethodReference):
        return Captured(result.member, CallDescriptor.of(result.member.signature))
    if isinstance(result, _PropertyRead):
        getter = result.prop.getter
        return Captured(getter, CallDescriptor.of(getter.signature), result.prop)
    raise ConfigurationError("expression_must_describe_a_member_call_or_property_access")


__all__ = [
    "Captured",
    "ConfigurationError",
    "ContractSpec",
    "MemberSpec",
    "PropertySpec",
    "capture",
    "describe",
]
