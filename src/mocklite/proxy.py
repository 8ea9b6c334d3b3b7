from __future__ import annotations

import logging
from typing import Any, Callable, Dict

from mocklite.contract import ContractSpec, MemberSpec, PropertySpec
from mocklite.state import MockState

logger = logging.getLogger(__name__)

STATE_ATTR = "_mock_state"

_TYPES: Dict[Any, type] = {}


def _method(member: MemberSpec) -> Callable[..., Any]:
    def method(self: Any, *args: Any, **kwargs: Any) -> Any:
        state: MockState = getattr(self, STATE_ATTR)
        return state.invoke(member.signature, member.bind(args, kwargs))

    method.__name__ = member.name
    method.__qualname__ = member.name
    return method


def _property(prop: PropertySpec) -> property:
    getter_sig = prop.getter.signature

    def fget(self: Any) -> Any:
        return getattr(self, STATE_ATTR).invoke(getter_sig, ())

    if prop.setter is None:
        return property(fget)

    setter_sig = prop.setter.signature

    def fset(self: Any, value: Any) -> None:
        getattr(self, STATE_ATTR).invoke(setter_sig, (value,))

    return property(fget, fset)


def _not_intercepted(name: str) -> Callable[..., Any]:
    def method(*args: Any, **kwargs: Any) -> Any:
        raise NotImplementedError(f"member_not_intercepted:{name}")

    method.__name__ = name
    return method


def _init(self: Any, state: MockState) -> None:
    # the contract's own __init__ never runs
    object.__setattr__(self, STATE_ATTR, state)


def _repr(self: Any) -> str:
    state: MockState = getattr(self, STATE_ATTR)
    return f"<{type(self).__name__} {state.label}>"


def _build(spec: ContractSpec) -> type:
    namespace: Dict[str, Any] = {
        "__init__": _init,
        "__repr__": _repr,
        "__module__": spec.origin.__module__,
        "__doc__": f"Runtime substitute for {spec.name}.",
    }
    for name, member in spec.methods.items():
        namespace[name] = _method(member)
    for name, prop in spec.properties.items():
        namespace[name] = _property(prop)
    # private or static abstract members still have to be concrete for ABCs to instantiate
    for name in getattr(spec.origin, "__abstractmethods__", ()):
        namespace.setdefault(name, _not_intercepted(name))

    substitute = type(f"{spec.name}Substitute", (spec.origin,), namespace)
    logger.debug("Built substitute type %s", substitute.__qualname__)
    return substitute


def substitute_type(spec: ContractSpec) -> type:
    """Return the concrete substitute class for a contract, built once."""
    cached = _TYPES.get(spec.contract)
    if cached is None:
        cached = _TYPES[spec.contract] = _build(spec)
    return cached


def create_substitute(spec: ContractSpec, state: MockState) -> Any:
    return substitute_type(spec)(state)


def state_of(substitute: Any) -> MockState:
    try:
        return getattr(substitute, STATE_ATTR)
    except AttributeError:
        raise TypeError(f"not_a_mock:{type(substitute).__name__}") from None
