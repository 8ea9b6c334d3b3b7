"""Support for substitutes written (or generated) ahead of time.

A generated substitute is an ordinary class implementing the contract whose
member bodies forward to the engine, typically alongside per-member
``setup_x``/``verify_x`` helpers::

    @generated_mock(UserRepository)
    class MockUserRepository(GeneratedMock, UserRepository):
        def get_user(self, user_id: str) -> User | None:
            return self._invoke("get_user", user_id)

``Mock.of(UserRepository)`` prefers such a class over a runtime substitute.
Classes are found through the registry, or by naming convention
(``MockFoo`` for ``IFoo`` or ``Foo``) in the contract's module.
"""

from __future__ import annotations

import sys
from typing import Any, Callable, Dict, Optional, Tuple, Type, TypeVar

from mocklite.config import MockOptions
from mocklite.contract import ContractSpec, describe
from mocklite.ledger import Invocation
from mocklite.proxy import STATE_ATTR
from mocklite.state import MockState

G = TypeVar("G", bound="GeneratedMock")

_REGISTRY: Dict[Any, type] = {}


class GeneratedMock:
    __mock_contract__: Any = None

    def __init__(self, options: Optional[MockOptions] = None) -> None:
        object.__setattr__(self, STATE_ATTR, MockState(options))

    @classmethod
    def contract_spec(cls) -> ContractSpec:
        if cls.__mock_contract__ is None:
            raise TypeError(f"{cls.__name__} is not registered for a contract")
        return describe(cls.__mock_contract__)

    @property
    def state(self) -> MockState:
        return getattr(self, STATE_ATTR)

    @property
    def invocations(self) -> Tuple[Invocation, ...]:
        return self.state.invocations

    def _invoke(self, member: str, *args: Any, **kwargs: Any) -> Any:
        spec = self.contract_spec().method(member)
        return self.state.invoke(spec.signature, spec.bind(args, kwargs))

    def _get(self, prop: str) -> Any:
        return self.state.invoke(self.contract_spec().prop(prop).getter.signature, ())

    def _set(self, prop: str, value: Any) -> None:
        setter = self.contract_spec().prop(prop).setter
        if setter is None:
            raise AttributeError(f"property_not_settable:{prop}")
        self.state.invoke(setter.signature, (value,))


def generated_mock(contract: Any) -> Callable[[Type[G]], Type[G]]:
    def register(cls: Type[G]) -> Type[G]:
        cls.__mock_contract__ = contract
        _REGISTRY[contract] = cls
        return cls

    return register


def conventional_name(contract_name: str) -> str:
    if len(contract_name) > 1 and contract_name[0] == "I" and contract_name[1].isupper():
        return f"Mock{contract_name[1:]}"
    return f"Mock{contract_name}"


def find_generated(contract: Any) -> Optional[type]:
    found = _REGISTRY.get(contract)
    if found is not None:
        return found
    spec = describe(contract)
    module = sys.modules.get(spec.origin.__module__)
    candidate = getattr(module, conventional_name(spec.name), None)
    if isinstance(candidate, type) and issubclass(candidate, GeneratedMock):
        if candidate.__mock_contract__ is None:
            candidate.__mock_contract__ = contract
        return candidate
    return None


__all__ = [
    "GeneratedMock",
    "conventional_name",
    "find_generated",
    "generated_mock",
]
