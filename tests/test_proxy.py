import abc

import pytest

from mocklite.contract import describe
from mocklite.proxy import create_substitute, state_of, substitute_type
from mocklite.state import MockState


class Greeter(abc.ABC):
    def __init__(self, prefix: str) -> None:
        raise AssertionError("contract __init__ must not run")

    @abc.abstractmethod
    def greet(self, name: str) -> str:
        ...

    @abc.abstractmethod
    def _secret(self) -> None:
        ...


def test_substitute_implements_the_contract() -> None:
    state = MockState()
    sub = create_substitute(describe(Greeter), state)
    assert isinstance(sub, Greeter)
    assert sub.greet("ada") is None
    assert sub.greet(name="bob") is None
    assert [inv.arguments for inv in state.invocations] == [("ada",), ("bob",)]
    assert state_of(sub) is state


def test_substitute_type_is_built_once() -> None:
    spec = describe(Greeter)
    assert substitute_type(spec) is substitute_type(spec)
    assert substitute_type(spec).__name__ == "GreeterSubstitute"


def test_private_abstract_members_are_not_intercepted() -> None:
    sub = create_substitute(describe(Greeter), MockState())
    with pytest.raises(NotImplementedError, match="member_not_intercepted:_secret"):
        sub._secret()


def test_state_of_rejects_plain_objects() -> None:
    with pytest.raises(TypeError, match="not_a_mock:object"):
        state_of(object())


class Factory(abc.ABC):
    @staticmethod
    @abc.abstractmethod
    def make(kind: str) -> int:
        ...

    @classmethod
    @abc.abstractmethod
    def default(cls) -> str:
        ...


def test_static_and_class_methods_are_intercepted() -> None:
    state = MockState()
    sub = create_substitute(describe(Factory), state)
    assert sub.make("widget") == 0
    assert sub.default() is None
    assert [(inv.name, inv.arguments) for inv in state.invocations] == [
        ("make", ("widget",)),
        ("default", ()),
    ]
