import abc
import asyncio
from typing import Awaitable, Optional

import pytest

from mocklite import (
    Completed,
    ConfigurationError,
    It,
    Mock,
    MockOptions,
    Times,
    VerificationFailure,
    invocations_of,
)


class KeyValueStore(abc.ABC):
    @abc.abstractmethod
    def get_value(self, key: str) -> Optional[str]:
        ...

    @abc.abstractmethod
    def incr(self, key: str, by: int = 1) -> int:
        ...

    @abc.abstractmethod
    async def flush(self) -> None:
        ...

    @abc.abstractmethod
    def load(self, key: str) -> Awaitable[Optional[str]]:
        ...

    @property
    @abc.abstractmethod
    def is_active(self) -> bool:
        ...

    @property
    def name(self) -> str:
        return "kv"

    @name.setter
    def name(self, value: str) -> None:
        pass


class UserService:
    def __init__(self, store: KeyValueStore) -> None:
        self.store = store

    def display_name(self, user_id: str) -> str:
        if not self.store.is_active:
            return "offline"
        return self.store.get_value(user_id) or "unknown"


def test_get_value_scenario() -> None:
    mock = Mock(KeyValueStore)
    mock.setup(lambda m: m.get_value("k"), returns="v")

    store = mock.object
    assert store.get_value("k") == "v"
    assert store.get_value("other") is None

    mock.verify(lambda m: m.get_value("k"), Times.once)
    mock.verify(lambda m: m.get_value("other"), Times.once)
    mock.verify(lambda m: m.get_value(It.is_any(str)), Times.exactly(2))
    assert mock.count(lambda m: m.get_value) == 2


def test_unconfigured_members_return_defaults() -> None:
    store = Mock(KeyValueStore).object
    assert store.get_value("k") is None
    assert store.incr("k") == 0
    assert store.is_active is False


def test_unconfigured_async_member_completes_immediately() -> None:
    mock = Mock(KeyValueStore)
    result = mock.object.flush()
    assert isinstance(result, Completed)
    assert asyncio.run(_await(result)) is None
    mock.verify(lambda m: m.flush(), Times.once)


async def _await(awaitable):
    return await awaitable


def test_configured_deferred_member_is_awaitable() -> None:
    mock = Mock(KeyValueStore)
    mock.setup(lambda m: m.load, lambda key: f"loaded:{key}")
    assert asyncio.run(_await(mock.object.load("k"))) == "loaded:k"


def test_verify_failure_reports_actual_count() -> None:
    mock = Mock(KeyValueStore)
    mock.object.get_value("k")
    with pytest.raises(VerificationFailure) as excinfo:
        mock.verify(lambda m: m.get_value("k"), Times.exactly(2))
    assert "Actual calls: 1" in str(excinfo.value)
    assert excinfo.value.member == "get_value"


def test_exact_setup_beats_wildcard_setup() -> None:
    mock = Mock(KeyValueStore)
    mock.setup(lambda m: m.get_value(It.is_any(str)), returns="any")
    mock.setup(lambda m: m.get_value("admin"), returns="root")
    assert mock.object.get_value("admin") == "root"
    assert mock.object.get_value("guest") == "any"


def test_predicate_setup_and_verify() -> None:
    mock = Mock(KeyValueStore)
    mock.setup(lambda m: m.incr(It.is_any(str), It.matches(lambda n: n > 100, int)), returns=-1)
    assert mock.object.incr("k", 500) == -1
    assert mock.object.incr("k", 5) == 0
    mock.verify(lambda m: m.incr("k", It.matches(lambda n: n > 100)), Times.once)
    mock.verify(lambda m: m.incr, Times.exactly(2), lambda args: args[0] == "k")
    mock.verify(lambda m: m.incr, Times.once, lambda args: args[1] < 10)


def test_handler_receives_bound_arguments_with_defaults() -> None:
    mock = Mock(KeyValueStore)
    mock.setup(lambda m: m.incr, lambda key, by: len(key) * by)
    assert mock.object.incr("abc") == 3
    assert mock.object.incr("abc", by=2) == 6
    assert mock.invocations[0].arguments == ("abc", 1)


def test_setup_raises() -> None:
    mock = Mock(KeyValueStore)
    mock.setup(lambda m: m.get_value("boom"), raises=KeyError("boom"))
    with pytest.raises(KeyError):
        mock.object.get_value("boom")
    assert len(mock.invocations) == 1


def test_setup_requires_exactly_one_response() -> None:
    mock = Mock(KeyValueStore)
    with pytest.raises(ConfigurationError, match="exactly_one_of_handler_returns_raises_required"):
        mock.setup(lambda m: m.get_value("k"))
    with pytest.raises(ConfigurationError):
        mock.setup(lambda m: m.get_value("k"), lambda: "x", returns="y")


def test_returns_none_is_a_configured_response() -> None:
    mock = Mock(KeyValueStore)
    mock.setup(lambda m: m.incr, returns=None)
    assert mock.object.incr("k") is None


def test_property_configuration_and_verification() -> None:
    mock = Mock(KeyValueStore)
    mock.returns_get(lambda m: m.is_active, True)
    mock.setup(lambda m: m.get_value("42"), returns="Ada")

    service = UserService(mock.object)
    assert service.display_name("42") == "Ada"
    assert service.display_name("7") == "unknown"

    mock.verify_get(lambda m: m.is_active, Times.exactly(2))
    mock.verify(lambda m: m.get_value(It.is_any()), Times.exactly(2))


def test_property_setter() -> None:
    mock = Mock(KeyValueStore)
    assigned: list[str] = []
    mock.setup_set(lambda m: m.name, assigned.append)
    mock.object.name = "primary"
    mock.object.name = "replica"
    assert assigned == ["primary", "replica"]
    mock.verify_set(lambda m: m.name, Times.exactly(2))
    mock.verify_set(lambda m: m.name, Times.once, lambda value: value == "primary")


def test_read_only_property_cannot_be_set() -> None:
    mock = Mock(KeyValueStore)
    with pytest.raises(ConfigurationError, match="property_not_settable:is_active"):
        mock.setup_set(lambda m: m.is_active, lambda value: None)
    with pytest.raises(AttributeError):
        mock.object.is_active = True


def test_property_api_rejects_method_expressions() -> None:
    mock = Mock(KeyValueStore)
    with pytest.raises(ConfigurationError, match="expression_must_be_a_property_access:get_value"):
        mock.returns_get(lambda m: m.get_value, "v")


def test_callbacks() -> None:
    mock = Mock(KeyValueStore)
    seen: list[str] = []
    reads: list[int] = []
    writes: list[str] = []
    mock.on_call(lambda m: m.get_value(It.matches(lambda k: k.startswith("user:"))), seen.append)
    mock.on_call(lambda m: m.get_value, lambda key: seen.append(f"any:{key}"))
    mock.on_property_access(lambda m: m.is_active, lambda: reads.append(1))
    mock.on_set(lambda m: m.name, writes.append, lambda value: value != "skip")

    store = mock.object
    store.get_value("user:1")
    store.get_value("order:9")
    store.is_active
    store.name = "skip"
    store.name = "kept"

    assert seen == ["user:1", "any:user:1", "any:order:9"]
    assert reads == [1]
    assert writes == ["kept"]


def test_callbacks_do_not_change_results() -> None:
    mock = Mock(KeyValueStore)
    mock.setup(lambda m: m.get_value("k"), returns="v")
    mock.on_call(lambda m: m.get_value, lambda: "ignored")
    assert mock.object.get_value("k") == "v"


def test_invocation_rendering_through_facade() -> None:
    mock = Mock(KeyValueStore)
    mock.object.incr("k", 2)
    (invocation,) = invocations_of(mock.object)
    assert str(invocation).startswith('incr("k", 2) @ ')


def test_fluent_configuration_and_options() -> None:
    mock = (
        Mock.create(KeyValueStore, MockOptions(name="kv", strict_wildcards=True))
        .setup(lambda m: m.incr("a", It.is_any(int)), returns=1)
        .returns_get(lambda m: m.is_active, True)
    )
    assert mock.object.incr("a", 9) == 1
    assert mock.object.incr("b", 9) == 0
    assert "kv" in repr(mock.object)
    assert repr(mock) == "Mock(KeyValueStore, invocations=2)"


def test_lenient_wildcards_by_default() -> None:
    mock = Mock(KeyValueStore)
    mock.setup(lambda m: m.incr("a", It.is_any(int)), returns=1)
    assert mock.object.incr("b", 9) == 1


def test_mock_of_returns_runtime_substitute() -> None:
    store = Mock.of(KeyValueStore)
    assert isinstance(store, KeyValueStore)
    store.get_value("k")
    assert len(invocations_of(store)) == 1


def test_mock_instances_are_independent() -> None:
    first = Mock(KeyValueStore)
    second = Mock(KeyValueStore)
    first.setup(lambda m: m.get_value("k"), returns="first")
    assert second.object.get_value("k") is None
    assert len(first.invocations) == 0
    assert type(first.object) is type(second.object)
