from __future__ import annotations

from typing import Any, Callable, Generic, Optional, Sequence, Tuple, TypeVar

from mocklite.behaviors import Handler
from mocklite.config import MockOptions
from mocklite.contract import Captured, ConfigurationError, PropertySpec, capture, describe
from mocklite.generated import find_generated
from mocklite.ledger import ArgumentMatcher, Invocation
from mocklite.proxy import create_substitute, state_of
from mocklite.signature import CallDescriptor
from mocklite.state import MockState
from mocklite.verification import CountPredicate

T = TypeVar("T")

Expression = Callable[[Any], Any]

_UNSET: Any = object()


def _argument_filter(
    descriptor: CallDescriptor, matcher: Optional[ArgumentMatcher]
) -> Optional[ArgumentMatcher]:
    """Fold the descriptor's argument specs and an explicit matcher into one predicate."""
    if descriptor.is_signature_only:
        return matcher
    if matcher is None:
        return descriptor.matches
    return lambda args: descriptor.matches(args) and bool(matcher(args))


def _response(handler: Any, returns: Any, raises: Any) -> Handler:
    given = [handler is not None, returns is not _UNSET, raises is not None]
    if sum(given) != 1:
        raise ConfigurationError("exactly_one_of_handler_returns_raises_required")
    if returns is not _UNSET:
        return Handler.constant(returns)
    if raises is not None:
        return Handler.raising(raises)
    return Handler.wrap(handler)


class Mock(Generic[T]):
    """Fluent builder around one substitute instance of a contract.

    Example::

        users = Mock(UserRepository)
        users.setup(lambda m: m.get_user("123"), returns=User(id="123"))
        users.returns_get(lambda m: m.is_active, True)

        service = Service(users.object)
        service.load("123")

        users.verify(lambda m: m.get_user("123"), Times.once)

    Configuration expressions are lambdas over the contract: a call such as
    ``m.get_user("123")`` or ``m.get_user(It.is_any(str))`` targets those
    arguments, a bare method ``m.get_user`` targets every call, and an
    attribute read ``m.is_active`` targets a property.
    """

    def __init__(self, contract: Any, options: Optional[MockOptions] = None) -> None:
        self.contract = contract
        self.spec = describe(contract)
        self.state = MockState(options)
        self._object = create_substitute(self.spec, self.state)

    @classmethod
    def create(cls, contract: Any, options: Optional[MockOptions] = None) -> "Mock[Any]":
        return cls(contract, options)

    @staticmethod
    def of(contract: Any, options: Optional[MockOptions] = None) -> Any:
        generated = find_generated(contract)
        if generated is not None:
            return generated(options)
        return create_substitute(describe(contract), MockState(options))

    @property
    def object(self) -> T:
        return self._object

    @property
    def invocations(self) -> Tuple[Invocation, ...]:
        return self.state.invocations

    def _capture(self, expression: Expression) -> Captured:
        return capture(self.spec, expression)

    def _property(self, expression: Expression) -> PropertySpec:
        captured = self._capture(expression)
        if captured.prop is None:
            raise ConfigurationError(f"expression_must_be_a_property_access:{captured.member.name}")
        return captured.prop

    def _settable(self, expression: Expression) -> PropertySpec:
        prop = self._property(expression)
        if prop.setter is None:
            raise ConfigurationError(f"property_not_settable:{prop.name}")
        return prop

    # --- behaviors ---

    def setup(
        self,
        expression: Expression,
        handler: Optional[Callable[..., Any]] = None,
        *,
        returns: Any = _UNSET,
        raises: Any = None,
    ) -> "Mock[T]":
        captured = self._capture(expression)
        self.state.register_behavior(captured.descriptor, _response(handler, returns, raises))
        return self

    def setup_get(self, expression: Expression, getter: Callable[[], Any]) -> "Mock[T]":
        prop = self._property(expression)
        self.state.register_behavior(CallDescriptor.of(prop.getter.signature), Handler.wrap(getter))
        return self

    def returns_get(self, expression: Expression, value: Any) -> "Mock[T]":
        return self.setup_get(expression, lambda: value)

    def setup_set(self, expression: Expression, setter: Callable[[Any], Any]) -> "Mock[T]":
        prop = self._settable(expression)
        self.state.register_behavior(CallDescriptor.of(prop.setter.signature), Handler.wrap(setter))
        return self

    # --- verification ---

    def verify(
        self,
        expression: Expression,
        times: CountPredicate,
        matcher: Optional[ArgumentMatcher] = None,
    ) -> None:
        captured = self._capture(expression)
        self.state.verify(
            captured.descriptor.signature,
            times,
            _argument_filter(captured.descriptor, matcher),
        )

    def verify_get(self, expression: Expression, times: CountPredicate) -> None:
        prop = self._property(expression)
        self.state.verify(prop.getter.signature, times)

    def verify_set(
        self,
        expression: Expression,
        times: CountPredicate,
        matcher: Optional[Callable[[Any], bool]] = None,
    ) -> None:
        prop = self._settable(expression)
        value_matcher = None if matcher is None else (lambda args: bool(matcher(args[0])))
        self.state.verify(prop.setter.signature, times, value_matcher)

    def count(self, expression: Expression, matcher: Optional[ArgumentMatcher] = None) -> int:
        captured = self._capture(expression)
        return self.state.verifier.count(
            captured.descriptor.signature,
            _argument_filter(captured.descriptor, matcher),
        )

    # --- callbacks ---

    def on_call(
        self,
        expression: Expression,
        callback: Callable[..., Any],
        matcher: Optional[ArgumentMatcher] = None,
    ) -> "Mock[T]":
        captured = self._capture(expression)
        self.state.register_callback(
            captured.descriptor.signature,
            callback,
            _argument_filter(captured.descriptor, matcher),
        )
        return self

    def on_get(self, expression: Expression, callback: Callable[[], Any]) -> "Mock[T]":
        prop = self._property(expression)
        self.state.register_callback(prop.getter.signature, callback)
        return self

    on_property_access = on_get

    def on_set(
        self,
        expression: Expression,
        callback: Callable[[Any], Any],
        matcher: Optional[Callable[[Any], bool]] = None,
    ) -> "Mock[T]":
        prop = self._settable(expression)
        value_matcher = None if matcher is None else (lambda args: bool(matcher(args[0])))
        self.state.register_callback(prop.setter.signature, callback, value_matcher)
        return self

    def __repr__(self) -> str:
        return f"Mock({self.spec.name}, invocations={len(self.state.ledger)})"


def invocations_of(substitute: Any) -> Sequence[Invocation]:
    return state_of(substitute).invocations
