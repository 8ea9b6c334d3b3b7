from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Union

from mocklite.common.canonical_json import canonical_dumps_str
from mocklite.shapes import type_name

ANY_SENTINEL = "*"
PREDICATE_SENTINEL = "?"


def _type_accepts(expected_type: Any, value: Any) -> bool:
    # typing constructs (Optional[str], list[int], ...) are not checked
    if expected_type is object or not isinstance(expected_type, type):
        return True
    return isinstance(value, expected_type)


@dataclass(frozen=True)
class LiteralArg:
    value: Any

    @property
    def is_wildcard(self) -> bool:
        return False

    def render(self) -> str:
        return canonical_dumps_str(self.value)

    def matches(self, value: Any) -> bool:
        return canonical_dumps_str(value) == self.render()


@dataclass(frozen=True)
class AnyArg:
    expected_type: Any = object

    @property
    def is_wildcard(self) -> bool:
        return True

    def render(self) -> str:
        return ANY_SENTINEL + type_name(self.expected_type)

    def matches(self, value: Any) -> bool:
        return _type_accepts(self.expected_type, value)


@dataclass(frozen=True)
class MatchesArg:
    predicate: Callable[[Any], bool]
    expected_type: Any = object

    @property
    def is_wildcard(self) -> bool:
        return True

    def render(self) -> str:
        return f"{PREDICATE_SENTINEL}{id(self.predicate):x}:{type_name(self.expected_type)}"

    def matches(self, value: Any) -> bool:
        return _type_accepts(self.expected_type, value) and bool(self.predicate(value))


ArgumentSpec = Union[LiteralArg, AnyArg, MatchesArg]


def as_spec(value: Any) -> ArgumentSpec:
    if isinstance(value, (LiteralArg, AnyArg, MatchesArg)):
        return value
    return LiteralArg(value)


class It:
    """Argument specifiers for configuration and verification expressions.

    ``It.is_any(str)`` matches any string at that position and
    ``It.matches(lambda n: n > 100, int)`` matches ints above 100. The
    returned specifier sits directly in the call expression::

        mock.setup(lambda m: m.get_user(It.is_any(str)), returns=user)
        mock.verify(lambda m: m.delete(It.matches(lambda s: s.startswith("test"))), Times.once)
    """

    @staticmethod
    def is_any(expected_type: Any = object) -> AnyArg:
        return AnyArg(expected_type)

    @staticmethod
    def matches(predicate: Callable[[Any], bool], expected_type: Any = object) -> MatchesArg:
        if not callable(predicate):
            raise TypeError("predicate must be callable")
        return MatchesArg(predicate, expected_type)


__all__ = [
    "ANY_SENTINEL",
    "PREDICATE_SENTINEL",
    "AnyArg",
    "ArgumentSpec",
    "It",
    "LiteralArg",
    "MatchesArg",
    "as_spec",
]
