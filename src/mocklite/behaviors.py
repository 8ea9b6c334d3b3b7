from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Literal, Optional, Sequence, Tuple

from mocklite.signature import CallDescriptor, CallSignature, exact_key

logger = logging.getLogger(__name__)

ResolutionStep = Literal["exact", "wildcard", "default", "synthesized"]

_POSITIONAL = (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)


def _positional_arity(func: Callable[..., Any]) -> Tuple[Optional[int], int]:
    """Return ``(arity, required)``; ``arity`` is ``None`` for variadic callables."""
    try:
        sig = inspect.signature(func)
    except (TypeError, ValueError):
        # builtins without introspectable signatures receive every argument
        return None, 0
    arity: Optional[int] = 0
    required = 0
    for param in sig.parameters.values():
        if param.kind is inspect.Parameter.VAR_POSITIONAL:
            arity = None
        elif param.kind in _POSITIONAL and arity is not None:
            arity += 1
        if param.kind in _POSITIONAL and param.default is inspect.Parameter.empty:
            required += 1
    return arity, required


@dataclass(frozen=True)
class Handler:
    """A registered callable plus the positional arity it was declared with.

    ``arity`` is ``None`` for variadic callables, which receive every actual
    argument. Fixed-arity handlers receive exactly the first ``arity`` actual
    arguments. Required positions the call did not supply are padded from
    ``fill`` (the per-parameter type-defaults); optional ones keep their own
    defaults.
    """

    func: Callable[..., Any]
    arity: Optional[int]
    required: int = 0

    @classmethod
    def wrap(cls, func: Callable[..., Any]) -> "Handler":
        if isinstance(func, Handler):
            return func
        if not callable(func):
            raise TypeError("handler must be callable")
        arity, required = _positional_arity(func)
        return cls(func=func, arity=arity, required=required)

    @classmethod
    def constant(cls, value: Any) -> "Handler":
        return cls(func=lambda: value, arity=0)

    @classmethod
    def raising(cls, exc: BaseException | type[BaseException]) -> "Handler":
        def _raise() -> Any:
            raise exc

        return cls(func=_raise, arity=0)

    def arguments_for(self, args: Sequence[Any], fill: Sequence[Any] = ()) -> Tuple[Any, ...]:
        picked = list(args) if self.arity is None else list(args[: self.arity])
        for pos in range(len(picked), self.required):
            picked.append(fill[pos] if pos < len(fill) else None)
        return tuple(picked)

    def invoke(self, args: Sequence[Any], fill: Sequence[Any] = ()) -> Any:
        return self.func(*self.arguments_for(args, fill))


@dataclass(frozen=True)
class BehaviorEntry:
    descriptor: CallDescriptor
    wildcard_mask: Tuple[bool, ...]
    handler: Handler

    @classmethod
    def create(cls, descriptor: CallDescriptor, handler: Handler) -> "BehaviorEntry":
        return cls(descriptor=descriptor, wildcard_mask=descriptor.wildcard_mask, handler=handler)

    @property
    def signature(self) -> CallSignature:
        return self.descriptor.signature

    @property
    def is_wildcard(self) -> bool:
        return any(self.wildcard_mask)


class BehaviorResolver:
    """Maps a call to its configured response or a synthesized default.

    Precedence is fixed: exact argument match, then the first wildcard entry
    for the signature in registration order, then the signature-only
    default, then synthesis from the signature's return shape.

    With ``strict_wildcards`` off, a wildcard entry's literal positions are
    not compared with the actual arguments: any wildcard anywhere in the
    descriptor admits the call once each wildcard position's own type or
    predicate accepts its value. ``strict_wildcards`` also requires literal
    positions to render equal.
    """

    def __init__(self, *, strict_wildcards: bool = False, wrap_deferred_results: bool = True) -> None:
        self.strict_wildcards = strict_wildcards
        self.wrap_deferred_results = wrap_deferred_results
        self._by_key: Dict[str, BehaviorEntry] = {}
        self._defaults: Dict[str, BehaviorEntry] = {}

    def register(self, descriptor: CallDescriptor, handler: Handler | Callable[..., Any]) -> BehaviorEntry:
        entry = BehaviorEntry.create(descriptor, Handler.wrap(handler))
        if descriptor.is_signature_only:
            self._defaults[descriptor.signature.key] = entry
        else:
            self._by_key[descriptor.render_key()] = entry
        logger.debug(
            "Registered %s behavior for %s",
            "default" if descriptor.is_signature_only else "argument",
            descriptor.signature.key,
        )
        return entry

    @property
    def entries(self) -> Tuple[BehaviorEntry, ...]:
        return tuple(self._by_key.values()) + tuple(self._defaults.values())

    def default_for(self, signature: CallSignature) -> Optional[BehaviorEntry]:
        return self._defaults.get(signature.key)

    def _wildcard_admits(self, entry: BehaviorEntry, args: Sequence[Any]) -> bool:
        specs = entry.descriptor.arguments or ()
        if self.strict_wildcards:
            return entry.descriptor.matches(args)
        for spec, value in zip(specs, args):
            if spec.is_wildcard and not spec.matches(value):
                return False
        return True

    def find(self, signature: CallSignature, args: Sequence[Any]) -> Tuple[ResolutionStep, Optional[BehaviorEntry]]:
        entry = self._by_key.get(exact_key(signature, args))
        if entry is not None:
            return "exact", entry

        for candidate in self._by_key.values():
            if candidate.signature != signature or not candidate.is_wildcard:
                continue
            if self._wildcard_admits(candidate, args):
                return "wildcard", candidate

        entry = self._defaults.get(signature.key)
        if entry is not None:
            return "default", entry

        return "synthesized", None

    def resolve(self, signature: CallSignature, args: Sequence[Any]) -> Any:
        step, entry = self.find(signature, args)
        logger.debug("Resolved %s via %s", signature.key, step)
        if entry is None:
            return signature.returns.synthesize()
        result = entry.handler.invoke(args, signature.parameter_defaults())
        if self.wrap_deferred_results:
            return signature.returns.coerce(result)
        return result
