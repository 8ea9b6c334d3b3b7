from __future__ import annotations

import contextlib
import logging
import threading
from datetime import datetime
from typing import Any, Callable, ContextManager, Optional, Sequence, Tuple

from mocklite.behaviors import BehaviorEntry, BehaviorResolver, Handler
from mocklite.callbacks import ArgumentPredicate, CallbackDispatcher, CallbackEntry
from mocklite.config import DEFAULT_OPTIONS, MockOptions
from mocklite.ledger import ArgumentMatcher, Invocation, InvocationLedger
from mocklite.signature import CallDescriptor, CallSignature
from mocklite.verification import CountPredicate, VerificationEngine

logger = logging.getLogger(__name__)


class MockState:
    """Per-instance engine state: one ledger, resolver and dispatcher.

    Every intercepted call goes through :meth:`invoke`, which records the
    call, fires matching callbacks, then resolves the return value. The
    remaining methods are the configuration and inspection boundary used by
    substitutes and the :class:`~mocklite.mock.Mock` facade.
    """

    def __init__(
        self,
        options: Optional[MockOptions] = None,
        *,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self.options = options or DEFAULT_OPTIONS
        self.ledger = InvocationLedger(clock=clock)
        self.resolver = BehaviorResolver(
            strict_wildcards=self.options.strict_wildcards,
            wrap_deferred_results=self.options.wrap_deferred_results,
        )
        self.dispatcher = CallbackDispatcher()
        self.verifier = VerificationEngine(self.ledger)
        self._lock: ContextManager[Any] = (
            threading.RLock() if self.options.thread_safe else contextlib.nullcontext()
        )

    @property
    def label(self) -> str:
        return self.options.name or f"mock@{id(self):x}"

    def invoke(self, signature: CallSignature, args: Sequence[Any]) -> Any:
        with self._lock:
            invocation = self.ledger.record(signature, args)
            logger.debug("%s #%d %s", self.label, invocation.seq, invocation)
            self.dispatcher.dispatch(signature, invocation.arguments)
            return self.resolver.resolve(signature, invocation.arguments)

    def register_behavior(
        self, descriptor: CallDescriptor, handler: Handler | Callable[..., Any]
    ) -> BehaviorEntry:
        with self._lock:
            return self.resolver.register(descriptor, handler)

    def register_callback(
        self,
        signature: CallSignature,
        action: Handler | Callable[..., Any],
        predicate: Optional[ArgumentPredicate] = None,
    ) -> CallbackEntry:
        with self._lock:
            return self.dispatcher.register(signature, action, predicate)

    def verify(
        self,
        signature: CallSignature,
        times: CountPredicate,
        matcher: Optional[ArgumentMatcher] = None,
    ) -> None:
        with self._lock:
            self.verifier.verify(signature, times, matcher)

    @property
    def invocations(self) -> Tuple[Invocation, ...]:
        with self._lock:
            return self.ledger.entries
