from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from mocklite.behaviors import Handler
from mocklite.signature import CallSignature

logger = logging.getLogger(__name__)

ArgumentPredicate = Callable[[Tuple[Any, ...]], bool]


@dataclass(frozen=True)
class CallbackEntry:
    signature: CallSignature
    action: Handler
    predicate: Optional[ArgumentPredicate] = None

    def applies(self, args: Tuple[Any, ...]) -> bool:
        return self.predicate is None or bool(self.predicate(args))


class CallbackDispatcher:
    def __init__(self) -> None:
        self._entries: Dict[str, List[CallbackEntry]] = {}

    def register(
        self,
        signature: CallSignature,
        action: Handler | Callable[..., Any],
        predicate: Optional[ArgumentPredicate] = None,
    ) -> CallbackEntry:
        entry = CallbackEntry(signature=signature, action=Handler.wrap(action), predicate=predicate)
        self._entries.setdefault(signature.key, []).append(entry)
        return entry

    def entries_for(self, signature: CallSignature) -> Tuple[CallbackEntry, ...]:
        return tuple(self._entries.get(signature.key, ()))

    def dispatch(self, signature: CallSignature, args: Sequence[Any]) -> int:
        args = tuple(args)
        fill = signature.parameter_defaults()
        fired = 0
        # a raising action stops the remaining callbacks; the error reaches the caller
        for entry in self.entries_for(signature):
            if not entry.applies(args):
                continue
            entry.action.invoke(args, fill)
            fired += 1
        if fired:
            logger.debug("Fired %d callback(s) for %s", fired, signature.key)
        return fired
