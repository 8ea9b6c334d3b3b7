from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Iterator, List, Optional, Sequence, Tuple, overload

from mocklite.signature import CallSignature

ArgumentMatcher = Callable[[Tuple[Any, ...]], bool]


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _format_arg(value: Any) -> str:
    if value is None:
        return "None"
    if isinstance(value, str):
        return f'"{value}"'
    return repr(value)


@dataclass(frozen=True)
class Invocation:
    signature: CallSignature
    arguments: Tuple[Any, ...]
    seq: int
    timestamp: datetime

    @property
    def name(self) -> str:
        return self.signature.name

    def to_obj(self) -> dict[str, Any]:
        return {
            "seq": self.seq,
            "signature": self.signature.key,
            "arguments": list(self.arguments),
            "timestamp_utc": self.timestamp.isoformat(),
        }

    def __str__(self) -> str:
        args = ", ".join(_format_arg(a) for a in self.arguments)
        return f"{self.name}({args}) @ {self.timestamp.isoformat()}"


class InvocationLedger:
    """Append-only record of every call made against one mock instance."""

    def __init__(self, clock: Optional[Callable[[], datetime]] = None) -> None:
        self._clock = clock or _utc_now
        self._entries: List[Invocation] = []

    def record(self, signature: CallSignature, args: Sequence[Any]) -> Invocation:
        seq = len(self._entries) + 1
        invocation = Invocation(
            signature=signature,
            arguments=tuple(args),
            seq=seq,
            timestamp=self._clock(),
        )
        self._entries.append(invocation)
        return invocation

    @property
    def entries(self) -> Tuple[Invocation, ...]:
        return tuple(self._entries)

    def matching(
        self, signature: CallSignature, matcher: Optional[ArgumentMatcher] = None
    ) -> List[Invocation]:
        return [
            i
            for i in self._entries
            if i.signature == signature and (matcher is None or matcher(i.arguments))
        ]

    def count(self, signature: CallSignature, matcher: Optional[ArgumentMatcher] = None) -> int:
        return len(self.matching(signature, matcher))

    def to_obj(self) -> dict[str, Any]:
        return {"invocations": [i.to_obj() for i in self._entries]}

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[Invocation]:
        return iter(self.entries)

    @overload
    def __getitem__(self, index: int) -> Invocation: ...

    @overload
    def __getitem__(self, index: slice) -> Tuple[Invocation, ...]: ...

    def __getitem__(self, index: int | slice) -> Invocation | Tuple[Invocation, ...]:
        return self.entries[index]
