from __future__ import annotations

from typing import Callable, Optional

from mocklite.ledger import ArgumentMatcher, InvocationLedger
from mocklite.signature import CallSignature

CountPredicate = Callable[[int], bool]


class VerificationFailure(AssertionError):
    def __init__(self, member: str, count: int, *, with_matcher: bool = False) -> None:
        qualifier = " with matcher" if with_matcher else ""
        super().__init__(f"Verification failed for {member}{qualifier}. Actual calls: {count}")
        self.member = member
        self.count = count


class Times:
    """Common call-count predicates.

    ``Times.once`` and ``Times.never`` are predicates themselves; the others
    build one::

        mock.verify(lambda m: m.get_user("42"), Times.once)
        mock.verify(lambda m: m.save, Times.at_least(2))
    """

    @staticmethod
    def once(count: int) -> bool:
        return count == 1

    @staticmethod
    def never(count: int) -> bool:
        return count == 0

    @staticmethod
    def exactly(n: int) -> CountPredicate:
        if n < 0:
            raise ValueError("n must be >= 0")
        return lambda count: count == n

    @staticmethod
    def at_least(n: int) -> CountPredicate:
        if n < 0:
            raise ValueError("n must be >= 0")
        return lambda count: count >= n

    @staticmethod
    def at_most(n: int) -> CountPredicate:
        if n < 0:
            raise ValueError("n must be >= 0")
        return lambda count: count <= n

    @staticmethod
    def between(low: int, high: int) -> CountPredicate:
        if low < 0 or high < low:
            raise ValueError("require 0 <= low <= high")
        return lambda count: low <= count <= high


class VerificationEngine:
    def __init__(self, ledger: InvocationLedger) -> None:
        self.ledger = ledger

    def count(self, signature: CallSignature, matcher: Optional[ArgumentMatcher] = None) -> int:
        return self.ledger.count(signature, matcher)

    def verify(
        self,
        signature: CallSignature,
        times: CountPredicate,
        matcher: Optional[ArgumentMatcher] = None,
    ) -> None:
        count = self.count(signature, matcher)
        if not times(count):
            raise VerificationFailure(signature.name, count, with_matcher=matcher is not None)
