from datetime import datetime, timedelta, timezone

from mocklite.ledger import InvocationLedger
from mocklite.signature import CallSignature

GET = CallSignature("get_value", ("str",))
PUT = CallSignature("put", ("str", "int"))


def _ticking_clock():
    start = datetime(2024, 1, 1, tzinfo=timezone.utc)
    ticks = iter(range(1000))
    return lambda: start + timedelta(seconds=next(ticks))


def test_ledger_preserves_call_order() -> None:
    ledger = InvocationLedger(clock=_ticking_clock())
    for i in range(5):
        ledger.record(GET, (f"k{i}",))
    seqs = [inv.seq for inv in ledger]
    assert seqs == [1, 2, 3, 4, 5]
    assert [inv.arguments for inv in ledger] == [(f"k{i}",) for i in range(5)]
    stamps = [inv.timestamp for inv in ledger]
    assert stamps == sorted(stamps)


def test_entries_view_is_read_only() -> None:
    ledger = InvocationLedger()
    ledger.record(GET, ["k"])
    view = ledger.entries
    assert isinstance(view, tuple)
    assert view[0].arguments == ("k",)
    ledger.record(GET, ["j"])
    assert len(view) == 1
    assert len(ledger) == 2


def test_default_clock_is_utc() -> None:
    inv = InvocationLedger().record(GET, ("k",))
    assert inv.timestamp.tzinfo is timezone.utc


def test_count_filters_by_signature_and_matcher() -> None:
    ledger = InvocationLedger()
    ledger.record(GET, ("k",))
    ledger.record(PUT, ("k", 1))
    ledger.record(GET, ("other",))
    assert ledger.count(GET) == 2
    assert ledger.count(PUT) == 1
    assert ledger.count(GET, lambda args: args[0] == "k") == 1
    assert [inv.seq for inv in ledger.matching(GET)] == [1, 3]


def test_invocation_rendering() -> None:
    ledger = InvocationLedger(clock=_ticking_clock())
    inv = ledger.record(PUT, ("k", 1))
    assert str(inv) == 'put("k", 1) @ 2024-01-01T00:00:00+00:00'
    assert ledger.to_obj() == {
        "invocations": [
            {
                "seq": 1,
                "signature": "put(str,int)",
                "arguments": ["k", 1],
                "timestamp_utc": "2024-01-01T00:00:00+00:00",
            }
        ]
    }
    assert ledger[0] is inv


def test_slicing_returns_an_immutable_view() -> None:
    ledger = InvocationLedger()
    for key in ("a", "b", "c"):
        ledger.record(GET, (key,))
    tail = ledger[1:]
    assert isinstance(tail, tuple)
    assert [inv.arguments for inv in tail] == [("b",), ("c",)]
    assert ledger[-1].seq == 3
