from concurrent.futures import ThreadPoolExecutor

from parkalert.ledger import AlertLedger
from parkalert.models import AlertKind


def test_mark_fired_is_idempotent() -> None:
    ledger = AlertLedger()
    ledger.mark_fired("b1", AlertKind.UPCOMING)
    ledger.mark_fired("b1", AlertKind.UPCOMING)

    assert ledger.has_fired("b1", AlertKind.UPCOMING)
    assert len(ledger) == 1


def test_kinds_are_independent() -> None:
    ledger = AlertLedger()
    ledger.mark_fired("b1", AlertKind.UPCOMING)

    assert not ledger.has_fired("b1", AlertKind.COMPLETED)
    assert not ledger.has_fired("b2", AlertKind.UPCOMING)
    assert ledger.fired_kinds("b1") == {AlertKind.UPCOMING}


def test_accepts_kind_values() -> None:
    ledger = AlertLedger()
    ledger.mark_fired("b1", "arrived")

    assert ledger.has_fired("b1", AlertKind.ARRIVED)
    assert ("b1", "arrived") in ledger
    assert ("b1", "expired") not in ledger
    assert "b1" not in ledger


def test_claim_blocks_second_claim_until_released() -> None:
    ledger = AlertLedger()

    assert ledger.claim("b1", AlertKind.ARRIVED)
    assert not ledger.claim("b1", AlertKind.ARRIVED)
    assert not ledger.has_fired("b1", AlertKind.ARRIVED)

    ledger.release("b1", AlertKind.ARRIVED)
    assert ledger.claim("b1", AlertKind.ARRIVED)


def test_claim_refused_after_fired() -> None:
    ledger = AlertLedger()
    assert ledger.claim("b1", AlertKind.EXPIRED)
    ledger.mark_fired("b1", AlertKind.EXPIRED)

    assert not ledger.claim("b1", AlertKind.EXPIRED)
    ledger.release("b1", AlertKind.EXPIRED)
    assert ledger.has_fired("b1", AlertKind.EXPIRED)


def test_only_one_thread_wins_a_claim() -> None:
    ledger = AlertLedger()
    with ThreadPoolExecutor(max_workers=8) as pool:
        results = list(pool.map(lambda _: ledger.claim("b1", AlertKind.UPCOMING), range(64)))

    assert results.count(True) == 1
