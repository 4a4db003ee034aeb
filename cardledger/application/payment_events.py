"""
Payment events: expected vs actual per (card, payment date).

Pure read-layer: recomputed from the snapshot (cards, versions, transactions,
statements) on every call, nothing cached. `today` is always passed in.
"""
import logging
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date
from typing import Iterable, Optional, Sequence

from cardledger.domain.allocation import Allocation, build_allocations
from cardledger.domain.billing_cycle import cycle_range_for_payment, payment_info_in_timeline
from cardledger.domain.card import Card
from cardledger.domain.card_version import CardVersion, VersionTimeline, versions_for_card
from cardledger.domain.dates import YearMonth, add_months, format_date, parse_date
from cardledger.domain.transaction import Statement, Tx

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InstallmentStats:
    total_principal: int = 0   # сумма всех частей активных рассрочек
    paid_to_date: int = 0      # оплачено по эту дату включительно
    remaining_after: int = 0   # остаток после этой даты
    this_payment: int = 0      # часть рассрочек в этом платеже
    remaining_before: int = 0  # остаток перед этим платежом (= this_payment + remaining_after)


@dataclass(frozen=True)
class PaymentEvent:
    card_id: str
    card_name: str
    payment_date: str
    cycle_start: str
    cycle_end: str
    expected: int
    expected_principal: int
    expected_fee: int
    actual: Optional[int]
    diff: Optional[int]
    installment: InstallmentStats = field(default_factory=InstallmentStats)


def index_allocations(allocations: Iterable[Allocation]) -> dict[tuple[str, str], list[Allocation]]:
    out: dict[tuple[str, str], list[Allocation]] = defaultdict(list)
    for a in allocations:
        out[(a.card_id, a.payment_date)].append(a)
    return out


def sum_parts(allocations: Sequence[Allocation]) -> tuple[int, int]:
    """(principal, fee) totals."""
    return sum(a.principal_part for a in allocations), sum(a.fee_part for a in allocations)


def installment_stats(
    card_id: str,
    payment_date: str,
    allocations: Iterable[Allocation],
    tx_by_id: dict[str, Tx],
) -> InstallmentStats:
    """
    Installment totals for one card at one payment date.

    Only transactions with installments > 1 whose [first, last] payment date
    range includes `payment_date` are counted; finished and not yet started
    plans are left out.
    """
    by_tx: dict[str, list[Allocation]] = defaultdict(list)
    for a in allocations:
        if a.card_id != card_id:
            continue
        tx = tx_by_id.get(a.tx_id)
        if tx is None or tx.installments <= 1:
            continue
        by_tx[a.tx_id].append(a)

    total = paid_to_date = paid_before = this_payment = 0
    for parts in by_tx.values():
        dates = sorted(p.payment_date for p in parts)
        if payment_date < dates[0] or payment_date > dates[-1]:
            continue
        for p in parts:
            total += p.principal_part
            if p.payment_date <= payment_date:
                paid_to_date += p.principal_part
            if p.payment_date < payment_date:
                paid_before += p.principal_part
            if p.payment_date == payment_date:
                this_payment += p.principal_part

    return InstallmentStats(
        total_principal=total,
        paid_to_date=paid_to_date,
        remaining_after=total - paid_to_date,
        this_payment=this_payment,
        remaining_before=total - paid_before,
    )


def payment_events(
    cards: Sequence[Card],
    versions: Sequence[CardVersion],
    txs: Sequence[Tx],
    statements: Sequence[Statement],
    past_months: int,
    future_months: int,
    today: date,
) -> list[PaymentEvent]:
    """
    Reconciliation rows for every active credit card over
    [today's month - past_months, today's month + future_months].

    A (card_id, payment_date) pair is emitted once even when a rule change
    maps two months onto the same date. Sorted by payment date, then card name.
    """
    allocations = build_allocations(cards, versions, txs)
    by_key = index_allocations(allocations)
    tx_by_id = {t.id: t for t in txs}

    statement_by_key: dict[tuple[str, str], Statement] = {}
    for s in statements:
        statement_by_key.setdefault((s.card_id, s.payment_date), s)

    base = YearMonth.of(today)
    out: list[PaymentEvent] = []

    for card in cards:
        if not card.is_billable:
            continue
        timeline = VersionTimeline(versions_for_card(versions, card.id))
        if not len(timeline):
            logger.debug("Card %s has no billing versions, skipped", card.id)
            continue

        seen: set[str] = set()
        for i in range(-past_months, future_months + 1):
            info = payment_info_in_timeline(timeline, add_months(base, i))
            if info is None:
                continue
            p_str = format_date(info.payment_date)
            if p_str in seen:
                continue
            seen.add(p_str)

            cycle = cycle_range_for_payment(info.version, info.payment_date)
            principal, fee = sum_parts(by_key.get((card.id, p_str), ()))
            expected = principal + fee

            stmt = statement_by_key.get((card.id, p_str))
            actual = stmt.actual if stmt is not None else None
            diff = None if actual is None else actual - expected

            out.append(PaymentEvent(
                card_id=card.id,
                card_name=card.name,
                payment_date=p_str,
                cycle_start=format_date(cycle.start),
                cycle_end=format_date(cycle.end),
                expected=expected,
                expected_principal=principal,
                expected_fee=fee,
                actual=actual,
                diff=diff,
                installment=installment_stats(card.id, p_str, allocations, tx_by_id),
            ))

    out.sort(key=lambda e: (e.payment_date, e.card_name))
    return out


def suggested_adjustment_date_for_payment(
    versions: Sequence[CardVersion],
    card_id: str,
    payment_date_str: str,
) -> Optional[str]:
    """
    Cycle end of the billing cycle that produced `payment_date_str`.

    Posting a manual adjustment (annual fee, interest correction) on this
    date keeps it inside the same cycle on the next recomputation.
    """
    pay_dt = parse_date(payment_date_str)
    if pay_dt is None:
        return None
    timeline = VersionTimeline(versions_for_card(versions, card_id))
    info = payment_info_in_timeline(timeline, YearMonth.of(pay_dt))
    if info is None:
        return None
    return format_date(cycle_range_for_payment(info.version, info.payment_date).end)
