"""
Upcoming payment forecast per credit card.
"""
from dataclasses import dataclass
from datetime import date
from typing import Sequence

from cardledger.application.payment_events import index_allocations, sum_parts
from cardledger.domain.allocation import build_allocations
from cardledger.domain.billing_cycle import PaymentInfo, cycle_range_for_payment, payment_info_in_timeline
from cardledger.domain.card import Card
from cardledger.domain.card_version import CardVersion, VersionTimeline, versions_for_card
from cardledger.domain.dates import YearMonth, add_months, format_date
from cardledger.domain.transaction import Tx

MAX_FORECAST_MONTHS = 48


@dataclass(frozen=True)
class ForecastRow:
    card_id: str
    card_name: str
    payment_date: str
    cycle_start: str
    cycle_end: str
    expected: int
    expected_principal: int
    expected_fee: int


def next_payment_dates(
    versions: Sequence[CardVersion],
    card_id: str,
    horizon: int,
    from_date: date,
) -> list[PaymentInfo]:
    """
    Next `horizon` payment dates on or after from_date.

    Scans at most MAX_FORECAST_MONTHS months, so fewer dates may come back.
    """
    timeline = VersionTimeline(versions_for_card(versions, card_id))
    if not len(timeline):
        return []
    base = YearMonth.of(from_date)
    out: list[PaymentInfo] = []
    i = 0
    while len(out) < horizon and i < MAX_FORECAST_MONTHS:
        info = payment_info_in_timeline(timeline, add_months(base, i))
        i += 1
        if info is not None and info.payment_date >= from_date:
            out.append(info)
    return out


def forecast_by_card(
    cards: Sequence[Card],
    versions: Sequence[CardVersion],
    txs: Sequence[Tx],
    horizon: int,
    today: date,
) -> list[ForecastRow]:
    """Expected amounts of the next `horizon` payments of every active credit card."""
    by_key = index_allocations(build_allocations(cards, versions, txs))
    out: list[ForecastRow] = []

    for card in cards:
        if not card.is_billable:
            continue
        for info in next_payment_dates(versions, card.id, horizon, today):
            p_str = format_date(info.payment_date)
            principal, fee = sum_parts(by_key.get((card.id, p_str), ()))
            cycle = cycle_range_for_payment(info.version, info.payment_date)
            out.append(ForecastRow(
                card_id=card.id,
                card_name=card.name,
                payment_date=p_str,
                cycle_start=format_date(cycle.start),
                cycle_end=format_date(cycle.end),
                expected=principal + fee,
                expected_principal=principal,
                expected_fee=fee,
            ))

    out.sort(key=lambda r: (r.payment_date, r.card_name))
    return out
