"""
Billing cycle calculator and locator.

Payment month M (YearMonth) under a CardVersion gives:
- payment date: payment_day resolved in M, then weekend-adjusted
- cycle range: [cycle_start, cycle_end], each endpoint resolved in
  M + month_offset independently

The version for month M is the one in force on the 15th of M. The 15th is a
mid-month anchor; a version whose valid_from falls between the 1st and the
15th already applies to that whole month.
"""
import logging
from dataclasses import dataclass
from datetime import date
from typing import Iterable, Optional

from cardledger.domain.card_version import CardVersion, CycleRule, VersionTimeline, versions_for_card
from cardledger.domain.dates import (
    YearMonth,
    add_months,
    adjust_for_weekend,
    make_date,
    mid_month,
    resolve_day,
)

logger = logging.getLogger(__name__)

FORWARD_SEARCH_MONTHS = 8   # offsets 0..7
BACKWARD_SEARCH_MONTHS = 6  # offsets -1..-6


@dataclass(frozen=True)
class CycleRange:
    start: date
    end: date

    def __contains__(self, d: date) -> bool:
        return self.start <= d <= self.end


@dataclass(frozen=True)
class PaymentInfo:
    year_month: YearMonth
    payment_date: date
    version: CardVersion


@dataclass(frozen=True)
class BillingMatch:
    year_month: YearMonth  # payment month
    payment_date: date
    version: CardVersion
    cycle: CycleRange


def payment_date_for_month(version: CardVersion, ym: YearMonth) -> date:
    day = resolve_day(ym.year, ym.month, version.payment_day, version.clamp)
    return adjust_for_weekend(make_date(ym.year, ym.month, day), version.weekend_adjust)


def _cycle_endpoint(version: CardVersion, payment_month: YearMonth, rule: CycleRule) -> date:
    ym = add_months(payment_month, rule.month_offset)
    day = resolve_day(ym.year, ym.month, rule.day, version.clamp)
    return make_date(ym.year, ym.month, day)


def cycle_range_for_payment(version: CardVersion, payment_date: date) -> CycleRange:
    """Offsets are relative to the month of payment_date (after weekend adjustment)."""
    pm = YearMonth.of(payment_date)
    return CycleRange(
        start=_cycle_endpoint(version, pm, version.cycle_start),
        end=_cycle_endpoint(version, pm, version.cycle_end),
    )


def payment_info_in_timeline(timeline: VersionTimeline, ym: YearMonth) -> Optional[PaymentInfo]:
    version = timeline.at(mid_month(ym))
    if version is None:
        return None
    return PaymentInfo(year_month=ym, payment_date=payment_date_for_month(version, ym), version=version)


def payment_info_for_month(
    versions: Iterable[CardVersion],
    card_id: str,
    ym: YearMonth,
) -> Optional[PaymentInfo]:
    """Payment date of `card_id` in month `ym`, or None if the card has no versions."""
    return payment_info_in_timeline(VersionTimeline(versions_for_card(versions, card_id)), ym)


def _match_month(timeline: VersionTimeline, ym: YearMonth, tx_date: date) -> Optional[BillingMatch]:
    info = payment_info_in_timeline(timeline, ym)
    if info is None:
        return None
    cycle = cycle_range_for_payment(info.version, info.payment_date)
    if tx_date in cycle:
        return BillingMatch(year_month=ym, payment_date=info.payment_date, version=info.version, cycle=cycle)
    return None


def locate_in_timeline(timeline: VersionTimeline, tx_date: date) -> Optional[BillingMatch]:
    if not len(timeline):
        return None
    base = YearMonth.of(tx_date)

    # forward first - the usual case
    for i in range(FORWARD_SEARCH_MONTHS):
        match = _match_month(timeline, add_months(base, i), tx_date)
        if match is not None:
            return match

    for i in range(1, BACKWARD_SEARCH_MONTHS + 1):
        match = _match_month(timeline, add_months(base, -i), tx_date)
        if match is not None:
            return match

    return None


def find_billing_cycle(
    versions: Iterable[CardVersion],
    card_id: str,
    tx_date: date,
) -> Optional[BillingMatch]:
    """
    Find the billing cycle (and payment month) containing tx_date.

    Scans payment months tx_month+0..+7, then tx_month-1..-6, and returns the
    first whose cycle range contains tx_date. None if nothing matches.
    """
    match = locate_in_timeline(VersionTimeline(versions_for_card(versions, card_id)), tx_date)
    if match is None:
        logger.debug("No billing cycle for card_id=%s date=%s", card_id, tx_date)
    return match
