"""
Allocation builder: splits credit-card transactions into per-payment parts.

For each (transaction, installment k) one Allocation is emitted on the
payment date of (located payment month + k), resolved through that month's
own CardVersion.
"""
import logging
import math
from collections import defaultdict
from dataclasses import dataclass
from typing import Iterable

from cardledger.domain.billing_cycle import locate_in_timeline, payment_info_in_timeline
from cardledger.domain.card import Card, CARD_TYPE_CREDIT
from cardledger.domain.card_version import CardVersion, VersionTimeline
from cardledger.domain.dates import add_months, format_date, parse_date
from cardledger.domain.transaction import Tx, FEE_MODE_MANUAL

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Allocation:
    card_id: str
    payment_date: str  # YYYY-MM-DD
    principal_part: int
    fee_part: int
    tx_id: str


def split_remainder_first(amount: int, n: int) -> list[int]:
    """
    Split `amount` into n integer parts summing exactly to `amount`.

    Truncating division; the whole remainder goes to the first part.
    Works for negative amounts (refunds): -10 / 3 -> [-4, -3, -3].
    """
    n = max(1, int(n))
    base = _trunc_div(amount, n)
    rem = amount - base * n
    return [base + rem] + [base] * (n - 1)


def _trunc_div(a: int, b: int) -> int:
    q = abs(a) // abs(b)
    return q if (a >= 0) == (b >= 0) else -q


def fee_total(amount: int, fee_mode: str, fee_rate: float) -> int:
    """Installment fee for the whole transaction; halves round up."""
    if fee_mode != FEE_MODE_MANUAL:
        return 0
    rate = fee_rate or 0
    return math.floor(amount * (rate / 100) + 0.5)


def build_allocations(
    cards: Iterable[Card],
    versions: Iterable[CardVersion],
    txs: Iterable[Tx],
) -> list[Allocation]:
    """
    Allocations for every credit-card transaction that has a billing cycle.

    Skipped silently: non-credit or unknown cards, unparseable dates,
    transactions outside any cycle, installments whose month has no version.
    """
    card_map = {c.id: c for c in cards}
    by_card: dict[str, list[CardVersion]] = defaultdict(list)
    for v in versions:
        by_card[v.card_id].append(v)
    timelines: dict[str, VersionTimeline] = {}

    allocations: list[Allocation] = []
    for tx in txs:
        card = card_map.get(tx.card_id)
        if card is None or card.type != CARD_TYPE_CREDIT:
            continue
        tx_date = parse_date(tx.date)
        if tx_date is None:
            logger.debug("Skipping tx_id=%s: invalid date %r", tx.id, tx.date)
            continue

        timeline = timelines.get(tx.card_id)
        if timeline is None:
            timeline = timelines[tx.card_id] = VersionTimeline(by_card.get(tx.card_id, ()))

        match = locate_in_timeline(timeline, tx_date)
        if match is None:
            logger.debug("Skipping tx_id=%s: no billing cycle for %s", tx.id, tx.date)
            continue

        n = max(1, int(tx.installments or 1))
        principal_parts = split_remainder_first(tx.amount, n)
        fee_parts = split_remainder_first(fee_total(tx.amount, tx.fee_mode, tx.fee_rate), n)

        for k in range(n):
            info = payment_info_in_timeline(timeline, add_months(match.year_month, k))
            if info is None:
                logger.debug("Dropping installment %d of tx_id=%s: no version", k + 1, tx.id)
                continue
            allocations.append(Allocation(
                card_id=tx.card_id,
                payment_date=format_date(info.payment_date),
                principal_part=principal_parts[k],
                fee_part=fee_parts[k],
                tx_id=tx.id,
            ))

    return allocations
