"""
Effective-dated billing rules for a card.

A card has several CardVersion rows; the one in force at a reference date is
the latest valid_from at or before it, falling back to the earliest version
when the reference date precedes all of them.
"""
from bisect import bisect_right
from dataclasses import dataclass
from datetime import date
from typing import Iterable, Optional, Sequence

from cardledger.domain.dates import (
    DayOfMonth,
    VALID_WEEKEND_ADJUST,
    WEEKEND_NONE,
    day_of_month,
    parse_date,
)


@dataclass(frozen=True)
class CycleRule:
    month_offset: int  # relative to the payment month
    day: DayOfMonth


@dataclass(frozen=True)
class CardVersion:
    id: str
    card_id: str
    valid_from: str  # YYYY-MM-DD
    payment_day: DayOfMonth
    clamp: bool  # day missing in month -> month end
    weekend_adjust: str  # none, next_business, prev_business
    cycle_start: CycleRule
    cycle_end: CycleRule
    created_at: str = ""


class VersionTimeline:
    """Versions of one card sorted by valid_from, searched with bisect."""

    def __init__(self, versions: Iterable[CardVersion]):
        dated = []
        for v in versions:
            dt = parse_date(v.valid_from)
            if dt is None:
                continue
            dated.append((dt, v))
        # stable: equal valid_from keeps input order, the later one wins
        dated.sort(key=lambda x: x[0])
        self._dates = [d for d, _ in dated]
        self._versions = [v for _, v in dated]

    def __len__(self) -> int:
        return len(self._versions)

    def at(self, reference: date) -> Optional[CardVersion]:
        if not self._versions:
            return None
        idx = bisect_right(self._dates, reference)
        if idx == 0:
            return self._versions[0]
        return self._versions[idx - 1]


def versions_for_card(versions: Iterable[CardVersion], card_id: str) -> list[CardVersion]:
    return [v for v in versions if v.card_id == card_id]


def resolve_version(versions: Sequence[CardVersion], reference: date) -> Optional[CardVersion]:
    """
    Pick the version in force at `reference`.

    Returns None for an empty list: the card has no computable schedule.
    """
    return VersionTimeline(versions).at(reference)


def cycle_rule_from_row(row) -> CycleRule:
    return CycleRule(month_offset=int(row.month_offset), day=day_of_month(row.day))


def card_version_from_row(row) -> CardVersion:
    """Build CardVersion from any object with matching attributes (API model, DB row)."""
    weekend_adjust = row.weekend_adjust if row.weekend_adjust in VALID_WEEKEND_ADJUST else WEEKEND_NONE
    return CardVersion(
        id=row.id,
        card_id=row.card_id,
        valid_from=row.valid_from,
        payment_day=day_of_month(row.payment_day),
        clamp=bool(row.clamp),
        weekend_adjust=weekend_adjust,
        cycle_start=cycle_rule_from_row(row.cycle_start),
        cycle_end=cycle_rule_from_row(row.cycle_end),
        created_at=getattr(row, "created_at", "") or "",
    )
