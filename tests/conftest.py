"""
Pytest fixtures for testing
"""
import pytest

from cardledger.domain.card import Card
from cardledger.domain.card_version import CardVersion, CycleRule
from cardledger.domain.dates import Day, END_OF_MONTH, WEEKEND_PREV_BUSINESS


@pytest.fixture
def make_version():
    """Factory: CardVersion paying on `payment_day`, cycle = previous calendar month."""
    def _make(
        card_id="c1",
        valid_from="2024-01-01",
        payment_day=Day(13),
        clamp=True,
        weekend_adjust=WEEKEND_PREV_BUSINESS,
        cycle_start=CycleRule(month_offset=-1, day=Day(1)),
        cycle_end=CycleRule(month_offset=-1, day=END_OF_MONTH),
        version_id=None,
    ):
        return CardVersion(
            id=version_id or f"{card_id}-{valid_from}",
            card_id=card_id,
            valid_from=valid_from,
            payment_day=payment_day,
            clamp=clamp,
            weekend_adjust=weekend_adjust,
            cycle_start=cycle_start,
            cycle_end=cycle_end,
        )
    return _make


@pytest.fixture
def credit_card():
    return Card(id="c1", name="Shinhan", type="credit")


@pytest.fixture
def card_version(make_version):
    """Pays on the 13th (previous business day), cycle = whole previous month"""
    return make_version()


@pytest.fixture
def wire_snapshot():
    """Same card as `credit_card` + `card_version`, in API (JSON) form"""
    return {
        "cards": [{"id": "c1", "name": "Shinhan", "type": "credit"}],
        "versions": [{
            "id": "v1",
            "card_id": "c1",
            "valid_from": "2024-01-01",
            "payment_day": 13,
            "clamp": True,
            "weekend_adjust": "prev_business",
            "cycle_start": {"month_offset": -1, "day": 1},
            "cycle_end": {"month_offset": -1, "day": "EOM"},
        }],
        "transactions": [
            {"id": "t1", "date": "2024-02-10", "card_id": "c1", "amount": 30000},
            {
                "id": "t2", "date": "2024-02-20", "card_id": "c1", "amount": 100000,
                "installments": 3, "fee_mode": "manual", "fee_rate": 1.5,
            },
        ],
        "statements": [
            {"id": "s1", "card_id": "c1", "payment_date": "2024-03-13", "actual": 65000},
        ],
    }
