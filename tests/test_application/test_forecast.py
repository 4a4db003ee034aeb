"""
Tests for upcoming payment forecast.
"""
from datetime import date

from cardledger.application.forecast import MAX_FORECAST_MONTHS, forecast_by_card, next_payment_dates
from cardledger.application.payment_events import suggested_adjustment_date_for_payment
from cardledger.domain.card import Card
from cardledger.domain.dates import Day
from cardledger.domain.transaction import Tx


class TestNextPaymentDates:
    def test_skips_dates_before_from(self, card_version):
        infos = next_payment_dates([card_version], "c1", 3, date(2024, 3, 14))
        assert [i.payment_date for i in infos] == [date(2024, 4, 12), date(2024, 5, 13), date(2024, 6, 13)]

    def test_includes_from_date(self, card_version):
        infos = next_payment_dates([card_version], "c1", 1, date(2024, 3, 13))
        assert infos[0].payment_date == date(2024, 3, 13)

    def test_scan_is_bounded(self, card_version):
        infos = next_payment_dates([card_version], "c1", 1000, date(2024, 3, 1))
        assert len(infos) == MAX_FORECAST_MONTHS

    def test_no_versions(self):
        assert next_payment_dates([], "c1", 3, date(2024, 3, 1)) == []


class TestForecastByCard:
    def test_rows(self, credit_card, card_version):
        txs = [
            Tx(id="t1", date="2024-03-02", card_id="c1", amount=12000),
            Tx(id="t2", date="2024-03-05", card_id="c1", amount=9000, installments=3,
               fee_mode="manual", fee_rate=10),
        ]
        rows = forecast_by_card([credit_card], [card_version], txs, 2, date(2024, 3, 14))
        assert [r.payment_date for r in rows] == ["2024-04-12", "2024-05-13"]

        april = rows[0]
        assert april.cycle_start == "2024-03-01"
        assert april.cycle_end == "2024-03-31"
        assert april.expected_principal == 12000 + 3000
        assert april.expected_fee == 300
        assert april.expected == 15300

        may = rows[1]
        assert may.expected == 3300

    def test_card_without_versions(self, card_version):
        cards = [Card(id="c9", name="Empty", type="credit")]
        assert forecast_by_card(cards, [card_version], [], 3, date(2024, 3, 14)) == []

    def test_adjustment_date_matches_cycle_end(self, credit_card, card_version, make_version):
        cards = [credit_card, Card(id="c2", name="Hyundai", type="credit")]
        versions = [
            card_version,
            make_version(card_id="c2", payment_day=Day(31), weekend_adjust="none"),
        ]
        rows = forecast_by_card(cards, versions, [], 6, date(2024, 1, 20))
        assert len(rows) == 12
        for row in rows:
            suggested = suggested_adjustment_date_for_payment(versions, row.card_id, row.payment_date)
            assert suggested == row.cycle_end
