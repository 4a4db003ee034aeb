"""Tests for effective-dated card version resolution"""
from datetime import date
from types import SimpleNamespace

from cardledger.domain.card_version import (
    VersionTimeline, resolve_version, versions_for_card, card_version_from_row,
)
from cardledger.domain.dates import Day, END_OF_MONTH


def test_latest_at_or_before(make_version):
    v1 = make_version(valid_from="2024-01-01")
    v2 = make_version(valid_from="2024-06-01")
    assert resolve_version([v2, v1], date(2024, 5, 31)) is v1
    assert resolve_version([v2, v1], date(2024, 6, 1)) is v2
    assert resolve_version([v2, v1], date(2030, 1, 1)) is v2


def test_falls_back_to_earliest(make_version):
    v1 = make_version(valid_from="2024-01-01")
    v2 = make_version(valid_from="2024-06-01")
    assert resolve_version([v2, v1], date(2020, 1, 1)) is v1


def test_empty_list_returns_none():
    assert resolve_version([], date(2024, 1, 1)) is None


def test_invalid_valid_from_ignored(make_version):
    bad = make_version(valid_from="2024-13-01")
    good = make_version(valid_from="2024-03-01")
    assert resolve_version([bad, good], date(2024, 12, 1)) is good
    assert len(VersionTimeline([bad])) == 0
    assert resolve_version([bad], date(2024, 12, 1)) is None


def test_same_valid_from_later_input_wins(make_version):
    a = make_version(valid_from="2024-01-01", version_id="a")
    b = make_version(valid_from="2024-01-01", version_id="b")
    assert resolve_version([a, b], date(2024, 2, 1)) is b


def test_versions_for_card(make_version):
    v1 = make_version(card_id="c1")
    v2 = make_version(card_id="c2")
    assert versions_for_card([v1, v2], "c2") == [v2]


def test_card_version_from_row():
    row = SimpleNamespace(
        id="v1", card_id="c1", valid_from="2024-01-01",
        payment_day="EOM", clamp=True, weekend_adjust="bogus",
        cycle_start=SimpleNamespace(month_offset=-1, day=1),
        cycle_end=SimpleNamespace(month_offset=-1, day="EOM"),
    )
    version = card_version_from_row(row)
    assert version.payment_day is END_OF_MONTH
    assert version.weekend_adjust == "none"
    assert version.cycle_start.day == Day(1)
    assert version.cycle_end.day is END_OF_MONTH
    assert version.created_at == ""
