"""
Billing API endpoints

Stateless: every request carries the full snapshot (cards, versions,
transactions, statements); nothing is stored between calls.
"""
import logging
from dataclasses import asdict
from datetime import date, datetime
from typing import Literal, Optional, Union
from zoneinfo import ZoneInfo

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field, field_validator

from cardledger.application.forecast import forecast_by_card
from cardledger.application.payment_events import payment_events, suggested_adjustment_date_for_payment
from cardledger.config import Settings, get_settings
from cardledger.domain.allocation import build_allocations
from cardledger.domain.card import card_from_row
from cardledger.domain.card_version import card_version_from_row
from cardledger.domain.dates import parse_date
from cardledger.domain.transaction import statement_from_row, tx_from_row

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/billing", tags=["billing"])

WireDay = Union[int, Literal["EOM"]]


# === Request/Response models ===

class CardIn(BaseModel):
    id: str
    name: str
    type: Literal["credit", "debit", "cash", "account", "transfer_spend", "transfer_nonspend"]
    is_active: bool = True
    track_balance: bool = False
    balance: Optional[int] = None
    purpose: str = ""


class CycleRuleIn(BaseModel):
    month_offset: int
    day: WireDay

    @field_validator("day")
    @classmethod
    def validate_day(cls, v):
        if isinstance(v, int) and not 1 <= v <= 31:
            raise ValueError("day must be 1..31 or 'EOM'")
        return v


class CardVersionIn(BaseModel):
    id: str
    card_id: str
    valid_from: str  # YYYY-MM-DD, невалидная дата -> версия игнорируется
    payment_day: WireDay
    clamp: bool = True
    weekend_adjust: Literal["none", "next_business", "prev_business"] = "none"
    cycle_start: CycleRuleIn
    cycle_end: CycleRuleIn
    created_at: str = ""

    @field_validator("payment_day")
    @classmethod
    def validate_payment_day(cls, v):
        if isinstance(v, int) and not 1 <= v <= 31:
            raise ValueError("payment_day must be 1..31 or 'EOM'")
        return v


class TxIn(BaseModel):
    id: str
    date: str  # YYYY-MM-DD
    card_id: str
    category: str = ""
    amount: int
    installments: int = Field(default=1, ge=1)
    fee_mode: Literal["free", "manual"] = "free"
    fee_rate: float = 0.0
    memo: str = ""


class StatementIn(BaseModel):
    id: str
    card_id: str
    payment_date: str
    actual: int
    memo: str = ""
    updated_at: str = ""


class SnapshotRequest(BaseModel):
    cards: list[CardIn] = []
    versions: list[CardVersionIn] = []
    transactions: list[TxIn] = []
    statements: list[StatementIn] = []
    today: Optional[str] = None  # YYYY-MM-DD, по умолчанию - сегодня в TIMEZONE

    @field_validator("today")
    @classmethod
    def validate_today(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and parse_date(v) is None:
            raise ValueError("today must be YYYY-MM-DD")
        return v


class PaymentEventsRequest(SnapshotRequest):
    past_months: Optional[int] = Field(default=None, ge=0, le=120)
    future_months: Optional[int] = Field(default=None, ge=0, le=120)


class ForecastRequest(SnapshotRequest):
    horizon: Optional[int] = Field(default=None, ge=1, le=48)


class AdjustmentDateRequest(BaseModel):
    versions: list[CardVersionIn] = []
    card_id: str
    payment_date: str


class InstallmentStatsResponse(BaseModel):
    total_principal: int
    paid_to_date: int
    remaining_after: int
    this_payment: int
    remaining_before: int


class PaymentEventResponse(BaseModel):
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
    installment: InstallmentStatsResponse


class ForecastRowResponse(BaseModel):
    card_id: str
    card_name: str
    payment_date: str
    cycle_start: str
    cycle_end: str
    expected: int
    expected_principal: int
    expected_fee: int


class AllocationResponse(BaseModel):
    card_id: str
    payment_date: str
    principal_part: int
    fee_part: int
    tx_id: str


class AdjustmentDateResponse(BaseModel):
    adjustment_date: Optional[str]


# === Helper functions ===

def _resolve_today(raw: Optional[str], settings: Settings) -> date:
    """Explicit `today` from the request, otherwise the current date in TIMEZONE."""
    if raw is not None:
        return parse_date(raw)
    return datetime.now(tz=ZoneInfo(settings.TIMEZONE)).date()


def _snapshot(req: SnapshotRequest):
    cards = [card_from_row(c) for c in req.cards]
    versions = [card_version_from_row(v) for v in req.versions]
    txs = [tx_from_row(t) for t in req.transactions]
    statements = [statement_from_row(s) for s in req.statements]
    return cards, versions, txs, statements


# === Endpoints ===

@router.post("/payment-events", response_model=list[PaymentEventResponse])
def list_payment_events(req: PaymentEventsRequest, settings: Settings = Depends(get_settings)):
    """Expected vs actual per (card, payment date) around the current month"""
    cards, versions, txs, statements = _snapshot(req)
    past = req.past_months if req.past_months is not None else settings.PAST_MONTHS
    future = req.future_months if req.future_months is not None else settings.FUTURE_MONTHS
    today = _resolve_today(req.today, settings)

    events = payment_events(cards, versions, txs, statements, past, future, today)
    logger.info("Payment events: %d row(s) for %d card(s), today=%s", len(events), len(cards), today)
    return [asdict(e) for e in events]


@router.post("/forecast", response_model=list[ForecastRowResponse])
def list_forecast(req: ForecastRequest, settings: Settings = Depends(get_settings)):
    """Upcoming payments per active credit card"""
    cards, versions, txs, _ = _snapshot(req)
    horizon = req.horizon if req.horizon is not None else settings.FORECAST_HORIZON
    today = _resolve_today(req.today, settings)

    rows = forecast_by_card(cards, versions, txs, horizon, today)
    logger.info("Forecast: %d row(s), horizon=%d, today=%s", len(rows), horizon, today)
    return [asdict(r) for r in rows]


@router.post("/allocations", response_model=list[AllocationResponse])
def list_allocations(req: SnapshotRequest):
    """Principal / fee split of every billable transaction"""
    cards, versions, txs, _ = _snapshot(req)
    return [asdict(a) for a in build_allocations(cards, versions, txs)]


@router.post("/adjustment-date", response_model=AdjustmentDateResponse)
def get_adjustment_date(req: AdjustmentDateRequest):
    """Recommended posting date for a manual adjustment of a payment"""
    versions = [card_version_from_row(v) for v in req.versions]
    return AdjustmentDateResponse(
        adjustment_date=suggested_adjustment_date_for_payment(versions, req.card_id, req.payment_date),
    )
