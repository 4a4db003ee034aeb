"""
Transaction and Statement records consumed by the billing engine.

Both are replaced wholesale on edit; the engine never mutates them.
"""
from dataclasses import dataclass

FEE_MODE_FREE = "free"      # беспроцентная рассрочка
FEE_MODE_MANUAL = "manual"  # комиссия по fee_rate (%)


@dataclass(frozen=True)
class Tx:
    """
    Expense / income record.

    amount > 0 - expense, amount < 0 - refund or income.
    installments = 1 means a single payment.
    """
    id: str
    date: str  # YYYY-MM-DD
    card_id: str
    amount: int
    category: str = ""
    installments: int = 1
    fee_mode: str = FEE_MODE_FREE
    fee_rate: float = 0.0  # percent, only for FEE_MODE_MANUAL
    memo: str = ""


@dataclass(frozen=True)
class Statement:
    """User-entered actual billed amount for one (card_id, payment_date)."""
    id: str
    card_id: str
    payment_date: str  # YYYY-MM-DD
    actual: int
    memo: str = ""
    updated_at: str = ""


def tx_from_row(row) -> Tx:
    return Tx(
        id=row.id,
        date=row.date,
        card_id=row.card_id,
        amount=int(row.amount),
        category=getattr(row, "category", "") or "",
        installments=int(getattr(row, "installments", 1) or 1),
        fee_mode=getattr(row, "fee_mode", FEE_MODE_FREE) or FEE_MODE_FREE,
        fee_rate=float(getattr(row, "fee_rate", 0) or 0),
        memo=getattr(row, "memo", "") or "",
    )


def statement_from_row(row) -> Statement:
    return Statement(
        id=row.id,
        card_id=row.card_id,
        payment_date=row.payment_date,
        actual=int(row.actual),
        memo=getattr(row, "memo", "") or "",
        updated_at=getattr(row, "updated_at", "") or "",
    )
