"""
Card domain entity - identity and classification of a payment method.

Cards are owned and persisted outside the engine; billing code only reads them.
"""
from dataclasses import dataclass
from typing import Optional

# Card types
CARD_TYPE_CREDIT = "credit"                        # Кредитная карта - единственный тип с циклом биллинга
CARD_TYPE_DEBIT = "debit"
CARD_TYPE_CASH = "cash"
CARD_TYPE_ACCOUNT = "account"
CARD_TYPE_TRANSFER_SPEND = "transfer_spend"        # перевод, считается расходом
CARD_TYPE_TRANSFER_NONSPEND = "transfer_nonspend"  # перевод между своими счетами


@dataclass(frozen=True)
class Card:
    """
    Payment card / account.

    Only active credit cards produce payment events; other types are
    carried so that callers can pass their full card list unchanged.
    """
    id: str
    name: str
    type: str  # credit, debit, cash, account, transfer_spend, transfer_nonspend
    is_active: bool = True
    track_balance: bool = False
    balance: Optional[int] = None
    purpose: str = ""

    @property
    def is_billable(self) -> bool:
        return self.type == CARD_TYPE_CREDIT and self.is_active


def card_from_row(row) -> Card:
    """Build Card from any object with matching attributes (API model, DB row)."""
    return Card(
        id=row.id,
        name=row.name,
        type=row.type,
        is_active=bool(row.is_active),
        track_balance=bool(getattr(row, "track_balance", False)),
        balance=getattr(row, "balance", None),
        purpose=getattr(row, "purpose", "") or "",
    )
