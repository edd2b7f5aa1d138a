from pydantic import BaseModel, ConfigDict, computed_field
from typing import Optional, Literal


RouteType = Literal["item", "expense", "po"]

LedgerEntryType = Literal["money_in", "money_out", "po_committed"]

ROUTE_TYPES: tuple[str, ...] = ("item", "expense", "po")


class LedgerEntry(BaseModel):
    """
    A single money movement recorded against a sub-request.

    Entries are immutable once recorded. Voiding does not touch amount_eusd;
    it sets is_voided and the entry drops out of every total.
    """
    model_config = ConfigDict(frozen=True)

    type: LedgerEntryType
    amount_eusd: float
    timestamp: Optional[str] = None     # ISO 8601
    is_voided: bool = False
    reference: Optional[str] = None     # transaction id / PO number


class BalanceSummary(BaseModel):
    """Derived financial position of one sub-request. Never stored."""
    route_type: RouteType
    amount_eusd: float = 0.0            # Requested budget
    total_money_in: float = 0.0
    total_money_out: float = 0.0
    total_po_committed: float = 0.0
    total_spent: float = 0.0            # po_committed (po route) or money_out
    balance_in_hand: float = 0.0
    yet_to_receive: float = 0.0         # max(0, budget - money in)

    @computed_field
    @property
    def is_overdrawn(self) -> bool:
        return self.balance_in_hand < 0


class POBalanceCheck(BaseModel):
    """Result of checking a PO total against the balance it draws on."""
    available_balance: float
    po_total: float
    remaining_after_po: float
    exceeds_balance: bool
    is_valid: bool
