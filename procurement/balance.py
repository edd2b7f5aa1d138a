"""
Balance calculation for sub-request ledgers.

  po route:       balance = money in - PO committed
  expense route:  balance = money in - money out
  item route:     no ledger of its own; computed as the expense formula

All amounts are already in EUSD. Voided entries never count. A negative
balance is a valid result; callers decide whether to warn about it.
"""
import logging
from typing import Iterable, Optional

from models.flow import FinancialTransactionRow, PurchaseOrderRow
from models.ledger import BalanceSummary, LedgerEntry, POBalanceCheck, ROUTE_TYPES
from .currency import round_money, sum_money, to_eusd

logger = logging.getLogger(__name__)


def _check_route(route_type: str) -> None:
    if route_type not in ROUTE_TYPES:
        raise ValueError(f"Unknown route type: {route_type!r} (expected one of {', '.join(ROUTE_TYPES)})")


def _total(entries: Iterable[LedgerEntry], entry_type: str) -> float:
    return sum_money(e.amount_eusd for e in entries if e.type == entry_type and not e.is_voided)


def compute_balance(entries: Iterable[LedgerEntry], route_type: str) -> float:
    """
    Available balance of a ledger.

    Pure and order-independent; an empty ledger yields 0.0.
    """
    _check_route(route_type)
    entries = list(entries)
    money_in = _total(entries, "money_in")
    if route_type == "po":
        return round_money(money_in - _total(entries, "po_committed"))
    return round_money(money_in - _total(entries, "money_out"))


def summarize_ledger(
    entries: Iterable[LedgerEntry],
    route_type: str,
    amount_eusd: float = 0.0,
) -> BalanceSummary:
    """Full financial position: totals, balance in hand and yet-to-receive."""
    _check_route(route_type)
    entries = list(entries)
    money_in = _total(entries, "money_in")
    money_out = _total(entries, "money_out")
    committed = _total(entries, "po_committed")
    spent = committed if route_type == "po" else money_out

    return BalanceSummary(
        route_type=route_type,
        amount_eusd=round_money(amount_eusd or 0.0),
        total_money_in=money_in,
        total_money_out=money_out,
        total_po_committed=committed,
        total_spent=spent,
        balance_in_hand=compute_balance(entries, route_type),
        yet_to_receive=max(0.0, round_money((amount_eusd or 0.0) - money_in)),
    )


def check_po_against_balance(available_balance: float, po_total: float) -> POBalanceCheck:
    """Would a PO of *po_total* fit in *available_balance*? Compared at 2 dp."""
    available = round_money(available_balance)
    total = round_money(po_total)
    remaining = sum_money([available, -total])
    exceeds = remaining < 0
    return POBalanceCheck(
        available_balance=available,
        po_total=total,
        remaining_after_po=remaining,
        exceeds_balance=exceeds,
        is_valid=total > 0 and not exceeds,
    )


def ledger_from_transactions(
    transactions: Iterable[FinancialTransactionRow],
    purchase_orders: Iterable[PurchaseOrderRow] = (),
) -> list[LedgerEntry]:
    """
    Build ledger entries from snapshot rows.

    Financial transactions map one-to-one (voided ones are kept, flagged).
    Every non-cancelled PO contributes one po_committed entry.
    """
    entries: list[LedgerEntry] = []
    for tx in transactions:
        amount: Optional[float] = tx.amount_eusd
        if amount is None:
            amount = to_eusd(tx.amount, tx.exchange_rate)
        if amount is None:
            logger.warning(
                "Transaction %s has no EUSD amount and cannot be converted — skipped", tx.id
            )
            continue
        entries.append(LedgerEntry(
            type=tx.transaction_type,
            amount_eusd=amount,
            timestamp=tx.transaction_date or tx.created_at,
            is_voided=tx.is_voided,
            reference=tx.id,
        ))

    for po in purchase_orders:
        if po.is_cancelled:
            continue
        entries.append(LedgerEntry(
            type="po_committed",
            amount_eusd=po.total_amount_eusd,
            timestamp=po.po_date or po.created_at,
            reference=po.po_number or po.id,
        ))
    return entries
