"""
Computed ("auto") status of a sub-request.

Nine states: {item, expense, po} x {pending, processing, done}. Each route
checks done first, then processing, and falls back to pending:

  item:     done = every stock-out line executed, processing = any approval
  expense:  done = yet_to_receive <= 0,           processing = any money in
  po:       done = yet_to_receive <= 0 and balance_in_hand <= 0,
            processing = any non-cancelled PO
"""
from typing import Literal, Optional

from pydantic import BaseModel

from models.ledger import BalanceSummary, RouteType

AutoStatus = Literal[
    "item_pending", "item_processing", "item_done",
    "expense_pending", "expense_processing", "expense_done",
    "po_pending", "po_processing", "po_done",
]


class AutoStatusParams(BaseModel):
    """Only the fields for the given route_type are examined."""
    route_type: RouteType

    # item route
    has_any_sor_approval: bool = False
    all_sor_line_items_executed: bool = False

    # expense route
    has_any_money_in: bool = False
    yet_to_receive_eusd: Optional[float] = None

    # po route
    has_non_cancelled_po: bool = False
    balance_in_hand_eusd: Optional[float] = None


def compute_auto_status(params: AutoStatusParams) -> AutoStatus:
    route = params.route_type

    if route == "item":
        if params.all_sor_line_items_executed:
            return "item_done"
        if params.has_any_sor_approval:
            return "item_processing"
        return "item_pending"

    if route == "expense":
        if params.yet_to_receive_eusd is not None and params.yet_to_receive_eusd <= 0:
            return "expense_done"
        if params.has_any_money_in:
            return "expense_processing"
        return "expense_pending"

    if route == "po":
        if (
            params.yet_to_receive_eusd is not None
            and params.yet_to_receive_eusd <= 0
            and params.balance_in_hand_eusd is not None
            and params.balance_in_hand_eusd <= 0
        ):
            return "po_done"
        if params.has_non_cancelled_po:
            return "po_processing"
        return "po_pending"

    raise ValueError(f"Unknown route type: {route!r}")


def auto_status_from_summary(
    summary: BalanceSummary,
    has_non_cancelled_po: bool = False,
    has_any_sor_approval: bool = False,
    all_sor_line_items_executed: bool = False,
) -> AutoStatus:
    """Derive the auto status of a sub-request from its ledger summary."""
    return compute_auto_status(AutoStatusParams(
        route_type=summary.route_type,
        has_any_sor_approval=has_any_sor_approval,
        all_sor_line_items_executed=all_sor_line_items_executed,
        has_any_money_in=summary.total_money_in > 0,
        yet_to_receive_eusd=summary.yet_to_receive,
        has_non_cancelled_po=has_non_cancelled_po,
        balance_in_hand_eusd=summary.balance_in_hand,
    ))
