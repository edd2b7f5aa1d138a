"""
Purchase-order and invoice status rules.

recompute_po_status mirrors the status the database derives from PO
aggregates. Invoicing takes priority: a PO shows partially_invoiced even
when some goods have already been received.
"""
from typing import Optional

from models.progress import POStatus
from .currency import percent_of

_LOCKED_PO_STATUSES = ("closed", "cancelled")


def recompute_po_status(
    total_qty: float,
    invoiced_qty: float,
    received_qty: float,
    is_cancelled: bool = False,
) -> POStatus:
    if is_cancelled:
        return "cancelled"
    if total_qty == 0:
        return "not_started"
    # Three-way match
    if received_qty >= total_qty and invoiced_qty >= total_qty:
        return "closed"
    if 0 < invoiced_qty < total_qty:
        return "partially_invoiced"
    if invoiced_qty >= total_qty and 0 < received_qty < total_qty:
        return "partially_received"
    if invoiced_qty >= total_qty and received_qty == 0:
        return "awaiting_delivery"
    return "not_started"


def status_tooltip(status: str, total_qty: float, invoiced_qty: float, received_qty: float) -> str:
    """e.g. "6/10 invoiced (60%), 2/10 received (20%)"."""
    if status == "cancelled":
        return "This PO has been cancelled"
    if status == "closed":
        return "Fully matched: ordered = invoiced = received"
    if total_qty == 0:
        return "No line items"

    invoiced_pct = percent_of(invoiced_qty, total_qty, cap=None)
    received_pct = percent_of(received_qty, total_qty, cap=None)
    return (
        f"{invoiced_qty:g}/{total_qty:g} invoiced ({invoiced_pct}%), "
        f"{received_qty:g}/{total_qty:g} received ({received_pct}%)"
    )


def can_edit_po(status: str) -> bool:
    return status not in _LOCKED_PO_STATUSES


def can_cancel_po(status: str) -> bool:
    return status not in _LOCKED_PO_STATUSES


def can_unlock_po(status: str) -> bool:
    """Only closed POs can be unlocked (admin correction)."""
    return status == "closed"


def can_create_invoice(
    status: str,
    total_qty: Optional[float] = None,
    invoiced_qty: Optional[float] = None,
) -> bool:
    if status in ("closed", "cancelled", "awaiting_delivery"):
        return False
    if total_qty is not None and invoiced_qty is not None and total_qty > 0:
        return invoiced_qty < total_qty
    return True


# ------------------------------------------------------------------
# Invoices
# ------------------------------------------------------------------

def can_void_invoice(status: str, is_voided: bool) -> bool:
    return not is_voided and status != "voided"


def can_edit_invoice(status: str, is_voided: bool) -> bool:
    return not is_voided and status == "draft"


def available_quantity(po_quantity: float, invoiced_quantity: float) -> float:
    """Quantity of a PO line still open for invoicing."""
    return max(0.0, po_quantity - invoiced_quantity)


def compute_invoice_line_progress(quantity: float, received_qty: float) -> tuple[int, float]:
    """Return (received_percent, pending_qty) for one invoice line."""
    if quantity <= 0:
        return 0, 0.0
    percent = percent_of(received_qty, quantity)
    return percent, max(0.0, quantity - received_qty)
