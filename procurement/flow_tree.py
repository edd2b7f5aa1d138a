"""
Flow-tracking tree reconstruction.

Turns one request plus the flat rows related to it into the nested chain

  request
    └─ sub_request (route_type)
         item:    stock_out_requests, stock_transactions (stock-out)
         expense: financial_transactions
         po:      purchase_orders
                    └─ invoices
                         └─ stock_transactions (stock-in)

Each flat list is grouped by its parent foreign key and the groups are
attached to the matching parent nodes. Children keep their input order.

A row whose parent is not in the tree (or whose parent's route does not
admit it) is dropped and logged at DEBUG. With strict=True a
DanglingReferenceError / RouteMismatchError is raised instead.
"""
import logging
from typing import Any, Callable, Iterable, Iterator, Optional, TypeVar

from models.flow import (
    FinancialTransactionNode,
    FinancialTransactionRow,
    FlowRows,
    InvoiceNode,
    InvoiceRow,
    PurchaseOrderNode,
    PurchaseOrderRow,
    RequestNode,
    RequestRow,
    StockOutRequestNode,
    StockOutRequestRow,
    StockTransactionNode,
    StockTransactionRow,
    SubRequestNode,
    SubRequestRow,
)
from .errors import DanglingReferenceError, RouteMismatchError

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Which child kinds each route admits under a sub-request
ROUTE_CHILDREN: dict[str, frozenset[str]] = {
    "item":    frozenset({"stock_out_request", "stock_transaction"}),
    "expense": frozenset({"financial_transaction"}),
    "po":      frozenset({"purchase_order"}),
}


def normalize_request_number(text: str) -> str:
    """' qmrl-2026-00001 ' -> 'QMRL-2026-00001'."""
    return (text or "").strip().upper()


# ------------------------------------------------------------------
# Grouping helpers
# ------------------------------------------------------------------

def _dedupe(rows: Iterable[T], kind: str) -> list[T]:
    """Keep the first row for each id."""
    seen: set[str] = set()
    unique = []
    for row in rows:
        if row.id in seen:
            logger.debug("Duplicate %s row %s ignored", kind, row.id)
            continue
        seen.add(row.id)
        unique.append(row)
    return unique


def _group_by(rows: Iterable[T], key: Callable[[T], Optional[str]]) -> dict[Optional[str], list[T]]:
    """Group rows by parent key; groups and their members keep input order."""
    groups: dict[Optional[str], list[T]] = {}
    for row in rows:
        groups.setdefault(key(row), []).append(row)
    return groups


class _Attacher:
    """Applies the drop-or-raise policy for rows that cannot be attached."""

    def __init__(self, strict: bool):
        self.strict = strict
        self.dropped = 0

    def dangling(self, kind: str, row_id: str, parent_id: Optional[str]) -> None:
        message = f"{kind} {row_id} references missing parent {parent_id!r}"
        if self.strict:
            raise DanglingReferenceError(kind, row_id, parent_id, message)
        logger.debug("Dropping %s", message)
        self.dropped += 1

    def admits(self, sub: SubRequestNode, kind: str, row_id: str) -> bool:
        route = sub.record.route_type
        if kind in ROUTE_CHILDREN[route]:
            return True
        message = f"{kind} {row_id} cannot hang off {route}-route sub-request {sub.record.id}"
        if self.strict:
            raise RouteMismatchError(kind, row_id, sub.record.id, message)
        logger.debug("Dropping %s", message)
        self.dropped += 1
        return False


# ------------------------------------------------------------------
# Public API
# ------------------------------------------------------------------

def build_flow_tree(root: RequestRow, rows: Optional[FlowRows] = None, strict: bool = False) -> RequestNode:
    """
    Build the flow tree for *root* from flat *rows*.

    Every row with a consistent foreign key appears exactly once in the
    result. Rows pointing at a missing parent are dropped, or raise when
    *strict* is set.
    """
    rows = rows or FlowRows()
    attach = _Attacher(strict)
    tree = RequestNode(record=root)

    # Request -> sub-requests
    subs: dict[str, SubRequestNode] = {}
    for parent_id, group in _group_by(_dedupe(rows.sub_requests, "sub_request"), lambda r: r.request_id).items():
        for row in group:
            if parent_id != root.id:
                attach.dangling("sub_request", row.id, parent_id)
                continue
            node = SubRequestNode(record=row)
            subs[row.id] = node
            tree.sub_requests.append(node)

    # Sub-request -> purchase orders
    pos: dict[str, PurchaseOrderNode] = {}
    for parent_id, group in _group_by(_dedupe(rows.purchase_orders, "purchase_order"), lambda r: r.sub_request_id).items():
        sub = subs.get(parent_id)
        for row in group:
            if sub is None:
                attach.dangling("purchase_order", row.id, parent_id)
            elif attach.admits(sub, "purchase_order", row.id):
                node = PurchaseOrderNode(record=row)
                pos[row.id] = node
                sub.purchase_orders.append(node)

    # Purchase order -> invoices
    invoices: dict[str, InvoiceNode] = {}
    for parent_id, group in _group_by(_dedupe(rows.invoices, "invoice"), lambda r: r.po_id).items():
        po = pos.get(parent_id)
        for row in group:
            if po is None:
                attach.dangling("invoice", row.id, parent_id)
                continue
            node = InvoiceNode(record=row)
            invoices[row.id] = node
            po.invoices.append(node)

    # Stock transactions: invoice (stock-in) first, else sub-request (stock-out)
    for row in _dedupe(rows.stock_transactions, "stock_transaction"):
        if row.invoice_id:
            invoice = invoices.get(row.invoice_id)
            if invoice is None:
                attach.dangling("stock_transaction", row.id, row.invoice_id)
            else:
                invoice.stock_transactions.append(StockTransactionNode(record=row))
            continue
        sub = subs.get(row.sub_request_id) if row.sub_request_id else None
        if sub is None:
            attach.dangling("stock_transaction", row.id, row.sub_request_id)
        elif attach.admits(sub, "stock_transaction", row.id):
            sub.stock_transactions.append(StockTransactionNode(record=row))

    # Sub-request -> financial transactions
    for parent_id, group in _group_by(
        _dedupe(rows.financial_transactions, "financial_transaction"), lambda r: r.sub_request_id
    ).items():
        sub = subs.get(parent_id)
        for row in group:
            if sub is None:
                attach.dangling("financial_transaction", row.id, parent_id)
            elif attach.admits(sub, "financial_transaction", row.id):
                sub.financial_transactions.append(FinancialTransactionNode(record=row))

    # Sub-request -> stock-out requests
    for parent_id, group in _group_by(
        _dedupe(rows.stock_out_requests, "stock_out_request"), lambda r: r.sub_request_id
    ).items():
        sub = subs.get(parent_id)
        for row in group:
            if sub is None:
                attach.dangling("stock_out_request", row.id, parent_id)
            elif attach.admits(sub, "stock_out_request", row.id):
                sub.stock_out_requests.append(StockOutRequestNode(record=row))

    if attach.dropped:
        logger.info(
            "Flow tree for %s: %d row(s) dropped (missing parent or route mismatch)",
            root.request_number, attach.dropped,
        )
    return tree


def iter_nodes(node) -> Iterator:
    """Depth-first, parent before children."""
    yield node
    for child in node.children:
        yield from iter_nodes(child)


def count_nodes(node) -> int:
    return sum(1 for _ in iter_nodes(node))


def flatten_tree(node) -> list[tuple[str, str, str, str]]:
    """All (parent_kind, parent_id, child_kind, child_id) edges of the tree."""
    edges = []
    for parent in iter_nodes(node):
        for child in parent.children:
            edges.append((parent.kind, parent.record.id, child.kind, child.record.id))
    return edges


# ------------------------------------------------------------------
# Denormalised view rows
# ------------------------------------------------------------------

def _prefixed(row: dict, prefix: str) -> dict[str, Any]:
    return {k[len(prefix):]: v for k, v in row.items() if k.startswith(prefix)}


def rows_from_view(view_rows: list[dict]) -> tuple[RequestRow, FlowRows]:
    """
    Split LEFT-JOIN flow-chain view rows into a root request and flat rows.

    Every view row repeats the request columns (qmrl_*) and carries at most
    one sub-request (qmhq_*), PO (po_*), invoice (invoice_*), stock
    transaction (stock_*), financial transaction (ft_*) and stock-out
    request (sor_*). NULL ids mean "no entity on this row".
    """
    if not view_rows:
        raise ValueError("No flow rows to transform")

    first = _prefixed(view_rows[0], "qmrl_")
    root = RequestRow(
        id=first["id"],
        request_number=first.get("request_id") or first["id"],
        title=first.get("title"),
        priority=first.get("priority"),
        status=first.get("status_name") or "Unknown",
        status_color=first.get("status_color") or "#9CA3AF",
        request_date=first.get("request_date"),
        created_at=first.get("created_at"),
    )

    flat = FlowRows()
    seen: dict[str, set[str]] = {}

    def _first_time(kind: str, row_id: str) -> bool:
        ids = seen.setdefault(kind, set())
        if row_id in ids:
            return False
        ids.add(row_id)
        return True

    for row in view_rows:
        qmhq_id = row.get("qmhq_id")
        if not qmhq_id:
            continue
        if _first_time("qmhq", qmhq_id):
            q = _prefixed(row, "qmhq_")
            flat.sub_requests.append(SubRequestRow(
                id=qmhq_id,
                request_id=root.id,
                request_number=q.get("request_id"),
                line_name=q.get("line_name"),
                route_type=q.get("route_type"),
                status=q.get("status_name") or "Unknown",
                status_color=q.get("status_color") or "#9CA3AF",
                amount_eusd=q.get("amount_eusd") or 0.0,
                created_at=q.get("created_at"),
            ))

        po_id = row.get("po_id")
        if po_id and _first_time("po", po_id):
            p = _prefixed(row, "po_")
            flat.purchase_orders.append(PurchaseOrderRow(
                id=po_id,
                sub_request_id=qmhq_id,
                po_number=p.get("po_number"),
                status=p.get("status"),
                po_date=p.get("po_date"),
                expected_delivery_date=p.get("expected_delivery_date"),
                supplier_name=p.get("supplier_name"),
                total_amount_eusd=p.get("total_amount_eusd") or 0.0,
                created_at=p.get("created_at"),
            ))

        invoice_id = row.get("invoice_id") or None
        # Invoices only exist under a PO; stock rows keep invoice_id regardless
        if po_id and invoice_id and _first_time("invoice", invoice_id):
            i = _prefixed(row, "invoice_")
            flat.invoices.append(InvoiceRow(
                id=invoice_id,
                po_id=po_id,
                invoice_number=i.get("invoice_number"),
                status=i.get("status"),
                invoice_date=i.get("invoice_date"),
                due_date=i.get("due_date"),
                is_voided=bool(i.get("is_voided")),
                created_at=i.get("created_at"),
            ))

        stock_id = row.get("stock_id")
        if stock_id and _first_time("stock", stock_id):
            s = _prefixed(row, "stock_")
            flat.stock_transactions.append(StockTransactionRow(
                id=stock_id,
                invoice_id=invoice_id,
                sub_request_id=None if invoice_id else qmhq_id,
                movement_type=s.get("movement_type"),
                status=s.get("status"),
                quantity=s.get("quantity"),
                transaction_date=s.get("transaction_date"),
                created_at=s.get("created_at"),
            ))

        ft_id = row.get("ft_id")
        if ft_id and _first_time("ft", ft_id):
            f = _prefixed(row, "ft_")
            flat.financial_transactions.append(FinancialTransactionRow(
                id=ft_id,
                sub_request_id=qmhq_id,
                transaction_type=f.get("transaction_type"),
                amount_eusd=f.get("amount_eusd"),
                is_voided=bool(f.get("is_voided")),
                transaction_date=f.get("transaction_date"),
                created_at=f.get("created_at"),
            ))

        sor_id = row.get("sor_id")
        if sor_id and _first_time("sor", sor_id):
            r = _prefixed(row, "sor_")
            flat.stock_out_requests.append(StockOutRequestRow(
                id=sor_id,
                sub_request_id=qmhq_id,
                request_number=r.get("request_number"),
                status=r.get("status"),
                created_at=r.get("created_at"),
            ))

    return root, flat
