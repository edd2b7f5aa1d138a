"""
Flow-tracking records.

The *Row models are the flat records a snapshot query returns; each carries
the foreign key of its parent. The *Node models form the nested tree
  request -> sub_requests -> (purchase_orders -> invoices -> stock) |
                             financial_transactions |
                             stock_out_requests + stock_transactions
and are rebuilt for every view.
"""
from pydantic import BaseModel, Field
from typing import Optional, List, Literal, Union

from .ledger import RouteType


NodeKind = Literal[
    "request",
    "sub_request",
    "purchase_order",
    "invoice",
    "stock_transaction",
    "financial_transaction",
    "stock_out_request",
]


# ---------------------------------------------------------------------------
# Flat rows
# ---------------------------------------------------------------------------

class RequestRow(BaseModel):
    """Root request letter (QMRL)."""
    id: str
    request_number: str                     # e.g. "QMRL-2026-00001"
    title: Optional[str] = None
    priority: Optional[str] = None          # low / medium / high / critical
    status: Optional[str] = None
    status_color: Optional[str] = None
    request_date: Optional[str] = None
    created_at: Optional[str] = None


class SubRequestRow(BaseModel):
    """A routed line of a request (QMHQ)."""
    id: str
    request_id: str                         # -> RequestRow.id
    request_number: Optional[str] = None    # e.g. "QMHQ-2026-00003"
    line_name: Optional[str] = None
    route_type: RouteType
    status: Optional[str] = None
    status_color: Optional[str] = None
    amount_eusd: float = 0.0                # requested budget
    created_at: Optional[str] = None


class PurchaseOrderRow(BaseModel):
    id: str
    sub_request_id: str                     # -> SubRequestRow.id
    po_number: Optional[str] = None
    status: Optional[str] = None
    po_date: Optional[str] = None
    expected_delivery_date: Optional[str] = None
    supplier_name: Optional[str] = None
    total_amount_eusd: float = 0.0
    created_at: Optional[str] = None

    @property
    def is_cancelled(self) -> bool:
        return self.status == "cancelled"


class InvoiceRow(BaseModel):
    id: str
    po_id: str                              # -> PurchaseOrderRow.id
    invoice_number: Optional[str] = None
    status: Optional[str] = None
    invoice_date: Optional[str] = None
    due_date: Optional[str] = None
    is_voided: bool = False
    created_at: Optional[str] = None


class StockTransactionRow(BaseModel):
    """
    Inventory movement. Stock-in rows hang off an invoice (po route);
    stock-out rows hang off a sub-request (item route).
    """
    id: str
    invoice_id: Optional[str] = None
    sub_request_id: Optional[str] = None
    movement_type: Optional[str] = None     # inventory_in / inventory_out
    status: Optional[str] = None
    quantity: Optional[float] = None
    transaction_date: Optional[str] = None
    created_at: Optional[str] = None


class FinancialTransactionRow(BaseModel):
    id: str
    sub_request_id: str
    transaction_type: Literal["money_in", "money_out"]
    amount: Optional[float] = None
    exchange_rate: Optional[float] = None
    amount_eusd: Optional[float] = None
    is_voided: bool = False
    transaction_date: Optional[str] = None
    created_at: Optional[str] = None


class StockOutRequestRow(BaseModel):
    id: str
    sub_request_id: str
    request_number: Optional[str] = None
    status: Optional[str] = None
    created_at: Optional[str] = None


class FlowRows(BaseModel):
    """All flat rows related to one request."""
    sub_requests: List[SubRequestRow] = Field(default_factory=list)
    purchase_orders: List[PurchaseOrderRow] = Field(default_factory=list)
    invoices: List[InvoiceRow] = Field(default_factory=list)
    stock_transactions: List[StockTransactionRow] = Field(default_factory=list)
    financial_transactions: List[FinancialTransactionRow] = Field(default_factory=list)
    stock_out_requests: List[StockOutRequestRow] = Field(default_factory=list)

    def row_count(self) -> int:
        return (
            len(self.sub_requests) + len(self.purchase_orders) + len(self.invoices)
            + len(self.stock_transactions) + len(self.financial_transactions)
            + len(self.stock_out_requests)
        )


# ---------------------------------------------------------------------------
# Tree nodes
# ---------------------------------------------------------------------------

class StockTransactionNode(BaseModel):
    kind: Literal["stock_transaction"] = "stock_transaction"
    record: StockTransactionRow

    @property
    def children(self) -> list:
        return []


class FinancialTransactionNode(BaseModel):
    kind: Literal["financial_transaction"] = "financial_transaction"
    record: FinancialTransactionRow

    @property
    def children(self) -> list:
        return []


class StockOutRequestNode(BaseModel):
    kind: Literal["stock_out_request"] = "stock_out_request"
    record: StockOutRequestRow

    @property
    def children(self) -> list:
        return []


class InvoiceNode(BaseModel):
    kind: Literal["invoice"] = "invoice"
    record: InvoiceRow
    stock_transactions: List[StockTransactionNode] = Field(default_factory=list)

    @property
    def children(self) -> list:
        return list(self.stock_transactions)


class PurchaseOrderNode(BaseModel):
    kind: Literal["purchase_order"] = "purchase_order"
    record: PurchaseOrderRow
    invoices: List[InvoiceNode] = Field(default_factory=list)

    @property
    def children(self) -> list:
        return list(self.invoices)


class SubRequestNode(BaseModel):
    """
    Only the collections admitted by record.route_type are ever populated:
      item    -> stock_out_requests, stock_transactions
      expense -> financial_transactions
      po      -> purchase_orders
    """
    kind: Literal["sub_request"] = "sub_request"
    record: SubRequestRow
    purchase_orders: List[PurchaseOrderNode] = Field(default_factory=list)
    financial_transactions: List[FinancialTransactionNode] = Field(default_factory=list)
    stock_out_requests: List[StockOutRequestNode] = Field(default_factory=list)
    stock_transactions: List[StockTransactionNode] = Field(default_factory=list)

    @property
    def children(self) -> list:
        return [
            *self.purchase_orders,
            *self.financial_transactions,
            *self.stock_out_requests,
            *self.stock_transactions,
        ]


class RequestNode(BaseModel):
    kind: Literal["request"] = "request"
    record: RequestRow
    sub_requests: List[SubRequestNode] = Field(default_factory=list)

    @property
    def children(self) -> list:
        return list(self.sub_requests)


FlowNode = Union[
    RequestNode,
    SubRequestNode,
    PurchaseOrderNode,
    InvoiceNode,
    StockTransactionNode,
    FinancialTransactionNode,
    StockOutRequestNode,
]
