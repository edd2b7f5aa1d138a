from pydantic import BaseModel, Field
from typing import Optional, Literal


StockSeverity = Literal["out_of_stock", "critical", "warning", "normal"]

POStatus = Literal[
    "not_started",
    "partially_invoiced",
    "awaiting_delivery",
    "partially_received",
    "closed",
    "cancelled",
]

InvoiceStatus = Literal["draft", "received", "partially_received", "completed", "voided"]


class LineItemProgress(BaseModel):
    """
    Ordered / invoiced / received quantities for one purchase-order line.
    Over-invoicing is a business decision made upstream; no upper bound here.
    """
    po_id: Optional[str] = None
    line_number: Optional[int] = None
    item_name: Optional[str] = None
    ordered_qty: float = Field(default=0.0, ge=0)
    invoiced_qty: float = Field(default=0.0, ge=0)
    received_qty: float = Field(default=0.0, ge=0)


class LineProgress(BaseModel):
    invoiced_percent: int = 0
    received_percent: int = 0
    available_to_invoice: float = 0.0
    available_to_receive: float = 0.0
    # Raw quantity exceeded the ordered quantity (percent is still capped at 100)
    over_invoiced: bool = False
    over_received: bool = False


class POProgress(LineProgress):
    """Progress of a whole purchase order, aggregated over its lines."""
    line_count: int = 0
    total_qty: float = 0.0
    invoiced_qty: float = 0.0
    received_qty: float = 0.0


class StockLevel(BaseModel):
    """Current stock of one item in one warehouse."""
    item_id: str
    item_name: Optional[str] = None
    item_sku: Optional[str] = None
    warehouse_id: Optional[str] = None
    warehouse_name: Optional[str] = None
    current_stock: float = 0.0


class StockAlert(StockLevel):
    severity: StockSeverity


class StockOutCheck(BaseModel):
    valid: bool
    message: Optional[str] = None
